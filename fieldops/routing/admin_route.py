"""Custom API route for the admin subtree."""
from __future__ import annotations

from contextlib import aclosing
from typing import Callable

from fastapi import Request, Response
from fastapi.routing import APIRoute

from fieldops.core.exceptions import ForbiddenError, UnauthorizedError
from fieldops.core.security import ADMIN_ROLES
from fieldops.database import get_db
from fieldops.dependencies import oauth2_scheme
from fieldops.services.auth_service import AuthService
from fieldops.utils.permissions import has_any_role


async def ensure_admin(request: Request) -> None:
    """Reject the request unless its bearer token belongs to an admin.

    Runs against the raw request, so a non-admin gets 401/403 even when the
    body is not valid JSON.
    """
    token = await oauth2_scheme(request)
    if not token:
        raise UnauthorizedError()

    provider = request.app.dependency_overrides.get(get_db, get_db)
    async with aclosing(provider()) as sessions:
        db = await anext(sessions)
        user, _ = await AuthService.resolve_token(db, token)

    if not has_any_role(user, ADMIN_ROLES):
        raise ForbiddenError(f"Role required: {' or '.join(ADMIN_ROLES)}")


class AdminAPIRoute(APIRoute):
    """Route that checks the admin role before the body is parsed."""

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def custom_route_handler(request: Request) -> Response:
            await ensure_admin(request)
            return await original_route_handler(request)

        return custom_route_handler
