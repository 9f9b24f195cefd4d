"""Custom exceptions."""
from typing import Any, Optional

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """Resource not found exception."""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail or "Resource not found",
        )


class UnauthorizedError(HTTPException):
    """Unauthorized exception."""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail or "Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(HTTPException):
    """Forbidden exception."""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail or "Permission denied",
        )


class ValidationError(HTTPException):
    """Validation exception.

    ``detail`` may be a plain message or a structured payload (for example a
    list of unknown ids) which FastAPI serializes as-is.
    """

    def __init__(self, detail: Optional[Any] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail or "Validation error",
        )


class ConflictError(HTTPException):
    """Conflict exception."""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail or "Resource conflict",
        )
