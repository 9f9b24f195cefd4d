"""Python client for the FieldOps API."""
from fieldops.client.api import FieldOpsClient, FieldOpsAPIError, SessionExpiredError
from fieldops.client.navigation import PAGES, can_access_page, can_access_web, visible_pages
from fieldops.client.session import AuthSession

__all__ = [
    "AuthSession",
    "FieldOpsClient",
    "FieldOpsAPIError",
    "SessionExpiredError",
    "PAGES",
    "can_access_page",
    "can_access_web",
    "visible_pages",
]
