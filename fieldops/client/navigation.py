"""Page catalogue and role checks for the admin console."""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from fieldops.client.session import AuthSession
from fieldops.core.security import ADMIN_ROLES, RoleName

# Employee accounts use the mobile client only
WEB_ALLOWED_ROLES: Tuple[str, ...] = ADMIN_ROLES


@dataclass(frozen=True)
class Page:
    key: str
    label: str
    path: str
    allowed_roles: Tuple[str, ...]


PAGES: Tuple[Page, ...] = (
    Page("dashboard", "Dashboard", "/dashboard", ADMIN_ROLES),
    Page("monitoring", "Monitoring", "/monitoring", ADMIN_ROLES),
    Page("task", "Task", "/task", ADMIN_ROLES),
    Page("taken", "Taken", "/taken", ADMIN_ROLES),
    Page("user_management", "Users", "/users", ADMIN_ROLES),
)

_PAGES_BY_KEY = {page.key: page for page in PAGES}


def can_access_web(session: AuthSession) -> bool:
    return session.is_authenticated and session.has_any_role(WEB_ALLOWED_ROLES)


def can_access_page(session: AuthSession, page_key: str) -> bool:
    """Unknown pages are never accessible."""
    page = _PAGES_BY_KEY.get(page_key)
    if page is None or not session.is_authenticated:
        return False
    return session.has_any_role(page.allowed_roles)


def visible_pages(session: AuthSession) -> List[Page]:
    """Sidebar entries for the session, in catalogue order."""
    return [page for page in PAGES if can_access_page(session, page.key)]


def _primary_role(user: Optional[Dict[str, Any]]) -> Optional[str]:
    roles = (user or {}).get("roles") or []
    if not roles:
        return None
    first = roles[0]
    return (first if isinstance(first, str) else first.get("name", "")).lower()


def can_edit_user(session: AuthSession, target: Dict[str, Any]) -> bool:
    """Superadmins edit anyone but themselves; admins edit employees."""
    current = session.user
    if not session.is_authenticated or not current or not target:
        return False
    role = _primary_role(current)
    target_role = _primary_role(target)
    if role == RoleName.SUPERADMIN.value:
        return current.get("id") != target.get("id")
    if role == RoleName.ADMIN.value:
        return target_role == RoleName.EMPLOYEE.value
    return False


def can_delete_user(session: AuthSession, target: Dict[str, Any]) -> bool:
    current = session.user
    if not session.is_authenticated or not current or not target:
        return False
    return _primary_role(current) == RoleName.SUPERADMIN.value and current.get("id") != target.get("id")


def allowed_roles_to_create(session: AuthSession) -> List[str]:
    role = _primary_role(session.user)
    if role == RoleName.SUPERADMIN.value:
        return [RoleName.ADMIN.value, RoleName.EMPLOYEE.value]
    if role == RoleName.ADMIN.value:
        return [RoleName.EMPLOYEE.value]
    return []
