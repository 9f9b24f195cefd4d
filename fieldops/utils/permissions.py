"""Role and permission checks against a loaded user."""
from typing import Iterable, Set, Union

from fieldops.core.security import Permission
from fieldops.models.user import User


def _name(value: Union[str, Permission]) -> str:
    return value.value if isinstance(value, Permission) else value


def get_role_names(user: User) -> Set[str]:
    """Names of the user's roles."""
    return {role.name for role in (user.roles or [])}


def get_user_permissions(user: User) -> Set[str]:
    """Effective permissions: role permissions plus direct grants."""
    names = {perm.name for perm in (user.permissions or [])}
    for role in user.roles or []:
        names.update(perm.name for perm in role.permissions)
    return names


def has_permission(user: User, permission: Union[str, Permission]) -> bool:
    """Check if user holds a permission, matched by exact name."""
    return _name(permission) in get_user_permissions(user)


def has_any_role(user: User, role_names: Iterable[str]) -> bool:
    """Check if user has at least one of the given roles."""
    return bool(get_role_names(user).intersection(role_names))
