"""Security constants: role names and the permission catalogue."""
from enum import Enum


class RoleName(str, Enum):
    """Built-in roles."""

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    EMPLOYEE = "employee"


class Permission(str, Enum):
    """Permission names for RBAC."""

    # User management
    USER_VIEW = "view users"
    USER_CREATE = "create users"
    USER_EDIT = "edit users"
    USER_DELETE = "delete users"

    # Role management
    ROLE_VIEW = "view roles"
    ROLE_CREATE = "create roles"
    ROLE_EDIT = "edit roles"
    ROLE_DELETE = "delete roles"

    # Permission management
    PERMISSION_VIEW = "view permissions"
    PERMISSION_CREATE = "create permissions"
    PERMISSION_EDIT = "edit permissions"
    PERMISSION_DELETE = "delete permissions"

    # Location tracking
    LOCATION_VIEW = "view locations"
    LOCATION_CREATE = "create locations"
    LOCATION_EDIT = "edit locations"
    LOCATION_DELETE = "delete locations"
    LOCATION_VIEW_OWN = "view own locations"
    LOCATION_CREATE_OWN = "create own locations"

    # Reports
    REPORT_VIEW = "view reports"
    REPORT_CREATE = "create reports"
    REPORT_EXPORT = "export reports"

    # Dashboard
    DASHBOARD_VIEW = "view dashboard"
    ANALYTICS_VIEW = "view analytics"

    # Settings
    SETTINGS_MANAGE = "manage settings"
    SETTINGS_VIEW = "view settings"


# Roles allowed into the admin API subtree
ADMIN_ROLES = (RoleName.SUPERADMIN.value, RoleName.ADMIN.value)

# Role definitions with permissions
ROLE_PERMISSIONS = {
    RoleName.SUPERADMIN.value: list(Permission),
    RoleName.ADMIN.value: [
        Permission.USER_VIEW,
        Permission.USER_CREATE,
        Permission.USER_EDIT,
        Permission.LOCATION_VIEW,
        Permission.LOCATION_CREATE,
        Permission.REPORT_VIEW,
        Permission.REPORT_EXPORT,
        Permission.DASHBOARD_VIEW,
        Permission.ANALYTICS_VIEW,
        Permission.SETTINGS_VIEW,
    ],
    RoleName.EMPLOYEE.value: [
        Permission.LOCATION_VIEW_OWN,
        Permission.LOCATION_CREATE_OWN,
        Permission.REPORT_CREATE,
        Permission.DASHBOARD_VIEW,
    ],
}

ROLE_DESCRIPTIONS = {
    RoleName.SUPERADMIN.value: "Full system access",
    RoleName.ADMIN.value: "User and location management",
    RoleName.EMPLOYEE.value: "Field employee, tracks own location and files reports",
}
