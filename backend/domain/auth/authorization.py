"""
Authorization - role-permission matrix.

Pure lookups; the API resolves the acting user's role and services check
the permission a guarded operation needs.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Union


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    SALES = "sales"
    PRODUCTION = "production"
    VIEWER = "viewer"


class Permission(str, Enum):
    LIBRARY_APPROVE = "library.approve"
    PROJECT_CREATE = "project.create"
    PROJECT_EDIT = "project.edit"
    PROJECT_CONFIRM_ORDER = "project.confirm_order"
    PROJECT_MARK_DELIVERED = "project.mark_delivered"
    PROJECT_ARCHIVE = "project.archive"
    AMENDMENT_APPROVE = "amendment.approve"
    EMERGENCY_UNLOCK = "emergency.unlock"
    TASK_MANAGE = "task.manage"
    TIME_ENTRY = "time.entry"
    QUOTE_CREATE = "quote.create"
    QUOTE_SEND = "quote.send"
    CLIENT_MANAGE = "client.manage"


_MANAGER_PERMISSIONS = frozenset(Permission) - {Permission.EMERGENCY_UNLOCK}

ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.ADMIN: frozenset(Permission),
    Role.MANAGER: _MANAGER_PERMISSIONS,
    Role.SALES: frozenset({
        Permission.PROJECT_CREATE,
        Permission.PROJECT_EDIT,
        Permission.PROJECT_CONFIRM_ORDER,
        Permission.QUOTE_CREATE,
        Permission.QUOTE_SEND,
        Permission.CLIENT_MANAGE,
    }),
    Role.PRODUCTION: frozenset({
        Permission.TASK_MANAGE,
        Permission.TIME_ENTRY,
    }),
    Role.VIEWER: frozenset(),
}

ROLE_INFO: Dict[Role, Dict[str, str]] = {
    Role.ADMIN: {
        "label": "Administrator",
        "description": "Full system access including emergency operations",
    },
    Role.MANAGER: {
        "label": "Manager",
        "description": "Manage projects, approvals, and team operations",
    },
    Role.SALES: {
        "label": "Sales",
        "description": "Create projects, quotes, and manage clients",
    },
    Role.PRODUCTION: {
        "label": "Production",
        "description": "Manage tasks and log time entries",
    },
    Role.VIEWER: {
        "label": "Viewer",
        "description": "View-only access to projects",
    },
}


def _as_role(role: Union[Role, str, None]) -> Role:
    try:
        return Role(role)
    except ValueError:
        return Role.VIEWER


def has_permission(role: Union[Role, str, None], permission: Union[Permission, str]) -> bool:
    try:
        permission = Permission(permission)
    except ValueError:
        return False
    return permission in ROLE_PERMISSIONS[_as_role(role)]


def get_permissions(role: Union[Role, str, None]) -> List[Permission]:
    granted = ROLE_PERMISSIONS[_as_role(role)]
    return [permission for permission in Permission if permission in granted]


def get_role_info(role: Union[Role, str, None]) -> Dict[str, str]:
    return ROLE_INFO[_as_role(role)]


def get_all_roles() -> List[Role]:
    return list(Role)
