"""Roles, permissions, and the checks built on them."""

from warden.rbac.checker import AccessChecker
from warden.rbac.models import Permission, Role, RoleAssignment, role_permission
from warden.rbac.services import (
    PermissionService,
    RoleAssignmentService,
    RoleService,
)
from warden.rbac.subjects import (
    AuthorizationSubject,
    StaticSubject,
    StoredSubject,
    normalize_user_id,
)


__all__ = [
    "AccessChecker",
    "AuthorizationSubject",
    "Permission",
    "PermissionService",
    "Role",
    "RoleAssignment",
    "RoleAssignmentService",
    "RoleService",
    "StaticSubject",
    "StoredSubject",
    "normalize_user_id",
    "role_permission",
]
