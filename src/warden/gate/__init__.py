"""Access gate: FastAPI dependencies, decorators, and template predicates."""

from warden.gate.core import AccessGate, GateMode
from warden.gate.decorators import (
    requires_permission,
    requires_role,
    requires_role_or_permission,
)
from warden.gate.dependencies import (
    CurrentSubject,
    DBSession,
    get_current_subject,
    require_all_permissions,
    require_any_permission,
    require_any_role,
    require_permission,
    require_role,
    require_role_or_permission,
)


__all__ = [
    "AccessGate",
    "CurrentSubject",
    "DBSession",
    "GateMode",
    "get_current_subject",
    "require_all_permissions",
    "require_any_permission",
    "require_any_role",
    "require_permission",
    "require_role",
    "require_role_or_permission",
    "requires_permission",
    "requires_role",
    "requires_role_or_permission",
]
