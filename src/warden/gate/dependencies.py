"""FastAPI dependencies for gating routes on roles and permissions.

Usage:
    @router.delete(
        "/posts/{post_id}",
        dependencies=[Depends(require_permission("delete-posts"))],
    )
    async def delete_post(post_id: int): ...

A denial raises ``ForbiddenError``. Call
``register_exception_handlers(app)`` once at startup so it is answered
with a 403 problem response; without the handlers it reaches FastAPI
as an unhandled exception and becomes a 500.

The principal is read from ``request.state.subject``, which the host
application's authentication middleware sets. Applications that resolve
the principal differently override ``get_current_subject`` through
``app.dependency_overrides``.
"""

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.database import get_db
from warden.gate.core import AccessGate, GateMode
from warden.rbac.checker import AccessChecker
from warden.rbac.subjects import AuthorizationSubject


GateDependency = Callable[..., Awaitable[None]]


async def get_current_subject(request: Request) -> AuthorizationSubject | None:
    """Get the principal attached to the request, or None."""
    return getattr(request.state, "subject", None)


# Type aliases for cleaner dependency injection
DBSession = Annotated[AsyncSession, Depends(get_db)]
CurrentSubject = Annotated[AuthorizationSubject | None, Depends(get_current_subject)]


def _require(tokens: list[str], mode: GateMode) -> GateDependency:
    async def dependency(subject: CurrentSubject, db: DBSession) -> None:
        await AccessGate(AccessChecker(db)).authorize(subject, tokens, mode)

    return dependency


def require_role(role_slug: str) -> GateDependency:
    """Require the principal to hold a role."""
    return _require([role_slug], GateMode.ROLE)


def require_any_role(*role_slugs: str) -> GateDependency:
    """Require the principal to hold at least one of the roles."""
    return _require(list(role_slugs), GateMode.ANY_ROLE)


def require_permission(permission_slug: str) -> GateDependency:
    """Require the principal to have a permission."""
    return _require([permission_slug], GateMode.PERMISSION)


def require_any_permission(*permission_slugs: str) -> GateDependency:
    """Require the principal to have at least one of the permissions."""
    return _require(list(permission_slugs), GateMode.ANY_PERMISSION)


def require_all_permissions(*permission_slugs: str) -> GateDependency:
    """Require the principal to have every one of the permissions.

    Called without slugs, this only requires an authenticated principal.
    """
    return _require(list(permission_slugs), GateMode.ALL_PERMISSIONS)


def require_role_or_permission(role_or_permission: str) -> GateDependency:
    """Require the token to match either a held role or a granted permission."""
    return _require([role_or_permission], GateMode.ROLE_OR_PERMISSION)
