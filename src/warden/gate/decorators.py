"""Gate decorators for route protection.

This module provides decorators that can be applied to async route
handlers to require a role or permission. The wrapped handler must
receive the principal as ``subject`` and a database session as ``db``
keyword arguments.
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar, cast

from warden.gate.core import AccessGate, GateMode
from warden.rbac.checker import AccessChecker


if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from warden.rbac.subjects import AuthorizationSubject


P = ParamSpec("P")
R = TypeVar("R")


def _get_subject_and_db(
    kwargs: dict[str, Any],
) -> tuple["AuthorizationSubject | None", "AsyncSession | None"]:
    """Extract subject and db session from kwargs."""
    subject = cast("AuthorizationSubject | None", kwargs.get("subject"))
    db = cast("AsyncSession | None", kwargs.get("db"))
    return subject, db


def _gated(
    tokens: list[str], mode: GateMode
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            subject, db = _get_subject_and_db(kwargs)

            if db is None:
                raise TypeError(
                    f"{func.__name__} must receive a 'db' keyword argument to be gated"
                )

            await AccessGate(AccessChecker(db)).authorize(subject, tokens, mode)
            return await func(*args, **kwargs)

        return wrapper

    return decorator


def requires_role(
    role_slug: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires the principal to hold a role.

    Usage:
        @router.get("/admin")
        @requires_role("admin")
        async def admin_home(subject: CurrentSubject, db: DBSession):
            ...

    Raises:
        ForbiddenError: If the principal is missing or lacks the role
    """
    return _gated([role_slug], GateMode.ROLE)


def requires_permission(
    permission_slug: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires the principal to have a permission.

    Usage:
        @router.post("/posts")
        @requires_permission("create-posts")
        async def create_post(subject: CurrentSubject, db: DBSession):
            ...

    Raises:
        ForbiddenError: If the principal is missing or lacks the permission
    """
    return _gated([permission_slug], GateMode.PERMISSION)


def requires_role_or_permission(
    role_or_permission: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires a matching role or a matching permission."""
    return _gated([role_or_permission], GateMode.ROLE_OR_PERMISSION)
