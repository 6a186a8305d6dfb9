"""Allow/deny decisions on top of the check engine.

The gate turns a check result into an outcome for a request or a
template render. A missing principal and an insufficient grant produce
the same denial.
"""

from collections.abc import Awaitable, Callable, Iterable
from enum import StrEnum

import structlog

from warden.core.constants import FORBIDDEN_MESSAGE
from warden.core.errors import ForbiddenError
from warden.rbac.checker import AccessChecker
from warden.rbac.subjects import AuthorizationSubject


logger = structlog.get_logger()

TemplatePredicate = Callable[..., Awaitable[bool]]


class GateMode(StrEnum):
    """How the required tokens are matched against the principal."""

    ROLE = "role"
    ANY_ROLE = "any_role"
    PERMISSION = "permission"
    ANY_PERMISSION = "any_permission"
    ALL_PERMISSIONS = "all_permissions"
    ROLE_OR_PERMISSION = "role_or_permission"


def _as_list(tokens: str | Iterable[str]) -> list[str]:
    if isinstance(tokens, str):
        return [tokens]
    return list(tokens)


def _flatten(args: tuple[str | Iterable[str], ...]) -> list[str]:
    """Accept either one list argument or the tokens as varargs."""
    if len(args) == 1:
        return _as_list(args[0])
    return [token for arg in args for token in _as_list(arg)]


class AccessGate:
    """Gate requests and renders on role and permission checks."""

    def __init__(self, checker: AccessChecker) -> None:
        self.checker = checker

    async def allows(
        self,
        subject: AuthorizationSubject | None,
        tokens: str | Iterable[str],
        mode: GateMode = GateMode.PERMISSION,
    ) -> bool:
        """Check whether a principal passes the gate.

        Args:
            subject: The principal, or None when unauthenticated
            tokens: Required role and/or permission slugs
            mode: How the tokens are matched

        Returns:
            True if access is allowed; always False without a principal
        """
        if subject is None:
            return False

        required = _as_list(tokens)
        match mode:
            case GateMode.ROLE:
                if not required:
                    return False
                for role_slug in required:
                    if not await self.checker.has_role(subject, role_slug):
                        return False
                return True
            case GateMode.ANY_ROLE:
                return await self.checker.has_any_role(subject, required)
            case GateMode.PERMISSION:
                return bool(required) and await self.checker.has_all_permissions(
                    subject, required
                )
            case GateMode.ANY_PERMISSION:
                return await self.checker.has_any_permission(subject, required)
            case GateMode.ALL_PERMISSIONS:
                return await self.checker.has_all_permissions(subject, required)
            case GateMode.ROLE_OR_PERMISSION:
                return await self.checker.has_any_role(
                    subject, required
                ) or await self.checker.has_any_permission(subject, required)

    async def authorize(
        self,
        subject: AuthorizationSubject | None,
        tokens: str | Iterable[str],
        mode: GateMode = GateMode.PERMISSION,
    ) -> None:
        """Require a principal to pass the gate.

        Raises:
            ForbiddenError: If access is denied, for any reason
        """
        if not await self.allows(subject, tokens, mode):
            logger.info(
                "access_denied",
                mode=str(mode),
                required=_as_list(tokens),
                authenticated=subject is not None,
            )
            raise ForbiddenError(FORBIDDEN_MESSAGE)

    def template_predicates(
        self, subject: AuthorizationSubject | None
    ) -> dict[str, TemplatePredicate]:
        """Build the predicates exposed to templates for one principal.

        The list predicates accept either a single list or the slugs as
        separate arguments, e.g. ``hasanyrole(["admin", "editor"])`` or
        ``hasanyrole("admin", "editor")``.

        Returns:
            Mapping of predicate name to async predicate
        """

        async def role(role_slug: str) -> bool:
            return await self.allows(subject, role_slug, GateMode.ROLE)

        async def hasanyrole(*role_slugs: str | Iterable[str]) -> bool:
            return await self.allows(subject, _flatten(role_slugs), GateMode.ANY_ROLE)

        async def haspermission(permission_slug: str) -> bool:
            return await self.allows(subject, permission_slug, GateMode.PERMISSION)

        async def hasanypermission(*permission_slugs: str | Iterable[str]) -> bool:
            return await self.allows(
                subject, _flatten(permission_slugs), GateMode.ANY_PERMISSION
            )

        async def hasallpermissions(*permission_slugs: str | Iterable[str]) -> bool:
            return await self.allows(
                subject, _flatten(permission_slugs), GateMode.ALL_PERMISSIONS
            )

        return {
            "role": role,
            "hasanyrole": hasanyrole,
            "haspermission": haspermission,
            "hasanypermission": hasanypermission,
            "hasallpermissions": hasallpermissions,
        }
