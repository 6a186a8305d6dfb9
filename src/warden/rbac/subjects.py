"""Principals that can be checked for roles and permissions.

The check engine only needs to know which role slugs a principal holds.
Host applications either wrap their user in ``StoredSubject`` (roles read
from the ``role_user`` table) or implement ``AuthorizationSubject``
themselves, e.g. from token claims.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from warden.rbac.repos import RoleAssignmentRepository


@runtime_checkable
class AuthorizationSubject(Protocol):
    """Anything that can report the role slugs it currently holds."""

    async def role_slugs(self) -> set[str]:
        """Return the slugs of the roles held right now."""
        ...


def normalize_user_id(user_id: str | int | UUID) -> str:
    """Convert a host user identifier to the stored string form."""
    return str(user_id)


@dataclass
class StoredSubject:
    """A user whose role is stored in the ``role_user`` table.

    Every call to ``role_slugs`` reads the table again, so role changes
    made elsewhere are visible to the next check.
    """

    session: AsyncSession
    user_id: str | int | UUID

    async def role_slugs(self) -> set[str]:
        repo = RoleAssignmentRepository(self.session)
        return await repo.role_slugs_for_user(normalize_user_id(self.user_id))


@dataclass(frozen=True)
class StaticSubject:
    """A principal whose roles are known up front (e.g. from token claims)."""

    roles: frozenset[str]

    async def role_slugs(self) -> set[str]:
        return set(self.roles)
