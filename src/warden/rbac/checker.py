"""Role and permission checking logic.

This module answers "does this principal hold role R / permission P /
any of / all of" by querying the current role and permission rows.
Nothing is cached: every call reads the database again, so grants
changed by another request or a sync run apply to the next check.
"""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from warden.rbac.models import Permission, Role, role_permission
from warden.rbac.subjects import AuthorizationSubject


class AccessChecker:
    """Service for checking principal roles and permissions.

    A principal's permissions are the union of the live permissions of
    every role it holds. Missing roles or permissions resolve to False;
    only database failures propagate.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _granted_slugs(
        self,
        role_slugs: set[str],
        permission_slugs: set[str] | None = None,
    ) -> set[str]:
        """Get the permission slugs granted by a set of roles.

        Args:
            role_slugs: Roles held by the principal
            permission_slugs: Restrict the result to these slugs when given

        Returns:
            Slugs of live permissions attached to any of the roles
        """
        if not role_slugs:
            return set()

        stmt = (
            select(Permission.slug)
            .join(role_permission, role_permission.c.permission_id == Permission.id)
            .join(Role, Role.id == role_permission.c.role_id)
            .where(
                Role.slug.in_(sorted(role_slugs)),
                Permission.deleted_at.is_(None),
            )
            .distinct()
        )
        if permission_slugs is not None:
            stmt = stmt.where(Permission.slug.in_(sorted(permission_slugs)))

        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def has_role(self, subject: AuthorizationSubject, role_slug: str) -> bool:
        """Check if a principal holds a role.

        Args:
            subject: The principal to check
            role_slug: The role slug (e.g., "admin")

        Returns:
            True if the principal holds the role
        """
        return role_slug in await subject.role_slugs()

    async def has_any_role(
        self, subject: AuthorizationSubject, role_slugs: Iterable[str]
    ) -> bool:
        """Check if a principal holds at least one of the roles.

        An empty list of roles is never satisfied.
        """
        wanted = set(role_slugs)
        if not wanted:
            return False
        return not wanted.isdisjoint(await subject.role_slugs())

    async def has_permission(
        self, subject: AuthorizationSubject, permission_slug: str
    ) -> bool:
        """Check if a principal has a permission through any of its roles.

        Args:
            subject: The principal to check
            permission_slug: The permission slug (e.g., "edit-posts")

        Returns:
            True if the principal has the permission
        """
        granted = await self._granted_slugs(
            await subject.role_slugs(), {permission_slug}
        )
        return permission_slug in granted

    async def has_any_permission(
        self, subject: AuthorizationSubject, permission_slugs: Iterable[str]
    ) -> bool:
        """Check if a principal has at least one of the permissions.

        An empty list of permissions is never satisfied.
        """
        wanted = set(permission_slugs)
        if not wanted:
            return False
        granted = await self._granted_slugs(await subject.role_slugs(), wanted)
        return bool(granted)

    async def has_all_permissions(
        self, subject: AuthorizationSubject, permission_slugs: Iterable[str]
    ) -> bool:
        """Check if a principal has every one of the permissions.

        Duplicate slugs count once. An empty list is vacuously satisfied,
        even for a principal without a role: requiring nothing grants
        access, so callers gating on this must pass a non-empty list.
        """
        wanted = set(permission_slugs)
        if not wanted:
            return True
        granted = await self._granted_slugs(await subject.role_slugs(), wanted)
        return granted == wanted

    async def get_permission_slugs(self, subject: AuthorizationSubject) -> set[str]:
        """Get all permission slugs a principal has.

        Returns:
            Union of the live permission slugs of every held role
        """
        return await self._granted_slugs(await subject.role_slugs())

    async def role_has_permission(self, role_slug: str, permission_slug: str) -> bool:
        """Check if a role grants a permission."""
        granted = await self._granted_slugs({role_slug}, {permission_slug})
        return permission_slug in granted
