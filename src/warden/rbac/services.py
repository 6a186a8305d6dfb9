"""Role, permission, and assignment services.

Services hold the business rules on top of the repositories and are
what host applications call to manage grants programmatically.
"""

from collections.abc import Iterable
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.errors import ConflictError, PermissionNotFoundError, RoleNotFoundError
from warden.core.utils.text import humanize_slug
from warden.rbac.models import Permission, Role, RoleAssignment
from warden.rbac.repos import (
    PermissionRepository,
    RoleAssignmentRepository,
    RoleRepository,
)
from warden.rbac.subjects import normalize_user_id


logger = structlog.get_logger()


class PermissionService:
    """Service for permission lifecycle operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.permissions = PermissionRepository(session)

    async def get_or_create(self, slug: str) -> Permission:
        """Get a live permission by slug, creating it with a derived name.

        A soft-deleted permission with the same slug is restored rather
        than duplicated.
        """
        permission = await self.permissions.get_by_slug(slug, with_deleted=True)
        if permission is None:
            permission = await self.permissions.create(
                Permission(slug=slug, name=humanize_slug(slug))
            )
            logger.info("permission_created", slug=slug)
        elif permission.is_deleted:
            permission.restore()
            await self.permissions.update(permission)
            logger.info("permission_restored", slug=slug)
        return permission

    async def create_permission(
        self,
        slug: str,
        name: str | None = None,
        description: str | None = None,
    ) -> Permission:
        """Create a new permission.

        Raises:
            ConflictError: If a permission with this slug already exists
        """
        if await self.permissions.get_by_slug(slug, with_deleted=True):
            raise ConflictError(
                f"Permission [{slug}] already exists.",
                details={"slug": slug},
            )
        permission = await self.permissions.create(
            Permission(
                slug=slug,
                name=name or humanize_slug(slug),
                description=description,
            )
        )
        logger.info("permission_created", slug=slug)
        return permission

    async def soft_delete(self, slug: str) -> bool:
        """Soft delete a permission and detach it from every role.

        Returns:
            True if a live permission was deleted
        """
        permission = await self.permissions.get_by_slug(slug)
        if permission is None:
            return False
        await self.permissions.detach_from_roles(permission)
        permission.soft_delete()
        await self.permissions.update(permission)
        logger.info("permission_deleted", slug=slug)
        return True

    async def restore(self, slug: str) -> Permission:
        """Restore a soft-deleted permission.

        Restoring does not re-attach it to roles; the next seed does.

        Raises:
            PermissionNotFoundError: If no permission has this slug
        """
        permission = await self.permissions.get_by_slug(slug, with_deleted=True)
        if permission is None:
            raise PermissionNotFoundError(slug)
        if permission.is_deleted:
            permission.restore()
            await self.permissions.update(permission)
            logger.info("permission_restored", slug=slug)
        return permission

    async def purge(self, slug: str) -> bool:
        """Hard delete a permission, live or soft-deleted.

        Returns:
            True if a row was removed
        """
        permission = await self.permissions.get_by_slug(slug, with_deleted=True)
        if permission is None:
            return False
        await self.permissions.delete(permission)
        logger.info("permission_purged", slug=slug)
        return True


class RoleService:
    """Service for roles and the permissions they own."""

    def __init__(self, session: AsyncSession) -> None:
        self.roles = RoleRepository(session)
        self.permissions = PermissionRepository(session)
        self.permission_service = PermissionService(session)

    async def _get_role(self, role_slug: str) -> Role:
        role = await self.roles.get_by_slug(role_slug)
        if role is None:
            raise RoleNotFoundError(role_slug)
        return role

    async def create_role(self, slug: str, name: str) -> Role:
        """Create a new role.

        Raises:
            ConflictError: If a role with this slug already exists
        """
        if await self.roles.get_by_slug(slug):
            raise ConflictError(f"Role [{slug}] already exists.", details={"slug": slug})
        role = await self.roles.create(Role(slug=slug, name=name, permissions=[]))
        logger.info("role_created", slug=slug)
        return role

    async def role_has_permission(self, role_slug: str, permission_slug: str) -> bool:
        """Check if a role holds a live permission; unknown roles hold nothing."""
        role = await self.roles.get_by_slug(role_slug)
        return role is not None and permission_slug in role.permission_slugs

    async def give_permission(self, role_slug: str, permission_slug: str) -> None:
        """Attach a permission to a role, creating the permission if needed.

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        role = await self._get_role(role_slug)
        permission = await self.permission_service.get_or_create(permission_slug)
        if permission not in role.permissions:
            role.permissions.append(permission)
            await self.roles.update(role)
            logger.info("permission_attached", role=role_slug, permission=permission_slug)

    async def sync_permissions(
        self, role_slug: str, permission_slugs: Iterable[str]
    ) -> tuple[list[str], list[str]]:
        """Replace a role's permissions with exactly the given slugs.

        Missing permissions are created; permissions not listed are
        detached from this role only.

        Returns:
            Tuple of (attached slugs, detached slugs)

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        role = await self._get_role(role_slug)
        wanted: list[Permission] = []
        for slug in dict.fromkeys(permission_slugs):
            wanted.append(await self.permission_service.get_or_create(slug))
        return await self.replace_permissions(role, wanted)

    async def replace_permissions(
        self, role: Role, permissions: list[Permission]
    ) -> tuple[list[str], list[str]]:
        """Make ``permissions`` the complete permission set of ``role``.

        Only the difference is written; an unchanged set issues no
        statements.

        Returns:
            Tuple of (attached slugs, detached slugs)
        """
        wanted_ids = {p.id for p in permissions}
        current_ids = {p.id for p in role.permissions}

        detached = [p for p in role.permissions if p.id not in wanted_ids]
        attached = [p for p in permissions if p.id not in current_ids]

        for permission in detached:
            role.permissions.remove(permission)
        role.permissions.extend(attached)

        if attached or detached:
            await self.roles.update(role)

        return [p.slug for p in attached], [p.slug for p in detached]

    async def remove_permission(self, role_slug: str, permission_slug: str) -> bool:
        """Detach a permission from a role.

        Returns:
            True if the permission was attached and has been removed
        """
        role = await self.roles.get_by_slug(role_slug)
        if role is None:
            return False
        for permission in role.permissions:
            if permission.slug == permission_slug:
                role.permissions.remove(permission)
                await self.roles.update(role)
                logger.info(
                    "permission_detached", role=role_slug, permission=permission_slug
                )
                return True
        return False

    async def remove_permissions(
        self, role_slug: str, permission_slugs: Iterable[str]
    ) -> int:
        """Detach several permissions from a role.

        Returns:
            Number of permissions that were actually removed
        """
        removed = 0
        for slug in set(permission_slugs):
            if await self.remove_permission(role_slug, slug):
                removed += 1
        return removed

    async def remove_all_permissions(self, role_slug: str) -> int:
        """Detach every permission from a role.

        Returns:
            Number of permissions that were removed
        """
        role = await self.roles.get_by_slug(role_slug)
        if role is None:
            return 0
        count = len(role.permissions)
        if count:
            role.permissions.clear()
            await self.roles.update(role)
            logger.info("permissions_cleared", role=role_slug, count=count)
        return count

    async def delete_role(self, role_slug: str) -> bool:
        """Delete a role, its permission links, and its user assignments.

        Returns:
            True if the role existed
        """
        role = await self.roles.get_by_slug(role_slug)
        if role is None:
            return False
        await self.roles.delete(role)
        logger.info("role_deleted", slug=role_slug)
        return True


class RoleAssignmentService:
    """Service for the single role held by each user.

    Each user holds at most one role. Giving a role replaces the
    previous one.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.roles = RoleRepository(session)
        self.assignments = RoleAssignmentRepository(session)

    async def give_role(self, user_id: str | int | UUID, role_slug: str) -> RoleAssignment:
        """Assign a role to a user, replacing any role they already hold.

        Raises:
            RoleNotFoundError: If no role has this slug
        """
        role = await self.roles.get_by_slug(role_slug)
        if role is None:
            raise RoleNotFoundError(role_slug)

        assignment = await self.assignments.assign(normalize_user_id(user_id), role)
        logger.info("role_assigned", user_id=str(user_id), role=role_slug)
        return assignment

    async def sync_roles(self, user_id: str | int | UUID, role_slug: str) -> RoleAssignment:
        """Alias for ``give_role``."""
        return await self.give_role(user_id, role_slug)

    async def remove_role(self, user_id: str | int | UUID) -> bool:
        """Remove the user's current role.

        Returns:
            True if a role was removed, False otherwise
        """
        removed = await self.assignments.remove(normalize_user_id(user_id))
        if removed:
            logger.info("role_revoked", user_id=str(user_id))
        return removed

    async def get_role(self, user_id: str | int | UUID) -> Role | None:
        """Get the role held by a user, if any."""
        assignment = await self.assignments.get_by_user(normalize_user_id(user_id))
        return assignment.role if assignment else None

    async def user_ids_for_role(self, role_slug: str) -> list[str]:
        """Get the users holding a role; unknown roles have none."""
        role = await self.roles.get_by_slug(role_slug)
        if role is None:
            return []
        return await self.assignments.user_ids_for_role(role)
