"""Role and permission repositories for database operations."""

from collections.abc import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from warden.rbac.models import Permission, Role, RoleAssignment, role_permission


class PermissionRepository:
    """Repository for Permission database operations.

    Lookups skip soft-deleted rows unless ``with_deleted`` is set.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_slug(
        self, slug: str, with_deleted: bool = False
    ) -> Permission | None:
        """Get a permission by slug.

        Args:
            slug: The permission slug
            with_deleted: Also return a soft-deleted permission

        Returns:
            Permission if found, None otherwise
        """
        stmt = select(Permission).where(Permission.slug == slug)
        if not with_deleted:
            stmt = stmt.where(Permission.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self, with_deleted: bool = False) -> list[Permission]:
        """List permissions ordered by slug."""
        stmt = select(Permission).order_by(Permission.slug)
        if not with_deleted:
            stmt = stmt.where(Permission.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_not_in(
        self, slugs: Iterable[str], with_deleted: bool = False
    ) -> list[Permission]:
        """List permissions whose slug is not in ``slugs``."""
        stmt = (
            select(Permission)
            .where(Permission.slug.not_in(list(slugs)))
            .order_by(Permission.slug)
        )
        if not with_deleted:
            stmt = stmt.where(Permission.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self, with_deleted: bool = False) -> int:
        """Count permissions."""
        stmt = select(func.count()).select_from(Permission)
        if not with_deleted:
            stmt = stmt.where(Permission.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def create(self, permission: Permission) -> Permission:
        """Create a new permission.

        Args:
            permission: Permission instance to create

        Returns:
            The created permission with ID populated
        """
        self.session.add(permission)
        await self.session.flush()
        return permission

    async def update(self, permission: Permission) -> Permission:
        """Flush pending changes on a permission."""
        await self.session.flush()
        return permission

    async def roles_granting(self, permission: Permission) -> list[Role]:
        """Get the roles that currently hold a permission."""
        stmt = (
            select(Role)
            .join(role_permission, role_permission.c.role_id == Role.id)
            .where(role_permission.c.permission_id == permission.id)
            .order_by(Role.slug)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def detach_from_roles(self, permission: Permission) -> int:
        """Remove a permission from every role that holds it.

        Returns:
            Number of roles the permission was removed from
        """
        roles = await self.roles_granting(permission)
        for role in roles:
            role.permissions.remove(permission)
        await self.session.flush()
        return len(roles)

    async def delete(self, permission: Permission) -> None:
        """Hard delete a permission and its role associations."""
        await self.detach_from_roles(permission)
        await self.session.delete(permission)
        await self.session.flush()


class RoleRepository:
    """Repository for Role database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_slug(self, slug: str) -> Role | None:
        """Get a role by slug.

        Args:
            slug: The role slug

        Returns:
            Role if found, None otherwise
        """
        result = await self.session.execute(select(Role).where(Role.slug == slug))
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Role]:
        """List roles ordered by slug, with their permissions loaded."""
        result = await self.session.execute(select(Role).order_by(Role.slug))
        return list(result.scalars().all())

    async def list_not_in(self, slugs: Iterable[str]) -> list[Role]:
        """List roles whose slug is not in ``slugs``."""
        stmt = select(Role).where(Role.slug.not_in(list(slugs))).order_by(Role.slug)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self) -> int:
        """Count roles."""
        result = await self.session.execute(select(func.count()).select_from(Role))
        return result.scalar_one()

    async def create(self, role: Role) -> Role:
        """Create a new role.

        Args:
            role: Role instance to create

        Returns:
            The created role with ID populated
        """
        self.session.add(role)
        await self.session.flush()
        return role

    async def update(self, role: Role) -> Role:
        """Flush pending changes on a role."""
        await self.session.flush()
        return role

    async def delete(self, role: Role) -> None:
        """Delete a role together with its association rows.

        The role's permission links and every user assignment pointing
        at it are removed in the same flush, so no pivot row outlives
        the role even on databases that do not enforce ON DELETE CASCADE.
        """
        role.permissions.clear()
        await self.session.execute(
            delete(RoleAssignment).where(RoleAssignment.role_id == role.id)
        )
        await self.session.delete(role)
        await self.session.flush()


class RoleAssignmentRepository:
    """Repository for the user to role association."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_user(self, user_id: str) -> RoleAssignment | None:
        """Get the assignment row for a user, if any."""
        result = await self.session.execute(
            select(RoleAssignment).where(RoleAssignment.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def role_slugs_for_user(self, user_id: str) -> set[str]:
        """Get the slugs of the roles currently held by a user."""
        stmt = (
            select(Role.slug)
            .join(RoleAssignment, RoleAssignment.role_id == Role.id)
            .where(RoleAssignment.user_id == user_id)
        )
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def user_ids_for_role(self, role: Role) -> list[str]:
        """Get the users holding a role."""
        stmt = (
            select(RoleAssignment.user_id)
            .where(RoleAssignment.role_id == role.id)
            .order_by(RoleAssignment.user_id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_role(self, role: Role) -> int:
        """Count the users holding a role."""
        stmt = (
            select(func.count())
            .select_from(RoleAssignment)
            .where(RoleAssignment.role_id == role.id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def assign(self, user_id: str, role: Role) -> RoleAssignment:
        """Make ``role`` the only role held by a user.

        An existing assignment is rewritten in place, so the previous
        role is revoked in the same statement that grants the new one.
        """
        assignment = await self.get_by_user(user_id)
        if assignment is None:
            assignment = RoleAssignment(user_id=user_id, role=role)
            self.session.add(assignment)
        else:
            assignment.role = role
        await self.session.flush()
        return assignment

    async def remove(self, user_id: str) -> bool:
        """Remove a user's role.

        Returns:
            True if a role was removed, False if the user had none
        """
        result = await self.session.execute(
            delete(RoleAssignment).where(RoleAssignment.user_id == user_id)
        )
        await self.session.flush()
        return result.rowcount > 0
