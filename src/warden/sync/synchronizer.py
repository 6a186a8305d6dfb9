"""Reconcile the roles configuration with the stored roles and permissions.

Seeding is additive: declared items are created, restored, or updated
and nothing is removed. Syncing seeds first and then removes every role
or permission the configuration no longer declares.

The synchronizer never commits. Callers run each command inside one
transaction (see ``warden.core.database.session_scope``).
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.errors import ConfigurationEmptyError
from warden.core.utils.text import humanize_slug
from warden.rbac.models import Permission, Role
from warden.rbac.repos import PermissionRepository, RoleRepository
from warden.rbac.services import RoleService
from warden.sync.report import SyncAction, SyncReport
from warden.sync.schemas import PermissionDefinition, RolesConfig


logger = structlog.get_logger()


class ConfigSynchronizer:
    """Apply a ``RolesConfig`` to the database.

    Running any command twice with the same configuration writes nothing
    the second time.

    Example:
        async with session_scope(get_session_factory()) as session:
            report = await ConfigSynchronizer(session, config).sync_roles()
    """

    def __init__(self, session: AsyncSession, config: RolesConfig) -> None:
        self.session = session
        self.config = config
        self.permissions = PermissionRepository(session)
        self.roles = RoleRepository(session)
        self.role_service = RoleService(session)

    def _require_roles(self) -> None:
        if not self.config.roles:
            raise ConfigurationEmptyError()

    def _require_permissions(self) -> dict[str, PermissionDefinition]:
        definitions = self.config.permission_definitions()
        if not definitions:
            raise ConfigurationEmptyError("No permissions found in configuration.")
        return definitions

    async def _apply_permission(
        self, definition: PermissionDefinition, report: SyncReport
    ) -> Permission:
        """Create, restore, or update a single declared permission."""
        slug = definition.slug
        name = definition.name or humanize_slug(slug)
        permission = await self.permissions.get_by_slug(slug, with_deleted=True)

        if permission is None:
            permission = await self.permissions.create(
                Permission(slug=slug, name=name, description=definition.description)
            )
            report.record(SyncAction.ADDED, "permission", slug, name)
            logger.info("permission_created", slug=slug)
            return permission

        changed = permission.name != name
        if changed:
            permission.name = name
        if (
            definition.description is not None
            and permission.description != definition.description
        ):
            permission.description = definition.description
            changed = True

        if permission.is_deleted:
            permission.restore()
            await self.permissions.update(permission)
            report.record(SyncAction.RESTORED, "permission", slug, name)
            logger.info("permission_restored", slug=slug)
        elif changed:
            await self.permissions.update(permission)
            report.record(SyncAction.UPDATED, "permission", slug, name)
            logger.info("permission_updated", slug=slug)
        else:
            report.record(SyncAction.UNCHANGED, "permission", slug, name)

        return permission

    async def _seed_permissions(
        self, definitions: dict[str, PermissionDefinition], report: SyncReport
    ) -> dict[str, Permission]:
        permissions: dict[str, Permission] = {}
        for slug, definition in definitions.items():
            permissions[slug] = await self._apply_permission(definition, report)
        return permissions

    async def _remove_undeclared_permissions(
        self, declared: set[str], report: SyncReport, purge: bool
    ) -> None:
        """Soft delete (or purge) every permission not in ``declared``.

        Purging also removes rows an earlier sync already soft deleted.
        """
        for permission in await self.permissions.list_not_in(
            declared, with_deleted=purge
        ):
            if purge:
                await self.permissions.delete(permission)
            else:
                await self.permissions.detach_from_roles(permission)
                permission.soft_delete()
                await self.permissions.update(permission)
            report.record(
                SyncAction.DELETED, "permission", permission.slug, permission.name
            )
            logger.info("permission_removed", slug=permission.slug, purged=purge)

    async def _apply_role(
        self,
        slug: str,
        name: str,
        permission_slugs: list[str],
        permissions: dict[str, Permission],
        report: SyncReport,
    ) -> None:
        role = await self.roles.get_by_slug(slug)
        if role is None:
            role = await self.roles.create(Role(slug=slug, name=name, permissions=[]))
            report.record(SyncAction.ADDED, "role", slug, name)
            logger.info("role_created", slug=slug)
        elif role.name != name:
            role.name = name
            await self.roles.update(role)
            report.record(SyncAction.UPDATED, "role", slug, name)
            logger.info("role_updated", slug=slug)
        else:
            report.record(SyncAction.UNCHANGED, "role", slug, name)

        attached, detached = await self.role_service.replace_permissions(
            role, [permissions[s] for s in permission_slugs]
        )
        for permission_slug in attached:
            report.record(SyncAction.ATTACHED, "permission", permission_slug, role=slug)
        for permission_slug in detached:
            report.record(SyncAction.DETACHED, "permission", permission_slug, role=slug)

    async def _seed_roles(self, report: SyncReport) -> None:
        permissions = await self._seed_permissions(
            self.config.permission_definitions(), report
        )
        for slug, definition in self.config.roles.items():
            if not definition.name:
                logger.warning("role_skipped", slug=slug, reason="missing_name")
                report.record(SyncAction.SKIPPED, "role", slug)
                continue
            await self._apply_role(
                slug, definition.name, definition.permission_slugs, permissions, report
            )
            report.synced += 1

    async def seed_permissions(self) -> SyncReport:
        """Create, restore, or update every declared permission.

        Never deletes anything.

        Raises:
            ConfigurationEmptyError: If no permission is declared
        """
        definitions = self._require_permissions()
        report = SyncReport(command="permissions:seed")
        await self._seed_permissions(definitions, report)
        report.synced = len(definitions)
        logger.info("sync_completed", **_summary(report))
        return report

    async def sync_permissions(self, purge: bool = False) -> SyncReport:
        """Seed permissions, then remove every permission not declared.

        Args:
            purge: Hard delete undeclared permissions instead of soft deleting

        Raises:
            ConfigurationEmptyError: If no permission is declared
        """
        definitions = self._require_permissions()
        report = SyncReport(command="permissions:sync")
        await self._seed_permissions(definitions, report)
        report.synced = len(definitions)
        await self._remove_undeclared_permissions(set(definitions), report, purge)
        logger.info("sync_completed", **_summary(report))
        return report

    async def seed_roles(self) -> SyncReport:
        """Seed permissions, then create or update every declared role.

        Each role's permission set is made equal to its declared list.
        Roles missing from the configuration are left alone.

        Raises:
            ConfigurationEmptyError: If no role is declared
        """
        self._require_roles()
        report = SyncReport(command="roles:seed")
        await self._seed_roles(report)
        logger.info("sync_completed", **_summary(report))
        return report

    async def sync_roles(self, purge: bool = False) -> SyncReport:
        """Seed roles, then delete undeclared roles and permissions.

        Deleting a role removes its permission links and user assignments.

        Args:
            purge: Hard delete undeclared permissions instead of soft deleting

        Raises:
            ConfigurationEmptyError: If no role is declared
        """
        self._require_roles()
        report = SyncReport(command="roles:sync")
        await self._seed_roles(report)

        for role in await self.roles.list_not_in(self.config.roles.keys()):
            slug, name = role.slug, role.name
            await self.roles.delete(role)
            report.record(SyncAction.DELETED, "role", slug, name)
            logger.info("role_deleted", slug=slug)

        await self._remove_undeclared_permissions(
            set(self.config.permission_definitions()), report, purge
        )
        logger.info("sync_completed", **_summary(report))
        return report


def _summary(report: SyncReport) -> dict[str, object]:
    return report.model_dump(exclude={"events"})
