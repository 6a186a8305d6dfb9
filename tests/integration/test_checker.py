"""Integration tests for the access checker.

These tests verify AccessChecker against stored roles including:
- Role checks
- Permission checks (single, any, all)
- Soft-deleted permissions
- Fresh reads after grants change
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from warden.rbac.checker import AccessChecker
from warden.rbac.services import PermissionService, RoleAssignmentService, RoleService
from warden.rbac.subjects import StaticSubject, StoredSubject


pytestmark = pytest.mark.integration


class TestRoleChecks:
    """Tests for has_role and has_any_role."""

    async def test_has_role(self, db: AsyncSession, admin_user: StoredSubject) -> None:
        """Verify the held role matches and others do not."""
        checker = AccessChecker(db)

        assert await checker.has_role(admin_user, "admin") is True
        assert await checker.has_role(admin_user, "viewer") is False

    async def test_user_without_role(self, db: AsyncSession, seeded) -> None:
        """Verify a user with no role holds nothing."""
        checker = AccessChecker(db)
        nobody = StoredSubject(db, "no-role")

        assert await checker.has_role(nobody, "admin") is False
        assert await checker.has_any_role(nobody, ["admin", "viewer"]) is False
        assert await checker.has_permission(nobody, "read") is False
        assert await checker.get_permission_slugs(nobody) == set()

    async def test_has_any_role(self, db: AsyncSession, viewer_user: StoredSubject) -> None:
        """Verify any-role needs a non-empty intersection."""
        checker = AccessChecker(db)

        assert await checker.has_any_role(viewer_user, ["admin", "viewer"]) is True
        assert await checker.has_any_role(viewer_user, ["admin"]) is False
        assert await checker.has_any_role(viewer_user, []) is False


class TestPermissionChecks:
    """Tests for the permission checks."""

    async def test_has_permission(
        self, db: AsyncSession, admin_user: StoredSubject, viewer_user: StoredSubject
    ) -> None:
        """Verify permissions come from the held role."""
        checker = AccessChecker(db)

        assert await checker.has_permission(admin_user, "delete") is True
        assert await checker.has_permission(viewer_user, "read") is True
        assert await checker.has_permission(viewer_user, "delete") is False
        assert await checker.has_permission(admin_user, "archive") is False

    async def test_has_any_permission(
        self, db: AsyncSession, admin_user: StoredSubject
    ) -> None:
        """Verify any-permission needs one granted slug."""
        checker = AccessChecker(db)

        assert await checker.has_any_permission(admin_user, ["delete", "archive"]) is True
        assert await checker.has_any_permission(admin_user, ["archive"]) is False
        assert await checker.has_any_permission(admin_user, []) is False

    async def test_has_all_permissions(
        self, db: AsyncSession, admin_user: StoredSubject
    ) -> None:
        """Verify all-permissions needs every slug."""
        checker = AccessChecker(db)

        assert await checker.has_all_permissions(admin_user, ["create", "read"]) is True
        assert await checker.has_all_permissions(admin_user, ["create", "archive"]) is False

    async def test_has_all_permissions_ignores_duplicates(
        self, db: AsyncSession, viewer_user: StoredSubject
    ) -> None:
        """Verify a repeated slug counts once."""
        checker = AccessChecker(db)

        assert await checker.has_all_permissions(viewer_user, ["read", "read"]) is True

    async def test_has_all_permissions_empty_is_true(
        self, db: AsyncSession, seeded
    ) -> None:
        """Verify requiring no permissions is satisfied, even without a role."""
        checker = AccessChecker(db)

        assert await checker.has_all_permissions(StoredSubject(db, "no-role"), []) is True
        assert await checker.has_all_permissions(StaticSubject(frozenset()), []) is True

    async def test_get_permission_slugs(
        self, db: AsyncSession, admin_user: StoredSubject
    ) -> None:
        """Verify the full permission set of the held role."""
        checker = AccessChecker(db)

        assert await checker.get_permission_slugs(admin_user) == {
            "create",
            "read",
            "update",
            "delete",
        }

    async def test_union_across_roles(self, db: AsyncSession, seeded) -> None:
        """Verify a principal with several roles gets every role's grants."""
        await RoleService(db).create_role("auditor", "Auditor")
        await RoleService(db).give_permission("auditor", "audit")
        checker = AccessChecker(db)
        subject = StaticSubject(frozenset({"viewer", "auditor"}))

        assert await checker.get_permission_slugs(subject) == {"read", "audit"}
        assert await checker.has_all_permissions(subject, ["read", "audit"]) is True

    async def test_role_has_permission(self, db: AsyncSession, seeded) -> None:
        """Verify role-level checks."""
        checker = AccessChecker(db)

        assert await checker.role_has_permission("admin", "delete") is True
        assert await checker.role_has_permission("viewer", "delete") is False
        assert await checker.role_has_permission("missing", "read") is False


class TestFreshReads:
    """Checks see changes made after the principal was created."""

    async def test_soft_deleted_permission_is_not_granted(
        self, db: AsyncSession, admin_user: StoredSubject
    ) -> None:
        """Verify a soft-deleted permission grants nothing."""
        checker = AccessChecker(db)
        assert await checker.has_permission(admin_user, "delete") is True

        await PermissionService(db).soft_delete("delete")

        assert await checker.has_permission(admin_user, "delete") is False
        assert "delete" not in await checker.get_permission_slugs(admin_user)

    async def test_role_change_is_visible(
        self, db: AsyncSession, admin_user: StoredSubject
    ) -> None:
        """Verify replacing the user's role changes the next check."""
        checker = AccessChecker(db)

        await RoleAssignmentService(db).give_role(1, "viewer")

        assert await checker.has_role(admin_user, "admin") is False
        assert await checker.has_role(admin_user, "viewer") is True
        assert await checker.has_permission(admin_user, "delete") is False

    async def test_permission_removed_from_role_is_visible(
        self, db: AsyncSession, admin_user: StoredSubject
    ) -> None:
        """Verify detaching a permission affects the next check."""
        checker = AccessChecker(db)

        await RoleService(db).remove_permission("admin", "delete")

        assert await checker.has_permission(admin_user, "delete") is False
