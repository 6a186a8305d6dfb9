"""Role and permission database models.

This module defines the RBAC (Role-Based Access Control) models:
- Permission: A single grantable action, identified by its slug
- Role: A named set of permissions, identified by its slug
- RoleAssignment: The role held by a user (at most one per user)
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warden.config import get_settings
from warden.core.constants import (
    MAX_PERMISSION_NAME_LENGTH,
    MAX_ROLE_NAME_LENGTH,
    MAX_SLUG_LENGTH,
    MAX_USER_ID_LENGTH,
)
from warden.core.database.base import (
    Base,
    IntegerIDMixin,
    SoftDeleteMixin,
    TimestampMixin,
)


_settings = get_settings()

# Junction table for Role <-> Permission many-to-many relationship
role_permission = Table(
    _settings.role_permission_table,
    Base.metadata,
    Column(
        "role_id",
        Integer,
        ForeignKey(f"{_settings.roles_table}.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "permission_id",
        Integer,
        ForeignKey(f"{_settings.permissions_table}.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Permission(Base, IntegerIDMixin, TimestampMixin, SoftDeleteMixin):
    """Permission model representing a single grantable action.

    Attributes:
        name: Display name (e.g., "Edit posts")
        slug: Unique URL-safe key referenced from configuration (e.g., "edit-posts")
        description: Optional description of what the permission allows
        deleted_at: Soft-delete marker; deleted permissions grant nothing
    """

    __tablename__ = _settings.permissions_table

    name: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_NAME_LENGTH),
        nullable=False,
    )
    slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Permission(id={self.id}, slug={self.slug})>"


class Role(Base, IntegerIDMixin, TimestampMixin):
    """Role model representing a named set of permissions.

    Attributes:
        name: Display name (e.g., "Administrator")
        slug: Unique URL-safe key referenced from configuration (e.g., "admin")
        permissions: The permissions granted by this role
    """

    __tablename__ = _settings.roles_table

    name: Mapped[str] = mapped_column(
        String(MAX_ROLE_NAME_LENGTH),
        nullable=False,
    )
    slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )

    # Relationships
    permissions: Mapped[list["Permission"]] = relationship(
        "Permission",
        secondary=role_permission,
        lazy="selectin",
        order_by="Permission.id",
    )

    @property
    def permission_slugs(self) -> set[str]:
        """Slugs of the live permissions currently attached to this role."""
        return {p.slug for p in self.permissions if not p.is_deleted}

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, slug={self.slug})>"


class RoleAssignment(Base, TimestampMixin):
    """The role held by a user.

    ``user_id`` is the primary key, so a user holds at most one role and
    assigning another one replaces the row. The identifier is stored as a
    string so integer and UUID user keys both fit.
    """

    __tablename__ = _settings.role_user_table

    user_id: Mapped[str] = mapped_column(
        String(MAX_USER_ID_LENGTH),
        primary_key=True,
    )
    role_id: Mapped[int] = mapped_column(
        ForeignKey(f"{_settings.roles_table}.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    role: Mapped["Role"] = relationship(
        "Role",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<RoleAssignment(user_id={self.user_id}, role_id={self.role_id})>"
