"""Pydantic schemas for the roles configuration file."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from warden.core.constants import MAX_DESCRIPTION_LENGTH, MAX_SLUG_LENGTH
from warden.core.errors import ConfigurationError


class PermissionDefinition(BaseModel):
    """A permission declared under a role.

    A structured entry may give only ``name``; the name is then used
    as the slug.
    """

    slug: str = Field(..., max_length=MAX_SLUG_LENGTH, description="Permission slug")
    name: str | None = Field(None, description="Display name, derived when omitted")
    description: str | None = Field(
        None, max_length=MAX_DESCRIPTION_LENGTH, description="What the permission allows"
    )

    @model_validator(mode="before")
    @classmethod
    def slug_from_name(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"slug": data}
        if isinstance(data, dict) and not data.get("slug") and data.get("name"):
            return {**data, "slug": data["name"], "name": None}
        return data

    @field_validator("slug")
    @classmethod
    def strip_slug(cls, value: str) -> str:
        return value.strip()


class RoleDefinition(BaseModel):
    """A role declared in the configuration file."""

    name: str | None = Field(None, description="Display name of the role")
    permissions: list[PermissionDefinition] = Field(
        default_factory=list,
        description="Permissions granted by the role, as slugs or structured entries",
    )

    @field_validator("permissions", mode="before")
    @classmethod
    def drop_blank_entries(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [
                entry
                for entry in value
                if entry is not None and not (isinstance(entry, str) and not entry.strip())
            ]
        return value

    @field_validator("permissions")
    @classmethod
    def drop_empty_slugs(
        cls, value: list[PermissionDefinition]
    ) -> list[PermissionDefinition]:
        return [p for p in value if p.slug]

    @property
    def permission_slugs(self) -> list[str]:
        """Declared permission slugs in order, without duplicates."""
        return list(dict.fromkeys(p.slug for p in self.permissions))


class RolesConfig(BaseModel):
    """The whole roles configuration: role slug to role definition."""

    roles: dict[str, RoleDefinition] = Field(default_factory=dict)

    @field_validator("roles", mode="before")
    @classmethod
    def none_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    def permission_definitions(self) -> dict[str, PermissionDefinition]:
        """Every declared permission keyed by slug.

        A slug declared under several roles keeps its first definition.
        """
        definitions: dict[str, PermissionDefinition] = {}
        for role in self.roles.values():
            for permission in role.permissions:
                definitions.setdefault(permission.slug, permission)
        return definitions


def load_roles_config(path: Path) -> RolesConfig:
    """Load and validate a roles configuration file.

    Args:
        path: Path to the YAML file

    Returns:
        The validated configuration

    Raises:
        ConfigurationError: If the file is missing, unreadable, or invalid
    """
    if not path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {path}",
            details={"path": str(path)},
        )

    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Could not read configuration file {path}: {e}",
            details={"path": str(path)},
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file {path} must contain a mapping",
            details={"path": str(path)},
        )

    try:
        return RolesConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration in {path}",
            details={"path": str(path), "errors": e.errors(include_url=False)},
        ) from e
