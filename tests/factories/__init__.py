"""Test factories for generating test data."""

from tests.factories.config import (
    PermissionDefinitionFactory,
    RoleDefinitionFactory,
    RolesConfigFactory,
)


__all__ = [
    "PermissionDefinitionFactory",
    "RoleDefinitionFactory",
    "RolesConfigFactory",
]
