"""Seed and sync roles and permissions from a configuration file."""

from warden.sync.report import SyncAction, SyncCounts, SyncEvent, SyncReport
from warden.sync.schemas import (
    PermissionDefinition,
    RoleDefinition,
    RolesConfig,
    load_roles_config,
)
from warden.sync.synchronizer import ConfigSynchronizer


__all__ = [
    "ConfigSynchronizer",
    "PermissionDefinition",
    "RoleDefinition",
    "RolesConfig",
    "SyncAction",
    "SyncCounts",
    "SyncEvent",
    "SyncReport",
    "load_roles_config",
]
