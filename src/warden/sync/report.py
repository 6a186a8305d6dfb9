"""Results of a configuration sync run."""

from enum import StrEnum

from pydantic import BaseModel, Field


class SyncAction(StrEnum):
    """What happened to a single role or permission during a run."""

    ADDED = "added"
    UPDATED = "updated"
    RESTORED = "restored"
    UNCHANGED = "unchanged"
    ATTACHED = "attached"
    DETACHED = "detached"
    DELETED = "deleted"
    SKIPPED = "skipped"


class SyncEvent(BaseModel):
    """One line of a sync report."""

    action: SyncAction
    kind: str = Field(..., description="'role' or 'permission'")
    slug: str
    name: str | None = None
    role: str | None = Field(None, description="Owning role for attach/detach events")


class SyncCounts(BaseModel):
    """Lifecycle counters for one kind of record."""

    added: int = 0
    updated: int = 0
    restored: int = 0
    deleted: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated or self.restored or self.deleted)


class SyncReport(BaseModel):
    """Counts and per-item events produced by a seed or sync run.

    Roles and permissions are counted separately. ``attached`` and
    ``detached`` count role/permission links.
    """

    command: str
    roles: SyncCounts = Field(default_factory=SyncCounts)
    permissions: SyncCounts = Field(default_factory=SyncCounts)
    attached: int = 0
    detached: int = 0
    synced: int = 0
    events: list[SyncEvent] = Field(default_factory=list)

    def record(
        self,
        action: SyncAction,
        kind: str,
        slug: str,
        name: str | None = None,
        role: str | None = None,
    ) -> None:
        """Append an event and bump the matching counter."""
        self.events.append(
            SyncEvent(action=action, kind=kind, slug=slug, name=name, role=role)
        )
        if action == SyncAction.ATTACHED:
            self.attached += 1
        elif action == SyncAction.DETACHED:
            self.detached += 1
        elif action in (
            SyncAction.ADDED,
            SyncAction.UPDATED,
            SyncAction.RESTORED,
            SyncAction.DELETED,
        ):
            counts = self.roles if kind == "role" else self.permissions
            setattr(counts, action.value, getattr(counts, action.value) + 1)

    @property
    def changed(self) -> bool:
        """Whether the run wrote anything."""
        return bool(
            self.roles.changed
            or self.permissions.changed
            or self.attached
            or self.detached
        )
