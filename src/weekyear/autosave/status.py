"""Save status enum and the read-only state snapshot handed to renderers."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class SaveStatus(StrEnum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"
    OFFLINE = "offline"
    SYNCING = "syncing"


_STATUS_LABELS: dict[SaveStatus, str] = {
    SaveStatus.IDLE: "Auto-save enabled",
    SaveStatus.SAVING: "Saving...",
    SaveStatus.SAVED: "Saved",
    SaveStatus.ERROR: "Save failed",
    SaveStatus.OFFLINE: "Offline - changes queued",
    SaveStatus.SYNCING: "Syncing...",
}


def status_label(status: SaveStatus) -> str:
    """Short human-readable label for a status indicator."""
    return _STATUS_LABELS[status]


class SaveState(BaseModel):
    """Immutable snapshot of a coordinator's observable state."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: SaveStatus = SaveStatus.IDLE
    last_saved: datetime | None = None
    error: Exception | None = None
    can_undo: bool = False
    undo_countdown: int = 0
    is_offline: bool = False
    pending_changes: int = 0

    @property
    def error_message(self) -> str | None:
        if self.error is None:
            return None
        return str(self.error) or type(self.error).__name__
