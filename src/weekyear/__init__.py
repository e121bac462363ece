"""weekyear - Async persistence kit for a 12 Week Year workbook."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("weekyear")
except PackageNotFoundError:
    __version__ = "0+local"
from weekyear.autosave import (
    AutoSaveCoordinator,
    ConnectivityMonitor,
    JsonFileStorage,
    KeyValueStore,
    MemoryStorage,
    OfflineQueue,
    PendingChange,
    SaveState,
    SaveStatus,
    status_label,
)
from weekyear.client import WorkbookClient
from weekyear.config import AutoSaveConfig, WorkbookConfig
from weekyear.exceptions import (
    WeekYearApiError,
    WeekYearAuthenticationError,
    WeekYearConfigError,
    WeekYearError,
    WeekYearNotFoundError,
    WeekYearOfflineError,
    WeekYearStorageError,
    WeekYearTransportError,
    WeekYearValidationError,
)
from weekyear.models import (
    CycleReviewInput,
    ReviewType,
    Tactic,
    TacticEntry,
    TacticEntryInput,
    VisionInput,
    WamRecordInput,
    WeeklyReviewInput,
    WeeklyScoreInput,
)

__all__ = [
    "__version__",
    "AutoSaveConfig",
    "AutoSaveCoordinator",
    "ConnectivityMonitor",
    "CycleReviewInput",
    "JsonFileStorage",
    "KeyValueStore",
    "MemoryStorage",
    "OfflineQueue",
    "PendingChange",
    "ReviewType",
    "SaveState",
    "SaveStatus",
    "Tactic",
    "TacticEntry",
    "TacticEntryInput",
    "VisionInput",
    "WamRecordInput",
    "WeekYearApiError",
    "WeekYearAuthenticationError",
    "WeekYearConfigError",
    "WeekYearError",
    "WeekYearNotFoundError",
    "WeekYearOfflineError",
    "WeekYearStorageError",
    "WeekYearTransportError",
    "WeekYearValidationError",
    "WeeklyReviewInput",
    "WeeklyScoreInput",
    "WorkbookClient",
    "WorkbookConfig",
    "status_label",
]
