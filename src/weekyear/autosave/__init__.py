"""Auto-save layer.

Debounced persistence of a continuously edited value, with an offline
queue for changes made while the server is unreachable and a short undo
window after each confirmed save.
"""

from weekyear.autosave.connectivity import ConnectivityMonitor
from weekyear.autosave.coordinator import AutoSaveCoordinator
from weekyear.autosave.queue import OfflineQueue, PendingChange
from weekyear.autosave.status import SaveState, SaveStatus, status_label
from weekyear.autosave.storage import JsonFileStorage, KeyValueStore, MemoryStorage

__all__ = [
    "AutoSaveCoordinator",
    "ConnectivityMonitor",
    "JsonFileStorage",
    "KeyValueStore",
    "MemoryStorage",
    "OfflineQueue",
    "PendingChange",
    "SaveState",
    "SaveStatus",
    "status_label",
]
