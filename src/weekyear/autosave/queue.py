"""Offline queue of changes made while the server was unreachable.

Stored per key as a JSON array of ``{"timestamp": <epoch ms>, "data": ...}``
in insertion order. Only the newest entry is ever replayed; older entries
are kept as a short history and dropped once the cap is reached.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from weekyear._constants import MAX_PENDING_CHANGES, OFFLINE_STORAGE_PREFIX
from weekyear.autosave.storage import KeyValueStore

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class PendingChange(BaseModel):
    """A single queued payload."""

    model_config = ConfigDict(frozen=True)

    timestamp: int
    data: Any


_ENTRIES = TypeAdapter(list[PendingChange])


class OfflineQueue(Generic[T]):
    """Bounded, storage-backed queue of pending payloads for one key.

    Parameters
    ----------
    storage : KeyValueStore
        Durable store shared with other queues.
    storage_key : str
        Logical key; the stored key is ``prefix + storage_key``.
    max_entries : int
        Number of most recent entries kept.
    payload_type : type, optional
        When given, payloads are dumped to JSON-compatible data on append
        and validated back into this type by :meth:`latest`.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        storage_key: str,
        *,
        max_entries: int = MAX_PENDING_CHANGES,
        prefix: str = OFFLINE_STORAGE_PREFIX,
        payload_type: type[T] | None = None,
    ) -> None:
        self._storage = storage
        self._key = f"{prefix}{storage_key}"
        self._max_entries = max_entries
        self._adapter: TypeAdapter[T] | None = TypeAdapter(payload_type) if payload_type is not None else None

    @property
    def key(self) -> str:
        return self._key

    def entries(self) -> list[PendingChange]:
        """Return stored entries, oldest first.

        Unparseable content is logged and treated as an empty queue; it can
        never be replayed anyway and is overwritten by the next append.
        """
        stored = self._storage.get_item(self._key)
        if not stored:
            return []
        try:
            return _ENTRIES.validate_json(stored)
        except ValidationError:
            _logger.warning("Discarding unreadable offline queue %s", self._key, exc_info=True)
            return []

    def __len__(self) -> int:
        return len(self.entries())

    def append(self, data: T, timestamp_ms: int) -> int:
        """Queue *data* and return the resulting queue length."""
        payload = self._adapter.dump_python(data, mode="json") if self._adapter is not None else data
        queue = self.entries()
        queue.append(PendingChange(timestamp=timestamp_ms, data=payload))
        trimmed = queue[-self._max_entries :]
        self._storage.set_item(
            self._key,
            json.dumps([entry.model_dump(mode="json") for entry in trimmed], separators=(",", ":")),
        )
        _logger.debug("Queued offline change key=%s pending=%d", self._key, len(trimmed))
        return len(trimmed)

    def latest(self) -> PendingChange | None:
        """Return the newest entry, or ``None`` when the queue is empty."""
        queue = self.entries()
        return queue[-1] if queue else None

    def decode(self, entry: PendingChange) -> T:
        """Rebuild the payload of *entry*, validating it when a type is set."""
        if self._adapter is not None:
            return self._adapter.validate_python(entry.data)
        return entry.data  # type: ignore[no-any-return]

    def clear(self) -> None:
        self._storage.remove_item(self._key)
