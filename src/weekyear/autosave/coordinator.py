"""Debounced auto-save coordinator.

One coordinator tracks one edited value and persists it through an
injected ``save`` coroutine function:

* bursts of :meth:`AutoSaveCoordinator.observe` calls collapse into a
  single save once the value has been quiet for ``debounce_ms``;
* values equal to the last confirmed save are never sent;
* while offline the value goes to a durable queue whose newest entry is
  replayed when connectivity returns;
* after each confirmed online save the previous value can be restored
  for ``undo_window_ms``.

The coordinator is single-threaded: it must be driven from the event
loop it first runs on, and at most one ``save`` call is outstanding at a
time. Failures raised by ``save`` never propagate out of it; they become
status transitions.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import math
from collections.abc import Awaitable, Callable, Coroutine
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from weekyear._constants import UNDO_TICK_MS
from weekyear.autosave.connectivity import ConnectivityMonitor
from weekyear.autosave.queue import OfflineQueue
from weekyear.autosave.status import SaveState, SaveStatus
from weekyear.autosave.storage import KeyValueStore, MemoryStorage
from weekyear.config import AutoSaveConfig
from weekyear.exceptions import WeekYearOfflineError, WeekYearStorageError

_logger = logging.getLogger(__name__)

T = TypeVar("T")

# Distinguishes "no value yet" from a legitimately saved ``None``.
_MISSING: Any = object()

# Errors the queue can raise while encoding, storing or decoding payloads.
_QUEUE_ERRORS = (WeekYearStorageError, ValidationError, TypeError, ValueError)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AutoSaveCoordinator(Generic[T]):
    """Persist a continuously changing value with debounce, offline queue and undo.

    Parameters
    ----------
    save : callable
        ``async def save(value) -> None``. Any exception counts as a failed
        save.
    config : AutoSaveConfig, optional
        Timing, storage key and enable flag.
    storage : KeyValueStore, optional
        Durable store for the offline queue. Defaults to a private
        :class:`MemoryStorage`.
    connectivity : ConnectivityMonitor, optional
        Online/offline signal. Defaults to an always-online monitor.
    payload_type : type, optional
        Type used to round-trip queued payloads through JSON.
    is_connectivity_error : callable, optional
        Extra predicate marking ``save`` exceptions as network loss.
        :class:`~weekyear.exceptions.WeekYearOfflineError` always is.
    on_change : callable, optional
        Called with the new :class:`SaveState` after every transition.
    clock : callable, optional
        Returns the current aware datetime.
    """

    def __init__(
        self,
        save: Callable[[T], Awaitable[None]],
        *,
        config: AutoSaveConfig | None = None,
        storage: KeyValueStore | None = None,
        connectivity: ConnectivityMonitor | None = None,
        payload_type: type[T] | None = None,
        is_connectivity_error: Callable[[BaseException], bool] | None = None,
        on_change: Callable[[SaveState], None] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._save = save
        self._config = config or AutoSaveConfig()
        self._queue: OfflineQueue[T] = OfflineQueue(
            storage if storage is not None else MemoryStorage(),
            self._config.storage_key,
            max_entries=self._config.max_pending,
            prefix=self._config.storage_prefix,
            payload_type=payload_type,
        )
        self._connectivity = connectivity or ConnectivityMonitor()
        self._is_connectivity_error = is_connectivity_error
        self._on_change = on_change
        self._clock = clock

        self._loop: asyncio.AbstractEventLoop | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._decay_handle: asyncio.TimerHandle | None = None
        self._undo_tick_handle: asyncio.TimerHandle | None = None
        self._undo_expiry_handle: asyncio.TimerHandle | None = None

        self._current: Any = _MISSING
        self._baseline: Any = _MISSING
        self._undo_snapshot: Any = _MISSING
        self._saving = False
        self._closed = False

        try:
            pending = len(self._queue)
        except WeekYearStorageError:
            _logger.warning("Cannot read offline queue %s", self._queue.key, exc_info=True)
            pending = 0

        self._state = SaveState(
            is_offline=not self._connectivity.online,
            pending_changes=pending,
        )
        self._unsubscribe = self._connectivity.subscribe(self._on_connectivity)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> SaveState:
        return self._state

    @property
    def status(self) -> SaveStatus:
        return self._state.status

    @property
    def can_undo(self) -> bool:
        return self._state.can_undo

    @property
    def pending_changes(self) -> int:
        return self._state.pending_changes

    @property
    def is_saving(self) -> bool:
        return self._saving

    @property
    def baseline(self) -> T | None:
        """Last value known to be durably saved (the first observed value initially)."""
        return None if self._baseline is _MISSING else self._baseline

    @property
    def storage_key(self) -> str:
        return self._queue.key

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def observe(self, value: T) -> None:
        """Record a new value and (re)start the debounce timer.

        The first call only establishes the baseline.
        """
        if self._closed:
            return
        if self._current is _MISSING:
            self._current = value
            self._baseline = copy.deepcopy(value)
            return

        self._current = value
        if not self._config.enabled:
            return
        self._cancel_debounce()
        self._debounce_handle = self._event_loop().call_later(
            self._config.debounce_ms / 1000,
            self._on_debounce,
        )

    async def save_now(self) -> None:
        """Cancel a pending debounce and save the current value immediately."""
        self._cancel_debounce()
        await self._perform_save()

    async def retry(self) -> None:
        """Flush the offline queue when possible, otherwise save the current value."""
        if self._state.pending_changes > 0 and self._connectivity.online:
            await self._flush_offline_queue()
        else:
            await self._perform_save()

    async def undo(self) -> None:
        """Re-save the value that preceded the last confirmed save.

        A no-op outside the undo window or while another save is in flight.
        The snapshot is consumed whatever the outcome.
        """
        if not self._state.can_undo or self._undo_snapshot is _MISSING or self._saving:
            return

        snapshot = self._undo_snapshot
        self._clear_undo()

        self._saving = True
        self._set(status=SaveStatus.SAVING, error=None)
        try:
            await self._save(snapshot)
        except Exception as exc:
            _logger.warning("Undo failed for %s: %s", self._queue.key, exc)
            self._set(status=SaveStatus.ERROR, error=exc)
        else:
            self._current = snapshot
            self._mark_saved(snapshot)
        finally:
            self._saving = False

    def close(self) -> None:
        """Cancel every timer and stop listening for connectivity changes.

        A save that is already running completes; use :meth:`drain` to
        wait for it.
        """
        if self._closed:
            return
        self._closed = True
        self._unsubscribe()
        self._cancel_debounce()
        self._cancel_handle(self._decay_handle)
        self._decay_handle = None
        self._clear_undo()

    async def drain(self) -> None:
        """Wait until background save attempts have finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def __aenter__(self) -> AutoSaveCoordinator[T]:
        self._event_loop()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.close()
        await self.drain()

    # ------------------------------------------------------------------
    # Save paths
    # ------------------------------------------------------------------

    async def _perform_save(self) -> None:
        if self._saving or self._current is _MISSING:
            return

        value = self._current
        if value == self._baseline:
            return

        if not self._connectivity.online:
            self._queue_offline(value)
            return

        self._saving = True
        undo_candidate = copy.deepcopy(self._baseline)
        self._set(status=SaveStatus.SAVING, error=None)
        try:
            await self._save(value)
        except Exception as exc:
            # A failed attempt discards the undo candidate and any live window.
            self._clear_undo()
            if self._is_offline_failure(exc):
                _logger.debug("Save for %s failed while offline; queueing", self._queue.key)
                self._queue_offline(value)
            else:
                _logger.warning("Auto-save failed for %s: %s", self._queue.key, exc)
                self._set(status=SaveStatus.ERROR, error=exc)
        else:
            self._mark_saved(value, undo_candidate=undo_candidate)
            if self._state.pending_changes > 0:
                self._clear_queue()
        finally:
            self._saving = False

    async def _flush_offline_queue(self) -> None:
        if self._saving or not self._connectivity.online:
            return

        try:
            entry = self._queue.latest()
            if entry is None:
                self._set(pending_changes=0)
                return
            payload = self._queue.decode(entry)
        except _QUEUE_ERRORS as exc:
            _logger.warning("Cannot load offline queue %s", self._queue.key, exc_info=True)
            self._set(status=SaveStatus.ERROR, error=exc)
            return

        self._saving = True
        self._set(status=SaveStatus.SYNCING, error=None)
        _logger.debug("Syncing offline change key=%s queued_at=%d", self._queue.key, entry.timestamp)
        try:
            await self._save(payload)
        except Exception as exc:
            _logger.warning("Offline sync failed for %s: %s", self._queue.key, exc)
            self._set(status=SaveStatus.ERROR, error=exc)
        else:
            self._clear_queue()
            self._mark_saved(payload)
        finally:
            self._saving = False

    def _mark_saved(self, value: Any, *, undo_candidate: Any = _MISSING) -> None:
        """Adopt *value* as the confirmed baseline.

        Opens a new undo window when *undo_candidate* is given and closes
        any live one otherwise.
        """
        self._baseline = copy.deepcopy(value)
        self._set(status=SaveStatus.SAVED, last_saved=self._clock())
        if undo_candidate is _MISSING:
            self._clear_undo()
        else:
            self._start_undo_window(undo_candidate)
        self._arm_decay()

    def _queue_offline(self, value: T) -> None:
        now_ms = int(self._clock().timestamp() * 1000)
        try:
            pending = self._queue.append(value, now_ms)
        except _QUEUE_ERRORS as exc:
            _logger.warning("Cannot queue offline change for %s", self._queue.key, exc_info=True)
            self._set(status=SaveStatus.ERROR, error=exc)
            return
        self._set(status=SaveStatus.OFFLINE, pending_changes=pending)

    def _clear_queue(self) -> None:
        try:
            self._queue.clear()
        except WeekYearStorageError:
            _logger.warning("Cannot clear offline queue %s", self._queue.key, exc_info=True)
            return
        self._set(pending_changes=0)

    def _is_offline_failure(self, exc: BaseException) -> bool:
        if not self._connectivity.online:
            return True
        if isinstance(exc, WeekYearOfflineError):
            return True
        return self._is_connectivity_error is not None and self._is_connectivity_error(exc)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _event_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = self._event_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @staticmethod
    def _cancel_handle(handle: asyncio.TimerHandle | None) -> None:
        if handle is not None:
            handle.cancel()

    def _cancel_debounce(self) -> None:
        self._cancel_handle(self._debounce_handle)
        self._debounce_handle = None

    def _on_debounce(self) -> None:
        self._debounce_handle = None
        self._spawn(self._perform_save())

    def _arm_decay(self) -> None:
        self._cancel_handle(self._decay_handle)
        self._decay_handle = None
        if self._closed:
            return
        self._decay_handle = self._event_loop().call_later(
            self._config.saved_decay_ms / 1000,
            self._on_decay,
        )

    def _on_decay(self) -> None:
        self._decay_handle = None
        if self._state.status == SaveStatus.SAVED:
            self._set(status=SaveStatus.IDLE)

    def _start_undo_window(self, snapshot: Any) -> None:
        self._clear_undo()
        if self._closed or self._config.undo_window_ms <= 0 or snapshot is _MISSING:
            return
        self._undo_snapshot = snapshot
        self._set(can_undo=True, undo_countdown=math.ceil(self._config.undo_window_ms / 1000))
        loop = self._event_loop()
        self._undo_tick_handle = loop.call_later(UNDO_TICK_MS / 1000, self._on_undo_tick)
        self._undo_expiry_handle = loop.call_later(self._config.undo_window_ms / 1000, self._clear_undo)

    def _on_undo_tick(self) -> None:
        self._undo_tick_handle = None
        remaining = self._state.undo_countdown - 1
        if remaining <= 0:
            self._clear_undo()
            return
        self._set(undo_countdown=remaining)
        self._undo_tick_handle = self._event_loop().call_later(UNDO_TICK_MS / 1000, self._on_undo_tick)

    def _clear_undo(self) -> None:
        self._cancel_handle(self._undo_tick_handle)
        self._cancel_handle(self._undo_expiry_handle)
        self._undo_tick_handle = None
        self._undo_expiry_handle = None
        self._undo_snapshot = _MISSING
        self._set(can_undo=False, undo_countdown=0)

    # ------------------------------------------------------------------
    # Connectivity and state
    # ------------------------------------------------------------------

    def _on_connectivity(self, online: bool) -> None:
        if not online:
            self._set(status=SaveStatus.OFFLINE, is_offline=True)
            return

        self._set(is_offline=False)
        if self._state.pending_changes > 0:
            try:
                self._event_loop()
            except RuntimeError:
                _logger.debug("No running loop; offline queue %s waits for retry()", self._queue.key)
                return
            self._spawn(self._flush_offline_queue())
        elif self._state.status == SaveStatus.OFFLINE:
            self._set(status=SaveStatus.IDLE)

    def _set(self, **changes: Any) -> None:
        updated = self._state.model_copy(update=changes)
        if updated == self._state:
            return
        self._state = updated
        if self._on_change is None:
            return
        try:
            self._on_change(updated)
        except Exception:
            _logger.debug("on_change callback failed", exc_info=True)
