"""High-level async client for the 12 Week Year workbook API."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from datetime import datetime
from typing import Any, TypeVar

import aiohttp

from weekyear._constants import DAYS_PER_WEEK
from weekyear._transport import Transport, TrpcTransport
from weekyear.autosave.connectivity import ConnectivityMonitor
from weekyear.autosave.coordinator import AutoSaveCoordinator
from weekyear.autosave.status import SaveState
from weekyear.autosave.storage import KeyValueStore
from weekyear.config import WorkbookConfig
from weekyear.exceptions import WeekYearError
from weekyear.models.review import CycleReviewInput, ReviewType, WamRecordInput, WeeklyReviewInput
from weekyear.models.scorecard import Tactic, TacticEntry, TacticEntryInput, WeeklyScoreInput
from weekyear.models.vision import VisionInput
from weekyear.scorecard import entry_key, entry_map, execution_score, format_score, week_dates

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class WorkbookClient:
    """Async client for the workbook's RPC procedures.

    Usage::

        async with WorkbookClient(config) as client:
            review = await client.get_weekly_review(cycle_id, week)
            async with client.autosave(client.upsert_weekly_review, storage_key="review") as saver:
                saver.observe(initial)
                ...
    """

    def __init__(
        self,
        config: WorkbookConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        connectivity: ConnectivityMonitor | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._connectivity = connectivity or ConnectivityMonitor()

    @property
    def config(self) -> WorkbookConfig:
        return self._config

    @property
    def connectivity(self) -> ConnectivityMonitor:
        return self._connectivity

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> WorkbookClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = TrpcTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise WeekYearError("Client not initialized. Use 'async with WorkbookClient(...) as client:'")
        return self._transport

    async def query(self, procedure: str, payload: Mapping[str, Any] | None = None) -> Any:
        """Run any query procedure by name."""
        return await self._require_transport().query(procedure, payload)

    async def mutate(self, procedure: str, payload: Mapping[str, Any] | None = None) -> Any:
        """Run any mutation procedure by name."""
        return await self._require_transport().mutate(procedure, payload)

    async def check_connectivity(self) -> bool:
        """Probe the server and update :attr:`connectivity`."""
        if self._http_session is None:
            raise WeekYearError("Connectivity probing needs an HTTP session")
        return await self._connectivity.probe(
            self._http_session,
            self._config.base_url,
            timeout=self._config.request_timeout,
        )

    # ------------------------------------------------------------------
    # Vision
    # ------------------------------------------------------------------

    async def get_vision(self, cycle_id: int) -> dict[str, Any] | None:
        return await self._require_transport().query("vision.get", {"cycleId": cycle_id})

    async def upsert_vision(self, vision: VisionInput) -> None:
        await self._require_transport().mutate("vision.upsert", vision.to_input())

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    async def get_weekly_review(self, cycle_id: int, week_number: int) -> dict[str, Any] | None:
        return await self._require_transport().query(
            "weeklyReview.get",
            {"cycleId": cycle_id, "weekNumber": week_number},
        )

    async def upsert_weekly_review(self, review: WeeklyReviewInput) -> None:
        await self._require_transport().mutate("weeklyReview.upsert", review.to_input())

    async def get_cycle_review(self, cycle_id: int, review_type: ReviewType) -> dict[str, Any] | None:
        return await self._require_transport().query(
            "cycleReview.get",
            {"cycleId": cycle_id, "reviewType": ReviewType(review_type).value},
        )

    async def upsert_cycle_review(self, review: CycleReviewInput) -> None:
        await self._require_transport().mutate("cycleReview.upsert", review.to_input())

    async def upsert_wam_record(self, record: WamRecordInput) -> None:
        await self._require_transport().mutate("wam.upsert", record.to_input())

    # ------------------------------------------------------------------
    # Scorecard
    # ------------------------------------------------------------------

    async def get_weekly_score(self, cycle_id: int, week_number: int) -> dict[str, Any] | None:
        return await self._require_transport().query(
            "weeklyScore.get",
            {"cycleId": cycle_id, "weekNumber": week_number},
        )

    async def upsert_weekly_score(self, score: WeeklyScoreInput) -> None:
        await self._require_transport().mutate("weeklyScore.upsert", score.to_input())

    async def list_tactics_by_cycle(self, cycle_id: int) -> list[Tactic]:
        rows = await self._require_transport().query("tactic.listByCycle", {"cycleId": cycle_id})
        return [Tactic.model_validate(row) for row in rows or []]

    async def get_tactic_entries(self, cycle_id: int, week_number: int | None = None) -> dict[str, int]:
        """Load the scorecard grid for a cycle, optionally one week of it.

        Keys follow :func:`~weekyear.scorecard.entry_key`, the mapping
        :meth:`save_scorecard_week` accepts.
        """
        rows = await self._require_transport().query("tacticEntry.getAllForCycle", {"cycleId": cycle_id})
        return entry_map((TacticEntry.model_validate(row) for row in rows or []), week_number)

    async def upsert_tactic_entry(self, entry: TacticEntryInput) -> None:
        await self._require_transport().mutate("tacticEntry.upsert", entry.to_input())

    async def save_scorecard_week(
        self,
        *,
        cycle_id: int,
        cycle_start: datetime,
        week_number: int,
        tactics: Iterable[Tactic],
        entries: Mapping[str, int],
    ) -> float:
        """Persist a whole scorecard week and its execution score.

        Writes one entry per tactic and day (missing keys count as zero),
        then the week's score. Returns the score that was stored.
        """
        tactic_list = list(tactics)
        dates = week_dates(cycle_start, week_number)
        upserts = [
            TacticEntryInput(
                tactic_id=tactic.id,
                week_number=week_number,
                day_of_week=day,
                date=dates[day],
                completed=entries.get(entry_key(tactic.id, week_number, day), 0),
            )
            for tactic in tactic_list
            for day in range(DAYS_PER_WEEK)
        ]
        await asyncio.gather(*(self.upsert_tactic_entry(entry) for entry in upserts))

        score = execution_score(tactic_list, entries, week_number)
        await self.upsert_weekly_score(
            WeeklyScoreInput(
                cycle_id=cycle_id,
                week_number=week_number,
                execution_score=format_score(score),
            )
        )
        _logger.debug("Saved scorecard cycle=%d week=%d score=%.1f", cycle_id, week_number, score)
        return score

    # ------------------------------------------------------------------
    # Auto-save
    # ------------------------------------------------------------------

    def autosave(
        self,
        save: Callable[[T], Awaitable[Any]],
        *,
        storage_key: str,
        storage: KeyValueStore | None = None,
        payload_type: type[T] | None = None,
        on_change: Callable[[SaveState], None] | None = None,
        **overrides: Any,
    ) -> AutoSaveCoordinator[T]:
        """Create a coordinator sharing this client's connectivity signal.

        ``overrides`` replace fields of ``config.autosave`` (for example
        ``debounce_ms=1000``).
        """
        settings = dataclasses.replace(self._config.autosave, storage_key=storage_key, **overrides)

        async def _save(value: T) -> None:
            await save(value)

        return AutoSaveCoordinator(
            _save,
            config=settings,
            storage=storage,
            connectivity=self._connectivity,
            payload_type=payload_type,
            on_change=on_change,
        )
