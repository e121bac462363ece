"""Tactics, daily tactic entries and weekly execution scores."""

from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict, Field

from weekyear._constants import DAYS_PER_WEEK, MAX_WEEK_NUMBER
from weekyear.models._base import WorkbookModel

__all__ = [
    "Tactic",
    "TacticEntry",
    "TacticEntryInput",
    "WeeklyScoreInput",
]


class Tactic(WorkbookModel):
    """The slice of a tactic the scorecard needs.

    Built from ``tactic.listByCycle`` rows, which carry more columns than
    are modelled here.
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str = ""
    weekly_target: int = Field(ge=1)
    total_target: int | None = None
    measurement_unit: str | None = None


class TacticEntry(WorkbookModel):
    """A stored ``tacticEntries`` row as returned by ``tacticEntry.getAllForCycle``."""

    model_config = ConfigDict(extra="ignore")

    tactic_id: int
    week_number: int
    day_of_week: int
    completed: int = 0
    date: datetime | None = None
    notes: str | None = None


class TacticEntryInput(WorkbookModel):
    """Input of ``tacticEntry.upsert``: completions of one tactic on one day."""

    tactic_id: int
    week_number: int = Field(ge=1, le=MAX_WEEK_NUMBER)
    day_of_week: int = Field(ge=0, le=DAYS_PER_WEEK - 1)
    date: datetime
    completed: int = Field(ge=0)
    notes: str | None = None


class WeeklyScoreInput(WorkbookModel):
    """Input of ``weeklyScore.upsert``.

    ``execution_score`` is a decimal string (``"87.5"``), the format the
    server stores.
    """

    cycle_id: int
    week_number: int = Field(ge=1, le=MAX_WEEK_NUMBER)
    execution_score: str
    strategic_blocks_planned: int | None = None
    strategic_blocks_completed: int | None = None
    buffer_blocks_planned: int | None = None
    buffer_blocks_completed: int | None = None
    breakout_blocks_planned: int | None = None
    breakout_blocks_completed: int | None = None
