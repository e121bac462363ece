"""Weekly reviews, cycle reviews and weekly accountability meetings."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import Field

from weekyear._constants import MAX_WEEK_NUMBER
from weekyear.models._base import WorkbookModel

__all__ = [
    "CycleReviewInput",
    "ReviewType",
    "WamRecordInput",
    "WeeklyReviewInput",
]


class ReviewType(StrEnum):
    """Which cycle review: the week-6 checkpoint or the week-13 wrap-up."""

    MID_CYCLE = "mid_cycle"
    FINAL = "final"


class WeeklyReviewInput(WorkbookModel):
    """Input of ``weeklyReview.upsert``."""

    cycle_id: int
    week_number: int = Field(ge=1, le=MAX_WEEK_NUMBER)
    what_worked_well: str | None = None
    what_did_not_work: str | None = None
    adjustments_for_next_week: str | None = None
    wam_completed: bool | None = None
    wam_notes: str | None = None


class CycleReviewInput(WorkbookModel):
    """Input of ``cycleReview.upsert``."""

    cycle_id: int
    review_type: ReviewType
    average_execution_score: str | None = None
    lag_indicator_progress: Any = None
    greatest_success: str | None = None
    biggest_obstacle: str | None = None
    most_effective_tactic: str | None = None
    pitfalls_encountered: str | None = None
    adjustments_for_next_cycle: str | None = None
    lessons_learned: str | None = None


class WamRecordInput(WorkbookModel):
    """Input of ``wam.upsert`` (weekly accountability meeting)."""

    cycle_id: int
    week_number: int = Field(ge=1, le=MAX_WEEK_NUMBER)
    partner_id: int | None = None
    meeting_date: datetime | None = None
    execution_score_shared: str | None = None
    wins_shared: str | None = None
    challenges_shared: str | None = None
    commitments_for_next_week: str | None = None
    partner_feedback: str | None = None
    completed: bool | None = None
