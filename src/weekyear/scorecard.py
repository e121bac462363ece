"""Weekly scorecard arithmetic.

Entries are kept the way the scorecard grid edits them: a flat mapping
from :func:`entry_key` to the number of completions that day. This
mapping is what a scorecard auto-save coordinator tracks.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta
from enum import StrEnum

from weekyear._constants import BELOW_TARGET_THRESHOLD, DAYS_PER_WEEK, MAX_WEEK_NUMBER, ON_TARGET_THRESHOLD
from weekyear.models.scorecard import Tactic, TacticEntry


class ScoreStatus(StrEnum):
    ON_TARGET = "on-target"
    BELOW_TARGET = "below-target"
    CRITICAL = "critical"


def _check_week(week_number: int) -> None:
    if not 1 <= week_number <= MAX_WEEK_NUMBER:
        raise ValueError(f"week_number must be between 1 and {MAX_WEEK_NUMBER}, got {week_number}")


def week_dates(cycle_start: datetime, week_number: int) -> list[datetime]:
    """Return the seven dates of *week_number* (1-based) in the cycle."""
    _check_week(week_number)
    week_start = cycle_start + timedelta(days=(week_number - 1) * DAYS_PER_WEEK)
    return [week_start + timedelta(days=day) for day in range(DAYS_PER_WEEK)]


def entry_key(tactic_id: int, week_number: int, day_of_week: int) -> str:
    return f"{tactic_id}-{week_number}-{day_of_week}"


def entry_map(rows: Iterable[TacticEntry], week_number: int | None = None) -> dict[str, int]:
    """Build the scorecard grid mapping from stored entry rows.

    Rows outside *week_number* are skipped when it is given.
    """
    return {
        entry_key(row.tactic_id, row.week_number, row.day_of_week): row.completed
        for row in rows
        if week_number is None or row.week_number == week_number
    }


def tactic_week_total(entries: Mapping[str, int], tactic_id: int, week_number: int) -> int:
    """Sum a tactic's completions over the seven days of a week."""
    return sum(entries.get(entry_key(tactic_id, week_number, day), 0) for day in range(DAYS_PER_WEEK))


def execution_score(tactics: Iterable[Tactic], entries: Mapping[str, int], week_number: int) -> float:
    """Percentage of the week's planned tactic executions that were done.

    Completions beyond a tactic's weekly target do not make up for another
    tactic falling short.
    """
    total_completed = 0
    total_target = 0
    for tactic in tactics:
        total_target += tactic.weekly_target
        total_completed += min(tactic_week_total(entries, tactic.id, week_number), tactic.weekly_target)
    if total_target <= 0:
        return 0.0
    return total_completed / total_target * 100


def score_status(score: float) -> ScoreStatus:
    if score >= ON_TARGET_THRESHOLD:
        return ScoreStatus.ON_TARGET
    if score >= BELOW_TARGET_THRESHOLD:
        return ScoreStatus.BELOW_TARGET
    return ScoreStatus.CRITICAL


def format_score(score: float) -> str:
    """One-decimal string, the form stored in weekly score rows."""
    return f"{score:.1f}"
