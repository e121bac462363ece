from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from weekyear.models.scorecard import Tactic, TacticEntry
from weekyear.scorecard import (
    ScoreStatus,
    entry_key,
    entry_map,
    execution_score,
    format_score,
    score_status,
    tactic_week_total,
    week_dates,
)

CYCLE_START = datetime(2026, 1, 5, tzinfo=UTC)


def _tactics() -> list[Tactic]:
    return [
        Tactic(id=1, title="Write 500 words", weekly_target=3),
        Tactic(id=2, title="Call two prospects", weekly_target=2),
    ]


def test_week_dates_offsets_from_cycle_start() -> None:
    dates = week_dates(CYCLE_START, 3)
    assert len(dates) == 7
    assert dates[0] == CYCLE_START + timedelta(days=14)
    assert dates[-1] == CYCLE_START + timedelta(days=20)


@pytest.mark.parametrize("week", [0, 14])
def test_week_dates_rejects_out_of_range_week(week: int) -> None:
    with pytest.raises(ValueError):
        week_dates(CYCLE_START, week)


def test_tactic_week_total_only_counts_that_week() -> None:
    entries = {entry_key(1, 2, 0): 1, entry_key(1, 2, 6): 2, entry_key(1, 3, 0): 5}
    assert tactic_week_total(entries, 1, 2) == 3


def test_execution_score_caps_overachievement_per_tactic() -> None:
    entries = {
        entry_key(1, 1, 0): 2,
        entry_key(1, 1, 1): 4,  # 6 of 3, counts as 3
        entry_key(2, 1, 2): 1,
    }
    assert execution_score(_tactics(), entries, 1) == pytest.approx(80.0)


def test_execution_score_without_tactics_is_zero() -> None:
    assert execution_score([], {}, 1) == 0.0


@pytest.mark.parametrize(
    ("score", "expected"),
    [
        (100.0, ScoreStatus.ON_TARGET),
        (85.0, ScoreStatus.ON_TARGET),
        (84.9, ScoreStatus.BELOW_TARGET),
        (70.0, ScoreStatus.BELOW_TARGET),
        (69.9, ScoreStatus.CRITICAL),
        (0.0, ScoreStatus.CRITICAL),
    ],
)
def test_score_status_thresholds(score: float, expected: ScoreStatus) -> None:
    assert score_status(score) is expected


def test_format_score_one_decimal() -> None:
    assert format_score(200 / 3) == "66.7"
    assert format_score(80) == "80.0"


def test_entry_map_keys_rows_and_filters_week() -> None:
    rows = [
        TacticEntry(tactic_id=1, week_number=2, day_of_week=3, completed=4),
        TacticEntry(tactic_id=1, week_number=5, day_of_week=0, completed=1),
    ]
    assert entry_map(rows, 2) == {"1-2-3": 4}
    assert entry_map(rows) == {"1-2-3": 4, "1-5-0": 1}
