"""Tests for workbook procedure input models."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from weekyear.models.review import CycleReviewInput, ReviewType, WeeklyReviewInput
from weekyear.models.scorecard import Tactic, TacticEntryInput
from weekyear.models.vision import VisionInput


class TestToInput:
    def test_camel_case_keys_and_unset_fields_dropped(self) -> None:
        review = WeeklyReviewInput(cycle_id=2, week_number=5, what_did_not_work="late starts")
        assert review.to_input() == {
            "cycleId": 2,
            "weekNumber": 5,
            "whatDidNotWork": "late starts",
        }

    def test_accepts_camel_case_input(self) -> None:
        vision = VisionInput.model_validate({"cycleId": 1, "strategicImperatives": ["health", "craft"]})
        assert vision.strategic_imperatives == ["health", "craft"]

    def test_dates_stay_datetime(self) -> None:
        when = datetime(2026, 1, 5, tzinfo=UTC)
        entry = TacticEntryInput(tactic_id=1, week_number=1, day_of_week=0, date=when, completed=2)
        assert entry.to_input()["date"] is when

    def test_enum_value_serialized(self) -> None:
        review = CycleReviewInput(cycle_id=1, review_type="final")
        assert review.review_type is ReviewType.FINAL
        assert review.to_input() == {"cycleId": 1, "reviewType": ReviewType.FINAL}


class TestValidation:
    @pytest.mark.parametrize("week", [0, 14])
    def test_week_number_bounds(self, week: int) -> None:
        with pytest.raises(ValidationError):
            WeeklyReviewInput(cycle_id=1, week_number=week)

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            VisionInput.model_validate({"cycleId": 1, "mission": "x"})

    def test_tactic_ignores_extra_row_columns(self) -> None:
        tactic = Tactic.model_validate(
            {"id": 7, "goalId": 3, "title": "Write", "weeklyTarget": 5, "createdAt": "2026-01-01"}
        )
        assert tactic.weekly_target == 5

    def test_models_are_frozen(self) -> None:
        review = WeeklyReviewInput(cycle_id=1, week_number=1)
        with pytest.raises(ValidationError):
            review.week_number = 2  # type: ignore[misc]
        assert review.model_copy(update={"wam_completed": True}).wam_completed is True

    def test_strings_stripped(self) -> None:
        review = WeeklyReviewInput(cycle_id=1, week_number=1, wam_notes="  met Tue  ")
        assert review.wam_notes == "met Tue"
