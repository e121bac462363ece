"""Data models for workbook RPC inputs."""

from weekyear.models._base import WorkbookModel
from weekyear.models.review import CycleReviewInput, ReviewType, WamRecordInput, WeeklyReviewInput
from weekyear.models.scorecard import Tactic, TacticEntry, TacticEntryInput, WeeklyScoreInput
from weekyear.models.vision import VisionInput

__all__ = [
    "CycleReviewInput",
    "ReviewType",
    "Tactic",
    "TacticEntry",
    "TacticEntryInput",
    "VisionInput",
    "WamRecordInput",
    "WeeklyReviewInput",
    "WeeklyScoreInput",
    "WorkbookModel",
]
