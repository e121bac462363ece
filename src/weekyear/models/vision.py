"""Long-term vision and strategic imperatives for a cycle."""

from __future__ import annotations

from weekyear.models._base import WorkbookModel


class VisionInput(WorkbookModel):
    """Input of ``vision.upsert``."""

    cycle_id: int
    long_term_vision: str | None = None
    strategic_imperatives: list[str] | None = None
    commitment_statement: str | None = None
