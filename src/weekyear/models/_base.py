"""Base model for workbook RPC inputs.

Inputs use Python names and travel as camelCase keys, matching the web
app's procedure schemas. Models are frozen so a value handed to an
auto-save coordinator cannot change behind its back; edit with
``model_copy(update=...)``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WorkbookModel(BaseModel):
    """Base for workbook procedure inputs."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
        validate_default=True,
        str_strip_whitespace=True,
    )

    def to_input(self) -> dict[str, Any]:
        """Return the procedure input with camelCase keys and unset fields omitted.

        Dates are kept as ``datetime``/``date`` objects; the transport tags
        them for the server's deserializer.
        """
        return self.model_dump(by_alias=True, exclude_none=True)
