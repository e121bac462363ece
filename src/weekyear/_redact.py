"""Helpers for safe debug logging.

Auto-saved payloads are free-form journal text and requests carry a
session cookie. Everything that reaches a DEBUG log goes through
:func:`redact_for_log` first.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "cookie",
        "authorization",
        "password",
        "token",
        "session",
        "app_session_id",
    }
)


def redact_for_log(value: Any, *, max_string: int = 120, _depth: int = 0) -> Any:
    """Return a copy of *value* with secrets masked and long text clipped."""
    if _depth > 12:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<{len(value)} chars>"
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        return {
            str(k): "<redacted>"
            if str(k).lower() in _SENSITIVE_VALUE_KEYS
            else redact_for_log(v, max_string=max_string, _depth=_depth + 1)
            for k, v in value.items()
        }

    if isinstance(value, Sequence):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    dump = getattr(value, "model_dump", None)
    if callable(dump):
        return redact_for_log(dump(mode="json"), max_string=max_string, _depth=_depth + 1)

    return f"<{type(value).__name__}>"
