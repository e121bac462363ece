"""Client and auto-save configuration for weekyear."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from weekyear._constants import (
    BASE_URL,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_UNDO_WINDOW_MS,
    MAX_PENDING_CHANGES,
    OFFLINE_STORAGE_PREFIX,
    SAVED_DECAY_MS,
    SESSION_COOKIE_NAME,
)
from weekyear.exceptions import WeekYearConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env: Mapping[str, str], key: str, cast: type) -> Any:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        return cast(raw)
    except ValueError as exc:
        raise WeekYearConfigError(f"{key} must be a number, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class AutoSaveConfig:
    """Auto-save coordinator settings.

    Parameters
    ----------
    debounce_ms : int
        Quiet interval after the last observed change before a save fires.
    undo_window_ms : int
        How long after a confirmed save the previous value can be restored.
    storage_key : str
        Logical key of the offline queue. Coordinators with different keys
        never share queued changes.
    enabled : bool
        When false, observed changes are tracked but never auto-saved;
        ``save_now()`` and ``retry()`` still work.
    saved_decay_ms : int
        Delay before a ``saved`` status falls back to ``idle``.
    max_pending : int
        Number of queued offline changes kept per storage key.
    storage_prefix : str
        Prefix applied to ``storage_key`` in the key-value store.
    """

    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    undo_window_ms: int = DEFAULT_UNDO_WINDOW_MS
    storage_key: str = "default"
    enabled: bool = True
    saved_decay_ms: int = SAVED_DECAY_MS
    max_pending: int = MAX_PENDING_CHANGES
    storage_prefix: str = OFFLINE_STORAGE_PREFIX

    def __post_init__(self) -> None:
        if self.debounce_ms < 0:
            raise WeekYearConfigError(f"debounce_ms must be >= 0, got {self.debounce_ms}")
        if self.undo_window_ms < 0:
            raise WeekYearConfigError(f"undo_window_ms must be >= 0, got {self.undo_window_ms}")
        if self.saved_decay_ms < 0:
            raise WeekYearConfigError(f"saved_decay_ms must be >= 0, got {self.saved_decay_ms}")
        if self.max_pending < 1:
            raise WeekYearConfigError(f"max_pending must be >= 1, got {self.max_pending}")
        if not self.storage_key.strip():
            raise WeekYearConfigError("storage_key must be non-empty")

    @property
    def full_storage_key(self) -> str:
        return f"{self.storage_prefix}{self.storage_key}"

    @classmethod
    def from_env(cls, **overrides: Any) -> AutoSaveConfig:
        """Create auto-save settings from ``WEEKYEAR_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        kwargs: dict[str, Any] = {}

        debounce = _env_number(env, "WEEKYEAR_DEBOUNCE_MS", int)
        if debounce is not None:
            kwargs["debounce_ms"] = debounce

        undo_window = _env_number(env, "WEEKYEAR_UNDO_WINDOW_MS", int)
        if undo_window is not None:
            kwargs["undo_window_ms"] = undo_window

        storage_key = env.get("WEEKYEAR_STORAGE_KEY")
        if storage_key is not None:
            kwargs["storage_key"] = storage_key

        kwargs["enabled"] = _env_bool(env.get("WEEKYEAR_AUTOSAVE_ENABLED"), True)

        kwargs.update(overrides)
        return cls(**kwargs)


@dataclasses.dataclass(frozen=True)
class WorkbookConfig:
    """Workbook client configuration.

    Parameters
    ----------
    base_url : str
        Origin of the workbook web app; RPC calls go to ``{base_url}/api/trpc``.
    session_cookie : str or None
        Value of an already established session cookie. Logging in is
        handled by the web app, not by this library.
    session_cookie_name : str
        Name of the session cookie.
    request_timeout : float
        Total per-request timeout in seconds. Expiry is reported as
        :class:`~weekyear.exceptions.WeekYearOfflineError`.
    autosave : AutoSaveConfig
        Defaults for coordinators created through ``WorkbookClient.autosave``.
    """

    base_url: str = BASE_URL
    session_cookie: str | None = None
    session_cookie_name: str = SESSION_COOKIE_NAME
    request_timeout: float = 15.0
    autosave: AutoSaveConfig = dataclasses.field(default_factory=AutoSaveConfig)

    def __post_init__(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            raise WeekYearConfigError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        if self.request_timeout <= 0:
            raise WeekYearConfigError(f"request_timeout must be > 0, got {self.request_timeout}")
        # Normalise so endpoint joins never produce "//api".
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> WorkbookConfig:
        """Create configuration from environment variables.

        Reads ``WEEKYEAR_BASE_URL``, ``WEEKYEAR_SESSION_COOKIE``,
        ``WEEKYEAR_SESSION_COOKIE_NAME`` and ``WEEKYEAR_REQUEST_TIMEOUT``,
        plus the auto-save variables understood by
        :meth:`AutoSaveConfig.from_env`.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars. An
            ``autosave`` override may be an :class:`AutoSaveConfig` or a dict
            of its fields.

        Returns
        -------
        WorkbookConfig
            Populated configuration.
        """
        env = os.environ

        autosave_overrides = overrides.pop("autosave", None)
        if isinstance(autosave_overrides, AutoSaveConfig):
            autosave = autosave_overrides
        elif isinstance(autosave_overrides, dict):
            autosave = AutoSaveConfig.from_env(**autosave_overrides)
        else:
            autosave = AutoSaveConfig.from_env()

        _ENV_CONFIG_MAP = {
            "WEEKYEAR_BASE_URL": "base_url",
            "WEEKYEAR_SESSION_COOKIE": "session_cookie",
            "WEEKYEAR_SESSION_COOKIE_NAME": "session_cookie_name",
        }
        config_kwargs: dict[str, Any] = {"autosave": autosave}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout = _env_number(env, "WEEKYEAR_REQUEST_TIMEOUT", float)
        if timeout is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = timeout

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
