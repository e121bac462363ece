from __future__ import annotations

import pytest

from weekyear.config import AutoSaveConfig, WorkbookConfig
from weekyear.exceptions import WeekYearConfigError


def test_autosave_defaults() -> None:
    config = AutoSaveConfig()
    assert config.debounce_ms == 800
    assert config.undo_window_ms == 10_000
    assert config.max_pending == 5
    assert config.full_storage_key == "12wy_offline_default"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"debounce_ms": -1},
        {"undo_window_ms": -5},
        {"max_pending": 0},
        {"storage_key": "  "},
    ],
)
def test_autosave_rejects_invalid_values(kwargs: dict[str, object]) -> None:
    with pytest.raises(WeekYearConfigError):
        AutoSaveConfig(**kwargs)  # type: ignore[arg-type]


def test_autosave_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEEKYEAR_DEBOUNCE_MS", "250")
    monkeypatch.setenv("WEEKYEAR_STORAGE_KEY", "vision-3")
    monkeypatch.setenv("WEEKYEAR_AUTOSAVE_ENABLED", "off")

    config = AutoSaveConfig.from_env(undo_window_ms=3000)
    assert config.debounce_ms == 250
    assert config.undo_window_ms == 3000
    assert config.enabled is False
    assert config.full_storage_key == "12wy_offline_vision-3"


def test_autosave_from_env_rejects_non_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEEKYEAR_DEBOUNCE_MS", "soon")
    with pytest.raises(WeekYearConfigError, match="WEEKYEAR_DEBOUNCE_MS"):
        AutoSaveConfig.from_env()


def test_workbook_config_strips_trailing_slash() -> None:
    assert WorkbookConfig(base_url="https://workbook.example/").base_url == "https://workbook.example"


@pytest.mark.parametrize("kwargs", [{"base_url": "ftp://x"}, {"request_timeout": 0}])
def test_workbook_config_rejects_invalid_values(kwargs: dict[str, object]) -> None:
    with pytest.raises(WeekYearConfigError):
        WorkbookConfig(**kwargs)  # type: ignore[arg-type]


def test_workbook_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEEKYEAR_BASE_URL", "https://workbook.example")
    monkeypatch.setenv("WEEKYEAR_SESSION_COOKIE", "sess")
    monkeypatch.setenv("WEEKYEAR_REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("WEEKYEAR_DEBOUNCE_MS", "100")

    config = WorkbookConfig.from_env(autosave={"storage_key": "review"})
    assert config.base_url == "https://workbook.example"
    assert config.session_cookie == "sess"
    assert config.request_timeout == 2.5
    assert config.autosave.debounce_ms == 100
    assert config.autosave.storage_key == "review"


def test_workbook_config_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEEKYEAR_REQUEST_TIMEOUT", "2.5")
    config = WorkbookConfig.from_env(request_timeout=9.0, autosave=AutoSaveConfig(debounce_ms=1))
    assert config.request_timeout == 9.0
    assert config.autosave.debounce_ms == 1
