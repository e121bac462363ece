from __future__ import annotations

import json
from pathlib import Path

import pytest

from weekyear.autosave.queue import OfflineQueue
from weekyear.autosave.storage import JsonFileStorage, KeyValueStore, MemoryStorage
from weekyear.exceptions import WeekYearStorageError
from weekyear.models.vision import VisionInput


def test_stored_layout_is_timestamped_json_array() -> None:
    storage = MemoryStorage()
    queue: OfflineQueue[dict[str, int]] = OfflineQueue(storage, "goals")

    queue.append({"a": 1}, 1_700_000_000_000)
    queue.append({"a": 2}, 1_700_000_000_500)

    raw = json.loads(storage.get_item("12wy_offline_goals") or "")
    assert raw == [
        {"timestamp": 1_700_000_000_000, "data": {"a": 1}},
        {"timestamp": 1_700_000_000_500, "data": {"a": 2}},
    ]


def test_append_trims_to_max_entries() -> None:
    queue: OfflineQueue[int] = OfflineQueue(MemoryStorage(), "k", max_entries=3)
    lengths = [queue.append(i, i) for i in range(6)]

    assert lengths == [1, 2, 3, 3, 3, 3]
    assert [entry.data for entry in queue.entries()] == [3, 4, 5]
    latest = queue.latest()
    assert latest is not None
    assert queue.decode(latest) == 5


def test_keys_do_not_interfere() -> None:
    storage = MemoryStorage()
    a: OfflineQueue[str] = OfflineQueue(storage, "a")
    b: OfflineQueue[str] = OfflineQueue(storage, "b")

    a.append("x", 1)
    b.append("y", 2)
    a.clear()

    assert len(a) == 0
    assert [entry.data for entry in b.entries()] == ["y"]


def test_corrupt_queue_is_treated_as_empty() -> None:
    storage = MemoryStorage({"12wy_offline_k": "{not json"})
    queue: OfflineQueue[int] = OfflineQueue(storage, "k")

    assert queue.entries() == []
    assert queue.latest() is None

    assert queue.append(7, 10) == 1
    assert [entry.data for entry in queue.entries()] == [7]


def test_payload_type_round_trip() -> None:
    queue: OfflineQueue[VisionInput] = OfflineQueue(MemoryStorage(), "vision", payload_type=VisionInput)
    vision = VisionInput(cycle_id=4, strategic_imperatives=["Ship", "Rest"])

    queue.append(vision, 1)
    latest = queue.latest()

    assert latest is not None
    assert latest.data == {
        "cycle_id": 4,
        "long_term_vision": None,
        "strategic_imperatives": ["Ship", "Rest"],
        "commitment_statement": None,
    }
    assert queue.decode(latest) == vision


def test_json_file_storage_persists_between_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "queue.json"
    first = JsonFileStorage(path)
    assert isinstance(first, KeyValueStore)

    OfflineQueue(first, "review").append({"notes": "offline edit"}, 42)

    second = JsonFileStorage(path)
    entries = OfflineQueue(second, "review").entries()
    assert [(e.timestamp, e.data) for e in entries] == [(42, {"notes": "offline edit"})]
    assert second.keys() == ["12wy_offline_review"]

    second.remove_item("12wy_offline_review")
    assert JsonFileStorage(path).get_item("12wy_offline_review") is None


def test_json_file_storage_ignores_garbage_file(tmp_path: Path) -> None:
    path = tmp_path / "queue.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    storage = JsonFileStorage(path)
    assert storage.get_item("anything") is None

    storage.set_item("k", "v")
    assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}


def test_json_file_storage_write_failure_raises_storage_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    storage = JsonFileStorage(blocker / "queue.json")

    with pytest.raises(WeekYearStorageError):
        storage.set_item("k", "v")
