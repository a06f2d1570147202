"""GenerationHistoryService unit tests."""

from __future__ import annotations

import json

from modules.errors import PersistenceError
from modules.services.history_service import (
    GenerationHistoryService,
    HistoryEntry,
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
)

KEY = "arty-ai-history"


class Clock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        self.now += 1
        return self.now


class FailingStore(MemoryStore):
    """Store whose writes fail, like a full quota."""

    def __init__(self, initial=None) -> None:
        super().__init__(initial)
        self.fail = True

    def set(self, key: str, value: str) -> None:
        if self.fail:
            raise PersistenceError("quota exceeded")
        super().set(key, value)


def build_history(store: KeyValueStore | None = None) -> GenerationHistoryService:
    return GenerationHistoryService(store or MemoryStore(), key=KEY, clock=Clock())


def test_append_puts_newest_first():
    history = build_history()

    older = history.record("first", "https://example.test/1.png")
    newer = history.record("second", "https://example.test/2.png")

    assert history.list() == [newer, older]
    assert history.list(limit=1) == [newer]


def test_entry_ids_are_time_derived_and_unique():
    history = GenerationHistoryService(MemoryStore(), clock=lambda: 1_700_000_000.0)

    first = history.record("a", "u1")
    second = history.record("b", "u2")

    assert first.id == "arty-ai-1700000000000"
    assert second.id == "arty-ai-1700000000000-1"
    assert first.created_at == 1_700_000_000_000


def test_remove_and_missing_id():
    store = MemoryStore()
    history = build_history(store)
    keep = history.record("keep", "u1")
    drop = history.record("drop", "u2")

    assert history.remove(drop.id) is True
    assert drop.id not in [entry.id for entry in history.list()]
    assert history.remove("does-not-exist") is True
    assert history.list() == [keep]
    assert [item["id"] for item in json.loads(store.get(KEY))] == [keep.id]


def test_clear_persists_empty_list():
    store = MemoryStore()
    history = build_history(store)
    history.record("a", "u1")

    assert history.clear() is True
    assert history.list() == []
    assert json.loads(store.get(KEY)) == []


def test_fresh_load_round_trips(tmp_path):
    path = tmp_path / "history.json"
    history = build_history(JsonFileStore(path))
    history.record("a", "u1")
    history.record("b", "u2")
    history.record("c", "u3")
    history.remove(history.list()[1].id)

    reloaded = build_history(JsonFileStore(path))

    assert reloaded.list() == history.list()
    assert [entry.prompt for entry in reloaded.list()] == ["c", "a"]


def test_persisted_format_matches_browser_history():
    store = MemoryStore()
    history = build_history(store)
    entry = history.record("fox", "https://example.test/fox.png")

    assert json.loads(store.get(KEY)) == [
        {"id": entry.id, "prompt": "fox", "imageUrl": "https://example.test/fox.png", "timestamp": entry.created_at}
    ]


def test_write_failure_is_soft_and_memory_keeps_mutation():
    store = FailingStore()
    history = build_history(store)

    entry = history.new_entry("fox", "u1")
    assert history.append(entry) is False
    assert history.list() == [entry]
    assert history.warnings and "quota exceeded" in history.warnings[-1]
    assert store.get(KEY) is None

    store.fail = False
    assert history.clear() is True
    assert json.loads(store.get(KEY)) == []


def test_corrupt_store_starts_empty():
    history = build_history(MemoryStore({KEY: "not json"}))

    assert history.list() == []
    assert history.warnings


def test_json_file_store_unreadable_file(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("{broken", encoding="utf-8")

    history = build_history(JsonFileStore(path))

    assert history.list() == []
    assert "Failed to load history" in history.warnings[0]


def test_json_file_store_keeps_other_keys(tmp_path):
    store = JsonFileStore(tmp_path / "nested" / "state.json")
    store.set("other", "value")
    store.set(KEY, "[]")
    store.delete("other")

    assert store.get("other") is None
    assert store.get(KEY) == "[]"


def test_history_entry_from_dict():
    entry = HistoryEntry.from_dict({"id": "x", "prompt": "p", "imageUrl": "u", "timestamp": 5})

    assert entry == HistoryEntry(id="x", prompt="p", image_url="u", created_at=5)
