"""Generation history tracking."""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from modules.errors import PersistenceError

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class HistoryEntry:
    """One past successful generation."""

    id: str
    prompt: str
    image_url: str
    created_at: int  # epoch milliseconds

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "prompt": self.prompt,
            "imageUrl": self.image_url,
            "timestamp": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            id=str(data["id"]),
            prompt=str(data.get("prompt", "")),
            image_url=str(data["imageUrl"]),
            created_at=int(data.get("timestamp", 0)),
        )


class KeyValueStore:
    """Minimal string key-value store backing the history."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Process-local store, mainly for tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """Keys and values kept in a single JSON object on disk.

    Every write rewrites the whole file; concurrent writers are last-writer-wins.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Could not read {self.path}: {exc}") from exc
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise PersistenceError(f"Could not write {self.path}: {exc}") from exc

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


class GenerationHistoryService:
    """Newest-first history of generations persisted to a key-value store.

    The sequence is read once on construction and rewritten wholesale on every
    mutation. A failed write is recorded in ``warnings`` and reported through
    the return value; the in-memory list keeps the mutation either way.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = "arty-ai-history",
        id_prefix: str = "arty-ai",
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.store = store
        self.key = key
        self.id_prefix = id_prefix
        self._clock = clock or time.time
        self.warnings: list[str] = []
        self._entries: List[HistoryEntry] = self._load()

    def _load(self) -> List[HistoryEntry]:
        try:
            raw = self.store.get(self.key)
        except PersistenceError as exc:
            self._warn(f"Failed to load history: {exc}")
            return []
        if not raw:
            return []
        try:
            items = json.loads(raw)
            return [HistoryEntry.from_dict(item) for item in items]
        except (ValueError, TypeError, KeyError) as exc:
            self._warn(f"Failed to load history: {exc}")
            return []

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def _persist(self) -> bool:
        payload = json.dumps([entry.to_dict() for entry in self._entries], ensure_ascii=False)
        try:
            self.store.set(self.key, payload)
        except PersistenceError as exc:
            self._warn(f"Failed to save history: {exc}")
            return False
        return True

    def new_entry(self, prompt: str, image_url: str) -> HistoryEntry:
        """Create an entry with a unique time-derived id."""
        created_at = int(self._clock() * 1000)
        existing = {entry.id for entry in self._entries}
        entry_id = f"{self.id_prefix}-{created_at}"
        suffix = 1
        while entry_id in existing:
            entry_id = f"{self.id_prefix}-{created_at}-{suffix}"
            suffix += 1
        return HistoryEntry(id=entry_id, prompt=prompt, image_url=image_url, created_at=created_at)

    def append(self, entry: HistoryEntry) -> bool:
        """Put an entry at the front and persist; False when the write failed."""
        self._entries.insert(0, entry)
        return self._persist()

    def record(self, prompt: str, image_url: str) -> HistoryEntry:
        """Create and append an entry for a successful generation."""
        entry = self.new_entry(prompt, image_url)
        self.append(entry)
        return entry

    def list(self, limit: Optional[int] = None) -> List[HistoryEntry]:
        """Return entries newest first."""
        entries = list(self._entries)
        return entries if limit is None else entries[:limit]

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        return next((entry for entry in self._entries if entry.id == entry_id), None)

    def remove(self, entry_id: str) -> bool:
        """Drop the entry with ``entry_id``; absent ids are a no-op."""
        remaining = [entry for entry in self._entries if entry.id != entry_id]
        if len(remaining) == len(self._entries):
            return True
        self._entries = remaining
        return self._persist()

    def clear(self) -> bool:
        self._entries = []
        return self._persist()
