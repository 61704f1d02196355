"""Record store for Cadence: four JSON-array collections over a key/value backend.

The store is pure read/write with light filtering and sorting. It does not
enforce references between collections; the engines in cadence.habits and
cadence.timers own that.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Protocol, TypeVar

from cadence.fileio import read_text, write_text_atomic
from cadence.models import CompletionRecord, Habit, PostponeRecord, TimerSession
from cadence.workspace import collection_path, workspace_root

logger = logging.getLogger(__name__)

HABITS_KEY = "cadence_habits_v1"
SESSIONS_KEY = "cadence_sessions_v1"
COMPLETIONS_KEY = "cadence_completions_v1"
POSTPONES_KEY = "cadence_postpones_v1"

T = TypeVar("T")


# ── Backends ──────────────────────────────────────────────────


class KeyValueBackend(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...


class MemoryBackend:
    """Dict-backed backend for tests and embedding."""

    def __init__(self, items: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class FileBackend:
    """One JSON file per key under <root>/data/, written atomically."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root if root is not None else workspace_root()

    def get_item(self, key: str) -> str | None:
        text = read_text(collection_path(key, self.root))
        return text or None

    def set_item(self, key: str, value: str) -> None:
        write_text_atomic(collection_path(key, self.root), value)


# ── Store ─────────────────────────────────────────────────────


class RecordStore:
    """Typed access to the habits, sessions, completions and postpones collections."""

    def __init__(self, backend: KeyValueBackend) -> None:
        self.backend = backend

    def _read(self, key: str, loader: Callable[[dict[str, Any]], T]) -> list[T]:
        raw = self.backend.get_item(key)
        if not raw or not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Collection %s is not valid JSON; treating as empty", key)
            return []
        if not isinstance(data, list):
            logger.warning("Collection %s is not a JSON array; treating as empty", key)
            return []

        records = []
        for entry in data:
            if not isinstance(entry, dict):
                continue
            try:
                records.append(loader(entry))
            except (TypeError, ValueError):
                logger.warning("Skipping malformed record in %s: %r", key, entry)
        return records

    def _write(self, key: str, records: list[Any]) -> None:
        payload = json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False)
        self.backend.set_item(key, payload + "\n")

    # Habits

    def load_habits(self) -> list[Habit]:
        """All habits in stored order, archived included."""
        return self._read(HABITS_KEY, Habit.from_dict)

    def list_habits(self, include_archived: bool = False) -> list[Habit]:
        habits = self.load_habits()
        if not include_archived:
            habits = [h for h in habits if not h.archived]
        habits.sort(key=lambda h: h.due_at)
        return habits

    def get_habit(self, habit_id: str, include_archived: bool = True) -> Habit | None:
        for habit in self.load_habits():
            if habit.id == habit_id and (include_archived or not habit.archived):
                return habit
        return None

    def save_habits(self, habits: list[Habit]) -> None:
        self._write(HABITS_KEY, habits)

    # Timer sessions

    def list_sessions(self) -> list[TimerSession]:
        return self._read(SESSIONS_KEY, TimerSession.from_dict)

    def get_session(self, habit_id: str) -> TimerSession | None:
        for session in self.list_sessions():
            if session.habit_id == habit_id:
                return session
        return None

    def save_sessions(self, sessions: list[TimerSession]) -> None:
        self._write(SESSIONS_KEY, sessions)

    # Completions

    def list_completions(self) -> list[CompletionRecord]:
        return self._read(COMPLETIONS_KEY, CompletionRecord.from_dict)

    def save_completions(self, completions: list[CompletionRecord]) -> None:
        self._write(COMPLETIONS_KEY, completions)

    # Postpones

    def list_postpones(self) -> list[PostponeRecord]:
        return self._read(POSTPONES_KEY, PostponeRecord.from_dict)

    def save_postpones(self, postpones: list[PostponeRecord]) -> None:
        self._write(POSTPONES_KEY, postpones)


def open_store(root: Path | None = None) -> RecordStore:
    """Open the file-backed store for a workspace."""
    return RecordStore(FileBackend(root))
