"""Shared test fixtures for Cadence tests."""

from __future__ import annotations

import os
import time
from datetime import datetime, timedelta
from pathlib import Path

import pytest
import yaml

from cadence.habits import create_habit
from cadence.models import Habit, HabitDraft
from cadence.store import MemoryBackend, RecordStore

# Local noon, so "today" in scoring tests is the twelve hours before NOW.
NOW = datetime(2026, 2, 11, 12, 0, 0).astimezone()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with a config file and an empty data dir."""
    root = tmp_path / "workspace"
    (root / "data").mkdir(parents=True)

    config = {
        "default_postpone_minutes": 15,
        "reminder_throttle_minutes": 5,
    }
    (root / "config.yaml").write_text(
        yaml.dump(config, default_flow_style=False), encoding="utf-8"
    )

    # Set env var
    os.environ["CADENCE_ROOT"] = str(root)
    yield root
    # Cleanup
    if "CADENCE_ROOT" in os.environ:
        del os.environ["CADENCE_ROOT"]


@pytest.fixture
def store() -> RecordStore:
    return RecordStore(MemoryBackend())


@pytest.fixture
def now() -> datetime:
    return NOW


def add_habit(store: RecordStore, now: datetime, name: str = "Drink water", **fields) -> Habit:
    """Create a habit through the engine at *now*."""
    draft = HabitDraft(name=name, **fields)
    return create_habit(store, draft, now=now)


def put_habit(store: RecordStore, **fields) -> Habit:
    """Write a habit directly into the store, bypassing the engine."""
    fields.setdefault("id", f"h-{len(store.load_habits()) + 1}")
    fields.setdefault("name", "Stretch")
    fields.setdefault("created_at", NOW - timedelta(days=1))
    fields.setdefault("due_at", NOW + timedelta(minutes=30))
    habit = Habit(**fields)
    habits = store.load_habits()
    habits.append(habit)
    store.save_habits(habits)
    return habit


@pytest.fixture
def new_york(monkeypatch):
    """Run the test with the process local zone set to America/New_York."""
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
