"""Habit CRUD, completion, postponement and draft parsing for Cadence.

Every mutator samples ``now`` once and uses it for all derived values.
Numeric draft fields are coerced to positive integers rather than rejected.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any

from cadence.errors import InvalidInput, NotFound
from cadence.models import (
    VALID_SOURCES,
    VALID_TYPES,
    CompletionRecord,
    Habit,
    HabitDraft,
    PostponeRecord,
    new_id,
)
from cadence.store import RecordStore
from cadence.timeutil import add_minutes, parse_timestamp, resolve_now

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MINUTES = 60
DEFAULT_TARGET_REPETITIONS = 1
DEFAULT_EXPECTED_DURATION_MINUTES = 1


# ── Draft parsing ─────────────────────────────────────────────


def parse_positive_integer(raw: Any, fallback: int) -> int:
    """Parse *raw* as a positive integer, returning *fallback* otherwise.

    Accepts ints, floats (floored) and numeric strings such as ' 45 '.
    """
    if isinstance(raw, bool) or raw is None:
        return fallback
    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and not math.isfinite(raw):
            return fallback
        value = math.floor(raw)
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            return fallback
    return value if value > 0 else fallback


def _clean_notes(notes: Any) -> str | None:
    if notes is None:
        return None
    text = str(notes).strip()
    return text or None


def normalize_draft(draft: HabitDraft) -> HabitDraft:
    """Validate the name and type, and coerce numeric fields."""
    name = (draft.name or "").strip()
    if not name:
        raise InvalidInput("Name is required")
    if draft.type not in VALID_TYPES:
        raise InvalidInput(f"Invalid type: {draft.type}")

    expected = draft.expected_duration_minutes
    if expected is not None and str(expected).strip() != "":
        expected = parse_positive_integer(expected, DEFAULT_EXPECTED_DURATION_MINUTES)
    else:
        expected = None

    return HabitDraft(
        name=name,
        type=draft.type,
        interval_minutes=parse_positive_integer(draft.interval_minutes, DEFAULT_INTERVAL_MINUTES),
        target_repetitions_per_day=parse_positive_integer(
            draft.target_repetitions_per_day, DEFAULT_TARGET_REPETITIONS
        ),
        expected_duration_minutes=expected,
        notes=_clean_notes(draft.notes),
    )


def build_draft(values: dict[str, Any]) -> HabitDraft:
    """Build a draft from raw form values (all strings, possibly blank).

    Keys are the form field ids: name, type, intervalMinutes,
    targetRepetitionsPerDay, expectedDurationMinutes, notes.
    """
    draft = HabitDraft(
        name=str(values.get("name") or ""),
        type=str(values.get("type") or "habit"),
        interval_minutes=values.get("intervalMinutes", ""),
        target_repetitions_per_day=values.get("targetRepetitionsPerDay", ""),
        expected_duration_minutes=values.get("expectedDurationMinutes"),
        notes=values.get("notes"),
    )
    return normalize_draft(draft)


# ── Lookup ────────────────────────────────────────────────────


def find_habit(habits: list[Habit], habit_id: str, include_archived: bool = False) -> int:
    """Index of *habit_id* in *habits*, or -1."""
    for i, h in enumerate(habits):
        if h.id == habit_id and (include_archived or not h.archived):
            return i
    return -1


# ── CRUD ──────────────────────────────────────────────────────


def create_habit(store: RecordStore, draft: HabitDraft, now: datetime | None = None) -> Habit:
    """Create a habit due one interval from now."""
    clean = normalize_draft(draft)
    now = resolve_now(now)

    habit = Habit(
        id=new_id(),
        name=clean.name,
        type=clean.type,
        interval_minutes=clean.interval_minutes,
        target_repetitions_per_day=clean.target_repetitions_per_day,
        expected_duration_minutes=clean.expected_duration_minutes,
        notes=clean.notes,
        created_at=now,
        due_at=add_minutes(now, clean.interval_minutes),
        archived=False,
    )

    habits = store.load_habits()
    habits.append(habit)
    store.save_habits(habits)
    logger.info("Created %s %s (%s)", habit.type, habit.id, habit.name)
    return habit


def update_habit(store: RecordStore, habit_id: str, draft: HabitDraft) -> Habit:
    """Replace the editable fields of a habit, archived or not.

    Scheduling and bookkeeping fields (id, created/due/completed/reminder
    timestamps, archived flag) are preserved.
    """
    clean = normalize_draft(draft)
    habits = store.load_habits()
    index = find_habit(habits, habit_id, include_archived=True)
    if index < 0:
        raise NotFound(habit_id)

    habit = habits[index]
    habit.name = clean.name
    habit.type = clean.type
    habit.interval_minutes = clean.interval_minutes
    habit.target_repetitions_per_day = clean.target_repetitions_per_day
    habit.expected_duration_minutes = clean.expected_duration_minutes
    habit.notes = clean.notes

    store.save_habits(habits)
    logger.info("Updated habit %s", habit_id)
    return habit


def archive_habit(store: RecordStore, habit_id: str) -> Habit:
    """Archive a habit and discard its timer session without recording a completion."""
    habits = store.load_habits()
    index = find_habit(habits, habit_id, include_archived=True)
    if index < 0:
        raise NotFound(habit_id)

    habit = habits[index]
    if habit.archived:
        logger.debug("Habit %s already archived", habit_id)
    else:
        habit.archived = True
        store.save_habits(habits)
        logger.info("Archived habit %s", habit_id)

    sessions = store.list_sessions()
    remaining = [s for s in sessions if s.habit_id != habit_id]
    if len(remaining) != len(sessions):
        store.save_sessions(remaining)
        logger.info("Discarded timer session for archived habit %s", habit_id)
    return habit


# ── Transitions ───────────────────────────────────────────────


def complete_habit(
    store: RecordStore,
    habit_id: str,
    duration_seconds: float = 0,
    source: str = "manual",
    now: datetime | None = None,
) -> CompletionRecord:
    """Record a completion and schedule the next occurrence one interval from now.

    Any timer session for the habit is discarded, whether or not it triggered
    this completion.
    """
    if source not in VALID_SOURCES:
        raise InvalidInput(f"Invalid completion source: {source}")

    habits = store.load_habits()
    index = find_habit(habits, habit_id)
    if index < 0:
        raise NotFound(habit_id)

    now = resolve_now(now)
    habit = habits[index]
    completion = CompletionRecord(
        id=new_id(),
        habit_id=habit_id,
        completed_at=now,
        duration_seconds=max(0, math.floor(duration_seconds or 0)),
        source=source,
    )

    completions = store.list_completions()
    completions.append(completion)

    habit.last_completed_at = now
    habit.last_reminder_at = None
    habit.due_at = add_minutes(now, habit.interval_minutes)

    sessions = store.list_sessions()
    remaining = [s for s in sessions if s.habit_id != habit_id]

    store.save_completions(completions)
    store.save_habits(habits)
    if len(remaining) != len(sessions):
        store.save_sessions(remaining)

    logger.info(
        "Completed habit %s (%s, %ss); next due %s",
        habit_id, source, completion.duration_seconds, habit.due_at.isoformat(),
    )
    return completion


def postpone_habit(
    store: RecordStore,
    habit_id: str,
    minutes: float,
    now: datetime | None = None,
) -> Habit:
    """Push a habit's due time back by *minutes* (at least 1).

    The push is anchored to the later of the current due time and now, so an
    overdue habit is pushed from the present rather than from its stale due time.
    """
    safe_minutes = max(1, math.floor(minutes or 0))
    habits = store.load_habits()
    index = find_habit(habits, habit_id)
    if index < 0:
        raise NotFound(habit_id)

    now = resolve_now(now)
    habit = habits[index]
    base = habit.due_at if habit.due_at > now else now
    habit.due_at = add_minutes(base, safe_minutes)
    habit.last_reminder_at = None

    postpones = store.list_postpones()
    postpones.append(
        PostponeRecord(id=new_id(), habit_id=habit_id, postponed_at=now, minutes=safe_minutes)
    )

    store.save_habits(habits)
    store.save_postpones(postpones)
    logger.info("Postponed habit %s by %sm; next due %s", habit_id, safe_minutes, habit.due_at.isoformat())
    return habit


def mark_reminded(store: RecordStore, habit_id: str, at: datetime | str) -> None:
    """Record when a reminder was last shown. Unknown ids are ignored."""
    habits = store.load_habits()
    index = find_habit(habits, habit_id, include_archived=True)
    if index < 0:
        logger.debug("mark_reminded: habit %s not found", habit_id)
        return

    habits[index].last_reminder_at = parse_timestamp(at)
    store.save_habits(habits)
