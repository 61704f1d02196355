"""Typed dataclasses for the Cadence data model.

All persisted models use from_dict/to_dict for JSON serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
Timestamps are aware datetimes in memory and ISO strings on disk.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cadence.timeutil import format_timestamp, now_local, parse_timestamp


VALID_TYPES = {"habit", "task"}
VALID_SOURCES = {"manual", "timer"}


def new_id() -> str:
    return uuid.uuid4().hex


def _ts(value: Any, default: datetime | None = None) -> datetime | None:
    """Parse an optional persisted timestamp, falling back to *default*."""
    if not value:
        return default
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError):
        return default


def _ts_str(value: datetime | None) -> str | None:
    return format_timestamp(value) if value is not None else None


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# ── Habits ────────────────────────────────────────────────────


@dataclass
class HabitDraft:
    """The user-editable fields of a habit, as submitted by the form."""

    name: str = ""
    type: str = "habit"  # habit, task
    interval_minutes: int = 60
    target_repetitions_per_day: int = 1
    expected_duration_minutes: int | None = None
    notes: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HabitDraft:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            name=str(d.get("name", "")),
            type=str(d.get("type", "habit")),
            interval_minutes=d.get("intervalMinutes", 60),
            target_repetitions_per_day=d.get("targetRepetitionsPerDay", 1),
            expected_duration_minutes=d.get("expectedDurationMinutes"),
            notes=d.get("notes"),
        )


@dataclass
class Habit:
    id: str = ""
    name: str = ""
    type: str = "habit"  # habit, task
    interval_minutes: int = 60
    target_repetitions_per_day: int = 1
    expected_duration_minutes: int | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=now_local)
    due_at: datetime = field(default_factory=now_local)
    last_completed_at: datetime | None = None
    last_reminder_at: datetime | None = None
    archived: bool = False

    def is_due(self, now: datetime) -> bool:
        return self.due_at <= now

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Habit:
        created_at = _ts(d.get("createdAt")) or now_local()
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            type=str(d.get("type", "habit")),
            interval_minutes=int(d.get("intervalMinutes", 60)),
            target_repetitions_per_day=int(d.get("targetRepetitionsPerDay", 1)),
            expected_duration_minutes=_optional_int(d.get("expectedDurationMinutes")),
            notes=d.get("notes"),
            created_at=created_at,
            due_at=_ts(d.get("dueAt"), created_at),
            last_completed_at=_ts(d.get("lastCompletedAt")),
            last_reminder_at=_ts(d.get("lastReminderAt")),
            archived=bool(d.get("archived", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "intervalMinutes": self.interval_minutes,
            "targetRepetitionsPerDay": self.target_repetitions_per_day,
        }
        if self.expected_duration_minutes is not None:
            d["expectedDurationMinutes"] = self.expected_duration_minutes
        if self.notes:
            d["notes"] = self.notes
        d["createdAt"] = _ts_str(self.created_at)
        d["dueAt"] = _ts_str(self.due_at)
        if self.last_completed_at is not None:
            d["lastCompletedAt"] = _ts_str(self.last_completed_at)
        if self.last_reminder_at is not None:
            d["lastReminderAt"] = _ts_str(self.last_reminder_at)
        d["archived"] = self.archived
        return d


# ── Timer Sessions ────────────────────────────────────────────


@dataclass
class TimerSession:
    id: str = ""
    habit_id: str = ""
    started_at: datetime = field(default_factory=now_local)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TimerSession:
        return cls(
            id=str(d.get("id", "")),
            habit_id=str(d.get("habitId", "")),
            started_at=_ts(d.get("startedAt")) or now_local(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "habitId": self.habit_id,
            "startedAt": _ts_str(self.started_at),
        }


# ── Activity Logs ─────────────────────────────────────────────


@dataclass
class CompletionRecord:
    id: str = ""
    habit_id: str = ""
    completed_at: datetime = field(default_factory=now_local)
    duration_seconds: int = 0
    source: str = "manual"  # manual, timer

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> CompletionRecord:
        return cls(
            id=str(d.get("id", "")),
            habit_id=str(d.get("habitId", "")),
            completed_at=_ts(d.get("completedAt")) or now_local(),
            duration_seconds=max(0, int(d.get("durationSeconds", 0) or 0)),
            source=str(d.get("source", "manual")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "habitId": self.habit_id,
            "completedAt": _ts_str(self.completed_at),
            "durationSeconds": self.duration_seconds,
            "source": self.source,
        }


@dataclass
class PostponeRecord:
    id: str = ""
    habit_id: str = ""
    postponed_at: datetime = field(default_factory=now_local)
    minutes: int = 1

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PostponeRecord:
        return cls(
            id=str(d.get("id", "")),
            habit_id=str(d.get("habitId", "")),
            postponed_at=_ts(d.get("postponedAt")) or now_local(),
            minutes=max(1, int(d.get("minutes", 1) or 1)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "habitId": self.habit_id,
            "postponedAt": _ts_str(self.postponed_at),
            "minutes": self.minutes,
        }


# ── Daily Score ───────────────────────────────────────────────


@dataclass
class DailyScoreHabitBreakdown:
    habit_id: str = ""
    name: str = ""
    repetitions: int = 0
    repetition_target: int = 1
    repetition_progress: float = 0.0
    duration_minutes: float = 0.0
    duration_target_minutes: float = 0.0
    duration_progress: float = 0.0
    postpones: int = 0
    is_overdue: bool = False
    score: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "habitId": self.habit_id,
            "name": self.name,
            "repetitions": self.repetitions,
            "repetitionTarget": self.repetition_target,
            "repetitionProgress": round(self.repetition_progress, 3),
            "durationMinutes": round(self.duration_minutes, 1),
            "durationTargetMinutes": self.duration_target_minutes,
            "durationProgress": round(self.duration_progress, 3),
            "postpones": self.postpones,
            "isOverdue": self.is_overdue,
            "score": self.score,
        }


@dataclass
class DailyScore:
    score: int = 100
    grade: str = "S"
    completed_count: int = 0
    total_tracked_minutes: int = 0
    due_now_count: int = 0
    breakdown: list[DailyScoreHabitBreakdown] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "grade": self.grade,
            "completedCount": self.completed_count,
            "totalTrackedMinutes": self.total_tracked_minutes,
            "dueNowCount": self.due_now_count,
            "breakdown": [b.to_dict() for b in self.breakdown],
        }
