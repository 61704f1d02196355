"""Tests for cadence/models.py — dataclass serialization."""

from datetime import datetime, timedelta, timezone

from cadence.models import (
    CompletionRecord,
    DailyScore,
    DailyScoreHabitBreakdown,
    Habit,
    HabitDraft,
    PostponeRecord,
    TimerSession,
)


def test_habit_from_dict():
    data = {
        "id": "h1",
        "name": "Drink water",
        "type": "habit",
        "intervalMinutes": 45,
        "targetRepetitionsPerDay": 6,
        "expectedDurationMinutes": 2,
        "notes": "Full glass",
        "createdAt": "2026-02-11T08:00:00+00:00",
        "dueAt": "2026-02-11T08:45:00+00:00",
        "lastReminderAt": "2026-02-11T08:50:00Z",
        "archived": False,
        "someFutureField": 1,
    }
    h = Habit.from_dict(data)
    assert h.interval_minutes == 45
    assert h.target_repetitions_per_day == 6
    assert h.expected_duration_minutes == 2
    assert h.due_at == datetime(2026, 2, 11, 8, 45, tzinfo=timezone.utc)
    assert h.last_reminder_at == datetime(2026, 2, 11, 8, 50, tzinfo=timezone.utc)
    assert h.last_completed_at is None


def test_habit_to_dict_omits_unset_optionals():
    created = datetime(2026, 2, 11, 8, 0, tzinfo=timezone.utc)
    h = Habit(id="h1", name="Walk", created_at=created, due_at=created + timedelta(hours=1))
    d = h.to_dict()
    assert d["dueAt"] == "2026-02-11T09:00:00+00:00"
    assert d["archived"] is False
    assert "expectedDurationMinutes" not in d
    assert "notes" not in d
    assert "lastCompletedAt" not in d
    assert "lastReminderAt" not in d


def test_habit_missing_due_falls_back_to_created():
    h = Habit.from_dict({"id": "h1", "createdAt": "2026-02-11T08:00:00+00:00", "dueAt": "garbage"})
    assert h.due_at == h.created_at


def test_naive_timestamps_are_read_as_local():
    h = Habit.from_dict({"id": "h1", "createdAt": "2026-02-11T08:00:00", "dueAt": "2026-02-11T09:00:00"})
    assert h.created_at.tzinfo is not None
    assert h.due_at - h.created_at == timedelta(hours=1)


def test_habit_draft_from_dict():
    draft = HabitDraft.from_dict({"name": "Read", "type": "task", "intervalMinutes": 1440})
    assert draft.type == "task"
    assert draft.interval_minutes == 1440
    assert draft.target_repetitions_per_day == 1
    assert HabitDraft.from_dict({}).name == ""


def test_session_and_log_records_round_trip():
    at = datetime(2026, 2, 11, 10, 0, tzinfo=timezone.utc)
    session = TimerSession(id="s1", habit_id="h1", started_at=at)
    completion = CompletionRecord(id="c1", habit_id="h1", completed_at=at, duration_seconds=90, source="timer")
    postpone = PostponeRecord(id="p1", habit_id="h1", postponed_at=at, minutes=10)

    assert TimerSession.from_dict(session.to_dict()) == session
    assert CompletionRecord.from_dict(completion.to_dict()) == completion
    assert PostponeRecord.from_dict(postpone.to_dict()) == postpone
    assert completion.to_dict()["habitId"] == "h1"


def test_log_records_clamp_bad_numbers():
    c = CompletionRecord.from_dict({"id": "c1", "habitId": "h1", "durationSeconds": -5})
    p = PostponeRecord.from_dict({"id": "p1", "habitId": "h1", "minutes": 0})
    assert c.duration_seconds == 0
    assert p.minutes == 1


def test_daily_score_to_dict():
    score = DailyScore(
        score=95,
        grade="S",
        completed_count=2,
        total_tracked_minutes=20,
        breakdown=[DailyScoreHabitBreakdown(habit_id="h1", name="Walk", repetition_progress=1 / 3, score=95)],
    )
    d = score.to_dict()
    assert d["completedCount"] == 2
    assert d["breakdown"][0]["habitId"] == "h1"
    assert d["breakdown"][0]["repetitionProgress"] == 0.333
