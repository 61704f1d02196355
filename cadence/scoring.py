"""Daily score computation for Cadence.

The score is derived on demand from today's completions and postpones
(local midnight through now) and is never persisted.

Per habit:
    raw     = 0.65 * repetition progress + 0.35 * duration progress
    penalty = postpones today (5% each, max 20%) + overdue time (15% per interval, max 25%)
    score   = round(clamp01(raw * (1 - penalty)) * 100)
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime

from cadence.models import DailyScore, DailyScoreHabitBreakdown, Habit
from cadence.store import RecordStore
from cadence.timeutil import resolve_now, round_half_up, start_of_day

REPETITION_WEIGHT = 0.65
DURATION_WEIGHT = 0.35
POSTPONE_PENALTY_STEP = 0.05
POSTPONE_PENALTY_CAP = 0.20
OVERDUE_PENALTY_RATE = 0.15
OVERDUE_PENALTY_CAP = 0.25


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


def grade_from_score(score: int) -> str:
    if score >= 95:
        return "S"
    if score >= 90:
        return "A+"
    if score >= 80:
        return "A"
    if score >= 70:
        return "B"
    if score >= 60:
        return "C"
    return "D"


def habit_score_breakdown(
    habit: Habit,
    now: datetime,
    repetitions: int,
    duration_minutes: float,
    postpone_count: int,
) -> DailyScoreHabitBreakdown:
    """Score one habit from its activity totals for today."""
    repetition_target = max(1, habit.target_repetitions_per_day)
    repetition_progress = clamp(repetitions / repetition_target)

    duration_target = (
        habit.expected_duration_minutes * repetition_target
        if habit.expected_duration_minutes
        else 0
    )
    # Untracked duration follows repetitions so it never drags the score down.
    duration_progress = (
        clamp(duration_minutes / duration_target) if duration_target > 0 else repetition_progress
    )

    is_overdue = habit.due_at < now
    overdue_minutes = max(0.0, (now - habit.due_at).total_seconds() / 60) if is_overdue else 0.0

    postpone_penalty = min(POSTPONE_PENALTY_CAP, postpone_count * POSTPONE_PENALTY_STEP)
    overdue_penalty = min(
        OVERDUE_PENALTY_CAP,
        overdue_minutes / max(1, habit.interval_minutes) * OVERDUE_PENALTY_RATE,
    )

    raw_progress = repetition_progress * REPETITION_WEIGHT + duration_progress * DURATION_WEIGHT
    score = round_half_up(clamp(raw_progress * (1 - postpone_penalty - overdue_penalty)) * 100)

    return DailyScoreHabitBreakdown(
        habit_id=habit.id,
        name=habit.name,
        repetitions=repetitions,
        repetition_target=repetition_target,
        repetition_progress=repetition_progress,
        duration_minutes=duration_minutes,
        duration_target_minutes=duration_target,
        duration_progress=duration_progress,
        postpones=postpone_count,
        is_overdue=is_overdue,
        score=score,
    )


def compute_daily_score(store: RecordStore, now: datetime | None = None) -> DailyScore:
    """Aggregate today's activity into per-habit and overall scores."""
    now = resolve_now(now)
    day_start = start_of_day(now)

    habits = store.list_habits(include_archived=False)
    today_completions = [
        c for c in store.list_completions() if day_start <= c.completed_at <= now
    ]
    today_postpones = [
        p for p in store.list_postpones() if day_start <= p.postponed_at <= now
    ]

    repetitions: dict[str, int] = defaultdict(int)
    durations: dict[str, float] = defaultdict(float)
    postpones: dict[str, int] = defaultdict(int)

    for completion in today_completions:
        repetitions[completion.habit_id] += 1
        durations[completion.habit_id] += completion.duration_seconds / 60
    for postpone in today_postpones:
        postpones[postpone.habit_id] += 1

    breakdown = [
        habit_score_breakdown(habit, now, repetitions[habit.id], durations[habit.id], postpones[habit.id])
        for habit in habits
    ]

    # no active habits scores 100
    if breakdown:
        overall = round_half_up(sum(b.score for b in breakdown) / len(breakdown))
    else:
        overall = 100

    return DailyScore(
        score=overall,
        grade=grade_from_score(overall),
        completed_count=len(today_completions),
        total_tracked_minutes=round_half_up(sum(c.duration_seconds for c in today_completions) / 60),
        due_now_count=sum(1 for h in habits if h.is_due(now)),
        breakdown=breakdown,
    )
