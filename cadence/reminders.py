"""Periodic reminder check for Cadence.

Meant to be run from cron/launchd (``python -m cadence.reminders``). Each run
picks the earliest-due habit that is due, not being timed, and outside the
reminder throttle window; marks it reminded; and delivers it through the
``on_reminder`` hook with the actions the user can take.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from cadence.config import Preferences, configure_logging, load_preferences
from cadence.errors import CadenceError, InvalidInput
from cadence.habits import complete_habit, mark_reminded, postpone_habit
from cadence.hooks import run_hooks
from cadence.models import Habit, TimerSession
from cadence.store import RecordStore, open_store
from cadence.timers import start_timer
from cadence.timeutil import format_relative_due, minutes_between, resolve_now
from cadence.workspace import workspace_root

logger = logging.getLogger(__name__)

ACTIONS = {"start_timer", "complete", "postpone"}


@dataclass
class Reminder:
    habit: Habit
    message: str
    primary_action: str  # start_timer or complete
    secondary_action: str = "postpone"
    postpone_minutes: int = 15
    hook_results: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "habit": self.habit.to_dict(),
            "title": f"Overdue: {self.habit.name}",
            "message": self.message,
            "primaryAction": self.primary_action,
            "secondaryAction": self.secondary_action,
            "postponeMinutes": self.postpone_minutes,
        }


def should_remind(habit: Habit, now: datetime, throttle_minutes: int) -> bool:
    """A habit is eligible when due and never reminded, or reminded before the throttle window."""
    if habit.due_at > now:
        return False
    if habit.last_reminder_at is None:
        return True
    return minutes_between(habit.last_reminder_at, now) >= throttle_minutes


def find_reminder_candidate(
    habits: list[Habit],
    sessions: list[TimerSession],
    now: datetime,
    throttle_minutes: int,
) -> Habit | None:
    """Earliest-due eligible habit that has no running timer."""
    running = {s.habit_id for s in sessions}
    eligible = [
        h for h in habits
        if not h.archived and h.id not in running and should_remind(h, now, throttle_minutes)
    ]
    eligible.sort(key=lambda h: h.due_at)
    return eligible[0] if eligible else None


def check_reminders(
    store: RecordStore,
    prefs: Preferences | None = None,
    now: datetime | None = None,
    root: Path | None = None,
) -> Reminder | None:
    """Run one reminder check. Returns the delivered reminder, or None."""
    if prefs is None:
        prefs = load_preferences(root)
    now = resolve_now(now)

    candidate = find_reminder_candidate(
        store.list_habits(include_archived=False),
        store.list_sessions(),
        now,
        prefs.reminder_throttle_minutes,
    )
    if candidate is None:
        logger.debug("No habit needs a reminder")
        return None

    mark_reminded(store, candidate.id, now)
    candidate.last_reminder_at = now

    reminder = Reminder(
        habit=candidate,
        message=f"{format_relative_due(candidate.due_at, now)} · choose an action",
        primary_action="start_timer" if candidate.expected_duration_minutes else "complete",
        postpone_minutes=prefs.default_postpone_minutes,
    )
    reminder.hook_results = run_hooks("on_reminder", reminder.to_dict(), root)
    logger.info("Reminded about habit %s (%s)", candidate.id, reminder.message)
    return reminder


def apply_reminder_action(
    store: RecordStore,
    habit_id: str,
    action: str,
    prefs: Preferences | None = None,
    now: datetime | None = None,
    root: Path | None = None,
) -> Any:
    """Carry out the action chosen from a reminder."""
    if action not in ACTIONS:
        raise InvalidInput(f"Invalid reminder action: {action}")
    if action == "start_timer":
        return start_timer(store, habit_id, now=now)
    if action == "complete":
        return complete_habit(store, habit_id, source="manual", now=now)
    if prefs is None:
        prefs = load_preferences(root)
    return postpone_habit(store, habit_id, prefs.default_postpone_minutes, now=now)


def main() -> None:
    configure_logging()
    root = workspace_root()
    if not root.exists():
        logger.error("Workspace not found: %s (set CADENCE_ROOT)", root)
        raise SystemExit(1)
    try:
        check_reminders(open_store(root), root=root)
    except (CadenceError, OSError):
        logger.exception("Reminder check failed")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
