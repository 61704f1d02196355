"""Error kinds raised by the Cadence engines."""

from __future__ import annotations


class CadenceError(Exception):
    """Base class for all engine errors."""


class NotFound(CadenceError, LookupError):
    """A referenced habit id does not exist."""

    def __init__(self, habit_id: str) -> None:
        super().__init__(f"Habit not found: {habit_id}")
        self.habit_id = habit_id


class NoActiveTimer(CadenceError, ValueError):
    """Stop was requested for a habit with no running timer session."""

    def __init__(self, habit_id: str) -> None:
        super().__init__(f"No active timer for habit: {habit_id}")
        self.habit_id = habit_id


class InvalidInput(CadenceError, ValueError):
    """Caller-supplied input failed validation (e.g. an empty name)."""
