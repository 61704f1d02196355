"""Timer sessions for Cadence.

A habit has at most one running session. Stopping a session turns the
elapsed time into a timer-sourced completion.
"""

from __future__ import annotations

import logging
from datetime import datetime

from cadence.errors import NoActiveTimer, NotFound
from cadence.habits import complete_habit
from cadence.models import CompletionRecord, TimerSession, new_id
from cadence.store import RecordStore
from cadence.timeutil import now_local, resolve_now, seconds_between

logger = logging.getLogger(__name__)


def start_timer(store: RecordStore, habit_id: str, now: datetime | None = None) -> TimerSession:
    """Start timing a habit. Returns the existing session if one is already running."""
    if store.get_habit(habit_id, include_archived=False) is None:
        raise NotFound(habit_id)

    sessions = store.list_sessions()
    for session in sessions:
        if session.habit_id == habit_id:
            logger.debug("Timer already running for habit %s", habit_id)
            return session

    session = TimerSession(id=new_id(), habit_id=habit_id, started_at=resolve_now(now))
    sessions.append(session)
    store.save_sessions(sessions)
    logger.info("Started timer for habit %s", habit_id)
    return session


def stop_timer(store: RecordStore, habit_id: str, now: datetime | None = None) -> CompletionRecord:
    """Stop the habit's timer and record the elapsed time as a completion."""
    sessions = store.list_sessions()
    session = next((s for s in sessions if s.habit_id == habit_id), None)
    if session is None:
        raise NoActiveTimer(habit_id)

    now = resolve_now(now)
    store.save_sessions([s for s in sessions if s.id != session.id])
    logger.info("Stopped timer for habit %s", habit_id)

    return complete_habit(
        store,
        habit_id,
        duration_seconds=seconds_between(session.started_at, now),
        source="timer",
        now=now,
    )


def get_active_session(store: RecordStore, habit_id: str) -> TimerSession | None:
    return store.get_session(habit_id)


def running_habit_ids(store: RecordStore) -> set[str]:
    """Ids of habits with a running timer."""
    return {s.habit_id for s in store.list_sessions()}


def elapsed_seconds(session: TimerSession, now: datetime | None = None) -> int:
    if now is None:
        now = now_local()
    return seconds_between(session.started_at, now)
