from __future__ import annotations

import os
import secrets
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from cadence import (
    InvalidInput,
    NoActiveTimer,
    NotFound,
    RecordStore,
    archive_habit,
    build_draft,
    complete_habit,
    compute_daily_score,
    configure_logging,
    create_habit,
    elapsed_seconds,
    format_clock,
    format_duration,
    format_relative_due,
    load_preferences,
    now_local,
    open_store,
    postpone_habit,
    run_hooks,
    start_timer,
    stop_timer,
    update_habit,
    workspace_root,
)

configure_logging()

app = FastAPI(title="Cadence API", version="0.1.0")

security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("CADENCE_USERNAME", "")
    expected_password = os.environ.get("CADENCE_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def get_store() -> RecordStore:
    return open_store(workspace_root())


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, NoActiveTimer):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


def _fire(hook_point: str, context: dict[str, Any]) -> None:
    run_hooks(hook_point, context, workspace_root())


# ── Health ────────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


# ── Listings ──────────────────────────────────────────────────

@app.get("/api/habits")
def api_list_habits(
    include_archived: bool = False,
    store: RecordStore = Depends(get_store),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Habits sorted by due time, with running timers flagged."""
    now = now_local()
    running = {s.habit_id for s in store.list_sessions()}
    habits = []
    for habit in store.list_habits(include_archived=include_archived):
        d = habit.to_dict()
        d["dueLabel"] = format_relative_due(habit.due_at, now)
        d["isDue"] = habit.is_due(now)
        d["timerRunning"] = habit.id in running
        habits.append(d)
    return {"habits": habits}


@app.get("/api/habits/{habit_id}")
def api_get_habit(
    habit_id: str,
    store: RecordStore = Depends(get_store),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Habit detail: schedule, running timer, and today's breakdown."""
    habit = store.get_habit(habit_id)
    if habit is None:
        raise HTTPException(status_code=404, detail=f"Habit not found: {habit_id}")

    now = now_local()
    session = store.get_session(habit_id)
    score = compute_daily_score(store, now)
    breakdown = next((b for b in score.breakdown if b.habit_id == habit_id), None)
    return {
        "habit": habit.to_dict(),
        "dueLabel": format_relative_due(habit.due_at, now),
        "dueClock": format_clock(habit.due_at),
        "timer": {
            "session": session.to_dict(),
            "elapsed": format_duration(elapsed_seconds(session, now)),
        } if session else None,
        "today": breakdown.to_dict() if breakdown else None,
    }


@app.get("/api/sessions")
def api_list_sessions(store: RecordStore = Depends(get_store), username: str = Depends(get_current_user)) -> dict[str, Any]:
    return {"sessions": [s.to_dict() for s in store.list_sessions()]}


@app.get("/api/completions")
def api_list_completions(store: RecordStore = Depends(get_store), username: str = Depends(get_current_user)) -> dict[str, Any]:
    return {"completions": [c.to_dict() for c in store.list_completions()]}


@app.get("/api/postpones")
def api_list_postpones(store: RecordStore = Depends(get_store), username: str = Depends(get_current_user)) -> dict[str, Any]:
    return {"postpones": [p.to_dict() for p in store.list_postpones()]}


@app.get("/api/score")
def api_daily_score(store: RecordStore = Depends(get_store), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Today's score, recomputed on every request."""
    return compute_daily_score(store).to_dict()


# ── Form ──────────────────────────────────────────────────────

@app.post("/api/habits")
def api_create_habit(
    payload: dict[str, Any] = Body(...),
    store: RecordStore = Depends(get_store),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Create a habit from raw form values."""
    try:
        habit = create_habit(store, build_draft(payload))
    except InvalidInput as e:
        raise _http_error(e)
    _fire("on_habit_created", habit.to_dict())
    return {"ok": True, "habit": habit.to_dict()}


@app.put("/api/habits/{habit_id}")
def api_update_habit(
    habit_id: str,
    payload: dict[str, Any] = Body(...),
    store: RecordStore = Depends(get_store),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    try:
        habit = update_habit(store, habit_id, build_draft(payload))
    except (InvalidInput, NotFound) as e:
        raise _http_error(e)
    _fire("on_habit_updated", habit.to_dict())
    return {"ok": True, "habit": habit.to_dict()}


# ── Transitions ───────────────────────────────────────────────

@app.post("/api/habits/{habit_id}/archive")
def api_archive_habit(habit_id: str, store: RecordStore = Depends(get_store), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Archive a habit. The hook fires only on the transition, not on repeats."""
    existing = store.get_habit(habit_id)
    was_archived = existing is not None and existing.archived
    try:
        habit = archive_habit(store, habit_id)
    except NotFound as e:
        raise _http_error(e)
    if not was_archived:
        _fire("on_habit_archived", habit.to_dict())
    return {"ok": True, "habit": habit.to_dict()}


@app.post("/api/habits/{habit_id}/complete")
def api_complete_habit(
    habit_id: str,
    payload: dict[str, Any] = Body(default={}),
    store: RecordStore = Depends(get_store),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    try:
        duration = int(payload.get("durationSeconds", 0) or 0)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="durationSeconds must be an integer")
    try:
        completion = complete_habit(store, habit_id, duration_seconds=duration)
    except (InvalidInput, NotFound) as e:
        raise _http_error(e)
    _fire("on_habit_complete", completion.to_dict())
    return {"ok": True, "completion": completion.to_dict()}


@app.post("/api/habits/{habit_id}/postpone")
def api_postpone_habit(
    habit_id: str,
    payload: dict[str, Any] = Body(default={}),
    store: RecordStore = Depends(get_store),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Postpone by payload minutes, or by the configured default."""
    minutes = payload.get("minutes")
    if minutes is None:
        minutes = load_preferences(workspace_root()).default_postpone_minutes
    try:
        minutes = int(minutes)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="minutes must be an integer")
    try:
        habit = postpone_habit(store, habit_id, minutes)
    except NotFound as e:
        raise _http_error(e)
    _fire("on_habit_postponed", habit.to_dict())
    return {"ok": True, "habit": habit.to_dict()}


@app.post("/api/habits/{habit_id}/timer/start")
def api_start_timer(habit_id: str, store: RecordStore = Depends(get_store), username: str = Depends(get_current_user)) -> dict[str, Any]:
    try:
        session = start_timer(store, habit_id)
    except NotFound as e:
        raise _http_error(e)
    _fire("on_timer_start", session.to_dict())
    return {"ok": True, "session": session.to_dict()}


@app.post("/api/habits/{habit_id}/timer/stop")
def api_stop_timer(habit_id: str, store: RecordStore = Depends(get_store), username: str = Depends(get_current_user)) -> dict[str, Any]:
    try:
        completion = stop_timer(store, habit_id)
    except (NoActiveTimer, NotFound) as e:
        raise _http_error(e)
    _fire("on_timer_stop", completion.to_dict())
    return {"ok": True, "completion": completion.to_dict()}
