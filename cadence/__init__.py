"""Cadence core library — habit/task records, scheduling engine, and daily scoring.

Public API re-exports for convenient imports:
    from cadence import open_store, create_habit, complete_habit, compute_daily_score, ...
"""

# Errors
from cadence.errors import (
    CadenceError,
    NotFound,
    NoActiveTimer,
    InvalidInput,
)

# Workspace & paths
from cadence.workspace import (
    workspace_root,
    data_dir,
    collection_path,
    config_path,
    hooks_config_path,
)

# Time utilities
from cadence.timeutil import (
    now_local,
    resolve_now,
    parse_timestamp,
    format_timestamp,
    minutes_between,
    seconds_between,
    start_of_day,
    format_duration,
    format_relative_due,
    format_clock,
)

# Store
from cadence.store import (
    KeyValueBackend,
    MemoryBackend,
    FileBackend,
    RecordStore,
    open_store,
)

# Habits
from cadence.habits import (
    parse_positive_integer,
    build_draft,
    create_habit,
    update_habit,
    archive_habit,
    complete_habit,
    postpone_habit,
    mark_reminded,
)

# Timers
from cadence.timers import (
    start_timer,
    stop_timer,
    get_active_session,
    running_habit_ids,
    elapsed_seconds,
)

# Scoring
from cadence.scoring import compute_daily_score, grade_from_score

# Config
from cadence.config import Preferences, load_preferences, save_preferences, configure_logging

# Hooks
from cadence.hooks import Hook, run_hooks

# Models
from cadence.models import (
    Habit,
    HabitDraft,
    TimerSession,
    CompletionRecord,
    PostponeRecord,
    DailyScoreHabitBreakdown,
    DailyScore,
)

# Reminders
from cadence.reminders import Reminder, check_reminders, apply_reminder_action
