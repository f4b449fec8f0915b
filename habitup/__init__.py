"""HabitUP core library — habit store, streak and analytics engines.

Public API re-exports for convenient imports:
    from habitup import build_service, compute_streak, compute_analytics, ...
"""

# Models
from habitup.models import (
    CompletionStatus,
    Mood,
    Category,
    Difficulty,
    Priority,
    CompletionRecord,
    Habit,
    StreakState,
    WeekBucket,
    DayOfWeekStat,
    AnalyticsReport,
    ProgressStats,
    WeeklySummary,
    HabitTemplate,
)

# Errors
from habitup.errors import (
    HabitUpError,
    InvalidWindow,
    UnknownHabit,
    MalformedRecord,
    InvalidHabit,
)

# Engines
from habitup.streak import compute_streak, merge_streak, is_milestone, STREAK_MILESTONES
from habitup.analytics import (
    compute_analytics,
    compute_progress,
    compute_weekly_summary,
    WEEKDAY_NAMES,
)
from habitup.suggestions import rank_suggestions, HABIT_CATALOG

# Settings
from habitup.settings import (
    Settings,
    data_root,
    load_settings,
    ensure_data_root,
    configure_logging,
    today,
    now_local,
)

# Storage, notifications, service
from habitup.store import SQLiteStore, RecordStore, HabitRepository, HabitStore
from habitup.notify import (
    Channel,
    ConnectionRegistry,
    Notifier,
    RegistryNotifier,
    HookNotifier,
    FanoutNotifier,
)
from habitup.service import HabitService, build_service
