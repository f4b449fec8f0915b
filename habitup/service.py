"""Habit service: the operations the API and the dashboard call.

The mark-complete pipeline:
1. Resolve the habit (owner must own it)
2. Validate status / mood / effort / date
3. Upsert the day's completion record
4. Re-derive the streak from the most recent records
5. Persist streak fields (all-time longest is never lowered)
6. Notify: completion event, plus milestone event on 7/21/30/50/100 days

Analytics, progress and suggestions are read-only.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

from habitup.analytics import compute_analytics, compute_progress, compute_weekly_summary
from habitup.errors import InvalidHabit, InvalidWindow, MalformedRecord, UnknownHabit
from habitup.fileio import write_json_atomic
from habitup.models import (
    AnalyticsReport,
    CompletionRecord,
    CompletionStatus,
    Habit,
    HabitTemplate,
    ProgressStats,
    StreakState,
    WeeklySummary,
)
from habitup.notify import ConnectionRegistry, FanoutNotifier, HookNotifier, Notifier, RegistryNotifier
from habitup.settings import (
    Settings,
    data_root,
    db_path,
    exports_dir,
    load_settings,
    now_local,
)
from habitup.store import HabitStore, SQLiteStore
from habitup.streak import compute_streak, is_milestone, merge_streak
from habitup.suggestions import rank_suggestions
from habitup.validation import (
    normalize_habit_payload,
    parse_day,
    parse_effort,
    parse_mood,
    parse_status,
    parse_time_of_day,
    validate_habit,
)

logger = logging.getLogger(__name__)


class HabitService:
    def __init__(
        self,
        store: HabitStore,
        settings: Settings | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], date] | None = None,
        root: Path | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or Settings()
        self.notifier = notifier or FanoutNotifier()
        self._clock = clock
        self.root = root

    def today(self) -> date:
        if self._clock is not None:
            return self._clock()
        return now_local(self.settings).date()

    # ── Habits ────────────────────────────────────────────────

    def create_habit(self, owner_id: str, payload: dict[str, Any]) -> Habit:
        fields = normalize_habit_payload(payload)
        errors = validate_habit(fields)
        if errors:
            raise InvalidHabit(errors)
        fields["name"] = fields["name"].strip()
        habit = self.store.create_habit(owner_id, fields)
        logger.debug("Owner %s created habit %s (%s)", owner_id, habit.habit_id, habit.name)
        self.notifier.notify(owner_id, "on_habit_created", {"habit": habit.to_dict()})
        return habit

    def list_habits(self, owner_id: str, active_only: bool = False) -> list[Habit]:
        return self.store.list_habits(owner_id, active_only=active_only)

    def get_habit(self, owner_id: str, habit_id: int) -> Habit:
        habit = self.store.get_habit(owner_id, habit_id)
        if habit is None:
            raise UnknownHabit(habit_id)
        return habit

    def update_habit(self, owner_id: str, habit_id: int, payload: dict[str, Any]) -> Habit:
        fields = normalize_habit_payload(payload)
        if not fields:
            raise InvalidHabit(["No updatable fields in request"])
        errors = validate_habit(fields, partial=True)
        if errors:
            raise InvalidHabit(errors)
        if "name" in fields:
            fields["name"] = fields["name"].strip()
        habit = self.store.update_habit(owner_id, habit_id, fields)
        if habit is None:
            raise UnknownHabit(habit_id)
        logger.debug("Owner %s updated habit %s: %s", owner_id, habit_id, sorted(fields))
        return habit

    def delete_habit(self, owner_id: str, habit_id: int) -> None:
        habit = self.get_habit(owner_id, habit_id)
        self.store.delete_habit(owner_id, habit_id)
        logger.debug("Owner %s deleted habit %s", owner_id, habit_id)
        self.notifier.notify(owner_id, "on_habit_deleted", {"habitId": habit_id, "habitName": habit.name})

    # ── Streaks ───────────────────────────────────────────────

    def _streak_for(self, habit: Habit) -> StreakState:
        records = self.store.fetch_records(
            habit.owner_id, habit.habit_id, limit=self.settings.streak_lookback,
        )
        computed = compute_streak(records, self.today(), lookback=self.settings.streak_lookback)
        return merge_streak(computed, habit.longest_streak)

    def recompute_streak(self, habit: Habit) -> StreakState:
        """Re-derive and persist the habit's streak fields."""
        state = self._streak_for(habit)
        self.store.persist_streak(habit.habit_id, state)
        return state

    def on_habit_marked_complete(
        self,
        owner_id: str,
        habit_id: int,
        day: date | str | None = None,
        status: CompletionStatus | str = CompletionStatus.COMPLETED,
        mood: Any = None,
        effort: Any = None,
        notes: str | None = None,
        time_of_day: str | None = None,
    ) -> StreakState:
        habit = self.get_habit(owner_id, habit_id)
        today = self.today()
        day = today if day is None else parse_day(day)
        if day > today:
            raise MalformedRecord(f"Cannot log a completion for a future date: {day.isoformat()}")
        if notes is not None and not isinstance(notes, str):
            raise MalformedRecord("notes must be text")

        fields = {
            "status": parse_status(status),
            "mood": parse_mood(mood),
            "effort": parse_effort(effort),
            "notes": notes,
            "time_of_day": parse_time_of_day(time_of_day) or now_local(self.settings).strftime("%H:%M:%S"),
        }
        record = self.store.upsert_record(owner_id, habit_id, day, fields)
        state = self.recompute_streak(habit)
        logger.info(
            "Owner %s logged %s for habit %s on %s; streak %d (best %d)",
            owner_id, record.status.value, habit_id, day.isoformat(),
            state.current_streak, state.longest_streak,
        )

        event = {
            "habitId": habit_id,
            "habitName": habit.name,
            "record": record.to_dict(),
            **state.to_dict(),
        }
        self.notifier.notify(owner_id, "on_habit_complete", event)
        if record.completed and is_milestone(state.current_streak):
            logger.info("Owner %s reached a %d-day streak on habit %s", owner_id, state.current_streak, habit_id)
            self.notifier.notify(owner_id, "on_streak_milestone", {
                "habitId": habit_id,
                "habitName": habit.name,
                "streak": state.current_streak,
            })
        return state

    # ── Read-only reports ─────────────────────────────────────

    def _window_records(self, habit: Habit, window_days: int) -> list[CompletionRecord]:
        today = self.today()
        records = self.store.fetch_records(
            habit.owner_id, habit.habit_id, since=today - timedelta(days=window_days),
        )
        return [r for r in records if r.calendar_date <= today]

    def on_analytics_requested(
        self,
        owner_id: str,
        habit_id: int,
        window_days: int | None = None,
    ) -> AnalyticsReport:
        if window_days is None:
            window_days = self.settings.analytics_window_days
        if window_days <= 0:
            raise InvalidWindow(window_days)
        habit = self.get_habit(owner_id, habit_id)
        streak = self._streak_for(habit)
        return compute_analytics(
            self._window_records(habit, window_days),
            window_days,
            self.today(),
            current_streak=streak.current_streak,
            longest_streak=streak.longest_streak,
        )

    def on_progress_requested(
        self,
        owner_id: str,
        habit_id: int,
        window_days: int | None = None,
    ) -> tuple[Habit, list[CompletionRecord], ProgressStats]:
        if window_days is None:
            window_days = self.settings.progress_window_days
        if window_days <= 0:
            raise InvalidWindow(window_days)
        habit = self.get_habit(owner_id, habit_id)
        streak = self._streak_for(habit)
        records = self._window_records(habit, window_days)
        stats = compute_progress(records, window_days, streak.current_streak, streak.longest_streak)
        return habit, records, stats

    def on_suggestions_requested(self, owner_id: str) -> list[HabitTemplate]:
        categories = self.store.fetch_categories(owner_id)
        return rank_suggestions(categories, limit=self.settings.suggestion_limit)

    def weekly_summary(self, owner_id: str) -> WeeklySummary:
        today = self.today()
        active = self.store.list_habits(owner_id, active_only=True)
        records = self.store.fetch_owner_records(owner_id, since=today - timedelta(days=6))
        return compute_weekly_summary(owner_id, records, len(active), today)

    def pending_reminders(self, owner_id: str) -> list[Habit]:
        """Active, reminder-enabled habits not yet completed today."""
        today = self.today()
        done = {
            r.habit_id for r in self.store.fetch_owner_records(owner_id, since=today)
            if r.calendar_date == today and r.completed
        }
        return [
            h for h in self.store.list_habits(owner_id, active_only=True)
            if h.reminder_enabled and h.habit_id not in done
        ]

    def export_owner_data(self, owner_id: str, path: Path | None = None) -> Path:
        """Write every habit and completion record of an owner to one JSON file."""
        if path is None:
            path = exports_dir(self.root) / f"{owner_id}-{self.today().isoformat()}.json"
        records = self.store.fetch_owner_records(owner_id)
        habits = []
        for habit in self.store.list_habits(owner_id):
            entry = habit.to_dict()
            entry["progress"] = [r.to_dict() for r in records if r.habit_id == habit.habit_id]
            habits.append(entry)
        write_json_atomic(path, {
            "ownerId": owner_id,
            "exportedAt": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "habits": habits,
        })
        logger.info("Exported %d habits for owner %s to %s", len(habits), owner_id, path)
        return path


def build_service(
    root: Path | None = None,
    registry: ConnectionRegistry | None = None,
) -> HabitService:
    """Wire a service for a data root: SQLite store, settings, hooks and live channels."""
    if root is None:
        root = data_root()
    settings = load_settings(root)
    store = SQLiteStore(db_path(root))
    store.init_db()
    notifiers: list[Notifier] = [HookNotifier(root)]
    if registry is not None:
        notifiers.append(RegistryNotifier(registry))
    return HabitService(store, settings=settings, notifier=FanoutNotifier(notifiers), root=root)
