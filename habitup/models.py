"""Typed dataclasses and enums for the HabitUP data model.

All models use from_dict/to_dict for JSON serialization.
camelCase in JSON is mapped to snake_case in Python; from_dict accepts
either spelling so that store rows and API payloads share one parser.
Missing keys use defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


# ── Enums ─────────────────────────────────────────────────────


class CompletionStatus(str, Enum):
    COMPLETED = "COMPLETED"
    PARTIAL = "PARTIAL"
    MISSED = "MISSED"
    SKIPPED = "SKIPPED"


class Mood(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    NEUTRAL = "NEUTRAL"
    BAD = "BAD"
    TERRIBLE = "TERRIBLE"


class Category(str, Enum):
    HEALTH_FITNESS = "HEALTH_FITNESS"
    PRODUCTIVITY = "PRODUCTIVITY"
    MINDFULNESS = "MINDFULNESS"
    LEARNING = "LEARNING"
    SOCIAL = "SOCIAL"
    PERSONAL_CARE = "PERSONAL_CARE"
    CREATIVITY = "CREATIVITY"
    OTHER = "OTHER"


class Difficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"

    @property
    def rank(self) -> int:
        return {"EASY": 1, "MEDIUM": 2, "HARD": 3}[self.value]


class Priority(str, Enum):
    HIGH = "HIGH"
    LOW = "LOW"


def _pick(d: dict[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    if snake in d:
        return d[snake]
    return d.get(camel, default)


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


# ── Completion records ────────────────────────────────────────


@dataclass
class CompletionRecord:
    """One logged attempt at a habit for one calendar date."""

    owner_id: str
    habit_id: int
    calendar_date: date
    status: CompletionStatus = CompletionStatus.MISSED
    time_of_day: str | None = None
    mood: Mood | None = None
    effort: int | None = None
    notes: str | None = None
    record_id: int | None = None

    @property
    def completed(self) -> bool:
        return self.status is CompletionStatus.COMPLETED

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> CompletionRecord:
        mood = _pick(d, "mood", "mood")
        effort = _pick(d, "effort", "effortLevel")
        return cls(
            owner_id=str(_pick(d, "owner_id", "ownerId", "")),
            habit_id=int(_pick(d, "habit_id", "habitId", 0)),
            calendar_date=_as_date(_pick(d, "calendar_date", "completionDate")),
            status=CompletionStatus(_pick(d, "status", "completionStatus", "MISSED")),
            time_of_day=_pick(d, "time_of_day", "completionTime"),
            mood=Mood(mood) if mood else None,
            effort=int(effort) if effort is not None else None,
            notes=_pick(d, "notes", "notes"),
            record_id=_pick(d, "record_id", "progressId"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "progressId": self.record_id,
            "ownerId": self.owner_id,
            "habitId": self.habit_id,
            "completionDate": self.calendar_date.isoformat(),
            "completionStatus": self.status.value,
            "completionTime": self.time_of_day,
            "mood": self.mood.value if self.mood else None,
            "effortLevel": self.effort,
            "notes": self.notes,
        }


# ── Habits ────────────────────────────────────────────────────


@dataclass
class Habit:
    habit_id: int | None = None
    owner_id: str = ""
    name: str = ""
    description: str = ""
    category: Category = Category.OTHER
    target_days: int = 21
    current_streak: int = 0
    longest_streak: int = 0
    is_active: bool = True
    reminder_time: str | None = None  # HH:MM
    reminder_enabled: bool = False
    difficulty: Difficulty = Difficulty.MEDIUM
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Habit:
        if not d or not isinstance(d, dict):
            return cls()
        habit_id = _pick(d, "habit_id", "habitId")
        return cls(
            habit_id=int(habit_id) if habit_id is not None else None,
            owner_id=str(_pick(d, "owner_id", "ownerId", "")),
            name=str(_pick(d, "name", "habitName", "")),
            description=str(_pick(d, "description", "habitDescription", "") or ""),
            category=Category(_pick(d, "category", "habitCategory", "OTHER") or "OTHER"),
            target_days=int(_pick(d, "target_days", "targetDays", 21)),
            current_streak=int(_pick(d, "current_streak", "currentStreak", 0) or 0),
            longest_streak=int(_pick(d, "longest_streak", "longestStreak", 0) or 0),
            is_active=bool(_pick(d, "is_active", "isActive", True)),
            reminder_time=_pick(d, "reminder_time", "reminderTime"),
            reminder_enabled=bool(_pick(d, "reminder_enabled", "reminderEnabled", False)),
            difficulty=Difficulty(_pick(d, "difficulty", "difficulty", "MEDIUM") or "MEDIUM"),
            created_at=str(_pick(d, "created_at", "createdDate", "") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "habitId": self.habit_id,
            "ownerId": self.owner_id,
            "habitName": self.name,
            "habitDescription": self.description,
            "habitCategory": self.category.value,
            "targetDays": self.target_days,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "isActive": self.is_active,
            "reminderTime": self.reminder_time,
            "reminderEnabled": self.reminder_enabled,
            "difficulty": self.difficulty.value,
            "createdDate": self.created_at,
        }


# ── Streaks ───────────────────────────────────────────────────


@dataclass(frozen=True)
class StreakState:
    current_streak: int = 0
    longest_streak: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
        }


# ── Analytics ─────────────────────────────────────────────────


@dataclass
class WeekBucket:
    week: int
    completed: int = 0
    total: int = 7
    rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "week": self.week,
            "completed": self.completed,
            "total": self.total,
            "rate": self.rate,
        }


@dataclass
class DayOfWeekStat:
    total: int = 0
    completed: int = 0
    rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"total": self.total, "completed": self.completed, "rate": self.rate}


@dataclass
class AnalyticsReport:
    window_days: int = 0
    total_records: int = 0
    completed_days: int = 0
    partial_days: int = 0
    missed_days: int = 0
    skipped_days: int = 0
    completion_rate: float = 0.0
    current_streak: int = 0
    longest_streak: int = 0
    weekly_breakdown: list[WeekBucket] = field(default_factory=list)
    day_of_week_stats: dict[str, DayOfWeekStat] = field(default_factory=dict)
    mood_stats: dict[str, int] = field(default_factory=dict)
    effort_stats: dict[int, int] = field(default_factory=dict)
    insights: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "analytics": {
                "totalDays": self.window_days,
                "totalRecords": self.total_records,
                "completedDays": self.completed_days,
                "partialDays": self.partial_days,
                "missedDays": self.missed_days,
                "skippedDays": self.skipped_days,
                "completionRate": self.completion_rate,
                "currentStreak": self.current_streak,
                "longestStreak": self.longest_streak,
            },
            "weeklyBreakdown": [w.to_dict() for w in self.weekly_breakdown],
            "dayOfWeekStats": {k: v.to_dict() for k, v in self.day_of_week_stats.items()},
            "moodStats": dict(self.mood_stats),
            "effortStats": {str(k): v for k, v in self.effort_stats.items()},
            "insights": list(self.insights),
        }


@dataclass
class ProgressStats:
    total_days: int = 0
    completed_days: int = 0
    partial_days: int = 0
    missed_days: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    completion_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalDays": self.total_days,
            "completedDays": self.completed_days,
            "partialDays": self.partial_days,
            "missedDays": self.missed_days,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "completionRate": self.completion_rate,
        }


@dataclass
class WeeklySummary:
    owner_id: str = ""
    week_start: str = ""
    week_end: str = ""
    completed: int = 0
    active_habits: int = 0
    completion_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "ownerId": self.owner_id,
            "weekStart": self.week_start,
            "weekEnd": self.week_end,
            "completedHabits": self.completed,
            "activeHabits": self.active_habits,
            "completionRate": self.completion_rate,
        }


# ── Suggestions ───────────────────────────────────────────────


@dataclass(frozen=True)
class HabitTemplate:
    """Catalog entry for a habit the owner has not adopted yet."""

    name: str
    description: str
    category: Category
    difficulty: Difficulty
    priority: Priority | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "difficulty": self.difficulty.value,
        }
        if self.priority is not None:
            d["priority"] = self.priority.value
        return d
