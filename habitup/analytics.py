"""Analytics engine for HabitUP.

Computes completion rates, weekly and day-of-week breakdowns, mood and
effort histograms and insight strings from a window of completion records.
Every function here is pure: records are fetched by the caller.
"""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Iterable

from habitup.errors import InvalidWindow
from habitup.models import (
    AnalyticsReport,
    CompletionRecord,
    CompletionStatus,
    DayOfWeekStat,
    Mood,
    ProgressStats,
    WeekBucket,
    WeeklySummary,
)
from habitup.validation import check_record

# Fixed order; also the tie-break order for the best-day insight.
WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
EFFORT_LEVELS = range(1, 11)
STREAK_PRAISE_MIN = 7


def _rate(part: int, whole: int, places: int = 2) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, places)


def weekday_name(d: date) -> str:
    # date.weekday() is Monday=0; the breakdown starts on Sunday
    return WEEKDAY_NAMES[(d.weekday() + 1) % 7]


def count_statuses(records: Iterable[CompletionRecord]) -> dict[CompletionStatus, int]:
    counts = {status: 0 for status in CompletionStatus}
    for rec in records:
        counts[rec.status] += 1
    return counts


# ── Breakdowns ────────────────────────────────────────────────


def completion_rate(completed: int, window_days: int) -> float:
    """Completed days over the whole window; unlogged days count against it."""
    return _rate(completed, window_days)


def weekly_breakdown(
    records: list[CompletionRecord],
    window_days: int,
    as_of: date,
) -> list[WeekBucket]:
    """Trailing 7-day buckets, returned oldest first.

    Bucket ``i`` covers days that are ``i*7`` to ``i*7 + 6`` days before
    ``as_of``.
    """
    buckets = []
    for i in range(math.ceil(window_days / 7)):
        completed = sum(
            1 for r in records
            if r.completed and i * 7 <= (as_of - r.calendar_date).days < (i + 1) * 7
        )
        buckets.append(WeekBucket(week=i + 1, completed=completed, total=7, rate=_rate(completed, 7)))
    buckets.reverse()
    return buckets


def day_of_week_stats(records: list[CompletionRecord]) -> dict[str, DayOfWeekStat]:
    stats = {name: DayOfWeekStat() for name in WEEKDAY_NAMES}
    for rec in records:
        stat = stats[weekday_name(rec.calendar_date)]
        stat.total += 1
        if rec.completed:
            stat.completed += 1
    for stat in stats.values():
        stat.rate = _rate(stat.completed, stat.total)
    return stats


def mood_histogram(records: list[CompletionRecord]) -> dict[str, int]:
    hist = {mood.value: 0 for mood in Mood}
    for rec in records:
        if rec.completed and rec.mood is not None:
            hist[rec.mood.value] += 1
    return hist


def effort_histogram(records: list[CompletionRecord]) -> dict[int, int]:
    hist = {level: 0 for level in EFFORT_LEVELS}
    for rec in records:
        if rec.completed and rec.effort is not None:
            hist[rec.effort] += 1
    return hist


# ── Insights ──────────────────────────────────────────────────


def best_day(stats: dict[str, DayOfWeekStat]) -> tuple[str, DayOfWeekStat] | None:
    """Highest-rate weekday; ties go to the earliest day from Sunday on."""
    ordered = [(name, stats[name]) for name in WEEKDAY_NAMES if name in stats]
    if not ordered:
        return None
    ranked = sorted(ordered, key=lambda item: -item[1].rate)
    return ranked[0]


def build_insights(
    stats: dict[str, DayOfWeekStat],
    rate: float,
    current_streak: int,
) -> list[str]:
    insights = []

    top = best_day(stats)
    if top and top[1].rate > 0:
        insights.append(f"Your best day is {top[0]} with a {top[1].rate:.2f}% completion rate")

    if rate > 80:
        insights.append("Great consistency! You're maintaining excellent habits.")
    elif rate > 60:
        insights.append("Good progress! Try to maintain consistency for better results.")
    else:
        insights.append("Focus on building consistency. Small daily actions lead to big changes.")

    if current_streak >= STREAK_PRAISE_MIN:
        insights.append(f"Amazing! You're on a {current_streak}-day streak. Keep it up!")

    return insights


# ── Reports ───────────────────────────────────────────────────


def compute_analytics(
    records: list[CompletionRecord],
    window_days: int,
    as_of: date,
    current_streak: int = 0,
    longest_streak: int = 0,
) -> AnalyticsReport:
    """Compute the analytics report for records already limited to the window.

    A zero-day window yields an all-zero report rather than dividing by zero.
    """
    if window_days < 0:
        raise InvalidWindow(window_days)
    for rec in records:
        check_record(rec)

    counts = count_statuses(records)
    completed = counts[CompletionStatus.COMPLETED]

    report = AnalyticsReport(
        window_days=window_days,
        total_records=len(records),
        completed_days=completed,
        partial_days=counts[CompletionStatus.PARTIAL],
        missed_days=counts[CompletionStatus.MISSED],
        skipped_days=counts[CompletionStatus.SKIPPED],
        completion_rate=completion_rate(completed, window_days),
        current_streak=current_streak,
        longest_streak=longest_streak,
    )
    report.weekly_breakdown = weekly_breakdown(records, window_days, as_of)
    report.day_of_week_stats = day_of_week_stats(records)
    report.mood_stats = mood_histogram(records)
    report.effort_stats = effort_histogram(records)
    report.insights = build_insights(report.day_of_week_stats, report.completion_rate, current_streak)
    return report


def compute_progress(
    records: list[CompletionRecord],
    window_days: int,
    current_streak: int = 0,
    longest_streak: int = 0,
) -> ProgressStats:
    if window_days < 0:
        raise InvalidWindow(window_days)
    counts = count_statuses(records)
    completed = counts[CompletionStatus.COMPLETED]
    return ProgressStats(
        total_days=window_days,
        completed_days=completed,
        partial_days=counts[CompletionStatus.PARTIAL],
        missed_days=counts[CompletionStatus.MISSED],
        current_streak=current_streak,
        longest_streak=longest_streak,
        completion_rate=completion_rate(completed, window_days),
    )


def compute_weekly_summary(
    owner_id: str,
    records: list[CompletionRecord],
    active_habit_count: int,
    week_end: date,
) -> WeeklySummary:
    """Completed records across all habits in the 7 days ending ``week_end``.

    The rate is measured against one completion per active habit per day.
    """
    week_start = week_end - timedelta(days=6)
    completed = sum(
        1 for r in records
        if r.completed and week_start <= r.calendar_date <= week_end
    )
    return WeeklySummary(
        owner_id=owner_id,
        week_start=week_start.isoformat(),
        week_end=week_end.isoformat(),
        completed=completed,
        active_habits=active_habit_count,
        completion_rate=_rate(completed, active_habit_count * 7, places=1),
    )
