"""Streak calculation and milestones for HabitUP.

A streak is a run of consecutive calendar days that each carry a COMPLETED
record. Days with no record at all are gaps and end a run; they are not
treated as MISSED.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from habitup.models import CompletionRecord, CompletionStatus, StreakState
from habitup.validation import check_record

STREAK_LOOKBACK = 365
STREAK_MILESTONES = (7, 21, 30, 50, 100)

_ONE_DAY = timedelta(days=1)


def compute_streak(
    records: Iterable[CompletionRecord],
    as_of: date,
    lookback: int = STREAK_LOOKBACK,
) -> StreakState:
    """Derive current and longest streak for one (owner, habit) pair.

    Only the ``lookback`` most recent records dated on or before ``as_of``
    are scanned. The current streak is anchored at ``as_of`` when that day
    has a record, otherwise at the day before (today may not be logged yet).
    """
    scanned = sorted(
        (r for r in records if r.calendar_date <= as_of),
        key=lambda r: r.calendar_date,
        reverse=True,
    )[:lookback]
    if not scanned:
        return StreakState()

    status_by_day: dict[date, CompletionStatus] = {}
    for rec in scanned:
        check_record(rec)
        status_by_day.setdefault(rec.calendar_date, rec.status)

    # Current streak: walk back from the anchor until a gap or a non-completion
    day = as_of if as_of in status_by_day else as_of - _ONE_DAY
    current = 0
    while status_by_day.get(day) is CompletionStatus.COMPLETED:
        current += 1
        day -= _ONE_DAY

    # Longest streak: longest run of adjacent completed days in the window
    longest = 0
    run = 0
    last: date | None = None
    for day in sorted(status_by_day, reverse=True):
        if status_by_day[day] is not CompletionStatus.COMPLETED:
            run = 0
            last = None
            continue
        run = run + 1 if last is not None and last - day == _ONE_DAY else 1
        last = day
        longest = max(longest, run)

    return StreakState(current_streak=current, longest_streak=longest)


def merge_streak(computed: StreakState, stored_longest: int) -> StreakState:
    """Keep the all-time best, which may predate the lookback window."""
    return StreakState(
        current_streak=computed.current_streak,
        longest_streak=max(computed.longest_streak, computed.current_streak, stored_longest),
    )


def is_milestone(streak: int) -> bool:
    return streak in STREAK_MILESTONES
