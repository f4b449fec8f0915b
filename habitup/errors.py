"""Error types for HabitUP.

Every error carries the HTTP status the API layer answers with.
"""

from __future__ import annotations


class HabitUpError(Exception):
    """Base class for operational errors surfaced to the caller."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidWindow(HabitUpError):
    """Requested analytics window is not a positive number of days."""

    status_code = 400

    def __init__(self, window_days: int) -> None:
        super().__init__(f"Invalid window: {window_days} days (must be > 0)")
        self.window_days = window_days


class UnknownHabit(HabitUpError):
    status_code = 404

    def __init__(self, habit_id: int) -> None:
        super().__init__("Habit not found")
        self.habit_id = habit_id


class MalformedRecord(HabitUpError):
    """Completion record field outside its closed set or range."""

    status_code = 400


class InvalidHabit(HabitUpError):
    """Habit payload failed validation; ``errors`` lists every problem."""

    status_code = 400

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors
