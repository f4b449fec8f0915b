"""Boundary validation for habit and completion payloads.

Habit payloads follow the validate-then-apply style: ``validate_habit``
returns a list of problems (empty if valid). Completion fields are parsed one
at a time and raise ``MalformedRecord`` rather than being coerced.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from habitup.errors import MalformedRecord
from habitup.models import Category, CompletionRecord, CompletionStatus, Difficulty, Mood


# ── Habits ────────────────────────────────────────────────────


# camelCase API key -> snake_case field. Streak fields are absent on purpose:
# only the streak calculator writes them.
HABIT_FIELDS = {
    "habitName": "name",
    "habitDescription": "description",
    "habitCategory": "category",
    "targetDays": "target_days",
    "isActive": "is_active",
    "reminderTime": "reminder_time",
    "reminderEnabled": "reminder_enabled",
    "difficulty": "difficulty",
}

VALID_CATEGORIES = {c.value for c in Category}
VALID_DIFFICULTIES = {d.value for d in Difficulty}

_CLOCK_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


def normalize_habit_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Map an API payload onto editable habit fields, dropping unknown keys."""
    out: dict[str, Any] = {}
    editable = set(HABIT_FIELDS.values())
    for key, value in (payload or {}).items():
        if key in HABIT_FIELDS:
            out[HABIT_FIELDS[key]] = value
        elif key in editable:
            out[key] = value
    return out


def validate_habit(fields: dict[str, Any], partial: bool = False) -> list[str]:
    """Validate normalized habit fields and return list of errors (empty if valid).

    With ``partial=True`` (updates) a missing name is allowed.
    """
    errors = []
    if "name" not in fields:
        if not partial:
            errors.append("Habit name is required")
    elif not isinstance(fields["name"], str) or not fields["name"].strip():
        errors.append("Habit name is required")

    if "category" in fields and fields["category"] not in VALID_CATEGORIES:
        errors.append(f"Invalid habit category: {fields['category']}")

    if "difficulty" in fields and fields["difficulty"] not in VALID_DIFFICULTIES:
        errors.append(f"Invalid difficulty: {fields['difficulty']}")

    if "target_days" in fields:
        td = fields["target_days"]
        if isinstance(td, bool) or not isinstance(td, int) or td < 1:
            errors.append("targetDays must be a positive integer")

    if fields.get("reminder_time") is not None:
        if not isinstance(fields["reminder_time"], str) or not _CLOCK_TIME_RE.match(fields["reminder_time"]):
            errors.append(f"Invalid reminder time: {fields['reminder_time']}")

    for flag in ("is_active", "reminder_enabled"):
        if flag in fields and not isinstance(fields[flag], bool):
            errors.append(f"{flag} must be a boolean")

    return errors


# ── Completion records ────────────────────────────────────────


def parse_status(value: Any) -> CompletionStatus:
    if isinstance(value, CompletionStatus):
        return value
    try:
        return CompletionStatus(str(value).upper())
    except ValueError:
        raise MalformedRecord(f"Invalid completion status: {value!r}") from None


def parse_mood(value: Any) -> Mood | None:
    if value is None or value == "":
        return None
    if isinstance(value, Mood):
        return value
    try:
        return Mood(str(value).upper())
    except ValueError:
        raise MalformedRecord(f"Invalid mood: {value!r}") from None


def parse_effort(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedRecord(f"Effort level must be an integer 1-10, got {value!r}")
    if value < 1 or value > 10:
        raise MalformedRecord(f"Effort level must be between 1 and 10, got {value}")
    return value


def parse_day(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise MalformedRecord(f"Invalid date: {value!r}") from None


def parse_time_of_day(value: Any) -> str | None:
    """``HH:MM`` or ``HH:MM:SS``; None means unset."""
    if value is None or value == "":
        return None
    if not isinstance(value, str) or not _CLOCK_TIME_RE.match(value):
        raise MalformedRecord(f"Invalid completion time: {value!r}")
    return value


def check_record(record: CompletionRecord) -> CompletionRecord:
    """Reject a record whose fields fall outside their closed sets."""
    if not isinstance(record.status, CompletionStatus):
        raise MalformedRecord(f"Invalid completion status: {record.status!r}")
    if record.mood is not None and not isinstance(record.mood, Mood):
        raise MalformedRecord(f"Invalid mood: {record.mood!r}")
    parse_effort(record.effort)
    return record
