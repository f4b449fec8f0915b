"""SQLite storage for habits and completion records.

Tables are created on first use. Each call opens and closes its own
connection; the UNIQUE (owner_id, habit_id, calendar_date) index makes
record upserts last-writer-wins.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable

from habitup.models import Category, CompletionRecord, Habit, StreakState

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS habits (
        habit_id         INTEGER PRIMARY KEY AUTOINCREMENT,
        owner_id         TEXT    NOT NULL,
        name             TEXT    NOT NULL,
        description      TEXT    NOT NULL DEFAULT '',
        category         TEXT    NOT NULL DEFAULT 'OTHER',
        target_days      INTEGER NOT NULL DEFAULT 21,
        current_streak   INTEGER NOT NULL DEFAULT 0,
        longest_streak   INTEGER NOT NULL DEFAULT 0,
        is_active        INTEGER NOT NULL DEFAULT 1,
        reminder_time    TEXT,
        reminder_enabled INTEGER NOT NULL DEFAULT 0,
        difficulty       TEXT    NOT NULL DEFAULT 'MEDIUM',
        created_at       TEXT    NOT NULL,
        updated_at       TEXT    NOT NULL
    );
    CREATE INDEX IF NOT EXISTS idx_habits_owner
        ON habits(owner_id, is_active);

    -- One row per (owner, habit, day)
    CREATE TABLE IF NOT EXISTS habit_progress (
        record_id     INTEGER PRIMARY KEY AUTOINCREMENT,
        owner_id      TEXT    NOT NULL,
        habit_id      INTEGER NOT NULL REFERENCES habits(habit_id) ON DELETE CASCADE,
        calendar_date TEXT    NOT NULL,
        status        TEXT    NOT NULL DEFAULT 'MISSED',
        time_of_day   TEXT,
        mood          TEXT,
        effort        INTEGER CHECK (effort IS NULL OR effort BETWEEN 1 AND 10),
        notes         TEXT,
        created_at    TEXT    NOT NULL,
        updated_at    TEXT    NOT NULL
    );
    CREATE UNIQUE INDEX IF NOT EXISTS idx_progress_owner_habit_date
        ON habit_progress(owner_id, habit_id, calendar_date);
"""

_HABIT_COLUMNS = {
    "name",
    "description",
    "category",
    "target_days",
    "is_active",
    "reminder_time",
    "reminder_enabled",
    "difficulty",
}

_RECORD_COLUMNS = ("status", "time_of_day", "mood", "effort", "notes")


class RecordStore(Protocol):
    def fetch_records(
        self, owner_id: str, habit_id: int, since: date | None = None, limit: int | None = None,
    ) -> list[CompletionRecord]: ...

    def fetch_categories(self, owner_id: str) -> list[Category]: ...

    def upsert_record(
        self, owner_id: str, habit_id: int, day: date, fields: dict[str, Any],
    ) -> CompletionRecord: ...

    def fetch_owner_records(self, owner_id: str, since: date | None = None) -> list[CompletionRecord]: ...


class HabitRepository(Protocol):
    def create_habit(self, owner_id: str, fields: dict[str, Any]) -> Habit: ...

    def get_habit(self, owner_id: str, habit_id: int) -> Habit | None: ...

    def list_habits(self, owner_id: str, active_only: bool = False) -> list[Habit]: ...

    def update_habit(self, owner_id: str, habit_id: int, fields: dict[str, Any]) -> Habit | None: ...

    def delete_habit(self, owner_id: str, habit_id: int) -> bool: ...

    def persist_streak(self, habit_id: int, state: StreakState) -> None: ...


@runtime_checkable
class HabitStore(RecordStore, HabitRepository, Protocol):
    """Everything the habit service needs from storage."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _db_value(value: Any) -> Any:
    """Enums are stored by value, booleans as 0/1."""
    if hasattr(value, "value"):
        return value.value
    if isinstance(value, bool):
        return int(value)
    return value


class SQLiteStore:
    """Record store and habit repository backed by one SQLite file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _connect(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init_db(self) -> None:
        """Create tables if they don't exist."""
        with self._session() as conn:
            conn.executescript(SCHEMA)
        logger.info("Database initialized at %s", self.path)

    # ── Habits ────────────────────────────────────────────────

    def create_habit(self, owner_id: str, fields: dict[str, Any]) -> Habit:
        values = {k: _db_value(v) for k, v in fields.items() if k in _HABIT_COLUMNS}
        now = _now()
        values.update(owner_id=owner_id, created_at=now, updated_at=now)
        columns = ", ".join(values)
        marks = ", ".join("?" for _ in values)
        with self._session() as conn:
            cur = conn.execute(
                f"INSERT INTO habits ({columns}) VALUES ({marks})",
                tuple(values.values()),
            )
            row = conn.execute("SELECT * FROM habits WHERE habit_id = ?", (cur.lastrowid,)).fetchone()
        return Habit.from_dict(dict(row))

    def get_habit(self, owner_id: str, habit_id: int) -> Habit | None:
        with self._session() as conn:
            row = conn.execute(
                "SELECT * FROM habits WHERE habit_id = ? AND owner_id = ?",
                (habit_id, owner_id),
            ).fetchone()
        return Habit.from_dict(dict(row)) if row else None

    def list_habits(self, owner_id: str, active_only: bool = False) -> list[Habit]:
        sql = "SELECT * FROM habits WHERE owner_id = ?"
        if active_only:
            sql += " AND is_active = 1"
        sql += " ORDER BY created_at DESC, habit_id DESC"
        with self._session() as conn:
            rows = conn.execute(sql, (owner_id,)).fetchall()
        return [Habit.from_dict(dict(r)) for r in rows]

    def update_habit(self, owner_id: str, habit_id: int, fields: dict[str, Any]) -> Habit | None:
        values = {k: _db_value(v) for k, v in fields.items() if k in _HABIT_COLUMNS}
        values["updated_at"] = _now()
        assignments = ", ".join(f"{k} = ?" for k in values)
        with self._session() as conn:
            cur = conn.execute(
                f"UPDATE habits SET {assignments} WHERE habit_id = ? AND owner_id = ?",
                (*values.values(), habit_id, owner_id),
            )
            if cur.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM habits WHERE habit_id = ?", (habit_id,)).fetchone()
        return Habit.from_dict(dict(row))

    def delete_habit(self, owner_id: str, habit_id: int) -> bool:
        """Delete a habit and all of its completion records."""
        with self._session() as conn:
            conn.execute(
                "DELETE FROM habit_progress WHERE habit_id = ? AND owner_id = ?",
                (habit_id, owner_id),
            )
            cur = conn.execute(
                "DELETE FROM habits WHERE habit_id = ? AND owner_id = ?",
                (habit_id, owner_id),
            )
        return cur.rowcount > 0

    def persist_streak(self, habit_id: int, state: StreakState) -> None:
        with self._session() as conn:
            conn.execute(
                "UPDATE habits SET current_streak = ?, longest_streak = ?, updated_at = ? WHERE habit_id = ?",
                (state.current_streak, state.longest_streak, _now(), habit_id),
            )

    def fetch_categories(self, owner_id: str) -> list[Category]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT DISTINCT category FROM habits WHERE owner_id = ? ORDER BY category",
                (owner_id,),
            ).fetchall()
        return [Category(r["category"]) for r in rows]

    # ── Completion records ────────────────────────────────────

    def upsert_record(
        self,
        owner_id: str,
        habit_id: int,
        day: date,
        fields: dict[str, Any],
    ) -> CompletionRecord:
        """Insert the day's record, or overwrite its mutable fields if present."""
        values = [_db_value(fields.get(col)) for col in _RECORD_COLUMNS]
        now = _now()
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO habit_progress
                    (owner_id, habit_id, calendar_date, status, time_of_day, mood, effort, notes,
                     created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (owner_id, habit_id, calendar_date) DO UPDATE SET
                    status = excluded.status,
                    time_of_day = excluded.time_of_day,
                    mood = excluded.mood,
                    effort = excluded.effort,
                    notes = excluded.notes,
                    updated_at = excluded.updated_at
                """,
                (owner_id, habit_id, day.isoformat(), *values, now, now),
            )
            row = conn.execute(
                "SELECT * FROM habit_progress WHERE owner_id = ? AND habit_id = ? AND calendar_date = ?",
                (owner_id, habit_id, day.isoformat()),
            ).fetchone()
        return CompletionRecord.from_dict(dict(row))

    def fetch_records(
        self,
        owner_id: str,
        habit_id: int,
        since: date | None = None,
        limit: int | None = None,
    ) -> list[CompletionRecord]:
        """Records for one habit, newest first."""
        sql = "SELECT * FROM habit_progress WHERE owner_id = ? AND habit_id = ?"
        params: list[Any] = [owner_id, habit_id]
        if since is not None:
            sql += " AND calendar_date >= ?"
            params.append(since.isoformat())
        sql += " ORDER BY calendar_date DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        with self._session() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [CompletionRecord.from_dict(dict(r)) for r in rows]

    def fetch_owner_records(self, owner_id: str, since: date | None = None) -> list[CompletionRecord]:
        """Records across all of an owner's habits, newest first."""
        sql = "SELECT * FROM habit_progress WHERE owner_id = ?"
        params: list[Any] = [owner_id]
        if since is not None:
            sql += " AND calendar_date >= ?"
            params.append(since.isoformat())
        sql += " ORDER BY calendar_date DESC, habit_id"
        with self._session() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [CompletionRecord.from_dict(dict(r)) for r in rows]
