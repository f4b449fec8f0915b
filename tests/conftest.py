"""Shared test fixtures for HabitUP tests."""

from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path
from typing import Any

import pytest
import yaml

from habitup.models import CompletionRecord, CompletionStatus
from habitup.notify import Notifier
from habitup.service import HabitService
from habitup.settings import Settings
from habitup.store import SQLiteStore

# Wednesday
TODAY = date(2026, 2, 11)


@pytest.fixture
def root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary data root with a config.yaml."""
    root = tmp_path / "habitup"
    root.mkdir()
    config = {
        "timezone": "UTC",
        "analytics_window_days": 90,
        "progress_window_days": 30,
        "log_level": "DEBUG",
        "users": {},
    }
    (root / "config.yaml").write_text(
        yaml.dump(config, default_flow_style=False), encoding="utf-8"
    )
    monkeypatch.setenv("HABITUP_ROOT", str(root))
    monkeypatch.delenv("HABITUP_TIMEZONE", raising=False)
    monkeypatch.delenv("HABITUP_LOG_LEVEL", raising=False)
    return root


@pytest.fixture
def store(root: Path) -> SQLiteStore:
    store = SQLiteStore(root / "habitup.db")
    store.init_db()
    return store


class RecordingNotifier(Notifier):
    """Collects every event instead of delivering it."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def notify(self, owner_id: str, event: str, payload: dict[str, Any]) -> bool:
        self.events.append((owner_id, event, payload))
        return True

    def names(self) -> list[str]:
        return [event for _, event, _ in self.events]


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service(store: SQLiteStore, root: Path, notifier: RecordingNotifier) -> HabitService:
    return HabitService(store, settings=Settings(), notifier=notifier, clock=lambda: TODAY, root=root)


@pytest.fixture
def habit(service: HabitService):
    return service.create_habit("alice", {
        "habitName": "Read for 30 minutes",
        "habitCategory": "LEARNING",
        "difficulty": "MEDIUM",
    })


def make_record(
    days_ago: int,
    status: CompletionStatus | str = CompletionStatus.COMPLETED,
    as_of: date = TODAY,
    **kwargs: Any,
) -> CompletionRecord:
    """A record for habit 1 of 'alice', ``days_ago`` days before ``as_of``."""
    return CompletionRecord(
        owner_id="alice",
        habit_id=1,
        calendar_date=as_of - timedelta(days=days_ago),
        status=CompletionStatus(status),
        **kwargs,
    )
