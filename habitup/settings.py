"""Data root, settings, clock and logging setup for HabitUP.

Layout of the data root (``HABITUP_ROOT``, default ``~/habitup``)::

    config.yaml   timezone, windows, users, log level
    hooks.yaml    lifecycle hook commands
    habitup.db    SQLite store
    exports/      owner data exports
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from habitup.fileio import read_yaml, write_yaml

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def data_root() -> Path:
    """Get the data root directory."""
    return Path(
        os.environ.get("HABITUP_ROOT", str(Path.home() / "habitup"))
    ).expanduser().resolve()


# ── Path helpers ──────────────────────────────────────────────

def config_path(root: Path | None = None) -> Path:
    if root is None:
        root = data_root()
    return root / "config.yaml"


def hooks_config_path(root: Path | None = None) -> Path:
    if root is None:
        root = data_root()
    return root / "hooks.yaml"


def db_path(root: Path | None = None) -> Path:
    if root is None:
        root = data_root()
    return root / "habitup.db"


def exports_dir(root: Path | None = None) -> Path:
    if root is None:
        root = data_root()
    return root / "exports"


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    timezone: str = "UTC"
    streak_lookback: int = 365
    analytics_window_days: int = 90
    progress_window_days: int = 30
    suggestion_limit: int = 10
    log_level: str = "INFO"
    users: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        users = d.get("users") or {}
        return cls(
            timezone=str(d.get("timezone", "UTC")),
            streak_lookback=int(d.get("streak_lookback", 365)),
            analytics_window_days=int(d.get("analytics_window_days", 90)),
            progress_window_days=int(d.get("progress_window_days", 30)),
            suggestion_limit=int(d.get("suggestion_limit", 10)),
            log_level=str(d.get("log_level", "INFO")).upper(),
            users={str(k): str(v) for k, v in users.items()} if isinstance(users, dict) else {},
        )

    def tzinfo(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logging.getLogger(__name__).warning("Unknown timezone %r, using UTC", self.timezone)
            return ZoneInfo("UTC")


def load_settings(root: Path | None = None) -> Settings:
    """Load config.yaml, then apply environment overrides."""
    settings = Settings.from_dict(read_yaml(config_path(root)))
    if os.environ.get("HABITUP_TIMEZONE"):
        settings.timezone = os.environ["HABITUP_TIMEZONE"]
    if os.environ.get("HABITUP_LOG_LEVEL"):
        settings.log_level = os.environ["HABITUP_LOG_LEVEL"].upper()
    return settings


# ── Clock ─────────────────────────────────────────────────────


def now_local(settings: Settings | None = None) -> datetime:
    """Get current datetime in the configured timezone."""
    if settings is None:
        settings = load_settings()
    return datetime.now(settings.tzinfo())


def today(settings: Settings | None = None) -> date:
    """Get today's date in the configured timezone."""
    return now_local(settings).date()


# ── Logging ───────────────────────────────────────────────────


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def ensure_data_root(root: Path | None = None) -> Path:
    """Create the data root and a default config.yaml if missing."""
    if root is None:
        root = data_root()
    root.mkdir(parents=True, exist_ok=True)
    path = config_path(root)
    if not path.exists():
        defaults = Settings()
        write_yaml(path, {
            "timezone": defaults.timezone,
            "streak_lookback": defaults.streak_lookback,
            "analytics_window_days": defaults.analytics_window_days,
            "progress_window_days": defaults.progress_window_days,
            "suggestion_limit": defaults.suggestion_limit,
            "log_level": defaults.log_level,
            "users": {},
        })
    return root
