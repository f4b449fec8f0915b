"""Lifecycle hooks for HabitUP.

Hooks run shell commands when habit events happen. Configured via
hooks.yaml in the data root, one list of commands per hook point::

    on_habit_complete:
      - ./scripts/post_to_chat.sh
    on_streak_milestone:
      - command: notify-send "streak"
        timeout: 5

Hook points:
- on_habit_created, on_habit_deleted
- on_habit_complete
- on_streak_milestone
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from pathlib import Path
from typing import Any

import yaml

from habitup.fileio import read_yaml
from habitup.settings import data_root, hooks_config_path

logger = logging.getLogger(__name__)

VALID_HOOK_POINTS = {
    "on_habit_created",
    "on_habit_deleted",
    "on_habit_complete",
    "on_streak_milestone",
}

DEFAULT_TIMEOUT = 30


def load_hooks_config(root: Path | None = None) -> dict[str, Any]:
    """Load hooks configuration from hooks.yaml."""
    if root is None:
        root = data_root()
    path = hooks_config_path(root)
    if not path.exists():
        return {}
    try:
        return read_yaml(path)
    except yaml.YAMLError as e:
        logger.warning("Ignoring unreadable %s: %s", path, e)
        return {}


def hook_commands(config: dict[str, Any], hook_point: str) -> list[tuple[str, float]]:
    """(command, timeout) pairs for a hook point; malformed entries are skipped."""
    entries = config.get(hook_point) or []
    if not isinstance(entries, list):
        logger.warning("hooks.yaml: %s should be a list, got %s", hook_point, type(entries).__name__)
        return []

    commands = []
    for entry in entries:
        if isinstance(entry, str):
            command, timeout = entry, DEFAULT_TIMEOUT
        elif isinstance(entry, dict):
            command = entry.get("command", "")
            try:
                timeout = float(entry.get("timeout", DEFAULT_TIMEOUT))
            except (TypeError, ValueError):
                logger.warning("hooks.yaml: skipping %s hook %r, bad timeout %r", hook_point, command, entry.get("timeout"))
                continue
        else:
            continue
        if command:
            commands.append((command, timeout))
    return commands


def _hook_env(hook_point: str, context: dict[str, Any]) -> dict[str, str]:
    env = dict(os.environ)
    env["HABITUP_EVENT"] = hook_point
    if "ownerId" in context:
        env["HABITUP_OWNER"] = str(context["ownerId"])
    return env


def run_hooks(
    hook_point: str,
    context: dict[str, Any],
    root: Path | None = None,
) -> list[dict[str, Any]]:
    """Run all hooks registered for a habit event.

    The event context is passed as JSON via stdin; ``HABITUP_EVENT`` and
    ``HABITUP_OWNER`` are set in the hook's environment. Returns one result
    dict per hook with its exit code and (capped) output.
    """
    if hook_point not in VALID_HOOK_POINTS:
        return []

    if root is None:
        root = data_root()

    commands = hook_commands(load_hooks_config(root), hook_point)
    if not commands:
        return []

    payload = json.dumps(context, ensure_ascii=False)
    env = _hook_env(hook_point, context)

    results = []
    for command, timeout in commands:
        result: dict[str, Any] = {"command": command, "hook_point": hook_point}
        try:
            proc = subprocess.run(
                command,
                shell=True,
                input=payload,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=str(root),
                env=env,
            )
        except subprocess.TimeoutExpired:
            result.update(exit_code=-1, error=f"Hook timed out after {timeout}s")
            logger.warning("Hook %s (%s) timed out after %ss", hook_point, command, timeout)
        except Exception as e:
            result.update(exit_code=-1, error=str(e))
            logger.warning("Hook %s (%s) failed: %s", hook_point, command, e)
        else:
            result.update(exit_code=proc.returncode, stdout=proc.stdout[:4096], stderr=proc.stderr[:4096])
            if proc.returncode != 0:
                logger.warning("Hook %s (%s) exited with %d", hook_point, command, proc.returncode)
        results.append(result)

    return results
