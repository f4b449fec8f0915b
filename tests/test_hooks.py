"""Tests for habitup/hooks.py — hook system."""

import json

import yaml

from habitup.hooks import hook_commands, load_hooks_config, run_hooks


def _write_hooks(root, config):
    (root / "hooks.yaml").write_text(yaml.dump(config), encoding="utf-8")


def test_run_hooks_no_config(root):
    """No hooks.yaml -> no hooks run."""
    results = run_hooks("on_habit_complete", {"habitId": 1}, root)
    assert results == []
    assert load_hooks_config(root) == {}


def test_run_hooks_with_echo(root):
    """Hook receives the event context as JSON on stdin."""
    _write_hooks(root, {"on_habit_complete": ["cat"]})

    results = run_hooks("on_habit_complete", {"habitId": 1, "currentStreak": 3}, root)
    assert len(results) == 1
    assert results[0]["exit_code"] == 0
    assert results[0]["hook_point"] == "on_habit_complete"
    output = json.loads(results[0]["stdout"])
    assert output == {"habitId": 1, "currentStreak": 3}


def test_run_hooks_invalid_hook_point(root):
    _write_hooks(root, {"post_finalize": ["cat"]})
    assert run_hooks("post_finalize", {}, root) == []


def test_run_hooks_nonzero_exit(root):
    _write_hooks(root, {"on_streak_milestone": ["exit 3"]})
    results = run_hooks("on_streak_milestone", {"streak": 7}, root)
    assert results[0]["exit_code"] == 3


def test_run_hooks_skips_malformed_entries(root):
    _write_hooks(root, {"on_habit_created": [42, {"command": ""}, {"command": "true"}]})
    results = run_hooks("on_habit_created", {}, root)
    assert [r["command"] for r in results] == ["true"]


def test_run_hooks_uses_env_root(root):
    _write_hooks(root, {"on_habit_deleted": ["cat"]})
    results = run_hooks("on_habit_deleted", {"habitId": 2})
    assert len(results) == 1


def test_run_hooks_timeout(root):
    """Test hook timeout protection."""
    _write_hooks(root, {"on_habit_complete": [{"command": "sleep 10", "timeout": 1}]})

    results = run_hooks("on_habit_complete", {"habitId": 1}, root)
    assert len(results) == 1
    assert results[0]["exit_code"] == -1
    assert "timed out" in results[0].get("error", "").lower()


def test_run_hooks_sets_event_env(root):
    _write_hooks(root, {"on_streak_milestone": ['echo "$HABITUP_EVENT $HABITUP_OWNER"']})
    results = run_hooks("on_streak_milestone", {"ownerId": "alice", "streak": 21}, root)
    assert results[0]["stdout"].strip() == "on_streak_milestone alice"


def test_hook_commands_ignores_non_list(root):
    assert hook_commands({"on_habit_complete": "cat"}, "on_habit_complete") == []
    assert hook_commands({"on_habit_complete": ["cat", {"command": "true", "timeout": 2}]}, "on_habit_complete") == [
        ("cat", 30),
        ("true", 2),
    ]


def test_broken_hooks_yaml_is_ignored(root):
    (root / "hooks.yaml").write_text("on_habit_complete: [cat\n", encoding="utf-8")
    assert load_hooks_config(root) == {}
    assert run_hooks("on_habit_complete", {"habitId": 1}, root) == []


def test_string_timeout_is_coerced(root):
    _write_hooks(root, {"on_habit_complete": [{"command": "cat", "timeout": "5"}]})
    results = run_hooks("on_habit_complete", {"habitId": 1}, root)
    assert results[0]["exit_code"] == 0


def test_unusable_timeout_skips_hook(root):
    _write_hooks(root, {"on_habit_complete": [{"command": "cat", "timeout": "soon"}, "true"]})
    results = run_hooks("on_habit_complete", {"habitId": 1}, root)
    assert [r["command"] for r in results] == ["true"]


def test_hook_error_is_captured(root):
    _write_hooks(root, {"on_habit_complete": [{"command": 42}]})
    results = run_hooks("on_habit_complete", {"habitId": 1}, root)
    assert results[0]["exit_code"] == -1
    assert results[0]["error"]
