"""Tests for habitup/notify.py — connection registry and notifiers."""

from typing import Any

import yaml

from habitup.notify import ConnectionRegistry, FanoutNotifier, HookNotifier, RegistryNotifier


class ListChannel:
    def __init__(self) -> None:
        self.sent: list[tuple[str, dict[str, Any]]] = []

    def send(self, event: str, payload: dict[str, Any]) -> None:
        self.sent.append((event, payload))


class BrokenChannel:
    def send(self, event: str, payload: dict[str, Any]) -> None:
        raise ConnectionError("socket closed")


def test_registry_register_lookup_unregister():
    registry = ConnectionRegistry()
    channel = ListChannel()
    registry.register("alice", channel)
    assert registry.lookup("alice") is channel
    assert registry.lookup("bob") is None
    assert registry.connected() == ["alice"]
    registry.unregister("alice")
    assert registry.lookup("alice") is None


def test_unregister_keeps_newer_channel():
    registry = ConnectionRegistry()
    old, new = ListChannel(), ListChannel()
    registry.register("alice", old)
    registry.register("alice", new)
    registry.unregister("alice", old)
    assert registry.lookup("alice") is new


def test_registry_notifier_delivers():
    registry = ConnectionRegistry()
    channel = ListChannel()
    registry.register("alice", channel)
    notifier = RegistryNotifier(registry)
    assert notifier.notify("alice", "on_habit_complete", {"currentStreak": 2}) is True
    assert channel.sent == [("on_habit_complete", {"currentStreak": 2})]


def test_registry_notifier_offline_owner():
    assert RegistryNotifier(ConnectionRegistry()).notify("alice", "on_habit_complete", {}) is False


def test_registry_notifier_drops_broken_channel():
    registry = ConnectionRegistry()
    registry.register("alice", BrokenChannel())
    notifier = RegistryNotifier(registry)
    assert notifier.notify("alice", "on_habit_complete", {}) is False
    assert registry.lookup("alice") is None


def test_hook_notifier_passes_owner(root):
    (root / "hooks.yaml").write_text(yaml.dump({"on_habit_complete": ["cat"]}), encoding="utf-8")
    assert HookNotifier(root).notify("alice", "on_habit_complete", {"habitId": 1}) is True


def test_hook_notifier_without_hooks(root):
    assert HookNotifier(root).notify("alice", "on_habit_complete", {}) is False


def test_fanout_reaches_every_notifier():
    registry = ConnectionRegistry()
    channel = ListChannel()
    registry.register("alice", channel)
    fanout = FanoutNotifier([RegistryNotifier(ConnectionRegistry()), RegistryNotifier(registry)])
    assert fanout.notify("alice", "on_streak_milestone", {"streak": 7}) is True
    assert len(channel.sent) == 1
    assert FanoutNotifier().notify("alice", "on_streak_milestone", {}) is False
