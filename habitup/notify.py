"""Notification delivery for habit events.

The service talks to an abstract ``Notifier``. Connected clients are tracked
in a ``ConnectionRegistry`` that is passed in, never held as module state.
Delivery is best effort: a missing connection or a failing channel is logged
and reported as ``False``, never raised to the caller.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Any, Iterable, Protocol

from habitup.hooks import run_hooks

logger = logging.getLogger(__name__)


class Channel(Protocol):
    """A live connection to one owner's client."""

    def send(self, event: str, payload: dict[str, Any]) -> None: ...


class ConnectionRegistry:
    """Owner id -> currently connected channel."""

    def __init__(self) -> None:
        self._channels: dict[str, Channel] = {}
        self._lock = Lock()

    def register(self, owner_id: str, channel: Channel) -> None:
        with self._lock:
            self._channels[owner_id] = channel
        logger.debug("Owner %s connected", owner_id)

    def unregister(self, owner_id: str, channel: Channel | None = None) -> None:
        """Drop the owner's channel; with ``channel`` given, only if it is still current."""
        with self._lock:
            current = self._channels.get(owner_id)
            if current is not None and (channel is None or current is channel):
                del self._channels[owner_id]
        logger.debug("Owner %s disconnected", owner_id)

    def lookup(self, owner_id: str) -> Channel | None:
        with self._lock:
            return self._channels.get(owner_id)

    def connected(self) -> list[str]:
        with self._lock:
            return sorted(self._channels)


class Notifier(ABC):
    @abstractmethod
    def notify(self, owner_id: str, event: str, payload: dict[str, Any]) -> bool:
        """Deliver an event; return True if it reached at least one target."""


class RegistryNotifier(Notifier):
    """Push events to the owner's live channel, if connected."""

    def __init__(self, registry: ConnectionRegistry) -> None:
        self.registry = registry

    def notify(self, owner_id: str, event: str, payload: dict[str, Any]) -> bool:
        channel = self.registry.lookup(owner_id)
        if channel is None:
            return False
        try:
            channel.send(event, payload)
        except Exception:
            logger.warning("Dropping %s for owner %s: channel send failed", event, owner_id, exc_info=True)
            self.registry.unregister(owner_id, channel)
            return False
        return True


class HookNotifier(Notifier):
    """Forward events to the shell hooks configured in hooks.yaml."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root

    def notify(self, owner_id: str, event: str, payload: dict[str, Any]) -> bool:
        results = run_hooks(event, {"ownerId": owner_id, **payload}, self.root)
        return any(r.get("exit_code") == 0 for r in results)


class FanoutNotifier(Notifier):
    """Deliver to every wrapped notifier."""

    def __init__(self, notifiers: Iterable[Notifier] = ()) -> None:
        self.notifiers = list(notifiers)

    def notify(self, owner_id: str, event: str, payload: dict[str, Any]) -> bool:
        delivered = False
        for notifier in self.notifiers:
            delivered = notifier.notify(owner_id, event, payload) or delivered
        return delivered
