"""Ports (interfaces) used by the core.

Ports define the minimal contracts for the cache, the remote source and the
actions so that the manager and the rule engine can run against fakes.
"""

from __future__ import annotations

from typing import Protocol

from ghinbox.core.models import Notification, Notifications


class CachePort(Protocol):
    """Expiring single-snapshot store."""

    def expired(self) -> bool:
        ...

    def read(self) -> Notifications:
        ...

    def write(self, notifications: Notifications) -> None:
        ...


class NotificationSourcePort(Protocol):
    """Full, enriched list of the notifications currently on the remote."""

    def notifications(self) -> Notifications:
        ...


class ActorPort(Protocol):
    """Runs one action against one notification.

    Returns a display string, raises on failure.
    """

    def run(self, notification: Notification) -> str:
        ...
