"""Actions that rules can dispatch notifications to.

Each actor satisfies the core ActorPort: ``run`` performs at most one remote
side effect for one notification and returns a display string.
Ref: https://docs.github.com/en/rest/activity/notifications
"""

from __future__ import annotations

import logging

from ghinbox.adapters.github_client import GitHubClient
from ghinbox.adapters.notification_formatting import format_action, format_debug, format_line
from ghinbox.core.errors import ActionError
from ghinbox.core.models import Notification
from ghinbox.core.ports import ActorPort

LOGGER = logging.getLogger(__name__)


def _thread_url(notification: Notification) -> str:
    if not notification.url:
        raise ActionError(f"Notification {notification.id} has no thread URL")
    return notification.url


class DoneActor:
    """Marks the thread as done on GitHub and drops it from the local snapshot."""

    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    def run(self, notification: Notification) -> str:
        LOGGER.debug("Marking notification %s as done", notification.id)
        self._client.request("DELETE", _thread_url(notification))
        notification.meta.done = True
        notification.meta.to_delete = True
        return format_action("DONE", "red", notification)


class ReadActor:
    """Marks the thread as read on GitHub."""

    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    def run(self, notification: Notification) -> str:
        LOGGER.debug("Marking notification %s as read", notification.id)
        self._client.request("PATCH", _thread_url(notification))
        notification.unread = False
        return format_action("READ", "yellow", notification)


class HideActor:
    """Hides the notification locally; nothing is sent to GitHub."""

    def run(self, notification: Notification) -> str:
        notification.meta.done = True
        return format_action("HIDE", "blue", notification)


class PrintActor:
    def run(self, notification: Notification) -> str:
        return format_line(notification)


class DebugActor:
    def run(self, notification: Notification) -> str:
        return format_debug(notification)


def build_actor_map(client: GitHubClient) -> dict[str, ActorPort]:
    """Return the action-name registry used by the rule engine."""

    return {
        "done": DoneActor(client),
        "read": ReadActor(client),
        "hide": HideActor(),
        "print": PrintActor(),
        "debug": DebugActor(),
    }
