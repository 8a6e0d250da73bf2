"""Shared notification formatting helpers.

Keeping formatting here prevents drift between the actors and the ``list``
command. Strings use rich console markup; user data is always escaped.
"""

from __future__ import annotations

import json

from rich.markup import escape
from rich.table import Table

from ghinbox.core.models import Notification, Notifications

_STATE_STYLES = {
    "open": "green",
    "closed": "red",
    "merged": "magenta",
}


def format_state(notification: Notification) -> str:
    state = notification.subject.state
    if not state:
        return ""
    style = _STATE_STYLES.get(state.lower(), "dim")
    return f"[{style}]{escape(state)}[/{style}]"


def format_line(notification: Notification) -> str:
    """Return a single markup line describing the notification."""

    unread = "[bold]●[/bold] " if notification.unread else "  "
    parts = [
        f"{unread}[cyan]{escape(notification.repository.full_name)}[/cyan]",
        escape(notification.subject.type),
        format_state(notification),
        escape(notification.subject.title),
    ]
    if notification.author.login:
        parts.append(f"[dim]by {escape(notification.author.login)}[/dim]")
    return " ".join(part for part in parts if part)


def format_action(verb: str, style: str, notification: Notification) -> str:
    """Prefix the notification line with a coloured action verb, e.g. ``DONE``."""

    return f"[{style}]{verb}[/{style}] {format_line(notification)}"


def format_debug(notification: Notification) -> str:
    return escape(json.dumps(notification.to_dict(), indent=2, sort_keys=True))


def build_table(notifications: Notifications, include_done: bool = False) -> Table:
    """Render the working set as a table for the ``list`` command."""

    table = Table(show_header=True, header_style="bold")
    table.add_column("Id", style="dim", no_wrap=True)
    table.add_column("Repository", style="cyan")
    table.add_column("Type")
    table.add_column("State")
    table.add_column("Reason")
    table.add_column("Title")
    table.add_column("Done")

    for notification in notifications:
        if notification is None:
            continue
        if notification.meta.done and not include_done:
            continue
        table.add_row(
            notification.id,
            escape(notification.repository.full_name),
            escape(notification.subject.type),
            format_state(notification),
            escape(notification.reason),
            escape(notification.subject.title),
            "yes" if notification.meta.done else "",
        )
    return table
