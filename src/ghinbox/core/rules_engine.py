"""Rule compilation, selection and action dispatch (core domain)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Mapping, Optional

from rich.console import Console
from rich.markup import escape

from ghinbox.core.models import Notification, Notifications
from ghinbox.core.ports import ActorPort

LOGGER = logging.getLogger(__name__)

_LIST_CONDITIONS = ("repositories", "reasons", "subject_types", "states", "authors")
_TEXT_CONDITIONS = ("keywords", "exclude_keywords", "regex")
_KNOWN_CONDITIONS = set(_LIST_CONDITIONS) | set(_TEXT_CONDITIONS) | {"unread", "older_than_days"}


@dataclass(frozen=True)
class Filter:
    """Compiled filter expression.

    All conditions are AND-ed together. Within a list condition a single
    matching element is enough. An empty filter matches everything.
    """

    repositories: List[str] = field(default_factory=list)
    reasons: List[str] = field(default_factory=list)
    subject_types: List[str] = field(default_factory=list)
    states: List[str] = field(default_factory=list)
    authors: List[str] = field(default_factory=list)
    unread: Optional[bool] = None
    keywords: List[str] = field(default_factory=list)
    exclude_keywords: List[str] = field(default_factory=list)
    regex_patterns: List[re.Pattern] = field(default_factory=list)
    older_than_days: Optional[float] = None

    def matches(self, notification: Notification, now: datetime) -> bool:
        if self.repositories and notification.repository.full_name.lower() not in self.repositories:
            return False
        if self.reasons and notification.reason.lower() not in self.reasons:
            return False
        if self.subject_types and notification.subject.type.lower() not in self.subject_types:
            return False
        if self.states and (notification.subject.state or "").lower() not in self.states:
            return False
        if self.authors and notification.author.login.lower() not in self.authors:
            return False
        if self.unread is not None and notification.unread != self.unread:
            return False

        title = notification.subject.title
        lowered = title.lower()
        if any(ex in lowered for ex in self.exclude_keywords):
            return False
        if self.keywords or self.regex_patterns:
            keyword_hit = any(k in lowered for k in self.keywords)
            regex_hit = any(pattern.search(title) for pattern in self.regex_patterns)
            if not keyword_hit and not regex_hit:
                return False

        if self.older_than_days is not None:
            updated = _parse_timestamp(notification.updated_at)
            if updated is None or now - updated < timedelta(days=self.older_than_days):
                return False

        return True

    def select_ids(self, notifications: Notifications, now: Optional[datetime] = None) -> List[str]:
        """Return the ids of matching notifications, in collection order."""

        now = now or datetime.now(timezone.utc)
        return [n.id for n in notifications if n is not None and self.matches(n, now)]


@dataclass(frozen=True)
class Rule:
    """Compiled rule binding a filter to an action."""

    name: str
    action: str
    filter: Filter


def _parse_timestamp(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _string_list(rule_name: str, key: str, value) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"Rule {rule_name!r}: filter.{key} must be a string or a list of strings")
    return value


def build_filter(rule_name: str, filter_config: Optional[dict]) -> Filter:
    """Normalize one filter config, lower-casing everything compared case-insensitively."""

    filter_config = filter_config or {}
    if not isinstance(filter_config, dict):
        raise ValueError(f"Rule {rule_name!r}: filter must be an object")

    unknown = set(filter_config) - _KNOWN_CONDITIONS
    if unknown:
        raise ValueError(f"Rule {rule_name!r}: unknown filter condition(s): {', '.join(sorted(unknown))}")

    lists = {
        key: [item.lower() for item in _string_list(rule_name, key, filter_config.get(key) or [])]
        for key in _LIST_CONDITIONS + ("keywords", "exclude_keywords")
    }

    raw_regex = _string_list(rule_name, "regex", filter_config.get("regex", []) or [])
    try:
        regex_patterns = [re.compile(pattern, re.IGNORECASE) for pattern in raw_regex]
    except re.error as exc:
        raise ValueError(f"Rule {rule_name!r}: invalid regex: {exc}") from exc

    unread = filter_config.get("unread")
    if unread is not None and not isinstance(unread, bool):
        raise ValueError(f"Rule {rule_name!r}: filter.unread must be a boolean")

    older_than_days = filter_config.get("older_than_days")
    if older_than_days is not None:
        if isinstance(older_than_days, bool) or not isinstance(older_than_days, (int, float)):
            raise ValueError(f"Rule {rule_name!r}: filter.older_than_days must be a number")
        older_than_days = float(older_than_days)

    return Filter(
        regex_patterns=regex_patterns,
        unread=unread,
        older_than_days=older_than_days,
        **lists,
    )


def build_rules(rules_config: Iterable[dict]) -> List[Rule]:
    """Validate rule configs and compile their filters, keeping configured order."""

    compiled: List[Rule] = []
    for index, rule in enumerate(rules_config):
        if not rule.get("enabled", True):
            continue
        name = rule.get("name")
        action = rule.get("action")
        if not name:
            raise ValueError(f"Rule #{index} has no name")
        if not action:
            raise ValueError(f"Rule {name!r} has no action")
        compiled.append(Rule(name=name, action=action, filter=build_filter(name, rule.get("filter"))))
    return compiled


class RuleEngine:
    """Applies rules in order and dispatches selected notifications to actors."""

    def __init__(
        self,
        rules: Iterable[Rule],
        actors: Mapping[str, ActorPort],
        console: Optional[Console] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._rules = list(rules)
        self._actors = actors
        self._console = console or Console()
        self._clock = clock

    def apply(self, notifications: Notifications, noop: bool = False) -> Notifications:
        """Run every rule, then return the compacted collection."""

        for rule in self._rules:
            actor = self._actors.get(rule.action)
            if actor is None:
                LOGGER.error("Unknown action %r in rule %r, skipping", rule.action, rule.name)
                continue

            selected_ids = rule.filter.select_ids(notifications, self._clock())
            LOGGER.debug("Apply rule %r: %s selected", rule.name, len(selected_ids))

            ran = failed = 0
            for notification in notifications.filter_from_ids(selected_ids):
                if notification.meta.done:
                    continue

                if noop:
                    self._console.print(
                        f"NOOP'ing action {escape(rule.action)} on notification {escape(notification.label())}"
                    )
                    continue

                try:
                    output = actor.run(notification)
                except Exception as exc:
                    failed += 1
                    LOGGER.error("Action %r failed on %s: %s", rule.action, notification.id, exc)
                    continue
                ran += 1
                if output:
                    self._console.print(output)

            if ran or failed:
                LOGGER.info("Rule %r: %s action(s) ran, %s failed", rule.name, ran, failed)

        return notifications.compact()
