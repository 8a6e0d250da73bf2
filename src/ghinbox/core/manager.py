"""Per-run orchestration of the local snapshot, the remote source and the rules.

The manager enforces a strict order:
1) Read the cache and decide whether it is fresh
2) Optionally pull the remote state and reconcile it with the cached one
3) Apply rules (see ``RuleEngine``)
4) Persist the compacted working set on ``save``

Cache problems never stop a run; remote failures always do.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from rich.console import Console

from ghinbox.core.config import RefreshStrategy
from ghinbox.core.errors import CacheError
from ghinbox.core.models import Notifications, sync
from ghinbox.core.ports import ActorPort, CachePort, NotificationSourcePort
from ghinbox.core.rules_engine import Rule, RuleEngine

LOGGER = logging.getLogger(__name__)


class Manager:
    """Owns the working notification collection for the duration of a run."""

    def __init__(
        self,
        cache: CachePort,
        source: NotificationSourcePort,
        rules: Iterable[Rule],
        actors: Mapping[str, ActorPort],
        refresh: RefreshStrategy = RefreshStrategy.DEFAULT,
        console: Optional[Console] = None,
    ) -> None:
        self._cache = cache
        self._source = source
        self._refresh = refresh
        self._console = console or Console()
        self._engine = RuleEngine(rules, actors, console=self._console)
        self.notifications = Notifications()

    def load(self) -> None:
        """Build the working set from the cache and, if needed, the API."""

        cached, expired = self._load_cache()

        if self.should_refresh(expired):
            self._console.print("Refreshing the cache...")
            remote = self._source.notifications()
            cached = sync(cached, remote)
            try:
                self._cache.write(cached)
            except CacheError as exc:
                LOGGER.error("Error while writing the cache: %s", exc)

        self.notifications = cached.uniq()

    def should_refresh(self, expired: bool) -> bool:
        if not expired and self._refresh is RefreshStrategy.FORCE:
            LOGGER.info("Forcing a refresh")
            return True

        if expired and self._refresh is RefreshStrategy.NEVER:
            LOGGER.info("Preventing a refresh")
            return False

        LOGGER.debug("Refresh: %s", expired)
        return expired

    def apply(self, noop: bool = False) -> None:
        """Run the configured rules against the working set."""

        self.notifications = self._engine.apply(self.notifications, noop=noop)

    def save(self) -> None:
        """Persist the working set; to_delete entries are dropped here for good."""

        try:
            self._cache.write(self.notifications.compact())
        except CacheError as exc:
            LOGGER.warning("Cannot save the cache: %s", exc)

    def _load_cache(self) -> tuple[Notifications, bool]:
        try:
            expired = self._cache.expired()
        except CacheError as exc:
            # Freshness unknown: treat it as stale.
            LOGGER.warning("Cannot check the cache freshness: %s", exc)
            expired = True

        try:
            cached = self._cache.read()
        except CacheError as exc:
            LOGGER.warning("Cannot read the cache: %s", exc)
            cached = Notifications()

        return cached, expired
