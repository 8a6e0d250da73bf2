"""JSON file cache adapter.

Implements the core CachePort with a single JSON document whose modification
time is the freshness clock.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from typing import Callable

from ghinbox.core.errors import CacheError
from ghinbox.core.models import Notifications

LOGGER = logging.getLogger(__name__)


class FileCache:
    """Thin JSON file wrapper that satisfies the CachePort contract."""

    def __init__(self, path: str, ttl_in_hours: float, clock: Callable[[], float] = time.time) -> None:
        self._path = os.path.expanduser(path)
        self._ttl_seconds = ttl_in_hours * 3600
        self._clock = clock

    @property
    def path(self) -> str:
        return self._path

    def expired(self) -> bool:
        """Return True when the snapshot is older than the TTL, or missing."""

        try:
            modified = os.stat(self._path).st_mtime
        except FileNotFoundError:
            return True
        except OSError as exc:
            raise CacheError(f"Cannot stat cache {self._path}: {exc}") from exc

        return self._clock() - modified > self._ttl_seconds

    def read(self) -> Notifications:
        """Load the snapshot; a missing file is an empty collection."""

        try:
            with open(self._path, "r", encoding="utf-8") as handle:
                raw = json.load(handle)
        except FileNotFoundError:
            LOGGER.debug("No cache at %s yet", self._path)
            return Notifications()
        except (OSError, ValueError) as exc:
            raise CacheError(f"Cannot read cache {self._path}: {exc}") from exc

        if not isinstance(raw, list):
            raise CacheError(f"Cannot read cache {self._path}: expected a JSON array")

        try:
            return Notifications.from_list(raw)
        except (KeyError, TypeError) as exc:
            raise CacheError(f"Cannot decode cache {self._path}: {exc}") from exc

    def write(self, notifications: Notifications) -> None:
        """Replace the snapshot atomically."""

        directory = os.path.dirname(self._path) or "."
        try:
            os.makedirs(directory, exist_ok=True)
            # Write beside the target so os.replace stays on one filesystem.
            fd, tmp_path = tempfile.mkstemp(prefix=".ghinbox-", suffix=".json", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(notifications.to_list(), handle, indent=2)
                os.replace(tmp_path, self._path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as exc:
            raise CacheError(f"Cannot write cache {self._path}: {exc}") from exc

        LOGGER.debug("Wrote %s notifications to %s", len(notifications), self._path)
