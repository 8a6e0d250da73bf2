"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_ENDPOINT = "https://api.github.com/notifications"


class RefreshStrategy(Enum):
    """When the manager pulls fresh notifications from the API."""

    DEFAULT = "default"  # refresh iff the cache expired
    FORCE = "force"
    NEVER = "never"

    @classmethod
    def from_flags(cls, refresh: bool, no_refresh: bool) -> "RefreshStrategy":
        if refresh:
            return cls.FORCE
        if no_refresh:
            return cls.NEVER
        return cls.DEFAULT


@dataclass(frozen=True)
class CacheConfig:
    """Location and freshness window of the local snapshot."""

    path: str
    ttl_in_hours: float


@dataclass(frozen=True)
class ApiConfig:
    """Remote API settings consumed by the GitHub client."""

    endpoint: str = DEFAULT_ENDPOINT
    per_page: int = 50
    timeout_seconds: float = 10.0
    max_attempts: int = 5
    backoff_seconds: float = 0.5
