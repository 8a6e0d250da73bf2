"""Bounded retry helper shared by every remote call site."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try one operation and how long to wait in between."""

    max_attempts: int = 5
    backoff_seconds: float = 0.0
    backoff_factor: float = 2.0

    def delay(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""

        return self.backoff_seconds * (self.backoff_factor ** (attempt - 1))


def retry_call(
    operation: Callable[[], T],
    policy: RetryPolicy,
    is_retryable: Callable[[Exception], bool],
    on_exhausted: Callable[[Exception, int], Exception],
    describe: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run ``operation`` until it succeeds or the policy gives up.

    Exceptions rejected by ``is_retryable`` propagate untouched on the first
    occurrence. When every attempt failed with a retryable error, the
    exception built by ``on_exhausted(last_error, attempts)`` is raised from
    the last error.
    """

    if policy.max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return operation()
        except Exception as exc:
            if not is_retryable(exc):
                raise
            remaining = policy.max_attempts - attempt
            LOGGER.warning("%s failed with a retryable error (%s), %s retries left", describe, exc, remaining)
            if not remaining:
                raise on_exhausted(exc, attempt) from exc
            sleep(policy.delay(attempt))
