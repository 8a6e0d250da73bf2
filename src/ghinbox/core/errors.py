"""Exceptions raised by the core and its adapters."""

from __future__ import annotations

from typing import Optional


class GhinboxError(Exception):
    """Base class for every error the CLI reports as fatal."""


class FetchError(GhinboxError):
    """A request against the GitHub API failed and will not be retried."""

    def __init__(self, message: str, endpoint: str, status_code: Optional[int] = None) -> None:
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(message)


class RetryExceededError(FetchError):
    """A transient failure persisted for every allowed attempt."""

    def __init__(self, endpoint: str, attempts: int, status_code: Optional[int] = None) -> None:
        self.attempts = attempts
        super().__init__(
            f"retry exceeded for {endpoint} after {attempts} attempts",
            endpoint=endpoint,
            status_code=status_code,
        )


class CacheError(GhinboxError):
    """The local snapshot could not be read or written."""


class ActionError(GhinboxError):
    """An action cannot be applied to a notification."""
