"""GitHub REST adapter.

Walks the paginated notifications endpoint, enriches every thread with its
subject details and exposes a retrying ``request`` helper that the actors
reuse for their side effects. This adapter never touches the cache.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import requests

from ghinbox.core.config import DEFAULT_ENDPOINT
from ghinbox.core.errors import FetchError, RetryExceededError
from ghinbox.core.models import Notification, Notifications, User
from ghinbox.core.retry import RetryPolicy, retry_call

LOGGER = logging.getLogger(__name__)

# Gateway errors GitHub returns under load; anything else fails immediately.
RETRYABLE_STATUSES = frozenset({502, 504})


def _is_retryable(exc: Exception) -> bool:
    return isinstance(exc, FetchError) and exc.status_code in RETRYABLE_STATUSES


class GitHubClient:
    """Notifications source backed by a ``requests.Session``."""

    def __init__(
        self,
        session: requests.Session,
        endpoint: str = DEFAULT_ENDPOINT,
        per_page: int = 50,
        timeout: float = 10.0,
        retry: Optional[RetryPolicy] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self._session = session
        self._endpoint = endpoint
        self._per_page = per_page
        self._timeout = timeout
        self._retry = retry or RetryPolicy()
        self._sleep = sleep

    def request(
        self,
        verb: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
        json_data: Optional[dict[str, Any]] = None,
    ) -> requests.Response:
        """Issue one request, retrying gateway errors with a fresh budget."""

        kwargs = {} if self._sleep is None else {"sleep": self._sleep}
        return retry_call(
            lambda: self._send(verb, url, params, json_data),
            self._retry,
            is_retryable=_is_retryable,
            on_exhausted=lambda exc, attempts: RetryExceededError(
                url, attempts, getattr(exc, "status_code", None)
            ),
            describe=f"{verb} {url}",
            **kwargs,
        )

    def notifications(self) -> Notifications:
        """Return every notification on the remote, enriched, without duplicates."""

        notifications = self._paginate()
        for notification in notifications:
            self.enrich(notification)
        LOGGER.info("Fetched %s notifications", len(notifications))
        return notifications.uniq()

    def enrich(self, notification: Notification) -> None:
        """Fill the subject state, HTML link and author from the subject API."""

        subject_url = notification.subject.url
        if not subject_url:
            return

        details = self._json(self.request("GET", subject_url), subject_url)
        if not isinstance(details, dict):
            raise FetchError(f"Unexpected subject payload for {subject_url}", endpoint=subject_url)

        state = details.get("state")
        if details.get("merged"):
            state = "merged"
        notification.subject.state = state
        notification.subject.html_url = details.get("html_url")
        user = details.get("user") or {}
        notification.author = User(login=user.get("login") or "", type=user.get("type") or "")

    def _paginate(self) -> Notifications:
        result = Notifications()
        url: Optional[str] = self._endpoint
        params: Optional[dict[str, Any]] = {"all": "false", "per_page": self._per_page}

        while url:
            LOGGER.info("API REST request %s", url)
            response = self.request("GET", url, params=params)
            page = self._json(response, url)
            if not isinstance(page, list):
                raise FetchError(f"Expected a JSON array from {url}", endpoint=url)

            try:
                result.extend(Notification.from_api(item) for item in page)
            except (KeyError, TypeError, AttributeError) as exc:
                raise FetchError(f"Cannot decode notifications from {url}: {exc}", endpoint=url) from exc

            # The next link already carries the query string.
            url = response.links.get("next", {}).get("url")
            params = None

        return result

    def _send(
        self,
        verb: str,
        url: str,
        params: Optional[dict[str, Any]],
        json_data: Optional[dict[str, Any]],
    ) -> requests.Response:
        try:
            response = self._session.request(
                verb,
                url,
                params=params,
                json=json_data,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise FetchError(f"{verb} {url} failed: {exc}", endpoint=url) from exc

        if response.status_code >= 400:
            raise FetchError(
                f"{verb} {url} returned {response.status_code}",
                endpoint=url,
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: requests.Response, url: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(f"Invalid JSON from {url}: {exc}", endpoint=url) from exc
