"""HTTP session factory for ghinbox.

The token is read from the environment (optionally via a .env file) so it
never lands in the JSON config. It is resolved on the first request, so
commands that stay local never need it.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional

import requests
from dotenv import load_dotenv
from requests.auth import AuthBase

from ghinbox import __version__

API_VERSION = "2022-11-28"


def resolve_token() -> str:
    load_dotenv()
    token = os.getenv("GH_TOKEN") or os.getenv("GITHUB_TOKEN")
    # Fail fast on missing credentials instead of getting a 401 per page.
    if not token:
        raise RuntimeError("Missing GH_TOKEN or GITHUB_TOKEN in environment")
    return token


class BearerAuth(AuthBase):
    """Adds the bearer token, looked up once on the first request."""

    def __init__(self, token_provider: Callable[[], str] = resolve_token) -> None:
        self._token_provider = token_provider
        self._token: Optional[str] = None

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        if self._token is None:
            self._token = self._token_provider()
        request.headers["Authorization"] = f"Bearer {self._token}"
        return request


def build_session(auth: Optional[AuthBase] = None) -> requests.Session:
    """Create a session carrying the auth and API version headers."""

    logging.getLogger(__name__).info("Initializing GitHub session")

    session = requests.Session()
    session.auth = auth or BearerAuth()
    session.headers.update(
        {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": f"ghinbox/{__version__}",
        }
    )
    return session
