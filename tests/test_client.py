from __future__ import annotations

import pytest
import responses

from ghinbox import client

URL = "https://api.github.test/notifications"


def test_session_is_built_without_a_token() -> None:
    def fail() -> str:
        raise AssertionError("token looked up too early")

    session = client.build_session(client.BearerAuth(fail))

    assert session.headers["X-GitHub-Api-Version"] == client.API_VERSION
    assert "Authorization" not in session.headers


@responses.activate
def test_token_is_resolved_once_on_first_request() -> None:
    responses.add(responses.GET, URL, json=[])
    lookups = []

    def provider() -> str:
        lookups.append(1)
        return "ghp_secret"

    session = client.build_session(client.BearerAuth(provider))
    session.get(URL)
    session.get(URL)

    assert len(lookups) == 1
    assert responses.calls[0].request.headers["Authorization"] == "Bearer ghp_secret"


def test_missing_token_raises(monkeypatch) -> None:
    monkeypatch.delenv("GH_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setattr(client, "load_dotenv", lambda: None)

    with pytest.raises(RuntimeError, match="GH_TOKEN"):
        client.resolve_token()
