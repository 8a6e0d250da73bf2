from __future__ import annotations

import json

import pytest

from ghinbox import settings
from ghinbox.core.config import DEFAULT_ENDPOINT
from ghinbox.core.rules_engine import build_rules


def _write(tmp_path, data) -> str:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_defaults_when_default_location_is_missing(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("GHINBOX_CONFIG", str(tmp_path / "absent.json"))

    config = settings.load_config()

    assert config.rules == []
    assert config.cache.ttl_in_hours == settings.DEFAULT_TTL_HOURS
    assert config.api.endpoint == DEFAULT_ENDPOINT
    assert config.api.max_attempts == 5
    assert config.source_path is None


def test_explicit_missing_path_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        settings.load_config(str(tmp_path / "absent.json"))


def test_loads_sections(tmp_path) -> None:
    path = _write(
        tmp_path,
        {
            "cache": {"path": str(tmp_path / "cache.json"), "ttl_in_hours": 2},
            "api": {"per_page": 25, "timeout_seconds": 3, "max_attempts": 2},
            "rules": [{"name": "print all", "action": "print"}],
            "logging": {"enabled": True, "level": "debug"},
        },
    )

    config = settings.load_config(path)

    assert config.cache.ttl_in_hours == 2
    assert config.api.per_page == 25
    assert config.api.timeout_seconds == 3
    assert config.api.max_attempts == 2
    assert config.logging["level"] == "debug"
    assert config.source_path == path
    assert [rule.name for rule in build_rules(config.rules)] == ["print all"]


@pytest.mark.parametrize(
    "data",
    [
        {"cache": {"ttl_in_hours": 0}},
        {"cache": {"ttl_in_hours": -1}},
        {"api": {"per_page": 100}},
        {"api": {"max_attempts": 0}},
        {"rules": {"name": "not a list"}},
        {"cache": "nope"},
        ["not", "an", "object"],
    ],
)
def test_invalid_config_raises_value_error(tmp_path, data) -> None:
    with pytest.raises(ValueError):
        settings.load_config(_write(tmp_path, data))


def test_default_config_rules_compile() -> None:
    rules = build_rules(settings.default_config()["rules"])
    assert [rule.action for rule in rules] == ["done", "hide"]
