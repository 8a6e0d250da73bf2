"""Configuration loading for ghinbox.

All user-editable settings (cache, API, rules, logging) live in a single JSON
file for quick edits without touching Python. Secrets stay in the
environment (or a .env file) and never go through this module.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Optional

from ghinbox.core.config import DEFAULT_ENDPOINT, ApiConfig, CacheConfig

DEFAULT_CONFIG_PATH = os.path.join("~", ".config", "ghinbox", "config.json")
DEFAULT_CACHE_PATH = os.path.join("~", ".cache", "ghinbox", "notifications.json")
DEFAULT_TTL_HOURS = 1.0


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration, threaded through constructors."""

    cache: CacheConfig
    api: ApiConfig
    rules: list[dict] = field(default_factory=list)
    logging: dict = field(default_factory=dict)
    source_path: Optional[str] = None


def default_config_path() -> str:
    return os.path.expanduser(os.getenv("GHINBOX_CONFIG") or DEFAULT_CONFIG_PATH)


def _load_json_config(path: str) -> dict:
    """Load the JSON config with a flat, user-friendly schema."""

    with open(path, "r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return data


def _section(raw: dict, name: str) -> dict:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section {name!r} must be an object")
    return value


def _build_cache(raw: dict[str, Any]) -> CacheConfig:
    ttl = float(raw.get("ttl_in_hours", DEFAULT_TTL_HOURS))
    # TTL <= 0 would make every run a refresh; reject it up front.
    if ttl <= 0:
        raise ValueError("cache.ttl_in_hours must be greater than 0")
    return CacheConfig(path=str(raw.get("path") or DEFAULT_CACHE_PATH), ttl_in_hours=ttl)


def _build_api(raw: dict[str, Any]) -> ApiConfig:
    api = ApiConfig(
        endpoint=str(raw.get("endpoint") or DEFAULT_ENDPOINT),
        per_page=int(raw.get("per_page", 50)),
        timeout_seconds=float(raw.get("timeout_seconds", 10)),
        max_attempts=int(raw.get("max_attempts", 5)),
        backoff_seconds=float(raw.get("backoff_seconds", 0.5)),
    )
    if not 1 <= api.per_page <= 50:
        raise ValueError("api.per_page must be between 1 and 50")
    if api.max_attempts < 1:
        raise ValueError("api.max_attempts must be at least 1")
    if api.timeout_seconds <= 0:
        raise ValueError("api.timeout_seconds must be greater than 0")
    return api


def load_config(path: Optional[str] = None) -> AppConfig:
    """Build the AppConfig from a JSON file.

    An explicit path must exist. The default location is optional: when it
    is missing every setting falls back to its default and no rules run.
    """

    explicit = path is not None
    path = os.path.expanduser(path) if explicit else default_config_path()

    if os.path.exists(path):
        raw = _load_json_config(path)
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {path}")
    else:
        raw = {}
        path = None

    rules = raw.get("rules") or []
    if not isinstance(rules, list) or not all(isinstance(rule, dict) for rule in rules):
        raise ValueError("Config 'rules' must be a list of objects")

    return AppConfig(
        cache=_build_cache(_section(raw, "cache")),
        api=_build_api(_section(raw, "api")),
        rules=rules,
        logging=_section(raw, "logging"),
        source_path=path,
    )


def default_config() -> dict:
    """Starter config printed by ``ghinbox config --init``."""

    return {
        "cache": {"path": DEFAULT_CACHE_PATH, "ttl_in_hours": DEFAULT_TTL_HOURS},
        "api": {"endpoint": DEFAULT_ENDPOINT, "per_page": 50, "timeout_seconds": 10},
        "rules": [
            {
                "name": "close merged and closed pull requests",
                "action": "done",
                "filter": {"subject_types": ["PullRequest"], "states": ["merged", "closed"]},
            },
            {
                "name": "hide dependency bumps",
                "action": "hide",
                "filter": {"keywords": ["bump"], "authors": ["dependabot[bot]"]},
            },
        ],
        "logging": {"enabled": False, "level": "INFO"},
    }
