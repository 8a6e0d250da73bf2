"""Application entry point for ghinbox."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from ghinbox import settings
from ghinbox.adapters.actors import build_actor_map
from ghinbox.adapters.file_cache import FileCache
from ghinbox.adapters.github_client import GitHubClient
from ghinbox.adapters.notification_formatting import build_table
from ghinbox.client import build_session
from ghinbox.core.config import RefreshStrategy
from ghinbox.core.errors import GhinboxError
from ghinbox.core.manager import Manager
from ghinbox.core.retry import RetryPolicy
from ghinbox.core.rules_engine import build_rules

NAME = "GHINBOX"
FONT = "small"

LOGGER = logging.getLogger(__name__)


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _TokenMaskFilter(logging.Filter):
    """Replaces secret values in the rendered message before any handler sees it."""

    def __init__(self, secrets: list[str]) -> None:
        super().__init__()
        # Longest first so a token that contains another is masked whole.
        self._secrets = sorted({secret for secret in secrets if secret}, key=len, reverse=True)

    def filter(self, record: logging.LogRecord) -> bool:
        if self._secrets:
            message = record.getMessage()
            for secret in self._secrets:
                message = message.replace(secret, "***")
            record.msg, record.args = message, None
        return True


def _secret_values(config: dict) -> list[str]:
    names = ["GH_TOKEN", "GITHUB_TOKEN"]
    redact_cfg = config.get("redact") or {}
    if redact_cfg.get("enabled", False):
        names.extend(redact_cfg.get("patterns", []))
    return [os.environ[name] for name in names if os.environ.get(name)]


def _log_file_handler(file_cfg: dict) -> RotatingFileHandler:
    path = os.path.expanduser(file_cfg.get("path", "~/.cache/ghinbox/ghinbox.log"))
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )


def _configure_logging(config: dict, verbose: bool = False) -> None:
    """Route log records to stderr and/or a rotating file, tokens masked."""

    config = config or {}
    if not config.get("enabled", False) and not verbose:
        return

    # The token may only be defined in .env; load it so it can be masked.
    load_dotenv()
    level = logging.DEBUG if verbose else getattr(logging, str(config.get("level", "INFO")).upper(), logging.INFO)

    handlers: list[logging.Handler] = []
    if verbose or config.get("console", True):
        handlers.append(logging.StreamHandler())
    if (config.get("file") or {}).get("enabled", False):
        handlers.append(_log_file_handler(config["file"]))
    if not handlers:
        return

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
    mask = _TokenMaskFilter(_secret_values(config))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(mask)

    logging.basicConfig(level=level, handlers=handlers, force=True)


def _build_manager(config: settings.AppConfig, refresh: RefreshStrategy, console: Console) -> Manager:
    rules = build_rules(config.rules)
    LOGGER.info("%s rules are loaded", len(rules))

    # The token is resolved on the first remote request only.
    session = build_session()
    client = GitHubClient(
        session,
        endpoint=config.api.endpoint,
        per_page=config.api.per_page,
        timeout=config.api.timeout_seconds,
        retry=RetryPolicy(
            max_attempts=config.api.max_attempts,
            backoff_seconds=config.api.backoff_seconds,
        ),
    )
    cache = FileCache(config.cache.path, config.cache.ttl_in_hours)

    return Manager(
        cache=cache,
        source=client,
        rules=rules,
        actors=build_actor_map(client),
        refresh=refresh,
        console=console,
    )


def _sync(config: settings.AppConfig, args: argparse.Namespace, console: Console) -> None:
    manager = _build_manager(config, RefreshStrategy.from_flags(args.refresh, args.no_refresh), console)
    manager.load()
    manager.apply(noop=args.noop)
    manager.save()


def _list(config: settings.AppConfig, args: argparse.Namespace, console: Console) -> None:
    manager = _build_manager(config, RefreshStrategy.from_flags(args.refresh, args.no_refresh), console)
    manager.load()
    console.print(build_table(manager.notifications, include_done=args.all))


def _config(config: Optional[settings.AppConfig], args: argparse.Namespace, console: Console) -> None:
    if args.init or config is None:
        console.print_json(json.dumps(settings.default_config()))
        return

    console.print(f"Config sourced from: {config.source_path or 'defaults'}")
    console.print_json(
        json.dumps(
            {
                "cache": {"path": config.cache.path, "ttl_in_hours": config.cache.ttl_in_hours},
                "api": {
                    "endpoint": config.api.endpoint,
                    "per_page": config.api.per_page,
                    "timeout_seconds": config.api.timeout_seconds,
                    "max_attempts": config.api.max_attempts,
                    "backoff_seconds": config.api.backoff_seconds,
                },
                "rules": config.rules,
                "logging": config.logging,
            }
        )
    )


def _add_refresh_flags(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--refresh", action="store_true", help="Always pull from the API, even if the cache is fresh")
    group.add_argument("--no-refresh", action="store_true", help="Never pull from the API, even if the cache expired")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ghinbox")
    parser.add_argument("--config", help="Path to the JSON config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    subparsers = parser.add_subparsers(dest="command")

    sync_parser = subparsers.add_parser("sync", help="Refresh if needed, apply the rules and save")
    _add_refresh_flags(sync_parser)
    sync_parser.add_argument("--noop", action="store_true", help="Print what would run without running it")

    list_parser = subparsers.add_parser("list", help="Show the notifications in the local snapshot")
    _add_refresh_flags(list_parser)
    list_parser.add_argument("--all", action="store_true", help="Include notifications already done")

    config_parser = subparsers.add_parser("config", help="Print the loaded config")
    config_parser.add_argument("--init", action="store_true", help="Print a starter config instead")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    command = args.command or "sync"
    if args.command is None:
        # Bare invocation behaves like "sync" with default flags.
        args = parser.parse_args([*(sys.argv[1:] if argv is None else argv), "sync"])

    console = Console()

    if command == "config" and args.init:
        _config(None, args, console)
        return 0

    try:
        config = settings.load_config(args.config)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Invalid config:[/red] {escape(str(exc))}")
        return 1

    _configure_logging(config.logging, verbose=args.verbose)

    try:
        if command == "config":
            _config(config, args, console)
        elif command == "list":
            _list(config, args, console)
        else:
            _print_banner()
            _sync(config, args, console)
    except (GhinboxError, RuntimeError, ValueError) as exc:
        LOGGER.debug("Fatal error", exc_info=True)
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
