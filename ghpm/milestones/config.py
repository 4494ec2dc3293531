"""Command-line parsing and layered settings for the milestone commands.

Precedence, lowest first: JSON config file, environment, flags.
"""

from __future__ import annotations

import argparse
import datetime as dt
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ghpm.config_file import load_config_file
from ghpm.errors import ConfigurationError, ValidationError

from .models import RepositoryEntry

DATE_FORMAT = "%Y-%m-%d"
OUTPUT_FORMATS = ("text", "json")


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings for one ghpm invocation."""

    token: str
    username: str
    repositories: Tuple[RepositoryEntry, ...]
    output: str = "text"
    workers: int = 1
    strict: bool = False


def parse_date(value: str) -> dt.date:
    """Parse a YYYY-MM-DD calendar date."""
    try:
        return dt.datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"invalid date '{value}': expected YYYY-MM-DD") from exc


def parse_repository_flag(value: str) -> RepositoryEntry:
    """Parse `NAME` or `NAME:OWNER` from a --repository flag."""
    name, _, owner = value.partition(":")
    return RepositoryEntry(name=name.strip(), owner_override=owner.strip() or None)


def _entry_from_config(raw: Any, index: int) -> RepositoryEntry:
    if isinstance(raw, str):
        return parse_repository_flag(raw)
    if isinstance(raw, dict):
        for key in ("name", "username", "owner"):
            if raw.get(key) is not None and not isinstance(raw[key], str):
                raise ConfigurationError(f"repositories[{index}].{key} must be a string")
        return RepositoryEntry(
            name=raw.get("name") or "",
            owner_override=raw.get("username") or raw.get("owner") or None,
        )
    raise ConfigurationError(f"repositories[{index}] must be an object or a string")


def build_arg_parser() -> argparse.ArgumentParser:
    """Return the CLI parser for `ghpm`."""

    parser = argparse.ArgumentParser(
        prog="ghpm",
        description="ghpm is a tool to manage milestones across GitHub repositories.",
    )
    parser.add_argument("--config", help="Path to a JSON config file (default: ./ghpm.json or $GHPM_CONFIG)")
    parser.add_argument("--token", help="The GitHub token (default: $GHPM_TOKEN or $GITHUB_TOKEN)")
    parser.add_argument("--username", help="The GitHub user or organization name")
    parser.add_argument(
        "--repository",
        action="append",
        dest="repositories",
        metavar="NAME[:OWNER]",
        help="Repository to act on; repeatable. Replaces the config file's list.",
    )
    parser.add_argument("--output", choices=OUTPUT_FORMATS, default=None)
    parser.add_argument("--workers", type=int, default=None, help="Repositories processed in parallel")
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Exit non-zero when any repository fails",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("version", help="Print the ghpm version")

    milestones = commands.add_parser("milestones", help="Manage milestones")
    actions = milestones.add_subparsers(dest="action", required=True)

    get = actions.add_parser("get", help="Get milestones")
    get.add_argument("--overdue", action="store_true", help="Show only overdue milestones")
    get.add_argument("--closed", action="store_true", help="Show only closed milestones")

    create = actions.add_parser("create", help="Create a milestone in all repositories")
    create.add_argument("--title", required=True, help="Title of the milestone")
    create.add_argument("--description", default="", help="Description of the milestone")
    create.add_argument("--due-on", required=True, help="Due date of the milestone (YYYY-MM-DD)")

    update = actions.add_parser(
        "update",
        help="Update a milestone in all repositories; repositories without it are skipped",
    )
    update.add_argument("title", help="Title of the milestone to update")
    update.add_argument("--description", default=None, help="Description of the milestone")
    update.add_argument("--due-on", default=None, help="Due date of the milestone (YYYY-MM-DD)")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments; accepts argv overrides for testing."""

    parser = build_arg_parser()
    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace, env: Optional[Dict[str, str]] = None) -> Settings:
    """Merge file, environment, and flag values into immutable settings."""

    env = os.environ if env is None else env
    file_values = load_config_file(getattr(args, "config", None))

    token = (
        args.token
        or env.get("GHPM_TOKEN")
        or env.get("GITHUB_TOKEN")
        or file_values.get("token")
        or ""
    )
    username = args.username or env.get("GHPM_USERNAME") or file_values.get("username") or ""

    if args.repositories:
        repositories = tuple(parse_repository_flag(value) for value in args.repositories)
    else:
        raw_repositories = file_values.get("repositories") or []
        if not isinstance(raw_repositories, list):
            raise ConfigurationError("repositories must be a list")
        repositories = tuple(_entry_from_config(raw, i) for i, raw in enumerate(raw_repositories))

    output = args.output or file_values.get("output") or "text"
    if output not in OUTPUT_FORMATS:
        raise ConfigurationError(f"output must be one of {', '.join(OUTPUT_FORMATS)}")
    workers = args.workers if args.workers is not None else file_values.get("workers", 1)
    try:
        workers = int(workers)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"workers must be an integer; got {workers!r}") from exc
    if workers < 1:
        raise ConfigurationError("workers must be at least 1")
    strict = args.strict if args.strict is not None else file_values.get("strict", False)
    if not isinstance(strict, bool):
        raise ConfigurationError(f"strict must be true or false; got {strict!r}")

    if not token:
        raise ConfigurationError("no GitHub token: pass --token, set GHPM_TOKEN, or add it to the config file")
    if not repositories:
        raise ConfigurationError("no repositories configured")

    return Settings(
        token=str(token),
        username=str(username),
        repositories=repositories,
        output=output,
        workers=workers,
        strict=strict,
    )


__all__ = [
    "DATE_FORMAT",
    "OUTPUT_FORMATS",
    "Settings",
    "parse_date",
    "parse_repository_flag",
    "build_arg_parser",
    "parse_args",
    "resolve_settings",
]
