"""Entry point wiring settings, the GitHub client, and the batch orchestrator."""

from __future__ import annotations

import sys
from importlib import metadata
from typing import List, Optional

from ghpm.client.http_client import GitHubClient
from ghpm.errors import ConfigurationError, ValidationError

from .config import Settings, parse_args, parse_date, resolve_settings
from .gateway import MilestoneGateway
from .models import BatchResult, FilterCriteria, MilestoneSpec, MilestoneUpdate
from .orchestrator import BatchOrchestrator
from .report import render
from .targets import resolve


def version() -> str:
    try:
        return metadata.version("ghpm")
    except metadata.PackageNotFoundError:
        return "dev"


def build_orchestrator(settings: Settings) -> BatchOrchestrator:
    targets = resolve(settings.username, settings.repositories)
    gateway = MilestoneGateway(GitHubClient(settings.token))
    return BatchOrchestrator(gateway, targets, max_workers=settings.workers)


def run_command(args, orchestrator: BatchOrchestrator) -> BatchResult:
    """Dispatch the parsed `milestones` action to the orchestrator."""
    if args.action == "get":
        return orchestrator.get(FilterCriteria(overdue_only=args.overdue, closed_only=args.closed))
    if args.action == "create":
        spec = MilestoneSpec(
            title=args.title,
            description=args.description,
            due_on=parse_date(args.due_on),
        )
        return orchestrator.create(spec)
    if args.action == "update":
        changes = MilestoneUpdate(
            description=args.description,
            due_on=parse_date(args.due_on) if args.due_on else None,
        )
        return orchestrator.update(args.title, changes)
    raise ValidationError(f"unknown action '{args.action}'")


def exit_status(result: BatchResult, strict: bool = False) -> int:
    """0 unless every repository failed (or, with strict, any repository failed)."""
    if result.all_failed:
        return 1
    if strict and result.failed:
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for `ghpm`; returns the process exit status."""

    args = parse_args(argv)
    if args.command == "version":
        print(version())
        return 0

    try:
        settings = resolve_settings(args)
        orchestrator = build_orchestrator(settings)
        result = run_command(args, orchestrator)
    except (ConfigurationError, ValidationError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1

    sys.stdout.write(render(result, settings.output))
    if result.failed:
        print(
            f"[warn] {len(result.failed)} of {len(result)} repositories failed: "
            + ", ".join(str(target) for target in result.failed),
            file=sys.stderr,
        )
    return exit_status(result, settings.strict)


__all__ = ["version", "build_orchestrator", "run_command", "exit_status", "main"]
