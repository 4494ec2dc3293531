"""Render a BatchResult as the banner-and-sections text report or as JSON."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from .models import BatchResult, Failed, Milestone, Skipped, Succeeded

BANNER = "#" * 50
SEPARATOR = "-" * 50
DISPLAY_DATE_FORMAT = "%d %b %y"


def milestone_summary(milestone: Milestone) -> Dict[str, Any]:
    """Fixed-order summary of a milestone with empty and zero fields omitted."""
    fields: List[tuple] = [
        ("title", milestone.title),
        ("description", milestone.description),
        ("open_issues", milestone.open_issues),
        ("closed_issues", milestone.closed_issues),
        ("closed_at", milestone.closed_at.strftime(DISPLAY_DATE_FORMAT) if milestone.closed_at else ""),
        ("due_on", milestone.due_on.strftime(DISPLAY_DATE_FORMAT) if milestone.due_on else ""),
    ]
    return {key: value for key, value in fields if value}


def _compact(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def render_text(result: BatchResult, heading: str = "Milestones") -> str:
    lines = [BANNER, f"\t\t {heading}", BANNER]
    for target, outcome in result.items():
        lines.append(f"Repository: {target.name}")
        if isinstance(outcome, Succeeded):
            for index, milestone in enumerate(outcome.milestones, start=1):
                lines.append(f"{index}. {_compact(milestone_summary(milestone))}")
        elif isinstance(outcome, Skipped):
            lines.append(f"skipped: {outcome.reason}")
        elif isinstance(outcome, Failed):
            lines.append(f"error: {outcome.error}")
        lines.append(SEPARATOR)
    return "\n".join(lines) + "\n"


def render_json(result: BatchResult) -> str:
    sections = []
    for target, outcome in result.items():
        section: Dict[str, Any] = {"repository": target.full_name, "status": outcome.status}
        if isinstance(outcome, Succeeded):
            section["milestones"] = [milestone_summary(m) for m in outcome.milestones]
        elif isinstance(outcome, Skipped):
            section["reason"] = outcome.reason
        elif isinstance(outcome, Failed):
            section["reason"] = outcome.error
        sections.append(section)
    return json.dumps(sections, indent=2, ensure_ascii=False) + "\n"


def render(result: BatchResult, output: str = "text", heading: str = "Milestones") -> str:
    if output == "json":
        return render_json(result)
    return render_text(result, heading)


__all__ = [
    "BANNER",
    "SEPARATOR",
    "DISPLAY_DATE_FORMAT",
    "milestone_summary",
    "render_text",
    "render_json",
    "render",
]
