"""Domain records for milestone batches: targets, specs, snapshots, outcomes."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

DUE_ON_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


@dataclass(frozen=True)
class RepositoryEntry:
    """One configured repository line, before owner resolution."""

    name: str
    owner_override: Optional[str] = None


@dataclass(frozen=True)
class RepositoryTarget:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


def end_of_day(day: dt.date) -> dt.datetime:
    """Return midnight UTC following `day`; GitHub reads due dates as start-of-day."""
    start = dt.datetime(day.year, day.month, day.day, tzinfo=dt.timezone.utc)
    return start + dt.timedelta(hours=24)


def format_due_on(moment: dt.datetime) -> str:
    return moment.astimezone(dt.timezone.utc).strftime(DUE_ON_FORMAT)


def parse_timestamp(value: Optional[str]) -> Optional[dt.datetime]:
    """Parse GitHub's ISO-8601 `...Z` timestamps; None and "" map to None."""
    if not value:
        return None
    return dt.datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True)
class MilestoneSpec:
    title: str
    description: str = ""
    due_on: Optional[dt.date] = None

    def payload(self, due_on: Optional[str] = None) -> Dict[str, Any]:
        """Request body for the create endpoint; `due_on` is the pre-normalized timestamp."""
        body: Dict[str, Any] = {"title": self.title, "description": self.description}
        if due_on is None and self.due_on is not None:
            due_on = format_due_on(end_of_day(self.due_on))
        if due_on is not None:
            body["due_on"] = due_on
        return body


@dataclass(frozen=True)
class MilestoneUpdate:
    """Fields to change on an existing milestone; unset fields are left alone."""

    description: Optional[str] = None
    due_on: Optional[dt.date] = None

    def is_empty(self) -> bool:
        return self.description is None and self.due_on is None

    def payload(self, due_on: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if self.description is not None:
            body["description"] = self.description
        if due_on is None and self.due_on is not None:
            due_on = format_due_on(end_of_day(self.due_on))
        if due_on is not None:
            body["due_on"] = due_on
        return body


@dataclass(frozen=True)
class Milestone:
    """Snapshot of a remote milestone as returned by the API."""

    number: int
    title: str
    description: str = ""
    state: str = "open"
    open_issues: int = 0
    closed_issues: int = 0
    due_on: Optional[dt.datetime] = None
    closed_at: Optional[dt.datetime] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Milestone":
        return cls(
            number=int(data.get("number") or 0),
            title=data.get("title") or "",
            description=data.get("description") or "",
            state=data.get("state") or "open",
            open_issues=max(0, int(data.get("open_issues") or 0)),
            closed_issues=max(0, int(data.get("closed_issues") or 0)),
            due_on=parse_timestamp(data.get("due_on")),
            closed_at=parse_timestamp(data.get("closed_at")),
        )

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None

    def is_overdue(self, now: dt.datetime) -> bool:
        return self.due_on is not None and self.due_on < now and not self.is_closed


@dataclass(frozen=True)
class FilterCriteria:
    overdue_only: bool = False
    closed_only: bool = False

    def matches(self, milestone: Milestone, now: dt.datetime) -> bool:
        if self.overdue_only and not milestone.is_overdue(now):
            return False
        if self.closed_only and not milestone.is_closed:
            return False
        return True


@dataclass(frozen=True)
class Succeeded:
    milestones: Tuple[Milestone, ...] = ()
    status = "succeeded"


@dataclass(frozen=True)
class Skipped:
    reason: str
    status = "skipped"


@dataclass(frozen=True)
class Failed:
    error: str
    status = "failed"


Outcome = Union[Succeeded, Skipped, Failed]


@dataclass
class BatchResult:
    """Per-target outcomes of one command, kept in target resolution order."""

    outcomes: Dict[RepositoryTarget, Outcome] = field(default_factory=dict)

    def record(self, target: RepositoryTarget, outcome: Outcome) -> None:
        if target in self.outcomes:
            raise ValueError(f"outcome for {target} already recorded")
        self.outcomes[target] = outcome

    def __getitem__(self, target: RepositoryTarget) -> Outcome:
        return self.outcomes[target]

    def __iter__(self) -> Iterator[RepositoryTarget]:
        return iter(self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)

    def items(self):
        return self.outcomes.items()

    def _with(self, kind: type) -> List[RepositoryTarget]:
        return [target for target, outcome in self.outcomes.items() if isinstance(outcome, kind)]

    @property
    def succeeded(self) -> List[RepositoryTarget]:
        return self._with(Succeeded)

    @property
    def skipped(self) -> List[RepositoryTarget]:
        return self._with(Skipped)

    @property
    def failed(self) -> List[RepositoryTarget]:
        return self._with(Failed)

    @property
    def all_failed(self) -> bool:
        return bool(self.outcomes) and len(self.failed) == len(self.outcomes)


__all__ = [
    "DUE_ON_FORMAT",
    "RepositoryEntry",
    "RepositoryTarget",
    "end_of_day",
    "format_due_on",
    "parse_timestamp",
    "MilestoneSpec",
    "MilestoneUpdate",
    "Milestone",
    "FilterCriteria",
    "Succeeded",
    "Skipped",
    "Failed",
    "Outcome",
    "BatchResult",
]
