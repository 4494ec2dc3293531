"""Run one milestone operation across every configured repository.

Each repository is an independent failure domain: a remote error, a timeout,
or a rejected request is recorded as that target's outcome and the batch moves
on. Nothing is retried and nothing is rolled back.
"""

from __future__ import annotations

import datetime as dt
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence

import requests

from ghpm.errors import RemoteError, ValidationError

from .gateway import MilestoneGateway
from .models import (
    BatchResult,
    Failed,
    FilterCriteria,
    Milestone,
    MilestoneSpec,
    MilestoneUpdate,
    Outcome,
    RepositoryTarget,
    Skipped,
    Succeeded,
    end_of_day,
    format_due_on,
)

TARGET_ERRORS = (RemoteError, ValidationError, requests.RequestException)


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def apply_filters(
    milestones: Sequence[Milestone], criteria: FilterCriteria, now: dt.datetime
) -> List[Milestone]:
    """Keep milestones matching every set criterion; order is preserved."""
    return [milestone for milestone in milestones if criteria.matches(milestone, now)]


class BatchOrchestrator:
    """Dispatch gateway calls per target and collect one outcome for each."""

    def __init__(
        self,
        gateway: MilestoneGateway,
        targets: Sequence[RepositoryTarget],
        *,
        max_workers: int = 1,
        clock: Callable[[], dt.datetime] = utc_now,
    ) -> None:
        self.gateway = gateway
        self.targets = list(targets)
        self.max_workers = max(1, int(max_workers))
        self.clock = clock

    def _dispatch(self, call: Callable[[RepositoryTarget], Outcome]) -> BatchResult:
        """Run `call` for each target; results land in resolution order."""

        def guarded(target: RepositoryTarget) -> Outcome:
            try:
                return call(target)
            except TARGET_ERRORS as exc:
                print(f"[error] {target}: {exc}", file=sys.stderr)
                return Failed(str(exc) or exc.__class__.__name__)

        if self.max_workers == 1 or len(self.targets) <= 1:
            outcomes = [guarded(target) for target in self.targets]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                # map() yields in submission order, one slot per target index.
                outcomes = list(pool.map(guarded, self.targets))

        result = BatchResult()
        for target, outcome in zip(self.targets, outcomes):
            result.record(target, outcome)
        return result

    def create(self, spec: MilestoneSpec) -> BatchResult:
        """Create `spec` in every repository with one shared due timestamp."""
        if not spec.title.strip():
            raise ValidationError("milestone title must not be empty")
        due_on = format_due_on(end_of_day(spec.due_on)) if spec.due_on else None

        def create_one(target: RepositoryTarget) -> Outcome:
            milestone = self.gateway.create(target, spec, due_on=due_on)
            print(f"[info] created milestone {milestone.title} in {target}", file=sys.stderr)
            return Succeeded((milestone,))

        return self._dispatch(create_one)

    def get(self, criteria: Optional[FilterCriteria] = None) -> BatchResult:
        """List every repository's milestones, filtered after retrieval."""
        criteria = criteria or FilterCriteria()
        now = self.clock()

        def list_one(target: RepositoryTarget) -> Outcome:
            milestones = self.gateway.list(target, "all")
            return Succeeded(tuple(apply_filters(milestones, criteria, now)))

        return self._dispatch(list_one)

    def update(self, title: str, changes: MilestoneUpdate) -> BatchResult:
        """Apply `changes` to the milestone named `title` wherever it exists."""
        if not title:
            raise ValidationError("milestone title must not be empty")
        if changes.is_empty():
            raise ValidationError("nothing to update: set a description or a due date")
        due_on = format_due_on(end_of_day(changes.due_on)) if changes.due_on else None

        def update_one(target: RepositoryTarget) -> Outcome:
            milestone = self.gateway.update(target, title, changes, due_on=due_on)
            if milestone is None:
                print(f"[skip] {target}: no milestone titled '{title}'", file=sys.stderr)
                return Skipped(f"milestone '{title}' not found")
            print(f"[info] updated milestone {milestone.title} in {target}", file=sys.stderr)
            return Succeeded((milestone,))

        return self._dispatch(update_one)


__all__ = ["TARGET_ERRORS", "utc_now", "apply_filters", "BatchOrchestrator"]
