"""Typed milestone operations against one repository's REST collection."""

from __future__ import annotations

from typing import List, Optional

from ghpm.client.http_client import GitHubClient
from ghpm.errors import ValidationError

from .models import Milestone, MilestoneSpec, MilestoneUpdate, RepositoryTarget

LIST_STATES = ("all", "open", "closed")


class MilestoneGateway:
    """Translate create/list/update intents into GitHub milestone endpoints."""

    def __init__(self, client: GitHubClient) -> None:
        self.client = client

    def _collection_url(self, target: RepositoryTarget) -> str:
        return self.client.url(f"/repos/{target.owner}/{target.name}/milestones")

    def create(self, target: RepositoryTarget, spec: MilestoneSpec, *, due_on: Optional[str] = None) -> Milestone:
        """POST a new milestone; `due_on` overrides the spec's own normalization."""
        if not spec.title.strip():
            raise ValidationError("milestone title must not be empty")
        data = self.client.do("POST", self._collection_url(target), spec.payload(due_on))
        return Milestone.from_api(data or {})

    def list(self, target: RepositoryTarget, state: str = "all") -> List[Milestone]:
        """Return milestones ordered by due date ascending, as sorted by GitHub."""
        if state not in LIST_STATES:
            raise ValidationError(f"state must be one of {', '.join(LIST_STATES)}; got '{state}'")
        entries = self.client.paged_get(
            self._collection_url(target),
            {"state": state, "sort": "due_on", "direction": "asc"},
        )
        return [Milestone.from_api(entry) for entry in entries]

    def update(
        self,
        target: RepositoryTarget,
        title: str,
        changes: MilestoneUpdate,
        *,
        due_on: Optional[str] = None,
    ) -> Optional[Milestone]:
        """Edit the milestone titled exactly `title`; None when the repository has none."""
        if not title:
            raise ValidationError("milestone title must not be empty")
        if changes.is_empty():
            raise ValidationError("nothing to update: set a description or a due date")

        match = next((m for m in self.list(target, "all") if m.title == title), None)
        if match is None:
            return None

        data = self.client.do(
            "PATCH",
            f"{self._collection_url(target)}/{match.number}",
            changes.payload(due_on),
        )
        return Milestone.from_api(data or {})


__all__ = ["LIST_STATES", "MilestoneGateway"]
