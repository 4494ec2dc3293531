"""Expand configured repository entries into concrete (owner, name) targets."""

from __future__ import annotations

from typing import Iterable, List, Set

from ghpm.errors import ConfigurationError

from .models import RepositoryEntry, RepositoryTarget


def resolve(global_owner: str, entries: Iterable[RepositoryEntry]) -> List[RepositoryTarget]:
    """Apply per-repository owner overrides, preserving configuration order."""
    global_owner = (global_owner or "").strip()
    targets: List[RepositoryTarget] = []
    seen: Set[RepositoryTarget] = set()
    for index, entry in enumerate(entries, start=1):
        name = (entry.name or "").strip()
        if not name:
            raise ConfigurationError(f"repository #{index} has an empty name")
        if "/" in name:
            raise ConfigurationError(
                f"repository '{name}' must be a bare name; set its username to override the owner"
            )
        owner = (entry.owner_override or "").strip() or global_owner
        if not owner:
            raise ConfigurationError(
                f"repository '{name}' has no owner: set a global username or a per-repository username"
            )
        target = RepositoryTarget(owner=owner, name=name)
        if target in seen:
            raise ConfigurationError(f"repository {target} is configured more than once")
        seen.add(target)
        targets.append(target)
    return targets


__all__ = ["resolve"]
