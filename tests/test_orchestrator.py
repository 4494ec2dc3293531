"""Tests for ghpm.milestones.orchestrator covering batch isolation, filtering, and ordering.

Run with:
    pytest tests/test_orchestrator.py --maxfail=1 -v --cov=ghpm.milestones.orchestrator --cov-report=term-missing
"""

import datetime as dt
import time
from unittest.mock import MagicMock

import pytest
import requests

from ghpm.errors import NotFoundError, RemoteError, ValidationError
from ghpm.milestones.models import (
    Failed,
    FilterCriteria,
    Milestone,
    MilestoneSpec,
    MilestoneUpdate,
    RepositoryTarget,
    Skipped,
    Succeeded,
)
from ghpm.milestones.orchestrator import BatchOrchestrator, apply_filters

UTC = dt.timezone.utc
NOW = dt.datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
A = RepositoryTarget("org", "a")
B = RepositoryTarget("owner2", "b")
C = RepositoryTarget("org", "c")


def _milestone(title, due=None, closed=None, number=1):
    return Milestone(number=number, title=title, due_on=due, closed_at=closed)


def _orchestrator(gateway, targets, **kwargs):
    kwargs.setdefault("clock", lambda: NOW)
    return BatchOrchestrator(gateway, targets, **kwargs)


def test_create_sends_identical_normalized_due_to_every_target():
    gateway = MagicMock()
    gateway.create.side_effect = lambda target, spec, due_on: _milestone(spec.title)
    result = _orchestrator(gateway, [A, B]).create(MilestoneSpec("v1", "", dt.date(2024, 1, 1)))

    due_values = [call.kwargs["due_on"] for call in gateway.create.call_args_list]
    assert due_values == ["2024-01-02T00:00:00Z", "2024-01-02T00:00:00Z"]
    assert [call.args[0] for call in gateway.create.call_args_list] == [A, B]
    assert isinstance(result[A], Succeeded) and isinstance(result[B], Succeeded)


def test_create_continues_after_failure_and_keeps_order():
    gateway = MagicMock()
    gateway.create.side_effect = [
        _milestone("v1"),
        RemoteError(500, "boom"),
        _milestone("v1"),
    ]
    result = _orchestrator(gateway, [A, B, C]).create(MilestoneSpec("v1", "", dt.date(2024, 1, 1)))

    assert list(result) == [A, B, C]
    assert isinstance(result[A], Succeeded)
    assert result[B] == Failed("HTTP 500: boom")
    assert isinstance(result[C], Succeeded)
    assert result.failed == [B]
    assert not result.all_failed


def test_create_rejects_empty_title_before_dispatch():
    gateway = MagicMock()
    with pytest.raises(ValidationError):
        _orchestrator(gateway, [A]).create(MilestoneSpec("", "", dt.date(2024, 1, 1)))
    gateway.create.assert_not_called()


def test_get_without_criteria_returns_gateway_list_unchanged():
    listed = [_milestone("b"), _milestone("a"), _milestone("c")]
    gateway = MagicMock()
    gateway.list.return_value = listed
    result = _orchestrator(gateway, [A]).get()

    gateway.list.assert_called_once_with(A, "all")
    assert result[A] == Succeeded(tuple(listed))


def test_get_closed_only_keeps_closed_milestones():
    gateway = MagicMock()
    gateway.list.return_value = [
        _milestone("a"),
        _milestone("b", closed=dt.datetime(2024, 2, 1, tzinfo=UTC)),
    ]
    result = _orchestrator(gateway, [A]).get(FilterCriteria(closed_only=True))
    assert [m.title for m in result[A].milestones] == ["b"]


def test_get_overdue_only_is_order_preserving_subset_before_now():
    listed = [
        _milestone("past-1", due=dt.datetime(2024, 1, 1, tzinfo=UTC)),
        _milestone("future", due=dt.datetime(2024, 7, 1, tzinfo=UTC)),
        _milestone("no-due"),
        _milestone("past-2", due=dt.datetime(2024, 5, 1, tzinfo=UTC)),
        _milestone("exactly-now", due=NOW),
        _milestone("past-closed", due=dt.datetime(2024, 1, 1, tzinfo=UTC), closed=NOW),
    ]
    gateway = MagicMock()
    gateway.list.return_value = listed
    result = _orchestrator(gateway, [A]).get(FilterCriteria(overdue_only=True))
    titles = [m.title for m in result[A].milestones]
    assert titles == ["past-1", "past-2"]
    assert all(m.due_on < NOW for m in result[A].milestones)


def test_get_reads_clock_once_per_batch():
    clock = MagicMock(return_value=NOW)
    gateway = MagicMock()
    gateway.list.return_value = [_milestone("x", due=dt.datetime(2024, 1, 1, tzinfo=UTC))] * 3
    BatchOrchestrator(gateway, [A, B, C], clock=clock).get(FilterCriteria(overdue_only=True))
    assert clock.call_count == 1


def test_get_isolates_failing_target():
    gateway = MagicMock()
    gateway.list.side_effect = [
        [_milestone("a")],
        NotFoundError("Not Found"),
        [_milestone("c")],
    ]
    result = _orchestrator(gateway, [A, B, C]).get()
    assert [m.title for m in result[A].milestones] == ["a"]
    assert isinstance(result[B], Failed)
    assert [m.title for m in result[C].milestones] == ["c"]


def test_timeout_becomes_failed_outcome():
    gateway = MagicMock()
    gateway.list.side_effect = requests.Timeout("read timed out")
    result = _orchestrator(gateway, [A]).get()
    assert result[A] == Failed("read timed out")
    assert result.all_failed


def test_update_miss_is_skipped_not_failed():
    gateway = MagicMock()
    edited = _milestone("v1")
    gateway.update.side_effect = [edited, None]
    changes = MilestoneUpdate(description="d", due_on=dt.date(2024, 1, 1))
    result = _orchestrator(gateway, [A, B]).update("v1", changes)

    assert result[A] == Succeeded((edited,))
    assert result[B] == Skipped("milestone 'v1' not found")
    assert result.failed == []
    due_values = {call.kwargs["due_on"] for call in gateway.update.call_args_list}
    assert due_values == {"2024-01-02T00:00:00Z"}


def test_update_requires_changes():
    with pytest.raises(ValidationError):
        _orchestrator(MagicMock(), [A]).update("v1", MilestoneUpdate())


def test_unexpected_errors_propagate():
    gateway = MagicMock()
    gateway.list.side_effect = KeyError("bug")
    with pytest.raises(KeyError):
        _orchestrator(gateway, [A]).get()


def test_parallel_dispatch_keeps_resolution_order_and_isolates_failures():
    targets = [RepositoryTarget("org", f"r{i}") for i in range(6)]
    delays = {"r0": 0.05, "r1": 0.0, "r2": 0.03, "r3": 0.0, "r4": 0.01, "r5": 0.0}

    class FakeGateway:
        def list(self, target, state):
            time.sleep(delays[target.name])
            if target.name == "r2":
                raise RemoteError(502, "bad gateway")
            return [_milestone(target.name)]

    result = _orchestrator(FakeGateway(), targets, max_workers=3).get()

    assert list(result) == targets
    assert isinstance(result[targets[2]], Failed)
    assert [result[t].milestones[0].title for t in targets if t.name != "r2"] == [
        "r0", "r1", "r3", "r4", "r5",
    ]


def test_apply_filters_conjunction():
    closed_overdue = _milestone("x", due=dt.datetime(2024, 1, 1, tzinfo=UTC), closed=NOW)
    assert apply_filters([closed_overdue], FilterCriteria(True, True), NOW) == []
    assert apply_filters([closed_overdue], FilterCriteria(False, True), NOW) == [closed_overdue]
