"""
Tests for stack inventory reconciliation.
"""

import threading
import time
from datetime import datetime, timezone

import pytest

from stackpick.errors import StackLookupError
from stackpick.inventory import (
    DeclaredStack,
    InventorySummary,
    StackRecord,
    StackStatus,
    parse_stack_listing,
    reconcile,
    reconcile_stack,
)


def record(status="CREATE_COMPLETE", stack_id=None):
    return StackRecord(
        stack_id=stack_id or f"arn:aws:cloudformation:us-east-1:123:stack/{status}",
        raw_status=status,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def lookup_from(table):
    """Lookup that answers from a dict; exceptions in the dict are raised."""
    def lookup(backing_id):
        value = table.get(backing_id)
        if isinstance(value, Exception):
            raise value
        return value
    return lookup


@pytest.fixture
def declared():
    return parse_stack_listing("A (cf-A)\nB/Child (cf-B)\nC (cf-C)\n")


class TestReconcile:
    """Declared stacks against live state."""

    def test_found_and_not_found(self, declared):
        stacks = reconcile(declared[:2], lookup_from({"cf-A": record()}))

        assert [(s.full_name, s.status) for s in stacks] == [
            ("A (cf-A)", StackStatus.CREATE_COMPLETE),
            ("B/Child (cf-B)", StackStatus.NOT_DEPLOYED),
        ]
        assert stacks[0].is_deployed
        assert stacks[0].created_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert not stacks[1].is_deployed
        assert stacks[1].created_at is None
        assert stacks[1].checked_at is not None

    def test_lookup_failure_is_unknown_and_continues(self, declared):
        """One failed lookup does not stop the stacks after it."""
        lookup = lookup_from({
            "cf-A": record(),
            "cf-B": StackLookupError("cf-B", "AccessDenied"),
            "cf-C": record("UPDATE_COMPLETE"),
        })
        stacks = reconcile(declared, lookup)

        assert [s.status for s in stacks] == [
            StackStatus.CREATE_COMPLETE,
            StackStatus.UNKNOWN,
            StackStatus.UPDATE_COMPLETE,
        ]
        assert stacks[1].display_name == "Child"
        assert "AccessDenied" in stacks[1].error
        assert not stacks[1].is_deployed

    def test_unexpected_exception_is_unknown(self, declared):
        stack = reconcile_stack(declared[0], lookup_from({"cf-A": RuntimeError("boom")}))
        assert stack.status is StackStatus.UNKNOWN
        assert stack.error == "boom"

    def test_not_found_vs_failure_distinct(self, declared):
        stacks = reconcile(declared[:2], lookup_from({"cf-A": None, "cf-B": OSError("timeout")}))
        assert stacks[0].status is StackStatus.NOT_DEPLOYED
        assert stacks[1].status is StackStatus.UNKNOWN

    def test_unmapped_status_keeps_raw(self, declared):
        """A state CloudFormation adds later is Unknown but still deployed."""
        stack = reconcile_stack(declared[0], lookup_from({"cf-A": record("BRAND_NEW_STATE")}))
        assert stack.status is StackStatus.UNKNOWN
        assert stack.raw_status == "BRAND_NEW_STATE"
        assert stack.is_deployed
        assert stack.error is None

    def test_total_and_ordered(self):
        declared = [DeclaredStack(f"S{i}", f"S{i} (cf-{i})", f"cf-{i}") for i in range(20)]
        table = {f"cf-{i}": record() if i % 3 == 0 else None for i in range(20)}
        table["cf-7"] = StackLookupError("cf-7", "throttled")
        stacks = reconcile(declared, lookup_from(table))
        assert len(stacks) == len(declared)
        assert [s.full_name for s in stacks] == [d.full_name for d in declared]

    def test_empty(self):
        assert reconcile([], lookup_from({})) == []


class TestConcurrentReconcile:
    """Bounded parallel lookups."""

    def test_order_kept_when_completion_order_differs(self):
        """Earlier stacks finishing last still come first."""
        declared = [DeclaredStack(f"S{i}", f"S{i}", f"cf-{i}") for i in range(6)]

        def slow_lookup(backing_id):
            index = int(backing_id.split("-")[1])
            time.sleep(0.01 * (6 - index))
            return record(stack_id=backing_id)

        stacks = reconcile(declared, slow_lookup, max_workers=4)
        assert [s.stack_id for s in stacks] == [f"cf-{i}" for i in range(6)]

    def test_concurrency_bounded(self):
        declared = [DeclaredStack(f"S{i}", f"S{i}", f"cf-{i}") for i in range(12)]
        lock = threading.Lock()
        active = {"now": 0, "peak": 0}

        def lookup(backing_id):
            with lock:
                active["now"] += 1
                active["peak"] = max(active["peak"], active["now"])
            time.sleep(0.01)
            with lock:
                active["now"] -= 1
            return None

        stacks = reconcile(declared, lookup, max_workers=3)
        assert len(stacks) == 12
        assert active["peak"] <= 3

    def test_failures_isolated_in_parallel(self):
        declared = [DeclaredStack(f"S{i}", f"S{i}", f"cf-{i}") for i in range(5)]
        table = {f"cf-{i}": record() for i in range(5)}
        table["cf-2"] = StackLookupError("cf-2", "denied")
        stacks = reconcile(declared, lookup_from(table), max_workers=8)
        assert [s.status for s in stacks].count(StackStatus.UNKNOWN) == 1
        assert stacks[2].status is StackStatus.UNKNOWN


class TestInventorySummary:
    """Derived counters."""

    def test_counts(self, declared):
        lookup = lookup_from({
            "cf-A": record(),
            "cf-B": None,
            "cf-C": StackLookupError("cf-C", "denied"),
        })
        summary = InventorySummary.from_stacks(reconcile(declared, lookup))
        assert (summary.total, summary.deployed, summary.not_deployed, summary.unknown) == (3, 1, 1, 1)
        assert summary.describe() == "Found 3 stacks (1 deployed, 1 not deployed, 1 unknown)"

    def test_deployed_keyed_on_stack_id(self, declared):
        """A deployed stack in an unmapped state still counts as deployed."""
        stacks = reconcile(declared[:1], lookup_from({"cf-A": record("BRAND_NEW_STATE")}))
        summary = InventorySummary.from_stacks(stacks)
        assert summary.deployed == 1
        assert summary.unknown == 0
        assert summary.describe() == "Found 1 stacks (1 deployed, 0 not deployed)"

    def test_to_dict(self, declared):
        stack = reconcile(declared[:1], lookup_from({"cf-A": record()}))[0]
        data = stack.to_dict()
        assert data["full_name"] == "A (cf-A)"
        assert data["status"] == "CREATE_COMPLETE"
        assert data["deployed"] is True
        assert data["created_at"] == "2024-01-01T00:00:00+00:00"
