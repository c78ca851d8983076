"""
Stack inventory reconciliation.

Merges the declared stack list with per-stack CloudFormation lookups into
exactly one ReconciledStack per declared stack, in declared order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from .models import DeclaredStack, ReconciledStack, StackRecord
from .status import StackStatus

logger = logging.getLogger(__name__)

StackLookup = Callable[[str], Optional[StackRecord]]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def reconcile_stack(declared: DeclaredStack, lookup: StackLookup) -> ReconciledStack:
    """
    Reconcile a single declared stack.

    Args:
        declared: Declared stack
        lookup: Returns a StackRecord, None for "not found", or raises

    Returns:
        ReconciledStack; never raises for lookup failures
    """
    checked_at = _now()

    try:
        record = lookup(declared.backing_id)
    except Exception as e:
        logger.warning(f"Status lookup failed for {declared.full_name} ({declared.backing_id}): {e}")
        return ReconciledStack(
            declared=declared,
            status=StackStatus.UNKNOWN,
            checked_at=checked_at,
            description="Status unavailable",
            error=str(e),
        )

    if record is None:
        return ReconciledStack(
            declared=declared,
            status=StackStatus.NOT_DEPLOYED,
            checked_at=checked_at,
            description="CDK stack (not deployed)",
        )

    return ReconciledStack(
        declared=declared,
        status=StackStatus.from_cloudformation(record.raw_status),
        checked_at=checked_at,
        stack_id=record.stack_id,
        raw_status=record.raw_status,
        created_at=record.created_at,
        updated_at=record.updated_at,
        description=record.description,
        tags=dict(record.tags),
    )


def reconcile(
    declared: Sequence[DeclaredStack],
    lookup: StackLookup,
    max_workers: int = 1,
) -> List[ReconciledStack]:
    """
    Reconcile every declared stack against its live status.

    Lookups run on up to max_workers threads; the result keeps declared
    order regardless of completion order.

    Args:
        declared: Declared stacks in declared order
        lookup: Status lookup capability
        max_workers: Concurrency bound (1 means sequential)

    Returns:
        One ReconciledStack per declared stack
    """
    if not declared:
        return []

    if max_workers <= 1:
        return [reconcile_stack(stack, lookup) for stack in declared]

    workers = min(max_workers, len(declared))
    logger.debug(f"Reconciling {len(declared)} stacks with {workers} workers")

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="stackpick-lookup") as pool:
        return list(pool.map(lambda stack: reconcile_stack(stack, lookup), declared))
