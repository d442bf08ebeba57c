"""Fold per-member outcomes into a BatchResult.

Pure functions: no I/O, no logging, deterministic for a given input.
"""

from collections.abc import Sequence

from dlmembership.core.errors import DomainError
from dlmembership.domain.enums import BatchStatus, InvocationState
from dlmembership.domain.value_objects import (
    BatchResult,
    MemberOperationResult,
    MembershipRequest,
)


def derive_overall_status(results: Sequence[MemberOperationResult]) -> BatchStatus:
    """Classify a batch from its member results.

    Args:
        results: Member results (possibly empty).

    Returns:
        ALL_SUCCEEDED if every result is success-class, PARTIAL_FAILURE if
        both classes are present, TOTAL_FAILURE if all failed or empty.
    """
    successes = sum(1 for r in results if r.status.is_success)
    if not results or successes == 0:
        return BatchStatus.TOTAL_FAILURE
    if successes == len(results):
        return BatchStatus.ALL_SUCCEEDED
    return BatchStatus.PARTIAL_FAILURE


def aggregate(
    request: MembershipRequest,
    results: Sequence[MemberOperationResult],
    diagnostic: DomainError | None = None,
) -> BatchResult:
    """Build the BatchResult for an executed batch.

    Args:
        request: Originating request.
        results: One result per member, in request order.
        diagnostic: Batch-level note, e.g. the deadline that cut the
            batch short.

    Returns:
        Completed BatchResult.
    """
    return BatchResult(
        request=request,
        results=tuple(results),
        overall_status=derive_overall_status(results),
        diagnostic=diagnostic,
        final_state=InvocationState.COMPLETED,
    )


def aggregate_failure(
    request: MembershipRequest, diagnostic: DomainError
) -> BatchResult:
    """Build the BatchResult for a batch that never started.

    Args:
        request: Originating request.
        diagnostic: Why no member was attempted (auth failure, deadline).

    Returns:
        TOTAL_FAILURE BatchResult with empty results.
    """
    return BatchResult(
        request=request,
        results=(),
        overall_status=BatchStatus.TOTAL_FAILURE,
        diagnostic=diagnostic,
        final_state=InvocationState.AUTH_FAILED,
    )
