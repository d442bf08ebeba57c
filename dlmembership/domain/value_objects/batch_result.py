"""BatchResult value object.

The terminal artifact of one invocation. Returned to the webhook caller
and written to the diagnostics log.
"""

from dataclasses import dataclass

from dlmembership.core.errors import DomainError
from dlmembership.domain.enums import BatchStatus, InvocationState, MemberOperationStatus
from dlmembership.domain.value_objects.member_operation_result import (
    MemberOperationResult,
)
from dlmembership.domain.value_objects.membership_request import MembershipRequest


@dataclass(frozen=True, slots=True, kw_only=True)
class BatchResult:
    """Outcome of a validated membership request.

    Attributes:
        request: Originating request.
        results: One result per member, in request order. Empty when the
            batch never started.
        overall_status: Derived classification (see BatchStatus).
        diagnostic: Batch-level error when the batch never started
            (authentication failure, deadline during session setup).
        final_state: Terminal invocation state (COMPLETED or AUTH_FAILED).
    """

    request: MembershipRequest
    results: tuple[MemberOperationResult, ...]
    overall_status: BatchStatus
    diagnostic: DomainError | None = None
    final_state: InvocationState = InvocationState.COMPLETED

    @property
    def started(self) -> bool:
        """True when at least one member result exists."""
        return bool(self.results)

    @property
    def succeeded_count(self) -> int:
        return self._count(MemberOperationStatus.SUCCEEDED)

    @property
    def already_in_desired_state_count(self) -> int:
        return self._count(MemberOperationStatus.ALREADY_IN_DESIRED_STATE)

    @property
    def failed_count(self) -> int:
        return self._count(MemberOperationStatus.FAILED)

    def _count(self, status: MemberOperationStatus) -> int:
        return sum(1 for r in self.results if r.status is status)
