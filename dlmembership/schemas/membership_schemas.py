"""Membership webhook response schemas.

Pydantic schemas for the membership webhook. Includes:
- Per-member result schema
- Batch summary counts
- Domain-to-schema conversion (BatchResult -> BatchResultResponse)

The inbound payload has no request schema: it is accepted as raw JSON
(possibly string-encoded more than once) and normalized by the
application layer so every violation can be reported together.
"""

from pydantic import BaseModel, Field

from dlmembership.domain.value_objects import BatchResult, MemberOperationResult


# =============================================================================
# Response Schemas
# =============================================================================


class ErrorDetailResponse(BaseModel):
    """Why one member failed.

    Attributes:
        kind: Machine-readable error kind.
        message: Human-readable explanation.
    """

    kind: str = Field(..., description="Error kind", examples=["member_not_found"])
    message: str = Field(..., description="Human-readable explanation")


class MemberResultResponse(BaseModel):
    """Outcome for one member."""

    member: str = Field(..., description="Member identifier as submitted")
    status: str = Field(
        ...,
        description="succeeded, already_in_desired_state or failed",
        examples=["succeeded"],
    )
    error_detail: ErrorDetailResponse | None = Field(
        None, description="Present only when status is failed"
    )
    attempts: int = Field(..., description="Directory calls issued for this member")

    @classmethod
    def from_result(cls, result: MemberOperationResult) -> "MemberResultResponse":
        """Convert a domain member result."""
        detail = result.error_detail
        return cls(
            member=result.member,
            status=result.status.value,
            error_detail=(
                ErrorDetailResponse(kind=detail.kind.value, message=detail.message)
                if detail is not None
                else None
            ),
            attempts=result.attempts,
        )


class BatchSummary(BaseModel):
    """Counts per member status."""

    total: int = Field(..., description="Members in the request")
    succeeded: int = Field(..., description="Members changed")
    already_in_desired_state: int = Field(
        ..., description="Members that needed no change"
    )
    failed: int = Field(..., description="Members that failed")


class BatchResultResponse(BaseModel):
    """Membership webhook response body.

    Attributes:
        overall_status: all_succeeded, partial_failure or total_failure.
        action: add or remove.
        group_identity: Target group as submitted.
        results: One entry per member, in request order.
        summary: Counts per status.
        trace_id: Request trace id.
    """

    overall_status: str = Field(..., examples=["partial_failure"])
    action: str = Field(..., examples=["add"])
    group_identity: str = Field(..., examples=["sales@contoso.com"])
    results: list[MemberResultResponse]
    summary: BatchSummary
    trace_id: str | None = None

    @classmethod
    def from_batch_result(
        cls, batch: BatchResult, trace_id: str | None = None
    ) -> "BatchResultResponse":
        """Convert a domain BatchResult.

        Args:
            batch: Batch outcome.
            trace_id: Request trace id.

        Returns:
            BatchResultResponse ready for serialization.
        """
        return cls(
            overall_status=batch.overall_status.value,
            action=batch.request.action.value,
            group_identity=batch.request.group_identity,
            results=[MemberResultResponse.from_result(r) for r in batch.results],
            summary=BatchSummary(
                total=len(batch.request.members),
                succeeded=batch.succeeded_count,
                already_in_desired_state=batch.already_in_desired_state_count,
                failed=batch.failed_count,
            ),
            trace_id=trace_id,
        )
