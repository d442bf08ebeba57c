"""RFC 7807 Problem Details for HTTP APIs.

RFC 7807: https://tools.ietf.org/html/rfc7807

Exports:
    ErrorDetail: Individual field-specific error
    ProblemDetails: RFC 7807 compliant error response schema
"""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Individual error entry.

    One entry per violated payload rule for validation failures, or a
    single entry naming the failed directory step for batch-level failures.

    Examples:
        >>> error = ErrorDetail(
        ...     field="Action",
        ...     code="invalid_action",
        ...     message="Action 'Invalid' is not one of: Add, Remove",
        ... )
    """

    field: str = Field(..., description="Payload field or failed step")
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")


class ProblemDetails(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    Attributes:
        type: URI reference identifying the problem type
        title: Short, human-readable summary of the problem type
        status: HTTP status code for this occurrence
        detail: Human-readable explanation specific to this occurrence
        instance: URI reference identifying the specific occurrence
        errors: Optional list of errors (all validation violations)
        trace_id: Optional request trace ID for debugging
    """

    type: str = Field(
        ...,
        description="URI reference identifying the problem type",
        examples=["http://localhost:8000/errors/command_validation_failed"],
    )
    title: str = Field(
        ...,
        description="Short, human-readable summary",
        examples=["Validation Failed"],
    )
    status: int = Field(..., description="HTTP status code", examples=[400])
    detail: str = Field(
        ...,
        description="Human-readable explanation",
        examples=["Membership request has 3 validation error(s)"],
    )
    instance: str = Field(
        ...,
        description="URI reference identifying this occurrence",
        examples=["/api/v1/webhooks/membership"],
    )
    errors: list[ErrorDetail] | None = Field(None, description="Error entries")
    trace_id: str | None = Field(None, description="Request trace ID for debugging")
