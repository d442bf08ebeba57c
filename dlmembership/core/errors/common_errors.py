"""Common error classes used across layers.

Error Types:
- ValidationError: One violated rule of the inbound payload
- DeadlineExceededError: The invocation ran out of time

Usage:
    from dlmembership.core.errors import ValidationError
    from dlmembership.core.enums import ErrorCode

    return Failure(error=[
        ValidationError(
            code=ErrorCode.INVALID_ACTION,
            message="Action 'Invalid' is not one of: Add, Remove",
            field="Action",
        )
    ])
"""

from dataclasses import dataclass

from dlmembership.core.errors.domain_error import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationError(DomainError):
    """Input validation failure.

    Attributes:
        code: ErrorCode enum.
        message: Human-readable message.
        field: Payload field that failed validation (None for whole-payload
            problems such as undecodable JSON).
        details: Additional context.
    """

    field: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DeadlineExceededError(DomainError):
    """Invocation deadline elapsed before the work could finish.

    Attributes:
        code: ErrorCode enum (DEADLINE_EXCEEDED).
        message: Human-readable message.
        deadline_seconds: Configured overall deadline.
    """

    deadline_seconds: float | None = None
