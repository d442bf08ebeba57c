"""Application layer error types.

This module defines application-level errors that wrap domain errors and add
the context the presentation layer needs to pick an HTTP response.

Exports:
    ApplicationErrorCode: Application-level error code enum
    ApplicationError: Application layer error dataclass
"""

from dataclasses import dataclass
from enum import Enum

from dlmembership.core.errors import DomainError, ValidationError


class ApplicationErrorCode(Enum):
    """Application-level error codes.

    Examples:
        >>> error = ApplicationError(
        ...     code=ApplicationErrorCode.COMMAND_VALIDATION_FAILED,
        ...     message="Membership request has 3 validation error(s)",
        ... )
    """

    COMMAND_VALIDATION_FAILED = "command_validation_failed"
    COMMAND_EXECUTION_FAILED = "command_execution_failed"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    EXTERNAL_SERVICE_ERROR = "external_service_error"
    DEADLINE_EXCEEDED = "deadline_exceeded"


@dataclass(frozen=True, slots=True, kw_only=True)
class ApplicationError:
    """Application layer error.

    Attributes:
        code: Application error code (from ApplicationErrorCode enum)
        message: Human-readable error message
        domain_error: Original domain error (single-cause failures)
        validation_errors: Every violated payload rule, in payload order
        details: Additional context as key-value pairs

    Examples:
        >>> error = ApplicationError(
        ...     code=ApplicationErrorCode.UNAUTHORIZED,
        ...     message="Directory credential is expired",
        ...     domain_error=auth_error,
        ... )
    """

    code: ApplicationErrorCode
    message: str
    domain_error: DomainError | None = None
    validation_errors: tuple[ValidationError, ...] = ()
    details: dict[str, str] | None = None
