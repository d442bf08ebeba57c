"""Directory service error types.

These errors are part of the DirectoryClientProtocol and session manager
contracts: they define every failure the remote directory can report and
how the engine is allowed to react to it.

Taxonomy:
- DirectoryAuthenticationError: credential invalid/expired (fatal, no retry)
- DirectoryPermissionError: app lacks permission (fatal at session level,
  permanent at member level)
- DirectoryTransientError: throttling / unavailability (retry with backoff)
- DirectoryMemberError: permanent problem with one member or the group
- DirectoryInvalidResponseError: unparseable or unexpected response

Usage:
    from dlmembership.domain.errors import DirectoryTransientError
    from dlmembership.core.result import Failure

    return Failure(
        error=DirectoryTransientError(
            code=ErrorCode.DIRECTORY_RATE_LIMITED,
            message="Directory API rate limit exceeded",
            retry_after=5.0,
            is_throttled=True,
        )
    )
"""

from dataclasses import dataclass
from typing import Any

from dlmembership.core.errors import DomainError
from dlmembership.domain.enums import MemberErrorKind


@dataclass(frozen=True, slots=True, kw_only=True)
class DirectoryError(DomainError):
    """Base directory service error.

    Attributes:
        code: Domain ErrorCode.
        message: Human-readable message.
        operation: Directory operation that failed (for logging).
        details: Additional context (service error code, request id).
    """

    operation: str | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DirectoryAuthenticationError(DirectoryError):
    """Certificate-backed credential rejected.

    Raised when:
    - Certificate or key cannot be loaded
    - Certificate is expired or not yet valid
    - Token endpoint rejects the client assertion

    Recovery: Operator must rotate or fix the credential. Never retried.

    Attributes:
        is_credential_expired: Whether the failure is due to expiry.
    """

    is_credential_expired: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class DirectoryPermissionError(DirectoryError):
    """Application lacks permission for the requested operation.

    Recovery: Operator must grant the permission. Never retried.

    Attributes:
        required_permission: Permission or scope that was missing, when known.
    """

    required_permission: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DirectoryTransientError(DirectoryError):
    """Directory throttled the call or is momentarily unavailable.

    Raised when:
    - Service returns 429 (throttled)
    - Service returns 5xx
    - Connection times out or cannot be opened

    Recovery: Retry with exponential backoff.

    Attributes:
        retry_after: Suggested retry delay in seconds (from Retry-After).
        is_throttled: True for 429 responses, False for unavailability.
    """

    retry_after: float | None = None
    is_throttled: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class DirectoryMemberError(DirectoryError):
    """Permanent failure for one member (or the target group).

    Raised when:
    - Member identifier cannot be resolved
    - Group cannot be resolved or is ambiguous
    - Directory rejects the change for policy reasons

    Recovery: Caller fixes the input. Never retried.

    Attributes:
        kind: Member error classification.
        member: Member identifier the error refers to (None for group errors).
    """

    kind: MemberErrorKind
    member: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DirectoryInvalidResponseError(DirectoryError):
    """Directory returned a response the client could not interpret.

    Attributes:
        status_code: HTTP status of the response.
        response_body: Truncated raw body for debugging.
    """

    status_code: int | None = None
    response_body: str | None = None
