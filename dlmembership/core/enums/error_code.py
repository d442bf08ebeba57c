"""Domain-level error codes (machine-readable).

Error codes follow ENTITY_ACTION_REASON naming convention and travel with
every DomainError. They are surfaced to webhook callers in Problem Details
responses.

Categories:
- Payload validation (INVALID_*, MISSING_*)
- Credential and session (CREDENTIAL_*, AUTHENTICATION_*, PERMISSION_*)
- Directory service (DIRECTORY_*)
- Member operations (MEMBER_*, GROUP_*)
- Invocation (DEADLINE_EXCEEDED)
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain-level error codes (machine-readable)."""

    # Payload validation
    VALIDATION_FAILED = "validation_failed"
    INVALID_PAYLOAD = "invalid_payload"
    PAYLOAD_NESTING_TOO_DEEP = "payload_nesting_too_deep"
    INVALID_ACTION = "invalid_action"
    MISSING_GROUP_IDENTITY = "missing_group_identity"
    MISSING_MEMBERS = "missing_members"
    INVALID_MEMBER_IDENTIFIER = "invalid_member_identifier"

    # Credential and session
    CREDENTIAL_INVALID = "credential_invalid"
    CREDENTIAL_EXPIRED = "credential_expired"
    AUTHENTICATION_FAILED = "authentication_failed"
    PERMISSION_DENIED = "permission_denied"

    # Directory service
    DIRECTORY_UNAVAILABLE = "directory_unavailable"
    DIRECTORY_RATE_LIMITED = "directory_rate_limited"
    DIRECTORY_INVALID_RESPONSE = "directory_invalid_response"

    # Member operations
    GROUP_NOT_FOUND = "group_not_found"
    MEMBER_NOT_FOUND = "member_not_found"
    MEMBER_OPERATION_REJECTED = "member_operation_rejected"
    GROUP_NOT_MANAGEABLE = "group_not_manageable"

    # Invocation
    DEADLINE_EXCEEDED = "deadline_exceeded"
