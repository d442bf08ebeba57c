"""Classification of a failed member operation.

Kinds fall in three families:
- Permanent member errors (no retry): MEMBER_NOT_FOUND, INVALID_MEMBER,
  PERMISSION_DENIED, POLICY_VIOLATION, GROUP_NOT_FOUND, GROUP_AMBIGUOUS,
  AUTHENTICATION_FAILED, INVALID_RESPONSE
- Transient errors that exhausted local retries: THROTTLED,
  SERVICE_UNAVAILABLE
- Invocation-level: DEADLINE_EXCEEDED, UNEXPECTED
"""

from enum import Enum


class MemberErrorKind(str, Enum):
    """Error kind carried by a FAILED member result."""

    MEMBER_NOT_FOUND = "member_not_found"
    INVALID_MEMBER = "invalid_member"
    PERMISSION_DENIED = "permission_denied"
    POLICY_VIOLATION = "policy_violation"
    GROUP_NOT_FOUND = "group_not_found"
    GROUP_AMBIGUOUS = "group_ambiguous"
    AUTHENTICATION_FAILED = "authentication_failed"
    INVALID_RESPONSE = "invalid_response"
    THROTTLED = "throttled"
    SERVICE_UNAVAILABLE = "service_unavailable"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    UNEXPECTED = "unexpected"

    @property
    def is_transient(self) -> bool:
        """True for kinds produced by exhausted transient retries."""
        return self in (MemberErrorKind.THROTTLED, MemberErrorKind.SERVICE_UNAVAILABLE)
