"""Domain enums package.

Usage:
    from dlmembership.domain.enums import MembershipAction, BatchStatus
"""

from dlmembership.domain.enums.batch_status import BatchStatus
from dlmembership.domain.enums.invocation_state import InvocationState
from dlmembership.domain.enums.member_error_kind import MemberErrorKind
from dlmembership.domain.enums.member_operation_status import MemberOperationStatus
from dlmembership.domain.enums.membership_action import MembershipAction

__all__ = [
    "BatchStatus",
    "InvocationState",
    "MemberErrorKind",
    "MemberOperationStatus",
    "MembershipAction",
]
