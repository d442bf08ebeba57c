"""Domain value objects package.

Usage:
    from dlmembership.domain.value_objects import MembershipRequest, BatchResult
"""

from dlmembership.domain.value_objects.batch_result import BatchResult
from dlmembership.domain.value_objects.deadline import Deadline
from dlmembership.domain.value_objects.member_operation_result import (
    MemberErrorDetail,
    MemberOperationResult,
)
from dlmembership.domain.value_objects.membership_request import MembershipRequest
from dlmembership.domain.value_objects.retry_policy import RetryPolicy

__all__ = [
    "BatchResult",
    "Deadline",
    "MemberErrorDetail",
    "MemberOperationResult",
    "MembershipRequest",
    "RetryPolicy",
]
