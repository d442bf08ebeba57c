"""Invocation-level classification of a batch."""

from enum import Enum


class BatchStatus(str, Enum):
    """Overall status derived from per-member outcomes.

    - ALL_SUCCEEDED: every member succeeded or was already in desired state
    - PARTIAL_FAILURE: at least one success and at least one failure
    - TOTAL_FAILURE: every member failed, or the batch never started
    """

    ALL_SUCCEEDED = "all_succeeded"
    PARTIAL_FAILURE = "partial_failure"
    TOTAL_FAILURE = "total_failure"
