"""Outcome of one member operation."""

from enum import Enum


class MemberOperationStatus(str, Enum):
    """Per-member outcome.

    ALREADY_IN_DESIRED_STATE counts as success: adding an existing member or
    removing a non-member leaves the group exactly as requested.
    """

    SUCCEEDED = "succeeded"
    ALREADY_IN_DESIRED_STATE = "already_in_desired_state"
    FAILED = "failed"

    @property
    def is_success(self) -> bool:
        """True for SUCCEEDED and ALREADY_IN_DESIRED_STATE."""
        return self is not MemberOperationStatus.FAILED
