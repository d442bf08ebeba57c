"""Per-invocation state machine.

    RECEIVED -> VALIDATING -> REJECTED
                           -> AUTHENTICATING -> AUTH_FAILED
                                             -> EXECUTING -> AGGREGATING -> COMPLETED

REJECTED and AUTH_FAILED are terminal failure states reached without ever
entering EXECUTING. COMPLETED is the only terminal success state and is
reached whether or not individual members failed.
"""

from enum import Enum


class InvocationState(str, Enum):
    """Lifecycle state of one webhook invocation."""

    RECEIVED = "received"
    VALIDATING = "validating"
    REJECTED = "rejected"
    AUTHENTICATING = "authenticating"
    AUTH_FAILED = "auth_failed"
    EXECUTING = "executing"
    AGGREGATING = "aggregating"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        """True for REJECTED, AUTH_FAILED and COMPLETED."""
        return not _TRANSITIONS[self]

    def can_transition_to(self, target: "InvocationState") -> bool:
        """Check whether moving to target is a legal transition."""
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[InvocationState, frozenset[InvocationState]] = {
    InvocationState.RECEIVED: frozenset({InvocationState.VALIDATING}),
    InvocationState.VALIDATING: frozenset(
        {InvocationState.REJECTED, InvocationState.AUTHENTICATING}
    ),
    InvocationState.REJECTED: frozenset(),
    InvocationState.AUTHENTICATING: frozenset(
        {InvocationState.AUTH_FAILED, InvocationState.EXECUTING}
    ),
    InvocationState.AUTH_FAILED: frozenset(),
    InvocationState.EXECUTING: frozenset({InvocationState.AGGREGATING}),
    InvocationState.AGGREGATING: frozenset({InvocationState.COMPLETED}),
    InvocationState.COMPLETED: frozenset(),
}
