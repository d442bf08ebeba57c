"""Invocation deadline based on a monotonic clock."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Deadline:
    """Point in monotonic time after which no new work is started.

    Attributes:
        expires_at: Monotonic timestamp of expiry.
        total_seconds: Budget the deadline was created with (for messages).
        clock: Monotonic clock (injectable for tests).

    Example:
        >>> deadline = Deadline.after(240.0)
        >>> if deadline.expired:
        ...     ...
    """

    expires_at: float
    total_seconds: float
    clock: Callable[[], float] = field(default=time.monotonic, compare=False)

    @classmethod
    def after(
        cls, seconds: float, *, clock: Callable[[], float] = time.monotonic
    ) -> "Deadline":
        """Create a deadline `seconds` from now."""
        return cls(expires_at=clock() + seconds, total_seconds=seconds, clock=clock)

    def remaining(self) -> float:
        """Seconds left (never negative)."""
        return max(0.0, self.expires_at - self.clock())

    @property
    def expired(self) -> bool:
        return self.clock() >= self.expires_at

    def allows_wait(self, seconds: float) -> bool:
        """True when sleeping `seconds` still leaves time to do work."""
        return self.remaining() > seconds
