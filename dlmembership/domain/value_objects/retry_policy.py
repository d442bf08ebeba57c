"""Bounded exponential backoff policy.

Delay for attempt n (1-based, the attempt that just failed) is
base_delay * 2 ** (n - 1), raised to the server's Retry-After hint when that
is larger, then capped at max_delay. Retries stop after max_attempts calls
or when the accumulated wait would pass max_total_wait.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class RetryPolicy:
    """Retry budget for one retried operation.

    Attributes:
        max_attempts: Total calls allowed (1 = no retry).
        base_delay: Delay after the first failure, in seconds.
        max_delay: Cap for any single delay.
        max_total_wait: Cap for the sum of delays (None = uncapped).

    Example:
        >>> policy = RetryPolicy(max_attempts=3, base_delay=1.0, max_delay=8.0)
        >>> policy.next_delay(attempt=1, waited=0.0)
        1.0
        >>> policy.next_delay(attempt=3, waited=3.0) is None
        True
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 8.0
    max_total_wait: float | None = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def next_delay(
        self,
        *,
        attempt: int,
        waited: float,
        retry_after: float | None = None,
    ) -> float | None:
        """Delay before the next attempt, or None when retries are exhausted.

        Args:
            attempt: Number of the attempt that just failed (1-based).
            waited: Seconds already spent sleeping for this operation.
            retry_after: Server-suggested delay, if any.

        Returns:
            Seconds to sleep, or None if no further attempt is allowed.
        """
        if attempt >= self.max_attempts:
            return None

        delay = self.base_delay * (2 ** (attempt - 1))
        if retry_after is not None and retry_after > delay:
            delay = retry_after
        delay = min(delay, self.max_delay)

        if self.max_total_wait is not None and waited + delay > self.max_total_wait:
            return None
        return delay
