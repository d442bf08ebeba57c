"""Membership commands.

Architecture:
    - Commands are immutable value objects representing caller intent
    - The payload stays raw here; normalization is the handler's first step
      so every violation can be reported together
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, kw_only=True)
class ApplyMembershipChange:
    """Command to add or remove a batch of members on one group.

    Attributes:
        payload: Raw webhook body (mapping, JSON text or bytes, possibly
            JSON-encoded more than once).
        trace_id: Request trace id, bound to every log line of the invocation.
    """

    payload: Any
    trace_id: str | None = None
