"""Commands - Write operations that change state.

Commands represent caller intent. They are immutable dataclasses with
imperative names; each has a handler in `handlers/` that orchestrates the
domain services.
"""

from dlmembership.application.commands.membership_commands import ApplyMembershipChange

__all__ = ["ApplyMembershipChange"]
