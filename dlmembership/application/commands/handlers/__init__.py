"""Command handlers."""

from dlmembership.application.commands.handlers.apply_membership_change_handler import (
    ApplyMembershipChangeHandler,
)

__all__ = ["ApplyMembershipChangeHandler"]
