"""Membership mutation requested by a webhook caller."""

from enum import Enum


class MembershipAction(str, Enum):
    """Bulk membership action.

    Values are lowercase; the inbound payload is matched case-insensitively
    and stored in this canonical form.
    """

    ADD = "add"
    REMOVE = "remove"

    @classmethod
    def parse(cls, value: str) -> "MembershipAction | None":
        """Return the action for a caller-supplied string, or None.

        Args:
            value: Raw action text (e.g. "Add", " REMOVE ").

        Returns:
            Matching action, or None when the text names no action.
        """
        normalized = value.strip().lower()
        for action in cls:
            if action.value == normalized:
                return action
        return None

    @property
    def display_name(self) -> str:
        """Caller-facing spelling ("Add" / "Remove")."""
        return self.value.capitalize()
