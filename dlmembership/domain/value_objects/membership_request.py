"""MembershipRequest value object.

The strict, validated form of a webhook payload. Only the payload
normalizer builds one; every downstream component works on this type and
never on the raw input.
"""

from dataclasses import dataclass

from dlmembership.domain.enums import MembershipAction


@dataclass(frozen=True, slots=True, kw_only=True)
class MembershipRequest:
    """Validated bulk membership change.

    Attributes:
        action: Add or Remove.
        group_identity: Trimmed, non-empty group address or name.
        members: Trimmed, de-duplicated member identifiers in first-seen
            order (at least one).

    Raises:
        ValueError: If constructed with values that bypassed normalization.
    """

    action: MembershipAction
    group_identity: str
    members: tuple[str, ...]

    def __post_init__(self) -> None:
        """Guard the invariants the normalizer guarantees."""
        if not self.group_identity or self.group_identity != self.group_identity.strip():
            raise ValueError("group_identity must be a trimmed, non-empty string")
        if not self.members:
            raise ValueError("members must contain at least one identifier")
        if any(not m or m != m.strip() for m in self.members):
            raise ValueError("members must be trimmed, non-empty identifiers")
        if len({m.lower() for m in self.members}) != len(self.members):
            raise ValueError("members must not contain duplicates")
