"""Per-member outcome produced by the batch executor."""

from dataclasses import dataclass

from dlmembership.domain.enums import MemberErrorKind, MemberOperationStatus


@dataclass(frozen=True, slots=True, kw_only=True)
class MemberErrorDetail:
    """Why a member operation failed.

    Attributes:
        kind: Error classification.
        message: Human-readable explanation.
    """

    kind: MemberErrorKind
    message: str


@dataclass(frozen=True, slots=True, kw_only=True)
class MemberOperationResult:
    """Outcome for one member of the batch.

    Attributes:
        member: Identifier that was processed.
        status: Succeeded, AlreadyInDesiredState or Failed.
        error_detail: Present only when status is FAILED.
        attempts: Directory calls issued for this member (0 if never attempted).
    """

    member: str
    status: MemberOperationStatus
    error_detail: MemberErrorDetail | None = None
    attempts: int = 1

    def __post_init__(self) -> None:
        """Keep error_detail consistent with status."""
        failed = self.status is MemberOperationStatus.FAILED
        if failed != (self.error_detail is not None):
            raise ValueError("error_detail must be set if and only if status is FAILED")

    @classmethod
    def failed(
        cls,
        member: str,
        kind: MemberErrorKind,
        message: str,
        *,
        attempts: int = 1,
    ) -> "MemberOperationResult":
        """Build a FAILED result."""
        return cls(
            member=member,
            status=MemberOperationStatus.FAILED,
            error_detail=MemberErrorDetail(kind=kind, message=message),
            attempts=attempts,
        )
