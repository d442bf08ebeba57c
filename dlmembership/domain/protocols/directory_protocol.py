"""DirectoryClientProtocol for directory service adapters.

Port (interface) for hexagonal architecture. The batch executor talks to the
directory only through this protocol; infrastructure provides the Graph
implementation and tests provide in-memory fakes.

Contract:
    - Never raise for service-reported errors; return Failure(DirectoryError)
    - Report "already a member" (add) and "not a member" (remove) as
      Success(ALREADY_IN_DESIRED_STATE), not as errors
    - Return DirectoryTransientError only for conditions worth retrying
"""

from typing import Protocol

from dlmembership.core.result import Result
from dlmembership.domain.enums import MemberOperationStatus
from dlmembership.domain.errors import DirectoryError


class DirectoryClientProtocol(Protocol):
    """Group membership operations bound to one authenticated session."""

    async def resolve_group(self, group_identity: str) -> Result[str, DirectoryError]:
        """Resolve a group address or name to the directory's group id.

        Returns:
            Success(str): Directory object id of the group.
            Failure(DirectoryMemberError): Group not found or ambiguous.
            Failure(DirectoryTransientError): Throttled / unavailable.
        """
        ...

    async def add_member(
        self, group_id: str, member: str
    ) -> Result[MemberOperationStatus, DirectoryError]:
        """Add member to group.

        Returns:
            Success(SUCCEEDED): Member added.
            Success(ALREADY_IN_DESIRED_STATE): Member was already present.
            Failure(DirectoryError): Anything else.
        """
        ...

    async def remove_member(
        self, group_id: str, member: str
    ) -> Result[MemberOperationStatus, DirectoryError]:
        """Remove member from group.

        Returns:
            Success(SUCCEEDED): Member removed.
            Success(ALREADY_IN_DESIRED_STATE): Member was not present.
            Failure(DirectoryError): Anything else.
        """
        ...
