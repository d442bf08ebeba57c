"""DirectorySessionManagerProtocol: scoped acquisition of a session.

The session manager owns the credential and the authenticated connection.
`with_session` guarantees teardown on every exit path, including an
exception raised by the supplied step.
"""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol, TypeVar

from dlmembership.core.errors import DomainError
from dlmembership.core.result import Result
from dlmembership.domain.value_objects import Deadline

if TYPE_CHECKING:
    from dlmembership.infrastructure.directory.session import DirectorySession

T = TypeVar("T")


class DirectorySessionManagerProtocol(Protocol):
    """Acquire, use and release one directory session."""

    async def with_session(
        self,
        fn: Callable[["DirectorySession"], Awaitable[T]],
        *,
        deadline: Deadline | None = None,
    ) -> Result[T, DomainError]:
        """Run fn inside an authenticated session.

        Args:
            fn: Step to run with the live session.
            deadline: Invocation deadline; establishment stops retrying once
                it would be exceeded.

        Returns:
            Success(fn result): Session established and fn completed.
            Failure(DirectoryAuthenticationError | DirectoryPermissionError |
                DirectoryTransientError | DeadlineExceededError): Session
                could not be established; fn was never called.

        Raises:
            Exception: Whatever fn raised, after the session is closed.
        """
        ...
