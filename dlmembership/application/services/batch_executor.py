"""Batch execution engine.

Applies a validated MembershipRequest member by member through an active
directory session and returns exactly one MemberOperationResult per member,
in request order. Member-level failures are captured as data; this service
never raises past its own boundary.

Flow:
    1. Resolve the target group once (with transient retry)
    2. For each member (sequentially, or through a small bounded pool):
       a. Stop issuing work once the invocation deadline has passed
       b. Call add_member / remove_member
       c. Retry only transient failures, with per-member backoff state
       d. Classify the outcome

Retry safety:
    Only the failed call is retried. A call that returned Success is never
    re-issued, and a mutation that landed despite a transient error is
    reported by the directory as "already in desired state" on retry.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from dlmembership.core.result import Failure, Result, Success
from dlmembership.domain.enums import MemberErrorKind, MembershipAction
from dlmembership.domain.errors import (
    DirectoryAuthenticationError,
    DirectoryError,
    DirectoryInvalidResponseError,
    DirectoryMemberError,
    DirectoryPermissionError,
    DirectoryTransientError,
)
from dlmembership.domain.protocols import DirectoryClientProtocol, LoggerProtocol
from dlmembership.domain.value_objects import (
    Deadline,
    MemberOperationResult,
    MembershipRequest,
    RetryPolicy,
)

if TYPE_CHECKING:
    from dlmembership.infrastructure.directory.session import DirectorySession

T = TypeVar("T")

DirectoryClientFactory = Callable[["DirectorySession"], DirectoryClientProtocol]


@dataclass(frozen=True, slots=True)
class _RetryOutcome(Generic[T]):
    """Last result of a retried call.

    Attributes:
        result: Last result received (None if no call was issued).
        attempts: Calls issued.
        deadline_exceeded: Retrying stopped because of the deadline.
    """

    result: Result[T, DirectoryError] | None
    attempts: int
    deadline_exceeded: bool = False


class BatchExecutor:
    """Execute one membership batch against the directory.

    Dependencies (injected via constructor):
        - client_factory: Builds a DirectoryClientProtocol bound to a session
        - retry_policy: Per-member transient retry budget
        - logger: Structured logger
        - concurrency: Members in flight at once (1 = sequential)
        - sleep: Awaitable sleep (injectable for tests)

    Example:
        >>> executor = BatchExecutor(
        ...     client_factory=lambda s: GraphDirectoryClient(s, logger=logger),
        ...     retry_policy=RetryPolicy(max_attempts=3),
        ...     logger=logger,
        ... )
        >>> results = await executor.execute(session, request, deadline=deadline)
    """

    def __init__(
        self,
        *,
        client_factory: DirectoryClientFactory,
        retry_policy: RetryPolicy,
        logger: LoggerProtocol,
        concurrency: int = 1,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._client_factory = client_factory
        self._retry_policy = retry_policy
        self._logger = logger
        self._concurrency = concurrency
        self._sleep = sleep

    async def execute(
        self,
        session: "DirectorySession",
        request: MembershipRequest,
        *,
        deadline: Deadline | None = None,
    ) -> list[MemberOperationResult]:
        """Apply the request's action to every member.

        Args:
            session: Active directory session.
            request: Validated membership request.
            deadline: Invocation deadline; members not started before it
                expires are reported as DEADLINE_EXCEEDED.

        Returns:
            One result per member, same order as request.members.
        """
        log = self._logger.bind(
            group_identity=request.group_identity,
            action=request.action.value,
        )
        log.info("membership_batch_executing", member_count=len(request.members))

        client = self._client_factory(session)

        group = await self._resolve_group(client, request.group_identity, deadline, log)
        if isinstance(group, Failure):
            kind, message = group.error
            return [
                MemberOperationResult.failed(member, kind, message, attempts=0)
                for member in request.members
            ]
        group_id = group.value

        if self._concurrency == 1:
            results = []
            for member in request.members:
                results.append(
                    await self._process_member(
                        client, request.action, group_id, member, deadline, log
                    )
                )
            return results

        semaphore = asyncio.Semaphore(self._concurrency)

        async def bounded(member: str) -> MemberOperationResult:
            async with semaphore:
                return await self._process_member(
                    client, request.action, group_id, member, deadline, log
                )

        # gather preserves argument order, so results line up with members
        return list(await asyncio.gather(*(bounded(m) for m in request.members)))

    async def _resolve_group(
        self,
        client: DirectoryClientProtocol,
        group_identity: str,
        deadline: Deadline | None,
        log: LoggerProtocol,
    ) -> Result[str, tuple[MemberErrorKind, str]]:
        """Resolve the group; on failure return the kind/message for every member."""
        try:
            outcome = await self._call_with_retry(
                lambda: client.resolve_group(group_identity),
                deadline=deadline,
                log=log,
                operation="resolve_group",
            )
        except Exception as e:
            log.error("group_resolution_crashed", error=e)
            return Failure(
                error=(
                    MemberErrorKind.UNEXPECTED,
                    f"Unexpected error resolving group: {e}",
                )
            )

        if outcome.deadline_exceeded or outcome.result is None:
            return Failure(
                error=(
                    MemberErrorKind.DEADLINE_EXCEEDED,
                    "Invocation deadline exceeded while resolving the group",
                )
            )

        match outcome.result:
            case Success(value=group_id):
                log.debug(
                    "group_resolved", group_id=group_id, attempts=outcome.attempts
                )
                return Success(value=group_id)
            case Failure(error=error):
                kind = _classify(error)
                log.warning(
                    "group_resolution_failed",
                    error_kind=kind.value,
                    error_code=error.code.value,
                    attempts=outcome.attempts,
                )
                return Failure(error=(kind, error.message))

    async def _process_member(
        self,
        client: DirectoryClientProtocol,
        action: MembershipAction,
        group_id: str,
        member: str,
        deadline: Deadline | None,
        log: LoggerProtocol,
    ) -> MemberOperationResult:
        """Run one member operation and classify it. Never raises."""
        member_log = log.bind(member=member)
        mutate = (
            client.add_member
            if action is MembershipAction.ADD
            else client.remove_member
        )

        try:
            outcome = await self._call_with_retry(
                lambda: mutate(group_id, member),
                deadline=deadline,
                log=member_log,
                operation=f"{action.value}_member",
            )
        except Exception as e:
            member_log.error("member_operation_crashed", error=e)
            return MemberOperationResult.failed(
                member, MemberErrorKind.UNEXPECTED, f"Unexpected error: {e}"
            )

        if outcome.deadline_exceeded or outcome.result is None:
            if isinstance(outcome.result, Failure):
                message = (
                    "Invocation deadline exceeded while retrying: "
                    f"{outcome.result.error.message}"
                )
            else:
                message = "Invocation deadline exceeded before the member was attempted"
            member_log.warning(
                "member_operation_deadline_exceeded", attempts=outcome.attempts
            )
            return MemberOperationResult.failed(
                member,
                MemberErrorKind.DEADLINE_EXCEEDED,
                message,
                attempts=outcome.attempts,
            )

        match outcome.result:
            case Success(value=status):
                member_log.info(
                    "member_operation_completed",
                    status=status.value,
                    attempts=outcome.attempts,
                )
                return MemberOperationResult(
                    member=member, status=status, attempts=outcome.attempts
                )
            case Failure(error=error):
                kind = _classify(error)
                member_log.warning(
                    "member_operation_failed",
                    error_kind=kind.value,
                    error_code=error.code.value,
                    attempts=outcome.attempts,
                )
                return MemberOperationResult.failed(
                    member, kind, error.message, attempts=outcome.attempts
                )

    async def _call_with_retry(
        self,
        call: Callable[[], Awaitable[Result[T, DirectoryError]]],
        *,
        deadline: Deadline | None,
        log: LoggerProtocol,
        operation: str,
    ) -> _RetryOutcome[T]:
        """Issue call, retrying transient failures within policy and deadline."""
        attempts = 0
        waited = 0.0
        result: Result[T, DirectoryError] | None = None

        while True:
            if deadline is not None and deadline.expired:
                return _RetryOutcome(result, attempts, deadline_exceeded=True)

            attempts += 1
            result = await call()

            if isinstance(result, Success) or not isinstance(
                result.error, DirectoryTransientError
            ):
                return _RetryOutcome(result, attempts)

            delay = self._retry_policy.next_delay(
                attempt=attempts,
                waited=waited,
                retry_after=result.error.retry_after,
            )
            if delay is None:
                return _RetryOutcome(result, attempts)
            if deadline is not None and not deadline.allows_wait(delay):
                return _RetryOutcome(result, attempts, deadline_exceeded=True)

            log.warning(
                "directory_call_retrying",
                operation=operation,
                attempt=attempts,
                delay_seconds=delay,
                error_code=result.error.code.value,
            )
            await self._sleep(delay)
            waited += delay


def _classify(error: DirectoryError) -> MemberErrorKind:
    """Map a directory error to the member error kind reported to callers."""
    match error:
        case DirectoryMemberError(kind=kind):
            return kind
        case DirectoryTransientError(is_throttled=True):
            return MemberErrorKind.THROTTLED
        case DirectoryTransientError():
            return MemberErrorKind.SERVICE_UNAVAILABLE
        case DirectoryPermissionError():
            return MemberErrorKind.PERMISSION_DENIED
        case DirectoryAuthenticationError():
            return MemberErrorKind.AUTHENTICATION_FAILED
        case DirectoryInvalidResponseError():
            return MemberErrorKind.INVALID_RESPONSE
        case _:
            return MemberErrorKind.UNEXPECTED
