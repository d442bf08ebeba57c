"""ApplyMembershipChange command handler.

Runs one webhook invocation end to end: normalize the payload, open a
directory session, execute the batch, aggregate, close the session.

Architecture:
    - Application layer handler (orchestrates services)
    - Blocking operation (the caller waits for the BatchResult)
    - Session lifetime scoped to one invocation via with_session

Flow:
    1. RECEIVED: start the invocation deadline
    2. VALIDATING: normalize payload; any violation -> REJECTED
    3. AUTHENTICATING: establish session; fatal error -> AUTH_FAILED
    4. EXECUTING: apply the action member by member
    5. AGGREGATING -> COMPLETED: build the BatchResult
"""

import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from dlmembership.application.commands.membership_commands import ApplyMembershipChange
from dlmembership.application.errors import ApplicationError, ApplicationErrorCode
from dlmembership.application.services import (
    BatchExecutor,
    PayloadNormalizer,
    aggregate,
    aggregate_failure,
)
from dlmembership.core.enums import ErrorCode
from dlmembership.core.errors import DeadlineExceededError
from dlmembership.core.result import Failure, Result, Success
from dlmembership.domain.enums import InvocationState, MemberErrorKind
from dlmembership.domain.protocols import (
    DirectorySessionManagerProtocol,
    LoggerProtocol,
)
from dlmembership.domain.value_objects import (
    BatchResult,
    Deadline,
    MemberOperationResult,
)

if TYPE_CHECKING:
    from dlmembership.infrastructure.directory.session import DirectorySession


class InvocationTrace:
    """Current state of one invocation.

    Every transition is checked against the state machine and logged.
    An illegal transition is a programming error and raises ValueError.
    """

    def __init__(self, logger: LoggerProtocol) -> None:
        self._logger = logger
        self.state = InvocationState.RECEIVED
        self.history: list[InvocationState] = [InvocationState.RECEIVED]

    def advance(self, target: InvocationState) -> None:
        """Move to target state.

        Raises:
            ValueError: If the transition is not allowed.
        """
        if not self.state.can_transition_to(target):
            raise ValueError(
                f"Illegal invocation transition: {self.state.value} -> {target.value}"
            )
        self._logger.debug(
            "invocation_state_changed",
            from_state=self.state.value,
            to_state=target.value,
        )
        self.state = target
        self.history.append(target)


class ApplyMembershipChangeHandler:
    """Handler for ApplyMembershipChange command.

    Dependencies (injected via constructor):
        - PayloadNormalizer: Raw payload -> MembershipRequest
        - DirectorySessionManagerProtocol: Scoped directory session
        - BatchExecutor: Per-member execution
        - LoggerProtocol: Structured logging
        - deadline_seconds: Overall invocation budget
        - clock: Monotonic clock (injectable for tests)

    Returns:
        Success(BatchResult) whenever the payload was valid, including
        batches that never started (diagnostic set, results empty).
        Failure(ApplicationError) only for rejected payloads.
    """

    def __init__(
        self,
        *,
        normalizer: PayloadNormalizer,
        session_manager: DirectorySessionManagerProtocol,
        executor: BatchExecutor,
        logger: LoggerProtocol,
        deadline_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize handler with dependencies.

        Args:
            normalizer: Payload normalizer.
            session_manager: Directory session manager.
            executor: Batch executor.
            logger: Structured logger.
            deadline_seconds: Overall deadline for one invocation.
            clock: Monotonic clock.
        """
        self._normalizer = normalizer
        self._session_manager = session_manager
        self._executor = executor
        self._logger = logger
        self._deadline_seconds = deadline_seconds
        self._clock = clock

    async def handle(
        self, command: ApplyMembershipChange
    ) -> Result[BatchResult, ApplicationError]:
        """Handle ApplyMembershipChange command.

        Args:
            command: Raw payload and trace id.

        Returns:
            Success(BatchResult): Payload valid; batch executed or diagnosed.
            Failure(ApplicationError): Payload rejected, with every violation.
        """
        deadline = Deadline.after(self._deadline_seconds, clock=self._clock)
        log = self._logger
        if command.trace_id:
            log = log.bind(trace_id=command.trace_id)
        trace = InvocationTrace(log)

        # 1. Validate
        trace.advance(InvocationState.VALIDATING)
        normalized = self._normalizer.normalize(command.payload)
        if isinstance(normalized, Failure):
            trace.advance(InvocationState.REJECTED)
            violations = tuple(normalized.error)
            log.warning(
                "membership_request_rejected",
                error_count=len(violations),
                fields=[v.field for v in violations],
                codes=[v.code.value for v in violations],
            )
            return Failure(
                error=ApplicationError(
                    code=ApplicationErrorCode.COMMAND_VALIDATION_FAILED,
                    message=(
                        f"Membership request has {len(violations)} validation error(s)"
                    ),
                    validation_errors=violations,
                )
            )
        request = normalized.value

        log = log.bind(
            group_identity=request.group_identity,
            action=request.action.value,
        )
        log.info("membership_batch_started", member_count=len(request.members))

        # 2. Authenticate, execute
        trace.advance(InvocationState.AUTHENTICATING)

        async def run(session: "DirectorySession") -> list[MemberOperationResult]:
            trace.advance(InvocationState.EXECUTING)
            return await self._executor.execute(session, request, deadline=deadline)

        executed = await self._session_manager.with_session(run, deadline=deadline)

        if isinstance(executed, Failure):
            trace.advance(InvocationState.AUTH_FAILED)
            log.error(
                "membership_batch_auth_failed",
                error_code=executed.error.code.value,
                error_message=executed.error.message,
            )
            return Success(value=aggregate_failure(request, executed.error))

        # 3. Aggregate
        trace.advance(InvocationState.AGGREGATING)
        results = executed.value
        diagnostic = None
        if any(
            r.error_detail is not None
            and r.error_detail.kind is MemberErrorKind.DEADLINE_EXCEEDED
            for r in results
        ):
            diagnostic = DeadlineExceededError(
                code=ErrorCode.DEADLINE_EXCEEDED,
                message=(
                    f"Invocation deadline of {self._deadline_seconds:g}s exceeded; "
                    "remaining members were not attempted"
                ),
                deadline_seconds=self._deadline_seconds,
            )
        batch = aggregate(request, results, diagnostic)
        trace.advance(InvocationState.COMPLETED)

        log.info(
            "membership_batch_completed",
            overall_status=batch.overall_status.value,
            succeeded=batch.succeeded_count,
            already_in_desired_state=batch.already_in_desired_state_count,
            failed=batch.failed_count,
            elapsed_seconds=round(deadline.total_seconds - deadline.remaining(), 3),
        )
        return Success(value=batch)
