"""Directory session manager.

Owns the credential lifecycle for one invocation:

    load credential -> acquire token (retry transient) -> open client
        -> run step -> close client (always)

Credential problems (missing file, wrong password, expired or not yet
valid certificate) are fatal and never retried. Token endpoint throttling
and unavailability are retried with bounded exponential backoff, within
both the retry policy and the invocation deadline.

Usage:
    manager = get_session_manager()
    result = await manager.with_session(
        lambda session: executor.execute(session, request),
        deadline=deadline,
    )
"""

import asyncio
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import TypeVar

import httpx

from dlmembership.core.constants import BEARER_PREFIX
from dlmembership.core.enums import ErrorCode
from dlmembership.core.errors import DeadlineExceededError, DomainError
from dlmembership.core.result import Failure, Result, Success
from dlmembership.domain.errors import (
    DirectoryAuthenticationError,
    DirectoryTransientError,
)
from dlmembership.domain.protocols import LoggerProtocol
from dlmembership.domain.value_objects import Deadline, RetryPolicy
from dlmembership.infrastructure.directory.certificate_credential import (
    CertificateCredential,
)
from dlmembership.infrastructure.directory.directory_config import DirectoryConfig
from dlmembership.infrastructure.directory.session import DirectorySession
from dlmembership.infrastructure.directory.token_client import DirectoryTokenClient

T = TypeVar("T")

CredentialLoader = Callable[
    [DirectoryConfig], Result[CertificateCredential, DirectoryAuthenticationError]
]


def load_configured_credential(
    config: DirectoryConfig,
) -> Result[CertificateCredential, DirectoryAuthenticationError]:
    """Load the credential file named by the configuration."""
    return CertificateCredential.load(
        config.certificate_path,
        client_id=config.client_id,
        password=config.certificate_password,
    )


class DirectorySessionManager:
    """Establish, hand out and tear down directory sessions.

    Dependencies (injected via constructor):
        - config: Tenant, identity and endpoints
        - token_client: Token endpoint adapter
        - logger: Structured logger
        - retry_policy: Establishment retry budget
        - credential_loader: Config -> credential (injectable for tests)
        - sleep: Awaitable sleep (injectable for tests)
    """

    def __init__(
        self,
        *,
        config: DirectoryConfig,
        token_client: DirectoryTokenClient,
        logger: LoggerProtocol,
        retry_policy: RetryPolicy,
        credential_loader: CredentialLoader = load_configured_credential,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._token_client = token_client
        self._logger = logger
        self._retry_policy = retry_policy
        self._credential_loader = credential_loader
        self._sleep = sleep

    async def establish(
        self, *, deadline: Deadline | None = None
    ) -> Result[DirectorySession, DomainError]:
        """Authenticate and open a session.

        Args:
            deadline: Invocation deadline.

        Returns:
            Success(DirectorySession): Open session; caller must close it.
            Failure(DirectoryAuthenticationError): Credential unusable.
            Failure(DirectoryPermissionError): Application not permitted.
            Failure(DirectoryTransientError): Retries exhausted.
            Failure(DeadlineExceededError): Deadline hit while retrying.
        """
        credential_result = self._credential_loader(self._config)
        if isinstance(credential_result, Failure):
            error = credential_result.error
            self._logger.error(
                "directory_credential_invalid",
                error_code=error.code.value,
                error_message=error.message,
                is_credential_expired=error.is_credential_expired,
            )
            return credential_result
        credential = credential_result.value

        attempts = 0
        waited = 0.0
        while True:
            if deadline is not None and deadline.expired:
                return self._deadline_failure(deadline, attempts)

            attempts += 1
            token_result = await self._token_client.acquire_token(credential)

            if isinstance(token_result, Success):
                break

            error = token_result.error
            if not isinstance(error, DirectoryTransientError):
                self._logger.error(
                    "directory_session_failed",
                    error_code=error.code.value,
                    error_message=error.message,
                    attempts=attempts,
                )
                return Failure(error=error)

            delay = self._retry_policy.next_delay(
                attempt=attempts, waited=waited, retry_after=error.retry_after
            )
            if delay is None:
                self._logger.error(
                    "directory_session_retries_exhausted",
                    error_code=error.code.value,
                    attempts=attempts,
                    waited_seconds=waited,
                )
                return Failure(error=error)
            if deadline is not None and not deadline.allows_wait(delay):
                return self._deadline_failure(deadline, attempts)

            self._logger.warning(
                "directory_session_retrying",
                attempt=attempts,
                delay_seconds=delay,
                error_code=error.code.value,
            )
            await self._sleep(delay)
            waited += delay

        token = token_result.value
        session = DirectorySession(
            session_id=str(uuid.uuid4()),
            credential=credential,
            http_client=httpx.AsyncClient(
                base_url=self._config.api_base_url,
                timeout=self._config.timeout,
                headers={
                    "Authorization": f"{BEARER_PREFIX}{token.value}",
                    "ConsistencyLevel": "eventual",
                },
            ),
            api_base_url=self._config.api_base_url,
            established_at=datetime.now(UTC),
            expires_at=token.expires_at,
        )
        self._logger.info(
            "directory_session_established",
            session_id=session.session_id,
            attempts=attempts,
            certificate_thumbprint=credential.thumbprint,
            token_expires_at=token.expires_at.isoformat(),
        )
        return Success(value=session)

    async def close(self, session: DirectorySession) -> None:
        """Tear down a session. Never raises.

        Safe to call more than once.
        """
        if session.closed:
            return
        try:
            await session.http_client.aclose()
        except Exception as e:
            self._logger.error(
                "directory_session_close_failed",
                error=e,
                session_id=session.session_id,
            )
        finally:
            session.closed = True

        lifetime = (datetime.now(UTC) - session.established_at).total_seconds()
        self._logger.info(
            "directory_session_closed",
            session_id=session.session_id,
            lifetime_seconds=round(lifetime, 3),
        )

    @asynccontextmanager
    async def session(
        self, *, deadline: Deadline | None = None
    ) -> AsyncIterator[Result[DirectorySession, DomainError]]:
        """Scoped session acquisition.

        Yields the establishment Result; an established session is closed on
        exit, including when the body raises.

        Example:
            async with manager.session(deadline=deadline) as established:
                match established:
                    case Success(value=session):
                        ...
        """
        established = await self.establish(deadline=deadline)
        try:
            yield established
        finally:
            if isinstance(established, Success):
                await self.close(established.value)

    async def with_session(
        self,
        fn: Callable[[DirectorySession], Awaitable[T]],
        *,
        deadline: Deadline | None = None,
    ) -> Result[T, DomainError]:
        """Run fn inside an authenticated session.

        Returns:
            Success(fn result), or the establishment Failure (fn not called).

        Raises:
            Exception: Whatever fn raised, after the session is closed.
        """
        async with self.session(deadline=deadline) as established:
            if isinstance(established, Failure):
                return established
            return Success(value=await fn(established.value))

    def _deadline_failure(
        self, deadline: Deadline, attempts: int
    ) -> Failure[DeadlineExceededError]:
        self._logger.error(
            "directory_session_deadline_exceeded",
            attempts=attempts,
            deadline_seconds=deadline.total_seconds,
        )
        return Failure(
            error=DeadlineExceededError(
                code=ErrorCode.DEADLINE_EXCEEDED,
                message=(
                    "Invocation deadline exceeded while establishing the "
                    "directory session"
                ),
                deadline_seconds=deadline.total_seconds,
            )
        )
