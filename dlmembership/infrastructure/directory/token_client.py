"""App-only token acquisition through msal.

msal's ConfidentialClientApplication discovers the tenant's token endpoint,
signs the certificate client assertion and runs the client-credentials
exchange. Its HTTP traffic goes through MsalHttpClient, an httpx transport
that raises throttled and failing responses instead of handing them to msal,
so their status and Retry-After survive. msal is synchronous and runs in the
default executor.

Classification:
    access_token in result              -> Success(AccessToken)
    429 / 5xx / timeout / network       -> DirectoryTransientError (retryable)
    403, unauthorized_client,
    invalid_scope, access_denied,
    AADSTS7000229                       -> DirectoryPermissionError
    unknown authority, other errors     -> DirectoryAuthenticationError
                                           (is_credential_expired for expiry codes)
    anything else                       -> DirectoryInvalidResponseError
"""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from functools import partial
from typing import Any

import httpx
import msal

from dlmembership.core.constants import RESPONSE_BODY_MAX_LENGTH
from dlmembership.core.enums import ErrorCode
from dlmembership.core.result import Failure, Result, Success
from dlmembership.domain.errors import (
    DirectoryAuthenticationError,
    DirectoryError,
    DirectoryInvalidResponseError,
    DirectoryPermissionError,
    DirectoryTransientError,
)
from dlmembership.domain.protocols import LoggerProtocol
from dlmembership.infrastructure.directory.certificate_credential import (
    CertificateCredential,
)
from dlmembership.infrastructure.directory.directory_config import DirectoryConfig

_PERMISSION_ERRORS = {"unauthorized_client", "invalid_scope", "access_denied"}

# AADSTS7000229: no service principal for the application in the tenant
_PERMISSION_CODES = {7000229}

# AADSTS codes meaning the credential was recognised but is out of date
_EXPIRED_CREDENTIAL_CODES = {700024, 7000222, 7000215}

_DEFAULT_EXPIRES_IN = 3599


@dataclass(frozen=True, slots=True, kw_only=True)
class AccessToken:
    """App-only bearer token.

    Attributes:
        value: Raw bearer token (never logged).
        expires_at: Expiry (UTC).
        token_type: Token type reported by the endpoint.
    """

    value: str = field(repr=False)
    expires_at: datetime
    token_type: str = "Bearer"


def parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header given in seconds."""
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


class IdentityEndpointUnavailableError(Exception):
    """Throttled (429) or failing (5xx) identity endpoint response."""

    def __init__(self, response: httpx.Response) -> None:
        super().__init__(f"Identity endpoint returned HTTP {response.status_code}")
        self.response = response


class MsalHttpClient:
    """httpx transport handed to msal as its http_client.

    msal only calls post/get and reads status_code, text and headers from
    the response. 429 and 5xx responses are raised as
    IdentityEndpointUnavailableError.

    Attributes:
        last_response: Most recent response, used to classify msal's result.
    """

    def __init__(self, *, timeout: float) -> None:
        self._client = httpx.Client(timeout=timeout)
        self.last_response: httpx.Response | None = None

    def post(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        data: Any = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        return self._checked(
            self._client.post(url, params=params, data=data, headers=headers)
        )

    def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        return self._checked(self._client.get(url, params=params, headers=headers))

    def close(self) -> None:
        self._client.close()

    def _checked(self, response: httpx.Response) -> httpx.Response:
        self.last_response = response
        if response.status_code == 429 or response.status_code >= 500:
            raise IdentityEndpointUnavailableError(response)
        return response


class DirectoryTokenClient:
    """Acquire access tokens with a certificate credential.

    A new msal application is built per call, so neither msal's token cache
    nor its throttle cache outlives one acquisition; the session manager
    owns retries.

    Example:
        >>> client = DirectoryTokenClient(config=config, logger=logger)
        >>> result = await client.acquire_token(credential)
        >>> match result:
        ...     case Success(value=token):
        ...         headers = {"Authorization": f"Bearer {token.value}"}
    """

    def __init__(self, *, config: DirectoryConfig, logger: LoggerProtocol) -> None:
        self._config = config
        self._logger = logger

    async def acquire_token(
        self, credential: CertificateCredential
    ) -> Result[AccessToken, DirectoryError]:
        """Request an app-only token.

        Args:
            credential: Loaded certificate credential.

        Returns:
            Success(AccessToken): Token issued.
            Failure(DirectoryError): See module docstring for classification.
        """
        self._logger.debug(
            "directory_token_request_started",
            tenant_id=self._config.tenant_id,
            client_id=credential.client_id,
        )
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, partial(self._acquire_token_sync, credential)
        )

    def _acquire_token_sync(
        self, credential: CertificateCredential
    ) -> Result[AccessToken, DirectoryError]:
        http_client = MsalHttpClient(timeout=self._config.timeout)
        try:
            app = msal.ConfidentialClientApplication(
                client_id=credential.client_id,
                client_credential=credential.msal_client_credential(),
                authority=self._config.authority,
                http_client=http_client,
            )
            result = app.acquire_token_for_client(scopes=[self._config.scope])
        except IdentityEndpointUnavailableError as e:
            return self._unavailable(e.response)
        except httpx.TimeoutException as e:
            self._logger.warning("directory_token_request_timeout", error=str(e))
            return Failure(
                error=DirectoryTransientError(
                    code=ErrorCode.DIRECTORY_UNAVAILABLE,
                    message="Token endpoint request timed out",
                    operation="acquire_token",
                )
            )
        except httpx.RequestError as e:
            self._logger.warning(
                "directory_token_request_connection_error", error=str(e)
            )
            return Failure(
                error=DirectoryTransientError(
                    code=ErrorCode.DIRECTORY_UNAVAILABLE,
                    message=f"Failed to connect to token endpoint: {e}",
                    operation="acquire_token",
                )
            )
        except ValueError as e:
            # msal: authority discovery rejected, or a non-JSON token response
            return self._unreadable(e, http_client.last_response)
        finally:
            http_client.close()

        return self._handle_token_result(result, http_client.last_response)

    def _unavailable(
        self, response: httpx.Response
    ) -> Failure[DirectoryTransientError]:
        status = response.status_code
        retry_after = parse_retry_after(response.headers.get("Retry-After"))
        self._logger.warning(
            "directory_token_request_unavailable",
            status_code=status,
            retry_after=retry_after,
        )
        return Failure(
            error=DirectoryTransientError(
                code=(
                    ErrorCode.DIRECTORY_RATE_LIMITED
                    if status == 429
                    else ErrorCode.DIRECTORY_UNAVAILABLE
                ),
                message=f"Token endpoint unavailable: HTTP {status}",
                operation="acquire_token",
                retry_after=retry_after,
                is_throttled=status == 429,
            )
        )

    def _unreadable(
        self, error: ValueError, response: httpx.Response | None
    ) -> Failure[DirectoryError]:
        if response is not None and response.request.method == "GET":
            self._logger.warning(
                "directory_authority_discovery_failed",
                status_code=response.status_code,
                authority=self._config.authority,
            )
            return Failure(
                error=DirectoryAuthenticationError(
                    code=ErrorCode.AUTHENTICATION_FAILED,
                    message=(
                        f"Authority '{self._config.authority}' was not recognised "
                        f"(HTTP {response.status_code})"
                    ),
                    operation="acquire_token",
                    details={"status_code": response.status_code},
                )
            )

        status = response.status_code if response is not None else None
        self._logger.warning(
            "directory_token_request_unexpected_response",
            status_code=status,
            error=str(error),
        )
        return Failure(
            error=DirectoryInvalidResponseError(
                code=ErrorCode.DIRECTORY_INVALID_RESPONSE,
                message=f"Unreadable token endpoint response: HTTP {status}",
                operation="acquire_token",
                status_code=status,
                response_body=(
                    response.text[:RESPONSE_BODY_MAX_LENGTH] if response else None
                ),
            )
        )

    def _handle_token_result(
        self, result: dict[str, Any] | None, response: httpx.Response | None
    ) -> Result[AccessToken, DirectoryError]:
        result = result or {}
        status = response.status_code if response is not None else None

        if result.get("access_token"):
            try:
                expires_in = int(result.get("expires_in", _DEFAULT_EXPIRES_IN))
            except (TypeError, ValueError):
                expires_in = _DEFAULT_EXPIRES_IN

            self._logger.debug("directory_token_acquired", expires_in=expires_in)
            return Success(
                value=AccessToken(
                    value=str(result["access_token"]),
                    expires_at=datetime.now(UTC) + timedelta(seconds=expires_in),
                    token_type=str(result.get("token_type", "Bearer")),
                )
            )

        error = str(result.get("error") or "")
        description = str(result.get("error_description") or "")
        codes = {c for c in result.get("error_codes") or [] if isinstance(c, int)}
        details = {"error": error, "error_codes": sorted(codes)}
        summary = (description.splitlines() or [error or f"HTTP {status}"])[0]

        if status == 403 or error in _PERMISSION_ERRORS or codes & _PERMISSION_CODES:
            self._logger.warning(
                "directory_token_request_forbidden",
                status_code=status,
                error=error,
            )
            return Failure(
                error=DirectoryPermissionError(
                    code=ErrorCode.PERMISSION_DENIED,
                    message=(
                        "Application is not permitted to obtain a token: "
                        f"{summary}"
                    ),
                    operation="acquire_token",
                    required_permission=self._config.scope,
                    details=details,
                )
            )

        if not error:
            self._logger.warning(
                "directory_token_request_unexpected_response",
                status_code=status,
            )
            return Failure(
                error=DirectoryInvalidResponseError(
                    code=ErrorCode.DIRECTORY_INVALID_RESPONSE,
                    message=f"Unexpected token endpoint response: HTTP {status}",
                    operation="acquire_token",
                    status_code=status,
                    response_body=(
                        response.text[:RESPONSE_BODY_MAX_LENGTH]
                        if response is not None
                        else None
                    ),
                )
            )

        is_expired = bool(codes & _EXPIRED_CREDENTIAL_CODES) or (
            "expired" in description.lower()
        )
        self._logger.warning(
            "directory_token_request_auth_failed",
            status_code=status,
            error=error,
            is_credential_expired=is_expired,
        )
        return Failure(
            error=DirectoryAuthenticationError(
                code=(
                    ErrorCode.CREDENTIAL_EXPIRED
                    if is_expired
                    else ErrorCode.AUTHENTICATION_FAILED
                ),
                message=f"Token endpoint rejected the credential: {summary}",
                operation="acquire_token",
                is_credential_expired=is_expired,
                details=details,
            )
        )
