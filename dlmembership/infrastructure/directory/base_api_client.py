"""Base API client for directory HTTP communication.

Handles what every directory call shares:
- Request execution on the session's authenticated client, with
  timeout/connection error handling
- Status code interpretation (401, 403, 429, 5xx)
- Directory error body parsing ({"error": {"code": ..., "message": ...}})
- JSON parsing with type validation
- Structured logging with operation context

Subclasses interpret the operation-specific statuses (400 conflicts,
404 misses) by passing them as `expected` and inspecting the response.

Architecture:
    - Infrastructure layer (adapter for the external directory API)
    - Uses httpx for async HTTP
    - Returns Result types (no exceptions for service errors)
"""

from collections.abc import Collection
from typing import Any

import httpx

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
from dlmembership.infrastructure.directory.session import DirectorySession
from dlmembership.infrastructure.directory.token_client import parse_retry_after


class BaseDirectoryAPIClient:
    """Base class for directory API clients with shared HTTP handling.

    Attributes:
        _session: Active directory session (client, base URL).
        _service_name: Prefix for log event names.
        _logger: Structured logger.
    """

    def __init__(
        self,
        session: DirectorySession,
        *,
        logger: LoggerProtocol,
        service_name: str = "directory",
    ) -> None:
        """Initialize base directory API client.

        Args:
            session: Active directory session.
            logger: Structured logger.
            service_name: Prefix for log event names (e.g. "graph").
        """
        self._session = session
        self._service_name = service_name
        self._logger = logger

    async def _execute_request(
        self,
        *,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        json_data: dict[str, Any] | None = None,
        operation: str,
    ) -> Result[httpx.Response, DirectoryError]:
        """Execute HTTP request on the session client.

        Args:
            method: HTTP method.
            path: URL path relative to the API base URL.
            params: Optional query parameters.
            json_data: Optional JSON body.
            operation: Operation name for logging.

        Returns:
            Success(httpx.Response): Raw response (any status).
            Failure(DirectoryTransientError): Timeout or connection error.
        """
        try:
            response = await self._session.http_client.request(
                method,
                path,
                params=params,
                json=json_data,
            )
            return Success(value=response)

        except httpx.TimeoutException as e:
            self._logger.warning(
                f"{self._service_name}_api_timeout",
                operation=operation,
                error=str(e),
            )
            return Failure(
                error=DirectoryTransientError(
                    code=ErrorCode.DIRECTORY_UNAVAILABLE,
                    message="Directory API request timed out",
                    operation=operation,
                )
            )

        except httpx.RequestError as e:
            self._logger.warning(
                f"{self._service_name}_api_connection_error",
                operation=operation,
                error=str(e),
            )
            return Failure(
                error=DirectoryTransientError(
                    code=ErrorCode.DIRECTORY_UNAVAILABLE,
                    message=f"Failed to connect to directory API: {e}",
                    operation=operation,
                )
            )

    def _check_error_response(
        self,
        response: httpx.Response,
        operation: str,
        *,
        expected: Collection[int] = (),
    ) -> Failure[DirectoryError] | None:
        """Map a non-success response to a DirectoryError.

        Args:
            response: HTTP response to check.
            operation: Operation name for logging.
            expected: Statuses the caller interprets itself.

        Returns:
            Failure(DirectoryError) if the status is an error the caller did
            not claim, None otherwise.
        """
        status = response.status_code

        if response.is_success or status in expected:
            return None

        error_code, error_message = graph_error(response)

        # Throttling (429)
        if status == 429:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            self._logger.warning(
                f"{self._service_name}_api_rate_limited",
                operation=operation,
                retry_after=retry_after,
            )
            return Failure(
                error=DirectoryTransientError(
                    code=ErrorCode.DIRECTORY_RATE_LIMITED,
                    message="Directory API rate limit exceeded",
                    operation=operation,
                    retry_after=retry_after,
                    is_throttled=True,
                )
            )

        # Server errors (5xx)
        if status >= 500:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            self._logger.warning(
                f"{self._service_name}_api_server_error",
                operation=operation,
                status_code=status,
                error_code=error_code,
            )
            return Failure(
                error=DirectoryTransientError(
                    code=ErrorCode.DIRECTORY_UNAVAILABLE,
                    message=f"Directory API server error: {status}",
                    operation=operation,
                    retry_after=retry_after,
                )
            )

        # Token rejected mid-session (401)
        if status == 401:
            self._logger.warning(
                f"{self._service_name}_api_auth_failed",
                operation=operation,
                error_code=error_code,
            )
            return Failure(
                error=DirectoryAuthenticationError(
                    code=ErrorCode.AUTHENTICATION_FAILED,
                    message=f"Directory rejected the access token: {error_message}",
                    operation=operation,
                    details={"service_code": error_code},
                )
            )

        # Forbidden (403)
        if status == 403:
            self._logger.warning(
                f"{self._service_name}_api_forbidden",
                operation=operation,
                error_code=error_code,
            )
            return Failure(
                error=DirectoryPermissionError(
                    code=ErrorCode.PERMISSION_DENIED,
                    message=f"Directory denied the operation: {error_message}",
                    operation=operation,
                    details={"service_code": error_code},
                )
            )

        return self._unexpected_response(response, operation)

    def _unexpected_response(
        self, response: httpx.Response, operation: str
    ) -> Failure[DirectoryError]:
        """Failure for a status the client has no mapping for."""
        self._logger.warning(
            f"{self._service_name}_api_unexpected_status",
            operation=operation,
            status_code=response.status_code,
        )
        return Failure(
            error=DirectoryInvalidResponseError(
                code=ErrorCode.DIRECTORY_INVALID_RESPONSE,
                message=f"Unexpected response from directory: {response.status_code}",
                operation=operation,
                status_code=response.status_code,
                response_body=response.text[:RESPONSE_BODY_MAX_LENGTH],
            )
        )

    def _parse_json_object(
        self,
        response: httpx.Response,
        operation: str,
    ) -> Result[dict[str, Any], DirectoryError]:
        """Parse a success response as a JSON object.

        Args:
            response: HTTP response to parse.
            operation: Operation name for logging.

        Returns:
            Success(dict): Parsed JSON object.
            Failure(DirectoryError): On HTTP error or invalid JSON.
        """
        error_result = self._check_error_response(response, operation)
        if error_result is not None:
            return error_result

        try:
            data = response.json()
        except ValueError as e:
            self._logger.error(
                f"{self._service_name}_api_invalid_json",
                operation=operation,
                error=e,
            )
            return Failure(
                error=DirectoryInvalidResponseError(
                    code=ErrorCode.DIRECTORY_INVALID_RESPONSE,
                    message="Invalid JSON response from directory",
                    operation=operation,
                    status_code=response.status_code,
                    response_body=response.text[:RESPONSE_BODY_MAX_LENGTH],
                )
            )

        if not isinstance(data, dict):
            self._logger.warning(
                f"{self._service_name}_api_unexpected_format",
                operation=operation,
                data_type=type(data).__name__,
            )
            return Failure(
                error=DirectoryInvalidResponseError(
                    code=ErrorCode.DIRECTORY_INVALID_RESPONSE,
                    message="Expected object response from directory",
                    operation=operation,
                    status_code=response.status_code,
                    response_body=response.text[:RESPONSE_BODY_MAX_LENGTH],
                )
            )

        return Success(value=data)


def graph_error(response: httpx.Response) -> tuple[str, str]:
    """Extract (code, message) from a directory error body.

    Falls back to the HTTP reason phrase when the body is not the standard
    {"error": {"code", "message"}} envelope.
    """
    try:
        body = response.json()
    except ValueError:
        body = None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return str(error.get("code", "")), str(error.get("message", ""))
    return "", response.reason_phrase or f"HTTP {response.status_code}"
