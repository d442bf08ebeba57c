"""Error response builder for RFC 7807 Problem Details.

Builds RFC 7807 compliant error responses from application layer errors.

Exports:
    ErrorResponseBuilder: Utility class for building RFC 7807 responses
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from dlmembership.application.errors import ApplicationError, ApplicationErrorCode
from dlmembership.core.config import settings
from dlmembership.presentation.api.v1.errors.problem_details import (
    ErrorDetail,
    ProblemDetails,
)

_STATUS_CODES: dict[ApplicationErrorCode, int] = {
    ApplicationErrorCode.COMMAND_VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ApplicationErrorCode.COMMAND_EXECUTION_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ApplicationErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ApplicationErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ApplicationErrorCode.EXTERNAL_SERVICE_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
    ApplicationErrorCode.DEADLINE_EXCEEDED: status.HTTP_503_SERVICE_UNAVAILABLE,
}

_TITLES: dict[ApplicationErrorCode, str] = {
    ApplicationErrorCode.COMMAND_VALIDATION_FAILED: "Validation Failed",
    ApplicationErrorCode.COMMAND_EXECUTION_FAILED: "Command Execution Failed",
    ApplicationErrorCode.UNAUTHORIZED: "Directory Authentication Failed",
    ApplicationErrorCode.FORBIDDEN: "Directory Access Denied",
    ApplicationErrorCode.EXTERNAL_SERVICE_ERROR: "Directory Unavailable",
    ApplicationErrorCode.DEADLINE_EXCEEDED: "Deadline Exceeded",
}


class ErrorResponseBuilder:
    """Build RFC 7807 Problem Details error responses.

    Example:
        >>> response = ErrorResponseBuilder.from_application_error(
        ...     error=error,
        ...     request=request,
        ...     trace_id="550e8400-e29b-41d4-a716-446655440000",
        ... )
    """

    @staticmethod
    def from_application_error(
        error: ApplicationError,
        request: Request,
        trace_id: str | None,
    ) -> JSONResponse:
        """Convert ApplicationError to RFC 7807 JSON response.

        Validation failures list every violation in `errors`, in payload
        order. Single-cause failures list their domain error.

        Args:
            error: Application layer error to convert
            request: FastAPI Request object (for instance URL)
            trace_id: Request trace ID for debugging

        Returns:
            JSONResponse with RFC 7807 ProblemDetails content
        """
        status_code = ErrorResponseBuilder.get_status_code(error.code)

        problem = ProblemDetails(
            type=f"{settings.api_base_url}/errors/{error.code.value}",
            title=_TITLES.get(error.code, "Internal Server Error"),
            status=status_code,
            detail=error.message,
            instance=str(request.url.path),
            errors=None,
            trace_id=trace_id,
        )

        if error.validation_errors:
            problem.errors = [
                ErrorDetail(
                    field=v.field or "payload",
                    code=v.code.value,
                    message=v.message,
                )
                for v in error.validation_errors
            ]
        elif error.domain_error is not None:
            domain_error = error.domain_error
            problem.errors = [
                ErrorDetail(
                    field=(
                        getattr(domain_error, "field", None)
                        or getattr(domain_error, "operation", None)
                        or "request"
                    ),
                    code=domain_error.code.value,
                    message=domain_error.message,
                )
            ]

        return JSONResponse(
            status_code=status_code,
            content=problem.model_dump(exclude_none=True),
        )

    @staticmethod
    def get_status_code(code: ApplicationErrorCode) -> int:
        """Map application error code to HTTP status code.

        Example:
            >>> ErrorResponseBuilder.get_status_code(
            ...     ApplicationErrorCode.FORBIDDEN
            ... )
            403
        """
        return _STATUS_CODES.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)
