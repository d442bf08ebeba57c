"""RFC 7807 error responses for API v1."""

from dlmembership.presentation.api.v1.errors.error_response_builder import (
    ErrorResponseBuilder,
)
from dlmembership.presentation.api.v1.errors.exception_handlers import (
    register_exception_handlers,
)
from dlmembership.presentation.api.v1.errors.problem_details import (
    ErrorDetail,
    ProblemDetails,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponseBuilder",
    "ProblemDetails",
    "register_exception_handlers",
]
