"""Membership webhook handlers.

Endpoints:
    POST /api/v1/webhooks/membership - Apply Add/Remove to a batch of members

Status codes:
    200  every member succeeded or was already in the desired state
    207  some members failed, or all failed after being attempted
    400  payload rejected; `errors` lists every violation
    401  directory credential invalid or expired (no member attempted)
    403  application lacks directory permission (no member attempted)
    503  directory unavailable or deadline hit before any member
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from dlmembership.application.commands import ApplyMembershipChange
from dlmembership.application.commands.handlers import ApplyMembershipChangeHandler
from dlmembership.application.errors import ApplicationError, ApplicationErrorCode
from dlmembership.core.container import get_apply_membership_change_handler
from dlmembership.core.errors import DeadlineExceededError, DomainError
from dlmembership.core.result import Failure
from dlmembership.domain.enums import BatchStatus
from dlmembership.domain.errors import (
    DirectoryAuthenticationError,
    DirectoryPermissionError,
)
from dlmembership.presentation.api.middleware.trace_middleware import get_trace_id
from dlmembership.presentation.api.v1.errors import ErrorResponseBuilder, ProblemDetails
from dlmembership.schemas.membership_schemas import BatchResultResponse

router = APIRouter(prefix="/webhooks", tags=["Membership Webhooks"])


def _map_diagnostic(diagnostic: DomainError) -> ApplicationError:
    """Map a batch-level failure (no member attempted) to ApplicationError."""
    match diagnostic:
        case DirectoryAuthenticationError():
            code = ApplicationErrorCode.UNAUTHORIZED
        case DirectoryPermissionError():
            code = ApplicationErrorCode.FORBIDDEN
        case DeadlineExceededError():
            code = ApplicationErrorCode.DEADLINE_EXCEEDED
        case _:
            code = ApplicationErrorCode.EXTERNAL_SERVICE_ERROR
    return ApplicationError(
        code=code,
        message=diagnostic.message,
        domain_error=diagnostic,
    )


@router.post(
    "/membership",
    response_model=BatchResultResponse,
    responses={
        207: {"model": BatchResultResponse, "description": "Some members failed"},
        400: {"model": ProblemDetails, "description": "Payload rejected"},
        401: {"model": ProblemDetails, "description": "Credential invalid or expired"},
        403: {"model": ProblemDetails, "description": "Permission denied"},
        503: {"model": ProblemDetails, "description": "Directory unavailable"},
    },
)
async def apply_membership_change(
    request: Request,
    handler: ApplyMembershipChangeHandler = Depends(
        get_apply_membership_change_handler
    ),
) -> JSONResponse:
    """Add or remove a batch of members on one distribution list.

    The body is read raw so that string-encoded (and double-encoded) JSON
    payloads are accepted regardless of content type.

    Args:
        request: FastAPI request object.
        handler: ApplyMembershipChange handler (injected).

    Returns:
        JSONResponse with BatchResultResponse, or RFC 7807 error.
    """
    trace_id = get_trace_id()
    body = await request.body()

    result = await handler.handle(ApplyMembershipChange(payload=body, trace_id=trace_id))

    if isinstance(result, Failure):
        return ErrorResponseBuilder.from_application_error(
            error=result.error,
            request=request,
            trace_id=trace_id,
        )

    batch = result.value
    if not batch.started and batch.diagnostic is not None:
        return ErrorResponseBuilder.from_application_error(
            error=_map_diagnostic(batch.diagnostic),
            request=request,
            trace_id=trace_id,
        )

    status_code = (
        status.HTTP_200_OK
        if batch.overall_status is BatchStatus.ALL_SUCCEEDED
        else status.HTTP_207_MULTI_STATUS
    )
    return JSONResponse(
        status_code=status_code,
        content=BatchResultResponse.from_batch_result(batch, trace_id).model_dump(
            mode="json"
        ),
    )
