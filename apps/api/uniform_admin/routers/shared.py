"""Helpers shared by the routers."""

from fastapi import HTTPException

from uniform_admin.services.approval_service import (
    ApprovalServiceError,
    DuplicatePendingRequestError,
    InvalidRequestError,
    PermissionDeniedError,
    RequestAlreadyProcessedError,
    RequestNotFoundError,
    TargetNotFoundError,
)

# Most specific first: RejectionReasonRequiredError is an InvalidRequestError
ERROR_STATUS_CODES: list[tuple[type[ApprovalServiceError], int]] = [
    (RequestNotFoundError, 404),
    (TargetNotFoundError, 404),
    (RequestAlreadyProcessedError, 409),
    (DuplicatePendingRequestError, 409),
    (InvalidRequestError, 422),
    (PermissionDeniedError, 403),
]


def status_code_for(error: ApprovalServiceError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 400


def to_http_exception(error: ApprovalServiceError) -> HTTPException:
    return HTTPException(status_code=status_code_for(error), detail=str(error))
