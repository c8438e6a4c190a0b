"""Router for submitting requests that need admin approval."""

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from uniform_admin.core.config import settings
from uniform_admin.core.deps import get_current_session, get_db, require_csrf_header, require_roles
from uniform_admin.core.rate_limit import limiter
from uniform_admin.db.enums import ROLES_CAN_SUBMIT_REQUESTS, RequestKind
from uniform_admin.db.models import UrgentReason
from uniform_admin.routers.shared import to_http_exception
from uniform_admin.schemas.auth import UserSession
from uniform_admin.schemas.requests import (
    CustomerDeleteRequestCreate,
    DeleteRequestCreate,
    ModificationRequestCreate,
    PriorityChangeRequestCreate,
    RequestCreated,
    UrgentRequestCreate,
)
from uniform_admin.services import (
    customer_delete_request_service,
    delete_request_service,
    modification_request_service,
    priority_change_request_service,
    urgent_request_service,
)
from uniform_admin.services.approval_service import ApprovalServiceError


router = APIRouter(prefix="/requests", tags=["requests"])

require_submitter = require_roles(ROLES_CAN_SUBMIT_REQUESTS)


class UrgentReasonRead(BaseModel):
    id: str
    label: str
    description: str | None


def _created(kind: RequestKind, request) -> RequestCreated:
    return RequestCreated(
        id=request.id,
        kind=kind,
        status=request.status,
        requested_at=request.requested_at,
        version=request.version,
    )


@router.get("/urgent-reasons", response_model=list[UrgentReasonRead])
def list_urgent_reasons(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Active urgent reasons, in display order."""
    reasons = (
        db.query(UrgentReason)
        .filter(UrgentReason.is_active.is_(True))
        .order_by(UrgentReason.display_order.asc(), UrgentReason.label.asc())
        .all()
    )
    return [
        UrgentReasonRead(id=str(r.id), label=r.label, description=r.description)
        for r in reasons
    ]


@router.post(
    "/urgent",
    response_model=RequestCreated,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
@limiter.limit(settings.RATE_LIMIT_SUBMIT)
def submit_urgent_request(
    request: Request,
    data: UrgentRequestCreate,
    session: UserSession = Depends(require_submitter),
    db: Session = Depends(get_db),
):
    """Ask for a new order to be created with urgent priority."""
    try:
        pending = urgent_request_service.submit_request(
            db,
            requested_by=session.user_id,
            request_data=data.request_data.model_dump(mode="json"),
            requested_priority=data.requested_priority.value,
            urgent_reason_id=data.urgent_reason_id,
            urgent_reason_text=data.urgent_reason_text,
        )
    except ApprovalServiceError as e:
        raise to_http_exception(e)
    return _created(RequestKind.URGENT, pending)


@router.post(
    "/delete",
    response_model=RequestCreated,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
@limiter.limit(settings.RATE_LIMIT_SUBMIT)
def submit_delete_request(
    request: Request,
    data: DeleteRequestCreate,
    session: UserSession = Depends(require_submitter),
    db: Session = Depends(get_db),
):
    """Ask for a task to be deleted."""
    try:
        pending = delete_request_service.submit_request(
            db, requested_by=session.user_id, task_id=data.task_id, reason=data.reason
        )
    except ApprovalServiceError as e:
        raise to_http_exception(e)
    return _created(RequestKind.DELETE, pending)


@router.post(
    "/modification",
    response_model=RequestCreated,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
@limiter.limit(settings.RATE_LIMIT_SUBMIT)
def submit_modification_request(
    request: Request,
    data: ModificationRequestCreate,
    session: UserSession = Depends(require_submitter),
    db: Session = Depends(get_db),
):
    """Ask for changes on a task (optionally with attachments)."""
    try:
        pending = modification_request_service.submit_request(
            db,
            requested_by=session.user_id,
            task_id=data.task_id,
            description=data.description,
            attachments=[a.model_dump() for a in data.attachments],
        )
    except ApprovalServiceError as e:
        raise to_http_exception(e)
    return _created(RequestKind.MODIFICATION, pending)


@router.post(
    "/priority-change",
    response_model=RequestCreated,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
@limiter.limit(settings.RATE_LIMIT_SUBMIT)
def submit_priority_change_request(
    request: Request,
    data: PriorityChangeRequestCreate,
    session: UserSession = Depends(require_submitter),
    db: Session = Depends(get_db),
):
    """Ask for a task's priority to change. One pending request per task."""
    try:
        pending = priority_change_request_service.submit_request(
            db,
            requested_by=session.user_id,
            task_id=data.task_id,
            requested_priority=data.requested_priority.value,
            urgent_reason_id=data.urgent_reason_id,
            urgent_reason_text=data.urgent_reason_text,
        )
    except ApprovalServiceError as e:
        raise to_http_exception(e)
    return _created(RequestKind.PRIORITY_CHANGE, pending)


@router.post(
    "/customer-delete",
    response_model=RequestCreated,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
@limiter.limit(settings.RATE_LIMIT_SUBMIT)
def submit_customer_delete_request(
    request: Request,
    data: CustomerDeleteRequestCreate,
    session: UserSession = Depends(require_submitter),
    db: Session = Depends(get_db),
):
    """Ask for a customer to be deactivated."""
    try:
        pending = customer_delete_request_service.submit_request(
            db, requested_by=session.user_id, customer_id=data.customer_id, reason=data.reason
        )
    except ApprovalServiceError as e:
        raise to_http_exception(e)
    return _created(RequestKind.CUSTOMER_DELETE, pending)
