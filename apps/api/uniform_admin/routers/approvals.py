"""Router for the approval workflow (admin review of pending requests)."""

from datetime import datetime
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.orm import Session

from uniform_admin.core.deps import get_current_session, get_db, require_csrf_header, require_roles
from uniform_admin.db.enums import ROLES_CAN_REVIEW_REQUESTS, RequestKind, RequestStatus
from uniform_admin.routers.shared import to_http_exception
from uniform_admin.schemas.auth import UserSession
from uniform_admin.schemas.requests import (
    REQUEST_READ_SCHEMAS,
    ApproveRequest,
    RejectRequest,
    RequestListResponse,
)
from uniform_admin.services import approval_service, modification_request_service
from uniform_admin.services.approval_service import ApprovalServiceError
from uniform_admin.utils.pagination import PaginationParams, get_pagination


router = APIRouter(prefix="/approvals", tags=["approvals"])

require_reviewer = require_roles(ROLES_CAN_REVIEW_REQUESTS)


def _serialize(db: Session, kind: RequestKind, requests: list) -> list[dict]:
    schema = REQUEST_READ_SCHEMAS[kind]
    return [
        schema.model_validate(item).model_dump(mode="json")
        for item in approval_service.enrich_requests(db, kind, requests)
    ]


def _list_response(
    db: Session,
    kind: RequestKind,
    requests: list,
    total: int,
    pagination: PaginationParams,
) -> RequestListResponse:
    return RequestListResponse(
        kind=kind,
        items=_serialize(db, kind, requests),
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pagination.pages(total),
    )


# ============================================================================
# Listing
# ============================================================================


@router.get("/counts", response_model=dict[str, int])
def get_pending_counts(
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    """Pending requests per kind (badge counts)."""
    return approval_service.get_pending_counts(db)


@router.get("/{kind}", response_model=RequestListResponse)
def list_pending_requests(
    kind: RequestKind,
    pagination: PaginationParams = Depends(get_pagination),
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    """
    List pending requests of a kind, newest first.

    Items are enriched with requester, customer and campaign names.
    """
    requests, total = approval_service.get_pending_requests(db, kind, pagination)
    return _list_response(db, kind, requests, total, pagination)


@router.get("/{kind}/history", response_model=RequestListResponse)
def list_request_history(
    kind: RequestKind,
    status: RequestStatus | None = None,
    requested_by: UUID | None = None,
    date_from: datetime | None = Query(None, description="Reviewed at or after"),
    date_to: datetime | None = Query(None, description="Reviewed at or before"),
    pagination: PaginationParams = Depends(get_pagination),
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    """Approved and rejected requests of a kind, most recently reviewed first."""
    try:
        requests, total = approval_service.get_resolved_requests(
            db,
            kind,
            status=status,
            requested_by=requested_by,
            date_from=date_from,
            date_to=date_to,
            pagination=pagination,
        )
    except ApprovalServiceError as e:
        raise to_http_exception(e)
    return _list_response(db, kind, requests, total, pagination)


@router.get("/{kind}/{request_id}", response_model=dict)
def get_request(
    kind: RequestKind,
    request_id: UUID,
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    request = approval_service.get_request(db, kind, request_id)
    if not request:
        raise HTTPException(status_code=404, detail="Request not found")
    return _serialize(db, kind, [request])[0]


# ============================================================================
# Review
# ============================================================================


@router.post(
    "/{kind}/{request_id}/approve",
    response_model=dict,
    dependencies=[Depends(require_csrf_header)],
)
def approve_request(
    kind: RequestKind,
    request_id: UUID,
    data: ApproveRequest | None = None,
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    """
    Approve a pending request and apply its effect.

    Returns 409 if someone else resolved the request first.
    """
    data = data or ApproveRequest()
    service = approval_service.get_request_service(kind)
    kwargs = {"expected_version": data.version}
    if kind == RequestKind.URGENT and data.final_priority:
        kwargs["final_priority"] = data.final_priority.value

    try:
        request = service.approve(db, request_id, session.user_id, **kwargs)
    except ApprovalServiceError as e:
        raise to_http_exception(e)

    return _serialize(db, kind, [request])[0]


@router.post(
    "/{kind}/{request_id}/reject",
    response_model=dict,
    dependencies=[Depends(require_csrf_header)],
)
def reject_request(
    kind: RequestKind,
    request_id: UUID,
    data: RejectRequest,
    session: UserSession = Depends(require_reviewer),
    db: Session = Depends(get_db),
):
    """Reject a pending request. A non-blank reason is required."""
    service = approval_service.get_request_service(kind)
    try:
        request = service.reject(
            db,
            request_id,
            session.user_id,
            data.rejection_reason,
            expected_version=data.version,
        )
    except ApprovalServiceError as e:
        raise to_http_exception(e)

    return _serialize(db, kind, [request])[0]


# ============================================================================
# Attachments
# ============================================================================


@router.get("/modification/{request_id}/attachments/{index}")
def download_attachment(
    request_id: UUID,
    index: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Download a modification request attachment.

    Reviewers and the requesting salesperson only. Falls back to a redirect
    to the validated https URL when the file cannot be fetched.
    """
    try:
        attachment = modification_request_service.get_attachment(
            db,
            request_id,
            index,
            user_id=session.user_id,
            can_review=session.role in ROLES_CAN_REVIEW_REQUESTS,
        )
    except ApprovalServiceError as e:
        raise to_http_exception(e)

    download = modification_request_service.fetch_attachment(attachment)
    if not download.fetched:
        return RedirectResponse(url=download.url, status_code=302)

    return Response(
        content=download.content,
        media_type=download.content_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(download.name)}",
        },
    )
