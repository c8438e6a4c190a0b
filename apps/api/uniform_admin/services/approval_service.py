"""
Approval workflow shared by every pending request kind.

A request is resolved by `resolve_request`, which claims the row with a
conditional update (id, status='pending', version) and then runs the
kind-specific side effects inside the same transaction. Exactly one
reviewer can win the claim; everyone else gets RequestAlreadyProcessedError.
"""

import logging
from datetime import datetime
from types import ModuleType
from typing import Callable
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from uniform_admin.core.structured_logging import build_log_context
from uniform_admin.db.enums import RequestKind, RequestStatus, ReviewDecision
from uniform_admin.db.models import (
    Campaign,
    DesignTask,
    Order,
    PendingCustomerDeleteRequest,
    PendingDeleteRequest,
    PendingModificationRequest,
    PendingPriorityChangeRequest,
    PendingUrgentRequest,
    UrgentReason,
    User,
)
from uniform_admin.db.types import utcnow
from uniform_admin.utils.pagination import PaginationParams

logger = logging.getLogger(__name__)


class ApprovalServiceError(Exception):
    """Base exception for approval workflow errors."""

    pass


class RequestNotFoundError(ApprovalServiceError):
    """Pending request not found."""

    pass


class TargetNotFoundError(ApprovalServiceError):
    """Task, customer or order the request points at is missing."""

    pass


class RequestAlreadyProcessedError(ApprovalServiceError):
    """Request is no longer pending, or lost the claim to another reviewer."""

    pass


class DuplicatePendingRequestError(ApprovalServiceError):
    """An equivalent request is already waiting for review."""

    pass


class InvalidRequestError(ApprovalServiceError):
    """Request payload failed validation."""

    pass


class RejectionReasonRequiredError(InvalidRequestError):
    """Rejecting needs a non-empty reason."""

    pass


class PermissionDeniedError(ApprovalServiceError):
    """Caller may not act on this entity."""

    pass


REQUEST_MODELS = {
    RequestKind.URGENT: PendingUrgentRequest,
    RequestKind.DELETE: PendingDeleteRequest,
    RequestKind.MODIFICATION: PendingModificationRequest,
    RequestKind.PRIORITY_CHANGE: PendingPriorityChangeRequest,
    RequestKind.CUSTOMER_DELETE: PendingCustomerDeleteRequest,
}


def get_request_model(kind: RequestKind):
    return REQUEST_MODELS[RequestKind(kind)]


def get_request_service(kind: RequestKind) -> ModuleType:
    """Return the service module implementing approve/reject/enrich for a kind."""
    from uniform_admin.services import (
        customer_delete_request_service,
        delete_request_service,
        modification_request_service,
        priority_change_request_service,
        urgent_request_service,
    )

    return {
        RequestKind.URGENT: urgent_request_service,
        RequestKind.DELETE: delete_request_service,
        RequestKind.MODIFICATION: modification_request_service,
        RequestKind.PRIORITY_CHANGE: priority_change_request_service,
        RequestKind.CUSTOMER_DELETE: customer_delete_request_service,
    }[RequestKind(kind)]


def require_reason(reason: str | None) -> str:
    """Return the stripped reason, or raise RejectionReasonRequiredError."""
    cleaned = (reason or "").strip()
    if not cleaned:
        raise RejectionReasonRequiredError("A rejection reason is required")
    return cleaned


# =============================================================================
# Queries
# =============================================================================


def get_request(db: Session, kind: RequestKind, request_id: UUID):
    """Get a request of the given kind by ID."""
    model = get_request_model(kind)
    return db.query(model).filter(model.id == request_id).first()


def get_pending_requests(
    db: Session,
    kind: RequestKind,
    pagination: PaginationParams | None = None,
) -> tuple[list, int]:
    """
    Get pending requests of a kind, newest first.

    Returns:
        (requests, total_count)
    """
    pagination = pagination or PaginationParams()
    model = get_request_model(kind)
    query = db.query(model).filter(model.status == RequestStatus.PENDING.value)

    total = query.count()
    requests = (
        query.order_by(model.requested_at.desc())
        .offset(pagination.offset)
        .limit(pagination.per_page)
        .all()
    )
    return requests, total


def get_resolved_requests(
    db: Session,
    kind: RequestKind,
    status: RequestStatus | None = None,
    requested_by: UUID | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    pagination: PaginationParams | None = None,
) -> tuple[list, int]:
    """
    Approval history of a kind: approved and rejected requests,
    most recently reviewed first.

    Returns:
        (requests, total_count)
    """
    pagination = pagination or PaginationParams()
    model = get_request_model(kind)
    query = db.query(model)

    if status:
        if RequestStatus(status) == RequestStatus.PENDING:
            raise InvalidRequestError("History only contains resolved requests")
        query = query.filter(model.status == RequestStatus(status).value)
    else:
        query = query.filter(model.status != RequestStatus.PENDING.value)

    if requested_by:
        query = query.filter(model.requested_by == requested_by)
    if date_from:
        query = query.filter(model.reviewed_at >= date_from)
    if date_to:
        query = query.filter(model.reviewed_at <= date_to)

    total = query.count()
    requests = (
        query.order_by(model.reviewed_at.desc())
        .offset(pagination.offset)
        .limit(pagination.per_page)
        .all()
    )
    return requests, total


def get_pending_counts(db: Session) -> dict[str, int]:
    """Pending request count per kind, plus `total`."""
    counts: dict[str, int] = {}
    for kind, model in REQUEST_MODELS.items():
        counts[kind.value] = (
            db.query(func.count(model.id))
            .filter(model.status == RequestStatus.PENDING.value)
            .scalar()
            or 0
        )
    counts["total"] = sum(counts.values())
    return counts


# =============================================================================
# Batched lookups (one query per table, keyed by the set of ids)
# =============================================================================


def get_user_names(db: Session, user_ids) -> dict[UUID, str]:
    """Map user id -> display name."""
    ids = {uid for uid in user_ids if uid}
    if not ids:
        return {}
    users = db.query(User).filter(User.id.in_(ids)).all()
    return {user.id: user.display_name for user in users}


def get_task_context(db: Session, task_ids) -> dict[UUID, dict]:
    """
    Map task id -> {customer_name, campaign_name, priority, status, deleted}.

    Customer name comes from the task's order.
    """
    ids = {tid for tid in task_ids if tid}
    if not ids:
        return {}

    rows = (
        db.query(DesignTask, Order.customer_name, Campaign.name)
        .outerjoin(Order, Order.id == DesignTask.order_id)
        .outerjoin(Campaign, Campaign.id == DesignTask.campaign_id)
        .filter(DesignTask.id.in_(ids))
        .all()
    )
    return {
        task.id: {
            "customer_name": customer_name,
            "campaign_name": campaign_name,
            "priority": task.priority,
            "status": task.status,
            "deleted": task.deleted_at is not None,
        }
        for task, customer_name, campaign_name in rows
    }


def enrich_requests(db: Session, kind: RequestKind, requests: list) -> list[dict]:
    """Return one details dict per request, in order."""
    if not requests:
        return []
    return get_request_service(kind).enrich(db, requests)


# =============================================================================
# Resolve
# =============================================================================


def resolve_request(
    db: Session,
    kind: RequestKind,
    request_id: UUID,
    reviewer_id: UUID,
    decision: ReviewDecision,
    reason: str | None = None,
    on_approve: Callable | None = None,
    on_reject: Callable | None = None,
    expected_version: int | None = None,
):
    """
    Move a pending request to approved or rejected, atomically.

    The callback for the decision receives the claimed request and writes
    the kind-specific side effects (target mutation, history entry,
    notification). Everything is committed once; any failure rolls the
    whole transaction back, claim included.

    Raises:
        RejectionReasonRequiredError: reject without a reason (no DB access)
        RequestNotFoundError: unknown request id
        RequestAlreadyProcessedError: not pending, stale version, or lost claim
    """
    decision = ReviewDecision(decision)
    rejection_reason = None
    if decision == ReviewDecision.REJECT:
        rejection_reason = require_reason(reason)

    model = get_request_model(kind)
    request = get_request(db, kind, request_id)
    if not request:
        raise RequestNotFoundError(f"Request {request_id} not found")

    if request.status != RequestStatus.PENDING.value:
        raise RequestAlreadyProcessedError(
            f"Request is not pending (status: {request.status})"
        )
    if expected_version is not None and request.version != expected_version:
        raise RequestAlreadyProcessedError("Request was modified by someone else")

    new_status = (
        RequestStatus.APPROVED if decision == ReviewDecision.APPROVE else RequestStatus.REJECTED
    )
    now = utcnow()
    log_context = build_log_context(
        user_id=str(reviewer_id),
        request_kind=RequestKind(kind).value,
        entity_id=str(request_id),
    )

    try:
        result = db.execute(
            update(model)
            .where(
                model.id == request_id,
                model.status == RequestStatus.PENDING.value,
                model.version == request.version,
            )
            .values(
                status=new_status.value,
                reviewed_by=reviewer_id,
                reviewed_at=now,
                rejection_reason=rejection_reason,
                version=request.version + 1,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise RequestAlreadyProcessedError("Request was already processed")

        db.refresh(request)

        callback = on_approve if decision == ReviewDecision.APPROVE else on_reject
        if callback:
            callback(request)

        db.commit()
    except ApprovalServiceError:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("Failed to resolve request", extra=log_context)
        raise

    db.refresh(request)
    logger.info(
        "Request %s %s",
        request.id,
        new_status.value,
        extra={**log_context, "decision": decision.value},
    )
    return request


def request_fields(request, user_names: dict[UUID, str]) -> dict:
    """Columns shared by every request kind, plus requester/reviewer names."""
    return {
        "id": request.id,
        "status": request.status,
        "requested_by": request.requested_by,
        "requested_at": request.requested_at,
        "reviewed_by": request.reviewed_by,
        "reviewed_at": request.reviewed_at,
        "rejection_reason": request.rejection_reason,
        "version": request.version,
        "requester_name": user_names.get(request.requested_by),
        "reviewer_name": user_names.get(request.reviewed_by),
    }


def get_users_for(db: Session, requests: list) -> dict[UUID, str]:
    """Requester and reviewer names for a page of requests."""
    ids = set()
    for request in requests:
        ids.add(request.requested_by)
        ids.add(request.reviewed_by)
    return get_user_names(db, ids)


def get_urgent_reason_labels(db: Session, reason_ids) -> dict[UUID, str]:
    ids = {rid for rid in reason_ids if rid}
    if not ids:
        return {}
    rows = db.query(UrgentReason.id, UrgentReason.label).filter(UrgentReason.id.in_(ids)).all()
    return {row.id: row.label for row in rows}


def get_campaign_names(db: Session, campaign_ids) -> dict[UUID, str]:
    ids = {cid for cid in campaign_ids if cid}
    if not ids:
        return {}
    rows = db.query(Campaign.id, Campaign.name).filter(Campaign.id.in_(ids)).all()
    return {row.id: row.name for row in rows}


def validate_urgent_reason(db: Session, reason_id: UUID | None, reason_text: str | None) -> None:
    """An urgency claim needs an active picklist reason or free text."""
    if reason_id:
        reason = db.query(UrgentReason).filter(
            UrgentReason.id == reason_id,
            UrgentReason.is_active.is_(True),
        ).first()
        if not reason:
            raise InvalidRequestError("Unknown urgent reason")
        return
    if not (reason_text or "").strip():
        raise InvalidRequestError("Urgent priority needs a reason")
