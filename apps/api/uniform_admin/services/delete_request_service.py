"""Task delete requests - approval soft-deletes the task."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from uniform_admin.db.enums import NotificationType, RequestKind, RequestStatus, ReviewDecision
from uniform_admin.db.models import PendingDeleteRequest
from uniform_admin.services import approval_service, notification_service, task_service
from uniform_admin.services.approval_service import (
    DuplicatePendingRequestError,
    InvalidRequestError,
)

logger = logging.getLogger(__name__)

KIND = RequestKind.DELETE


def submit_request(
    db: Session,
    requested_by: UUID,
    task_id: UUID,
    reason: str,
) -> PendingDeleteRequest:
    """
    Ask for a task to be deleted.

    Raises:
        InvalidRequestError: empty reason
        TargetNotFoundError: task missing or already deleted
        DuplicatePendingRequestError: a delete request for the task is pending
    """
    reason = (reason or "").strip()
    if not reason:
        raise InvalidRequestError("A reason is required")

    task_service.require_task(db, task_id)

    existing = db.query(PendingDeleteRequest).filter(
        PendingDeleteRequest.task_id == task_id,
        PendingDeleteRequest.status == RequestStatus.PENDING.value,
    ).first()
    if existing:
        raise DuplicatePendingRequestError("A delete request for this task is already pending")

    request = PendingDeleteRequest(requested_by=requested_by, task_id=task_id, reason=reason)
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info("Delete request %s submitted for task %s", request.id, task_id)
    return request


def _customer_name(db: Session, task_id: UUID) -> str | None:
    return approval_service.get_task_context(db, [task_id]).get(task_id, {}).get("customer_name")


def approve(
    db: Session,
    request_id: UUID,
    reviewer_id: UUID,
    expected_version: int | None = None,
) -> PendingDeleteRequest:
    """Approve: set deleted_at on the task, log `deleted`, notify the requester."""

    def apply(request: PendingDeleteRequest) -> None:
        task = task_service.require_task(db, request.task_id)

        task_service.soft_delete(
            db, task, reviewer_id, notes=f"Task deleted. Reason: {request.reason}"
        )

        customer_name = _customer_name(db, task.id)
        notification_service.create_notification(
            db,
            user_id=request.requested_by,
            type=NotificationType.DELETE_APPROVED,
            title="Deletion approved",
            message=f"Your request to delete the task for {customer_name} was approved.",
            customer_name=customer_name,
            task_id=task.id,
        )

    return approval_service.resolve_request(
        db,
        KIND,
        request_id,
        reviewer_id,
        ReviewDecision.APPROVE,
        on_approve=apply,
        expected_version=expected_version,
    )


def reject(
    db: Session,
    request_id: UUID,
    reviewer_id: UUID,
    reason: str | None,
    expected_version: int | None = None,
) -> PendingDeleteRequest:
    """Reject: the task is left untouched; the reason goes to the requester."""

    def apply(request: PendingDeleteRequest) -> None:
        customer_name = _customer_name(db, request.task_id)
        notification_service.create_notification(
            db,
            user_id=request.requested_by,
            type=NotificationType.DELETE_REJECTED,
            title="Deletion rejected",
            message=(
                f"Your request to delete the task for {customer_name} was rejected. "
                f"Reason: {request.rejection_reason}"
            ),
            customer_name=customer_name,
            task_id=request.task_id,
        )

    return approval_service.resolve_request(
        db,
        KIND,
        request_id,
        reviewer_id,
        ReviewDecision.REJECT,
        reason=reason,
        on_reject=apply,
        expected_version=expected_version,
    )


def enrich(db: Session, requests: list[PendingDeleteRequest]) -> list[dict]:
    user_names = approval_service.get_users_for(db, requests)
    tasks = approval_service.get_task_context(db, [r.task_id for r in requests])

    items = []
    for request in requests:
        task = tasks.get(request.task_id, {})
        items.append(
            {
                **approval_service.request_fields(request, user_names),
                "customer_name": task.get("customer_name"),
                "campaign_name": task.get("campaign_name"),
                "task_id": request.task_id,
                "task_status": task.get("status"),
                "task_deleted": task.get("deleted", False),
                "reason": request.reason,
            }
        )
    return items
