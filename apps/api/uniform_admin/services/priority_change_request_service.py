"""Priority change requests (normal <-> urgent) on existing tasks."""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from uniform_admin.db.enums import NotificationType, RequestKind, RequestStatus, ReviewDecision, TaskPriority
from uniform_admin.db.models import PendingPriorityChangeRequest
from uniform_admin.services import approval_service, notification_service, task_service
from uniform_admin.services.approval_service import (
    DuplicatePendingRequestError,
    InvalidRequestError,
)

logger = logging.getLogger(__name__)

KIND = RequestKind.PRIORITY_CHANGE


def submit_request(
    db: Session,
    requested_by: UUID,
    task_id: UUID,
    requested_priority: str,
    urgent_reason_id: UUID | None = None,
    urgent_reason_text: str | None = None,
) -> PendingPriorityChangeRequest:
    """
    Ask for a task's priority to change.

    Raises:
        InvalidRequestError: unknown priority, no change, or urgent without reason
        TargetNotFoundError: task missing or deleted
        DuplicatePendingRequestError: task already has a pending priority request
    """
    try:
        requested = TaskPriority(requested_priority)
    except ValueError:
        raise InvalidRequestError(f"Unknown priority '{requested_priority}'")

    task = task_service.require_task(db, task_id)
    if task.priority == requested.value:
        raise InvalidRequestError(f"Task priority is already {requested.label}")

    if requested == TaskPriority.URGENT:
        approval_service.validate_urgent_reason(db, urgent_reason_id, urgent_reason_text)

    existing = db.query(PendingPriorityChangeRequest).filter(
        PendingPriorityChangeRequest.task_id == task_id,
        PendingPriorityChangeRequest.status == RequestStatus.PENDING.value,
    ).first()
    if existing:
        raise DuplicatePendingRequestError(
            "A priority change request for this task is already pending"
        )

    request = PendingPriorityChangeRequest(
        requested_by=requested_by,
        task_id=task_id,
        current_priority=task.priority,
        requested_priority=requested.value,
        urgent_reason_id=urgent_reason_id,
        urgent_reason_text=(urgent_reason_text or "").strip() or None,
    )
    db.add(request)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against another submit for the same task
        db.rollback()
        raise DuplicatePendingRequestError(
            "A priority change request for this task is already pending"
        )
    db.refresh(request)
    logger.info("Priority change request %s submitted for task %s", request.id, task_id)
    return request


def approve(
    db: Session,
    request_id: UUID,
    reviewer_id: UUID,
    expected_version: int | None = None,
) -> PendingPriorityChangeRequest:
    """Approve: task priority -> requested_priority, history names both labels."""

    def apply(request: PendingPriorityChangeRequest) -> None:
        task = task_service.require_task(db, request.task_id)

        before = TaskPriority(request.current_priority).label
        after = TaskPriority(request.requested_priority).label
        task_service.set_priority(
            db,
            task,
            TaskPriority(request.requested_priority),
            reviewer_id,
            notes=f"Priority changed from {before} to {after} (approved request)",
        )

        customer_name = approval_service.get_task_context(db, [task.id])[task.id]["customer_name"]
        notification_service.create_notification(
            db,
            user_id=request.requested_by,
            type=NotificationType.PRIORITY_CHANGE_APPROVED,
            title="Priority change approved",
            message=(
                f'Your request to change the priority of "{customer_name}" '
                f"from {before} to {after} was approved."
            ),
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
) -> PendingPriorityChangeRequest:
    def apply(request: PendingPriorityChangeRequest) -> None:
        context = approval_service.get_task_context(db, [request.task_id])
        customer_name = context.get(request.task_id, {}).get("customer_name")
        notification_service.create_notification(
            db,
            user_id=request.requested_by,
            type=NotificationType.PRIORITY_CHANGE_REJECTED,
            title="Priority change rejected",
            message=(
                f'Your request to change the priority of "{customer_name}" was rejected. '
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


def enrich(db: Session, requests: list[PendingPriorityChangeRequest]) -> list[dict]:
    """One query each for users, tasks (with order/campaign) and urgent reasons."""
    user_names = approval_service.get_users_for(db, requests)
    tasks = approval_service.get_task_context(db, [r.task_id for r in requests])
    reason_labels = approval_service.get_urgent_reason_labels(
        db, [r.urgent_reason_id for r in requests]
    )

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
                "current_priority": request.current_priority,
                "requested_priority": request.requested_priority,
                "current_priority_label": TaskPriority(request.current_priority).label,
                "requested_priority_label": TaskPriority(request.requested_priority).label,
                "urgent_reason_id": request.urgent_reason_id,
                "urgent_reason_label": reason_labels.get(request.urgent_reason_id),
                "urgent_reason_text": request.urgent_reason_text,
            }
        )
    return items
