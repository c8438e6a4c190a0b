"""
Returned tasks: a designer sends a task back to the salesperson who
created it, the salesperson fixes the order and resends it.

The lead's `salesperson_status` is what marks a task as returned; the
open TaskRejection row carries the reason.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.orm import Session

from uniform_admin.db.enums import (
    NotificationType,
    RejectionReasonType,
    SalespersonStatus,
    TaskHistoryAction,
    TaskStatus,
)
from uniform_admin.db.models import DesignTask, Lead, Order, TaskRejection
from uniform_admin.db.types import utcnow
from uniform_admin.services import notification_service, task_history_service, task_service
from uniform_admin.services.approval_service import InvalidRequestError, PermissionDeniedError

logger = logging.getLogger(__name__)


@dataclass
class ReturnedTask:
    task: DesignTask
    customer_name: str | None
    rejection: TaskRejection | None


def _reason_label(reason_type: RejectionReasonType, reason_text: str | None) -> str:
    label = reason_type.label
    return f"{label}. Note: {reason_text}" if reason_text else label


def reject_task(
    db: Session,
    task_id: UUID,
    designer_id: UUID,
    reason_type: str,
    reason_text: str | None = None,
    return_for_correction: bool = True,
) -> TaskRejection:
    """
    Send a task back to its salesperson.

    Returning for correction keeps the designer on the task (assigning the
    caller when nobody was); a definitive rejection unassigns it. Either
    way the task goes back to pending.

    Raises:
        InvalidRequestError: unknown reason type, or `other` without text
        TargetNotFoundError: task missing or deleted
    """
    try:
        reason = RejectionReasonType(reason_type)
    except ValueError:
        raise InvalidRequestError(f"Unknown rejection reason '{reason_type}'")
    reason_text = (reason_text or "").strip() or None
    if reason == RejectionReasonType.OTHER and not reason_text:
        raise InvalidRequestError("Describe the reason for returning the task")

    task = task_service.require_task(db, task_id)
    old_status = task.status
    now = utcnow()

    try:
        if return_for_correction and not task.assigned_to:
            task.assigned_to = designer_id
            task.assigned_at = now
            db.flush()
            task_history_service.log_history(
                db,
                task_id=task.id,
                action=TaskHistoryAction.TASK_ASSIGNED,
                user_id=designer_id,
                notes="Designer assigned automatically before returning for correction",
            )

        rejection = TaskRejection(
            task_id=task.id,
            rejected_by=designer_id,
            reason_type=reason.value,
            reason_text=reason_text,
        )
        db.add(rejection)

        if task.lead_id:
            lead = db.get(Lead, task.lead_id)
            if lead:
                lead.salesperson_status = SalespersonStatus.REJECTED_BY_DESIGNER.value

        task.status = TaskStatus.PENDING.value
        task.status_changed_at = now
        task.returned_from_rejection = False
        if not return_for_correction:
            task.assigned_to = None
            task.assigned_at = None
        db.flush()

        full_reason = _reason_label(reason, reason_text)
        if return_for_correction:
            action = TaskHistoryAction.TASK_RETURNED_FOR_CORRECTION
            notes = (
                f"Task returned for correction by the designer. Reason: {full_reason}. "
                "Designer keeps the assignment."
            )
        else:
            action = TaskHistoryAction.TASK_REJECTED
            notes = (
                f"Task rejected by the designer. Reason: {full_reason}. "
                "Assignment removed."
            )
        task_history_service.log_history(
            db,
            task_id=task.id,
            action=action,
            user_id=designer_id,
            old_status=old_status,
            new_status=TaskStatus.PENDING.value,
            notes=notes,
        )

        customer_name = db.query(Order.customer_name).filter(Order.id == task.order_id).scalar()
        if return_for_correction:
            notification_service.create_notification(
                db,
                user_id=task.created_by,
                type=NotificationType.TASK_RETURNED,
                title="Task returned for correction",
                message=f"The task for {customer_name} was returned for correction. Reason: {reason.label}",
                customer_name=customer_name,
                task_id=task.id,
            )
        else:
            notification_service.create_notification(
                db,
                user_id=task.created_by,
                type=NotificationType.TASK_REJECTED,
                title="Task rejected by the designer",
                message=f"The task for {customer_name} was rejected. Reason: {reason.label}",
                customer_name=customer_name,
                task_id=task.id,
            )

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(rejection)
    logger.info("Task %s returned to salesperson (%s)", task.id, reason.value)
    return rejection


def _latest_open_rejections(db: Session, task_ids) -> dict[UUID, TaskRejection]:
    ids = set(task_ids)
    if not ids:
        return {}
    rows = (
        db.query(TaskRejection)
        .filter(TaskRejection.task_id.in_(ids), TaskRejection.resolved.is_(False))
        .order_by(TaskRejection.created_at.desc())
        .all()
    )
    latest: dict[UUID, TaskRejection] = {}
    for row in rows:
        latest.setdefault(row.task_id, row)
    return latest


def list_returned_tasks(
    db: Session,
    user_id: UUID,
    elevated: bool = False,
) -> list[ReturnedTask]:
    """
    Active tasks whose lead is `rejected_by_designer`, most recently updated
    first. Non-elevated callers only see the tasks they created.
    """
    query = (
        db.query(DesignTask, Order.customer_name)
        .join(Lead, Lead.id == DesignTask.lead_id)
        .join(Order, Order.id == DesignTask.order_id)
        .filter(
            DesignTask.deleted_at.is_(None),
            Lead.salesperson_status == SalespersonStatus.REJECTED_BY_DESIGNER.value,
        )
    )
    if not elevated:
        query = query.filter(DesignTask.created_by == user_id)

    rows = query.order_by(DesignTask.updated_at.desc()).all()
    rejections = _latest_open_rejections(db, [task.id for task, _ in rows])
    return [
        ReturnedTask(task=task, customer_name=customer_name, rejection=rejections.get(task.id))
        for task, customer_name in rows
    ]


def resend_to_designer(
    db: Session,
    task_id: UUID,
    user_id: UUID,
    elevated: bool = False,
) -> DesignTask:
    """
    Salesperson resends a corrected task.

    Resolves the latest open rejection, puts the lead back to
    `sent_to_designer` and flags the task as returned_from_rejection.
    No notification is sent.

    Raises:
        TargetNotFoundError: task missing or deleted
        PermissionDeniedError: caller did not create the task and is not elevated
        InvalidRequestError: task is not currently returned
    """
    task = task_service.require_task(db, task_id)
    if not elevated and task.created_by != user_id:
        raise PermissionDeniedError("Only the salesperson who created the task can resend it")

    lead = db.get(Lead, task.lead_id) if task.lead_id else None
    if not lead or lead.salesperson_status != SalespersonStatus.REJECTED_BY_DESIGNER.value:
        raise InvalidRequestError("Task was not returned by the designer")

    now = utcnow()
    try:
        rejection = _latest_open_rejections(db, [task.id]).get(task.id)
        if rejection:
            rejection.resolved = True
            rejection.resolved_at = now
            rejection.resolved_by = user_id

        lead.salesperson_status = SalespersonStatus.SENT_TO_DESIGNER.value
        lead.needs_logo = False
        task.returned_from_rejection = True
        db.flush()

        task_history_service.log_history(
            db,
            task_id=task.id,
            action=TaskHistoryAction.RESENT_TO_DESIGNER,
            user_id=user_id,
            notes="Task resent to the designer after correction",
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(task)
    logger.info("Task %s resent to designer", task.id)
    return task
