"""Design task queries and transitions."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from uniform_admin.db.enums import TaskHistoryAction, TaskPriority, TaskStatus
from uniform_admin.db.models import DesignTask
from uniform_admin.db.types import utcnow
from uniform_admin.services import task_history_service
from uniform_admin.services.approval_service import InvalidRequestError, TargetNotFoundError
from uniform_admin.utils.pagination import PaginationParams

logger = logging.getLogger(__name__)


def get_task(db: Session, task_id: UUID, include_deleted: bool = False) -> DesignTask | None:
    """Get a task by ID. Soft-deleted tasks are hidden unless asked for."""
    query = db.query(DesignTask).filter(DesignTask.id == task_id)
    if not include_deleted:
        query = query.filter(DesignTask.deleted_at.is_(None))
    return query.first()


def require_task(db: Session, task_id: UUID) -> DesignTask:
    """Get an active task or raise TargetNotFoundError (saying so when it was deleted)."""
    task = get_task(db, task_id, include_deleted=True)
    if not task:
        raise TargetNotFoundError(f"Task {task_id} not found")
    if task.deleted_at is not None:
        raise TargetNotFoundError(f"Task {task_id} was deleted")
    return task


def list_active_tasks(
    db: Session,
    status: TaskStatus | None = None,
    priority: TaskPriority | None = None,
    assigned_to: UUID | None = None,
    created_by: UUID | None = None,
    pagination: PaginationParams | None = None,
) -> tuple[list[DesignTask], int]:
    """
    List tasks that are not soft-deleted, urgent first, then oldest first.

    Returns:
        (tasks, total_count)
    """
    pagination = pagination or PaginationParams()
    query = db.query(DesignTask).filter(DesignTask.deleted_at.is_(None))

    if status:
        query = query.filter(DesignTask.status == TaskStatus(status).value)
    if priority:
        query = query.filter(DesignTask.priority == TaskPriority(priority).value)
    if assigned_to:
        query = query.filter(DesignTask.assigned_to == assigned_to)
    if created_by:
        query = query.filter(DesignTask.created_by == created_by)

    total = query.count()
    tasks = (
        query.order_by(
            (DesignTask.priority == TaskPriority.URGENT.value).desc(),
            DesignTask.created_at.asc(),
        )
        .offset(pagination.offset)
        .limit(pagination.per_page)
        .all()
    )
    return tasks, total


# =============================================================================
# Mutations (flush only - callers own the transaction)
# =============================================================================


def apply_status(
    db: Session,
    task: DesignTask,
    new_status: TaskStatus,
    user_id: UUID | None,
    action: TaskHistoryAction = TaskHistoryAction.STATUS_CHANGED,
    notes: str | None = None,
) -> DesignTask:
    """Set the task status and record old/new status in history."""
    new_status = TaskStatus(new_status)
    old_status = task.status
    now = utcnow()

    task.status = new_status.value
    task.status_changed_at = now
    if new_status == TaskStatus.COMPLETED:
        task.completed_at = now
    db.flush()

    task_history_service.log_history(
        db,
        task_id=task.id,
        action=action,
        user_id=user_id,
        old_status=old_status,
        new_status=new_status.value,
        notes=notes,
    )
    return task


def soft_delete(
    db: Session,
    task: DesignTask,
    user_id: UUID | None,
    notes: str | None = None,
) -> DesignTask:
    """Tombstone the task. It stays in the table but leaves every listing."""
    task.deleted_at = utcnow()
    db.flush()
    task_history_service.log_history(
        db,
        task_id=task.id,
        action=TaskHistoryAction.DELETED,
        user_id=user_id,
        old_status=task.status,
        notes=notes,
    )
    return task


def set_priority(
    db: Session,
    task: DesignTask,
    priority: TaskPriority,
    user_id: UUID | None,
    notes: str | None = None,
) -> DesignTask:
    priority = TaskPriority(priority)
    task.priority = priority.value
    db.flush()
    task_history_service.log_history(
        db,
        task_id=task.id,
        action=TaskHistoryAction.PRIORITY_CHANGED,
        user_id=user_id,
        notes=notes,
    )
    return task


# =============================================================================
# Endpoint operations (commit)
# =============================================================================


def update_task_status(
    db: Session,
    task_id: UUID,
    new_status: str,
    user_id: UUID,
) -> DesignTask:
    """
    Move a task to another kanban column.

    Raises:
        InvalidRequestError: unknown status, or status unchanged
        TargetNotFoundError: task missing or deleted
    """
    try:
        status = TaskStatus(new_status)
    except ValueError:
        raise InvalidRequestError(f"Unknown task status '{new_status}'")

    task = require_task(db, task_id)
    if task.status == status.value:
        raise InvalidRequestError(f"Task is already {status.value}")

    try:
        apply_status(db, task, status, user_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(task)
    logger.info("Task %s moved to %s", task.id, status.value)
    return task
