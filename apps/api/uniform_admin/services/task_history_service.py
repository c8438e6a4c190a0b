"""Design task history - append-only audit trail."""

from uuid import UUID

from sqlalchemy.orm import Session

from uniform_admin.db.enums import TaskHistoryAction
from uniform_admin.db.models import DesignTaskHistory


def log_history(
    db: Session,
    task_id: UUID,
    action: TaskHistoryAction,
    user_id: UUID | None = None,
    old_status: str | None = None,
    new_status: str | None = None,
    notes: str | None = None,
) -> DesignTaskHistory:
    """
    Append a history entry for a task.

    Args:
        db: Database session
        task_id: The task this entry is for
        action: What happened (from TaskHistoryAction enum)
        user_id: User who performed the action (None for system)
        old_status: Status before the action, when it changed one
        new_status: Status after the action
        notes: Human-readable detail

    Returns:
        The created history entry
    """
    entry = DesignTaskHistory(
        task_id=task_id,
        user_id=user_id,
        action=TaskHistoryAction(action).value,
        old_status=old_status,
        new_status=new_status,
        notes=notes,
    )
    db.add(entry)
    db.flush()  # Don't commit - let caller control transaction
    return entry


def get_task_history(db: Session, task_id: UUID) -> list[DesignTaskHistory]:
    """History of a task, oldest first."""
    return (
        db.query(DesignTaskHistory)
        .filter(DesignTaskHistory.task_id == task_id)
        .order_by(DesignTaskHistory.created_at.asc())
        .all()
    )
