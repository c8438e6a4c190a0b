"""Designer returns a task; the salesperson resends it."""
import pytest

from uniform_admin.db.enums import (
    NotificationType,
    SalespersonStatus,
    TaskHistoryAction,
    TaskStatus,
)
from uniform_admin.db.models import DesignTask, DesignTaskHistory, Lead, Notification, TaskRejection
from uniform_admin.services import returned_task_service
from uniform_admin.services.approval_service import InvalidRequestError, PermissionDeniedError

from helpers import seed_task


def _history_actions(db, task_id):
    rows = (
        db.query(DesignTaskHistory)
        .filter(DesignTaskHistory.task_id == task_id)
        .order_by(DesignTaskHistory.created_at.asc())
        .all()
    )
    return {row.action for row in rows}


def test_return_for_correction_assigns_unassigned_task(db, salesperson, designer):
    task = seed_task(db, created_by=salesperson, status=TaskStatus.IN_PROGRESS)

    returned_task_service.reject_task(db, task.id, designer.id, "low_quality_logo")

    stored = db.get(DesignTask, task.id)
    assert stored.assigned_to == designer.id
    assert stored.status == TaskStatus.PENDING.value
    assert stored.returned_from_rejection is False
    assert _history_actions(db, task.id) == {
        TaskHistoryAction.TASK_ASSIGNED.value,
        TaskHistoryAction.TASK_RETURNED_FOR_CORRECTION.value,
    }
    assert db.get(Lead, task.lead_id).salesperson_status == SalespersonStatus.REJECTED_BY_DESIGNER.value

    notification = db.query(Notification).one()
    assert notification.user_id == salesperson.id
    assert notification.type == NotificationType.TASK_RETURNED.value


def test_definitive_rejection_unassigns(db, salesperson, designer):
    task = seed_task(db, created_by=salesperson)
    task.assigned_to = designer.id
    db.commit()

    returned_task_service.reject_task(
        db, task.id, designer.id, "missing_info", return_for_correction=False
    )

    stored = db.get(DesignTask, task.id)
    assert stored.assigned_to is None
    assert _history_actions(db, task.id) == {TaskHistoryAction.TASK_REJECTED.value}
    assert db.query(Notification).one().type == NotificationType.TASK_REJECTED.value


def test_other_reason_needs_text(db, salesperson, designer, task):
    with pytest.raises(InvalidRequestError):
        returned_task_service.reject_task(db, task.id, designer.id, "other", "  ")

    rejection = returned_task_service.reject_task(
        db, task.id, designer.id, "other", "Wrong sport"
    )
    assert rejection.reason_text == "Wrong sport"


def test_unknown_reason_type(db, designer, task):
    with pytest.raises(InvalidRequestError):
        returned_task_service.reject_task(db, task.id, designer.id, "bad_vibes")


def test_listing_is_scoped_to_creator(db, salesperson, designer, test_user):
    mine = seed_task(db, created_by=salesperson, customer_name="Mine FC")
    other = seed_task(db, created_by=test_user, customer_name="Other FC")
    seed_task(db, created_by=salesperson, customer_name="Untouched FC")
    returned_task_service.reject_task(db, mine.id, designer.id, "missing_logo")
    returned_task_service.reject_task(db, other.id, designer.id, "missing_logo")

    own = returned_task_service.list_returned_tasks(db, salesperson.id)
    assert [r.task.id for r in own] == [mine.id]
    assert own[0].customer_name == "Mine FC"
    assert own[0].rejection.reason_type == "missing_logo"

    everyone = returned_task_service.list_returned_tasks(db, test_user.id, elevated=True)
    assert {r.task.id for r in everyone} == {mine.id, other.id}


def test_resend_resolves_rejection_without_notifying(db, salesperson, designer, task):
    rejection = returned_task_service.reject_task(db, task.id, designer.id, "missing_logo")
    notifications_before = db.query(Notification).count()

    returned_task_service.resend_to_designer(db, task.id, salesperson.id)

    db.refresh(rejection)
    assert rejection.resolved is True
    assert rejection.resolved_by == salesperson.id
    lead = db.get(Lead, task.lead_id)
    assert lead.salesperson_status == SalespersonStatus.SENT_TO_DESIGNER.value
    assert lead.needs_logo is False
    assert db.get(DesignTask, task.id).returned_from_rejection is True
    assert TaskHistoryAction.RESENT_TO_DESIGNER.value in _history_actions(db, task.id)
    assert db.query(Notification).count() == notifications_before
    assert returned_task_service.list_returned_tasks(db, salesperson.id) == []


def test_resend_by_other_salesperson_is_denied(db, salesperson, designer, task):
    returned_task_service.reject_task(db, task.id, designer.id, "missing_logo")

    with pytest.raises(PermissionDeniedError):
        returned_task_service.resend_to_designer(db, task.id, designer.id)

    returned_task_service.resend_to_designer(db, task.id, designer.id, elevated=True)
    assert db.query(TaskRejection).filter(TaskRejection.resolved.is_(False)).count() == 0


def test_resend_requires_returned_task(db, salesperson, task):
    with pytest.raises(InvalidRequestError):
        returned_task_service.resend_to_designer(db, task.id, salesperson.id)
