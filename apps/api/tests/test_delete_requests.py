"""Task delete requests."""
import pytest

from uniform_admin.db.enums import NotificationType, RequestStatus, TaskHistoryAction
from uniform_admin.db.models import DesignTask, DesignTaskHistory, Notification
from uniform_admin.services import delete_request_service, task_service
from uniform_admin.services.approval_service import (
    DuplicatePendingRequestError,
    InvalidRequestError,
    TargetNotFoundError,
)

from helpers import seed_delete_request


def test_approve_soft_deletes_and_logs_reason(db, salesperson, test_user, task):
    request = seed_delete_request(db, salesperson, task, reason="Customer cancelled")

    delete_request_service.approve(db, request.id, test_user.id)

    stored = db.get(DesignTask, task.id)
    assert stored.deleted_at is not None
    assert task_service.get_task(db, task.id) is None
    assert task_service.get_task(db, task.id, include_deleted=True) is not None

    history = db.query(DesignTaskHistory).filter(DesignTaskHistory.task_id == task.id).one()
    assert history.action == TaskHistoryAction.DELETED.value
    assert "Customer cancelled" in history.notes

    notification = db.query(Notification).one()
    assert notification.type == NotificationType.DELETE_APPROVED.value
    assert notification.user_id == salesperson.id
    assert notification.customer_name == "Acme FC"


def test_deleted_task_leaves_active_listing(db, salesperson, test_user, task):
    request = seed_delete_request(db, salesperson, task)
    delete_request_service.approve(db, request.id, test_user.id)

    tasks, total = task_service.list_active_tasks(db)
    assert total == 0
    assert tasks == []


def test_reject_keeps_task_and_reports_reason(db, salesperson, test_user, task):
    request = seed_delete_request(db, salesperson, task)

    resolved = delete_request_service.reject(db, request.id, test_user.id, "task already in production")

    assert resolved.status == RequestStatus.REJECTED.value
    assert db.get(DesignTask, task.id).deleted_at is None
    assert db.query(DesignTaskHistory).count() == 0

    notification = db.query(Notification).one()
    assert notification.type == NotificationType.DELETE_REJECTED.value
    assert "Reason: task already in production" in notification.message


def test_submit_rejects_duplicate_pending(db, salesperson, task):
    delete_request_service.submit_request(db, salesperson.id, task.id, "Duplicate")

    with pytest.raises(DuplicatePendingRequestError):
        delete_request_service.submit_request(db, salesperson.id, task.id, "Duplicate again")


def test_submit_allowed_again_after_rejection(db, salesperson, test_user, task):
    first = delete_request_service.submit_request(db, salesperson.id, task.id, "Duplicate")
    delete_request_service.reject(db, first.id, test_user.id, "No")

    second = delete_request_service.submit_request(db, salesperson.id, task.id, "Really a duplicate")
    assert second.status == RequestStatus.PENDING.value


def test_submit_on_deleted_task_is_refused(db, salesperson, test_user, task):
    request = seed_delete_request(db, salesperson, task)
    delete_request_service.approve(db, request.id, test_user.id)

    with pytest.raises(TargetNotFoundError):
        delete_request_service.submit_request(db, salesperson.id, task.id, "Again")


def test_submit_needs_reason(db, salesperson, task):
    with pytest.raises(InvalidRequestError):
        delete_request_service.submit_request(db, salesperson.id, task.id, "   ")


def test_approve_after_task_was_deleted_elsewhere(db, salesperson, test_user, task):
    request = seed_delete_request(db, salesperson, task)
    task_service.soft_delete(db, task, test_user.id)
    db.commit()

    with pytest.raises(TargetNotFoundError, match="was deleted"):
        delete_request_service.approve(db, request.id, test_user.id)

    assert delete_request_service.enrich(db, [request])[0]["task_deleted"] is True
