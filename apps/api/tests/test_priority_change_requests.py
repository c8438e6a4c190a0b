"""Priority change requests."""
import pytest
from sqlalchemy import event

from uniform_admin.db.enums import NotificationType, RequestKind, TaskHistoryAction, TaskPriority
from uniform_admin.db.models import DesignTask, DesignTaskHistory, Notification
from uniform_admin.db.session import engine
from uniform_admin.services import approval_service, priority_change_request_service, task_service
from uniform_admin.services.approval_service import (
    DuplicatePendingRequestError,
    InvalidRequestError,
    TargetNotFoundError,
)

from helpers import seed_priority_change_request, seed_task


def test_approve_sets_priority_and_names_both_labels(db, salesperson, test_user, task):
    request = seed_priority_change_request(db, salesperson, task, requested=TaskPriority.URGENT)

    priority_change_request_service.approve(db, request.id, test_user.id)

    assert db.get(DesignTask, task.id).priority == TaskPriority.URGENT.value
    history = db.query(DesignTaskHistory).filter(DesignTaskHistory.task_id == task.id).one()
    assert history.action == TaskHistoryAction.PRIORITY_CHANGED.value
    assert "Normal" in history.notes
    assert "Urgent" in history.notes

    notification = db.query(Notification).one()
    assert notification.type == NotificationType.PRIORITY_CHANGE_APPROVED.value


def test_reject_keeps_priority(db, salesperson, test_user, task):
    request = seed_priority_change_request(db, salesperson, task)

    priority_change_request_service.reject(db, request.id, test_user.id, "Not justified")

    assert db.get(DesignTask, task.id).priority == TaskPriority.NORMAL.value
    assert "Reason: Not justified" in db.query(Notification).one().message


def test_submit_refuses_second_pending_request(db, salesperson, task):
    priority_change_request_service.submit_request(
        db, salesperson.id, task.id, "urgent", urgent_reason_text="Event moved"
    )

    with pytest.raises(DuplicatePendingRequestError):
        priority_change_request_service.submit_request(
            db, salesperson.id, task.id, "urgent", urgent_reason_text="Event moved"
        )


def test_submit_refuses_unchanged_priority(db, salesperson, task):
    with pytest.raises(InvalidRequestError):
        priority_change_request_service.submit_request(db, salesperson.id, task.id, "normal")


def test_urgent_needs_reason(db, salesperson, task):
    with pytest.raises(InvalidRequestError):
        priority_change_request_service.submit_request(db, salesperson.id, task.id, "urgent")


def test_urgent_with_picklist_reason(db, salesperson, task, urgent_reason):
    request = priority_change_request_service.submit_request(
        db, salesperson.id, task.id, "urgent", urgent_reason_id=urgent_reason.id
    )
    assert request.current_priority == "normal"
    assert request.urgent_reason_id == urgent_reason.id


def test_downgrade_needs_no_reason(db, salesperson):
    task = seed_task(db, created_by=salesperson, priority=TaskPriority.URGENT)

    request = priority_change_request_service.submit_request(db, salesperson.id, task.id, "normal")
    assert request.requested_priority == "normal"


def test_enrichment_query_count_does_not_grow_with_page(db, salesperson, test_user, urgent_reason):
    def count_queries(n):
        for i in range(n):
            task = seed_task(db, created_by=salesperson, customer_name=f"Team {n}-{i}")
            seed_priority_change_request(db, salesperson, task)
        requests, _ = approval_service.get_pending_requests(db, RequestKind.PRIORITY_CHANGE)

        statements = []

        def record(conn, cursor, statement, *args):
            statements.append(statement)

        event.listen(engine, "before_cursor_execute", record)
        try:
            items = approval_service.enrich_requests(db, RequestKind.PRIORITY_CHANGE, requests)
        finally:
            event.remove(engine, "before_cursor_execute", record)
        return items, len(statements)

    small_items, small_count = count_queries(2)
    large_items, large_count = count_queries(6)

    assert len(large_items) == 8
    assert large_count == small_count
    item = large_items[0]
    assert item["customer_name"].startswith("Team ")
    assert item["campaign_name"] is None
    assert item["requester_name"] == "Sam Seller"
    assert item["current_priority_label"] == "Normal"
    assert item["requested_priority_label"] == "Urgent"


def test_approve_on_deleted_task_names_the_deletion(db, salesperson, test_user, task):
    request = seed_priority_change_request(db, salesperson, task)
    task_service.soft_delete(db, task, test_user.id)
    db.commit()

    with pytest.raises(TargetNotFoundError, match="was deleted"):
        priority_change_request_service.approve(db, request.id, test_user.id)

    assert db.get(DesignTask, task.id).priority == TaskPriority.NORMAL.value
