"""Customer delete requests deactivate, never hard-delete."""
import pytest

from uniform_admin.db.enums import NotificationType, RequestStatus
from uniform_admin.db.models import Customer, Notification
from uniform_admin.services import customer_delete_request_service
from uniform_admin.services.approval_service import (
    DuplicatePendingRequestError,
    TargetNotFoundError,
)

from helpers import seed_customer_delete_request


def test_approve_deactivates_customer(db, salesperson, test_user, customer):
    request = seed_customer_delete_request(db, salesperson, customer)

    customer_delete_request_service.approve(db, request.id, test_user.id)

    stored = db.get(Customer, customer.id)
    assert stored is not None
    assert stored.is_active is False
    notification = db.query(Notification).one()
    assert notification.type == NotificationType.CUSTOMER_DELETE_APPROVED.value
    assert notification.customer_name == "Jane Doe"


def test_reject_keeps_customer_active(db, salesperson, test_user, customer):
    request = seed_customer_delete_request(db, salesperson, customer)

    resolved = customer_delete_request_service.reject(db, request.id, test_user.id, "Has open orders")

    assert resolved.status == RequestStatus.REJECTED.value
    assert db.get(Customer, customer.id).is_active is True
    assert "Has open orders" in db.query(Notification).one().message


def test_submit_refuses_duplicate_and_inactive(db, salesperson, test_user, customer):
    request = customer_delete_request_service.submit_request(db, salesperson.id, customer.id, "Moved away")

    with pytest.raises(DuplicatePendingRequestError):
        customer_delete_request_service.submit_request(db, salesperson.id, customer.id, "Again")

    customer_delete_request_service.approve(db, request.id, test_user.id)
    with pytest.raises(TargetNotFoundError):
        customer_delete_request_service.submit_request(db, salesperson.id, customer.id, "Again")


def test_approve_fails_when_customer_already_inactive(db, salesperson, test_user, customer):
    request = seed_customer_delete_request(db, salesperson, customer)
    customer.is_active = False
    db.commit()

    with pytest.raises(TargetNotFoundError):
        customer_delete_request_service.approve(db, request.id, test_user.id)

    db.refresh(request)
    assert request.status == RequestStatus.PENDING.value
