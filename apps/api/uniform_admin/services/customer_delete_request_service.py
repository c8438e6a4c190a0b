"""Customer delete requests - approval deactivates the customer."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from uniform_admin.db.enums import NotificationType, RequestKind, RequestStatus, ReviewDecision
from uniform_admin.db.models import Customer, PendingCustomerDeleteRequest
from uniform_admin.services import approval_service, notification_service
from uniform_admin.services.approval_service import (
    DuplicatePendingRequestError,
    InvalidRequestError,
    TargetNotFoundError,
)

logger = logging.getLogger(__name__)

KIND = RequestKind.CUSTOMER_DELETE


def get_active_customer(db: Session, customer_id: UUID) -> Customer | None:
    return db.query(Customer).filter(
        Customer.id == customer_id,
        Customer.is_active.is_(True),
    ).first()


def submit_request(
    db: Session,
    requested_by: UUID,
    customer_id: UUID,
    reason: str,
) -> PendingCustomerDeleteRequest:
    reason = (reason or "").strip()
    if not reason:
        raise InvalidRequestError("A reason is required")

    if not get_active_customer(db, customer_id):
        raise TargetNotFoundError(f"Customer {customer_id} not found")

    existing = db.query(PendingCustomerDeleteRequest).filter(
        PendingCustomerDeleteRequest.customer_id == customer_id,
        PendingCustomerDeleteRequest.status == RequestStatus.PENDING.value,
    ).first()
    if existing:
        raise DuplicatePendingRequestError(
            "A delete request for this customer is already pending"
        )

    request = PendingCustomerDeleteRequest(
        requested_by=requested_by,
        customer_id=customer_id,
        reason=reason,
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info("Customer delete request %s submitted", request.id)
    return request


def approve(
    db: Session,
    request_id: UUID,
    reviewer_id: UUID,
    expected_version: int | None = None,
) -> PendingCustomerDeleteRequest:
    """Approve: customer.is_active = false. Customers are never hard-deleted."""

    def apply(request: PendingCustomerDeleteRequest) -> None:
        customer = get_active_customer(db, request.customer_id)
        if not customer:
            raise TargetNotFoundError(f"Customer {request.customer_id} not found")

        customer.is_active = False
        db.flush()

        notification_service.create_notification(
            db,
            user_id=request.requested_by,
            type=NotificationType.CUSTOMER_DELETE_APPROVED,
            title="Customer deletion approved",
            message=f"Your request to delete customer {customer.name} was approved.",
            customer_name=customer.name,
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
) -> PendingCustomerDeleteRequest:
    def apply(request: PendingCustomerDeleteRequest) -> None:
        customer = db.get(Customer, request.customer_id)
        customer_name = customer.name if customer else None
        notification_service.create_notification(
            db,
            user_id=request.requested_by,
            type=NotificationType.CUSTOMER_DELETE_REJECTED,
            title="Customer deletion rejected",
            message=(
                f"Your request to delete customer {customer_name} was rejected. "
                f"Reason: {request.rejection_reason}"
            ),
            customer_name=customer_name,
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


def enrich(db: Session, requests: list[PendingCustomerDeleteRequest]) -> list[dict]:
    user_names = approval_service.get_users_for(db, requests)
    customer_ids = {r.customer_id for r in requests}
    customers = {
        c.id: c for c in db.query(Customer).filter(Customer.id.in_(customer_ids)).all()
    }

    items = []
    for request in requests:
        customer = customers.get(request.customer_id)
        items.append(
            {
                **approval_service.request_fields(request, user_names),
                "customer_name": customer.name if customer else None,
                "campaign_name": None,
                "customer_id": request.customer_id,
                "customer_phone": customer.phone if customer else None,
                "customer_email": customer.email if customer else None,
                "reason": request.reason,
            }
        )
    return items
