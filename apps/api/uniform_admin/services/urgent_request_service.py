"""
Urgent order requests.

A salesperson asks for an order to be created with urgent priority. The
order does not exist yet; approval builds the order, its lead and task
from the request payload.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from uniform_admin.db.enums import (
    NotificationType,
    RequestKind,
    ReviewDecision,
    TaskHistoryAction,
    TaskPriority,
)
from uniform_admin.db.models import PendingUrgentRequest
from uniform_admin.services import (
    approval_service,
    notification_service,
    order_service,
    task_history_service,
)
from uniform_admin.services.approval_service import InvalidRequestError, TargetNotFoundError

logger = logging.getLogger(__name__)

KIND = RequestKind.URGENT


def _parse_priority(value) -> TaskPriority:
    try:
        return TaskPriority(value)
    except ValueError:
        raise InvalidRequestError(f"Unknown priority '{value}'")


def _parse_uuid(value) -> UUID | None:
    if not value:
        return None
    try:
        return UUID(str(value))
    except ValueError:
        raise InvalidRequestError(f"Invalid id '{value}'")


def _validate_request_data(request_data: dict) -> dict:
    customer = request_data.get("customer") or {}
    if not (customer.get("name") or "").strip():
        raise InvalidRequestError("Customer name is required")
    try:
        quantity = int(request_data.get("quantity"))
    except (TypeError, ValueError):
        raise InvalidRequestError("Quantity must be a number")
    if quantity < 1:
        raise InvalidRequestError("Quantity must be at least 1")
    return {**request_data, "quantity": quantity}


def submit_request(
    db: Session,
    requested_by: UUID,
    request_data: dict,
    requested_priority: str = TaskPriority.URGENT.value,
    urgent_reason_id: UUID | None = None,
    urgent_reason_text: str | None = None,
) -> PendingUrgentRequest:
    """Create a pending urgent order request."""
    request_data = _validate_request_data(request_data)
    priority = _parse_priority(requested_priority)
    if priority == TaskPriority.URGENT:
        approval_service.validate_urgent_reason(db, urgent_reason_id, urgent_reason_text)

    request = PendingUrgentRequest(
        requested_by=requested_by,
        request_data=request_data,
        requested_priority=priority.value,
        urgent_reason_id=urgent_reason_id,
        urgent_reason_text=(urgent_reason_text or "").strip() or None,
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info("Urgent request %s submitted", request.id)
    return request


def approve(
    db: Session,
    request_id: UUID,
    reviewer_id: UUID,
    final_priority: str | None = None,
    expected_version: int | None = None,
) -> PendingUrgentRequest:
    """
    Approve: create order (and its task), create the completed lead, then
    stamp the task with the lead and the final priority.

    `final_priority` defaults to the priority the salesperson asked for.
    """
    chosen = _parse_priority(final_priority) if final_priority else None

    def apply(request: PendingUrgentRequest) -> None:
        priority = chosen or _parse_priority(request.requested_priority)
        data = request.request_data or {}
        customer = data.get("customer") or {}
        model = data.get("model") or {}
        campaign_id = _parse_uuid(data.get("campaign_id"))
        session_id = f"urgent-{request.id}"

        order = order_service.create_order(
            db,
            campaign_id=campaign_id,
            model_id=model.get("id"),
            customer_name=customer.get("name"),
            customer_phone=customer.get("phone"),
            customer_email=customer.get("email"),
            quantity=int(data.get("quantity")),
            customization_data=data.get("customization") or {},
            session_id=session_id,
        )
        lead = order_service.create_lead(
            db,
            campaign_id=campaign_id,
            name=customer.get("name"),
            phone=customer.get("phone"),
            email=customer.get("email"),
            quantity=str(data.get("quantity")),
            customization_summary=data.get("customization"),
            needs_logo=bool(data.get("has_logo")),
            uploaded_logo_url=data.get("logo_url"),
            order_id=order.id,
            session_id=session_id,
            completed=True,
            created_by=request.requested_by,
            created_by_salesperson=True,
        )

        task = order_service.get_task_for_order(db, order.id)
        if not task:
            raise TargetNotFoundError(f"No design task was created for order {order.id}")

        task.lead_id = lead.id
        task.priority = priority.value
        task.created_by = request.requested_by
        task.created_by_salesperson = True
        db.flush()

        task_history_service.log_history(
            db,
            task_id=task.id,
            action=TaskHistoryAction.CREATED,
            user_id=reviewer_id,
            new_status=task.status,
            notes=f"Created from approved urgent request ({priority.label})",
        )

        request.final_priority = priority.value
        request.created_order_id = order.id
        request.created_task_id = task.id
        db.flush()

        notification_service.create_notification(
            db,
            user_id=request.requested_by,
            type=NotificationType.URGENT_APPROVED,
            title="Urgent request approved",
            message=(
                f"Your request for {order.customer_name} was approved "
                f"with {priority.label} priority"
            ),
            customer_name=order.customer_name,
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
) -> PendingUrgentRequest:
    def apply(request: PendingUrgentRequest) -> None:
        customer_name = ((request.request_data or {}).get("customer") or {}).get("name")
        notification_service.create_notification(
            db,
            user_id=request.requested_by,
            type=NotificationType.URGENT_REJECTED,
            title="Urgent request rejected",
            message=f"Your request was rejected. Reason: {request.rejection_reason}",
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


def enrich(db: Session, requests: list[PendingUrgentRequest]) -> list[dict]:
    """Request rows plus requester, campaign and urgent reason labels."""
    user_names = approval_service.get_users_for(db, requests)
    campaign_names = approval_service.get_campaign_names(
        db, [_safe_uuid((r.request_data or {}).get("campaign_id")) for r in requests]
    )
    reason_labels = approval_service.get_urgent_reason_labels(
        db, [r.urgent_reason_id for r in requests]
    )

    items = []
    for request in requests:
        data = request.request_data or {}
        customer = data.get("customer") or {}
        items.append(
            {
                **approval_service.request_fields(request, user_names),
                "customer_name": customer.get("name"),
                "campaign_name": campaign_names.get(_safe_uuid(data.get("campaign_id"))),
                "request_data": data,
                "requested_priority": request.requested_priority,
                "final_priority": request.final_priority,
                "urgent_reason_id": request.urgent_reason_id,
                "urgent_reason_label": reason_labels.get(request.urgent_reason_id),
                "urgent_reason_text": request.urgent_reason_text,
                "created_order_id": request.created_order_id,
                "created_task_id": request.created_task_id,
            }
        )
    return items


def _safe_uuid(value) -> UUID | None:
    try:
        return _parse_uuid(value)
    except InvalidRequestError:
        return None
