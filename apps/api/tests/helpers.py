"""Seed helpers shared by the tests."""
import uuid

from sqlalchemy.orm import Session

from uniform_admin.db.enums import TaskPriority, TaskStatus
from uniform_admin.db.models import (
    Campaign,
    Customer,
    DesignTask,
    Lead,
    PendingCustomerDeleteRequest,
    PendingDeleteRequest,
    PendingModificationRequest,
    PendingPriorityChangeRequest,
    PendingUrgentRequest,
    User,
)
from uniform_admin.services import order_service


def seed_task(
    db: Session,
    created_by: User | None = None,
    customer_name: str = "Acme FC",
    status: TaskStatus = TaskStatus.PENDING,
    priority: TaskPriority = TaskPriority.NORMAL,
    campaign: Campaign | None = None,
    with_lead: bool = True,
) -> DesignTask:
    """Create an order (and its task), optionally with a lead, and commit."""
    order = order_service.create_order(
        db,
        customer_name=customer_name,
        quantity=10,
        session_id=f"test-{uuid.uuid4().hex[:8]}",
        campaign_id=campaign.id if campaign else None,
    )
    task = order_service.get_task_for_order(db, order.id)
    if with_lead:
        lead = Lead(
            name=customer_name,
            order_id=order.id,
            session_id=order.session_id,
            completed=True,
            created_by=created_by.id if created_by else None,
            created_by_salesperson=created_by is not None,
            salesperson_status="sent_to_designer",
        )
        db.add(lead)
        db.flush()
        task.lead_id = lead.id
    task.status = status.value
    task.priority = priority.value
    task.created_by = created_by.id if created_by else None
    db.commit()
    return task



def urgent_payload(customer_name: str = "Jane Doe", quantity: int = 25, campaign_id=None) -> dict:
    return {
        "customer": {"name": customer_name, "phone": "555-0100", "email": "jane@example.com"},
        "quantity": quantity,
        "model": {"id": "model-classic", "name": "Classic Jersey"},
        "customization": {"color": "navy", "number": "10"},
        "campaign_id": str(campaign_id) if campaign_id else None,
        "has_logo": False,
        "logo_url": None,
    }


def seed_urgent_request(db: Session, requester: User, **overrides) -> PendingUrgentRequest:
    request = PendingUrgentRequest(
        requested_by=requester.id,
        request_data=overrides.pop("request_data", urgent_payload()),
        requested_priority=overrides.pop("requested_priority", TaskPriority.URGENT.value),
        urgent_reason_text=overrides.pop("urgent_reason_text", "Tournament next week"),
        **overrides,
    )
    db.add(request)
    db.commit()
    return request


def seed_delete_request(db: Session, requester: User, task: DesignTask, reason: str = "Duplicate order") -> PendingDeleteRequest:
    request = PendingDeleteRequest(requested_by=requester.id, task_id=task.id, reason=reason)
    db.add(request)
    db.commit()
    return request


def seed_modification_request(
    db: Session,
    requester: User,
    task: DesignTask,
    description: str = "Change the collar to white",
    attachments: list | None = None,
) -> PendingModificationRequest:
    request = PendingModificationRequest(
        requested_by=requester.id,
        task_id=task.id,
        description=description,
        attachments=attachments or [],
    )
    db.add(request)
    db.commit()
    return request


def seed_priority_change_request(
    db: Session,
    requester: User,
    task: DesignTask,
    requested: TaskPriority = TaskPriority.URGENT,
) -> PendingPriorityChangeRequest:
    request = PendingPriorityChangeRequest(
        requested_by=requester.id,
        task_id=task.id,
        current_priority=task.priority,
        requested_priority=requested.value,
        urgent_reason_text="Customer event moved up",
    )
    db.add(request)
    db.commit()
    return request


def seed_customer_delete_request(
    db: Session,
    requester: User,
    customer: Customer,
    reason: str = "Customer asked to be removed",
) -> PendingCustomerDeleteRequest:
    request = PendingCustomerDeleteRequest(
        requested_by=requester.id,
        customer_id=customer.id,
        reason=reason,
    )
    db.add(request)
    db.commit()
    return request
