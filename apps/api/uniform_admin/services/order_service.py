"""Orders and leads as far as the approval workflow creates them."""

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from uniform_admin.db.enums import TaskPriority, TaskStatus
from uniform_admin.db.models import DesignTask, Lead, Order


def create_order(
    db: Session,
    customer_name: str,
    quantity: int,
    session_id: str,
    campaign_id: UUID | None = None,
    model_id: str | None = None,
    customer_phone: str | None = None,
    customer_email: str | None = None,
    customization_data: dict[str, Any] | None = None,
) -> Order:
    """
    Create an order together with its design task.

    Every order owns exactly one task, born pending/normal. Callers that
    need a different priority or lead adjust the task afterwards.
    """
    order = Order(
        campaign_id=campaign_id,
        model_id=model_id,
        customer_name=customer_name,
        customer_phone=customer_phone,
        customer_email=customer_email,
        quantity=quantity,
        customization_data=customization_data or {},
        session_id=session_id,
    )
    db.add(order)
    db.flush()

    task = DesignTask(
        order_id=order.id,
        campaign_id=campaign_id,
        status=TaskStatus.PENDING.value,
        priority=TaskPriority.NORMAL.value,
    )
    db.add(task)
    db.flush()
    return order


def create_lead(
    db: Session,
    name: str,
    session_id: str,
    order_id: UUID | None = None,
    campaign_id: UUID | None = None,
    phone: str | None = None,
    email: str | None = None,
    quantity: str | None = None,
    customization_summary: dict[str, Any] | None = None,
    needs_logo: bool = False,
    uploaded_logo_url: str | None = None,
    completed: bool = False,
    created_by: UUID | None = None,
    created_by_salesperson: bool = False,
) -> Lead:
    lead = Lead(
        campaign_id=campaign_id,
        name=name,
        phone=phone,
        email=email,
        quantity=quantity,
        customization_summary=customization_summary,
        needs_logo=needs_logo,
        uploaded_logo_url=uploaded_logo_url,
        order_id=order_id,
        session_id=session_id,
        completed=completed,
        created_by=created_by,
        created_by_salesperson=created_by_salesperson,
    )
    db.add(lead)
    db.flush()
    return lead


def get_task_for_order(db: Session, order_id: UUID) -> DesignTask | None:
    return db.query(DesignTask).filter(DesignTask.order_id == order_id).first()
