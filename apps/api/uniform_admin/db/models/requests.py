"""
SQLAlchemy ORM models for reviewable change proposals.

Every variant shares the PendingRequestMixin lifecycle columns:
status starts at 'pending' and moves exactly once to 'approved' or
'rejected'. `version` is the optimistic-concurrency token the claim
update is conditioned on.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from uniform_admin.db.base import Base
from uniform_admin.db.types import JSONType, utcnow


def _lifecycle_constraints(table: str) -> tuple:
    return (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name=f"ck_{table}_status",
        ),
        CheckConstraint(
            "status <> 'rejected' OR rejection_reason IS NOT NULL",
            name=f"ck_{table}_rejection_reason",
        ),
        CheckConstraint(
            "(status = 'pending') = (reviewed_at IS NULL)",
            name=f"ck_{table}_reviewed",
        ),
        Index(f"idx_{table}_status", "status", "requested_at"),
    )


class PendingRequestMixin:
    """Columns shared by every pending_*_requests table."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    @declared_attr
    def requested_by(cls) -> Mapped[uuid.UUID | None]:
        return mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    requested_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default="pending", server_default="pending", nullable=False
    )

    # Review tracking (set iff status != pending)
    @declared_attr
    def reviewed_by(cls) -> Mapped[uuid.UUID | None]:
        return mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    reviewed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    version: Mapped[int] = mapped_column(
        Integer, default=1, server_default=text("1"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False
    )


class PendingUrgentRequest(PendingRequestMixin, Base):
    """
    A salesperson asking for an order to be created as urgent.

    There is no task yet: `request_data` carries the denormalized
    customer/quantity/model/customization payload the order is built from.
    """

    __tablename__ = "pending_urgent_requests"
    __table_args__ = _lifecycle_constraints("pending_urgent_requests")

    request_data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    requested_priority: Mapped[str] = mapped_column(String(20), nullable=False)
    final_priority: Mapped[str | None] = mapped_column(String(20), nullable=True)
    urgent_reason_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("urgent_reasons.id", ondelete="SET NULL"), nullable=True
    )
    urgent_reason_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_order_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True
    )
    created_task_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("design_tasks.id", ondelete="SET NULL"), nullable=True
    )


class PendingDeleteRequest(PendingRequestMixin, Base):
    """Request to soft-delete a design task."""

    __tablename__ = "pending_delete_requests"
    __table_args__ = _lifecycle_constraints("pending_delete_requests")

    task_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("design_tasks.id", ondelete="CASCADE"), nullable=False
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)


class PendingModificationRequest(PendingRequestMixin, Base):
    """Client-requested change to a task, with optional attachments [{name, url}]."""

    __tablename__ = "pending_modification_requests"
    __table_args__ = _lifecycle_constraints("pending_modification_requests")

    task_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("design_tasks.id", ondelete="CASCADE"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    attachments: Mapped[list[dict[str, str]]] = mapped_column(
        JSONType, nullable=False, default=list
    )


class PendingPriorityChangeRequest(PendingRequestMixin, Base):
    """Request to move a task from `current_priority` to `requested_priority`."""

    __tablename__ = "pending_priority_change_requests"
    __table_args__ = _lifecycle_constraints("pending_priority_change_requests") + (
        # One open priority request per task
        Index(
            "uq_pending_priority_change_per_task",
            "task_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    task_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("design_tasks.id", ondelete="CASCADE"), nullable=False
    )
    current_priority: Mapped[str] = mapped_column(String(20), nullable=False)
    requested_priority: Mapped[str] = mapped_column(String(20), nullable=False)
    urgent_reason_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("urgent_reasons.id", ondelete="SET NULL"), nullable=True
    )
    urgent_reason_text: Mapped[str | None] = mapped_column(Text, nullable=True)


class PendingCustomerDeleteRequest(PendingRequestMixin, Base):
    """Request to deactivate a customer record."""

    __tablename__ = "pending_customer_delete_requests"
    __table_args__ = _lifecycle_constraints("pending_customer_delete_requests")

    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
