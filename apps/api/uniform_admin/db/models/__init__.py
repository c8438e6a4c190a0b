"""SQLAlchemy ORM models - re-exported for convenient importing."""

from uniform_admin.db.models.auth import User
from uniform_admin.db.models.notifications import Notification
from uniform_admin.db.models.orders import Campaign, Customer, Lead, Order
from uniform_admin.db.models.requests import (
    PendingCustomerDeleteRequest,
    PendingDeleteRequest,
    PendingModificationRequest,
    PendingPriorityChangeRequest,
    PendingRequestMixin,
    PendingUrgentRequest,
)
from uniform_admin.db.models.tasks import (
    DesignTask,
    DesignTaskHistory,
    TaskRejection,
    UrgentReason,
)

__all__ = [
    "Campaign",
    "Customer",
    "DesignTask",
    "DesignTaskHistory",
    "Lead",
    "Notification",
    "Order",
    "PendingCustomerDeleteRequest",
    "PendingDeleteRequest",
    "PendingModificationRequest",
    "PendingPriorityChangeRequest",
    "PendingRequestMixin",
    "PendingUrgentRequest",
    "TaskRejection",
    "UrgentReason",
    "User",
]
