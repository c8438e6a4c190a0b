"""Notification-related enums."""

from enum import Enum


class NotificationType(str, Enum):
    """Types of in-app notifications."""

    # Urgent order requests
    URGENT_APPROVED = "urgent_approved"
    URGENT_REJECTED = "urgent_rejected"

    # Task delete requests
    DELETE_APPROVED = "delete_approved"
    DELETE_REJECTED = "delete_rejected"

    # Modification requests
    MODIFICATION_APPROVED = "modification_approved"
    MODIFICATION_REJECTED = "modification_rejected"

    # Priority change requests
    PRIORITY_CHANGE_APPROVED = "priority_change_approved"
    PRIORITY_CHANGE_REJECTED = "priority_change_rejected"

    # Customer delete requests
    CUSTOMER_DELETE_APPROVED = "customer_delete_approved"
    CUSTOMER_DELETE_REJECTED = "customer_delete_rejected"

    # Designer returned a task to the salesperson
    TASK_RETURNED = "task_returned"
    TASK_REJECTED = "task_rejected"
