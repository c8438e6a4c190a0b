"""Pending request enums."""

from enum import Enum


class RequestStatus(str, Enum):
    """Lifecycle of a pending request. Both terminal states are absorbing."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class RequestKind(str, Enum):
    """Request variants, as used in /approvals/{kind} URLs."""

    URGENT = "urgent"
    DELETE = "delete"
    MODIFICATION = "modification"
    PRIORITY_CHANGE = "priority-change"
    CUSTOMER_DELETE = "customer-delete"
