"""Enum definitions for application constants."""

from uniform_admin.db.enums.auth import Role
from uniform_admin.db.enums.notifications import NotificationType
from uniform_admin.db.enums.permissions import (
    ELEVATED_ROLES,
    ROLES_CAN_CHANGE_TASK_STATUS,
    ROLES_CAN_REJECT_TASKS,
    ROLES_CAN_REVIEW_REQUESTS,
    ROLES_CAN_SUBMIT_REQUESTS,
)
from uniform_admin.db.enums.requests import RequestKind, RequestStatus, ReviewDecision
from uniform_admin.db.enums.tasks import (
    PRIORITY_LABELS,
    REJECTION_REASON_LABELS,
    RejectionReasonType,
    SalespersonStatus,
    TaskHistoryAction,
    TaskPriority,
    TaskStatus,
)

__all__ = [
    "ELEVATED_ROLES",
    "NotificationType",
    "PRIORITY_LABELS",
    "REJECTION_REASON_LABELS",
    "ROLES_CAN_CHANGE_TASK_STATUS",
    "ROLES_CAN_REJECT_TASKS",
    "ROLES_CAN_REVIEW_REQUESTS",
    "ROLES_CAN_SUBMIT_REQUESTS",
    "RejectionReasonType",
    "RequestKind",
    "RequestStatus",
    "ReviewDecision",
    "Role",
    "SalespersonStatus",
    "TaskHistoryAction",
    "TaskPriority",
    "TaskStatus",
]
