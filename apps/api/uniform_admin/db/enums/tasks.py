"""Design-task enums."""

from enum import Enum


class TaskStatus(str, Enum):
    """Kanban columns of a design task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    AWAITING_APPROVAL = "awaiting_approval"
    APPROVED = "approved"
    CHANGES_REQUESTED = "changes_requested"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Priority is an attribute of the task, not a status."""

    NORMAL = "normal"
    URGENT = "urgent"

    @property
    def label(self) -> str:
        return PRIORITY_LABELS[self]


PRIORITY_LABELS = {
    TaskPriority.NORMAL: "Normal",
    TaskPriority.URGENT: "Urgent",
}


class TaskHistoryAction(str, Enum):
    """Actions recorded in design_task_history."""

    CREATED = "created"
    STATUS_CHANGED = "status_changed"
    DELETED = "deleted"
    MODIFICATION_APPROVED = "modification_approved"
    PRIORITY_CHANGED = "priority_changed"
    TASK_ASSIGNED = "task_assigned"
    TASK_RETURNED_FOR_CORRECTION = "task_returned_for_correction"
    TASK_REJECTED = "task_rejected"
    RESENT_TO_DESIGNER = "resent_to_designer"


class RejectionReasonType(str, Enum):
    """Why a designer sent a task back."""

    LOW_QUALITY_LOGO = "low_quality_logo"
    MISSING_LOGO = "missing_logo"
    MISSING_INFO = "missing_info"
    INCOMPLETE_SPECS = "incomplete_specs"
    WRONG_FORMAT = "wrong_format"
    OTHER = "other"

    @property
    def label(self) -> str:
        return REJECTION_REASON_LABELS[self]


REJECTION_REASON_LABELS = {
    RejectionReasonType.LOW_QUALITY_LOGO: "Low quality logo",
    RejectionReasonType.MISSING_LOGO: "Logo missing or incomplete",
    RejectionReasonType.MISSING_INFO: "Order is missing information",
    RejectionReasonType.INCOMPLETE_SPECS: "Incomplete specifications",
    RejectionReasonType.WRONG_FORMAT: "Wrong file format",
    RejectionReasonType.OTHER: "Other reason",
}


class SalespersonStatus(str, Enum):
    """Lead-side view of where the salesperson's task is."""

    SENT_TO_DESIGNER = "sent_to_designer"
    REJECTED_BY_DESIGNER = "rejected_by_designer"
