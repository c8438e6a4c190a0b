"""Design task schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from uniform_admin.db.enums import RejectionReasonType, TaskStatus


class TaskRead(BaseModel):
    id: UUID
    order_id: UUID
    lead_id: UUID | None
    campaign_id: UUID | None
    customer_id: UUID | None
    status: str
    priority: str
    assigned_to: UUID | None
    assigned_at: datetime | None
    created_by: UUID | None
    created_by_salesperson: bool
    returned_from_rejection: bool
    status_changed_at: datetime | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskListResponse(BaseModel):
    items: list[TaskRead]
    total: int
    page: int
    per_page: int
    pages: int


class TaskHistoryRead(BaseModel):
    id: UUID
    task_id: UUID
    user_id: UUID | None
    action: str
    old_status: str | None
    new_status: str | None
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class TaskDetail(TaskRead):
    history: list[TaskHistoryRead] = Field(default_factory=list)


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class DesignerRejectionCreate(BaseModel):
    reason_type: RejectionReasonType
    reason_text: str | None = Field(None, max_length=2000)
    return_for_correction: bool = True


class TaskRejectionRead(BaseModel):
    id: UUID
    task_id: UUID
    rejected_by: UUID | None
    reason_type: str
    reason_text: str | None
    resolved: bool
    resolved_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ReturnedTaskRead(BaseModel):
    task: TaskRead
    customer_name: str | None
    rejection: TaskRejectionRead | None
    reason_label: str | None = None
