"""Pydantic schemas for pending requests (submission and approval)."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from uniform_admin.db.enums import RequestKind, TaskPriority


# =============================================================================
# Submission
# =============================================================================


class CustomerInfo(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: str | None = None
    email: str | None = None


class ModelInfo(BaseModel):
    id: str | None = None
    name: str | None = None


class UrgentRequestData(BaseModel):
    """Order payload an urgent request is approved into."""

    customer: CustomerInfo
    quantity: int = Field(..., ge=1)
    model: ModelInfo | None = None
    customization: dict[str, Any] = Field(default_factory=dict)
    campaign_id: UUID | None = None
    has_logo: bool = False
    logo_url: str | None = None


class UrgentRequestCreate(BaseModel):
    request_data: UrgentRequestData
    requested_priority: TaskPriority = TaskPriority.URGENT
    urgent_reason_id: UUID | None = None
    urgent_reason_text: str | None = Field(None, max_length=2000)


class DeleteRequestCreate(BaseModel):
    task_id: UUID
    reason: str = Field(..., min_length=1, max_length=2000)


class Attachment(BaseModel):
    name: str | None = None
    url: str = Field(..., min_length=1)


class ModificationRequestCreate(BaseModel):
    task_id: UUID
    description: str = Field(..., min_length=1, max_length=5000)
    attachments: list[Attachment] = Field(default_factory=list)


class PriorityChangeRequestCreate(BaseModel):
    task_id: UUID
    requested_priority: TaskPriority
    urgent_reason_id: UUID | None = None
    urgent_reason_text: str | None = Field(None, max_length=2000)


class CustomerDeleteRequestCreate(BaseModel):
    customer_id: UUID
    reason: str = Field(..., min_length=1, max_length=2000)


class RequestCreated(BaseModel):
    """Response for a submitted request."""

    id: UUID
    kind: RequestKind
    status: str
    requested_at: datetime
    version: int


# =============================================================================
# Review
# =============================================================================


class ApproveRequest(BaseModel):
    """
    Request body for approving.

    `final_priority` only applies to urgent requests. `version` is the
    version the reviewer saw; a mismatch answers 409.
    """

    final_priority: TaskPriority | None = None
    version: int | None = None


class RejectRequest(BaseModel):
    """Request body for rejecting. Blank reasons are refused by the service."""

    rejection_reason: str | None = None
    version: int | None = None


class RequestRead(BaseModel):
    """Common fields of every request kind, enriched with display names."""

    id: UUID
    status: str
    requested_by: UUID | None
    requested_at: datetime
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None
    version: int
    requester_name: str | None = None
    reviewer_name: str | None = None
    customer_name: str | None = None
    campaign_name: str | None = None


class UrgentRequestRead(RequestRead):
    request_data: dict[str, Any]
    requested_priority: str
    final_priority: str | None = None
    urgent_reason_id: UUID | None = None
    urgent_reason_label: str | None = None
    urgent_reason_text: str | None = None
    created_order_id: UUID | None = None
    created_task_id: UUID | None = None


class DeleteRequestRead(RequestRead):
    task_id: UUID
    task_status: str | None = None
    task_deleted: bool = False
    reason: str


class ModificationRequestRead(RequestRead):
    task_id: UUID
    task_status: str | None = None
    task_deleted: bool = False
    description: str
    attachments: list[dict[str, str]] = Field(default_factory=list)


class PriorityChangeRequestRead(RequestRead):
    task_id: UUID
    task_status: str | None = None
    task_deleted: bool = False
    current_priority: str
    requested_priority: str
    current_priority_label: str
    requested_priority_label: str
    urgent_reason_id: UUID | None = None
    urgent_reason_label: str | None = None
    urgent_reason_text: str | None = None


class CustomerDeleteRequestRead(RequestRead):
    customer_id: UUID
    customer_phone: str | None = None
    customer_email: str | None = None
    reason: str


REQUEST_READ_SCHEMAS: dict[RequestKind, type[RequestRead]] = {
    RequestKind.URGENT: UrgentRequestRead,
    RequestKind.DELETE: DeleteRequestRead,
    RequestKind.MODIFICATION: ModificationRequestRead,
    RequestKind.PRIORITY_CHANGE: PriorityChangeRequestRead,
    RequestKind.CUSTOMER_DELETE: CustomerDeleteRequestRead,
}


class RequestListResponse(BaseModel):
    """Paginated list of requests of one kind (items shaped per kind)."""

    kind: RequestKind
    items: list[dict[str, Any]]
    total: int
    page: int
    per_page: int
    pages: int

