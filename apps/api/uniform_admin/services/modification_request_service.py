"""
Modification requests.

Approval sends the task back to `changes_requested`, whatever column it
was in. Attachments are stored as [{name, url}] (https only, public hosts)
and can be downloaded through the API (see fetch_attachment).
"""

import logging
from dataclasses import dataclass
from uuid import UUID

import httpx
from sqlalchemy.orm import Session

from uniform_admin.core.config import settings
from uniform_admin.core.url_validation import validate_attachment_url
from uniform_admin.db.enums import (
    NotificationType,
    RequestKind,
    ReviewDecision,
    TaskHistoryAction,
    TaskStatus,
)
from uniform_admin.db.models import PendingModificationRequest
from uniform_admin.services import approval_service, notification_service, task_service
from uniform_admin.services.approval_service import (
    InvalidRequestError,
    PermissionDeniedError,
    RequestNotFoundError,
    TargetNotFoundError,
)

logger = logging.getLogger(__name__)

KIND = RequestKind.MODIFICATION


def _clean_attachments(attachments: list[dict] | None) -> list[dict[str, str]]:
    cleaned = []
    for attachment in attachments or []:
        try:
            url = validate_attachment_url(attachment.get("url") or "")
        except ValueError as e:
            raise InvalidRequestError(str(e))
        name = (attachment.get("name") or "").strip() or url.rsplit("/", 1)[-1]
        cleaned.append({"name": name, "url": url})
    return cleaned


def submit_request(
    db: Session,
    requested_by: UUID,
    task_id: UUID,
    description: str,
    attachments: list[dict] | None = None,
) -> PendingModificationRequest:
    """Ask for changes on a task."""
    description = (description or "").strip()
    if not description:
        raise InvalidRequestError("A description is required")

    task_service.require_task(db, task_id)

    request = PendingModificationRequest(
        requested_by=requested_by,
        task_id=task_id,
        description=description,
        attachments=_clean_attachments(attachments),
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info("Modification request %s submitted for task %s", request.id, task_id)
    return request


def approve(
    db: Session,
    request_id: UUID,
    reviewer_id: UUID,
    expected_version: int | None = None,
) -> PendingModificationRequest:
    """Approve: task -> changes_requested, history `modification_approved`, notify."""

    def apply(request: PendingModificationRequest) -> None:
        task = task_service.require_task(db, request.task_id)

        task_service.apply_status(
            db,
            task,
            TaskStatus.CHANGES_REQUESTED,
            reviewer_id,
            action=TaskHistoryAction.MODIFICATION_APPROVED,
            notes=f"Modification approved: {request.description}",
        )

        customer_name = approval_service.get_task_context(db, [task.id])[task.id]["customer_name"]
        notification_service.create_notification(
            db,
            user_id=request.requested_by,
            type=NotificationType.MODIFICATION_APPROVED,
            title="Modification request approved",
            message=(
                f"Your modification request for {customer_name} was approved. "
                "The task is back in review."
            ),
            customer_name=customer_name,
            task_id=task.id,
        )

    return approval_service.resolve_request(
        db,
        KIND,
        request_id,
        reviewer_id,
        ReviewDecision.APPROVE,
        on_approve=apply,
        expected_version=expected_version,
    )


def reject(
    db: Session,
    request_id: UUID,
    reviewer_id: UUID,
    reason: str | None,
    expected_version: int | None = None,
) -> PendingModificationRequest:
    def apply(request: PendingModificationRequest) -> None:
        context = approval_service.get_task_context(db, [request.task_id])
        customer_name = context.get(request.task_id, {}).get("customer_name")
        notification_service.create_notification(
            db,
            user_id=request.requested_by,
            type=NotificationType.MODIFICATION_REJECTED,
            title="Modification request rejected",
            message=(
                f"Your modification request for {customer_name} was rejected. "
                f"Reason: {request.rejection_reason}"
            ),
            customer_name=customer_name,
            task_id=request.task_id,
        )

    return approval_service.resolve_request(
        db,
        KIND,
        request_id,
        reviewer_id,
        ReviewDecision.REJECT,
        reason=reason,
        on_reject=apply,
        expected_version=expected_version,
    )


def enrich(db: Session, requests: list[PendingModificationRequest]) -> list[dict]:
    user_names = approval_service.get_users_for(db, requests)
    tasks = approval_service.get_task_context(db, [r.task_id for r in requests])

    items = []
    for request in requests:
        task = tasks.get(request.task_id, {})
        items.append(
            {
                **approval_service.request_fields(request, user_names),
                "customer_name": task.get("customer_name"),
                "campaign_name": task.get("campaign_name"),
                "task_id": request.task_id,
                "task_status": task.get("status"),
                "task_deleted": task.get("deleted", False),
                "description": request.description,
                "attachments": request.attachments or [],
            }
        )
    return items


# =============================================================================
# Attachment download
# =============================================================================


@dataclass
class AttachmentDownload:
    """Either fetched bytes, or the validated URL to redirect to."""

    name: str
    url: str
    content: bytes | None = None
    content_type: str | None = None

    @property
    def fetched(self) -> bool:
        return self.content is not None


class AttachmentTooLargeError(Exception):
    """Attachment exceeds ATTACHMENT_MAX_BYTES."""

    pass


def get_attachment(
    db: Session,
    request_id: UUID,
    index: int,
    user_id: UUID | None = None,
    can_review: bool = False,
) -> dict[str, str]:
    """
    Look up one attachment of a modification request.

    Only reviewers and the salesperson who submitted the request may read it.

    Raises:
        RequestNotFoundError: unknown request
        PermissionDeniedError: caller is neither a reviewer nor the requester
        TargetNotFoundError: index out of range
        InvalidRequestError: stored URL is not an allowed attachment URL
    """
    request = approval_service.get_request(db, KIND, request_id)
    if not request:
        raise RequestNotFoundError(f"Request {request_id} not found")
    if not can_review and request.requested_by != user_id:
        raise PermissionDeniedError("Not allowed to read this request's attachments")

    attachments = request.attachments or []
    if index < 0 or index >= len(attachments):
        raise TargetNotFoundError(f"Attachment {index} not found")

    attachment = attachments[index]
    try:
        url = validate_attachment_url(attachment.get("url") or "")
    except ValueError as e:
        raise InvalidRequestError(str(e))
    return {"name": attachment.get("name") or url.rsplit("/", 1)[-1], "url": url}


def _read_limited(response: httpx.Response, limit: int) -> bytes:
    declared = response.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise AttachmentTooLargeError(f"Attachment is {declared} bytes")

    chunks = []
    received = 0
    for chunk in response.iter_bytes():
        received += len(chunk)
        if received > limit:
            raise AttachmentTooLargeError(f"Attachment exceeds {limit} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


def fetch_attachment(
    attachment: dict[str, str],
    client: httpx.Client | None = None,
) -> AttachmentDownload:
    """
    Download an attachment so it can be served with a download filename.

    Every hop (the stored URL and each redirect target) must pass
    validate_attachment_url with DNS resolution, so internal hosts are never
    contacted. The body is streamed and capped at ATTACHMENT_MAX_BYTES.

    Fetch failures are not fatal: the result then carries only the URL and
    the caller redirects to it.
    """
    download = AttachmentDownload(name=attachment["name"], url=attachment["url"])
    owns_client = client is None
    client = client or httpx.Client(timeout=settings.ATTACHMENT_FETCH_TIMEOUT_SECONDS)
    url = download.url
    try:
        for _ in range(settings.ATTACHMENT_MAX_REDIRECTS + 1):
            url = validate_attachment_url(url, resolve_dns=True)
            with client.stream("GET", url, follow_redirects=False) as response:
                if response.is_redirect:
                    url = str(response.url.join(response.headers.get("location", "")))
                    continue
                response.raise_for_status()
                download.content = _read_limited(response, settings.ATTACHMENT_MAX_BYTES)
                download.content_type = response.headers.get(
                    "content-type", "application/octet-stream"
                )
                return download
        logger.warning("Attachment fetch stopped after too many redirects")
    except ValueError as e:
        logger.warning("Attachment URL refused, falling back to redirect: %s", e)
    except AttachmentTooLargeError as e:
        logger.warning("Attachment too large, falling back to redirect: %s", e)
    except httpx.HTTPError as e:
        logger.warning("Attachment fetch failed, falling back to redirect: %s", type(e).__name__)
    finally:
        if owns_client:
            client.close()
    return download
