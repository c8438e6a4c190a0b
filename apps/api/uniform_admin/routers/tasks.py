"""Router for design tasks: listing, status moves, designer returns."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from uniform_admin.core.deps import (
    get_current_session,
    get_db,
    is_elevated,
    require_csrf_header,
    require_roles,
)
from uniform_admin.db.enums import (
    ROLES_CAN_CHANGE_TASK_STATUS,
    ROLES_CAN_REJECT_TASKS,
    ROLES_CAN_SUBMIT_REQUESTS,
    RejectionReasonType,
    TaskPriority,
    TaskStatus,
)
from uniform_admin.routers.shared import to_http_exception
from uniform_admin.schemas.auth import UserSession
from uniform_admin.schemas.tasks import (
    DesignerRejectionCreate,
    ReturnedTaskRead,
    TaskDetail,
    TaskHistoryRead,
    TaskListResponse,
    TaskRead,
    TaskRejectionRead,
    TaskStatusUpdate,
)
from uniform_admin.services import returned_task_service, task_history_service, task_service
from uniform_admin.services.approval_service import ApprovalServiceError
from uniform_admin.utils.pagination import PaginationParams, get_pagination


router = APIRouter()


@router.get("", response_model=TaskListResponse)
def list_tasks(
    status: TaskStatus | None = None,
    priority: TaskPriority | None = None,
    assigned_to: UUID | None = None,
    created_by: UUID | None = None,
    pagination: PaginationParams = Depends(get_pagination),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """List active (not deleted) tasks, urgent first."""
    tasks, total = task_service.list_active_tasks(
        db,
        status=status,
        priority=priority,
        assigned_to=assigned_to,
        created_by=created_by,
        pagination=pagination,
    )
    return TaskListResponse(
        items=[TaskRead.model_validate(t) for t in tasks],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pagination.pages(total),
    )


@router.get("/returned", response_model=list[ReturnedTaskRead])
def list_returned_tasks(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Tasks a designer sent back.

    Salespeople see their own tasks; admins see everyone's.
    """
    returned = returned_task_service.list_returned_tasks(
        db, user_id=session.user_id, elevated=is_elevated(session)
    )
    return [
        ReturnedTaskRead(
            task=TaskRead.model_validate(item.task),
            customer_name=item.customer_name,
            rejection=TaskRejectionRead.model_validate(item.rejection) if item.rejection else None,
            reason_label=(
                RejectionReasonType(item.rejection.reason_type).label if item.rejection else None
            ),
        )
        for item in returned
    ]


@router.get("/{task_id}", response_model=TaskDetail)
def get_task(
    task_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    task = task_service.get_task(db, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    history = task_history_service.get_task_history(db, task.id)
    return TaskDetail(
        **TaskRead.model_validate(task).model_dump(),
        history=[TaskHistoryRead.model_validate(h) for h in history],
    )


@router.patch(
    "/{task_id}/status",
    response_model=TaskRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_task_status(
    task_id: UUID,
    data: TaskStatusUpdate,
    session: UserSession = Depends(require_roles(ROLES_CAN_CHANGE_TASK_STATUS)),
    db: Session = Depends(get_db),
):
    try:
        task = task_service.update_task_status(db, task_id, data.status.value, session.user_id)
    except ApprovalServiceError as e:
        raise to_http_exception(e)
    return TaskRead.model_validate(task)


@router.post(
    "/{task_id}/designer-rejection",
    response_model=TaskRejectionRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def reject_task(
    task_id: UUID,
    data: DesignerRejectionCreate,
    session: UserSession = Depends(require_roles(ROLES_CAN_REJECT_TASKS)),
    db: Session = Depends(get_db),
):
    """Designer returns a task to the salesperson who created it."""
    try:
        rejection = returned_task_service.reject_task(
            db,
            task_id=task_id,
            designer_id=session.user_id,
            reason_type=data.reason_type.value,
            reason_text=data.reason_text,
            return_for_correction=data.return_for_correction,
        )
    except ApprovalServiceError as e:
        raise to_http_exception(e)
    return TaskRejectionRead.model_validate(rejection)


@router.post(
    "/{task_id}/resend",
    response_model=TaskRead,
    dependencies=[Depends(require_csrf_header)],
)
def resend_task(
    task_id: UUID,
    session: UserSession = Depends(require_roles(ROLES_CAN_SUBMIT_REQUESTS)),
    db: Session = Depends(get_db),
):
    """Salesperson resends a corrected task to the designer."""
    try:
        task = returned_task_service.resend_to_designer(
            db, task_id=task_id, user_id=session.user_id, elevated=is_elevated(session)
        )
    except ApprovalServiceError as e:
        raise to_http_exception(e)
    return TaskRead.model_validate(task)
