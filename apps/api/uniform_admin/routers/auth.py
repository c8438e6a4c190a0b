"""Authentication router: session introspection and logout.

Sessions are minted out of band (see `uniform_admin.cli issue-token`).
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from uniform_admin.core.deps import COOKIE_NAME, get_current_session, get_db, require_csrf_header
from uniform_admin.db.enums import ROLES_CAN_REVIEW_REQUESTS
from uniform_admin.db.models import User
from uniform_admin.schemas.auth import MeResponse, UserSession

router = APIRouter()


@router.get("/me")
def get_me(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> MeResponse:
    """
    Get current authenticated user info.

    Used by frontend to bootstrap auth state on page load.
    """
    user = db.query(User).filter(User.id == session.user_id).first()

    return MeResponse(
        user_id=user.id,
        email=user.email,
        display_name=user.display_name,
        role=session.role,
        can_review_requests=session.role in ROLES_CAN_REVIEW_REQUESTS,
    )


@router.post("/logout", dependencies=[Depends(require_csrf_header)])
def logout(
    response: Response,
    session: UserSession = Depends(get_current_session),
):
    """
    Clear session cookie.

    Requires X-Requested-With header for CSRF protection.
    """
    response.delete_cookie(COOKIE_NAME, path="/")
    return {"status": "logged_out"}
