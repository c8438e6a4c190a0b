"""
Notification Service - handles in-app notifications.

Request resolutions write one notification to the requester inside the
resolve transaction; the read side (list, unread count, mark read) backs
the /me/notifications endpoints.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from uniform_admin.db.enums import NotificationType
from uniform_admin.db.models import Notification
from uniform_admin.db.types import utcnow


# =============================================================================
# Notification CRUD
# =============================================================================


def create_notification(
    db: Session,
    user_id: UUID | None,
    type: NotificationType,
    title: str,
    message: str,
    customer_name: str | None = None,
    task_id: UUID | None = None,
) -> Notification | None:
    """
    Create a notification.

    Returns None when there is nobody to notify (requester was deleted).
    Flushes only; the caller owns the transaction.
    """
    if not user_id:
        return None

    notification = Notification(
        user_id=user_id,
        type=NotificationType(type).value,
        title=title,
        message=message,
        customer_name=customer_name,
        task_id=task_id,
    )
    db.add(notification)
    db.flush()
    return notification


def get_notifications(
    db: Session,
    user_id: UUID,
    unread_only: bool = False,
    notification_types: list[str] | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[Notification]:
    """Get notifications for user."""
    query = db.query(Notification).filter(Notification.user_id == user_id)

    if unread_only:
        query = query.filter(Notification.read_at.is_(None))

    if notification_types:
        query = query.filter(Notification.type.in_(notification_types))

    return query.order_by(Notification.created_at.desc()).offset(offset).limit(limit).all()


def get_unread_count(db: Session, user_id: UUID) -> int:
    """Get count of unread notifications."""
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.read_at.is_(None),
    ).count()


def mark_read(
    db: Session,
    notification_id: UUID,
    user_id: UUID,
) -> Notification | None:
    """Mark a notification as read (scoped to its owner)."""
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id,
    ).first()

    if notification and not notification.read_at:
        notification.read_at = utcnow()
        db.commit()
        db.refresh(notification)

    return notification


def mark_all_read(db: Session, user_id: UUID) -> int:
    """Mark all notifications as read. Returns count updated."""
    count = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.read_at.is_(None),
    ).update({"read_at": utcnow()}, synchronize_session=False)
    db.commit()
    return count
