from sqlalchemy.orm import Session

from rental_policies.db.models.notification import Notification as NotificationModel


def create_notification(
    db: Session,
    user_id: int,
    kind: str,
    title: str,
    message: str,
    metadata: dict | None = None,
) -> NotificationModel:
    """Create a new in-app notification. Pure data access - no business logic."""
    db_notification = NotificationModel(
        user_id=user_id,
        kind=kind,
        title=title,
        message=message,
        extra=metadata,
        is_read=False,
    )
    db.add(db_notification)
    db.commit()
    db.refresh(db_notification)
    return db_notification


def get_notifications_for_user(
    db: Session, user_id: int, unread_only: bool = False
) -> list[NotificationModel]:
    """Get a user's notifications, newest first."""
    query = db.query(NotificationModel).filter(NotificationModel.user_id == user_id)
    if unread_only:
        query = query.filter(NotificationModel.is_read.is_(False))
    return query.order_by(
        NotificationModel.created_at.desc(), NotificationModel.id.desc()
    ).all()
