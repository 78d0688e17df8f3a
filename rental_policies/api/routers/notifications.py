from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rental_policies.api.deps import get_db, get_current_user
from rental_policies.db.models.user import User
import rental_policies.repositories.notification as notification_repo
from rental_policies.schemas.notification import Notification

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[Notification])
def get_my_notifications(
    unread: bool = Query(False, description="Only return unread notifications"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the current user's in-app notifications, newest first."""
    notifications = notification_repo.get_notifications_for_user(
        db, current_user.id, unread_only=unread
    )
    return [Notification.model_validate(n) for n in notifications]
