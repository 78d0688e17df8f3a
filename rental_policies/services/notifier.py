import logging
from typing import Any, Protocol

from sqlalchemy.orm import Session

import rental_policies.repositories.notification as notification_repo

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Delivers one notification to one user. Callers treat delivery as best-effort."""

    def notify(
        self,
        recipient_id: int,
        kind: str,
        title: str,
        body: str,
        metadata: dict[str, Any] | None = None,
    ) -> None: ...


class InAppNotifier:
    """Delivers notifications by storing them in the recipient's in-app inbox."""

    def __init__(self, db: Session):
        self.db = db

    def notify(
        self,
        recipient_id: int,
        kind: str,
        title: str,
        body: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        notification = notification_repo.create_notification(
            self.db,
            user_id=recipient_id,
            kind=kind,
            title=title,
            message=body,
            metadata=metadata,
        )
        logger.debug(f"Stored {kind} notification {notification.id} for user {recipient_id}")
