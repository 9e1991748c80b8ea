"""Notification read/dismiss surface and expiry purge"""
import logging
from typing import List

from sqlalchemy.orm import Session

from tankcare.domain.errors import NotFoundError
from tankcare.infrastructure.db.errors import store_errors
from tankcare.infrastructure.db.models import NotificationModel
from tankcare.infrastructure.notifications.repository import NotificationRepository
from tankcare.utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock
        self.repo = NotificationRepository(db)

    def list_for_owner(self, owner_id: str, limit: int = 20) -> List[NotificationModel]:
        return self.repo.list_by_owner(owner_id, limit=limit)

    def unread_count(self, owner_id: str) -> int:
        return self.repo.count_unread(owner_id)

    def mark_read(self, notification_id: str, owner_id: str) -> None:
        self._update(self.repo.mark_read, notification_id, owner_id)

    def mark_dismissed(self, notification_id: str, owner_id: str) -> None:
        self._update(self.repo.mark_dismissed, notification_id, owner_id)

    def _update(self, action, notification_id: str, owner_id: str) -> None:
        try:
            found = action(notification_id, owner_id)
            if not found:
                raise NotFoundError(f"Notification {notification_id} not found")
            with store_errors("notification update"):
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def purge_expired(self) -> int:
        """Delete notifications past expires_at. Returns the number removed."""
        now = self.clock()
        try:
            deleted = self.repo.purge_expired(now)
            with store_errors("notification purge"):
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Purged %d expired notification(s) at %s", deleted, now.isoformat())
        return deleted
