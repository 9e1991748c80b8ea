"""
Notification dispatcher - one in-app notification per due schedule per day.

The notification id is the dispatch key "{schedule_id}_{YYYY-MM-DD}" (date in
the configured timezone, taken from the scan's captured ``now``). The write is
an upsert-by-key, so a retried page, two overlapping scans, or a crashed tick
re-run from scratch all converge on the same single record.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo

from sqlalchemy.orm import Session

from tankcare.domain.notification import DEFAULT_RETENTION_DAYS, build_maintenance_notification
from tankcare.infrastructure.db.errors import store_errors
from tankcare.infrastructure.db.models import ScheduleModel
from tankcare.infrastructure.notifications.repository import NotificationRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DueSchedule:
    """Detached snapshot of a due schedule, safe to use across commits"""
    id: str
    owner_id: str
    parent_id: str
    parent_name: str
    task_type: str
    custom_label: str
    next_due: datetime

    @classmethod
    def from_model(cls, schedule: ScheduleModel) -> "DueSchedule":
        return cls(
            id=schedule.id,
            owner_id=schedule.owner_id,
            parent_id=schedule.parent_id,
            parent_name=schedule.parent_name,
            task_type=schedule.task_type,
            custom_label=schedule.custom_label,
            next_due=schedule.next_due,
        )


class NotificationDispatcher:
    def __init__(
        self,
        db: Session,
        tz: tzinfo = timezone.utc,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ):
        self.db = db
        self.tz = tz
        self.retention_days = retention_days
        self.notifications = NotificationRepository(db)

    def dispatch(self, schedule: DueSchedule, now: datetime) -> bool:
        """
        Write the notification for ``schedule``'s occurrence on now's date.

        Returns True if a new notification was created, False if today's
        notification for this schedule already existed. On failure the
        session is rolled back and the error propagates.
        """
        fields = build_maintenance_notification(
            schedule_id=schedule.id,
            owner_id=schedule.owner_id,
            parent_id=schedule.parent_id,
            parent_name=schedule.parent_name,
            task_type=schedule.task_type,
            custom_label=schedule.custom_label,
            next_due=schedule.next_due,
            now=now,
            tz=self.tz,
            retention_days=self.retention_days,
        )
        key = fields["id"]
        try:
            created = self.notifications.upsert_by_key(key, fields)
            with store_errors("notification commit"):
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if created:
            logger.info("Notification %s created for owner=%s", key, schedule.owner_id)
        else:
            logger.debug("Notification %s already exists, skipped", key)
        return created
