"""Tank event use cases - logging maintenance actions and owner deletion"""
import logging
from datetime import datetime
from typing import Any, Dict

from sqlalchemy.orm import Session

from tankcare.domain.errors import NotFoundError
from tankcare.domain.event import EventType, TankEvent
from tankcare.infrastructure.db.errors import store_errors
from tankcare.infrastructure.db.models import TankEventModel
from tankcare.infrastructure.eventlog.repository import TankEventRepository
from tankcare.utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)


class LogEventUseCase:
    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock
        self.events = TankEventRepository(db)

    def execute(
        self,
        owner_id: str,
        parent_id: str,
        event_type: str | EventType,
        occurred_at: datetime | None = None,
        notes: str | None = None,
        data: Dict[str, Any] | None = None,
    ) -> TankEventModel:
        fields = TankEvent.create(
            owner_id, parent_id, event_type, self.clock(),
            occurred_at=occurred_at, notes=notes, data=data,
        )
        try:
            event = self.events.append(fields)
            with store_errors("event log"):
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return event


class DeleteEventUseCase:
    """Owner removes one of their own history entries."""

    def __init__(self, db: Session):
        self.db = db
        self.events = TankEventRepository(db)

    def execute(self, event_id: str, owner_id: str) -> None:
        event = self.events.get_for_owner(event_id, owner_id)
        if event is None:
            raise NotFoundError(f"Event {event_id} not found")
        try:
            self.events.delete_for_owner(event)
            with store_errors("event delete"):
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Event %s deleted by owner=%s", event_id, owner_id)
