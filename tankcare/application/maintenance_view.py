"""
Maintenance view of a tank: schedule pills and recent history.

MaintenanceView is a short-lived cache owned by one request: schedules and
events are loaded once per tank and reused while the view object lives.
Nothing is shared between requests.
"""
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Dict, List

from sqlalchemy.orm import Session

from tankcare.domain.due_status import DueStatus, classify
from tankcare.domain.event import EventType, load_event_data, summarize
from tankcare.domain.schedule import TaskType, display_label
from tankcare.infrastructure.db.models import ScheduleModel, TankEventModel
from tankcare.infrastructure.eventlog.repository import TankEventRepository
from tankcare.infrastructure.schedules.repository import ScheduleRepository
from tankcare.utils.clock import Clock, utc_now

RECENT_EVENTS_LIMIT = 10


@dataclass(frozen=True)
class SchedulePill:
    schedule_id: str
    task_type: TaskType
    label: str
    interval_days: int
    next_due: datetime
    enabled: bool
    status: DueStatus

    @property
    def can_complete(self) -> bool:
        return self.enabled


@dataclass(frozen=True)
class HistoryEntry:
    event_id: str
    event_type: str
    label: str
    occurred_at: datetime
    notes: str
    details: str
    from_schedule: str | None


class MaintenanceView:
    def __init__(self, db: Session, owner_id: str, clock: Clock = utc_now, tz: tzinfo = timezone.utc):
        self.owner_id = owner_id
        self.clock = clock
        self.tz = tz
        self.schedules = ScheduleRepository(db)
        self.events = TankEventRepository(db)
        self._schedules_cache: Dict[str, List[ScheduleModel]] = {}
        self._events_cache: Dict[str, List[TankEventModel]] = {}

    def schedules_for(self, parent_id: str) -> List[ScheduleModel]:
        if parent_id not in self._schedules_cache:
            self._schedules_cache[parent_id] = self.schedules.list_by_owner(self.owner_id, parent_id)
        return self._schedules_cache[parent_id]

    def events_for(self, parent_id: str) -> List[TankEventModel]:
        if parent_id not in self._events_cache:
            self._events_cache[parent_id] = self.events.list_by_parent(
                self.owner_id, parent_id, limit=RECENT_EVENTS_LIMIT,
            )
        return self._events_cache[parent_id]

    def invalidate(self, parent_id: str) -> None:
        self._schedules_cache.pop(parent_id, None)
        self._events_cache.pop(parent_id, None)

    def schedule_pills(self, parent_id: str) -> List[SchedulePill]:
        """Schedules sorted by next_due with their due status"""
        now = self.clock()
        pills = [
            SchedulePill(
                schedule_id=s.id,
                task_type=TaskType(s.task_type),
                label=display_label(s.task_type, s.custom_label),
                interval_days=s.interval_days,
                next_due=s.next_due,
                enabled=s.enabled,
                status=classify(s.next_due, now, s.enabled, self.tz),
            )
            for s in self.schedules_for(parent_id)
        ]
        return sorted(pills, key=lambda p: p.next_due)

    def history(self, parent_id: str) -> List[HistoryEntry]:
        entries = []
        for e in self.events_for(parent_id):
            data = load_event_data(e.data_json)
            entries.append(HistoryEntry(
                event_id=e.id,
                event_type=e.event_type,
                label=EventType(e.event_type).label,
                occurred_at=e.occurred_at,
                notes=e.notes,
                details=summarize(data),
                from_schedule=data.from_schedule,
            ))
        return entries
