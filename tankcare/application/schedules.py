"""
Schedule lifecycle use cases - create / update / delete / complete

Every use case is owner scoped: a schedule of another owner is reported as
NotFoundError, the same as a missing one. Validation happens before anything
is written. Store failures roll back the session and propagate; retrying is
the caller's decision.
"""
import logging
from datetime import datetime, timezone, tzinfo

from sqlalchemy.orm import Session

from tankcare.domain.errors import NotFoundError
from tankcare.domain.event import TankEvent
from tankcare.domain.schedule import TankSchedule, TaskType
from tankcare.infrastructure.db.errors import store_errors
from tankcare.infrastructure.db.models import ScheduleModel, TankEventModel
from tankcare.infrastructure.eventlog.repository import TankEventRepository
from tankcare.infrastructure.schedules.repository import ScheduleRepository
from tankcare.utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)


class _ScheduleUseCase:
    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock
        self.schedules = ScheduleRepository(db)

    def _load(self, schedule_id: str, owner_id: str, for_update: bool = False) -> ScheduleModel:
        schedule = self.schedules.get_for_owner(schedule_id, owner_id, for_update=for_update)
        if schedule is None:
            raise NotFoundError(f"Schedule {schedule_id} not found")
        return schedule

    def _commit(self, operation: str) -> None:
        try:
            with store_errors(operation):
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise


class CreateScheduleUseCase(_ScheduleUseCase):
    def execute(
        self,
        owner_id: str,
        parent_id: str,
        task_type: str | TaskType,
        custom_label: str | None = None,
        interval_days: int | None = None,
        next_due: datetime | None = None,
        enabled: bool = True,
        parent_name: str | None = None,
        notes: str | None = None,
    ) -> ScheduleModel:
        fields = TankSchedule.create(
            owner_id, parent_id, task_type, self.clock(),
            custom_label=custom_label,
            interval_days=interval_days,
            next_due=next_due,
            enabled=enabled,
            parent_name=parent_name,
            notes=notes,
        )
        try:
            schedule = self.schedules.add(fields)
        except Exception:
            self.db.rollback()
            raise
        self._commit("schedule create")
        logger.info(
            "Schedule %s created: owner=%s parent=%s type=%s every %d days",
            schedule.id, owner_id, parent_id, schedule.task_type, schedule.interval_days,
        )
        return schedule


class UpdateScheduleUseCase(_ScheduleUseCase):
    def execute(self, schedule_id: str, owner_id: str, **changes) -> ScheduleModel:
        schedule = self._load(schedule_id, owner_id)
        fields = TankSchedule.update(schedule.as_fields(), self.clock(), **changes)
        try:
            self.schedules.apply(schedule, fields)
        except Exception:
            self.db.rollback()
            raise
        self._commit("schedule update")
        return schedule


class DeleteScheduleUseCase(_ScheduleUseCase):
    """Hard delete. Deleting an unknown id raises NotFoundError."""

    def execute(self, schedule_id: str, owner_id: str) -> None:
        schedule = self._load(schedule_id, owner_id)
        try:
            self.schedules.delete(schedule)
        except Exception:
            self.db.rollback()
            raise
        self._commit("schedule delete")
        logger.info("Schedule %s deleted by owner=%s", schedule_id, owner_id)


class CompleteScheduleUseCase(_ScheduleUseCase):
    """
    Mark the current occurrence done.

    next_due advances by interval_days from its previous value, counted on
    the local calendar of ``tz`` (early and late completions keep the
    cadence), and a completion event is appended to the tank's history.
    Both writes commit in one transaction, so a failure leaves neither
    behind. The row is locked while it is advanced, so concurrent
    completions serialize. Not idempotent: two calls advance twice.
    """

    def __init__(self, db: Session, clock: Clock = utc_now, tz: tzinfo = timezone.utc):
        super().__init__(db, clock)
        self.tz = tz
        self.events = TankEventRepository(db)

    def execute(self, schedule_id: str, owner_id: str) -> tuple[ScheduleModel, TankEventModel]:
        now = self.clock()
        schedule = self._load(schedule_id, owner_id, for_update=True)
        previous_due = schedule.next_due

        try:
            self.schedules.apply(
                schedule,
                TankSchedule.complete(schedule.next_due, schedule.interval_days, now, self.tz),
            )
            event = self.events.append(
                TankEvent.completion(
                    owner_id, schedule.parent_id, schedule.id, schedule.task_type, now,
                )
            )
        except Exception:
            self.db.rollback()
            raise
        self._commit("schedule complete")

        logger.info(
            "Schedule %s completed: next_due %s -> %s",
            schedule_id, previous_due.isoformat(), schedule.next_due.isoformat(),
        )
        return schedule, event
