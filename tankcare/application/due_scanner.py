"""
Due-schedule scanner - one tick of the periodic maintenance sweep.

Each tick:
  1. captures ``now`` once (the same instant is used for every record)
  2. checks the (enabled, next_due) composite index and the upsert dialect,
     then queries enabled schedules with next_due <= now
  3. hands every due schedule to the NotificationDispatcher

The scanner never touches next_due; only completing a schedule advances it.
An uncompleted schedule is found again on every tick and the dispatch key
limits it to one notification per calendar day. Since all writes are
idempotent, ticks may overlap or run on several workers.

Failure policy:
  - MissingIndexError, unsupported upsert dialect or other
    ConfigurationError: whole tick fails loudly before any record is touched
  - TransientStoreError from the query: tick fails, next tick retries
  - error while dispatching one record: logged, the record is skipped
  - budget exhausted: remaining records are abandoned until the next tick
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Callable, List

from sqlalchemy.orm import Session

from tankcare.application.notification_dispatcher import DueSchedule, NotificationDispatcher
from tankcare.domain.notification import DEFAULT_RETENTION_DAYS
from tankcare.infrastructure.schedules.repository import ScheduleRepository
from tankcare.utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)

DEFAULT_TICK_BUDGET_SECONDS = 60.0


@dataclass
class TickReport:
    now: datetime
    due: int = 0
    created: int = 0
    already_notified: int = 0
    failed_schedule_ids: List[str] = field(default_factory=list)
    abandoned: int = 0

    @property
    def failed(self) -> int:
        return len(self.failed_schedule_ids)

    @property
    def completed(self) -> bool:
        return self.abandoned == 0


class DueScheduleScanner:
    def __init__(
        self,
        db: Session,
        clock: Clock = utc_now,
        tz: tzinfo = timezone.utc,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        budget_seconds: float = DEFAULT_TICK_BUDGET_SECONDS,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.db = db
        self.clock = clock
        self.budget_seconds = budget_seconds
        self.monotonic = monotonic
        self.schedules = ScheduleRepository(db)
        self.dispatcher = NotificationDispatcher(db, tz=tz, retention_days=retention_days)

    def run_tick(self) -> TickReport:
        started = self.monotonic()
        now = self.clock()
        report = TickReport(now=now)

        self.schedules.verify_due_index()
        self.dispatcher.notifications.check_supported()
        due = [DueSchedule.from_model(s) for s in self.schedules.query_due(now)]
        # release the read transaction before the per-record writes
        self.db.rollback()
        report.due = len(due)

        for position, schedule in enumerate(due):
            if self.monotonic() - started >= self.budget_seconds:
                report.abandoned = len(due) - position
                logger.warning(
                    "Due scan at %s exceeded its %.0fs budget; %d of %d schedules left for the next tick",
                    now.isoformat(), self.budget_seconds, report.abandoned, report.due,
                )
                break
            try:
                created = self.dispatcher.dispatch(schedule, now)
            except Exception:
                logger.exception("Dispatch failed for schedule_id=%s", schedule.id)
                report.failed_schedule_ids.append(schedule.id)
                continue
            if created:
                report.created += 1
            else:
                report.already_notified += 1

        logger.info(
            "Due scan at %s: due=%d created=%d already_notified=%d failed=%d abandoned=%d",
            now.isoformat(), report.due, report.created, report.already_notified,
            report.failed, report.abandoned,
        )
        return report


# ── manual run: python -m tankcare.application.due_scanner ──
if __name__ == "__main__":
    from tankcare.config import get_settings
    from tankcare.infrastructure.db.session import get_session_factory

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    settings = get_settings()
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        DueScheduleScanner(
            db,
            tz=settings.get_timezone(),
            retention_days=settings.NOTIFICATION_RETENTION_DAYS,
            budget_seconds=settings.DUE_SCAN_TICK_BUDGET_SECONDS,
        ).run_tick()
    finally:
        db.close()
