"""
Schedule Store - durable collection of tank maintenance schedules

The due-schedule scan filters on (enabled, next_due) and relies on the
composite index DUE_SCAN_INDEX_NAME; verify_due_index() refuses to report
"nothing due" when that index is absent.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from tankcare.domain.errors import MissingIndexError
from tankcare.infrastructure.db.errors import store_errors
from tankcare.infrastructure.db.models import (
    ScheduleModel,
    DUE_SCAN_INDEX_NAME,
    DUE_SCAN_INDEX_COLUMNS,
)


class ScheduleRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, schedule_id: str) -> Optional[ScheduleModel]:
        with store_errors("schedule get"):
            return self.db.get(ScheduleModel, schedule_id)

    def get_for_owner(
        self,
        schedule_id: str,
        owner_id: str,
        for_update: bool = False,
    ) -> Optional[ScheduleModel]:
        """
        Return the schedule only if it belongs to owner_id

        With for_update the row is locked (SELECT ... FOR UPDATE) until the
        transaction ends and reloaded even if the session already holds it.
        """
        with store_errors("schedule get"):
            query = self.db.query(ScheduleModel).filter(
                ScheduleModel.id == schedule_id,
                ScheduleModel.owner_id == owner_id,
            )
            if for_update:
                query = query.with_for_update().populate_existing()
            return query.first()

    def list_by_owner(self, owner_id: str, parent_id: str | None = None) -> List[ScheduleModel]:
        """Owner's schedules ordered by next_due (soonest first)"""
        with store_errors("schedule list"):
            query = self.db.query(ScheduleModel).filter(ScheduleModel.owner_id == owner_id)
            if parent_id is not None:
                query = query.filter(ScheduleModel.parent_id == parent_id)
            return query.order_by(ScheduleModel.next_due.asc(), ScheduleModel.id.asc()).all()

    def add(self, fields: Dict[str, Any]) -> ScheduleModel:
        schedule = ScheduleModel(**fields)
        with store_errors("schedule add"):
            self.db.add(schedule)
            self.db.flush()
        return schedule

    def apply(self, schedule: ScheduleModel, fields: Dict[str, Any]) -> ScheduleModel:
        for key, value in fields.items():
            setattr(schedule, key, value)
        with store_errors("schedule update"):
            self.db.flush()
        return schedule

    def delete(self, schedule: ScheduleModel) -> None:
        with store_errors("schedule delete"):
            self.db.delete(schedule)
            self.db.flush()

    def query_due(self, now: datetime) -> List[ScheduleModel]:
        """
        All schedules with enabled == true AND next_due <= now.

        Ordered by next_due so the most overdue schedules are dispatched first
        when a tick runs out of budget.
        """
        with store_errors("due-schedule query"):
            return (
                self.db.query(ScheduleModel)
                .filter(
                    ScheduleModel.enabled.is_(True),
                    ScheduleModel.next_due <= now,
                )
                .order_by(ScheduleModel.next_due.asc(), ScheduleModel.id.asc())
                .all()
            )

    def verify_due_index(self) -> None:
        """
        Raises:
            MissingIndexError: if the (enabled, next_due) composite index is absent
        """
        table = ScheduleModel.__tablename__
        with store_errors("index inspection"):
            indexes = inspect(self.db.connection()).get_indexes(table)
        for index in indexes:
            if tuple(index.get("column_names") or ()) == DUE_SCAN_INDEX_COLUMNS:
                return
        raise MissingIndexError(table, DUE_SCAN_INDEX_COLUMNS, DUE_SCAN_INDEX_NAME)
