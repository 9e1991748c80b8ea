"""
SQLAlchemy ORM models
"""
from datetime import datetime
from uuid import uuid4

from sqlalchemy import String, Integer, Text, Boolean, Index, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import expression

from tankcare.infrastructure.db.session import Base
from tankcare.infrastructure.db.types import UTCDateTime

# Composite index required by the due-schedule scan
DUE_SCAN_INDEX_NAME = "ix_tank_schedules_due_scan"
DUE_SCAN_INDEX_COLUMNS = ("enabled", "next_due")


def _new_id() -> str:
    return uuid4().hex


class ScheduleModel(Base):
    """Recurring maintenance task of one tank"""
    __tablename__ = "tank_schedules"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    parent_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    parent_name: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default="")

    task_type: Mapped[str] = mapped_column(String(32), nullable=False)  # waterChange/parameterTest/.../custom
    custom_label: Mapped[str] = mapped_column(String(100), nullable=False, default="", server_default="")
    interval_days: Mapped[int] = mapped_column(Integer, nullable=False)  # 1..365
    next_due: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=expression.true())
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")

    last_completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    __table_args__ = (
        Index(DUE_SCAN_INDEX_NAME, *DUE_SCAN_INDEX_COLUMNS),
        CheckConstraint("interval_days BETWEEN 1 AND 365", name="ck_tank_schedules_interval_days"),
    )

    def as_fields(self) -> dict:
        return {
            "owner_id": self.owner_id,
            "parent_id": self.parent_id,
            "parent_name": self.parent_name,
            "task_type": self.task_type,
            "custom_label": self.custom_label,
            "interval_days": self.interval_days,
            "next_due": self.next_due,
            "enabled": self.enabled,
            "notes": self.notes,
        }


class TankEventModel(Base):
    """
    Append-only maintenance history of a tank

    data_json holds the tagged payload (see tankcare.domain.event)
    """
    __tablename__ = "tank_events"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    parent_id: Mapped[str] = mapped_column(String(128), nullable=False)
    event_type: Mapped[str] = mapped_column(String(32), nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    data_json: Mapped[dict] = mapped_column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    __table_args__ = (
        Index("ix_tank_events_owner_parent_occurred", "owner_id", "parent_id", "occurred_at"),
    )


class NotificationModel(Base):
    """
    In-app notification; id is the dispatch key "{schedule_id}_{YYYY-MM-DD}"
    """
    __tablename__ = "maintenance_notifications"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="maintenance")
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=expression.false())
    dismissed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=expression.false())
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)

    source_schedule_id: Mapped[str] = mapped_column(String(64), nullable=False)
    source_parent_id: Mapped[str] = mapped_column(String(128), nullable=False)
    source_parent_name: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default="")
    action_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
