"""create tank_schedules, tank_events, maintenance_notifications tables

Revision ID: a7c1e2d3f4b5
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision = "a7c1e2d3f4b5"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # tank_schedules: recurring maintenance tasks
    op.create_table(
        "tank_schedules",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("owner_id", sa.String(128), nullable=False),
        sa.Column("parent_id", sa.String(128), nullable=False),
        sa.Column("parent_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("task_type", sa.String(32), nullable=False),
        sa.Column("custom_label", sa.String(100), nullable=False, server_default=""),
        sa.Column("interval_days", sa.Integer, nullable=False),
        sa.Column("next_due", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("enabled", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        sa.Column("last_completed_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.CheckConstraint("interval_days BETWEEN 1 AND 365", name="ck_tank_schedules_interval_days"),
    )
    op.create_index("ix_tank_schedules_owner_id", "tank_schedules", ["owner_id"])
    op.create_index("ix_tank_schedules_parent_id", "tank_schedules", ["parent_id"])
    # Required by the due-schedule scan (enabled = true AND next_due <= now)
    op.create_index("ix_tank_schedules_due_scan", "tank_schedules", ["enabled", "next_due"])

    # tank_events: append-only maintenance history
    op.create_table(
        "tank_events",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("owner_id", sa.String(128), nullable=False),
        sa.Column("parent_id", sa.String(128), nullable=False),
        sa.Column("event_type", sa.String(32), nullable=False),
        sa.Column("occurred_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        sa.Column("data_json", JSONB, nullable=False, server_default="{}"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index("ix_tank_events_owner_id", "tank_events", ["owner_id"])
    op.create_index(
        "ix_tank_events_owner_parent_occurred",
        "tank_events",
        ["owner_id", "parent_id", "occurred_at"],
    )

    # maintenance_notifications: id is the dispatch key "{schedule_id}_{YYYY-MM-DD}"
    op.create_table(
        "maintenance_notifications",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("owner_id", sa.String(128), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("dismissed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("source_schedule_id", sa.String(64), nullable=False),
        sa.Column("source_parent_id", sa.String(128), nullable=False),
        sa.Column("source_parent_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("action_url", sa.String(512), nullable=True),
    )
    op.create_index("ix_maintenance_notifications_owner_id", "maintenance_notifications", ["owner_id"])
    op.create_index("ix_maintenance_notifications_expires_at", "maintenance_notifications", ["expires_at"])


def downgrade() -> None:
    op.drop_table("maintenance_notifications")
    op.drop_table("tank_events")
    op.drop_table("tank_schedules")
