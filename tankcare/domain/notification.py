"""
Maintenance notification identity and content.

A notification's storage key is derived from (schedule_id, dispatch date), so
re-running the due-schedule scan on the same calendar day addresses the same
record instead of creating a new one.
"""
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Dict

from tankcare.domain.due_status import days_until
from tankcare.domain.schedule import TaskType, display_label
from tankcare.utils.clock import local_date, to_utc

NOTIFICATION_TYPE = "maintenance"
DEFAULT_RETENTION_DAYS = 30
DEFAULT_PARENT_NAME = "Your tank"

_TEMPLATES: dict[str, str] = {
    "title": "{label} due",
    "body_due": "{tank}: {label} is due",
    "body_overdue": "{tank}: {label} is {days} {unit} overdue",
}


def dispatch_key(schedule_id: str, dispatch_date: date) -> str:
    return f"{schedule_id}_{dispatch_date.isoformat()}"


def dispatch_key_for(schedule_id: str, now: datetime, tz: tzinfo = timezone.utc) -> str:
    return dispatch_key(schedule_id, local_date(now, tz))


def _sentence_label(task_type: str, custom_label: str | None) -> str:
    label = display_label(task_type, custom_label)
    if TaskType(task_type) is TaskType.CUSTOM and custom_label:
        return label
    return label[:1] + label[1:].lower()


def build_maintenance_notification(
    *,
    schedule_id: str,
    owner_id: str,
    parent_id: str,
    parent_name: str | None,
    task_type: str,
    custom_label: str | None,
    next_due: datetime,
    now: datetime,
    tz: tzinfo = timezone.utc,
    retention_days: int = DEFAULT_RETENTION_DAYS,
) -> Dict[str, Any]:
    """Build the full notification record for one due schedule."""
    label = _sentence_label(task_type, custom_label)
    tank = parent_name or DEFAULT_PARENT_NAME
    overdue = -days_until(next_due, now, tz)
    if overdue > 0:
        body = _TEMPLATES["body_overdue"].format(
            tank=tank, label=label, days=overdue, unit="day" if overdue == 1 else "days",
        )
    else:
        body = _TEMPLATES["body_due"].format(tank=tank, label=label)

    created_at = to_utc(now)
    return {
        "id": dispatch_key_for(schedule_id, now, tz),
        "owner_id": owner_id,
        "type": NOTIFICATION_TYPE,
        "title": _TEMPLATES["title"].format(label=label),
        "body": body,
        "created_at": created_at,
        "read": False,
        "dismissed": False,
        "expires_at": created_at + timedelta(days=retention_days),
        "source_schedule_id": schedule_id,
        "source_parent_id": parent_id,
        "source_parent_name": parent_name or "",
        "action_url": f"/tanks/{parent_id}#schedules",
    }
