"""
Tank maintenance schedule domain rules.

A schedule is a recurring task ("change water every 7 days") attached to one
tank of one owner. Task types:

  waterChange        Water Change         7 days
  parameterTest      Parameter Test       7 days
  filterMaintenance  Filter Maintenance  30 days
  feeding            Special Feeding      7 days
  glassClean         Glass Cleaning       7 days
  gravel             Gravel Vacuum       14 days
  plantTrim          Plant Trimming      14 days
  custom             Custom Task          7 days  (requires custom_label)

Completion is cadence preserving: next_due always advances from the previous
next_due, never from the completion time.
"""
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Any, Dict

from tankcare.domain.errors import ValidationError
from tankcare.utils.clock import to_utc

MIN_INTERVAL_DAYS = 1
MAX_INTERVAL_DAYS = 365
CUSTOM_LABEL_MAX_LENGTH = 100


class TaskType(str, Enum):
    WATER_CHANGE = "waterChange"
    PARAMETER_TEST = "parameterTest"
    FILTER_MAINTENANCE = "filterMaintenance"
    FEEDING = "feeding"
    GLASS_CLEAN = "glassClean"
    SUBSTRATE_VACUUM = "gravel"
    PLANT_TRIM = "plantTrim"
    CUSTOM = "custom"

    @property
    def label(self) -> str:
        return _TASK_LABELS[self]

    @property
    def default_interval_days(self) -> int:
        return _DEFAULT_INTERVALS[self]


_TASK_LABELS = {
    TaskType.WATER_CHANGE: "Water Change",
    TaskType.PARAMETER_TEST: "Parameter Test",
    TaskType.FILTER_MAINTENANCE: "Filter Maintenance",
    TaskType.FEEDING: "Special Feeding",
    TaskType.GLASS_CLEAN: "Glass Cleaning",
    TaskType.SUBSTRATE_VACUUM: "Gravel Vacuum",
    TaskType.PLANT_TRIM: "Plant Trimming",
    TaskType.CUSTOM: "Custom Task",
}

_DEFAULT_INTERVALS = {
    TaskType.WATER_CHANGE: 7,
    TaskType.PARAMETER_TEST: 7,
    TaskType.FILTER_MAINTENANCE: 30,
    TaskType.FEEDING: 7,
    TaskType.GLASS_CLEAN: 7,
    TaskType.SUBSTRATE_VACUUM: 14,
    TaskType.PLANT_TRIM: 14,
    TaskType.CUSTOM: 7,
}

# Fields an owner may change through an update
EDITABLE_FIELDS = (
    "parent_name", "task_type", "custom_label", "interval_days",
    "next_due", "enabled", "notes",
)


def parse_task_type(value: str | TaskType) -> TaskType:
    try:
        return TaskType(value)
    except ValueError:
        raise ValidationError(f"Unknown task type: {value!r}") from None


def validate_interval_days(interval_days: Any) -> int:
    # bool is an int subclass; True must not pass as a 1-day interval
    if isinstance(interval_days, bool) or not isinstance(interval_days, int):
        raise ValidationError(f"interval_days must be an integer, got {interval_days!r}")
    if not MIN_INTERVAL_DAYS <= interval_days <= MAX_INTERVAL_DAYS:
        raise ValidationError(
            f"interval_days must be between {MIN_INTERVAL_DAYS} and {MAX_INTERVAL_DAYS}, "
            f"got {interval_days}"
        )
    return interval_days


def normalize_custom_label(task_type: TaskType, custom_label: str | None) -> str:
    """Custom schedules need a non-empty label; other types drop it."""
    if task_type is not TaskType.CUSTOM:
        return ""
    label = (custom_label or "").strip()
    if not label:
        raise ValidationError("A custom schedule requires a non-empty custom_label")
    if len(label) > CUSTOM_LABEL_MAX_LENGTH:
        raise ValidationError(f"custom_label is longer than {CUSTOM_LABEL_MAX_LENGTH} characters")
    return label


def display_label(task_type: str | TaskType, custom_label: str | None = None) -> str:
    task_type = TaskType(task_type)
    if task_type is TaskType.CUSTOM and custom_label:
        return custom_label
    return task_type.label


def next_due_after_completion(
    next_due: datetime,
    interval_days: int,
    tz: tzinfo = timezone.utc,
) -> datetime:
    """
    Advance one period from the previous due instant.

    Days are added to the wall clock in ``tz``, so the local due day moves by
    exactly interval_days across DST changes.
    """
    local = to_utc(next_due).astimezone(tz)
    return to_utc(local + timedelta(days=interval_days))


class TankSchedule:
    """Builds validated field sets for schedule records."""

    @staticmethod
    def create(
        owner_id: str,
        parent_id: str,
        task_type: str | TaskType,
        now: datetime,
        custom_label: str | None = None,
        interval_days: int | None = None,
        next_due: datetime | None = None,
        enabled: bool = True,
        parent_name: str | None = None,
        notes: str | None = None,
    ) -> Dict[str, Any]:
        if not owner_id or not parent_id:
            raise ValidationError("owner_id and parent_id are required")
        task_type = parse_task_type(task_type)
        if interval_days is None:
            interval_days = task_type.default_interval_days
        return {
            "owner_id": owner_id,
            "parent_id": parent_id,
            "parent_name": (parent_name or "").strip(),
            "task_type": task_type.value,
            "custom_label": normalize_custom_label(task_type, custom_label),
            "interval_days": validate_interval_days(interval_days),
            "next_due": to_utc(next_due if next_due is not None else now),
            "enabled": bool(enabled),
            "notes": notes or "",
            "created_at": to_utc(now),
            "updated_at": to_utc(now),
        }

    @staticmethod
    def update(current: Dict[str, Any], now: datetime, **changes) -> Dict[str, Any]:
        """
        Merge changes into the current field values and validate the result.

        Returns only the fields to write. Unknown fields raise ValidationError.
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        for required in ("task_type", "interval_days", "next_due", "enabled"):
            if required in changes and changes[required] is None:
                raise ValidationError(f"{required} cannot be cleared")

        merged = {**current, **changes}
        task_type = parse_task_type(merged["task_type"])
        result: Dict[str, Any] = {
            "task_type": task_type.value,
            "custom_label": normalize_custom_label(task_type, merged.get("custom_label")),
            "interval_days": validate_interval_days(merged["interval_days"]),
            "updated_at": to_utc(now),
        }
        if "next_due" in changes:
            result["next_due"] = to_utc(changes["next_due"])
        if "enabled" in changes:
            result["enabled"] = bool(changes["enabled"])
        if "parent_name" in changes:
            result["parent_name"] = (changes["parent_name"] or "").strip()
        if "notes" in changes:
            result["notes"] = changes["notes"] or ""
        return result

    @staticmethod
    def complete(
        next_due: datetime,
        interval_days: int,
        now: datetime,
        tz: tzinfo = timezone.utc,
    ) -> Dict[str, Any]:
        return {
            "next_due": next_due_after_completion(next_due, interval_days, tz),
            "last_completed_at": to_utc(now),
            "updated_at": to_utc(now),
        }
