"""
Due-status classification for schedule pills.

Compares calendar dates (both instants truncated to midnight in the given
timezone), not instants, so a task does not flap between "Due today" and
"overdue" during the due day.

  disabled        -> Paused          (none)
  days < 0        -> N days overdue  (overdue)
  days == 0       -> Due today       (due-today)
  days == 1       -> Due tomorrow    (due-soon)
  2 <= days <= 3  -> Due in N days   (due-soon)
  days > 3        -> Due in N days   (none)
"""
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from enum import Enum

from tankcare.utils.clock import local_date

DUE_SOON_DAYS = 3


class Urgency(str, Enum):
    NONE = "none"
    OVERDUE = "overdue"
    DUE_TODAY = "due-today"
    DUE_SOON = "due-soon"


@dataclass(frozen=True)
class DueStatus:
    label: str
    urgency: Urgency
    days: int | None = None  # signed days until due; None when paused


PAUSED = DueStatus("Paused", Urgency.NONE)


def days_until(next_due: datetime, now: datetime, tz: tzinfo = timezone.utc) -> int:
    return (local_date(next_due, tz) - local_date(now, tz)).days


def classify(
    next_due: datetime,
    now: datetime,
    enabled: bool,
    tz: tzinfo = timezone.utc,
) -> DueStatus:
    if not enabled:
        return PAUSED

    days = days_until(next_due, now, tz)
    if days < 0:
        overdue = -days
        unit = "day" if overdue == 1 else "days"
        return DueStatus(f"{overdue} {unit} overdue", Urgency.OVERDUE, days)
    if days == 0:
        return DueStatus("Due today", Urgency.DUE_TODAY, days)
    if days == 1:
        return DueStatus("Due tomorrow", Urgency.DUE_SOON, days)
    if days <= DUE_SOON_DAYS:
        return DueStatus(f"Due in {days} days", Urgency.DUE_SOON, days)
    return DueStatus(f"Due in {days} days", Urgency.NONE, days)
