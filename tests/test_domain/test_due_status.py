"""Tests for due-status classification of schedule pills"""
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from tankcare.domain.due_status import Urgency, classify

NOW = datetime(2026, 3, 10, 14, 30, tzinfo=timezone.utc)


def _at(days: int, hour: int = 8) -> datetime:
    return datetime(2026, 3, 10, hour, 0, tzinfo=timezone.utc) + timedelta(days=days)


class TestPaused:
    def test_disabled_is_paused(self):
        status = classify(_at(5), NOW, enabled=False)
        assert status.label == "Paused"
        assert status.urgency is Urgency.NONE

    @pytest.mark.parametrize("days", [-1, -30, -365 * 3])
    def test_disabled_wins_over_overdue(self, days):
        assert classify(_at(days), NOW, enabled=False).label == "Paused"


class TestEnabled:
    def test_same_calendar_day_is_due_today(self):
        # earlier in the day than now, still today
        status = classify(_at(0, hour=1), NOW, enabled=True)
        assert status.label == "Due today"
        assert status.urgency is Urgency.DUE_TODAY

    def test_later_same_day_is_due_today(self):
        assert classify(_at(0, hour=23), NOW, enabled=True).label == "Due today"

    def test_yesterday_is_one_day_overdue(self):
        status = classify(_at(-1, hour=23), NOW, enabled=True)
        assert status.label == "1 day overdue"
        assert status.urgency is Urgency.OVERDUE
        assert status.days == -1

    def test_several_days_overdue(self):
        assert classify(_at(-4), NOW, enabled=True).label == "4 days overdue"

    def test_tomorrow(self):
        status = classify(_at(1, hour=0), NOW, enabled=True)
        assert status.label == "Due tomorrow"
        assert status.urgency is Urgency.DUE_SOON

    @pytest.mark.parametrize("days", [2, 3])
    def test_due_soon_window(self, days):
        status = classify(_at(days), NOW, enabled=True)
        assert status.label == f"Due in {days} days"
        assert status.urgency is Urgency.DUE_SOON

    def test_beyond_three_days_has_no_urgency(self):
        status = classify(_at(4), NOW, enabled=True)
        assert status.label == "Due in 4 days"
        assert status.urgency is Urgency.NONE


class TestCalendarDates:
    def test_timezone_shifts_the_calendar_day(self):
        next_due = datetime(2026, 3, 10, 22, 30, tzinfo=timezone.utc)
        assert classify(next_due, NOW, True).label == "Due today"
        # 01:30 on March 11 in Moscow
        assert classify(next_due, NOW, True, ZoneInfo("Europe/Moscow")).label == "Due tomorrow"

    def test_pure_function(self):
        assert classify(_at(-2), NOW, True) == classify(_at(-2), NOW, True)
