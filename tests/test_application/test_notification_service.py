"""Tests for the notification read/dismiss surface and expiry purge"""
from datetime import timedelta

import pytest

from tankcare.application.due_scanner import DueScheduleScanner
from tankcare.application.notifications import NotificationService
from tankcare.application.schedules import CreateScheduleUseCase
from tankcare.domain.errors import NotFoundError

OWNER_ID = "owner-1"
TANK_ID = "tank-1"


@pytest.fixture
def notification_id(db_session, clock):
    schedule = CreateScheduleUseCase(db_session, clock).execute(
        OWNER_ID, TANK_ID, "parameterTest", next_due=clock() - timedelta(hours=1),
    )
    DueScheduleScanner(db_session, clock).run_tick()
    return f"{schedule.id}_2026-01-02"


def test_unread_then_read(db_session, clock, notification_id):
    service = NotificationService(db_session, clock)
    assert service.unread_count(OWNER_ID) == 1

    service.mark_read(notification_id, OWNER_ID)

    assert service.unread_count(OWNER_ID) == 0
    assert service.list_for_owner(OWNER_ID)[0].read is True


def test_dismissed_hidden_from_list(db_session, clock, notification_id):
    service = NotificationService(db_session, clock)
    service.mark_dismissed(notification_id, OWNER_ID)
    assert service.list_for_owner(OWNER_ID) == []


def test_foreign_owner_cannot_touch(db_session, clock, notification_id):
    service = NotificationService(db_session, clock)
    with pytest.raises(NotFoundError):
        service.mark_read(notification_id, "owner-2")
    with pytest.raises(NotFoundError):
        service.mark_dismissed("missing", OWNER_ID)
    assert service.unread_count(OWNER_ID) == 1


def test_purge_keeps_fresh_notifications(db_session, clock, notification_id):
    service = NotificationService(db_session, clock)

    clock.advance(days=29)
    assert service.purge_expired() == 0

    clock.advance(days=1)
    assert service.purge_expired() == 1
    assert service.list_for_owner(OWNER_ID) == []
