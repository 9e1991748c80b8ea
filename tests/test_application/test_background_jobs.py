"""Tests for the APScheduler job wrappers"""
import logging
from datetime import datetime, timezone
from unittest.mock import patch

from sqlalchemy import text

from tankcare.application import scheduler as jobs
from tankcare.application.due_scanner import DueScheduleScanner
from tankcare.application.schedules import CreateScheduleUseCase
from tankcare.infrastructure.db.models import DUE_SCAN_INDEX_NAME, NotificationModel


def _seed_overdue(session_factory):
    db = session_factory()
    try:
        CreateScheduleUseCase(db).execute(
            "owner-1", "tank-1", "waterChange",
            next_due=datetime(2020, 1, 1, tzinfo=timezone.utc),
        )
    finally:
        db.close()


def test_due_scan_job_writes_notifications(session_factory):
    _seed_overdue(session_factory)

    with patch("tankcare.infrastructure.db.session.get_session_factory", return_value=session_factory):
        jobs._run_due_scan()

    db = session_factory()
    assert db.query(NotificationModel).count() == 1
    db.close()


def test_missing_index_logged_as_critical(session_factory, caplog):
    _seed_overdue(session_factory)
    db = session_factory()
    db.execute(text(f"DROP INDEX {DUE_SCAN_INDEX_NAME}"))
    db.commit()
    db.close()

    with patch("tankcare.infrastructure.db.session.get_session_factory", return_value=session_factory):
        with caplog.at_level(logging.WARNING, logger="tankcare.application.scheduler"):
            jobs._run_due_scan()

    assert any(r.levelno == logging.CRITICAL for r in caplog.records)
    db = session_factory()
    assert db.query(NotificationModel).count() == 0
    db.close()


def test_purge_job_deletes_expired(session_factory):
    _seed_overdue(session_factory)
    db = session_factory()
    try:
        DueScheduleScanner(db, clock=lambda: datetime(2020, 1, 2, tzinfo=timezone.utc)).run_tick()
        assert db.query(NotificationModel).count() == 1
    finally:
        db.close()

    with patch("tankcare.infrastructure.db.session.get_session_factory", return_value=session_factory):
        jobs._run_notification_purge()

    db = session_factory()
    assert db.query(NotificationModel).count() == 0
    db.close()


def test_unsupported_dialect_logged_as_critical(session_factory, caplog, monkeypatch):
    _seed_overdue(session_factory)
    monkeypatch.setattr("tankcare.infrastructure.notifications.repository._INSERT_BY_DIALECT", {})

    with patch("tankcare.infrastructure.db.session.get_session_factory", return_value=session_factory):
        with caplog.at_level(logging.WARNING, logger="tankcare.application.scheduler"):
            jobs._run_due_scan()

    critical = [r for r in caplog.records if r.levelno == logging.CRITICAL]
    assert len(critical) == 1
    assert not any(r.name == "tankcare.application.due_scanner" and r.levelno == logging.ERROR for r in caplog.records)
