"""
Background scheduler - runs periodic jobs inside the FastAPI process.

Jobs:
  - Due-schedule scan (every DUE_SCAN_INTERVAL_MINUTES, default 5)
  - Expired notification purge (Sunday 03:00 UTC, only if NOTIFICATION_PURGE_ENABLED)

Jobs never retry on their own; a failed scan is simply repeated by the next
interval.
"""
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from tankcare.domain.errors import ConfigurationError, TransientStoreError

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(daemon=True, timezone="UTC")


def _run_due_scan():
    from tankcare.config import get_settings
    from tankcare.infrastructure.db.session import get_session_factory
    from tankcare.application.due_scanner import DueScheduleScanner

    settings = get_settings()
    Session = get_session_factory()
    db = Session()
    try:
        DueScheduleScanner(
            db,
            tz=settings.get_timezone(),
            retention_days=settings.NOTIFICATION_RETENTION_DAYS,
            budget_seconds=settings.DUE_SCAN_TICK_BUDGET_SECONDS,
        ).run_tick()
    except ConfigurationError:
        logger.critical("Due scan aborted by a configuration error; no notifications were sent", exc_info=True)
    except TransientStoreError:
        logger.warning("Due scan skipped: store unavailable, will retry next interval", exc_info=True)
    except Exception:
        logger.exception("Due scan job failed")
    finally:
        db.close()


def _run_notification_purge():
    from tankcare.infrastructure.db.session import get_session_factory
    from tankcare.application.notifications import NotificationService

    Session = get_session_factory()
    db = Session()
    try:
        NotificationService(db).purge_expired()
    except Exception:
        logger.exception("Notification purge job failed")
    finally:
        db.close()


def start_scheduler():
    """Start the background scheduler with all periodic jobs."""
    from tankcare.config import get_settings

    settings = get_settings()

    # Missed runs coalesce into one; at most two ticks overlap
    scheduler.add_job(
        _run_due_scan,
        "interval",
        minutes=settings.DUE_SCAN_INTERVAL_MINUTES,
        id="due_schedule_scan",
        replace_existing=True,
        coalesce=True,
        max_instances=2,
    )

    if settings.NOTIFICATION_PURGE_ENABLED:
        scheduler.add_job(
            _run_notification_purge,
            CronTrigger(day_of_week="sun", hour=3, minute=0),
            id="notification_purge",
            replace_existing=True,
        )

    scheduler.start()
    logger.info(
        "Scheduler started: due_schedule_scan (every %d min), notification_purge (%s)",
        settings.DUE_SCAN_INTERVAL_MINUTES,
        "Sun 03:00 UTC" if settings.NOTIFICATION_PURGE_ENABLED else "disabled",
    )


def shutdown_scheduler():
    """Gracefully stop the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
