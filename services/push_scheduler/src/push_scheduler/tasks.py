"""Celery tasks fired by the beat schedule or enqueued when content is created."""

import logging

from push_scheduler.celery import app
from push_scheduler.jobs import ScheduledPushJobs

logger = logging.getLogger(__name__)


def _jobs() -> ScheduledPushJobs:
    return app.conf._jobs


@app.task(name="push_scheduler.tasks.send_daily_devotional")
def send_daily_devotional() -> dict[str, int] | None:
    """Send today's devotional to all subscribed devices.

    Anything escaping the job is logged and re-raised so Celery records
    the run as failed.
    """
    try:
        summary = _jobs().send_daily_devotional()
        return summary.to_dict() if summary is not None else None
    except Exception:
        logger.exception("Daily devotional run failed")
        raise


@app.task(name="push_scheduler.tasks.send_event_reminders")
def send_event_reminders() -> dict[str, int] | None:
    """Send reminders for tomorrow's events."""
    try:
        summary = _jobs().send_event_reminders()
        return summary.to_dict() if summary is not None else None
    except Exception:
        logger.exception("Event reminder run failed")
        raise


@app.task(name="push_scheduler.tasks.notify_announcement")
def notify_announcement(announcement_id: str) -> dict[str, int] | None:
    """Push a newly created announcement."""
    try:
        summary = _jobs().notify_announcement(announcement_id)
        return summary.to_dict() if summary is not None else None
    except Exception:
        logger.exception(
            "Announcement notification failed",
            extra={"announcement_id": announcement_id},
        )
        raise


@app.task(name="push_scheduler.tasks.notify_sermon")
def notify_sermon(sermon_id: str) -> dict[str, int] | None:
    """Push a newly published sermon."""
    try:
        summary = _jobs().notify_sermon(sermon_id)
        return summary.to_dict() if summary is not None else None
    except Exception:
        logger.exception(
            "Sermon notification failed", extra={"sermon_id": sermon_id}
        )
        raise


@app.task(name="push_scheduler.tasks.notify_message")
def notify_message(message_id: str) -> dict[str, int] | None:
    """Push a direct message to its recipient.

    Failures are logged and not re-raised: the message itself is already
    stored, and a failed push must not mark the task as failed.
    """
    try:
        summary = _jobs().notify_message(message_id)
        return summary.to_dict() if summary is not None else None
    except Exception:
        logger.exception(
            "Message notification failed", extra={"message_id": message_id}
        )
        return None
