"""Celery application, beat schedule and worker initialization."""

import logging

from celery import Celery, signals
from celery.schedules import crontab

from push_core.config import CleanupConfig, ExpoConfig, PostgresConfig
from push_core.db.base import create_db_engine, create_session_factory
from push_core.delivery import (
    ExpoPushClient,
    NotificationDispatcher,
    SqlTokenStore,
    TokenCleanup,
)

from push_scheduler.config import CeleryConfig, SchedulerConfig
from push_scheduler.jobs import ScheduledPushJobs
from push_scheduler.log import setup_logging

logger = logging.getLogger(__name__)

celery_config = CeleryConfig()
scheduler_config = SchedulerConfig()

app = Celery("push_scheduler", broker=celery_config.broker_url)

app.conf.update(
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    timezone=scheduler_config.timezone,
    enable_utc=True,
)

app.conf.beat_schedule = {
    "send-daily-devotional": {
        "task": "push_scheduler.tasks.send_daily_devotional",
        "schedule": crontab(
            hour=scheduler_config.devotional_hour,
            minute=scheduler_config.devotional_minute,
        ),
        "options": {"expires": 3600},
    },
    "send-event-reminders": {
        "task": "push_scheduler.tasks.send_event_reminders",
        "schedule": crontab(
            hour=scheduler_config.event_reminder_hour,
            minute=scheduler_config.event_reminder_minute,
        ),
        "options": {"expires": 3600},
    },
}

app.autodiscover_tasks(["push_scheduler"])


@signals.worker_init.connect
def _init_worker(**_kwargs: object) -> None:
    """Initialize shared resources once per worker process."""
    setup_logging(scheduler_config.log_level)

    pg_config = PostgresConfig()
    engine = create_db_engine(pg_config.dsn, pool_pre_ping=True)
    session_factory = create_session_factory(engine)

    expo_config = ExpoConfig()
    dispatcher = NotificationDispatcher(
        ExpoPushClient(expo_config), batch_size=expo_config.max_batch_size
    )
    cleanup = TokenCleanup(
        SqlTokenStore(session_factory), max_workers=CleanupConfig().max_workers
    )

    jobs = ScheduledPushJobs(
        session_factory,
        dispatcher,
        cleanup,
        timezone=scheduler_config.timezone,
        page_size=scheduler_config.user_page_size,
    )

    app.conf.update(_engine=engine, _dispatcher=dispatcher, _jobs=jobs)
    logger.info(
        "Worker initialized",
        extra={"timezone": scheduler_config.timezone},
    )


@signals.worker_shutdown.connect
def _shutdown_worker(**_kwargs: object) -> None:
    """Clean up resources on worker shutdown."""
    dispatcher: NotificationDispatcher | None = getattr(app.conf, "_dispatcher", None)
    if dispatcher is not None:
        dispatcher.close()
    engine = getattr(app.conf, "_engine", None)
    if engine is not None:
        engine.dispose()
    logger.info("Worker shut down")
