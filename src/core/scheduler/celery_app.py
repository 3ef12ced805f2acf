import logging
import asyncio
from celery import Celery
from celery.signals import worker_init, worker_shutdown
from kombu import Queue

from src.shared.config import get_settings
from src.shared.log_config import configure_logging

settings = get_settings()

configure_logging(settings.LOG_LEVEL)

logger = logging.getLogger(__name__)


# Event loop management for Celery workers
@worker_init.connect
def init_worker(**kwargs):
    """Initialize worker with proper async setup."""
    logger.info("Initializing Celery worker with async support")

    try:
        asyncio.set_event_loop_policy(asyncio.DefaultEventLoopPolicy())
        logger.info("Event loop policy configured for Celery worker")
    except Exception as e:
        logger.warning(f"Failed to set event loop policy: {e}")


@worker_shutdown.connect
def shutdown_worker(**kwargs):
    """Clean shutdown for worker."""
    logger.info("Shutting down Celery worker")


celery_app = Celery(
    "site_watch",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "src.core.scheduler.tasks"
    ]
)

celery_app.conf.update(
    # Serialization settings
    task_serializer=settings.CELERY_TASK_SERIALIZER,
    accept_content=settings.CELERY_ACCEPT_CONTENT,
    result_serializer=settings.CELERY_RESULT_SERIALIZER,

    # Time and timezone settings
    timezone=settings.CELERY_TIMEZONE,
    enable_utc=settings.CELERY_ENABLE_UTC,

    task_track_started=True,

    # Worker settings
    worker_prefetch_multiplier=settings.CELERY_WORKER_PREFETCH_MULTIPLIER,
    worker_max_tasks_per_child=500,

    # Task routing settings
    task_routes={
        "src.core.scheduler.tasks.crawl_source_task": {"queue": "crawl_queue"},
        "src.core.scheduler.tasks.scan_due_sources_task": {"queue": "maintenance_queue"},
    },

    task_default_queue="default",
    task_queues=(
        Queue("default", routing_key="default"),
        Queue("crawl_queue", routing_key="crawl_queue"),
        Queue("maintenance_queue", routing_key="maintenance_queue"),
    ),

    # Result settings
    result_expires=3600,

    # Timeout settings
    task_soft_time_limit=settings.CRAWL_TASK_TIMEOUT - 60,  # 1 minute before hard limit
    task_time_limit=settings.CRAWL_TASK_TIMEOUT,
    task_acks_late=True,

    broker_connection_retry_on_startup=True,
    broker_connection_max_retries=10,

    task_annotations={
        "src.core.scheduler.tasks.crawl_source_task": {
            "rate_limit": "60/m",
        },
    },
)

# Celery Beat schedule for periodic tasks
celery_app.conf.beat_schedule = {
    "scan-due-sources": {
        "task": "src.core.scheduler.tasks.scan_due_sources_task",
        "schedule": float(settings.SCHEDULER_SCAN_INTERVAL_SECONDS),
        "options": {"queue": "maintenance_queue"},
    },
}
