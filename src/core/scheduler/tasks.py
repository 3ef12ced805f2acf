"""Celery tasks for scheduled source checks.

This module provides the background tasks that keep monitored sources fresh:
- ``scan_due_sources_task``: periodic beat task that finds due sources and
  enqueues one crawl per source
- ``crawl_source_task``: crawls a single source with ``CrawlerEngine``

Crawl failures never fail the task. The engine already logs them, reports
zero new items and advances ``last_checked``, so the next scan will not pick
the same broken source up again until its interval elapses.

Example:
    Triggering a crawl manually:

    ```python
    from src.core.scheduler.tasks import crawl_source_task

    result = crawl_source_task.delay(source_id="uuid-string")
    print(result.get()["items_discovered"])
    ```
"""

from datetime import datetime, timezone
from typing import Any, Dict
from uuid import UUID

from celery.utils.log import get_task_logger

from src.core.crawler.config import CrawlerConfig, build_http_client
from src.core.crawler.engine import CrawlerEngine
from src.core.scheduler.celery_app import celery_app
from src.database.connection import close_database_connection
from src.database.repositories.source_repo import SourceRepository
from src.shared.async_utils import safe_async_run
from src.shared.config import get_settings
from src.shared.exceptions import SourceNotFoundError

logger = get_task_logger(__name__)


@celery_app.task(bind=True)
def crawl_source_task(self, source_id: str) -> Dict[str, Any]:
    """Crawl one source.

    Args:
        source_id: UUID string of the source to crawl

    Returns:
        Dictionary with ``source_id``, ``items_discovered`` and ``status``
        (``completed``, ``not_found`` or ``failed``)
    """
    correlation_id = f"crawl_{source_id}_{self.request.id}"
    settings = get_settings()

    logger.info("Starting crawl task", extra={
        "correlation_id": correlation_id,
        "source_id": source_id,
        "task_id": self.request.id,
    })

    coro = _async_crawl_source(source_id, correlation_id)

    return safe_async_run(
        coro,
        timeout=settings.CRAWL_TASK_TIMEOUT,
        fallback_result={
            "source_id": source_id,
            "items_discovered": 0,
            "status": "failed",
        },
        correlation_id=correlation_id
    )


async def _async_crawl_source(source_id: str, correlation_id: str) -> Dict[str, Any]:
    config = CrawlerConfig.from_settings(get_settings())

    try:
        async with build_http_client(config) as client:
            engine = CrawlerEngine.create(config, client)
            try:
                items_discovered = await engine.crawl_source(UUID(source_id))
            except SourceNotFoundError:
                logger.warning(f"Source not found: {source_id}", extra={
                    "correlation_id": correlation_id,
                    "source_id": source_id,
                })
                return {"source_id": source_id, "items_discovered": 0, "status": "not_found"}
    finally:
        # Each task runs on its own event loop; pooled connections cannot cross loops
        await close_database_connection()

    logger.info("Crawl task completed", extra={
        "correlation_id": correlation_id,
        "source_id": source_id,
        "items_discovered": items_discovered,
    })
    return {"source_id": source_id, "items_discovered": items_discovered, "status": "completed"}


@celery_app.task(bind=True)
def scan_due_sources_task(self) -> Dict[str, Any]:
    """Enqueue a crawl for every source whose check interval has elapsed.

    Runs periodically via Celery Beat.

    Returns:
        Scan results with the number of sources queued
    """
    correlation_id = f"scan_{self.request.id}"

    coro = _async_scan_due_sources(correlation_id)

    return safe_async_run(
        coro,
        timeout=60,
        fallback_result={"status": "failed", "sources_queued": 0, "correlation_id": correlation_id},
        correlation_id=correlation_id
    )


async def _async_scan_due_sources(correlation_id: str) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)

    try:
        due_sources = await SourceRepository().get_due_sources(now)
    finally:
        await close_database_connection()

    for source in due_sources:
        crawl_source_task.delay(source_id=str(source.id))
        logger.debug(f"Queued crawl for source {source.name}", extra={
            "correlation_id": correlation_id,
            "source_id": str(source.id),
        })

    if due_sources:
        logger.info(f"Queued {len(due_sources)} due sources", extra={
            "correlation_id": correlation_id,
            "sources_queued": len(due_sources),
        })

    return {
        "status": "completed",
        "sources_queued": len(due_sources),
        "scanned_at": now.isoformat(),
        "correlation_id": correlation_id,
    }
