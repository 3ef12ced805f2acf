"""FastAPI routes for on-demand crawls.

Endpoints:
- POST /crawler/sources/{source_id}/crawl - Crawl one source now

The crawl runs inline and returns the number of new items. Crawl failures
(unreachable site, broken feed) are not HTTP errors: they report zero new
items, exactly like a scheduled check.
"""

import logging
from typing import AsyncGenerator
from uuid import UUID
from fastapi import APIRouter, HTTPException, Depends, status

from src.core.crawler.config import CrawlerConfig, build_http_client
from src.core.crawler.engine import CrawlerEngine
from src.shared.config import get_settings, Settings
from src.shared.exceptions import SourceNotFoundError
from src.api.schemas.source import CrawlResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/crawler", tags=["crawler"])


async def get_crawler_engine(
    settings: Settings = Depends(get_settings)
) -> AsyncGenerator[CrawlerEngine, None]:
    """Dependency to provide a CrawlerEngine with a request-scoped HTTP client."""
    config = CrawlerConfig.from_settings(settings)
    async with build_http_client(config) as client:
        yield CrawlerEngine.create(config, client)


@router.post(
    "/sources/{source_id}/crawl",
    response_model=CrawlResponse,
    summary="Crawl a source now",
    responses={
        404: {"model": ErrorResponse, "description": "Source not found"}
    }
)
async def crawl_source(
    source_id: UUID,
    engine: CrawlerEngine = Depends(get_crawler_engine)
) -> CrawlResponse:
    try:
        items_discovered = await engine.crawl_source(source_id)
    except SourceNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message
        )

    logger.info(f"On-demand crawl finished: {items_discovered} new items", extra={
        "source_id": str(source_id),
        "items_discovered": items_discovered
    })

    return CrawlResponse(
        source_id=source_id,
        items_discovered=items_discovered,
        status="completed"
    )
