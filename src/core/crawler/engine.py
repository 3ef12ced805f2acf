"""Crawl orchestration for monitored sources.

This module provides the CrawlerEngine class that crawls one source at a time:
it picks a strategy from the source's mode, deduplicates candidates against
the source's existing items, applies the source's filters, persists accepted
items and advances the source's ``last_checked`` timestamp.

Strategies:
- RSS: fetch and parse the feed, one candidate per entry
- HTML: scrape the page itself, at most one item per source ever
- AUTO: RSS first, falling back to HTML when the feed cannot be fetched or
  parsed. A readable feed with nothing new is not a failure.

``crawl_source`` never raises for crawl failures. Fetch, parse and storage
errors are logged and reported as zero new items, so one broken source cannot
abort a batch. Only an unknown source id raises.

Example:
    ```python
    from src.shared.config import get_settings
    from src.core.crawler.config import CrawlerConfig, build_http_client
    from src.core.crawler.engine import CrawlerEngine

    async def crawl(source_id):
        config = CrawlerConfig.from_settings(get_settings())
        async with build_http_client(config) as client:
            engine = CrawlerEngine.create(config, client)
            return await engine.crawl_source(source_id)
    ```
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional
from uuid import UUID, uuid4

import httpx
from sqlalchemy.exc import IntegrityError

from src.core.crawler.config import CrawlerConfig
from src.core.crawler.content_hasher import create_snippet, generate_content_hash
from src.core.crawler.feed_fetcher import FeedEntry, FeedFetcher
from src.core.crawler.filter_matcher import matches_filters
from src.core.crawler.html_extractor import HtmlExtractor
from src.database.models.source import Source, SourceMode
from src.database.repositories.item_repo import ItemRepository
from src.database.repositories.source_repo import SourceRepository
from src.shared.exceptions import SourceNotFoundError


class CrawlerEngine:
    """Coordinates fetching, filtering and persistence for a single source.

    The engine holds no per-source state between calls. The HTTP client inside
    the fetchers is shared and safe to use from concurrent crawls; each crawl
    of one source runs sequentially.

    Args:
        config: Crawler configuration
        source_repo: Source repository
        item_repo: Item repository
        feed_fetcher: Feed fetcher
        html_extractor: HTML extractor
        logger: Optional logger, defaults to this module's logger
    """

    def __init__(
        self,
        config: CrawlerConfig,
        source_repo: SourceRepository,
        item_repo: ItemRepository,
        feed_fetcher: FeedFetcher,
        html_extractor: HtmlExtractor,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.source_repo = source_repo
        self.item_repo = item_repo
        self.feed_fetcher = feed_fetcher
        self.html_extractor = html_extractor
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def create(
        cls,
        config: CrawlerConfig,
        http_client: httpx.AsyncClient,
        source_repo: Optional[SourceRepository] = None,
        item_repo: Optional[ItemRepository] = None,
    ) -> "CrawlerEngine":
        """Wire an engine with default repositories around a shared client."""
        return cls(
            config=config,
            source_repo=source_repo or SourceRepository(),
            item_repo=item_repo or ItemRepository(),
            feed_fetcher=FeedFetcher(http_client, config),
            html_extractor=HtmlExtractor(http_client, config),
        )

    async def crawl_source(self, source_id: UUID) -> int:
        """Crawl one source and return the number of new items persisted.

        Raises:
            SourceNotFoundError: If no source has this id
        """
        try:
            source = await self.source_repo.get_by_id(source_id)
        except Exception as e:
            self.logger.error(
                f"Error loading source {source_id}: {e}",
                extra={"source_id": str(source_id), "error_type": type(e).__name__},
                exc_info=True
            )
            return 0
        if source is None:
            raise SourceNotFoundError(str(source_id))

        correlation_id = str(uuid4())
        log_extra = {
            "correlation_id": correlation_id,
            "source_id": str(source.id),
            "source_name": source.name,
            "mode": source.mode.value,
        }
        self.logger.info(f"Crawling source: {source.name} ({source.mode.value})", extra=log_extra)

        try:
            new_items = await self._dispatch(source, log_extra)
        except Exception as e:
            self.logger.error(
                f"Error crawling source {source.name}: {e}",
                extra={**log_extra, "error_type": type(e).__name__},
                exc_info=True
            )
            new_items = 0
        else:
            self.logger.info(
                f"Crawled source {source.name}: discovered {new_items} new items",
                extra={**log_extra, "new_items": new_items}
            )

        await self._mark_checked(source, log_extra)
        return new_items

    async def crawl_sources(self, source_ids: Iterable[UUID]) -> Dict[UUID, int]:
        """Crawl several sources concurrently, bounded by the concurrency limit.

        Unknown sources count as zero; no single source can abort the batch.
        """
        semaphore = asyncio.Semaphore(self.config.concurrency_limit)

        async def _crawl_one(source_id: UUID) -> int:
            async with semaphore:
                try:
                    return await self.crawl_source(source_id)
                except SourceNotFoundError as e:
                    self.logger.warning(e.message, extra={"source_id": str(source_id)})
                    return 0
                except Exception as e:
                    self.logger.error(
                        f"Unexpected error crawling source {source_id}: {e}",
                        extra={"source_id": str(source_id), "error_type": type(e).__name__},
                        exc_info=True
                    )
                    return 0

        ids: List[UUID] = list(source_ids)
        counts = await asyncio.gather(*(_crawl_one(source_id) for source_id in ids))
        return dict(zip(ids, counts))

    async def _dispatch(self, source: Source, log_extra: Dict[str, str]) -> int:
        if source.mode == SourceMode.RSS:
            return await self._crawl_feed(source, log_extra)
        if source.mode == SourceMode.HTML:
            return await self._crawl_html(source, log_extra)
        if source.mode == SourceMode.AUTO:
            return await self._crawl_auto(source, log_extra)
        raise ValueError(f"Unsupported source mode: {source.mode}")

    async def _crawl_feed(self, source: Source, log_extra: Dict[str, str]) -> int:
        result = await self.feed_fetcher.fetch_feed(source.url)
        if not result.ok:
            raise result.error
        return await self._persist_feed_entries(source, result.entries, log_extra)

    async def _crawl_auto(self, source: Source, log_extra: Dict[str, str]) -> int:
        result = await self.feed_fetcher.fetch_feed(source.url)
        if result.ok:
            return await self._persist_feed_entries(source, result.entries, log_extra)

        self.logger.debug(
            f"RSS parsing failed, trying HTML mode: {result.error.message if result.error else result.status.value}",
            extra={**log_extra, "feed_status": result.status.value}
        )
        return await self._crawl_html(source, log_extra)

    async def _persist_feed_entries(
        self,
        source: Source,
        entries: List[FeedEntry],
        log_extra: Dict[str, str],
    ) -> int:
        new_items = 0

        for entry in entries:
            if not entry.link or not entry.link.strip():
                self.logger.debug("Skipping feed entry without link", extra=log_extra)
                continue

            # Checked per entry so links inserted earlier in this batch are seen
            if await self.item_repo.exists_by_source_and_link(source.id, entry.link):
                continue

            if not matches_filters(source.filter_keywords, source.filter_regex, entry.title, entry.content):
                continue

            content = entry.content if entry.content is not None else entry.description
            saved = await self._save_item(
                {
                    "source_id": source.id,
                    "title": entry.title,
                    "link": entry.link,
                    "summary": create_snippet(content, self.config.snippet_max_length),
                    "content_hash": generate_content_hash(content),
                    "published_at": entry.published_at,
                    "discovered_at": datetime.now(timezone.utc),
                },
                log_extra,
            )
            if saved:
                new_items += 1

        return new_items

    async def _crawl_html(self, source: Source, log_extra: Dict[str, str]) -> int:
        if await self.item_repo.exists_by_source_and_link(source.id, source.url):
            self.logger.debug(f"HTML page already scraped: {source.url}", extra=log_extra)
            return 0

        result = await self.html_extractor.extract(source.url)
        if not result.ok:
            raise result.error

        page = result.page
        if not matches_filters(source.filter_keywords, source.filter_regex, page.title, page.content):
            return 0

        saved = await self._save_item(
            {
                "source_id": source.id,
                "title": page.title,
                "link": source.url,
                "summary": page.snippet,
                "content_hash": page.content_hash,
                "published_at": None,
                "discovered_at": datetime.now(timezone.utc),
            },
            log_extra,
        )
        return 1 if saved else 0

    async def _save_item(self, data: Dict, log_extra: Dict[str, str]) -> bool:
        """Insert an item, treating a unique-constraint rejection as a duplicate."""
        try:
            await self.item_repo.create(data)
        except IntegrityError:
            self.logger.info(
                f"Item already stored by a concurrent crawl: {data['link']}",
                extra={**log_extra, "link": data["link"]}
            )
            return False
        return True

    async def _mark_checked(self, source: Source, log_extra: Dict[str, str]) -> None:
        checked_at = datetime.now(timezone.utc)
        try:
            await self.source_repo.update_last_checked(source.id, checked_at)
            source.last_checked = checked_at
        except Exception as e:
            self.logger.error(
                f"Failed to update last_checked for source {source.name}: {e}",
                extra=log_extra,
                exc_info=True
            )
