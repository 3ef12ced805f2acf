"""RSS/Atom feed fetching.

The FeedFetcher downloads a feed with the shared HTTP client and parses it
with feedparser, which understands RSS 0.9x, 1.0, 2.0 and Atom.

Failures are reported through ``FeedFetchResult`` rather than raised:

- ``FETCH_ERROR``: network failure, timeout or a non-2xx status
- ``PARSE_ERROR``: the body is not a readable feed
- ``SUCCESS``: a readable feed, possibly with zero entries

The crawler engine inspects the status to decide whether AUTO-mode sources
fall back to HTML scraping.

Example:
    ```python
    async with build_http_client(config) as client:
        fetcher = FeedFetcher(client, config)
        result = await fetcher.fetch_feed("https://example.com/rss")
        if result.ok:
            for entry in result.entries:
                print(entry.title, entry.link)
    ```
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

import feedparser
import httpx
from dateutil import parser as date_parser

from src.core.crawler.config import CrawlerConfig, FetchStatus
from src.shared.exceptions import BaseAppException, FeedFetchError, FeedParseError

logger = logging.getLogger(__name__)


@dataclass
class FeedEntry:
    """One normalized feed entry."""
    title: Optional[str]
    link: Optional[str]
    description: Optional[str]
    content: Optional[str]
    published_at: datetime
    author: Optional[str] = None


@dataclass
class FeedFetchResult:
    url: str
    status: FetchStatus
    entries: List[FeedEntry] = field(default_factory=list)
    error: Optional[BaseAppException] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status == FetchStatus.SUCCESS


class FeedFetcher:
    """Downloads and parses feeds.

    Args:
        http_client: Shared ``httpx.AsyncClient``
        config: Crawler configuration (timeout and User-Agent)
    """

    def __init__(self, http_client: httpx.AsyncClient, config: CrawlerConfig):
        self.http_client = http_client
        self.config = config

    async def fetch_feed(self, url: str) -> FeedFetchResult:
        logger.debug(f"Fetching feed from: {url}")

        try:
            response = await self.http_client.get(
                url,
                headers={"User-Agent": self.config.feed_user_agent},
                timeout=self.config.http_timeout,
            )
        except httpx.HTTPError as e:
            error = FeedFetchError(url, details={"url": url, "reason": str(e) or type(e).__name__})
            logger.warning(error.message, extra={"url": url, "error": error.to_dict()})
            return FeedFetchResult(url=url, status=FetchStatus.FETCH_ERROR, error=error)

        if not response.is_success:
            error = FeedFetchError(url, status_code=response.status_code)
            logger.warning(error.message, extra={"url": url, "error": error.to_dict()})
            return FeedFetchResult(
                url=url,
                status=FetchStatus.FETCH_ERROR,
                error=error,
                status_code=response.status_code,
            )

        return self.parse_feed(url, response.content, status_code=response.status_code)

    def parse_feed(self, url: str, body: bytes, status_code: Optional[int] = None) -> FeedFetchResult:
        """Parse a downloaded feed body into entries, in feed order."""
        parsed = feedparser.parse(body)

        if not parsed.entries and (parsed.bozo or not parsed.version):
            reason = str(parsed.get("bozo_exception", "")) or "not an RSS or Atom document"
            error = FeedParseError(url, reason=reason)
            logger.warning(error.message, extra={"url": url, "error": error.to_dict()})
            return FeedFetchResult(
                url=url,
                status=FetchStatus.PARSE_ERROR,
                error=error,
                status_code=status_code,
            )

        entries = [self._to_entry(raw) for raw in parsed.entries]
        logger.debug(
            f"Parsed {len(entries)} entries from feed {url}",
            extra={"url": url, "feed_version": parsed.version, "entry_count": len(entries)}
        )
        return FeedFetchResult(
            url=url,
            status=FetchStatus.SUCCESS,
            entries=entries,
            status_code=status_code,
        )

    def _to_entry(self, raw: Any) -> FeedEntry:
        description = raw.get("summary") or raw.get("description")

        content = None
        for block in raw.get("content") or []:
            value = block.get("value")
            if value:
                content = value
                break
        if content is None:
            content = description

        published_at = (
            _entry_datetime(raw, "published")
            or _entry_datetime(raw, "updated")
            or datetime.now(timezone.utc)
        )

        return FeedEntry(
            title=raw.get("title"),
            link=raw.get("link"),
            description=description,
            content=content,
            published_at=published_at,
            author=raw.get("author"),
        )


def _entry_datetime(raw: Any, key: str) -> Optional[datetime]:
    """Read ``<key>_parsed`` (UTC struct_time), falling back to parsing the raw string."""
    parsed = raw.get(f"{key}_parsed")
    if parsed:
        return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)

    value = raw.get(key)
    if not value:
        return None
    try:
        result = date_parser.parse(value)
    except (ValueError, OverflowError) as e:
        logger.debug(f"Unparseable {key} date '{value}': {e}")
        return None
    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result
