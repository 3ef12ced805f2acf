"""Crawler configuration and the shared HTTP client factory.

Crawler components receive a ``CrawlerConfig`` explicitly instead of reading
settings on their own. One ``httpx.AsyncClient`` built by ``build_http_client``
is shared by every in-flight crawl; each request sets its own User-Agent.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

import httpx

from src.shared.config import Settings

DEFAULT_CONTAINER_SELECTORS = (".content", ".post-content", ".article-content", ".entry-content")


class FetchStatus(str, Enum):
    """Outcome of a single feed or page fetch."""
    SUCCESS = "success"
    FETCH_ERROR = "fetch_error"
    PARSE_ERROR = "parse_error"


@dataclass(frozen=True)
class CrawlerConfig:
    http_timeout: float = 30.0
    feed_user_agent: str = "SiteWatch/1.0 (RSS Reader)"
    html_user_agent: str = "Mozilla/5.0 (compatible; SiteWatch/1.0)"
    container_selectors: Tuple[str, ...] = field(default=DEFAULT_CONTAINER_SELECTORS)
    snippet_max_length: int = 200
    min_paragraph_length: int = 50
    concurrency_limit: int = 10

    @classmethod
    def from_settings(cls, settings: Settings) -> "CrawlerConfig":
        return cls(
            http_timeout=float(settings.CRAWLER_HTTP_TIMEOUT),
            feed_user_agent=settings.FEED_USER_AGENT,
            html_user_agent=settings.HTML_USER_AGENT,
            container_selectors=tuple(settings.CONTENT_CONTAINER_SELECTORS),
            snippet_max_length=settings.SNIPPET_MAX_LENGTH,
            min_paragraph_length=settings.MIN_PARAGRAPH_LENGTH,
            concurrency_limit=settings.CRAWLER_CONCURRENCY_LIMIT,
        )


def build_http_client(config: CrawlerConfig, **kwargs) -> httpx.AsyncClient:
    """Create the connection-pooled client shared by all crawls."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout),
        follow_redirects=True,
        **kwargs
    )
