"""Crawl and extraction engine.

- ``content_hasher``: text normalization, fingerprints and snippets
- ``feed_fetcher``: RSS/Atom download and parsing
- ``html_extractor``: page download and heuristic article extraction
- ``filter_matcher``: keyword and regex filters
- ``engine``: per-source orchestration (``CrawlerEngine.crawl_source``)

Configuration:
    Components take a ``CrawlerConfig`` built from Settings:

    - CRAWLER_HTTP_TIMEOUT: fetch timeout (default: 30 seconds)
    - FEED_USER_AGENT / HTML_USER_AGENT: User-Agent per strategy
    - CONTENT_CONTAINER_SELECTORS: content container selectors
    - SNIPPET_MAX_LENGTH: summary length (default: 200)
    - MIN_PARAGRAPH_LENGTH: paragraph heuristic threshold (default: 50)
"""

from .config import CrawlerConfig, FetchStatus, build_http_client
from .engine import CrawlerEngine

__all__ = ["CrawlerConfig", "FetchStatus", "build_http_client", "CrawlerEngine"]
