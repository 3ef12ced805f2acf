import os

import pytest
from datetime import datetime, timezone
from typing import AsyncGenerator

from src.core.crawler.config import CrawlerConfig
from src.core.crawler.filter_matcher import _compile
from src.database.connection import DatabaseConnection, set_database_connection
from src.database.models import Base
from src.shared.config import Settings

# Modules that build settings at import time (API app, Celery app) need a database URL
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with in-memory SQLite database."""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        DATABASE_ECHO=False,
        ENVIRONMENT="testing",
        LOG_LEVEL="DEBUG",
        DATABASE_POOL_SIZE=1,
        DATABASE_MAX_OVERFLOW=0,
        DATABASE_POOL_TIMEOUT=5
    )


@pytest.fixture
async def test_db(test_settings: Settings) -> AsyncGenerator[DatabaseConnection, None]:
    """Install an in-memory database as the process-wide connection.

    Repositories open their own sessions through ``get_db_session``, so they
    transparently use this database.
    """
    connection = DatabaseConnection(test_settings)
    connection.setup()

    async with connection.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    set_database_connection(connection)
    try:
        yield connection
    finally:
        set_database_connection(None)
        async with connection.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await connection.close()


@pytest.fixture
def crawler_config() -> CrawlerConfig:
    return CrawlerConfig(
        http_timeout=5.0,
        container_selectors=(".post-content", ".entry-content"),
    )


@pytest.fixture(autouse=True)
def clear_pattern_cache():
    """Compiled filter patterns are cached process-wide."""
    _compile.cache_clear()
    yield
    _compile.cache_clear()


@pytest.fixture
def sample_source_data():
    """Sample source data for testing."""
    return {
        "name": "Kubernetes blog",
        "url": "https://kubernetes.io/feed.xml",
        "mode": "RSS",
        "filter_keywords": ["release"],
        "filter_regex": [],
        "interval_minutes": 60
    }


@pytest.fixture
def sample_rss_feed() -> str:
    """RSS 2.0 feed with three entries, one of them about a release."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Kubernetes Blog</title>
    <link>https://kubernetes.io/blog/</link>
    <description>Kubernetes news</description>
    <item>
      <title>Kubernetes v1.31 release announced</title>
      <link>https://kubernetes.io/blog/2024/08/13/kubernetes-v1-31-release/</link>
      <description>&lt;p&gt;Kubernetes v1.31 is out with 45 enhancements.&lt;/p&gt;</description>
      <pubDate>Tue, 13 Aug 2024 00:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Community spotlight</title>
      <link>https://kubernetes.io/blog/2024/08/01/community-spotlight/</link>
      <description>Meet the people behind SIG Docs.</description>
      <pubDate>Thu, 01 Aug 2024 00:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Gateway API deep dive</title>
      <link>https://kubernetes.io/blog/2024/07/20/gateway-api/</link>
      <description>How routing works in the new Gateway API.</description>
      <pubDate>Sat, 20 Jul 2024 00:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def sample_atom_feed() -> str:
    return """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example Atom</title>
  <id>urn:example:feed</id>
  <updated>2024-05-02T10:00:00Z</updated>
  <entry>
    <title>Atom entry</title>
    <link href="https://example.com/atom-entry"/>
    <id>urn:example:entry-1</id>
    <updated>2024-05-02T10:00:00Z</updated>
    <author><name>Jane Writer</name></author>
    <content type="html">&lt;p&gt;Full atom content body.&lt;/p&gt;</content>
    <summary>Short atom summary</summary>
  </entry>
</feed>
"""


@pytest.fixture
def sample_article_html() -> str:
    return """<!DOCTYPE html>
<html>
<head>
  <title>Fallback Title</title>
  <meta property="og:title" content="Open Graph Title">
  <meta name="description" content="A page about monitoring.">
  <meta name="author" content="Sam Author">
</head>
<body>
  <nav>Home | About</nav>
  <article>
    <h1>Release notes</h1>
    <p>The new release ships faster crawling and safer extraction.</p>
    <script>alert("x")</script>
    <a href="/docs" onclick="steal()">Docs</a>
  </article>
</body>
</html>
"""


@pytest.fixture
def utc_now() -> datetime:
    return datetime.now(timezone.utc)
