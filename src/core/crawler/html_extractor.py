"""HTML page extraction with layered heuristics.

This module provides the HtmlExtractor class that downloads a page and
recovers a best-effort article representation from it. Extraction of an
already-downloaded body is pure and deterministic: the same HTML always
yields the same title, body, snippet and fingerprint.

Title, in priority order (first non-blank wins):
    1. ``<meta property="og:title">``
    2. ``<meta name="twitter:title">``
    3. ``<title>``

Body, in priority order (first non-empty wins):
    1. the first ``<article>`` element (sanitized inner HTML)
    2. the first ``<main>`` element (sanitized inner HTML)
    3. the first element matching a content-container selector
    4. the longest block of long paragraphs
    5. the plain text of ``<body>``

The paragraph heuristic walks every ``<p>`` in document order and appends
each paragraph longer than ``min_paragraph_length`` characters to a running
block. Short paragraphs are skipped and never break the block.

Example:
    ```python
    async with build_http_client(config) as client:
        extractor = HtmlExtractor(client, config)
        result = await extractor.extract("https://example.com/post")
        if result.ok:
            print(result.page.title, result.page.snippet)
    ```
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup, Comment, Tag

from src.core.crawler.config import CrawlerConfig, FetchStatus
from src.core.crawler.content_hasher import create_snippet, generate_content_hash
from src.shared.exceptions import BaseAppException, PageFetchError, PageParseError

logger = logging.getLogger(__name__)

# Elements removed together with everything inside them
DROPPED_TAGS = frozenset({
    "script", "style", "noscript", "iframe", "object", "embed", "applet",
    "form", "input", "button", "select", "textarea", "template", "svg",
    "math", "link", "meta", "base", "head", "title", "frame", "frameset",
})

ALLOWED_TAGS = frozenset({
    "a", "b", "blockquote", "br", "caption", "cite", "code", "col", "colgroup",
    "dd", "div", "dl", "dt", "em", "h1", "h2", "h3", "h4", "h5", "h6", "i",
    "img", "li", "ol", "p", "pre", "q", "small", "span", "strike", "strong",
    "sub", "sup", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "u", "ul",
})

ALLOWED_ATTRIBUTES = {
    "a": ("href", "title"),
    "blockquote": ("cite",),
    "col": ("span", "width"),
    "colgroup": ("span", "width"),
    "img": ("align", "alt", "height", "src", "title", "width"),
    "ol": ("start", "type"),
    "q": ("cite",),
    "table": ("summary", "width"),
    "td": ("abbr", "axis", "colspan", "rowspan", "width"),
    "th": ("abbr", "axis", "colspan", "rowspan", "scope", "width"),
    "ul": ("type",),
}

URL_ATTRIBUTES = frozenset({"href", "src", "cite"})
ALLOWED_URL_SCHEMES = frozenset({"http", "https", "mailto"})


@dataclass
class ExtractedPage:
    """Best-effort article representation of a page."""
    url: str
    title: Optional[str]
    content: str
    content_hash: str
    description: Optional[str]
    author: Optional[str]
    snippet: str


@dataclass
class HtmlExtractResult:
    url: str
    status: FetchStatus
    page: Optional[ExtractedPage] = None
    error: Optional[BaseAppException] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status == FetchStatus.SUCCESS


def sanitize_html(html: str, base_url: Optional[str] = None) -> str:
    """Clean HTML down to a safe formatting allowlist.

    Dangerous elements are dropped with their contents, unknown tags are
    unwrapped so their text survives, attributes are filtered per tag and
    links are restricted to http, https and mailto.
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    for tag in soup.find_all(list(DROPPED_TAGS)):
        # Nested matches are already gone with their ancestor
        if not tag.decomposed:
            tag.decompose()

    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue
        tag.attrs = _allowed_attrs(tag, base_url)

    return str(soup).strip()


def _allowed_attrs(tag: Tag, base_url: Optional[str]) -> dict:
    allowed = ALLOWED_ATTRIBUTES.get(tag.name, ())
    attrs = {}
    for name in allowed:
        value = tag.attrs.get(name)
        if value is None:
            continue
        if isinstance(value, list):
            value = " ".join(value)
        if name in URL_ATTRIBUTES:
            value = _safe_url(value, base_url)
            if value is None:
                continue
        attrs[name] = value
    return attrs


def _safe_url(value: str, base_url: Optional[str]) -> Optional[str]:
    value = value.strip()
    if base_url:
        value = urljoin(base_url, value)
    scheme = urlparse(value).scheme.lower()
    if scheme not in ALLOWED_URL_SCHEMES:
        return None
    return value


def _meta_content(soup: BeautifulSoup, attr: str, value: str) -> Optional[str]:
    tag = soup.find("meta", attrs={attr: value})
    if tag is None:
        return None
    content = tag.get("content")
    if content and content.strip():
        return content
    return None


def _first_meta(soup: BeautifulSoup, candidates: Iterable[Tuple[str, str]]) -> Optional[str]:
    for attr, value in candidates:
        content = _meta_content(soup, attr, value)
        if content:
            return content
    return None


def extract_title(soup: BeautifulSoup) -> Optional[str]:
    meta_title = _first_meta(soup, (("property", "og:title"), ("name", "twitter:title")))
    if meta_title:
        return meta_title
    if soup.title and soup.title.string and soup.title.string.strip():
        return soup.title.string.strip()
    return None


def extract_description(soup: BeautifulSoup) -> Optional[str]:
    return _first_meta(soup, (("property", "og:description"), ("name", "description")))


def extract_author(soup: BeautifulSoup) -> Optional[str]:
    return _first_meta(soup, (("property", "article:author"), ("name", "author")))


def longest_paragraph_block(soup: BeautifulSoup, min_length: int = 50) -> str:
    """Concatenate long paragraphs into the longest running block.

    The running block is never reset, so the longest block seen is the
    concatenation of every paragraph longer than ``min_length``.
    """
    current_block = ""
    longest_block = ""

    for paragraph in soup.find_all("p"):
        text = paragraph.get_text(" ", strip=True)
        if len(text) > min_length:
            current_block += text + "\n\n"
            if len(current_block) > len(longest_block):
                longest_block = current_block

    return longest_block.strip()


def _inner_html(tag: Tag) -> str:
    return tag.decode_contents()


def extract_main_content(
    soup: BeautifulSoup,
    base_url: Optional[str] = None,
    container_selectors: Tuple[str, ...] = (),
    min_paragraph_length: int = 50,
) -> str:
    """Apply the body heuristics in priority order."""
    for name in ("article", "main"):
        element = soup.find(name)
        if element is not None:
            content = sanitize_html(_inner_html(element), base_url)
            if content:
                return content

    if container_selectors:
        element = soup.select_one(", ".join(container_selectors))
        if element is not None:
            content = sanitize_html(_inner_html(element), base_url)
            if content:
                return content

    block = longest_paragraph_block(soup, min_paragraph_length)
    if block:
        return block

    body = soup.body or soup
    return body.get_text(" ", strip=True)


def parse_html(html: str, base_url: str, config: Optional[CrawlerConfig] = None) -> ExtractedPage:
    """Extract title, body and metadata from a downloaded page."""
    config = config or CrawlerConfig()
    soup = BeautifulSoup(html, "html.parser")

    title = extract_title(soup)
    description = extract_description(soup)
    author = extract_author(soup)
    content = extract_main_content(
        soup,
        base_url=base_url,
        container_selectors=config.container_selectors,
        min_paragraph_length=config.min_paragraph_length,
    )

    page = ExtractedPage(
        url=base_url,
        title=title,
        content=content,
        content_hash=generate_content_hash(content),
        description=description,
        author=author,
        snippet=create_snippet(content, config.snippet_max_length),
    )

    logger.debug(
        f"Extracted content from {base_url}",
        extra={"url": base_url, "title": title, "content_length": len(content)}
    )
    return page


class HtmlExtractor:
    """Downloads pages and extracts them with ``parse_html``.

    Args:
        http_client: Shared ``httpx.AsyncClient``
        config: Crawler configuration (timeout, User-Agent, selectors)
    """

    def __init__(self, http_client: httpx.AsyncClient, config: CrawlerConfig):
        self.http_client = http_client
        self.config = config

    async def extract(self, url: str) -> HtmlExtractResult:
        logger.debug(f"Scraping content from: {url}")

        try:
            response = await self.http_client.get(
                url,
                headers={"User-Agent": self.config.html_user_agent},
                timeout=self.config.http_timeout,
            )
        except httpx.HTTPError as e:
            error = PageFetchError(url, details={"url": url, "reason": str(e) or type(e).__name__})
            logger.warning(error.message, extra={"url": url, "error": error.to_dict()})
            return HtmlExtractResult(url=url, status=FetchStatus.FETCH_ERROR, error=error)

        if not response.is_success:
            error = PageFetchError(url, status_code=response.status_code)
            logger.warning(error.message, extra={"url": url, "error": error.to_dict()})
            return HtmlExtractResult(
                url=url,
                status=FetchStatus.FETCH_ERROR,
                error=error,
                status_code=response.status_code,
            )

        try:
            page = parse_html(response.text, url, self.config)
        except (ValueError, TypeError, AttributeError) as e:
            error = PageParseError(url, reason=str(e))
            logger.warning(error.message, extra={"url": url, "error": error.to_dict()})
            return HtmlExtractResult(
                url=url,
                status=FetchStatus.PARSE_ERROR,
                error=error,
                status_code=response.status_code,
            )

        return HtmlExtractResult(
            url=url,
            status=FetchStatus.SUCCESS,
            page=page,
            status_code=response.status_code,
        )
