"""Source Manager with business logic and validation.

This module provides the SourceManager class that handles business operations
for monitored sources: creation with validation, lookup, listing and deletion.

Key Features:
- URL uniqueness validation
- Interval bounds (1 minute to 1 week)
- Keyword cleanup (stripped, blanks dropped)
- Regex patterns stored verbatim; malformed ones are tolerated at match time
- Structured logging with correlation IDs

Example:
    ```python
    from src.core.source.manager import SourceManager
    from src.database.models.source import SourceMode
    from src.database.repositories.source_repo import SourceRepository
    from src.shared.config import get_settings

    async def add_source():
        manager = SourceManager(SourceRepository(), get_settings())
        source = await manager.create_source(
            name="Kubernetes blog",
            url="https://kubernetes.io/feed.xml",
            mode=SourceMode.RSS,
            filter_keywords=["release"],
        )
        print(f"Created: {source.id}")
    ```
"""

import logging
import re
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy.exc import IntegrityError

from src.database.models.source import Source, SourceMode
from src.database.repositories.source_repo import SourceRepository
from src.shared.config import Settings
from src.shared.exceptions import (
    SourceValidationError,
    SourceNotFoundError,
    DuplicateSourceUrlError
)

logger = logging.getLogger(__name__)

MIN_INTERVAL_MINUTES = 1
MAX_INTERVAL_MINUTES = 10080
DEFAULT_INTERVAL_MINUTES = 60

_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


class SourceManager:
    """Business logic manager for Source operations."""

    def __init__(self, repository: SourceRepository, settings: Settings):
        """Initialize the SourceManager.

        Args:
            repository: SourceRepository instance for database operations
            settings: Application settings for configuration values
        """
        self.repository = repository
        self.settings = settings
        self.max_name_length = 255

    async def create_source(
        self,
        name: str,
        url: str,
        mode: SourceMode,
        filter_keywords: Optional[List[str]] = None,
        filter_regex: Optional[List[str]] = None,
        interval_minutes: Optional[int] = None
    ) -> Source:
        """Create a new monitored source.

        Args:
            name: Display name
            url: Feed or page URL (must be unique)
            mode: RSS, HTML or AUTO
            filter_keywords: Optional keyword filter
            filter_regex: Optional regex filter
            interval_minutes: Check interval, defaults to 60

        Returns:
            Created Source instance

        Raises:
            SourceValidationError: If validation fails
            DuplicateSourceUrlError: If the URL is already monitored
        """
        correlation_id = str(uuid4())
        interval = interval_minutes if interval_minutes is not None else DEFAULT_INTERVAL_MINUTES

        logger.info(f"Creating source: name={name}, url={url}", extra={
            "correlation_id": correlation_id,
            "source_name": name,
            "url": url,
            "mode": getattr(mode, "value", mode)
        })

        self._validate_name(name)
        self._validate_url(url)
        self._validate_interval(interval)

        url = url.strip()
        if await self.repository.exists_by_url(url):
            raise DuplicateSourceUrlError(url)

        try:
            source = await self.repository.create({
                "name": name.strip(),
                "url": url,
                "mode": SourceMode(mode),
                "filter_keywords": self._clean_keywords(filter_keywords),
                "filter_regex": [pattern for pattern in (filter_regex or []) if pattern],
                "interval_minutes": interval,
            })
        except IntegrityError:
            raise DuplicateSourceUrlError(url)

        logger.info("Source created successfully", extra={
            "correlation_id": correlation_id,
            "source_id": str(source.id),
            "source_name": source.name
        })

        return source

    async def get_source(self, source_id: UUID) -> Source:
        """Get a source by ID.

        Raises:
            SourceNotFoundError: If the source does not exist
        """
        source = await self.repository.get_by_id(source_id)
        if source is None:
            raise SourceNotFoundError(str(source_id))
        return source

    async def list_sources(self, name_filter: Optional[str] = None) -> List[Source]:
        if name_filter and name_filter.strip():
            return await self.repository.search_by_name(name_filter.strip())
        return await self.repository.get_all()

    async def delete_source(self, source_id: UUID) -> None:
        """Delete a source and, through the store, its items.

        Raises:
            SourceNotFoundError: If the source does not exist
        """
        if not await self.repository.exists_by_id(source_id):
            raise SourceNotFoundError(str(source_id))

        await self.repository.delete_by_id(source_id)
        logger.info(f"Source deleted: id={source_id}", extra={"source_id": str(source_id)})

    def _validate_name(self, name: str) -> None:
        if not name or not name.strip():
            raise SourceValidationError("Source name cannot be empty")

        if len(name.strip()) > self.max_name_length:
            raise SourceValidationError(
                f"Source name cannot exceed {self.max_name_length} characters"
            )

    def _validate_url(self, url: str) -> None:
        if not url or not _URL_RE.match(url.strip()):
            raise SourceValidationError(
                "URL must start with http:// or https://",
                details={"url": url}
            )

    def _validate_interval(self, interval_minutes: int) -> None:
        if not MIN_INTERVAL_MINUTES <= interval_minutes <= MAX_INTERVAL_MINUTES:
            raise SourceValidationError(
                f"Interval must be between {MIN_INTERVAL_MINUTES} and {MAX_INTERVAL_MINUTES} minutes",
                details={"interval_minutes": interval_minutes}
            )

    @staticmethod
    def _clean_keywords(keywords: Optional[List[str]]) -> List[str]:
        return [kw.strip() for kw in (keywords or []) if kw and kw.strip()]
