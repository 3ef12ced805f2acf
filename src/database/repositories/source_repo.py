"""Source repository for database operations on Source models.

Key Features:
- Lookup and existence checks by URL (URLs are unique system-wide)
- Case-insensitive name search
- Due-for-check query used by the scheduler
- ``last_checked`` bookkeeping for the crawler engine
"""

import logging
from typing import Optional, List
from uuid import UUID
from datetime import datetime, timedelta
from sqlalchemy import select, update, or_

from src.database.repositories.base import BaseRepository
from src.database.models.source import Source
from src.database.connection import get_db_session

logger = logging.getLogger(__name__)


class SourceRepository(BaseRepository[Source]):
    """Repository for Source model database operations."""

    model_class = Source

    async def get_by_url(self, url: str) -> Optional[Source]:
        """Retrieve a source by its URL."""
        return await self.get_by_field("url", url)

    async def exists_by_url(self, url: str) -> bool:
        """Check whether a source already monitors this URL."""
        return await self.exists_by_field("url", url)

    async def search_by_name(self, search_term: str) -> List[Source]:
        """Find sources whose name contains ``search_term``, ignoring case."""
        async with get_db_session() as session:
            query = (
                select(Source)
                .where(Source.name.ilike(f"%{search_term}%"))
                .order_by(Source.name.asc())
            )
            result = await session.execute(query)
            return list(result.scalars().all())

    async def update_last_checked(self, source_id: UUID, checked_at: datetime) -> bool:
        """Record when a source was last crawled.

        Returns:
            True if the source row was updated, False if it no longer exists
        """
        async with get_db_session() as session:
            async with session.begin():
                query = (
                    update(Source)
                    .where(Source.id == source_id)
                    .values(last_checked=checked_at, updated_at=checked_at)
                )
                result = await session.execute(query)
                return result.rowcount > 0

    async def get_due_sources(self, current_time: datetime) -> List[Source]:
        """Get sources that were never checked or whose interval has elapsed.

        The interval arithmetic is done in Python so the query stays portable
        across PostgreSQL and SQLite. Candidates are narrowed in SQL to sources
        checked at least one minute ago.

        Args:
            current_time: Current UTC datetime to compare against

        Returns:
            Due sources, never-checked ones first, then oldest check first
        """
        async with get_db_session() as session:
            query = (
                select(Source)
                .where(
                    or_(
                        Source.last_checked.is_(None),
                        Source.last_checked <= current_time - timedelta(minutes=1)
                    )
                )
                .order_by(Source.last_checked.asc().nulls_first())
            )
            result = await session.execute(query)
            candidates = list(result.scalars().all())

        due = [source for source in candidates if self._is_due(source, current_time)]

        logger.info(
            f"Found {len(due)} sources due for a check",
            extra={
                "count": len(due),
                "current_time": current_time.isoformat(),
                "source_ids": [str(s.id) for s in due]
            }
        )

        return due

    @staticmethod
    def _is_due(source: Source, current_time: datetime) -> bool:
        if source.last_checked is None:
            return True
        last_checked = source.last_checked
        # SQLite returns naive datetimes
        if last_checked.tzinfo is None and current_time.tzinfo is not None:
            last_checked = last_checked.replace(tzinfo=current_time.tzinfo)
        return last_checked + timedelta(minutes=source.interval_minutes) <= current_time
