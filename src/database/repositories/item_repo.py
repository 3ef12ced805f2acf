"""Item repository for database operations on discovered items.

This module provides the ItemRepository class. The crawler engine relies on
``exists_by_source_and_link`` for deduplication and on ``create`` for
persisting accepted items. The remaining queries back the items API.

Example:
    ```python
    from src.database.repositories.item_repo import ItemRepository

    async def latest_items(source_id):
        repo = ItemRepository()
        items = await repo.list_by_source(source_id, limit=10)
        for item in items:
            print(item.title, item.link)
    ```
"""

import logging
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from sqlalchemy import select, func, and_

from src.database.repositories.base import BaseRepository
from src.database.models.item import Item
from src.database.connection import get_db_session

logger = logging.getLogger(__name__)


class ItemRepository(BaseRepository[Item]):
    """Repository for Item model database operations.

    Items are unique per ``(source_id, link)``. Content fingerprints are
    indexed for lookups but never enforced as unique.
    """

    model_class = Item

    async def exists_by_source_and_link(self, source_id: UUID, link: str) -> bool:
        """Check whether this source already has an item for ``link``."""
        async with get_db_session() as session:
            query = (
                select(func.count())
                .select_from(Item)
                .where(and_(Item.source_id == source_id, Item.link == link))
            )
            result = await session.execute(query)
            return (result.scalar() or 0) > 0

    async def get_by_source_and_link(self, source_id: UUID, link: str) -> Optional[Item]:
        """Retrieve the item a source has for ``link``."""
        async with get_db_session() as session:
            query = select(Item).where(and_(Item.source_id == source_id, Item.link == link))
            result = await session.execute(query)
            return result.scalar_one_or_none()

    async def find_by_content_hash(self, content_hash: str) -> List[Item]:
        """Find items across all sources sharing a content fingerprint.

        The empty fingerprint means "no content" and never matches anything.
        """
        if not content_hash:
            return []

        async with get_db_session() as session:
            query = (
                select(Item)
                .where(Item.content_hash == content_hash)
                .order_by(Item.discovered_at.asc())
            )
            result = await session.execute(query)
            return list(result.scalars().all())

    async def list_by_source(
        self,
        source_id: UUID,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[Item]:
        """List a source's items, newest publication first.

        Items without a publication date (scraped pages) sort last and are
        ordered among themselves by discovery time.
        """
        async with get_db_session() as session:
            query = (
                select(Item)
                .where(Item.source_id == source_id)
                .order_by(
                    Item.published_at.desc().nulls_last(),
                    Item.discovered_at.desc()
                )
            )
            if offset:
                query = query.offset(offset)
            if limit:
                query = query.limit(limit)

            result = await session.execute(query)
            return list(result.scalars().all())

    async def list_items(
        self,
        source_id: Optional[UUID] = None,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[Item]:
        """List items, optionally restricted to one source."""
        if source_id is not None:
            return await self.list_by_source(source_id, limit=limit, offset=offset)

        async with get_db_session() as session:
            query = select(Item).order_by(Item.discovered_at.desc())
            if offset:
                query = query.offset(offset)
            if limit:
                query = query.limit(limit)

            result = await session.execute(query)
            return list(result.scalars().all())

    async def list_discovered_after(self, after: datetime, limit: Optional[int] = None) -> List[Item]:
        """List items discovered strictly after ``after``, newest first."""
        async with get_db_session() as session:
            query = (
                select(Item)
                .where(Item.discovered_at > after)
                .order_by(Item.discovered_at.desc())
            )
            if limit:
                query = query.limit(limit)

            result = await session.execute(query)
            return list(result.scalars().all())

    async def count_by_source(self, source_id: UUID) -> int:
        """Count the items discovered for a source."""
        async with get_db_session() as session:
            query = select(func.count()).select_from(Item).where(Item.source_id == source_id)
            result = await session.execute(query)
            return result.scalar() or 0
