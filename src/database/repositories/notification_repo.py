"""Notification repository.

Read-side queries for delivery collaborators. The crawler never writes
notifications.
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy import select, func, and_

from src.database.repositories.base import BaseRepository
from src.database.models.notification import Notification, NotificationStatus
from src.database.connection import get_db_session


class NotificationRepository(BaseRepository[Notification]):

    model_class = Notification

    async def list_by_item(self, item_id: UUID, limit: Optional[int] = None) -> List[Notification]:
        async with get_db_session() as session:
            query = (
                select(Notification)
                .where(Notification.item_id == item_id)
                .order_by(Notification.sent_at.desc())
            )
            if limit:
                query = query.limit(limit)
            result = await session.execute(query)
            return list(result.scalars().all())

    async def list_by_status(self, status: NotificationStatus) -> List[Notification]:
        async with get_db_session() as session:
            query = select(Notification).where(Notification.status == status)
            result = await session.execute(query)
            return list(result.scalars().all())

    async def list_retryable(self, status: NotificationStatus, max_retries: int) -> List[Notification]:
        """Notifications in ``status`` that have been retried fewer than ``max_retries`` times."""
        async with get_db_session() as session:
            query = select(Notification).where(
                and_(
                    Notification.status == status,
                    Notification.retry_count < max_retries
                )
            )
            result = await session.execute(query)
            return list(result.scalars().all())

    async def count_by_status(self, status: NotificationStatus) -> int:
        async with get_db_session() as session:
            query = (
                select(func.count())
                .select_from(Notification)
                .where(Notification.status == status)
            )
            result = await session.execute(query)
            return result.scalar() or 0
