from .base import BaseRepository
from .source_repo import SourceRepository
from .item_repo import ItemRepository
from .notification_repo import NotificationRepository

__all__ = [
    "BaseRepository",
    "SourceRepository",
    "ItemRepository",
    "NotificationRepository"
]
