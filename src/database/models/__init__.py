from .base import Base, BaseModel
from .source import Source, SourceMode
from .item import Item
from .notification import Notification, NotificationStatus

__all__ = [
    "Base",
    "BaseModel",
    "Source",
    "SourceMode",
    "Item",
    "Notification",
    "NotificationStatus"
]
