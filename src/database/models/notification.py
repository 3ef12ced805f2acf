from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
import uuid
from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, JSON, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from .base import BaseModel, utc_now


class NotificationStatus(str, Enum):
    """Delivery state of a notification."""
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"
    RETRYING = "RETRYING"


class Notification(BaseModel):
    """Delivery record for an item. Written by delivery collaborators, never by the crawler."""

    __tablename__ = "notifications"

    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    channel: Mapped[str] = mapped_column(
        String(50),
        nullable=False
    )

    payload: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True
    )

    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        index=True
    )

    status: Mapped[NotificationStatus] = mapped_column(
        SQLEnum(NotificationStatus, name="notification_status", native_enum=False, length=20),
        nullable=False,
        default=NotificationStatus.PENDING,
        index=True
    )

    error_message: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )

    retry_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0"
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, channel='{self.channel}', status={self.status})>"
