from datetime import datetime
from typing import Optional, TYPE_CHECKING
import uuid
from sqlalchemy import String, Text, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from .base import BaseModel, utc_now

if TYPE_CHECKING:
    from .source import Source


class Item(BaseModel):
    __tablename__ = "items"

    source_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("sources.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    title: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )

    link: Mapped[str] = mapped_column(
        Text,
        nullable=False
    )

    summary: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )

    # Absent for scraped HTML pages
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True
    )

    discovered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        index=True
    )

    # Empty string when there was no text to fingerprint
    content_hash: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        index=True
    )

    source: Mapped["Source"] = relationship(
        "Source",
        back_populates="items",
        lazy="selectin"
    )

    __table_args__ = (
        UniqueConstraint("source_id", "link", name="uk_items_source_link"),
    )

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, source_id={self.source_id}, link='{self.link[:50]}')>"
