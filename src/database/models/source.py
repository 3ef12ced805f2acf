from enum import Enum
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime
from sqlalchemy import String, Text, Integer, DateTime, CheckConstraint, JSON, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from .base import BaseModel

if TYPE_CHECKING:
    from .item import Item


class SourceMode(str, Enum):
    """How a source is crawled."""
    RSS = "RSS"
    HTML = "HTML"
    AUTO = "AUTO"


class Source(BaseModel):
    __tablename__ = "sources"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True
    )

    url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        unique=True,
        index=True
    )

    mode: Mapped[SourceMode] = mapped_column(
        SQLEnum(SourceMode, name="source_mode", native_enum=False, length=10),
        nullable=False
    )

    filter_keywords: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list
    )

    filter_regex: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list
    )

    interval_minutes: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=60,
        server_default="60"
    )

    # NULL means the source has never been checked
    last_checked: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True
    )

    items: Mapped[List["Item"]] = relationship(
        "Item",
        back_populates="source",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("length(name) >= 1", name="source_name_not_empty"),
        CheckConstraint("length(url) >= 1", name="source_url_not_empty"),
        CheckConstraint(
            "interval_minutes >= 1 AND interval_minutes <= 10080",
            name="source_interval_range"
        ),
    )

    def __repr__(self) -> str:
        return f"<Source(id={self.id}, name='{self.name}', mode={self.mode})>"
