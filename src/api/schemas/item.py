"""Item schemas for API responses."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict


class ItemResponse(BaseModel):
    """Response schema for a discovered item."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    source_id: UUID = Field(..., description="Source that produced this item")
    source_name: Optional[str] = Field(None, description="Name of the producing source")
    title: Optional[str] = Field(None, description="Item title")
    link: str = Field(..., description="Item link, unique per source")
    summary: Optional[str] = Field(None, description="Plain-text snippet of the content")
    published_at: Optional[datetime] = Field(None, description="Publication time, null for scraped pages")
    discovered_at: datetime = Field(..., description="When the crawler first persisted the item")
    content_hash: Optional[str] = Field(None, description="SHA-256 fingerprint of the normalized content")


class ItemListResponse(BaseModel):
    """Response schema for paginated item listing."""

    items: List[ItemResponse] = Field(..., description="List of items")
    total: int = Field(..., description="Total number of items matching filters")
    limit: int = Field(..., description="Page size")
    offset: int = Field(..., description="Number of items skipped")
