"""Pydantic schemas for Source API requests and responses.

This module defines the data validation schemas used by the Source API endpoints
for request validation and response formatting.

Example:
    ```python
    from src.api.schemas.source import CreateSourceRequest

    # This will raise ValidationError if invalid
    request = CreateSourceRequest(
        name="Kubernetes blog",
        url="https://kubernetes.io/feed.xml",
        mode="RSS",
        filter_keywords=["release"]
    )
    ```
"""

from typing import List, Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.database.models.source import SourceMode


class CreateSourceRequest(BaseModel):
    """Schema for registering a new monitored source."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Display name",
        examples=["Kubernetes blog"]
    )

    url: str = Field(
        ...,
        pattern=r"^https?://",
        description="Feed or page URL (must be unique)",
        examples=["https://kubernetes.io/feed.xml"]
    )

    mode: SourceMode = Field(
        ...,
        description="Crawl strategy: RSS, HTML or AUTO",
        examples=["RSS"]
    )

    filter_keywords: List[str] = Field(
        default_factory=list,
        description="Accept items containing any of these keywords (case-insensitive)",
        examples=[["release", "security"]]
    )

    filter_regex: List[str] = Field(
        default_factory=list,
        description="Accept items matching any of these regular expressions",
        examples=[[r"v\d+\.\d+"]]
    )

    interval_minutes: int = Field(
        60,
        ge=1,
        le=10080,
        description="Minutes between checks (1 minute to 1 week)",
        examples=[60]
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Source name cannot be empty")
        return v.strip()

    @field_validator("filter_keywords")
    @classmethod
    def validate_keywords(cls, v: List[str]) -> List[str]:
        return [kw.strip() for kw in v if kw and kw.strip()]


class SourceResponse(BaseModel):
    """Schema for source responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    url: str
    mode: SourceMode
    filter_keywords: List[str] = Field(default_factory=list)
    filter_regex: List[str] = Field(default_factory=list)
    interval_minutes: int
    last_checked: Optional[datetime] = Field(None, description="Last completed check, null if never checked")
    created_at: datetime
    updated_at: datetime

    @field_validator("filter_keywords", "filter_regex", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []


class SourceListResponse(BaseModel):
    """Schema for source list responses."""

    sources: List[SourceResponse]
    total: int


class CrawlResponse(BaseModel):
    """Schema for the result of an on-demand crawl."""

    source_id: UUID
    items_discovered: int = Field(..., description="New items persisted by this crawl")
    status: str = Field("completed", examples=["completed"])


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    error: str = Field(..., description="Error type")
    detail: str = Field(..., description="Error message")
    correlation_id: Optional[str] = None
