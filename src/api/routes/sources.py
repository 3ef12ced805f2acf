"""FastAPI routes for Source management endpoints.

Endpoints:
- GET /sources - List sources, optionally filtered by name
- POST /sources - Register a new source
- GET /sources/{source_id} - Get a source by ID
- DELETE /sources/{source_id} - Delete a source and its items

Example:
    ```python
    import httpx

    async def register_source():
        async with httpx.AsyncClient(base_url="http://localhost:8000") as client:
            response = await client.post("/api/v1/sources", json={
                "name": "Kubernetes blog",
                "url": "https://kubernetes.io/feed.xml",
                "mode": "RSS",
                "filter_keywords": ["release"]
            })
            source = response.json()
            await client.delete(f"/api/v1/sources/{source['id']}")
    ```
"""

import logging
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, HTTPException, Depends, Query, Response, status

from src.core.source.manager import SourceManager
from src.database.repositories.source_repo import SourceRepository
from src.shared.config import get_settings, Settings
from src.shared.exceptions import (
    SourceValidationError,
    SourceNotFoundError,
    DuplicateSourceUrlError
)
from src.api.schemas.source import (
    CreateSourceRequest,
    SourceResponse,
    SourceListResponse,
    ErrorResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/sources", tags=["sources"])


def get_source_manager(settings: Settings = Depends(get_settings)) -> SourceManager:
    """Dependency to provide SourceManager instance."""
    return SourceManager(SourceRepository(), settings)


@router.get(
    "",
    response_model=SourceListResponse,
    summary="List sources",
    description="Retrieve all monitored sources, optionally filtered by a name substring."
)
async def list_sources(
    name: Optional[str] = Query(None, description="Case-insensitive name filter"),
    manager: SourceManager = Depends(get_source_manager)
) -> SourceListResponse:
    """List monitored sources."""
    try:
        sources = await manager.list_sources(name_filter=name)
    except Exception as e:
        logger.error(f"Failed to list sources: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve sources"
        )

    return SourceListResponse(
        sources=[SourceResponse.model_validate(source) for source in sources],
        total=len(sources)
    )


@router.post(
    "",
    response_model=SourceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a source",
    responses={
        201: {"description": "Source created successfully"},
        400: {"model": ErrorResponse, "description": "Validation error"},
        409: {"model": ErrorResponse, "description": "Source URL already monitored"}
    }
)
async def create_source(
    request: CreateSourceRequest,
    manager: SourceManager = Depends(get_source_manager)
) -> SourceResponse:
    """Register a new source."""
    try:
        source = await manager.create_source(
            name=request.name,
            url=request.url,
            mode=request.mode,
            filter_keywords=request.filter_keywords,
            filter_regex=request.filter_regex,
            interval_minutes=request.interval_minutes
        )
    except DuplicateSourceUrlError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=e.message
        )
    except SourceValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )

    return SourceResponse.model_validate(source)


@router.get(
    "/{source_id}",
    response_model=SourceResponse,
    summary="Get source by ID",
    responses={
        404: {"model": ErrorResponse, "description": "Source not found"}
    }
)
async def get_source(
    source_id: UUID,
    manager: SourceManager = Depends(get_source_manager)
) -> SourceResponse:
    try:
        source = await manager.get_source(source_id)
    except SourceNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message
        )

    return SourceResponse.model_validate(source)


@router.delete(
    "/{source_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete source by ID",
    description="Delete a source. Its items are removed with it.",
    responses={
        204: {"description": "Source deleted"},
        404: {"model": ErrorResponse, "description": "Source not found"}
    }
)
async def delete_source(
    source_id: UUID,
    manager: SourceManager = Depends(get_source_manager)
) -> Response:
    try:
        await manager.delete_source(source_id)
    except SourceNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)
