"""FastAPI routes for browsing discovered items.

Endpoints:
- GET /items - List items, newest first, optionally for one source
- GET /items/{item_id} - Get a single item
"""

import logging
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, HTTPException, Depends, Query, status

from src.database.models.item import Item
from src.database.repositories.item_repo import ItemRepository
from src.api.schemas.item import ItemResponse, ItemListResponse
from src.api.schemas.source import ErrorResponse
from src.shared.exceptions import ItemNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/items", tags=["items"])


def get_item_repository() -> ItemRepository:
    """Dependency to provide ItemRepository instance."""
    return ItemRepository()


def _to_response(item: Item) -> ItemResponse:
    response = ItemResponse.model_validate(item)
    response.source_name = item.source.name if item.source is not None else None
    return response


@router.get(
    "",
    response_model=ItemListResponse,
    summary="List items",
    description="List discovered items, ordered by publication time with undated items last."
)
async def list_items(
    source_id: Optional[UUID] = Query(None, description="Restrict to one source"),
    limit: int = Query(50, ge=1, le=500, description="Page size"),
    offset: int = Query(0, ge=0, description="Number of items to skip"),
    repository: ItemRepository = Depends(get_item_repository)
) -> ItemListResponse:
    try:
        items = await repository.list_items(source_id=source_id, limit=limit, offset=offset)
        if source_id is not None:
            total = await repository.count_by_source(source_id)
        else:
            total = await repository.count()
    except Exception as e:
        logger.error(f"Failed to list items: {e}", extra={"source_id": str(source_id) if source_id else None})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve items"
        )

    return ItemListResponse(
        items=[_to_response(item) for item in items],
        total=total,
        limit=limit,
        offset=offset
    )


@router.get(
    "/{item_id}",
    response_model=ItemResponse,
    summary="Get item by ID",
    responses={
        404: {"model": ErrorResponse, "description": "Item not found"}
    }
)
async def get_item(
    item_id: UUID,
    repository: ItemRepository = Depends(get_item_repository)
) -> ItemResponse:
    item = await repository.get_by_id(item_id)
    if item is None:
        # Rendered as 404 by the application error handler
        raise ItemNotFoundError(str(item_id))

    return _to_response(item)
