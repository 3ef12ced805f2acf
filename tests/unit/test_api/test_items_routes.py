"""Tests for the item browsing API routes."""

import pytest
from unittest.mock import AsyncMock
from uuid import uuid4
from fastapi import status

from src.api.main import app
from src.api.routes.items import get_item_repository
from src.database.repositories.item_repo import ItemRepository


@pytest.fixture
def repository():
    mock_repository = AsyncMock(spec=ItemRepository)
    app.dependency_overrides[get_item_repository] = lambda: mock_repository
    return mock_repository


def test_list_items_includes_source_name(client, repository, item_record):
    repository.list_items.return_value = [item_record]
    repository.count.return_value = 7

    response = client.get("/api/v1/items", params={"limit": 1})

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["total"] == 7
    assert body["limit"] == 1
    assert body["offset"] == 0
    assert body["items"][0]["source_name"] == "Kubernetes blog"
    assert body["items"][0]["link"] == item_record.link
    repository.list_items.assert_awaited_once_with(source_id=None, limit=1, offset=0)


def test_list_items_for_one_source_counts_that_source(client, repository, item_record):
    repository.list_items.return_value = [item_record]
    repository.count_by_source.return_value = 1

    response = client.get("/api/v1/items", params={"source_id": str(item_record.source_id), "offset": 3})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["total"] == 1
    repository.count_by_source.assert_awaited_once_with(item_record.source_id)
    repository.count.assert_not_called()


@pytest.mark.parametrize("params", [{"limit": 0}, {"limit": 501}, {"offset": -1}])
def test_list_items_rejects_bad_paging(client, repository, params):
    response = client.get("/api/v1/items", params=params)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    repository.list_items.assert_not_called()


def test_get_item(client, repository, item_record):
    repository.get_by_id.return_value = item_record

    response = client.get(f"/api/v1/items/{item_record.id}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["content_hash"] == "a" * 64


def test_get_missing_item_returns_404(client, repository):
    repository.get_by_id.return_value = None
    item_id = uuid4()

    response = client.get(f"/api/v1/items/{item_id}")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    body = response.json()
    assert body["error"] == "ITEM_NOT_FOUND"
    assert body["details"] == {"item_id": str(item_id)}
