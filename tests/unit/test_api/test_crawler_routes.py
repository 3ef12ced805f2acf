"""Tests for the on-demand crawl route and service endpoints."""

import pytest
from unittest.mock import AsyncMock, patch
from uuid import uuid4
from fastapi import status

from src.api.main import app
from src.api.routes.crawler import get_crawler_engine
from src.core.crawler.engine import CrawlerEngine
from src.shared.exceptions import SourceNotFoundError


@pytest.fixture
def engine():
    mock_engine = AsyncMock(spec=CrawlerEngine)
    app.dependency_overrides[get_crawler_engine] = lambda: mock_engine
    return mock_engine


def test_crawl_source_reports_new_items(client, engine):
    source_id = uuid4()
    engine.crawl_source.return_value = 3

    response = client.post(f"/api/v1/crawler/sources/{source_id}/crawl")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "source_id": str(source_id),
        "items_discovered": 3,
        "status": "completed"
    }
    engine.crawl_source.assert_awaited_once_with(source_id)


def test_crawl_with_nothing_new_still_completes(client, engine):
    engine.crawl_source.return_value = 0

    response = client.post(f"/api/v1/crawler/sources/{uuid4()}/crawl")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["items_discovered"] == 0


def test_crawl_unknown_source_returns_404(client, engine):
    source_id = uuid4()
    engine.crawl_source.side_effect = SourceNotFoundError(str(source_id))

    response = client.post(f"/api/v1/crawler/sources/{source_id}/crawl")

    assert response.status_code == status.HTTP_404_NOT_FOUND


class TestServiceEndpoints:

    def test_health_reports_connected_database(self, client):
        with patch("src.api.main.get_database_connection") as mock_get_connection:
            mock_get_connection.return_value.health_check = AsyncMock(return_value=True)

            response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["database"] == "connected"

    def test_health_fails_when_database_unreachable(self, client):
        with patch("src.api.main.get_database_connection") as mock_get_connection:
            mock_get_connection.return_value.health_check = AsyncMock(return_value=False)

            response = client.get("/health")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    def test_root_lists_docs(self, client):
        response = client.get("/")

        assert response.json()["docs"] == "/api/v1/docs"
