"""Tests for the source management API routes."""

import pytest
from unittest.mock import AsyncMock
from uuid import uuid4
from fastapi import status

from src.api.main import app
from src.api.routes.sources import get_source_manager
from src.core.source.manager import SourceManager
from src.database.models.source import SourceMode
from src.shared.exceptions import (
    DuplicateSourceUrlError,
    SourceNotFoundError,
    SourceValidationError
)


@pytest.fixture
def manager():
    mock_manager = AsyncMock(spec=SourceManager)
    app.dependency_overrides[get_source_manager] = lambda: mock_manager
    return mock_manager


class TestCreateSource:

    def test_create_source_returns_201(self, client, manager, source_record, sample_source_data):
        manager.create_source.return_value = source_record

        response = client.post("/api/v1/sources", json=sample_source_data)

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["id"] == str(source_record.id)
        assert body["mode"] == "RSS"
        assert body["filter_keywords"] == ["release"]
        assert body["filter_regex"] == []
        assert body["last_checked"] is None

        kwargs = manager.create_source.await_args.kwargs
        assert kwargs["mode"] == SourceMode.RSS
        assert kwargs["interval_minutes"] == 60

    def test_duplicate_url_returns_409(self, client, manager, sample_source_data):
        manager.create_source.side_effect = DuplicateSourceUrlError(sample_source_data["url"])

        response = client.post("/api/v1/sources", json=sample_source_data)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert sample_source_data["url"] in response.json()["detail"]

    def test_manager_validation_error_returns_400(self, client, manager, sample_source_data):
        manager.create_source.side_effect = SourceValidationError("Source name cannot be empty")

        response = client.post("/api/v1/sources", json=sample_source_data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.parametrize("override", [
        {"url": "ftp://example.com/feed"},
        {"mode": "rss"},
        {"interval_minutes": 0},
        {"interval_minutes": 10081},
        {"name": ""},
    ])
    def test_invalid_payload_returns_422(self, client, manager, sample_source_data, override):
        payload = {**sample_source_data, **override}

        response = client.post("/api/v1/sources", json=payload)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["validation_errors"]
        manager.create_source.assert_not_called()

    def test_blank_name_rejected_by_schema(self, client, manager, sample_source_data):
        response = client.post("/api/v1/sources", json={**sample_source_data, "name": "   "})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        manager.create_source.assert_not_called()


class TestReadAndDeleteSource:

    def test_list_sources_with_name_filter(self, client, manager, source_record):
        manager.list_sources.return_value = [source_record]

        response = client.get("/api/v1/sources", params={"name": "kube"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["total"] == 1
        manager.list_sources.assert_awaited_once_with(name_filter="kube")

    def test_list_sources_failure_returns_500(self, client, manager):
        manager.list_sources.side_effect = RuntimeError("database down")

        response = client.get("/api/v1/sources")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["detail"] == "Failed to retrieve sources"

    def test_get_source(self, client, manager, source_record):
        manager.get_source.return_value = source_record

        response = client.get(f"/api/v1/sources/{source_record.id}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "Kubernetes blog"

    def test_get_missing_source_returns_404(self, client, manager):
        source_id = uuid4()
        manager.get_source.side_effect = SourceNotFoundError(str(source_id))

        response = client.get(f"/api/v1/sources/{source_id}")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert "X-Correlation-ID" in response.headers

    def test_get_source_with_malformed_id_returns_422(self, client, manager):
        response = client.get("/api/v1/sources/not-a-uuid")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_delete_source_returns_204(self, client, manager):
        source_id = uuid4()

        response = client.delete(f"/api/v1/sources/{source_id}")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert response.content == b""
        manager.delete_source.assert_awaited_once_with(source_id)

    def test_delete_missing_source_returns_404(self, client, manager):
        source_id = uuid4()
        manager.delete_source.side_effect = SourceNotFoundError(str(source_id))

        response = client.delete(f"/api/v1/sources/{source_id}")

        assert response.status_code == status.HTTP_404_NOT_FOUND
