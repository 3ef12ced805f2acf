"""Unit tests for SourceManager business logic.

Test Coverage:
- Source creation with validation (name, URL scheme, interval bounds)
- URL uniqueness, including the race where the store rejects the insert
- Keyword cleanup
- Lookup, listing and deletion with not-found handling
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from sqlalchemy.exc import IntegrityError

from src.core.source.manager import SourceManager
from src.database.models.source import Source, SourceMode
from src.database.repositories.source_repo import SourceRepository
from src.shared.config import Settings
from src.shared.exceptions import (
    SourceValidationError,
    SourceNotFoundError,
    DuplicateSourceUrlError
)


class TestSourceManager:
    """Test cases for SourceManager class."""

    @pytest.fixture
    def mock_repository(self):
        repository = AsyncMock(spec=SourceRepository)
        repository.exists_by_url.return_value = False
        return repository

    @pytest.fixture
    def source_manager(self, mock_repository):
        return SourceManager(mock_repository, MagicMock(spec=Settings))

    @pytest.fixture
    def sample_source(self):
        return Source(
            id=uuid4(),
            name="Kubernetes blog",
            url="https://kubernetes.io/feed.xml",
            mode=SourceMode.RSS,
            filter_keywords=["release"],
            filter_regex=[],
            interval_minutes=60
        )

    @pytest.mark.asyncio
    async def test_create_source_with_valid_data_succeeds(
        self, source_manager, mock_repository, sample_source
    ):
        # Arrange
        mock_repository.create.return_value = sample_source

        # Act
        result = await source_manager.create_source(
            name="  Kubernetes blog ",
            url="https://kubernetes.io/feed.xml",
            mode=SourceMode.RSS,
            filter_keywords=[" release ", "", "   "],
            filter_regex=[r"v\d+", ""]
        )

        # Assert
        assert result == sample_source
        mock_repository.exists_by_url.assert_awaited_once_with("https://kubernetes.io/feed.xml")
        mock_repository.create.assert_awaited_once_with({
            "name": "Kubernetes blog",
            "url": "https://kubernetes.io/feed.xml",
            "mode": SourceMode.RSS,
            "filter_keywords": ["release"],
            "filter_regex": [r"v\d+"],
            "interval_minutes": 60,
        })

    @pytest.mark.asyncio
    async def test_create_source_accepts_mode_string(self, source_manager, mock_repository, sample_source):
        mock_repository.create.return_value = sample_source

        await source_manager.create_source(name="Blog", url="https://example.com", mode="AUTO")

        assert mock_repository.create.await_args.args[0]["mode"] == SourceMode.AUTO

    @pytest.mark.asyncio
    async def test_create_source_with_duplicate_url_raises_error(self, source_manager, mock_repository):
        mock_repository.exists_by_url.return_value = True

        with pytest.raises(DuplicateSourceUrlError):
            await source_manager.create_source(
                name="Blog", url="https://kubernetes.io/feed.xml", mode=SourceMode.RSS
            )

        mock_repository.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_source_race_on_url_raises_duplicate(self, source_manager, mock_repository):
        mock_repository.create.side_effect = IntegrityError("INSERT", {}, Exception("unique"))

        with pytest.raises(DuplicateSourceUrlError):
            await source_manager.create_source(name="Blog", url="https://example.com", mode=SourceMode.RSS)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["ftp://example.com/feed", "example.com/feed", "", "javascript:alert(1)"])
    async def test_create_source_with_invalid_url_raises_validation_error(self, source_manager, url):
        with pytest.raises(SourceValidationError) as exc_info:
            await source_manager.create_source(name="Blog", url=url, mode=SourceMode.RSS)

        assert "http" in exc_info.value.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   ", "x" * 256])
    async def test_create_source_with_invalid_name_raises_validation_error(self, source_manager, name):
        with pytest.raises(SourceValidationError):
            await source_manager.create_source(name=name, url="https://example.com", mode=SourceMode.RSS)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("interval", [0, -5, 10081])
    async def test_create_source_with_interval_out_of_range_raises_validation_error(
        self, source_manager, mock_repository, interval
    ):
        with pytest.raises(SourceValidationError):
            await source_manager.create_source(
                name="Blog", url="https://example.com", mode=SourceMode.RSS, interval_minutes=interval
            )

        mock_repository.create.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("interval", [1, 10080])
    async def test_create_source_interval_bounds_are_inclusive(
        self, source_manager, mock_repository, sample_source, interval
    ):
        mock_repository.create.return_value = sample_source

        await source_manager.create_source(
            name="Blog", url="https://example.com", mode=SourceMode.RSS, interval_minutes=interval
        )

        assert mock_repository.create.await_args.args[0]["interval_minutes"] == interval

    @pytest.mark.asyncio
    async def test_get_source_not_found(self, source_manager, mock_repository):
        mock_repository.get_by_id.return_value = None

        with pytest.raises(SourceNotFoundError):
            await source_manager.get_source(uuid4())

    @pytest.mark.asyncio
    async def test_list_sources_with_name_filter_searches(self, source_manager, mock_repository, sample_source):
        mock_repository.search_by_name.return_value = [sample_source]

        result = await source_manager.list_sources(name_filter=" kube ")

        assert result == [sample_source]
        mock_repository.search_by_name.assert_awaited_once_with("kube")
        mock_repository.get_all.assert_not_called()

    @pytest.mark.asyncio
    async def test_list_sources_without_filter_returns_all(self, source_manager, mock_repository):
        mock_repository.get_all.return_value = []

        assert await source_manager.list_sources() == []
        mock_repository.get_all.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_source(self, source_manager, mock_repository):
        source_id = uuid4()
        mock_repository.exists_by_id.return_value = True

        await source_manager.delete_source(source_id)

        mock_repository.delete_by_id.assert_awaited_once_with(source_id)

    @pytest.mark.asyncio
    async def test_delete_missing_source_raises(self, source_manager, mock_repository):
        mock_repository.exists_by_id.return_value = False

        with pytest.raises(SourceNotFoundError):
            await source_manager.delete_source(uuid4())

        mock_repository.delete_by_id.assert_not_called()
