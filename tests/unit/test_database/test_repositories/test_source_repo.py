"""Tests for SourceRepository against an in-memory SQLite database."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from src.database.models.source import SourceMode
from src.database.repositories.item_repo import ItemRepository
from src.database.repositories.source_repo import SourceRepository


def source_data(url: str, **overrides):
    data = {
        "name": "Example",
        "url": url,
        "mode": SourceMode.RSS,
        "filter_keywords": [],
        "filter_regex": [],
        "interval_minutes": 60,
    }
    data.update(overrides)
    return data


class TestSourceRepository:

    @pytest.fixture
    def repo(self, test_db):
        return SourceRepository()

    @pytest.mark.asyncio
    async def test_create_and_get(self, repo):
        created = await repo.create(source_data("https://example.com/rss", filter_keywords=["python"]))

        fetched = await repo.get_by_id(created.id)

        assert fetched.url == "https://example.com/rss"
        assert fetched.mode == SourceMode.RSS
        assert fetched.filter_keywords == ["python"]
        assert fetched.last_checked is None

    @pytest.mark.asyncio
    async def test_url_is_unique(self, repo):
        await repo.create(source_data("https://example.com/rss"))

        with pytest.raises(IntegrityError):
            await repo.create(source_data("https://example.com/rss", name="Other"))

    @pytest.mark.asyncio
    async def test_lookup_by_url(self, repo):
        await repo.create(source_data("https://example.com/rss"))

        assert await repo.exists_by_url("https://example.com/rss")
        assert not await repo.exists_by_url("https://example.com/other")
        assert (await repo.get_by_url("https://example.com/rss")).name == "Example"

    @pytest.mark.asyncio
    async def test_search_by_name_ignores_case(self, repo):
        await repo.create(source_data("https://a.example.com", name="Kubernetes Blog"))
        await repo.create(source_data("https://b.example.com", name="Python Insider"))

        found = await repo.search_by_name("kubernetes")

        assert [s.name for s in found] == ["Kubernetes Blog"]

    @pytest.mark.asyncio
    async def test_update_last_checked(self, repo):
        source = await repo.create(source_data("https://example.com/rss"))
        checked_at = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

        assert await repo.update_last_checked(source.id, checked_at)
        assert not await repo.update_last_checked(uuid4(), checked_at)

        refreshed = await repo.get_by_id(source.id)
        assert refreshed.last_checked.replace(tzinfo=None) == datetime(2024, 6, 1, 12, 0)

    @pytest.mark.asyncio
    async def test_due_sources(self, repo):
        now = datetime.now(timezone.utc)
        never = await repo.create(source_data("https://never.example.com"))
        stale = await repo.create(source_data("https://stale.example.com", interval_minutes=30))
        fresh = await repo.create(source_data("https://fresh.example.com", interval_minutes=30))
        await repo.update_last_checked(stale.id, now - timedelta(minutes=45))
        await repo.update_last_checked(fresh.id, now - timedelta(minutes=10))

        due = await repo.get_due_sources(now)

        assert [s.id for s in due] == [never.id, stale.id]
        assert fresh.id not in {s.id for s in due}

    @pytest.mark.asyncio
    async def test_delete_cascades_to_items(self, repo):
        source = await repo.create(source_data("https://example.com/rss"))
        items = ItemRepository()
        await items.create({"source_id": source.id, "title": "One", "link": "https://example.com/1"})

        assert await repo.delete_by_id(source.id)

        assert await repo.get_by_id(source.id) is None
        assert await items.count() == 0
