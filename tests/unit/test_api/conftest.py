"""Shared fixtures for API route tests."""

import pytest
from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4
from fastapi.testclient import TestClient

from src.api.main import app
from src.database.models.source import SourceMode


@pytest.fixture
def client():
    """Test client without lifespan, so no database is contacted at startup."""
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def source_record():
    now = datetime(2024, 8, 13, 9, 0, tzinfo=timezone.utc)
    return SimpleNamespace(
        id=uuid4(),
        name="Kubernetes blog",
        url="https://kubernetes.io/feed.xml",
        mode=SourceMode.RSS,
        filter_keywords=["release"],
        filter_regex=None,
        interval_minutes=60,
        last_checked=None,
        created_at=now,
        updated_at=now
    )


@pytest.fixture
def item_record(source_record):
    return SimpleNamespace(
        id=uuid4(),
        source_id=source_record.id,
        source=source_record,
        title="Kubernetes v1.31 release announced",
        link="https://kubernetes.io/blog/2024/08/13/kubernetes-v1-31-release/",
        summary="Kubernetes v1.31 is out with 45 enhancements.",
        published_at=datetime(2024, 8, 13, tzinfo=timezone.utc),
        discovered_at=datetime(2024, 8, 13, 9, 5, tzinfo=timezone.utc),
        content_hash="a" * 64
    )
