from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app.main import app
from app.services.extractors.default import DefaultExtractor
from app.workers.fetcher import HttpFetcher


@pytest.fixture
def client():
    """TestClient with the database left disconnected and no HTTP client to close."""
    with (
        patch(
            "app.core.database.DatabaseManager.connect",
            new_callable=AsyncMock,
            return_value=False,
        ),
        patch(
            "app.core.database.DatabaseManager.disconnect",
            new_callable=AsyncMock,
        ),
        patch(
            "app.workers.fetcher.HttpFetcher.aclose",
            new_callable=AsyncMock,
        ),
    ):
        with TestClient(app) as c:
            yield c


@pytest.fixture
def fetcher():
    """HttpFetcher double; set ``fetch_html`` / ``fetch_json`` per test."""
    return AsyncMock(spec=HttpFetcher)


@pytest.fixture
def default_extractor(fetcher):
    return DefaultExtractor(fetcher)


@pytest.fixture
def mongo_collection():
    """In-memory Motor collection for cache repository tests."""
    return AsyncMongoMockClient().link_preview.metadata_cache
