"""Pytest configuration and fixtures."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from core.settings import Settings
from main import create_app
from streams.models import Stream
from streams.repository import InMemoryStreamRepository

OWNER_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def app_settings():
    return Settings(
        database_url="",
        repository_backend="memory",
        host="127.0.0.1",
        port=8080,
        api_prefix="/api/v1",
        cors_origins=["*"],
        log_level="INFO",
        db_pool_min_size=1,
        db_pool_max_size=5,
        db_command_timeout=30.0,
    )


@pytest.fixture
def repo():
    return InMemoryStreamRepository()


@pytest.fixture
def client(repo, app_settings):
    app = create_app(stream_repository=repo, app_settings=app_settings)
    with TestClient(app) as test_client:
        yield test_client


def make_stream(
    *,
    title: str = "Test Stream",
    description: str = "Test Description",
    category: str = "",
    created_at: datetime | None = None,
    minutes_ago: int = 0,
    stream_id: uuid.UUID | None = None,
) -> Stream:
    if created_at is None:
        created_at = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
    return Stream(
        stream_id=stream_id or uuid.uuid4(),
        user_id=OWNER_ID,
        title=title,
        description=description,
        category=category,
        created_at=created_at,
    )


@pytest.fixture
def stream_factory():
    return make_stream
