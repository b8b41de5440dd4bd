"""Tests for stream repositories."""

import uuid
from datetime import datetime, timezone

import asyncpg
import pytest

from core import db
from core.errors import StoreError
from streams.repository import InMemoryStreamRepository, PostgresStreamRepository

pytestmark = pytest.mark.anyio


async def test_create_and_find_by_id(repo, stream_factory):
    stream = stream_factory()
    created = await repo.create(stream)

    found = await repo.find_by_id(created.stream_id)
    assert found == stream


async def test_find_by_id_not_found(repo):
    assert await repo.find_by_id(uuid.uuid4()) is None


async def test_duplicate_id_is_store_error(repo, stream_factory):
    stream = stream_factory()
    await repo.create(stream)
    with pytest.raises(StoreError):
        await repo.create(stream_factory(stream_id=stream.stream_id))


async def test_find_all_newest_first(repo, stream_factory):
    old = await repo.create(stream_factory(title="old", minutes_ago=10))
    new = await repo.create(stream_factory(title="new", minutes_ago=1))
    mid = await repo.create(stream_factory(title="mid", minutes_ago=5))

    streams, total = await repo.find_all()
    assert [s.stream_id for s in streams] == [new.stream_id, mid.stream_id, old.stream_id]
    assert total == 3


async def test_find_all_ties_are_deterministic(repo, stream_factory):
    same_time = datetime(2026, 1, 1, tzinfo=timezone.utc)
    for _ in range(5):
        await repo.create(stream_factory(created_at=same_time))

    first, _ = await repo.find_all()
    second, _ = await repo.find_all()
    assert [s.stream_id for s in first] == [s.stream_id for s in second]
    assert [s.stream_id for s in first] == sorted((s.stream_id for s in first), reverse=True)


async def test_find_all_defaults_to_ten(repo, stream_factory):
    for i in range(15):
        await repo.create(stream_factory(minutes_ago=i))

    streams, total = await repo.find_all()
    assert len(streams) == 10
    assert total == 15


async def test_find_all_total_ignores_window(repo, stream_factory):
    created = [await repo.create(stream_factory(minutes_ago=i)) for i in range(7)]

    streams, total = await repo.find_all(limit=3, offset=2)
    assert total == 7
    assert [s.stream_id for s in streams] == [s.stream_id for s in created[2:5]]


async def test_find_all_offset_past_end(repo, stream_factory):
    await repo.create(stream_factory())
    streams, total = await repo.find_all(limit=10, offset=50)
    assert streams == []
    assert total == 1


async def test_find_all_category_is_exact_match(repo, stream_factory):
    await repo.create(stream_factory(category="music"))
    await repo.create(stream_factory(category="Music"))
    await repo.create(stream_factory(category="music-live"))
    await repo.create(stream_factory(category=""))

    streams, total = await repo.find_all(category="music")
    assert total == 1
    assert [s.category for s in streams] == ["music"]


async def test_find_all_excludes_soft_deleted(repo, stream_factory):
    keep = await repo.create(stream_factory(category="news"))
    gone = await repo.create(stream_factory(category="news"))
    await repo.delete(gone.stream_id)

    for category in (None, "news"):
        streams, total = await repo.find_all(category=category)
        assert [s.stream_id for s in streams] == [keep.stream_id]
        assert total == 1
        assert all(s.deleted_at is None for s in streams)


async def test_delete_is_soft(repo, stream_factory):
    stream = await repo.create(stream_factory())
    await repo.delete(stream.stream_id)

    assert await repo.find_by_id(stream.stream_id) is None
    rows = repo.all_rows()
    assert len(rows) == 1
    assert rows[0].deleted_at is not None


async def test_delete_twice_is_idempotent(repo, stream_factory):
    stream = await repo.create(stream_factory())
    await repo.delete(stream.stream_id)
    await repo.delete(stream.stream_id)
    assert await repo.find_by_id(stream.stream_id) is None


async def test_delete_unknown_id_succeeds(repo):
    await repo.delete(uuid.uuid4())
    assert repo.all_rows() == []


async def test_soft_deleted_id_still_blocks_reuse(repo, stream_factory):
    stream = await repo.create(stream_factory())
    await repo.delete(stream.stream_id)
    with pytest.raises(StoreError):
        await repo.create(stream_factory(stream_id=stream.stream_id))


async def test_seeded_repository(stream_factory):
    seeded = InMemoryStreamRepository([stream_factory(), stream_factory()])
    _, total = await seeded.find_all()
    assert total == 2


class _RecordingDb:
    """Stands in for core.db helpers and records the SQL they receive."""

    def __init__(self, *, one=None, many=None, affected=1, error=None):
        self.calls = []
        self._one = list(one or [])
        self._many = many or []
        self._affected = affected
        self._error = error

    def _record(self, kind, sql, args):
        self.calls.append((kind, " ".join(sql.split()), args))
        if self._error is not None:
            raise self._error

    async def fetch_one(self, sql, *args):
        self._record("one", sql, args)
        return self._one.pop(0) if self._one else None

    async def fetch_all(self, sql, *args):
        self._record("many", sql, args)
        return self._many

    async def execute(self, sql, *args):
        self._record("execute", sql, args)
        return self._affected

    def install(self, monkeypatch):
        monkeypatch.setattr(db, "fetch_one", self.fetch_one)
        monkeypatch.setattr(db, "fetch_all", self.fetch_all)
        monkeypatch.setattr(db, "execute", self.execute)
        return self


def _row(stream):
    return {
        "stream_id": stream.stream_id,
        "user_id": stream.user_id,
        "title": stream.title,
        "description": stream.description,
        "category": stream.category,
        "created_at": stream.created_at,
        "deleted_at": None,
    }


async def test_postgres_create_returns_persisted_row(monkeypatch, stream_factory):
    stream = stream_factory(category="talk")
    fake = _RecordingDb(one=[_row(stream)]).install(monkeypatch)

    created = await PostgresStreamRepository().create(stream)

    assert created == stream
    kind, sql, args = fake.calls[0]
    assert sql.startswith("INSERT INTO streams")
    assert "RETURNING" in sql
    assert args[0] == stream.stream_id
    assert args[4] == "talk"


async def test_postgres_find_by_id_filters_deleted(monkeypatch):
    fake = _RecordingDb().install(monkeypatch)
    stream_id = uuid.uuid4()

    assert await PostgresStreamRepository().find_by_id(stream_id) is None
    _, sql, args = fake.calls[0]
    assert "deleted_at IS NULL" in sql
    assert args == (stream_id,)


async def test_postgres_find_all_applies_defaults(monkeypatch, stream_factory):
    stream = stream_factory()
    fake = _RecordingDb(one=[{"n": 4}], many=[_row(stream)]).install(monkeypatch)

    streams, total = await PostgresStreamRepository().find_all(category=None)

    assert streams == [stream]
    assert total == 4
    _, list_sql, list_args = fake.calls[0]
    assert "ORDER BY created_at DESC" in list_sql
    assert list_args == (None, 10, 0)
    _, count_sql, count_args = fake.calls[1]
    assert "count(*)" in count_sql
    assert count_args == (None,)


async def test_postgres_find_all_passes_filter_and_window(monkeypatch):
    fake = _RecordingDb(one=[{"n": 0}]).install(monkeypatch)

    await PostgresStreamRepository().find_all(category="music", limit=25, offset=50)

    assert fake.calls[0][2] == ("music", 25, 50)
    assert fake.calls[1][2] == ("music",)


async def test_postgres_delete_is_unconditional_update(monkeypatch):
    fake = _RecordingDb(affected=0).install(monkeypatch)
    stream_id = uuid.uuid4()

    await PostgresStreamRepository().delete(stream_id)

    kind, sql, args = fake.calls[0]
    assert kind == "execute"
    assert sql.startswith("UPDATE streams SET deleted_at = now()")
    assert "deleted_at IS NULL" not in sql
    assert args == (stream_id,)


@pytest.mark.parametrize(
    "error",
    [
        ConnectionRefusedError("connection refused"),
        asyncpg.InterfaceError("pool is closed"),
        TimeoutError(),
    ],
)
async def test_postgres_failures_become_store_errors(monkeypatch, stream_factory, error):
    _RecordingDb(error=error).install(monkeypatch)
    repository = PostgresStreamRepository()

    with pytest.raises(StoreError) as exc_info:
        await repository.create(stream_factory())
    assert exc_info.value.__cause__ is error

    with pytest.raises(StoreError):
        await repository.find_by_id(uuid.uuid4())
    with pytest.raises(StoreError):
        await repository.find_all()
    with pytest.raises(StoreError):
        await repository.delete(uuid.uuid4())
