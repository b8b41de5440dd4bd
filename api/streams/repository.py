"""
Stream persistence.

`StreamRepository` is the contract the service layer depends on. Two
implementations share it:
- `PostgresStreamRepository`: raw SQL over the shared asyncpg pool
- `InMemoryStreamRepository`: dict-backed, for tests and database-free local runs

Soft delete: rows are never removed. `deleted_at` is stamped instead and every
read filters on `deleted_at IS NULL`.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Protocol
from uuid import UUID

import asyncpg

from core import db
from core.errors import StoreError

from .models import STREAM_COLUMNS, Stream

DEFAULT_LIMIT = 10
DEFAULT_OFFSET = 0

logger = logging.getLogger(__name__)


class StreamRepository(Protocol):
    async def create(self, stream: Stream) -> Stream:
        ...

    async def find_by_id(self, stream_id: UUID) -> Stream | None:
        ...

    async def find_all(
        self,
        category: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> tuple[list[Stream], int]:
        ...

    async def delete(self, stream_id: UUID) -> None:
        ...


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as exc:
        raise StoreError(f"{operation} failed: {type(exc).__name__}: {exc}") from exc


class PostgresStreamRepository:
    async def create(self, stream: Stream) -> Stream:
        with _store_errors("create stream"):
            row = await db.fetch_one(
                f"""
                INSERT INTO streams ({STREAM_COLUMNS})
                VALUES ($1, $2, $3, $4, $5, $6, $7)
                RETURNING {STREAM_COLUMNS}
                """,
                stream.stream_id,
                stream.user_id,
                stream.title,
                stream.description,
                stream.category,
                stream.created_at,
                stream.deleted_at,
            )
        if row is None:
            raise StoreError("create stream returned no row.")
        return Stream.from_row(row)

    async def find_by_id(self, stream_id: UUID) -> Stream | None:
        with _store_errors("find stream"):
            row = await db.fetch_one(
                f"""
                SELECT {STREAM_COLUMNS}
                FROM streams
                WHERE stream_id = $1
                  AND deleted_at IS NULL
                """,
                stream_id,
            )
        return Stream.from_row(row) if row is not None else None

    async def find_all(
        self,
        category: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> tuple[list[Stream], int]:
        limit = DEFAULT_LIMIT if limit is None else limit
        offset = DEFAULT_OFFSET if offset is None else offset

        with _store_errors("list streams"):
            rows = await db.fetch_all(
                f"""
                SELECT {STREAM_COLUMNS}
                FROM streams
                WHERE deleted_at IS NULL
                  AND ($1::text IS NULL OR category = $1)
                ORDER BY created_at DESC, stream_id DESC
                LIMIT $2
                OFFSET $3
                """,
                category,
                limit,
                offset,
            )
            count_row = await db.fetch_one(
                """
                SELECT count(*) AS n
                FROM streams
                WHERE deleted_at IS NULL
                  AND ($1::text IS NULL OR category = $1)
                """,
                category,
            )
        total = int((count_row or {}).get("n", 0))
        return [Stream.from_row(r) for r in rows], total

    async def delete(self, stream_id: UUID) -> None:
        # Unconditional: re-stamping an already deleted row is harmless.
        with _store_errors("delete stream"):
            affected = await db.execute(
                """
                UPDATE streams
                SET deleted_at = now()
                WHERE stream_id = $1
                """,
                stream_id,
            )
        logger.debug("stream_soft_deleted stream_id=%s affected=%s", stream_id, affected)


class InMemoryStreamRepository:
    def __init__(self, streams: list[Stream] | None = None) -> None:
        self._rows: dict[UUID, Stream] = {}
        for stream in streams or []:
            self._rows[stream.stream_id] = stream

    async def create(self, stream: Stream) -> Stream:
        if stream.stream_id in self._rows:
            raise StoreError(f"create stream failed: duplicate stream_id {stream.stream_id}")
        self._rows[stream.stream_id] = stream
        return stream

    async def find_by_id(self, stream_id: UUID) -> Stream | None:
        stream = self._rows.get(stream_id)
        if stream is None or stream.is_deleted:
            return None
        return stream

    async def find_all(
        self,
        category: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> tuple[list[Stream], int]:
        limit = DEFAULT_LIMIT if limit is None else limit
        offset = DEFAULT_OFFSET if offset is None else offset

        matching = [
            s
            for s in self._rows.values()
            if not s.is_deleted and (category is None or s.category == category)
        ]
        matching.sort(key=lambda s: (s.created_at, s.stream_id), reverse=True)
        return matching[offset : offset + limit], len(matching)

    async def delete(self, stream_id: UUID) -> None:
        stream = self._rows.get(stream_id)
        if stream is None:
            return None
        self._rows[stream_id] = dataclasses.replace(stream, deleted_at=datetime.now(timezone.utc))

    def all_rows(self) -> list[Stream]:
        """
        Every stored row, soft-deleted ones included.
        """
        return list(self._rows.values())
