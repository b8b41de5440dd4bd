"""
Stream business logic: validate, call the repository, project the result.
"""

from __future__ import annotations

import logging

from core.errors import NotFoundError

from . import schemas, validation
from .models import Stream
from .repository import DEFAULT_LIMIT, DEFAULT_OFFSET, StreamRepository

logger = logging.getLogger(__name__)


def to_stream_response(stream: Stream) -> schemas.StreamResponse:
    return schemas.StreamResponse(
        stream_id=stream.stream_id,
        user_id=stream.user_id,
        title=stream.title,
        description=stream.description,
        category=stream.category,
        created_at=stream.created_at,
    )


def to_summary_response(stream: Stream) -> schemas.StreamSummaryResponse:
    return schemas.StreamSummaryResponse(
        stream_id=stream.stream_id,
        user_id=stream.user_id,
        title=stream.title,
        category=stream.category,
        created_at=stream.created_at,
    )


def to_list_response(
    streams: list[Stream],
    *,
    total: int,
    limit: int | None,
    offset: int | None,
) -> schemas.StreamListResponse:
    return schemas.StreamListResponse(
        total=total,
        limit=DEFAULT_LIMIT if limit is None else limit,
        offset=DEFAULT_OFFSET if offset is None else offset,
        items=[to_summary_response(s) for s in streams],
    )


async def create_stream(
    payload: schemas.CreateStreamRequest,
    *,
    repository: StreamRepository,
) -> schemas.StreamResponse:
    stream = validation.validate_create(payload)
    created = await repository.create(stream)
    logger.info("stream_created stream_id=%s user_id=%s", created.stream_id, created.user_id)
    return to_stream_response(created)


async def list_streams(
    *,
    repository: StreamRepository,
    category: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> schemas.StreamListResponse:
    validation.validate_list_params(limit=limit, offset=offset)
    streams, total = await repository.find_all(category, limit, offset)
    return to_list_response(streams, total=total, limit=limit, offset=offset)


async def get_stream(raw_stream_id: str, *, repository: StreamRepository) -> schemas.StreamResponse:
    stream_id = validation.parse_stream_id(raw_stream_id)
    stream = await repository.find_by_id(stream_id)
    if stream is None:
        raise NotFoundError("Stream not found.")
    return to_stream_response(stream)


async def delete_stream(raw_stream_id: str, *, repository: StreamRepository) -> None:
    stream_id = validation.parse_stream_id(raw_stream_id)
    await repository.delete(stream_id)
    logger.info("stream_deleted stream_id=%s", stream_id)
