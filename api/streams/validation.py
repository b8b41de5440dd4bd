"""
Request validation and mapping for streams.

Everything here runs before the repository is touched. The first failing
rule wins and nothing is persisted.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from uuid import UUID

from core.errors import InvalidFormat, LimitExceeded, OutOfRange, RequiredField, TooLong

from . import schemas
from .models import Stream

MAX_DESCRIPTION_CHARS = 500
MAX_LIST_LIMIT = 100
# Paging values are 32-bit integers on the wire.
MAX_OFFSET = 2**31 - 1


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_uuid(raw: str, *, field: str) -> UUID:
    try:
        return UUID(raw)
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidFormat(field) from exc


def parse_stream_id(raw: str) -> UUID:
    return parse_uuid(raw, field="streamId")


def validate_create(payload: schemas.CreateStreamRequest) -> Stream:
    """
    Turn a create request into a new, not yet persisted Stream.

    Order: userId format, title present, description length. A missing
    category becomes "".
    """
    user_id = parse_uuid(payload.user_id, field="userId")

    if not payload.title:
        raise RequiredField("title")

    # len() counts code points, not UTF-8 bytes.
    if len(payload.description) > MAX_DESCRIPTION_CHARS:
        raise TooLong("description", MAX_DESCRIPTION_CHARS)

    return Stream(
        stream_id=uuid.uuid4(),
        user_id=user_id,
        title=payload.title,
        description=payload.description,
        category=payload.category or "",
        created_at=_utc_now(),
    )


def validate_list_params(*, limit: int | None, offset: int | None) -> None:
    if limit is not None:
        if limit > MAX_LIST_LIMIT:
            raise LimitExceeded(MAX_LIST_LIMIT)
        if limit < 0:
            raise OutOfRange("limit", 0, MAX_LIST_LIMIT)
    if offset is not None and not 0 <= offset <= MAX_OFFSET:
        raise OutOfRange("offset", 0, MAX_OFFSET)
