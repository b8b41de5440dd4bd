"""
Stream API schemas (request/response models).

Wire names are camelCase (`streamId`, `userId`, `createdAt`); Python
attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateStreamRequest(BaseModel):
    # Inbound JSON is accepted under camelCase names only.
    model_config = ConfigDict(alias_generator=to_camel, validate_by_alias=True, validate_by_name=False)

    # Checked in streams.validation so rejections come back in a fixed order.
    user_id: str = ""
    title: str = ""
    description: str = ""
    category: str | None = None


class StreamResponse(CamelModel):
    stream_id: UUID
    user_id: UUID
    title: str
    description: str
    category: str
    created_at: datetime


class StreamSummaryResponse(CamelModel):
    stream_id: UUID
    user_id: UUID
    title: str
    category: str
    created_at: datetime


class StreamListResponse(CamelModel):
    total: int
    limit: int
    offset: int
    items: list[StreamSummaryResponse]
