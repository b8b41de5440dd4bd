"""
Stream API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from . import schemas, service
from .dependencies import get_stream_repository
from .repository import StreamRepository

router = APIRouter()


@router.post(
    "/streams",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.StreamResponse,
)
async def create_stream(
    request: schemas.CreateStreamRequest,
    repository: StreamRepository = Depends(get_stream_repository),
) -> schemas.StreamResponse:
    return await service.create_stream(request, repository=repository)


@router.get("/streams", response_model=schemas.StreamListResponse)
async def list_streams(
    category: str | None = Query(default=None),
    limit: int | None = Query(default=None),
    offset: int | None = Query(default=None),
    repository: StreamRepository = Depends(get_stream_repository),
) -> schemas.StreamListResponse:
    """
    List live streams, newest first. Soft-deleted streams are excluded.
    """
    return await service.list_streams(
        repository=repository,
        category=category,
        limit=limit,
        offset=offset,
    )


@router.get("/streams/{stream_id}", response_model=schemas.StreamResponse)
async def get_stream(
    stream_id: str,
    repository: StreamRepository = Depends(get_stream_repository),
) -> schemas.StreamResponse:
    return await service.get_stream(stream_id, repository=repository)


@router.delete(
    "/streams/{stream_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_stream(
    stream_id: str,
    repository: StreamRepository = Depends(get_stream_repository),
) -> Response:
    """
    Soft-delete a stream. Unknown or already deleted ids succeed too.
    """
    await service.delete_stream(stream_id, repository=repository)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
