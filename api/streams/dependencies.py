"""
Stream dependencies for FastAPI routes.
"""

from __future__ import annotations

from fastapi import Request

from .repository import StreamRepository


def get_stream_repository(request: Request) -> StreamRepository:
    repository = getattr(request.app.state, "stream_repository", None)
    if repository is None:
        raise RuntimeError("Stream repository is not configured. Use main.create_app().")
    return repository
