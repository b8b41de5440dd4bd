"""
Stream entity.

A plain value object. Construction does not check invariants; callers run
`streams.validation` before treating an instance as valid for persistence.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

STREAM_COLUMNS = "stream_id, user_id, title, description, category, created_at, deleted_at"


@dataclass(frozen=True)
class Stream:
    stream_id: UUID
    user_id: UUID
    title: str
    description: str
    created_at: datetime
    category: str = ""
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Stream":
        return cls(
            stream_id=row["stream_id"],
            user_id=row["user_id"],
            title=str(row["title"]),
            description=str(row["description"] or ""),
            category=str(row.get("category") or ""),
            created_at=row["created_at"],
            deleted_at=row.get("deleted_at"),
        )
