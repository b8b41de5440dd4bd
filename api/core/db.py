"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import settings

_pool: asyncpg.Pool | None = None


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url(cfg: settings.Settings | None = None) -> str:
    url = (cfg or settings.get_settings()).database_url
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def init_pool(cfg: settings.Settings | None = None) -> None:
    global _pool
    if _pool is not None:
        return None
    cfg = cfg or settings.get_settings()
    _pool = await asyncpg.create_pool(
        dsn=database_url(cfg),
        min_size=cfg.db_pool_min_size,
        max_size=cfg.db_pool_max_size,
        command_timeout=cfg.db_command_timeout,
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


def _row_count(status: str) -> int:
    """
    Parse the affected row count out of a command tag like "UPDATE 3".
    """
    tail = (status or "").rsplit(" ", 1)[-1]
    return int(tail) if tail.isdigit() else 0


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await pool().fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await pool().fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def execute(sql: str, *args: Any) -> int:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL) and return the affected row count.
    """
    status = await pool().execute(sql, *args)
    return _row_count(status)


async def check_connection() -> None:
    await pool().fetchval("SELECT 1")
