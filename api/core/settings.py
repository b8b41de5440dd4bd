"""
Process settings read from environment variables.

A `.env` file is picked up from the working directory or up to two parents,
so `uvicorn main:app` works from `api/` as well as from the repo root.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

ENV_FILE_CANDIDATES = (".env", "../.env", "../../.env")

REPOSITORY_BACKENDS = {"postgres", "memory"}


def _load_env_file() -> None:
    for path in ENV_FILE_CANDIDATES:
        if os.path.isfile(path):
            load_dotenv(path, override=False)
            return


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_port(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        port = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a valid number.") from exc
    if not 0 < port < 65536:
        raise RuntimeError(f"{name} must be between 1 and 65535.")
    return port


def _env_list(name: str, default: str) -> list[str]:
    raw = _env_str(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str
    repository_backend: str
    host: str
    port: int
    api_prefix: str
    cors_origins: list[str]
    log_level: str
    db_pool_min_size: int
    db_pool_max_size: int
    db_command_timeout: float


def load_settings() -> Settings:
    _load_env_file()

    backend = _env_str("STREAM_REPOSITORY", "postgres").lower()
    if backend not in REPOSITORY_BACKENDS:
        raise RuntimeError(
            f"STREAM_REPOSITORY must be one of {sorted(REPOSITORY_BACKENDS)}, got '{backend}'."
        )

    prefix = _env_str("API_PREFIX", "/api/v1").rstrip("/")
    if prefix and not prefix.startswith("/"):
        prefix = "/" + prefix

    return Settings(
        database_url=os.environ.get("DATABASE_URL", "").strip(),
        repository_backend=backend,
        host=_env_str("HOST", "0.0.0.0"),
        port=_env_port("PORT", 8080),
        api_prefix=prefix,
        cors_origins=_env_list("CORS_ORIGINS", "*"),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
        db_pool_min_size=max(1, _env_int("DB_POOL_MIN_SIZE", 1)),
        db_pool_max_size=max(1, _env_int("DB_POOL_MAX_SIZE", 5)),
        db_command_timeout=_env_float("DB_COMMAND_TIMEOUT", 30.0),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
