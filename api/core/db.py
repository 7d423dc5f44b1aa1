"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`); the sync commands open and close
it around their own run.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Every driver failure is re-raised as `StoreError` so callers only have one
error kind to handle.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import settings

_pool: asyncpg.Pool | None = None

_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class StoreError(RuntimeError):
    pass


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = settings.env_str("DATABASE_URL")
    if not url:
        raise StoreError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    try:
        _pool = await asyncpg.create_pool(
            dsn=database_url(),
            min_size=settings.env_int("DB_POOL_MIN", 1),
            max_size=settings.env_int("DB_POOL_MAX", 5),
            command_timeout=settings.env_float("DB_COMMAND_TIMEOUT_S", 30.0),
        )
    except _DRIVER_ERRORS as exc:
        raise StoreError(f"Could not connect to database: {exc}") from exc


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise StoreError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def json_arg(value: Any) -> str | None:
    """
    asyncpg does not encode Python objects for json/jsonb parameters.
    Pass JSON as a string and cast with `$n::jsonb` in SQL.
    """
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=True)


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    try:
        row = await pool().fetchrow(sql, *args)
    except _DRIVER_ERRORS as exc:
        raise StoreError(f"Query failed: {exc}") from exc
    return dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    try:
        rows = await pool().fetch(sql, *args)
    except _DRIVER_ERRORS as exc:
        raise StoreError(f"Query failed: {exc}") from exc
    return [dict(r) for r in rows]


async def execute(sql: str, *args: Any) -> str:
    """
    Run a statement (INSERT/UPDATE/DELETE). Returns the status tag, e.g. "DELETE 1".
    """
    try:
        return await pool().execute(sql, *args)
    except _DRIVER_ERRORS as exc:
        raise StoreError(f"Statement failed: {exc}") from exc

