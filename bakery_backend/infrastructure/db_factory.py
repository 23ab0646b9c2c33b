"""
Database connection factory utilities for the Bakery Backend.

Builds the DSN from settings, opens the psycopg connection pool shared by the
GraphQL server and the CLI, and applies the fixed schema in `db/init.sql`.

Only process startup retries: opening the pool and the first connection are
wrapped with tenacity so a database that is still booting (e.g. in
docker-compose) gets a few attempts. Statements themselves are never retried.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import psycopg
from psycopg import Connection
from psycopg_pool import ConnectionPool, PoolTimeout
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bakery_backend.config import Settings, get_settings
from bakery_backend.errors import StoreConnectionError
from bakery_backend.infrastructure.executor import PostgresExecutor, translate_errors
from bakery_backend.utils.logging import get_logger

log = get_logger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "db" / "init.sql"

_TRANSIENT = (psycopg.OperationalError, psycopg.InterfaceError, PoolTimeout)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose the DSN: `POSTGRES_URL` + `/` + `POSTGRES_DATABASE`."""
    return (settings or get_settings()).dsn


def _retrying(settings: Settings) -> Retrying:
    return Retrying(
        stop=stop_after_attempt(max(settings.db_connect_attempts, 1)),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(_TRANSIENT),
        reraise=True,
    )


def get_sync_connection(settings: Optional[Settings] = None) -> Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Use this for one-off operations such as applying the schema. Prefer the
    pool for request handling.

    Raises
    ------
    StoreConnectionError
        If the connection fails after all retry attempts.
    """
    settings = settings or get_settings()
    try:
        return _retrying(settings)(
            psycopg.connect,
            settings.dsn,
            connect_timeout=int(settings.db_connect_timeout),
        )
    except (*_TRANSIENT, RetryError) as exc:
        raise StoreConnectionError(f"Could not connect to {settings.safe_dsn}: {exc}") from exc


def open_pool(settings: Optional[Settings] = None) -> ConnectionPool:
    """
    Open a connection pool and wait until its first connection is ready.

    Raises
    ------
    StoreConnectionError
        If the pool cannot reach the store after all retry attempts.
    """
    settings = settings or get_settings()

    def _open() -> ConnectionPool:
        pool = ConnectionPool(
            conninfo=settings.dsn,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            open=False,
        )
        try:
            pool.open(wait=True, timeout=settings.db_connect_timeout)
        except PoolTimeout:
            pool.close()
            raise
        return pool

    try:
        pool = _retrying(settings)(_open)
    except (*_TRANSIENT, RetryError) as exc:
        raise StoreConnectionError(
            f"Could not open connection pool to {settings.safe_dsn}: {exc}"
        ) from exc

    log.info(
        "Connection pool opened",
        extra={
            "database": settings.postgres_database,
            "min_size": settings.db_pool_min_size,
            "max_size": settings.db_pool_max_size,
        },
    )
    return pool


def open_executor(settings: Optional[Settings] = None) -> PostgresExecutor:
    """Open a pool and wrap it in a live executor."""
    return PostgresExecutor(open_pool(settings))


def apply_schema(conn: Connection, path: Path = SCHEMA_PATH) -> None:
    """Run the idempotent DDL in `db/init.sql` on `conn` and commit."""
    ddl = path.read_text(encoding="utf-8")
    with translate_errors():
        with conn.cursor() as cur:
            cur.execute(ddl)
        conn.commit()
    log.info("Schema applied", extra={"path": str(path)})


__all__ = [
    "SCHEMA_PATH",
    "apply_schema",
    "build_dsn",
    "get_sync_connection",
    "open_executor",
    "open_pool",
]
