"""
Infrastructure package for the Bakery Backend.

Centralizes store connectivity (pool factory, schema bootstrap) and the query
execution facade. Keep this layer focused on I/O and resource management,
decoupled from the repositories and the API.
"""

from bakery_backend.infrastructure.db_factory import (
    apply_schema,
    build_dsn,
    get_sync_connection,
    open_executor,
    open_pool,
)
from bakery_backend.infrastructure.executor import (
    AbstractExecutor,
    PostgresExecutor,
    ScriptedExecutor,
)

__all__ = [
    "AbstractExecutor",
    "PostgresExecutor",
    "ScriptedExecutor",
    "apply_schema",
    "build_dsn",
    "get_sync_connection",
    "open_executor",
    "open_pool",
]
