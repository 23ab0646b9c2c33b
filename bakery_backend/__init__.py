"""
Bakery Backend - relational mapping and GraphQL over a bakery/chef schema.

This package maps a two-table PostgreSQL schema (one bakery has many chefs)
onto typed records and exposes it through:

- Entity and relationship definitions
- Repositories for CRUD, filtered lookup and relationship traversal
- A statement builder for hand-written joins
- A query execution facade backed by a live pool or by scripted results
- A GraphQL API (queries and mutations) served over HTTP
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from bakery_backend.config import Settings, get_settings
from bakery_backend.domain.models import Bakery, BakeryPartial, Chef, ChefPartial, ExecResult
from bakery_backend.domain.schema import BAKERY, CHEF
from bakery_backend.errors import (
    BakeryBackendError,
    ConfigurationError,
    ConstraintError,
    DataAccessError,
    NotFoundError,
    QueryBuildError,
    QueryExecutionError,
    ScriptExhaustedError,
    StoreConnectionError,
)
from bakery_backend.infrastructure.executor import (
    AbstractExecutor,
    PostgresExecutor,
    ScriptedExecutor,
)
from bakery_backend.query import SelectStatement, Statement
from bakery_backend.repositories import BakeryRepository, ChefRepository
from bakery_backend.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Records and schema
    "Bakery",
    "BakeryPartial",
    "Chef",
    "ChefPartial",
    "ExecResult",
    "BAKERY",
    "CHEF",
    # Data access
    "AbstractExecutor",
    "PostgresExecutor",
    "ScriptedExecutor",
    "BakeryRepository",
    "ChefRepository",
    "SelectStatement",
    "Statement",
    # Errors
    "BakeryBackendError",
    "ConfigurationError",
    "ConstraintError",
    "DataAccessError",
    "NotFoundError",
    "QueryBuildError",
    "QueryExecutionError",
    "ScriptExhaustedError",
    "StoreConnectionError",
    # Logging
    "configure_logging",
    "get_logger",
]
