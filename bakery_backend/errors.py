"""
Error taxonomy for the Bakery Backend.

The data-access layer and the query execution facade raise these instead of
driver exceptions so callers (CLI, GraphQL resolvers, tests) never need to know
about psycopg internals. Nothing in the core retries or swallows them.
"""

from __future__ import annotations


class BakeryBackendError(Exception):
    """Base exception for Bakery Backend errors."""


class ConfigurationError(BakeryBackendError):
    """Required settings are missing or invalid."""


class VerificationError(BakeryBackendError):
    """A demonstration flow observed state different from what it expected."""


class DataAccessError(BakeryBackendError):
    """Base class for everything raised by the data-access layer."""


class StoreConnectionError(DataAccessError):
    """Store unreachable or connection setup failed."""


class ConstraintError(DataAccessError):
    """Required field missing, type mismatch, or foreign-key violation."""


class NotFoundError(DataAccessError):
    """A keyed write targeted a record that does not exist."""

    def __init__(self, table: str, key: object) -> None:
        super().__init__(f"No {table} record with primary key {key!r}")
        self.table = table
        self.key = key


class QueryBuildError(DataAccessError):
    """A statement references unknown tables, columns or relations."""


class QueryExecutionError(DataAccessError):
    """Any other store-level failure while running a statement."""


class ScriptExhaustedError(DataAccessError):
    """A scripted executor was asked for more results than were enqueued."""


__all__ = [
    "BakeryBackendError",
    "ConfigurationError",
    "VerificationError",
    "DataAccessError",
    "StoreConnectionError",
    "ConstraintError",
    "NotFoundError",
    "QueryBuildError",
    "QueryExecutionError",
    "ScriptExhaustedError",
]
