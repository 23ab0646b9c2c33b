"""
Query execution facade for the Bakery Backend.

All store access passes through an executor so the same repositories can run
against a live PostgreSQL pool or against a scripted queue of canned results:

- `PostgresExecutor` checks a connection out of a `psycopg_pool.ConnectionPool`
  per statement. Each statement commits on its own; nothing is retried.
- `ScriptedExecutor` replays enqueued results strictly in call order. It does
  not look at the statement it receives, so a test must enqueue results in the
  exact order the code under test issues reads and writes. Statements are kept
  in `statements` for inspection afterwards.

Driver errors are translated to the `bakery_backend.errors` taxonomy by
`translate_errors`.
"""

from __future__ import annotations

import abc
import logging
from collections import deque
from contextlib import contextmanager
from typing import Any, Deque, Dict, Generator, Iterable, List, Mapping, Optional, Type, TypeVar, Union

import psycopg
from psycopg import errors as pg_errors
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool, PoolTimeout
from pydantic import BaseModel, ValidationError

from bakery_backend.domain.models import ExecResult
from bakery_backend.errors import (
    ConstraintError,
    QueryBuildError,
    QueryExecutionError,
    ScriptExhaustedError,
    StoreConnectionError,
)
from bakery_backend.query import Statement
from bakery_backend.utils.logging import get_logger

log = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
Row = Dict[str, Any]
ScriptedRow = Union[Mapping[str, Any], BaseModel]


@contextmanager
def translate_errors(statement: Optional[Statement] = None) -> Generator[None, None, None]:
    """Re-raise psycopg/pool failures as data-access errors."""
    try:
        yield
    except (psycopg.OperationalError, psycopg.InterfaceError, PoolTimeout) as exc:
        raise StoreConnectionError(f"Store unreachable: {exc}") from exc
    except (psycopg.IntegrityError, psycopg.DataError) as exc:
        raise ConstraintError(str(exc).strip()) from exc
    except (pg_errors.UndefinedColumn, pg_errors.UndefinedTable, pg_errors.SyntaxError) as exc:
        raise QueryBuildError(str(exc).strip()) from exc
    except psycopg.Error as exc:
        text = statement.as_string() if statement is not None else "<unknown>"
        raise QueryExecutionError(f"{exc} (statement: {text})") from exc


def _log_statement(action: str, statement: Statement) -> None:
    if log.isEnabledFor(logging.DEBUG):
        log.debug(
            action,
            extra={"statement": statement.as_string(), "params": list(statement.params)},
        )


def map_rows(rows: Iterable[Row], shape: Type[ModelT]) -> List[ModelT]:
    """Validate rows into `shape`, matching fields to columns by name."""
    try:
        return [shape.model_validate(row) for row in rows]
    except ValidationError as exc:
        raise ConstraintError(f"Row does not match {shape.__name__}: {exc}") from exc


class AbstractExecutor(abc.ABC):
    """
    Single seam through which the data-access layer talks to the store.

    Subclasses implement `fetch_all` (statements returning rows) and `execute`
    (writes). Everything else is shared.
    """

    @abc.abstractmethod
    def fetch_all(self, statement: Statement) -> List[Row]:  # pragma: no cover - interface only
        """Run a row-returning statement."""
        raise NotImplementedError

    @abc.abstractmethod
    def execute(self, statement: Statement) -> ExecResult:  # pragma: no cover - interface only
        """Run a write statement."""
        raise NotImplementedError

    def fetch_one(self, statement: Statement) -> Optional[Row]:
        rows = self.fetch_all(statement)
        return rows[0] if rows else None

    def fetch_into(self, statement: Statement, shape: Type[ModelT]) -> List[ModelT]:
        """
        Run a (possibly hand-built) statement and map each row into `shape`.

        This is the raw path: `shape` may be any pydantic model whose field
        names match the statement's column names or aliases.
        """
        return map_rows(self.fetch_all(statement), shape)

    def close(self) -> None:
        """Release resources held by the executor."""


class PostgresExecutor(AbstractExecutor):
    """Live executor backed by a psycopg connection pool."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    def fetch_all(self, statement: Statement) -> List[Row]:
        _log_statement("fetch", statement)
        with translate_errors(statement):
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(statement.query, statement.params)
                    return list(cur.fetchall())

    def execute(self, statement: Statement) -> ExecResult:
        _log_statement("execute", statement)
        with translate_errors(statement):
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(statement.query, statement.params)
                    last_insert_id = None
                    if cur.description is not None:
                        row = cur.fetchone()
                        if row:
                            last_insert_id = next(iter(row.values()))
                    return ExecResult(
                        rows_affected=max(cur.rowcount, 0), last_insert_id=last_insert_id
                    )

    def close(self) -> None:
        self._pool.close()


class ScriptedExecutor(AbstractExecutor):
    """
    Order-sensitive test double.

    Each `fetch_all` consumes the next query batch and each `execute` the next
    exec result, whatever the statement asks for. There is no matching of
    results to statement shape.

    Example
    -------
        executor = ScriptedExecutor(
            query_results=[[Bakery(id=1, name="Happy Bakery", profit_margin=0.0)]],
            exec_results=[ExecResult(rows_affected=1, last_insert_id=1)],
        )
    """

    def __init__(
        self,
        query_results: Iterable[Iterable[ScriptedRow]] = (),
        exec_results: Iterable[ExecResult] = (),
    ) -> None:
        self._query_results: Deque[List[Row]] = deque()
        self._exec_results: Deque[ExecResult] = deque()
        self.statements: List[Statement] = []
        self.append_query_results(query_results)
        self.append_exec_results(exec_results)

    @staticmethod
    def _as_row(row: ScriptedRow) -> Row:
        if isinstance(row, BaseModel):
            return row.model_dump()
        return dict(row)

    def append_query_results(self, batches: Iterable[Iterable[ScriptedRow]]) -> "ScriptedExecutor":
        for batch in batches:
            self._query_results.append([self._as_row(row) for row in batch])
        return self

    def append_exec_results(self, results: Iterable[ExecResult]) -> "ScriptedExecutor":
        self._exec_results.extend(results)
        return self

    @property
    def pending_query_results(self) -> int:
        return len(self._query_results)

    @property
    def pending_exec_results(self) -> int:
        return len(self._exec_results)

    def fetch_all(self, statement: Statement) -> List[Row]:
        self.statements.append(statement)
        if not self._query_results:
            raise ScriptExhaustedError(
                f"No scripted query result left for statement #{len(self.statements)}"
            )
        return self._query_results.popleft()

    def execute(self, statement: Statement) -> ExecResult:
        self.statements.append(statement)
        if not self._exec_results:
            raise ScriptExhaustedError(
                f"No scripted exec result left for statement #{len(self.statements)}"
            )
        return self._exec_results.popleft()


__all__ = [
    "AbstractExecutor",
    "PostgresExecutor",
    "ScriptedExecutor",
    "map_rows",
    "translate_errors",
]
