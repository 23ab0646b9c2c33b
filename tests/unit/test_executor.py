from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import psycopg
import pytest
from psycopg import errors as pg_errors
from psycopg_pool import PoolTimeout
from pydantic import BaseModel

from bakery_backend import query
from bakery_backend.domain.models import Bakery, ExecResult
from bakery_backend.domain.schema import BAKERY
from bakery_backend.errors import (
    ConstraintError,
    QueryBuildError,
    QueryExecutionError,
    ScriptExhaustedError,
    StoreConnectionError,
)
from bakery_backend.infrastructure.executor import (
    PostgresExecutor,
    ScriptedExecutor,
    map_rows,
    translate_errors,
)

HAPPY = Bakery(id=1, name="Happy Bakery", profit_margin=0.0)
SAD = Bakery(id=2, name="Sad Bakery", profit_margin=0.1)
NEW_ID = 7


class NameOnly(BaseModel):
    name: str


class TestScriptedExecutor:
    def test_reads_consume_batches_in_call_order(self):
        executor = ScriptedExecutor(query_results=[[HAPPY], [SAD]])
        stmt = query.select(BAKERY)

        assert executor.fetch_all(stmt) == [HAPPY.model_dump()]
        # same statement, next batch
        assert executor.fetch_all(stmt) == [SAD.model_dump()]
        with pytest.raises(ScriptExhaustedError):
            executor.fetch_all(stmt)

    def test_writes_consume_exec_results_independently_of_reads(self):
        executor = ScriptedExecutor(
            query_results=[[HAPPY]],
            exec_results=[ExecResult(rows_affected=1, last_insert_id=NEW_ID)],
        )

        result = executor.execute(query.insert(BAKERY, {"name": "Happy Bakery"}))

        assert result.last_insert_id == NEW_ID
        assert executor.pending_exec_results == 0
        assert executor.pending_query_results == 1
        with pytest.raises(ScriptExhaustedError):
            executor.execute(query.delete(BAKERY))

    def test_statements_are_recorded_even_when_exhausted(self):
        executor = ScriptedExecutor()
        stmt = query.select(BAKERY)

        with pytest.raises(ScriptExhaustedError, match="#1"):
            executor.fetch_all(stmt)

        assert executor.statements == [stmt]

    def test_batches_accept_plain_mappings(self):
        executor = ScriptedExecutor().append_query_results(
            [[{"id": 3, "name": "Plain", "profit_margin": 0.5}]]
        )

        rows = executor.fetch_into(query.select(BAKERY), Bakery)

        assert rows == [Bakery(id=3, name="Plain", profit_margin=0.5)]

    def test_empty_batch_is_a_valid_result(self):
        executor = ScriptedExecutor(query_results=[[]])
        assert executor.fetch_one(query.select(BAKERY)) is None

    def test_fetch_into_arbitrary_shape(self):
        executor = ScriptedExecutor(query_results=[[{"name": "John"}, {"name": "Sam"}]])

        rows = executor.fetch_into(query.select(BAKERY), NameOnly)

        assert [row.name for row in rows] == ["John", "Sam"]

    def test_fetch_into_mismatched_shape(self):
        executor = ScriptedExecutor(query_results=[[{"id": 1}]])

        with pytest.raises(ConstraintError, match="Bakery"):
            executor.fetch_into(query.select(BAKERY), Bakery)


class TestMapRows:
    def test_extra_columns_are_ignored(self):
        rows = map_rows([{"name": "John", "bakery_name": "La Boulangerie"}], NameOnly)
        assert rows == [NameOnly(name="John")]

    def test_type_mismatch(self):
        with pytest.raises(ConstraintError):
            map_rows([{"id": "not-a-number", "name": "x"}], Bakery)


class TestTranslateErrors:
    @pytest.mark.parametrize(
        "raised, expected",
        [
            (psycopg.OperationalError("down"), StoreConnectionError),
            (psycopg.InterfaceError("closed"), StoreConnectionError),
            (PoolTimeout("timeout"), StoreConnectionError),
            (pg_errors.ForeignKeyViolation("fk"), ConstraintError),
            (pg_errors.NotNullViolation("null"), ConstraintError),
            (pg_errors.InvalidTextRepresentation("bad int"), ConstraintError),
            (pg_errors.UndefinedColumn("no column"), QueryBuildError),
            (pg_errors.UndefinedTable("no table"), QueryBuildError),
            (pg_errors.InsufficientPrivilege("denied"), QueryExecutionError),
        ],
    )
    def test_driver_errors_are_mapped(self, raised, expected):
        with pytest.raises(expected) as excinfo:
            with translate_errors():
                raise raised
        assert excinfo.value.__cause__ is raised

    def test_execution_error_names_the_statement(self):
        stmt = query.delete(BAKERY)
        with pytest.raises(QueryExecutionError, match='DELETE FROM "bakery"'):
            with translate_errors(stmt):
                raise pg_errors.InsufficientPrivilege("denied")

    def test_other_exceptions_pass_through(self):
        with pytest.raises(KeyError):
            with translate_errors():
                raise KeyError("x")


class _FakeCursor:
    def __init__(self, rows: List[Dict[str, Any]], rowcount: int, returns_rows: bool) -> None:
        self._rows = rows
        self.rowcount = rowcount
        self.description = [("col",)] if returns_rows else None
        self.executed: List[Any] = []

    def __enter__(self) -> "_FakeCursor":
        return self

    def __exit__(self, *exc: Any) -> None:
        return None

    def execute(self, query_obj: Any, params: Any) -> None:
        self.executed.append((query_obj, params))

    def fetchall(self) -> List[Dict[str, Any]]:
        return list(self._rows)

    def fetchone(self) -> Optional[Dict[str, Any]]:
        return self._rows[0] if self._rows else None


class _FakeConnection:
    def __init__(self, cursor: _FakeCursor) -> None:
        self._cursor = cursor
        self.row_factory = None

    def cursor(self, row_factory: Any = None) -> _FakeCursor:
        self.row_factory = row_factory
        return self._cursor


class _FakePool:
    def __init__(self, cursor: Optional[_FakeCursor] = None, error: Optional[Exception] = None):
        self._conn = _FakeConnection(cursor) if cursor is not None else None
        self._error = error
        self.closed = False

    @contextmanager
    def connection(self):
        if self._error is not None:
            raise self._error
        yield self._conn

    def close(self) -> None:
        self.closed = True


class TestPostgresExecutor:
    def test_fetch_all_returns_dict_rows(self):
        cursor = _FakeCursor([HAPPY.model_dump()], rowcount=1, returns_rows=True)
        executor = PostgresExecutor(_FakePool(cursor))
        stmt = query.select(BAKERY, BAKERY.id.eq(1))

        rows = executor.fetch_all(stmt)

        assert rows == [HAPPY.model_dump()]
        assert cursor.executed == [(stmt.query, (1,))]

    def test_insert_reports_returned_key(self):
        cursor = _FakeCursor([{"id": NEW_ID}], rowcount=1, returns_rows=True)
        executor = PostgresExecutor(_FakePool(cursor))

        result = executor.execute(query.insert(BAKERY, {"name": "Happy Bakery"}))

        assert result == ExecResult(rows_affected=1, last_insert_id=NEW_ID)

    def test_update_without_returning(self):
        cursor = _FakeCursor([], rowcount=0, returns_rows=False)
        executor = PostgresExecutor(_FakePool(cursor))

        result = executor.execute(query.update(BAKERY, 99, {"name": "Ghost"}))

        assert result == ExecResult(rows_affected=0, last_insert_id=None)

    def test_unreachable_pool(self):
        executor = PostgresExecutor(_FakePool(error=PoolTimeout("no connection")))

        with pytest.raises(StoreConnectionError):
            executor.fetch_all(query.select(BAKERY))

    def test_close_closes_pool(self):
        pool = _FakePool(_FakeCursor([], 0, False))
        PostgresExecutor(pool).close()
        assert pool.closed


class TestStatementLogging:
    LOGGER = "bakery_backend.infrastructure.executor"

    def test_statement_not_rendered_when_debug_is_off(self, monkeypatch, caplog):
        caplog.set_level(logging.INFO, logger=self.LOGGER)

        def _render(self):
            raise AssertionError("statement rendered with DEBUG disabled")

        monkeypatch.setattr(query.Statement, "as_string", _render)
        cursor = _FakeCursor([HAPPY.model_dump()], rowcount=1, returns_rows=True)

        assert PostgresExecutor(_FakePool(cursor)).fetch_all(query.select(BAKERY)) == [
            HAPPY.model_dump()
        ]

    def test_statement_logged_at_debug(self, caplog):
        caplog.set_level(logging.DEBUG, logger=self.LOGGER)
        cursor = _FakeCursor([], rowcount=1, returns_rows=False)

        PostgresExecutor(_FakePool(cursor)).execute(query.delete(BAKERY, BAKERY.id.eq(1)))

        (record,) = [r for r in caplog.records if r.name == self.LOGGER]
        assert record.getMessage() == "execute"
        assert record.statement == 'DELETE FROM "bakery" WHERE "bakery"."id" = %s'
        assert record.params == [1]
