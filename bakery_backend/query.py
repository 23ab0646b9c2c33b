"""
Statement construction for the Bakery Backend.

Every statement is composed with `psycopg.sql` so identifiers are quoted by the
driver and values always travel as parameters. Column and table names are
checked against `bakery_backend.domain.schema` before anything is sent to the
store; a reference to something the schema does not declare raises
`QueryBuildError` at build time.

Two levels are offered:

- `select`, `insert`, `update`, `delete`: single-entity statements used by the
  repositories.
- `SelectStatement`: a hand-built SELECT with an arbitrary column list, joins
  along declared relations and ordering, for result shapes the typed layer
  does not expose (e.g. chef names alongside their bakery name).

Usage:
    from bakery_backend.domain.schema import BAKERY, CHEF
    from bakery_backend.query import SelectStatement

    stmt = (
        SelectStatement()
        .column(CHEF, "name", alias="chef_name")
        .column(BAKERY, "name", alias="bakery_name")
        .from_(CHEF)
        .inner_join(CHEF.relation("bakery"))
        .order_by(CHEF, "name")
        .build()
    )
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Literal, Optional, Sequence, Tuple, Union

from psycopg import sql

from bakery_backend.domain.schema import (
    Condition,
    EntityDef,
    OrderBy,
    Relation,
    entity_for,
    resolve_column,
)
from bakery_backend.errors import QueryBuildError

StatementKind = Literal["select", "insert", "update", "delete"]
TableRef = Union[EntityDef, str]


@dataclass(frozen=True)
class Statement:
    """A composed SQL statement plus its bound parameters."""

    query: sql.Composable
    params: Tuple[Any, ...] = ()
    kind: StatementKind = "select"
    table: Optional[str] = None

    def as_string(self) -> str:
        """Render the statement text (placeholders left as `%s`)."""
        return self.query.as_string(None)


def _table_name(ref: TableRef) -> str:
    name = ref.table if isinstance(ref, EntityDef) else ref
    entity_for(name)
    return name


def _qualified(table: str, column: str) -> sql.Identifier:
    resolve_column(table, column)
    return sql.Identifier(table, column)


def _render_condition(cond: Condition, params: List[Any]) -> sql.Composable:
    ident = _qualified(cond.table, cond.column)
    if cond.op == "IS NULL" or (cond.op == "=" and cond.value is None):
        return sql.SQL("{} IS NULL").format(ident)
    if cond.op == "IS NOT NULL" or (cond.op == "<>" and cond.value is None):
        return sql.SQL("{} IS NOT NULL").format(ident)
    if cond.op == "IN":
        params.append(list(cond.value))
        return sql.SQL("{} = ANY({})").format(ident, sql.Placeholder())
    params.append(cond.value)
    return sql.SQL("{} {} {}").format(ident, sql.SQL(cond.op), sql.Placeholder())


def _render_where(
    conditions: Sequence[Condition], params: List[Any], scope: Iterable[str]
) -> sql.Composable:
    if not conditions:
        return sql.SQL("")
    allowed = set(scope)
    for cond in conditions:
        if cond.table not in allowed:
            raise QueryBuildError(
                f"Condition on {cond.table}.{cond.column} references a table not in the query"
            )
    rendered = [_render_condition(cond, params) for cond in conditions]
    return sql.SQL(" WHERE ") + sql.SQL(" AND ").join(rendered)


def _render_order(order_by: Sequence[OrderBy], scope: Iterable[str]) -> sql.Composable:
    if not order_by:
        return sql.SQL("")
    allowed = set(scope)
    parts = []
    for item in order_by:
        if item.table not in allowed:
            raise QueryBuildError(
                f"Ordering on {item.table}.{item.column} references a table not in the query"
            )
        direction = sql.SQL("DESC" if item.descending else "ASC")
        parts.append(sql.SQL("{} {}").format(_qualified(item.table, item.column), direction))
    return sql.SQL(" ORDER BY ") + sql.SQL(", ").join(parts)


def _render_limit(limit: Optional[int], params: List[Any]) -> sql.Composable:
    if limit is None:
        return sql.SQL("")
    if limit < 0:
        raise QueryBuildError(f"LIMIT must be non-negative, got {limit}")
    params.append(limit)
    return sql.SQL(" LIMIT {}").format(sql.Placeholder())


def select(
    entity: EntityDef,
    *conditions: Condition,
    order_by: Sequence[OrderBy] = (),
    limit: Optional[int] = None,
) -> Statement:
    """SELECT every mapped column of `entity`, filtered by ANDed conditions."""
    params: List[Any] = []
    columns = sql.SQL(", ").join(_qualified(entity.table, name) for name in entity.column_names)
    query = sql.Composed(
        [
            sql.SQL("SELECT {} FROM {}").format(columns, sql.Identifier(entity.table)),
            _render_where(conditions, params, [entity.table]),
            _render_order(order_by, [entity.table]),
            _render_limit(limit, params),
        ]
    )
    return Statement(query=query, params=tuple(params), kind="select", table=entity.table)


def insert(entity: EntityDef, values: Dict[str, Any]) -> Statement:
    """INSERT one row and return its primary key."""
    for name in values:
        entity.column(name)
    pk = sql.Identifier(entity.primary_key.name)
    table = sql.Identifier(entity.table)
    if not values:
        query = sql.SQL("INSERT INTO {} DEFAULT VALUES RETURNING {}").format(table, pk)
        return Statement(query=query, kind="insert", table=entity.table)

    names = list(values)
    query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING {}").format(
        table,
        sql.SQL(", ").join(sql.Identifier(name) for name in names),
        sql.SQL(", ").join(sql.Placeholder() * len(names)),
        pk,
    )
    return Statement(
        query=query,
        params=tuple(values[name] for name in names),
        kind="insert",
        table=entity.table,
    )


def update(entity: EntityDef, key: Any, values: Dict[str, Any]) -> Statement:
    """UPDATE only the given columns of the row identified by `key`."""
    pk = entity.primary_key
    changes = {name: value for name, value in values.items() if name != pk.name}
    for name in changes:
        entity.column(name)
    if not changes:
        raise QueryBuildError(f"Nothing to update on {entity.table!r}: no fields are set")

    assignments = sql.SQL(", ").join(
        sql.SQL("{} = {}").format(sql.Identifier(name), sql.Placeholder()) for name in changes
    )
    query = sql.SQL("UPDATE {} SET {} WHERE {} = {}").format(
        sql.Identifier(entity.table),
        assignments,
        sql.Identifier(pk.name),
        sql.Placeholder(),
    )
    return Statement(
        query=query,
        params=(*changes.values(), key),
        kind="update",
        table=entity.table,
    )


def delete(entity: EntityDef, *conditions: Condition) -> Statement:
    """DELETE rows matching ANDed conditions (all rows when none are given)."""
    params: List[Any] = []
    query = sql.Composed(
        [
            sql.SQL("DELETE FROM {}").format(sql.Identifier(entity.table)),
            _render_where(conditions, params, [entity.table]),
        ]
    )
    return Statement(query=query, params=tuple(params), kind="delete", table=entity.table)


@dataclass(frozen=True)
class _SelectedColumn:
    table: str
    name: str
    alias: Optional[str]


@dataclass(frozen=True)
class _Join:
    relation: Relation
    outer: bool


class SelectStatement:
    """
    Fluent builder for hand-written SELECT statements.

    Joins follow relations declared in the schema; the relation's source table
    must already be in scope (the FROM table or an earlier join). Nothing is
    validated until `build()`, which raises `QueryBuildError` on any unknown
    or out-of-scope reference.
    """

    def __init__(self) -> None:
        self._columns: List[_SelectedColumn] = []
        self._from: Optional[str] = None
        self._joins: List[_Join] = []
        self._conditions: List[Condition] = []
        self._order: List[OrderBy] = []
        self._limit: Optional[int] = None

    def column(self, table: TableRef, name: str, alias: Optional[str] = None) -> "SelectStatement":
        self._columns.append(_SelectedColumn(_table_name(table), name, alias))
        return self

    def from_(self, table: TableRef) -> "SelectStatement":
        self._from = _table_name(table)
        return self

    def inner_join(self, relation: Relation) -> "SelectStatement":
        self._joins.append(_Join(relation, outer=False))
        return self

    def left_join(self, relation: Relation) -> "SelectStatement":
        self._joins.append(_Join(relation, outer=True))
        return self

    def where(self, condition: Condition) -> "SelectStatement":
        self._conditions.append(condition)
        return self

    def order_by(self, table: TableRef, name: str, descending: bool = False) -> "SelectStatement":
        self._order.append(OrderBy(_table_name(table), name, descending))
        return self

    def limit(self, limit: int) -> "SelectStatement":
        self._limit = limit
        return self

    def _render_joins(self, scope: List[str]) -> sql.Composable:
        parts: List[sql.Composable] = []
        for join in self._joins:
            rel = join.relation
            if rel.source_table not in scope:
                raise QueryBuildError(
                    f"Cannot join relation {rel.name!r}: {rel.source_table!r} is not in the query"
                )
            if rel.target_table in scope:
                raise QueryBuildError(f"Table {rel.target_table!r} is already in the query")
            keyword = "LEFT JOIN" if join.outer else "INNER JOIN"
            parts.append(
                sql.SQL(" {} {} ON {} = {}").format(
                    sql.SQL(keyword),
                    sql.Identifier(rel.target_table),
                    _qualified(rel.source_table, rel.source_column),
                    _qualified(rel.target_table, rel.target_column),
                )
            )
            scope.append(rel.target_table)
        return sql.Composed(parts)

    def build(self) -> Statement:
        if self._from is None:
            raise QueryBuildError("SELECT statement has no FROM table")
        if not self._columns:
            raise QueryBuildError("SELECT statement has no columns")

        scope = [self._from]
        joins = self._render_joins(scope)

        selected = []
        for col in self._columns:
            if col.table not in scope:
                raise QueryBuildError(
                    f"Column {col.table}.{col.name} references a table not in the query"
                )
            ident = _qualified(col.table, col.name)
            if col.alias:
                selected.append(sql.SQL("{} AS {}").format(ident, sql.Identifier(col.alias)))
            else:
                selected.append(ident)

        params: List[Any] = []
        query = sql.Composed(
            [
                sql.SQL("SELECT {} FROM {}").format(
                    sql.SQL(", ").join(selected), sql.Identifier(self._from)
                ),
                joins,
                _render_where(self._conditions, params, scope),
                _render_order(self._order, scope),
                _render_limit(self._limit, params),
            ]
        )
        return Statement(query=query, params=tuple(params), kind="select", table=self._from)


__all__ = [
    "SelectStatement",
    "Statement",
    "delete",
    "insert",
    "select",
    "update",
]
