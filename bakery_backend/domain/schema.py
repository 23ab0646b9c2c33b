"""
Entity and relationship definitions for the `bakery` and `chef` tables.

These are purely structural: the data-access layer reads them to generate
column lists, validate filters and build join conditions. They mirror
`db/init.sql` one to one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Sequence, Tuple, Type

from pydantic import BaseModel

from bakery_backend.domain.models import Bakery, Chef
from bakery_backend.errors import QueryBuildError

Operator = Literal["=", "<>", "<", "<=", ">", ">=", "LIKE", "IS NULL", "IS NOT NULL", "IN"]
RelationKind = Literal["has_many", "belongs_to"]


@dataclass(frozen=True)
class Condition:
    """A single `column <op> value` predicate."""

    table: str
    column: str
    op: Operator
    value: Any = None


@dataclass(frozen=True)
class OrderBy:
    table: str
    column: str
    descending: bool = False


@dataclass(frozen=True)
class Column:
    """
    A mapped column.

    `has_default` marks columns the store fills in when an insert leaves them
    unset (serial keys and `DEFAULT` clauses).
    """

    table: str
    name: str
    sql_type: str
    nullable: bool = False
    primary_key: bool = False
    has_default: bool = False

    def _cond(self, op: Operator, value: Any = None) -> Condition:
        return Condition(table=self.table, column=self.name, op=op, value=value)

    def eq(self, value: Any) -> Condition:
        return self._cond("=", value)

    def ne(self, value: Any) -> Condition:
        return self._cond("<>", value)

    def lt(self, value: Any) -> Condition:
        return self._cond("<", value)

    def lte(self, value: Any) -> Condition:
        return self._cond("<=", value)

    def gt(self, value: Any) -> Condition:
        return self._cond(">", value)

    def gte(self, value: Any) -> Condition:
        return self._cond(">=", value)

    def like(self, pattern: str) -> Condition:
        return self._cond("LIKE", pattern)

    def is_null(self) -> Condition:
        return self._cond("IS NULL")

    def is_not_null(self) -> Condition:
        return self._cond("IS NOT NULL")

    def is_in(self, values: Sequence[Any]) -> Condition:
        return self._cond("IN", list(values))

    def asc(self) -> OrderBy:
        return OrderBy(table=self.table, column=self.name)

    def desc(self) -> OrderBy:
        return OrderBy(table=self.table, column=self.name, descending=True)


@dataclass(frozen=True)
class Relation:
    """
    A foreign-key relationship seen from `source_table`.

    For `has_many` the source column is the parent's key and the target column
    is the child's foreign key; `belongs_to` is the reverse direction.
    """

    name: str
    kind: RelationKind
    source_table: str
    source_column: str
    target_table: str
    target_column: str


@dataclass(frozen=True)
class EntityDef:
    table: str
    model: Type[BaseModel]
    columns: Tuple[Column, ...]
    relations: Tuple[Relation, ...] = field(default=())

    def __post_init__(self) -> None:
        for col in self.columns:
            if col.table != self.table:
                raise QueryBuildError(f"Column {col.name!r} declared for table {col.table!r}")

    @property
    def primary_key(self) -> Column:
        for col in self.columns:
            if col.primary_key:
                return col
        raise QueryBuildError(f"Table {self.table!r} declares no primary key")

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(col.name for col in self.columns)

    @property
    def required_columns(self) -> Tuple[Column, ...]:
        """Columns an insert must supply: not nullable, no store default, not the key."""
        return tuple(
            col
            for col in self.columns
            if not col.nullable and not col.has_default and not col.primary_key
        )

    def column(self, name: str) -> Column:
        for col in self.columns:
            if col.name == name:
                return col
        raise QueryBuildError(
            f"Unknown column {name!r} on table {self.table!r}. "
            f"Available: {', '.join(self.column_names)}"
        )

    def relation(self, name: str) -> Relation:
        for rel in self.relations:
            if rel.name == name:
                return rel
        raise QueryBuildError(f"Unknown relation {name!r} on table {self.table!r}")

    def __getattr__(self, name: str) -> Column:
        # Allows BAKERY.name / CHEF.bakery_id style access for filter building.
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self.column(name)
        except QueryBuildError as exc:
            raise AttributeError(str(exc)) from exc


BAKERY = EntityDef(
    table="bakery",
    model=Bakery,
    columns=(
        Column("bakery", "id", "serial", primary_key=True, has_default=True),
        Column("bakery", "name", "text"),
        Column("bakery", "profit_margin", "double precision", has_default=True),
    ),
    relations=(
        Relation(
            name="chefs",
            kind="has_many",
            source_table="bakery",
            source_column="id",
            target_table="chef",
            target_column="bakery_id",
        ),
    ),
)

CHEF = EntityDef(
    table="chef",
    model=Chef,
    columns=(
        Column("chef", "id", "serial", primary_key=True, has_default=True),
        Column("chef", "name", "text"),
        Column("chef", "contact_details", "text", nullable=True),
        Column("chef", "bakery_id", "integer"),
    ),
    relations=(
        Relation(
            name="bakery",
            kind="belongs_to",
            source_table="chef",
            source_column="bakery_id",
            target_table="bakery",
            target_column="id",
        ),
    ),
)

ENTITIES: Dict[str, EntityDef] = {entity.table: entity for entity in (BAKERY, CHEF)}


def entity_for(table: str) -> EntityDef:
    try:
        return ENTITIES[table]
    except KeyError:
        raise QueryBuildError(
            f"Unknown table {table!r}. Available: {', '.join(sorted(ENTITIES))}"
        ) from None


def resolve_column(table: str, name: str) -> Column:
    return entity_for(table).column(name)


__all__ = [
    "BAKERY",
    "CHEF",
    "ENTITIES",
    "Column",
    "Condition",
    "EntityDef",
    "OrderBy",
    "Relation",
    "entity_for",
    "resolve_column",
]
