"""
Generic repository over one entity type.

Concrete repositories (bakery, chef) bind an `EntityDef`, the record model and
its partial model; every operation builds a statement with
`bakery_backend.query` and sends it through an executor. Nothing is cached:
each call is a fresh round trip.

Missing-key policy:
- `update_by_key` raises `NotFoundError` when no row was updated.
- `delete_by_key` is idempotent and reports the number of rows removed.
"""

from __future__ import annotations

from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from bakery_backend import query
from bakery_backend.domain.models import PartialRecord
from bakery_backend.domain.schema import Condition, EntityDef, OrderBy, Relation, entity_for
from bakery_backend.errors import ConstraintError, NotFoundError, QueryBuildError
from bakery_backend.infrastructure.executor import AbstractExecutor
from bakery_backend.utils.logging import get_logger

log = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
PartialT = TypeVar("PartialT", bound=PartialRecord)


class AbstractRepository(Generic[ModelT, PartialT]):
    """
    CRUD, filtered find and relationship traversal for a single table.

    Subclasses set `entity` and `model`.
    """

    entity: EntityDef
    model: Type[ModelT]

    def __init__(self, executor: AbstractExecutor) -> None:
        self._executor = executor

    @property
    def executor(self) -> AbstractExecutor:
        return self._executor

    def _check_required(self, values: dict) -> None:
        missing = [
            col.name
            for col in self.entity.required_columns
            if col.name not in values or values[col.name] is None
        ]
        if missing:
            raise ConstraintError(
                f"Cannot insert into {self.entity.table!r}: required field(s) "
                f"{', '.join(missing)} not set"
            )

    def _fetch(self, statement: query.Statement) -> List[ModelT]:
        return self._executor.fetch_into(statement, self.model)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, record: PartialT) -> Any:
        """
        Insert a row from the set fields of `record`; unset fields take the
        store's column defaults.

        Returns
        -------
        The store-assigned primary key (`last_insert_id`).
        """
        values = record.changes()
        self._check_required(values)
        result = self._executor.execute(query.insert(self.entity, values))
        if result.last_insert_id is None:
            raise ConstraintError(f"Insert into {self.entity.table!r} returned no key")
        log.info(
            f"Inserted {self.entity.table}",
            extra={"table": self.entity.table, "id": result.last_insert_id},
        )
        return result.last_insert_id

    def update_by_key(self, key: Any, record: PartialT) -> None:
        """
        Write only the set fields of `record` to the row identified by `key`.

        Raises
        ------
        NotFoundError
            If no row has that key.
        QueryBuildError
            If no field other than the primary key is set.
        """
        result = self._executor.execute(query.update(self.entity, key, record.changes()))
        if result.rows_affected == 0:
            raise NotFoundError(self.entity.table, key)
        log.info(
            f"Updated {self.entity.table}",
            extra={"table": self.entity.table, "id": key, "fields": sorted(record.changes())},
        )

    def update(self, record: PartialT) -> None:
        """Update using the primary key carried by `record` itself."""
        pk = self.entity.primary_key.name
        if not record.is_set(pk):
            raise QueryBuildError(f"Cannot update {self.entity.table!r}: {pk!r} is not set")
        self.update_by_key(getattr(record, pk), record)

    def delete_by_key(self, key: Any) -> int:
        """Delete the row identified by `key`. Deleting a missing key is not an error."""
        pk = self.entity.primary_key
        result = self._executor.execute(query.delete(self.entity, pk.eq(key)))
        log.info(
            f"Deleted {self.entity.table}",
            extra={"table": self.entity.table, "id": key, "rows": result.rows_affected},
        )
        return result.rows_affected

    def delete_all(self) -> int:
        """Remove every row of this table. Used to reset state between demo runs."""
        result = self._executor.execute(query.delete(self.entity))
        log.info(
            f"Cleared {self.entity.table}",
            extra={"table": self.entity.table, "rows": result.rows_affected},
        )
        return result.rows_affected

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_all(self, order_by: Sequence[OrderBy] = ()) -> List[ModelT]:
        return self._fetch(query.select(self.entity, order_by=order_by))

    def find_by_key(self, key: Any) -> Optional[ModelT]:
        rows = self._fetch(query.select(self.entity, self.entity.primary_key.eq(key)))
        return rows[0] if rows else None

    def find_where(
        self,
        *conditions: Condition,
        order_by: Sequence[OrderBy] = (),
        limit: Optional[int] = None,
    ) -> List[ModelT]:
        """Return rows matching every condition (conditions are ANDed)."""
        return self._fetch(
            query.select(self.entity, *conditions, order_by=order_by, limit=limit)
        )

    def find_one_where(
        self, *conditions: Condition, order_by: Sequence[OrderBy] = ()
    ) -> Optional[ModelT]:
        rows = self.find_where(*conditions, order_by=order_by, limit=1)
        return rows[0] if rows else None

    def find_via(
        self,
        record: BaseModel,
        relation: Relation,
        order_by: Sequence[OrderBy] = (),
    ) -> List[BaseModel]:
        """
        Follow `relation` from `record` with a second, foreign-key filtered query.

        The related rows are mapped into the target entity's model.
        """
        if relation.source_table != self.entity.table:
            raise QueryBuildError(
                f"Relation {relation.name!r} starts at {relation.source_table!r}, "
                f"not {self.entity.table!r}"
            )
        target = entity_for(relation.target_table)
        value = getattr(record, relation.source_column)
        statement = query.select(
            target, target.column(relation.target_column).eq(value), order_by=order_by
        )
        log.debug(
            f"Resolving {self.entity.table}.{relation.name}",
            extra={"relation": relation.name, "key": value},
        )
        return self._executor.fetch_into(statement, target.model)


__all__ = ["AbstractRepository"]
