"""
Demonstration flows for the Bakery Backend.

Each flow exercises the data-access layer end to end and checks what it reads
back, raising `VerificationError` when the store disagrees:

- `basic_crud_operations`: insert, partial update, find by key / by filter,
  delete.
- `relationship_select`: one bakery with four chefs, resolved through the
  `bakery -> chefs` relation.
- `raw_join_select`: a hand-built join of chef names to bakery names, ordered
  by chef name.

`reset` clears both tables first (chefs before bakeries; deletes do not
cascade).
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel

from bakery_backend.domain.models import BakeryPartial, ChefPartial
from bakery_backend.domain.schema import BAKERY, CHEF
from bakery_backend.errors import VerificationError
from bakery_backend.infrastructure.executor import AbstractExecutor
from bakery_backend.query import SelectStatement
from bakery_backend.repositories import BakeryRepository, ChefRepository
from bakery_backend.utils.logging import get_logger

log = get_logger(__name__)

LA_BOULANGERIE = "La Boulangerie"
LA_BOULANGERIE_CHEFS = ("Jolie", "Charles", "Madeleine", "Frederic")


class ChefWithBakery(BaseModel):
    """Row shape of the raw join in `raw_join_select`."""

    chef_name: str
    bakery_name: str


def _check(condition: bool, message: str) -> None:
    if not condition:
        raise VerificationError(message)


def reset(executor: AbstractExecutor) -> Dict[str, int]:
    chefs = ChefRepository(executor).delete_all()
    bakeries = BakeryRepository(executor).delete_all()
    return {"chef": chefs, "bakery": bakeries}


def basic_crud_operations(executor: AbstractExecutor) -> Dict[str, Any]:
    bakeries = BakeryRepository(executor)
    chefs = ChefRepository(executor)

    bakery_id = bakeries.insert(BakeryPartial(name="Happy Bakery", profit_margin=0.0))
    bakeries.update_by_key(bakery_id, BakeryPartial(name="Sad Bakery"))
    chef_id = chefs.insert(ChefPartial(name="John", bakery_id=bakery_id))

    everything = bakeries.find_all()
    _check(len(everything) == 1, f"expected 1 bakery, found {len(everything)}")

    sad_bakery = bakeries.find_by_key(bakery_id)
    _check(sad_bakery is not None, f"bakery {bakery_id} not found by key")
    _check(
        sad_bakery.name == "Sad Bakery" and sad_bakery.profit_margin == 0.0,
        f"partial update did not preserve unset fields: {sad_bakery!r}",
    )

    by_name = bakeries.find_one_where(BAKERY.name.eq("Sad Bakery"))
    _check(by_name is not None and by_name.id == bakery_id, "bakery not found by name filter")

    chefs.delete_by_key(chef_id)
    bakeries.delete_by_key(bakery_id)

    remaining = bakeries.find_all()
    _check(not remaining, f"expected no bakeries after delete, found {len(remaining)}")

    log.info("Basic CRUD flow verified", extra={"bakery_id": bakery_id, "chef_id": chef_id})
    return {"bakery_id": bakery_id, "chef_id": chef_id, "bakery": sad_bakery.model_dump()}


def relationship_select(executor: AbstractExecutor) -> Dict[str, Any]:
    bakeries = BakeryRepository(executor)
    chefs = ChefRepository(executor)

    bakery_id = bakeries.insert(BakeryPartial(name=LA_BOULANGERIE, profit_margin=0.0))
    for chef_name in LA_BOULANGERIE_CHEFS:
        chefs.insert(ChefPartial(name=chef_name, bakery_id=bakery_id))

    la_boulangerie = bakeries.find_by_key(bakery_id)
    _check(la_boulangerie is not None, f"bakery {bakery_id} not found by key")

    chef_names = sorted(chef.name for chef in bakeries.find_related(la_boulangerie))
    expected = sorted(LA_BOULANGERIE_CHEFS)
    _check(chef_names == expected, f"expected chefs {expected}, found {chef_names}")

    log.info("Relationship flow verified", extra={"bakery_id": bakery_id, "chefs": chef_names})
    return {"bakery_id": bakery_id, "chefs": chef_names}


def raw_join_select(executor: AbstractExecutor) -> List[ChefWithBakery]:
    statement = (
        SelectStatement()
        .column(CHEF, "name", alias="chef_name")
        .column(BAKERY, "name", alias="bakery_name")
        .from_(CHEF)
        .inner_join(CHEF.relation("bakery"))
        .order_by(CHEF, "name")
        .build()
    )
    rows = executor.fetch_into(statement, ChefWithBakery)
    names = [row.chef_name for row in rows]
    _check(names == sorted(names), f"rows not ordered by chef name: {names}")

    expected = [(name, LA_BOULANGERIE) for name in sorted(LA_BOULANGERIE_CHEFS)]
    found = [(row.chef_name, row.bakery_name) for row in rows if row.bakery_name == LA_BOULANGERIE]
    _check(found == expected, f"expected chef/bakery pairs {expected}, found {found}")
    return rows


def run_all(executor: AbstractExecutor) -> Dict[str, Any]:
    """Run every flow in order against a clean store."""
    cleared = reset(executor)
    crud = basic_crud_operations(executor)
    related = relationship_select(executor)
    joined = raw_join_select(executor)
    return {
        "cleared": cleared,
        "crud": crud,
        "relationships": related,
        "joined": [row.model_dump() for row in joined],
    }


__all__ = [
    "ChefWithBakery",
    "basic_crud_operations",
    "raw_join_select",
    "relationship_select",
    "reset",
    "run_all",
]
