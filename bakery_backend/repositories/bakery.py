from __future__ import annotations

from typing import List, Sequence

from bakery_backend.domain.models import Bakery, BakeryPartial, Chef
from bakery_backend.domain.schema import BAKERY, OrderBy
from bakery_backend.repositories.abstract import AbstractRepository


class BakeryRepository(AbstractRepository[Bakery, BakeryPartial]):
    """
    Data access for the `bakery` table.

    A bakery's chefs are never loaded with the bakery itself; `find_related`
    issues a second query filtered on `chef.bakery_id`.
    """

    entity = BAKERY
    model = Bakery

    def find_by_name(self, name: str) -> List[Bakery]:
        return self.find_where(BAKERY.name.eq(name))

    def find_related(self, bakery: Bakery, order_by: Sequence[OrderBy] = ()) -> List[Chef]:
        """Return the chefs whose `bakery_id` is `bakery.id`."""
        return self.find_via(bakery, BAKERY.relation("chefs"), order_by=order_by)

    find_chefs = find_related


__all__ = ["BakeryRepository"]
