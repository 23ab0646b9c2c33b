from __future__ import annotations

from typing import Any, List, Optional

from bakery_backend.domain.models import Bakery, Chef, ChefPartial
from bakery_backend.domain.schema import CHEF
from bakery_backend.repositories.abstract import AbstractRepository


class ChefRepository(AbstractRepository[Chef, ChefPartial]):
    """Data access for the `chef` table."""

    entity = CHEF
    model = Chef

    def find_by_bakery_id(self, bakery_id: Any) -> List[Chef]:
        return self.find_where(CHEF.bakery_id.eq(bakery_id))

    def find_bakery(self, chef: Chef) -> Optional[Bakery]:
        """Follow `chef.bakery_id` back to its bakery (one extra round trip)."""
        bakeries = self.find_via(chef, CHEF.relation("bakery"))
        return bakeries[0] if bakeries else None


__all__ = ["ChefRepository"]
