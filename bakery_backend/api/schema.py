"""
GraphQL schema for the Bakery Backend.

Queries: `hello`, `bakeries`, `bakery(id)`; nested `Bakery.chefs`.
Mutations: `addBakery(name)`, `addChef(name, bakeryId)`.

Resolvers are coroutines; the repositories block on the pool, so every store
call is handed to the threadpool and the event loop keeps serving other
requests meanwhile.

`Bakery.chefs` is resolved lazily per parent, so a `bakeries { chefs }` query
issues one chef query per bakery (N+1); nothing batches the lookups into a
join.
"""

from __future__ import annotations

from typing import List, Optional

import strawberry
from fastapi.concurrency import run_in_threadpool
from strawberry.types import Info

from bakery_backend.api.context import AppContext
from bakery_backend.domain import models
from bakery_backend.domain.models import BakeryPartial, ChefPartial

GREETING = "Hello GraphQL"


@strawberry.type
class Chef:
    id: int
    name: str
    contact_details: Optional[str]
    bakery_id: int

    @classmethod
    def from_model(cls, chef: models.Chef) -> "Chef":
        return cls(
            id=chef.id,
            name=chef.name,
            contact_details=chef.contact_details,
            bakery_id=chef.bakery_id,
        )


@strawberry.type
class Bakery:
    id: int
    name: str
    profit_margin: float

    @classmethod
    def from_model(cls, bakery: models.Bakery) -> "Bakery":
        return cls(id=bakery.id, name=bakery.name, profit_margin=bakery.profit_margin)

    @strawberry.field
    async def chefs(self, info: Info[AppContext, None]) -> List[Chef]:
        parent = models.Bakery(id=self.id, name=self.name, profit_margin=self.profit_margin)
        found = await run_in_threadpool(info.context.bakeries.find_related, parent)
        return [Chef.from_model(chef) for chef in found]


@strawberry.type
class Query:
    @strawberry.field
    def hello(self) -> str:
        return GREETING

    @strawberry.field
    async def bakeries(self, info: Info[AppContext, None]) -> List[Bakery]:
        found = await run_in_threadpool(info.context.bakeries.find_all)
        return [Bakery.from_model(b) for b in found]

    @strawberry.field
    async def bakery(self, info: Info[AppContext, None], id: int) -> Optional[Bakery]:
        found = await run_in_threadpool(info.context.bakeries.find_by_key, id)
        return Bakery.from_model(found) if found else None


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def add_bakery(self, info: Info[AppContext, None], name: str) -> Bakery:
        key = await run_in_threadpool(
            info.context.bakeries.insert, BakeryPartial(name=name, profit_margin=0.0)
        )
        return Bakery(id=key, name=name, profit_margin=0.0)

    @strawberry.mutation
    async def add_chef(self, info: Info[AppContext, None], name: str, bakery_id: int) -> Chef:
        key = await run_in_threadpool(
            info.context.chefs.insert, ChefPartial(name=name, bakery_id=bakery_id)
        )
        return Chef(id=key, name=name, contact_details=None, bakery_id=bakery_id)


schema = strawberry.Schema(query=Query, mutation=Mutation)

__all__ = ["Bakery", "Chef", "Mutation", "Query", "schema", "GREETING"]
