from __future__ import annotations

from strawberry.fastapi import BaseContext

from bakery_backend.infrastructure.executor import AbstractExecutor
from bakery_backend.repositories import BakeryRepository, ChefRepository


class AppContext(BaseContext):
    """Per-request GraphQL context holding repositories over the shared executor."""

    def __init__(self, executor: AbstractExecutor) -> None:
        super().__init__()
        self.bakeries = BakeryRepository(executor)
        self.chefs = ChefRepository(executor)


__all__ = ["AppContext"]
