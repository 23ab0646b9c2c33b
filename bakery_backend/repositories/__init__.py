"""
Repositories package for the Bakery Backend.

Re-exports the generic repository and the per-table repositories so callers can
import from `bakery_backend.repositories` directly.
"""

from bakery_backend.repositories.abstract import AbstractRepository
from bakery_backend.repositories.bakery import BakeryRepository
from bakery_backend.repositories.chef import ChefRepository

__all__ = [
    "AbstractRepository",
    "BakeryRepository",
    "ChefRepository",
]
