"""
Domain package for the Bakery Backend.

Exports the record types and the entity/relationship definitions used by the
data-access layer. Keep this package focused on data definitions.
"""

from bakery_backend.domain.models import Bakery, BakeryPartial, Chef, ChefPartial, ExecResult
from bakery_backend.domain.schema import BAKERY, CHEF, Column, Condition, EntityDef, OrderBy, Relation

__all__ = [
    "Bakery",
    "BakeryPartial",
    "Chef",
    "ChefPartial",
    "ExecResult",
    "BAKERY",
    "CHEF",
    "Column",
    "Condition",
    "EntityDef",
    "OrderBy",
    "Relation",
]
