"""
Domain models for the Bakery Backend.

Defines the two record types aligned with `db/init.sql`, their partial
counterparts used for inserts and updates, and the result of a write
statement.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Bakery(BaseModel):
    """
    Representation of a single row in the `bakery` table.
    """

    id: int = Field(..., description="Primary key (SERIAL).")
    name: str = Field(..., description="Display name of the bakery.")
    profit_margin: float = Field(0.0, description="Profit margin, 0.0 when unspecified.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }


class Chef(BaseModel):
    """
    Representation of a single row in the `chef` table.
    """

    id: int = Field(..., description="Primary key (SERIAL).")
    name: str = Field(..., description="Chef name.")
    contact_details: Optional[str] = Field(None, description="Free-form contact info.")
    bakery_id: int = Field(..., description="Foreign key to bakery.id.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }


class PartialRecord(BaseModel):
    """
    A record where each field is either set or unset.

    A field counts as set when it was passed to the constructor, so an explicit
    `None` means "write NULL" while an omitted field is left alone by the store.
    """

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    def changes(self) -> Dict[str, Any]:
        """Return only the fields that were explicitly set."""
        return self.model_dump(exclude_unset=True)

    def is_set(self, name: str) -> bool:
        return name in self.model_fields_set


class BakeryPartial(PartialRecord):
    id: Optional[int] = None
    name: Optional[str] = None
    profit_margin: Optional[float] = None


class ChefPartial(PartialRecord):
    id: Optional[int] = None
    name: Optional[str] = None
    contact_details: Optional[str] = None
    bakery_id: Optional[int] = None


class ExecResult(BaseModel):
    """Outcome of an INSERT/UPDATE/DELETE."""

    rows_affected: int = 0
    last_insert_id: Optional[int] = None

    model_config = {"frozen": True}


__all__ = ["Bakery", "Chef", "BakeryPartial", "ChefPartial", "ExecResult", "PartialRecord"]
