# storefront/model/cart.py
"""
Cart value objects.

A Cart is rebuilt from its stored document on every request and written back as
a whole. Totals are always derived from the lines; nothing computed is stored.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

CENT = Decimal("0.01")


def money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class CartLine(BaseModel):
    product_id: str
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0, description="Price captured when the product was first added")

    @property
    def line_total(self) -> Decimal:
        return money(self.unit_price * self.quantity)


class Cart(BaseModel):
    owner_id: str
    lines: List[CartLine] = Field(default_factory=list)
    last_modified: Optional[datetime] = None

    @property
    def total(self) -> Decimal:
        """Sum of the cent-rounded line totals, so it always matches the itemized lines."""
        return money(sum((line.line_total for line in self.lines), Decimal("0")))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def find(self, product_id: str) -> Optional[CartLine]:
        return next((line for line in self.lines if line.product_id == product_id), None)

    def drop(self, product_id: str) -> bool:
        before = len(self.lines)
        self.lines = [line for line in self.lines if line.product_id != product_id]
        return len(self.lines) != before

    def to_document(self) -> Dict[str, Any]:
        return {
            "owner_id": self.owner_id,
            "lines": [
                {
                    "product_id": line.product_id,
                    "quantity": line.quantity,
                    "unit_price": float(line.unit_price),
                }
                for line in self.lines
            ],
            "last_modified": self.last_modified,
        }
