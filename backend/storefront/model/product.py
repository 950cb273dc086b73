# storefront/model/product.py
from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

CATEGORIES = ("men", "women", "kids")

_PRODUCT_ID = re.compile(r"^[A-Za-z0-9_-]{1,128}$")
_INVISIBLE = ("\u200b", "\u200c", "\u200d", "\ufeff", "\xa0")


def clean_product_id(value: Any) -> str:
    """Strips whitespace and zero-width characters pasted along with an id."""
    v = value if isinstance(value, str) else ""
    for ch in _INVISIBLE:
        v = v.replace(ch, "")
    return v.strip()


def is_valid_product_id(value: Any) -> bool:
    return isinstance(value, str) and bool(_PRODUCT_ID.match(value))


def to_decimal(value: Any) -> Optional[Decimal]:
    """Decimal from a stored number; None when missing, non-finite or negative."""
    if value is None or isinstance(value, bool):
        return None
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not d.is_finite() or d < 0:
        return None
    return d


class Product(BaseModel):
    """Catalog entry as seen by the cart and checkout."""
    id: str
    name: str = ""
    description: str = ""
    price: Decimal = Field(..., ge=0)
    category: str = ""
    image: str = ""
    stock: int = 0
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Product":
        ts = data.get("created_at")
        if hasattr(ts, "to_datetime"):
            ts = ts.to_datetime()
        return cls(
            id=doc_id,
            name=data.get("name") or data.get("title") or "",
            description=data.get("description") or "",
            price=to_decimal(data.get("price")) or Decimal("0"),
            category=data.get("category") or "",
            image=data.get("image") or "",
            stock=int(data.get("stock") or 0),
            created_at=ts if isinstance(ts, datetime) else None,
        )
