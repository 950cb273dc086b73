"""
storefront/schemas/cart.py - Pydantic models for the cart endpoints.

Request bodies accept both `product_id` and the legacy camelCase `productId`.
Quantities are unconstrained here: type and range checks happen in the
cart engine so that they surface as 400 InvalidInput, not 422.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field

from storefront.model.cart import Cart
from storefront.model.product import Product

_PID = AliasChoices("product_id", "productId")


class AddItemBody(BaseModel):
    product_id: Any = Field(None, validation_alias=_PID, description="Product ID")
    delta: Any = Field(1, validation_alias=AliasChoices("delta", "quantity"),
                       description="Signed quantity change; <= 0 decrements")


class SetQuantityBody(BaseModel):
    product_id: Any = Field(None, validation_alias=_PID)
    quantity: Any = Field(None, description="Absolute quantity (>= 1)")


class RemoveItemBody(BaseModel):
    product_id: Any = Field(None, validation_alias=_PID)


class CartProductOut(BaseModel):
    id: str
    name: str
    price: float
    image: str = ""
    stock: int = 0


class CartLineOut(BaseModel):
    product_id: str
    product: Optional[CartProductOut] = Field(None, description="Current catalog entry; null if it disappeared")
    quantity: int
    unit_price: float = Field(..., description="Price snapshot taken when the product was first added")
    line_total: float


class CartOut(BaseModel):
    owner_id: str
    lines: List[CartLineOut] = Field(default_factory=list)
    item_count: int = 0
    total: float = 0.0
    last_modified: Optional[datetime] = None

    @classmethod
    def build(cls, cart: Cart, products: Dict[str, Product]) -> "CartOut":
        lines = []
        for line in cart.lines:
            p = products.get(line.product_id)
            lines.append(CartLineOut(
                product_id=line.product_id,
                product=CartProductOut(
                    id=p.id, name=p.name, price=float(p.price), image=p.image, stock=p.stock,
                ) if p else None,
                quantity=line.quantity,
                unit_price=float(line.unit_price),
                line_total=float(line.line_total),
            ))
        return cls(
            owner_id=cart.owner_id,
            lines=lines,
            item_count=cart.item_count,
            total=float(cart.total),
            last_modified=cart.last_modified,
        )
