# storefront/schemas/order.py
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

OrderStatus = Literal["pending", "paid", "failed", "refunded", "cancelled"]


# keep unknown fields so older clients' extra data is not silently cut from responses
class _Base(BaseModel):
    model_config = ConfigDict(extra="allow")


# (Input) line sent by the client; only used when the server cart is empty
class OrderItemIn(_Base):
    product_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    image: Optional[str] = None
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)


class CustomerIn(_Base):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class ShippingIn(_Base):
    name: Optional[str] = None
    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class PaymentInfoIn(_Base):
    provider: str = "iyzico"
    payment_id: Optional[str] = None
    token: Optional[str] = None
    amount_received: Optional[float] = None
    status: Optional[str] = None
    receipt_email: Optional[str] = None
    card_brand: Optional[str] = None
    last4: Optional[str] = None


class TotalsIn(_Base):
    tax: float = Field(0, ge=0)
    shipping: float = Field(0, ge=0)
    discount: float = Field(0, ge=0)
    currency: Optional[str] = None
    coupon_code: Optional[str] = None


class OrderCreate(_Base):
    items: List[OrderItemIn] = Field(default_factory=list)
    customer: CustomerIn = Field(default_factory=CustomerIn)
    shipping: ShippingIn = Field(default_factory=ShippingIn)
    payment: Optional[PaymentInfoIn] = None
    totals: TotalsIn = Field(default_factory=TotalsIn)
    status: OrderStatus = "paid"
    checkout_id: Optional[str] = Field(None, description="Idempotency key: one order per checkout")


class OrderItemOut(_Base):
    product_id: Optional[str] = None
    name: str
    image: Optional[str] = None
    price: float
    quantity: int
    line_total: float


class TotalsOut(_Base):
    item_count: int
    subtotal: float
    tax: float
    discount: float
    shipping: float
    grand_total: float
    currency: str
    coupon_code: Optional[str] = None


class CustomerOut(_Base):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class OrderOut(_Base):
    id: str
    order_no: str
    status: OrderStatus
    customer: CustomerOut
    items: List[OrderItemOut] = Field(default_factory=list)
    totals: TotalsOut
    shipping: ShippingIn = Field(default_factory=ShippingIn)
    payment: Optional[PaymentInfoIn] = None
    created_at: Optional[datetime] = None


class OrderCreatedOut(BaseModel):
    order_id: str
    order: OrderOut
