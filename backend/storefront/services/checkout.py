# storefront/services/checkout.py
"""
Order capture.

CART-FIRST: the order lines are a snapshot of the caller's server-side cart
(unit price as captured in the cart, product name/image as currently in the
catalog). Client-sent items are only used when the cart is empty. Totals are
always computed here; the client may only contribute tax, shipping and discount.
"""
from __future__ import annotations

import logging
import time
import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional

from storefront.config import settings
from storefront.core.errors import InvalidInput
from storefront.model.cart import Cart, money
from storefront.model.product import Product
from storefront.repositories.common import utcnow
from storefront.repositories.orders import OrderStore
from storefront.schemas.order import OrderCreate, OrderItemIn
from storefront.services.cart_engine import CartEngine

logger = logging.getLogger("storefront.orders")


def items_from_cart(cart: Cart, products: Dict[str, Product]) -> List[Dict[str, Any]]:
    items = []
    for line in cart.lines:
        p = products.get(line.product_id)
        items.append({
            "product_id": line.product_id,
            "name": p.name if p and p.name else "Item",
            "image": p.image if p else None,
            "price": float(line.unit_price),
            "quantity": line.quantity,
            "line_total": float(line.line_total),
        })
    return items


def coerce_item(item: OrderItemIn) -> Dict[str, Any]:
    price = money(Decimal(str(item.price)))
    return {
        "product_id": item.product_id,
        "name": item.name,
        "image": item.image,
        "price": float(price),
        "quantity": int(item.quantity),
        "line_total": float(money(price * item.quantity)),
    }


def calc_totals(items: List[Dict[str, Any]], *, tax: float = 0, shipping: float = 0,
                discount: float = 0, currency: str = "USD",
                coupon_code: Optional[str] = None) -> Dict[str, Any]:
    """subtotal + tax + shipping - discount, never below zero, rounded to cents."""
    subtotal = money(sum((Decimal(str(it["line_total"])) for it in items), Decimal("0")))
    tax_d = money(Decimal(str(tax)))
    shipping_d = money(Decimal(str(shipping)))
    discount_d = money(Decimal(str(discount)))
    grand_total = max(subtotal + tax_d + shipping_d - discount_d, Decimal("0.00"))

    return {
        "item_count": int(sum(int(it["quantity"]) for it in items)),
        "subtotal": float(subtotal),
        "tax": float(tax_d),
        "discount": float(discount_d),
        "shipping": float(shipping_d),
        "grand_total": float(money(grand_total)),
        "currency": currency.upper(),
        "coupon_code": coupon_code,
    }


def build_order_doc(*, user: Dict[str, Any], payload: OrderCreate,
                    items: List[Dict[str, Any]], totals: Dict[str, Any]) -> Dict[str, Any]:
    """Document written to orders/{id}. Customer id always comes from the session."""
    customer = payload.customer
    return {
        "order_no": f"ORD-{int(time.time() * 1000)}",
        "status": payload.status,
        "customer": {
            "id": user["id"],
            "full_name": customer.full_name or user.get("full_name") or "",
            "email": customer.email or user.get("email") or "",
            "phone": customer.phone or user.get("phone") or "",
        },
        "items": items,
        "totals": totals,
        "shipping": payload.shipping.model_dump(),
        "payment": payload.payment.model_dump() if payload.payment else None,
        "checkout_id": payload.checkout_id,
        "created_at": utcnow(),
    }


class CheckoutService:

    def __init__(self, orders: OrderStore, engine: CartEngine):
        self.orders = orders
        self.engine = engine

    def place_order(self, user: Dict[str, Any], payload: OrderCreate) -> Dict[str, Any]:
        uid = user["id"]

        # same checkout_id → same order
        if payload.checkout_id:
            existing = self.orders.find_by_checkout(uid, payload.checkout_id)
            if existing:
                logger.info("Checkout %s already captured as %s", payload.checkout_id, existing["id"])
                return existing

        cart, products = self.engine.fetch_with_products(uid)
        if cart.lines:
            items = items_from_cart(cart, products)
        elif payload.items:
            items = [coerce_item(it) for it in payload.items]
        else:
            raise InvalidInput("Cart is empty. Add products before checking out.")

        t = payload.totals
        totals = calc_totals(
            items,
            tax=t.tax,
            shipping=t.shipping,
            discount=t.discount,
            currency=t.currency or settings.currency,
            coupon_code=t.coupon_code,
        )

        order_id = str(uuid.uuid4())
        saved = self.orders.create(order_id, build_order_doc(user=user, payload=payload, items=items, totals=totals))
        logger.info("Order %s created for %s (%s %s)", order_id, uid, totals["grand_total"], totals["currency"])

        if cart.lines:
            self.engine.clear(uid)
        return saved
