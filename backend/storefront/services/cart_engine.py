# storefront/services/cart_engine.py
"""
Cart reconciliation: every request loads the owner's cart document, sanitizes it,
applies exactly one mutation and writes the whole cart back.

Price policy: a line keeps the unit price captured when the product was first
added. Increments and absolute sets never refresh it from the catalog.

Concurrency: there is no version token on the cart document. Two concurrent
mutations for the same owner both read the pre-mutation cart and the later
save wins, so one increment can be lost.
"""
import logging
from typing import Any, Container, Dict, List, Optional, Tuple

from storefront.core.errors import InvalidInput, NotFound
from storefront.model.cart import Cart, CartLine
from storefront.model.product import Product, clean_product_id, is_valid_product_id, to_decimal
from storefront.repositories.carts import CartStore
from storefront.repositories.common import utcnow
from storefront.repositories.products import ProductCatalog

logger = logging.getLogger("storefront.cart")


def _coerce_line(raw: Any) -> Optional[CartLine]:
    if isinstance(raw, CartLine):
        return raw
    if not isinstance(raw, dict):
        return None
    pid = raw.get("product_id")
    if not isinstance(pid, str) or not is_valid_product_id(pid):
        return None
    qty = raw.get("quantity")
    if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
        return None
    price = to_decimal(raw.get("unit_price"))
    if price is None:
        return None
    return CartLine(product_id=pid, quantity=qty, unit_price=price)


def sanitize(raw_lines: Any, resolvable: Optional[Container[str]] = None) -> Tuple[List[CartLine], int]:
    """
    Restores the cart invariants on whatever was stored.

    Drops entries without a usable product reference, quantity or price, entries
    whose product is not in `resolvable` (when given), and every repeat of a
    product id after its first occurrence. Returns (lines, number dropped).
    """
    if raw_lines is None:
        return [], 0
    if not isinstance(raw_lines, list):
        return [], 1

    lines: List[CartLine] = []
    seen = set()
    for raw in raw_lines:
        line = _coerce_line(raw)
        if line is None:
            continue
        if resolvable is not None and line.product_id not in resolvable:
            continue
        if line.product_id in seen:
            continue
        seen.add(line.product_id)
        lines.append(line)
    return lines, len(raw_lines) - len(lines)


def _require_product_id(product_id: Any) -> str:
    pid = clean_product_id(product_id)
    if not is_valid_product_id(pid):
        raise InvalidInput("Invalid productId")
    return pid


def _require_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{name} must be an integer")
    return value


class CartEngine:

    def __init__(self, store: CartStore, catalog: ProductCatalog):
        self.store = store
        self.catalog = catalog

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def _load(self, owner_id: str) -> Tuple[Cart, bool]:
        """Returns (sanitized cart, needs_save)."""
        doc = self.store.get_by_owner(owner_id)
        if doc is None:
            return Cart(owner_id=owner_id), True
        lines, dropped = sanitize(doc.get("lines"))
        if dropped:
            logger.warning("Dropped %d malformed line(s) from cart %s", dropped, owner_id)
        last_modified = doc.get("last_modified")
        if hasattr(last_modified, "to_datetime"):
            last_modified = last_modified.to_datetime()
        return Cart(owner_id=owner_id, lines=lines, last_modified=last_modified), dropped > 0

    def _save(self, cart: Cart) -> Cart:
        cart.last_modified = utcnow()
        return self.store.upsert(cart)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def fetch(self, owner_id: str) -> Cart:
        """
        Sanitized cart, created empty if absent. Lines whose product has left the
        catalog are dropped here as well; a cleaned or new cart is persisted.
        """
        return self.fetch_with_products(owner_id)[0]

    def fetch_with_products(self, owner_id: str) -> Tuple[Cart, Dict[str, Product]]:
        """`fetch` plus the catalog entries it resolved, keyed by product id."""
        cart, dirty = self._load(owner_id)
        known: Dict[str, Product] = {}
        if cart.lines:
            known = self.catalog.get_many(line.product_id for line in cart.lines)
            cart.lines, stale = sanitize(cart.lines, resolvable=known)
            if stale:
                logger.info("Dropped %d stale line(s) from cart %s", stale, owner_id)
                dirty = True
        if dirty:
            cart = self._save(cart)
        return cart, known

    def add_or_increment(self, owner_id: str, product_id: Any, delta: Any = 1) -> Cart:
        """
        Applies a signed quantity change. The line is deleted when the result drops
        to zero or below; a decrement on a missing line does nothing. The catalog is
        only consulted when the product is not in the cart yet.
        """
        pid = _require_product_id(product_id)
        delta = _require_int(delta, "delta")

        cart, _ = self._load(owner_id)
        line = cart.find(pid)
        if line is not None:
            new_qty = line.quantity + delta
            if new_qty <= 0:
                cart.drop(pid)
            else:
                line.quantity = new_qty
        elif delta > 0:
            product = self.catalog.get_by_id(pid)
            if product is None:
                raise NotFound("Product not found")
            cart.lines.append(CartLine(product_id=pid, quantity=delta, unit_price=product.price))
        return self._save(cart)

    def set_quantity(self, owner_id: str, product_id: Any, quantity: Any) -> Cart:
        """Absolute set on an existing line. Never inserts."""
        pid = _require_product_id(product_id)
        quantity = _require_int(quantity, "quantity")
        if quantity < 1:
            raise InvalidInput("quantity must be >= 1")

        cart, _ = self._load(owner_id)
        line = cart.find(pid)
        if line is None:
            raise NotFound("Item not found in cart")
        line.quantity = quantity
        return self._save(cart)

    def remove(self, owner_id: str, product_id: Any) -> Cart:
        """Deletes the whole line regardless of its quantity."""
        pid = _require_product_id(product_id)

        cart, _ = self._load(owner_id)
        if not cart.drop(pid):
            raise NotFound("Item not in cart")
        return self._save(cart)

    def clear(self, owner_id: str) -> Cart:
        return self._save(Cart(owner_id=owner_id))

    def populate(self, cart: Cart) -> Dict[str, Product]:
        """Current catalog entries for the cart's lines, keyed by product id."""
        return self.catalog.get_many(line.product_id for line in cart.lines)
