"""
storefront/routers/carts.py
Cart endpoints (logged-in users). Each call loads the user's cart, applies one
change through the CartEngine and returns the whole cart:
lines (product summary, quantity, unit_price snapshot, line_total) and the total.

- GET  /cart              current cart (created empty on first visit)
- POST /cart/add          {product_id, delta=1}; delta may be negative
- POST /cart/setQuantity  {product_id, quantity}; existing lines only
- POST /cart/remove       {product_id}; removes the whole line
- POST /cart/clear
"""
from fastapi import APIRouter, Depends

from storefront.core.security import get_current_user
from storefront.deps import get_cart_engine
from storefront.model.cart import Cart
from storefront.schemas.cart import AddItemBody, CartOut, RemoveItemBody, SetQuantityBody
from storefront.services.cart_engine import CartEngine

router = APIRouter(prefix="/cart", tags=["Cart"])


def _out(engine: CartEngine, cart: Cart) -> CartOut:
    return CartOut.build(cart, engine.populate(cart) if cart.lines else {})


@router.get("", response_model=CartOut)
def get_cart(current_user: dict = Depends(get_current_user),
             engine: CartEngine = Depends(get_cart_engine)):
    cart, products = engine.fetch_with_products(current_user["id"])
    return CartOut.build(cart, products)


@router.post("/add", response_model=CartOut)
def add_to_cart(payload: AddItemBody,
                current_user: dict = Depends(get_current_user),
                engine: CartEngine = Depends(get_cart_engine)):
    cart = engine.add_or_increment(current_user["id"], payload.product_id, payload.delta)
    return _out(engine, cart)


@router.post("/setQuantity", response_model=CartOut)
def set_cart_quantity(payload: SetQuantityBody,
                      current_user: dict = Depends(get_current_user),
                      engine: CartEngine = Depends(get_cart_engine)):
    cart = engine.set_quantity(current_user["id"], payload.product_id, payload.quantity)
    return _out(engine, cart)


@router.post("/remove", response_model=CartOut)
def remove_cart_item(payload: RemoveItemBody,
                     current_user: dict = Depends(get_current_user),
                     engine: CartEngine = Depends(get_cart_engine)):
    return _out(engine, engine.remove(current_user["id"], payload.product_id))


@router.post("/clear", response_model=CartOut)
def clear_cart(current_user: dict = Depends(get_current_user),
               engine: CartEngine = Depends(get_cart_engine)):
    return _out(engine, engine.clear(current_user["id"]))
