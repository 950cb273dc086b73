from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.core.security import get_current_user
from storefront.deps import get_checkout_service, get_order_store
from storefront.repositories.orders import OrderStore
from storefront.schemas.order import OrderCreate, OrderCreatedOut, OrderOut
from storefront.services.checkout import CheckoutService

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("", response_model=OrderCreatedOut, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreate,
    current_user: dict = Depends(get_current_user),
    checkout: CheckoutService = Depends(get_checkout_service),
):
    """
    ONE CHECKOUT → ONE ORDER
    - Lines are snapshotted from the server cart; the cart is cleared afterwards.
    - Calling again with the same checkout_id returns the existing order.
    """
    order = checkout.place_order(current_user, payload)
    return OrderCreatedOut(order_id=order["id"], order=order)


@router.get("/my", response_model=Dict[str, List[OrderOut]])
def list_my_orders(current_user: dict = Depends(get_current_user),
                   orders: OrderStore = Depends(get_order_store)):
    return {"orders": orders.list_for_user(current_user["id"])}


@router.get("/{order_id}", response_model=Dict[str, OrderOut])
def get_order(order_id: str,
              current_user: dict = Depends(get_current_user),
              orders: OrderStore = Depends(get_order_store)):
    order = orders.get(order_id)
    # someone else's order is reported exactly like a missing one
    if not order or (order.get("customer") or {}).get("id") != current_user["id"]:
        raise HTTPException(status_code=404, detail="Order not found")
    return {"order": order}
