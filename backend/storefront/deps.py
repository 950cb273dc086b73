# storefront/deps.py
"""FastAPI providers wiring the Firestore client into repositories and services."""
from fastapi import Depends

from storefront.config import get_db
from storefront.repositories.carts import CartStore
from storefront.repositories.orders import OrderStore
from storefront.repositories.products import ProductCatalog
from storefront.repositories.reviews import ReviewStore
from storefront.repositories.users import ContactStore, UserStore
from storefront.services.cart_engine import CartEngine
from storefront.services.checkout import CheckoutService


def get_catalog(db=Depends(get_db)) -> ProductCatalog:
    return ProductCatalog(db)


def get_cart_store(db=Depends(get_db)) -> CartStore:
    return CartStore(db)


def get_cart_engine(
    store: CartStore = Depends(get_cart_store),
    catalog: ProductCatalog = Depends(get_catalog),
) -> CartEngine:
    return CartEngine(store, catalog)


def get_review_store(db=Depends(get_db)) -> ReviewStore:
    return ReviewStore(db)


def get_order_store(db=Depends(get_db)) -> OrderStore:
    return OrderStore(db)


def get_user_store(db=Depends(get_db)) -> UserStore:
    return UserStore(db)


def get_contact_store(db=Depends(get_db)) -> ContactStore:
    return ContactStore(db)


def get_checkout_service(
    orders: OrderStore = Depends(get_order_store),
    engine: CartEngine = Depends(get_cart_engine),
) -> CheckoutService:
    return CheckoutService(orders, engine)
