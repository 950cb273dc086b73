"""
storefront/routers/products.py - Catalog endpoints.

### `GET /products`
Lists products, newest first. `?category=men|women|kids` filters; any other
value is ignored and the full list is returned.

### `GET /products/category/{category}`
Same list for one category; 400 for an unknown category.

### `GET /products/{product_id}`
`{product, reviews}`; 400 for a malformed id, 404 when it does not exist.

### Admin (`/admin/products`)
Create, partial update and delete (`?hard=true` removes the document,
otherwise the product is flagged `is_deleted`).
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from storefront.core.security import get_current_admin
from storefront.deps import get_catalog, get_review_store
from storefront.model.product import CATEGORIES, is_valid_product_id
from storefront.repositories.products import ProductCatalog
from storefront.repositories.reviews import ReviewStore
from storefront.schemas.product import ProductCreate, ProductDetailOut, ProductOut, ProductUpdate

router = APIRouter(prefix="/products", tags=["Products"])


def _check_id(product_id: str) -> None:
    if not is_valid_product_id(product_id):
        raise HTTPException(status_code=400, detail="Invalid product ID format")


@router.get("", response_model=List[ProductOut], summary="List Products")
def list_products(
    category: Optional[str] = Query(None, description="men | women | kids (optional)"),
    catalog: ProductCatalog = Depends(get_catalog),
):
    cat = (category or "").lower()
    products = catalog.list(category=cat if cat in CATEGORIES else None)
    return [ProductOut.from_product(p) for p in products]


@router.get("/category/{category}", response_model=List[ProductOut], summary="List Products by Category")
def list_products_by_category(category: str, catalog: ProductCatalog = Depends(get_catalog)):
    cat = category.lower()
    if cat not in CATEGORIES:
        raise HTTPException(status_code=400, detail="Invalid category provided")
    return [ProductOut.from_product(p) for p in catalog.list(category=cat)]


@router.get("/{product_id}", response_model=ProductDetailOut, summary="Get Product")
def get_product(
    product_id: str,
    catalog: ProductCatalog = Depends(get_catalog),
    reviews: ReviewStore = Depends(get_review_store),
):
    _check_id(product_id)
    product = catalog.get_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return ProductDetailOut(
        product=ProductOut.from_product(product),
        reviews=reviews.list_for_product(product_id),
    )


# Admin sub-router for product management
admin_router = APIRouter(prefix="/products", tags=["Admin: Products"],
                         dependencies=[Depends(get_current_admin)])


@admin_router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED, summary="Create Product")
def create_product(product_in: ProductCreate, catalog: ProductCatalog = Depends(get_catalog)):
    return ProductOut.from_product(catalog.create(product_in.model_dump()))


@admin_router.put("/{product_id}", response_model=ProductOut, summary="Update Product")
def update_product(product_id: str, product_in: ProductUpdate,
                   catalog: ProductCatalog = Depends(get_catalog)):
    """Only the fields sent are changed. Prices already snapshotted in carts are not touched."""
    _check_id(product_id)
    updated = catalog.update(product_id, product_in.model_dump(exclude_unset=True, exclude_none=True))
    if updated is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return ProductOut.from_product(updated)


@admin_router.delete("/{product_id}", summary="Delete Product")
def delete_product(product_id: str, hard: bool = False, catalog: ProductCatalog = Depends(get_catalog)):
    _check_id(product_id)
    if not catalog.delete(product_id, hard=hard):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"detail": "Product hard-deleted" if hard else "Product deleted"}
