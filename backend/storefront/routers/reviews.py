# storefront/routers/reviews.py - product reviews (open to guests; user id recorded when logged in)

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.core.security import get_optional_user
from storefront.deps import get_catalog, get_review_store
from storefront.model.product import is_valid_product_id
from storefront.repositories.products import ProductCatalog
from storefront.repositories.reviews import ReviewStore
from storefront.schemas.review import ReviewCreate, ReviewOut

router = APIRouter(prefix="/products", tags=["Reviews"])


def _check_id(product_id: str) -> None:
    if not is_valid_product_id(product_id):
        raise HTTPException(status_code=400, detail="Invalid product id")


@router.get("/{product_id}/reviews", response_model=List[ReviewOut], summary="List product reviews")
def list_reviews(product_id: str, reviews: ReviewStore = Depends(get_review_store)):
    _check_id(product_id)
    return reviews.list_for_product(product_id)


@router.post("/{product_id}/reviews", response_model=ReviewOut,
             status_code=status.HTTP_201_CREATED, summary="Submit a review")
def create_review(
    product_id: str,
    body: ReviewCreate,
    current_user: Optional[dict] = Depends(get_optional_user),
    catalog: ProductCatalog = Depends(get_catalog),
    reviews: ReviewStore = Depends(get_review_store),
):
    _check_id(product_id)
    if catalog.get_by_id(product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return reviews.create(
        product_id=product_id,
        name=body.name.strip(),
        review=body.review.strip(),
        stars=body.stars,
        user_id=current_user["id"] if current_user else None,
    )
