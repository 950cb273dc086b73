"""
storefront/schemas/product.py - Product schemas.

| Field       | Type    | Notes |
|-------------|---------|-------|
| name        | `str`   | required |
| description | `str`   | optional |
| price       | `float` | >= 0 |
| category    | `str`   | men / women / kids |
| image       | `str`   | URL, optional |
| stock       | `int`   | >= 0 |
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from storefront.model.product import Product
from storefront.schemas.review import ReviewOut

Category = Literal["men", "women", "kids"]


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Product name")
    description: str = Field('', description="Detailed description of the product")
    price: float = Field(..., ge=0, description="Unit price")
    category: Category
    image: str = ''
    stock: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    """Admin update; every field optional."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[Category] = None
    image: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)


class ProductOut(BaseModel):
    id: str
    name: str
    description: str = ''
    price: float
    category: str = ''
    image: str = ''
    stock: int = 0
    created_at: Optional[datetime] = None

    @classmethod
    def from_product(cls, p: Product) -> "ProductOut":
        return cls(
            id=p.id, name=p.name, description=p.description, price=float(p.price),
            category=p.category, image=p.image, stock=p.stock, created_at=p.created_at,
        )


class ProductDetailOut(BaseModel):
    product: ProductOut
    reviews: List[ReviewOut] = Field(default_factory=list)
