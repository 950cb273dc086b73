# storefront/schemas/review.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    review: str = Field(..., min_length=1, max_length=2000)
    stars: int = Field(..., ge=1, le=5)


class ReviewOut(BaseModel):
    id: str
    name: str
    review: str
    stars: int = Field(ge=1, le=5)
    created_at: Optional[datetime] = None
