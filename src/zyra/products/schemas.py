"""Pydantic schemas for product endpoints."""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import Field, field_validator

from zyra.common.schemas import CamelModel

# Whole-number digits allowed in a price; keeps quantize inside the default context.
MAX_PRICE_DIGITS = 10


def _normalize_price(value):
    if value is None:
        return value
    try:
        price = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError("Price must be a number") from None
    if not price.is_finite():
        raise ValueError("Price must be a number")
    if price < 0:
        raise ValueError("Price must be 0 or greater")
    if price.adjusted() >= MAX_PRICE_DIGITS:
        raise ValueError("Price is too large")
    return str(price.quantize(Decimal("0.01")))


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: str
    category: str = Field(..., min_length=1, max_length=255)
    stock: int = Field(default=0, ge=0)
    description: Optional[str] = None
    original_description: Optional[str] = None
    image: Optional[str] = None
    features: Optional[str] = None
    tags: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def check_price(cls, v):
        return _normalize_price(v)


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=255)
    stock: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    original_description: Optional[str] = None
    image: Optional[str] = None
    features: Optional[str] = None
    tags: Optional[str] = None
    is_optimized: Optional[bool] = None

    @field_validator("price", mode="before")
    @classmethod
    def check_price(cls, v):
        return _normalize_price(v)


class ProductOut(CamelModel):
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    original_description: Optional[str] = None
    price: str
    category: str
    stock: int
    image: Optional[str] = None
    features: Optional[str] = None
    tags: Optional[str] = None
    is_optimized: bool
    created_at: datetime
    updated_at: datetime


class OptimizeDetail(CamelModel):
    product_id: str
    name: str
    action: str
    duplicate_of: Optional[str] = None


class OptimizeAllResponse(CamelModel):
    success: bool = True
    optimized_count: int
    duplicates_removed: int
    details: list[OptimizeDetail] = Field(default_factory=list)
