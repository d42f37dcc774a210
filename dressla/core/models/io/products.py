"""
Product I/O models for catalog endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dressla.core.models.domain.enums import (
    ApprovalStatus,
    Gender,
    ProductStatus,
    Purpose,
    SizeSystem,
)

from .common import Pagination


class CategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    description: Optional[str] = None


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None


class ProductImageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    url: str
    alt: Optional[str] = None
    position: int


class ProductImageInput(BaseModel):
    url: str = Field(min_length=1)
    alt: Optional[str] = None


class ProductVariantRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    size: Optional[str] = None
    price: float
    stock: int
    sku: Optional[str] = None


class ProductVariantInput(BaseModel):
    size: str = Field(min_length=1)
    price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    sku: Optional[str] = None


class RentalPriceTierRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    min_days: int
    price_per_day: float


class RentalPriceTierInput(BaseModel):
    min_days: int = Field(ge=1)
    price_per_day: float = Field(gt=0)


class RentalPriceTiersUpdate(BaseModel):
    tiers: List[RentalPriceTierInput] = Field(min_length=1)

    @field_validator("tiers")
    @classmethod
    def _unique_min_days(cls, tiers: List[RentalPriceTierInput]) -> List[RentalPriceTierInput]:
        if len({tier.min_days for tier in tiers}) != len(tiers):
            raise ValueError("Each tier must have a distinct min_days")
        return tiers


class ProductBase(BaseModel):
    name: str = Field(min_length=1)
    brand: Optional[str] = None
    description: Optional[str] = None
    stock: int = Field(default=0, ge=0)
    gender: Gender = Gender.UNISEX
    color: Optional[str] = None
    location: Optional[str] = None
    size_system: Optional[SizeSystem] = None
    size: Optional[str] = None
    purpose: Optional[Purpose] = None
    is_new: bool = False
    discount: Optional[float] = Field(default=None, ge=0)
    discount_days: Optional[int] = Field(default=None, ge=1)
    category_id: Optional[int] = None
    is_rentable: bool = False
    price_per_day: Optional[float] = Field(default=None, ge=0)
    max_rental_days: Optional[int] = Field(default=None, ge=1)
    deposit: Optional[float] = Field(default=None, ge=0)


class ProductCreate(ProductBase):
    slug: Optional[str] = Field(default=None, description="Defaults to the product name")
    images: List[ProductImageInput] = Field(default_factory=list)
    variants: List[ProductVariantInput] = Field(default_factory=list)
    rental_price_tiers: List[RentalPriceTierInput] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    """Partial update. ``images``, ``variants`` and tiers replace the stored lists when given."""

    name: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = None
    brand: Optional[str] = None
    description: Optional[str] = None
    stock: Optional[int] = Field(default=None, ge=0)
    gender: Optional[Gender] = None
    color: Optional[str] = None
    location: Optional[str] = None
    size_system: Optional[SizeSystem] = None
    size: Optional[str] = None
    purpose: Optional[Purpose] = None
    is_new: Optional[bool] = None
    discount: Optional[float] = Field(default=None, ge=0)
    discount_days: Optional[int] = Field(default=None, ge=1)
    category_id: Optional[int] = None
    is_rentable: Optional[bool] = None
    price_per_day: Optional[float] = Field(default=None, ge=0)
    max_rental_days: Optional[int] = Field(default=None, ge=1)
    deposit: Optional[float] = Field(default=None, ge=0)
    status: Optional[ProductStatus] = None
    images: Optional[List[ProductImageInput]] = None
    variants: Optional[List[ProductVariantInput]] = None
    rental_price_tiers: Optional[List[RentalPriceTierInput]] = None


class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    brand: Optional[str] = None
    description: Optional[str] = None
    sku: Optional[str] = None
    stock: int
    gender: Gender
    color: Optional[str] = None
    location: Optional[str] = None
    size_system: Optional[SizeSystem] = None
    size: Optional[str] = None
    purpose: Optional[Purpose] = None
    is_new: bool
    discount: Optional[float] = None
    discount_days: Optional[int] = None
    discount_start_date: Optional[datetime] = None
    rating: float
    category_id: Optional[int] = None
    user_id: Optional[str] = None
    is_rentable: bool
    price_per_day: Optional[float] = None
    max_rental_days: Optional[int] = None
    deposit: Optional[float] = None
    status: ProductStatus
    approval_status: ApprovalStatus
    rejection_reason: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ProductDetail(ProductRead):
    images: List[ProductImageRead] = Field(default_factory=list)
    variants: List[ProductVariantRead] = Field(default_factory=list)
    rental_price_tiers: List[RentalPriceTierRead] = Field(default_factory=list)


class ProductList(BaseModel):
    products: List[ProductDetail]
    pagination: Pagination


class RentalQuoteRead(BaseModel):
    days: int
    price_per_day: float
    total_price: float
    tier: dict
    note: str


class RentalPeriodRead(BaseModel):
    start_date: datetime
    end_date: datetime
    status: str
    source: str


class VariantRentalStatusRead(BaseModel):
    variant_id: Optional[int] = None
    size: str
    stock: int
    active_rentals: List[RentalPeriodRead]
    is_available: bool


class ProductRentalStatus(BaseModel):
    product_id: int
    is_rentable: bool
    variants: List[VariantRentalStatusRead]


class ApprovalUpdate(BaseModel):
    status: ApprovalStatus
    rejection_reason: Optional[str] = None


class AuthorProducts(BaseModel):
    user: dict
    products: List[ProductDetail]
