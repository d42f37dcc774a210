"""
Multi-criteria catalog filtering, sorting and pagination.

The repository narrows listings with the cheap column filters (category,
gender, purpose, rentability). The criteria that depend on variants, free-text
colours or rental calendars are applied here on the loaded entries.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, Field, field_validator, model_validator

from dressla.core.models.domain.enums import Gender, Purpose
from dressla.core.models.io.common import naive_utc

from .rental_availability import VariantRentalStatus, is_product_available

T = TypeVar("T")

# Colour filter ids mapped to the spellings sellers type into the colour field.
COLOR_ALIASES: dict[str, list[str]] = {
    "black": ["შავი", "black"],
    "white": ["თეთრი", "white"],
    "red": ["წითელი", "red"],
    "blue": ["ლურჯი", "blue"],
    "green": ["მწვანე", "green"],
    "yellow": ["ყვითელი", "yellow"],
    "pink": ["ვარდისფერი", "pink"],
    "purple": ["იისფერი", "purple"],
}


class CatalogSort(str, Enum):
    newest = "newest"
    price_low = "price-low"
    price_high = "price-high"
    rating = "rating"


class CatalogFilter(BaseModel):
    """Shop query. Empty selections mean "no constraint"."""

    category_id: Optional[int] = None
    gender: Optional[Gender] = None
    purpose: Optional[Purpose] = None
    is_rentable: Optional[bool] = None
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    ratings: List[int] = Field(default_factory=list)
    rental_start: Optional[datetime] = None
    rental_end: Optional[datetime] = None
    sort: CatalogSort = CatalogSort.newest
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=12, ge=1, le=100)

    @field_validator("rental_start", "rental_end")
    @classmethod
    def _to_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)

    @model_validator(mode="after")
    def _check_ranges(self) -> "CatalogFilter":
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price must not exceed max_price")
        if self.rental_start and self.rental_end and self.rental_start > self.rental_end:
            raise ValueError("rental_start must not be after rental_end")
        return self


@dataclass
class CatalogEntry:
    """A product with the related rows needed to filter and render it."""

    product: Any
    variants: Sequence[Any] = field(default_factory=list)
    images: Sequence[Any] = field(default_factory=list)
    rental_status: Sequence[VariantRentalStatus] = field(default_factory=list)


def price_bounds(entry: CatalogEntry) -> tuple[float, float]:
    """Lowest and highest variant price, (0, 0) for a product without variants."""
    prices = [variant.price for variant in entry.variants]
    if not prices:
        return 0.0, 0.0
    return min(prices), max(prices)


def matches_price(bounds: tuple[float, float], low: Optional[float], high: Optional[float]) -> bool:
    """Overlap test between the product's price span and the selected range."""
    if low is None and high is None:
        return True
    lo = low if low is not None else 0.0
    hi = high if high is not None else math.inf
    min_price, max_price = bounds
    return lo <= min_price <= hi or lo <= max_price <= hi or (min_price <= lo and max_price >= hi)


def matches_sizes(entry: CatalogEntry, sizes: Sequence[str]) -> bool:
    if not sizes:
        return True
    return any(variant.size in sizes for variant in entry.variants)


def matches_color(product_color: Optional[str], selected: Sequence[str]) -> bool:
    """Case-insensitive substring match against any alias of a selected colour."""
    if not selected:
        return True
    color = (product_color or "").lower()
    for choice in selected:
        variations = COLOR_ALIASES.get(choice, [choice])
        if any(variation.lower() in color for variation in variations):
            return True
    return False


def matches_location(product_location: Optional[str], locations: Sequence[str]) -> bool:
    if not locations:
        return True
    return (product_location or "") in locations


def matches_rating(rating: Optional[float], ratings: Sequence[int]) -> bool:
    if not ratings:
        return True
    return math.floor(rating or 0) in ratings


def matches_rental_dates(entry: CatalogEntry, start: Optional[datetime], end: Optional[datetime]) -> bool:
    """Only rentable products with both dates selected are checked."""
    if not start or not end or not entry.product.is_rentable:
        return True
    return is_product_available(start, end, entry.rental_status)


def matches(entry: CatalogEntry, query: CatalogFilter) -> bool:
    product = entry.product
    return (
        matches_price(price_bounds(entry), query.min_price, query.max_price)
        and matches_sizes(entry, query.sizes)
        and matches_color(product.color, query.colors)
        and matches_location(product.location, query.locations)
        and matches_rating(product.rating, query.ratings)
        and matches_rental_dates(entry, query.rental_start, query.rental_end)
    )


def filter_entries(entries: Sequence[CatalogEntry], query: CatalogFilter) -> list[CatalogEntry]:
    return [entry for entry in entries if matches(entry, query)]


def sort_entries(entries: Sequence[CatalogEntry], sort: CatalogSort) -> list[CatalogEntry]:
    """Order entries for display.

    ``newest`` puts listings flagged as new first and then the most recently
    created. Price sorts use the cheapest variant ascending and the most
    expensive variant descending.
    """
    if sort == CatalogSort.price_low:
        return sorted(entries, key=lambda entry: price_bounds(entry)[0])
    if sort == CatalogSort.price_high:
        return sorted(entries, key=lambda entry: price_bounds(entry)[1], reverse=True)
    if sort == CatalogSort.rating:
        return sorted(entries, key=lambda entry: entry.product.rating or 0, reverse=True)
    by_date = sorted(entries, key=lambda entry: entry.product.created_at, reverse=True)
    return sorted(by_date, key=lambda entry: not entry.product.is_new)


def paginate(items: Sequence[T], page: int, limit: int) -> tuple[list[T], int, int]:
    """Slice ``items`` for ``page`` (1-based).

    Returns:
        (page_items, total, pages)
    """
    total = len(items)
    pages = math.ceil(total / limit) if total else 0
    start = (page - 1) * limit
    return list(items[start : start + limit]), total, pages
