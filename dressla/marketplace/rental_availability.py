"""
Rental availability checks.

Two overlap rules are used:

- Reservations (creating or moving a rental) conflict when the inclusive date
  ranges intersect. This guards against double booking a variant.
- Catalog availability (shop date filter) additionally keeps a period blocked
  for one day after it ends, leaving time to return and clean the item.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional, Sequence

from dressla.core.models.domain.enums import BLOCKING_RENTAL_STATUSES

RETURN_BUFFER = timedelta(days=1)
UNKNOWN_SIZE = "UNKNOWN"


@dataclass(frozen=True)
class RentalPeriod:
    """Date range holding a variant, from a rental or a rental order item."""

    start_date: datetime
    end_date: datetime
    status: str
    source: str = "rental"

    def as_dict(self) -> dict:
        return {
            "start_date": self.start_date,
            "end_date": self.end_date,
            "status": self.status,
            "source": self.source,
        }


@dataclass
class VariantRentalStatus:
    variant_id: Optional[int]
    size: str
    stock: int
    active_rentals: list[RentalPeriod] = field(default_factory=list)

    @property
    def is_available(self) -> bool:
        return not self.active_rentals

    def as_dict(self) -> dict:
        return {
            "variant_id": self.variant_id,
            "size": self.size,
            "stock": self.stock,
            "active_rentals": [period.as_dict() for period in self.active_rentals],
            "is_available": self.is_available,
        }


def periods_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Inclusive range intersection."""
    return a_start <= b_end and b_start <= a_end


def has_rental_conflict(start: datetime, end: datetime, rentals: Iterable[Any]) -> bool:
    """True when any RESERVED or ACTIVE rental intersects ``start..end``."""
    return any(
        rental.status in BLOCKING_RENTAL_STATUSES and periods_overlap(start, end, rental.start_date, rental.end_date)
        for rental in rentals
    )


def is_period_blocked(start: datetime, end: datetime, period: Any) -> bool:
    """Shop-side check with the return buffer after ``period`` ends."""
    last_blocked = period.end_date + RETURN_BUFFER
    return start < last_blocked and end >= period.start_date


def is_variant_available(start: datetime, end: datetime, active_rentals: Iterable[Any]) -> bool:
    return not any(is_period_blocked(start, end, period) for period in active_rentals)


def is_product_available(start: datetime, end: datetime, variants: Sequence[VariantRentalStatus]) -> bool:
    """A product is available when any of its variants is free for the whole range."""
    if not variants:
        return True
    return any(is_variant_available(start, end, variant.active_rentals) for variant in variants)


def group_active_rentals_by_variant(
    variants: Sequence[Any],
    periods_by_size: dict[str, list[RentalPeriod]],
) -> list[VariantRentalStatus]:
    """Attach active rental periods to each variant by size.

    Periods are keyed by size because rental order items only remember the size
    they were bought in. Periods whose size matches no variant are reported on a
    synthetic ``UNKNOWN`` entry so they are not silently dropped.
    """
    statuses: list[VariantRentalStatus] = []
    matched: set[str] = set()
    for variant in variants:
        size = variant.size or UNKNOWN_SIZE
        matched.add(size)
        statuses.append(
            VariantRentalStatus(
                variant_id=variant.id,
                size=size,
                stock=variant.stock,
                active_rentals=list(periods_by_size.get(size, [])),
            )
        )
    for size, periods in periods_by_size.items():
        if size not in matched and periods:
            statuses.append(VariantRentalStatus(variant_id=None, size=size, stock=0, active_rentals=list(periods)))
    return statuses


def index_periods_by_size(entries: Iterable[tuple[Optional[str], RentalPeriod]]) -> dict[str, list[RentalPeriod]]:
    grouped: dict[str, list[RentalPeriod]] = {}
    for size, period in entries:
        grouped.setdefault(size or UNKNOWN_SIZE, []).append(period)
    return grouped
