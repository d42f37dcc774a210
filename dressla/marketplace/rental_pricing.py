"""Tiered rental pricing.

A product may define several daily prices, each applying from a minimum
rental length. Longer rentals qualify for cheaper tiers, e.g.::

    4+ days  -> 20 GEL/day
    7+ days  -> 12 GEL/day
    28+ days ->  8 GEL/day
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Sequence


@dataclass(frozen=True)
class RentalQuote:
    days: int
    price_per_day: float
    total_price: float
    tier_min_days: int
    note: str

    def as_dict(self) -> dict:
        return {
            "days": self.days,
            "price_per_day": self.price_per_day,
            "total_price": self.total_price,
            "tier": {"min_days": self.tier_min_days, "price_per_day": self.price_per_day},
            "note": self.note,
        }


def rental_days(start: datetime, end: datetime) -> int:
    """Number of calendar days covered by the inclusive range ``start..end``."""
    return (end.date() - start.date()).days + 1


def calculate_rental_price(tiers: Sequence[Any], days: int) -> RentalQuote:
    """Price a rental of ``days`` days against the product's tiers.

    Picks the tier with the highest ``min_days`` not above ``days``. When the
    rental is shorter than every tier, the lowest tier is used anyway.

    Raises:
        ValueError: ``days`` is below 1 or there are no tiers.
    """
    if days < 1:
        raise ValueError("Rental must last at least one day")
    if not tiers:
        raise ValueError("No rental price tiers defined")

    ordered = sorted(tiers, key=lambda tier: tier.min_days, reverse=True)
    applicable = next((tier for tier in ordered if days >= tier.min_days), None)
    if applicable is None:
        lowest = ordered[-1]
        return RentalQuote(
            days=days,
            price_per_day=lowest.price_per_day,
            total_price=days * lowest.price_per_day,
            tier_min_days=lowest.min_days,
            note=f"Using minimum tier ({lowest.min_days}+ days)",
        )
    return RentalQuote(
        days=days,
        price_per_day=applicable.price_per_day,
        total_price=days * applicable.price_per_day,
        tier_min_days=applicable.min_days,
        note=f"{days} days qualifies for {applicable.min_days}+ day tier",
    )


def quote_rental(tiers: Sequence[Any], price_per_day: float | None, days: int) -> float:
    """Total rental price, from tiers when defined, else the flat daily price."""
    if tiers:
        return calculate_rental_price(tiers, days).total_price
    return days * (price_per_day or 0.0)
