"""
Rental repository.

Besides rental records, this repository collects the date ranges that keep a
variant busy. Those come from two places: RESERVED or ACTIVE rentals, and
rental lines of orders that are still PENDING, PAID or SHIPPED.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from dressla.core.models.domain.enums import (
    BLOCKING_ORDER_STATUSES,
    BLOCKING_RENTAL_STATUSES,
    OrderStatus,
    RentalStatus,
)
from dressla.marketplace.rental_availability import RentalPeriod

from ..entities.catalog import ProductVariant
from ..entities.orders import Order, OrderItem
from ..entities.rentals import Rental
from .base import QueryBuilder, SQLModelRepository

# product_id -> [(size, period)]
PeriodsByProduct = Dict[int, List[Tuple[Optional[str], RentalPeriod]]]


class RentalRepository(SQLModelRepository[Rental]):
    """Repository for rentals and the periods that block product variants."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Rental)

    async def for_variant(self, variant_id: int, exclude_rental_id: Optional[int] = None) -> List[Rental]:
        stmt = select(Rental).where(
            Rental.variant_id == variant_id,
            Rental.status.in_(BLOCKING_RENTAL_STATUSES),  # type: ignore[attr-defined]
        )
        if exclude_rental_id is not None:
            stmt = stmt.where(Rental.id != exclude_rental_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_user(
        self,
        user_id: str,
        status: Optional[RentalStatus] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Rental], int]:
        """One page of ``user_id``'s rentals, newest first, and the total count."""
        filters = {"user_id": user_id, "status": status}
        stmt = select(Rental).order_by(Rental.created_at.desc())  # type: ignore[attr-defined]
        stmt = QueryBuilder.apply_filters(stmt, Rental, filters)
        stmt = QueryBuilder.apply_pagination(stmt, limit, QueryBuilder.page_offset(page, limit))
        result = await self.session.execute(stmt)
        total = await self.count(filters)
        return list(result.scalars().all()), total

    async def product_has_rentals(self, product_id: int) -> bool:
        result = await self.session.execute(select(Rental.id).where(Rental.product_id == product_id))
        return result.first() is not None

    async def user_has_rental(self, user_id: str, product_id: int) -> bool:
        """Any rental of ``product_id`` by ``user_id`` that was not canceled."""
        stmt = select(Rental.id).where(
            Rental.user_id == user_id,
            Rental.product_id == product_id,
            Rental.status != RentalStatus.CANCELED,
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def user_has_rental_order(self, user_id: str, product_id: int) -> bool:
        """A rental order line for ``product_id`` on a live order of ``user_id``."""
        stmt = (
            select(OrderItem.id)
            .join(Order, Order.id == OrderItem.order_id)  # type: ignore[arg-type]
            .where(
                Order.user_id == user_id,
                OrderItem.product_id == product_id,
                OrderItem.is_rental == True,  # noqa: E712
                Order.status.notin_((OrderStatus.CANCELED, OrderStatus.REFUNDED)),  # type: ignore[attr-defined]
            )
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def active_periods(
        self,
        product_ids: Sequence[int],
        not_ended_before: Optional[datetime] = None,
    ) -> PeriodsByProduct:
        """Blocking periods per product, each with the size it holds.

        Args:
            product_ids: Products to collect periods for
            not_ended_before: When given, periods that ended before this moment are skipped
        """
        grouped: PeriodsByProduct = defaultdict(list)
        if not product_ids:
            return grouped
        ids = list(product_ids)
        variant_sizes = await self._variant_sizes(ids)

        rental_stmt = select(Rental).where(
            Rental.product_id.in_(ids),  # type: ignore[attr-defined]
            Rental.status.in_(BLOCKING_RENTAL_STATUSES),  # type: ignore[attr-defined]
        )
        if not_ended_before is not None:
            rental_stmt = rental_stmt.where(Rental.end_date >= not_ended_before)
        for rental in (await self.session.execute(rental_stmt)).scalars().all():
            size = variant_sizes.get(rental.variant_id) if rental.variant_id is not None else None
            period = RentalPeriod(rental.start_date, rental.end_date, rental.status.value, "rental")
            grouped[rental.product_id].append((size, period))

        order_stmt = (
            select(OrderItem, Order.status)
            .join(Order, Order.id == OrderItem.order_id)  # type: ignore[arg-type]
            .where(
                OrderItem.product_id.in_(ids),  # type: ignore[union-attr]
                OrderItem.is_rental == True,  # noqa: E712
                OrderItem.rental_start_date.is_not(None),  # type: ignore[union-attr]
                OrderItem.rental_end_date.is_not(None),  # type: ignore[union-attr]
                Order.status.in_(BLOCKING_ORDER_STATUSES),  # type: ignore[attr-defined]
            )
        )
        if not_ended_before is not None:
            order_stmt = order_stmt.where(OrderItem.rental_end_date >= not_ended_before)  # type: ignore[operator]
        for item, order_status in (await self.session.execute(order_stmt)).all():
            period = RentalPeriod(item.rental_start_date, item.rental_end_date, order_status.value, "order")
            grouped[item.product_id].append((item.size, period))
        return grouped

    async def _variant_sizes(self, product_ids: List[int]) -> Dict[int, Optional[str]]:
        stmt = select(ProductVariant.id, ProductVariant.size).where(
            ProductVariant.product_id.in_(product_ids)  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return {variant_id: size for variant_id, size in result.all()}
