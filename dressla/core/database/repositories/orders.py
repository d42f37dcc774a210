"""
Order repository.

Data access for checkout orders and their item snapshots.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from dressla.core.models.domain.enums import OrderStatus

from ..entities.catalog import Product
from ..entities.orders import Order, OrderItem
from .base import QueryBuilder, SQLModelRepository


class OrderRepository(SQLModelRepository[Order]):
    """Repository for orders and order items."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Order)

    async def stage_with_items(self, order: Order, items: Sequence[OrderItem]) -> Order:
        """Flush ``order`` and its items without committing."""
        await self.stage(order)
        for item in items:
            item.order_id = order.id  # type: ignore[assignment]
            self.session.add(item)
        await self.session.flush()
        return order

    async def items_for(self, order_ids: Sequence[int]) -> Dict[int, List[OrderItem]]:
        grouped: Dict[int, List[OrderItem]] = defaultdict(list)
        if not order_ids:
            return grouped
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id.in_(list(order_ids)))  # type: ignore[attr-defined]
            .order_by(OrderItem.id)
        )
        for item in (await self.session.execute(stmt)).scalars().all():
            grouped[item.order_id].append(item)
        return grouped

    async def list_for_user(self, user_id: str) -> List[Order]:
        stmt = select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc())  # type: ignore[attr-defined]
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_all(
        self, status: Optional[OrderStatus] = None, page: int = 1, limit: Optional[int] = None
    ) -> List[Order]:
        stmt = select(Order).order_by(Order.created_at.desc())  # type: ignore[attr-defined]
        if status is not None:
            stmt = stmt.where(Order.status == status)
        if limit is not None:
            stmt = QueryBuilder.apply_pagination(stmt, limit, QueryBuilder.page_offset(page, limit))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_payment_id(self, payment_id: str) -> Optional[Order]:
        result = await self.session.execute(select(Order).where(Order.payment_id == payment_id))
        return result.scalars().first()

    async def orders_with_seller_products(self, seller_id: str) -> List[Order]:
        """Orders containing at least one product listed by ``seller_id``."""
        seller_items = (
            select(OrderItem.order_id)
            .join(Product, Product.id == OrderItem.product_id)  # type: ignore[arg-type]
            .where(Product.user_id == seller_id)
        )
        stmt = (
            select(Order)
            .where(Order.id.in_(seller_items))  # type: ignore[union-attr]
            .order_by(Order.created_at.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def revenue_sum(self, status: OrderStatus = OrderStatus.PAID) -> float:
        stmt = select(func.coalesce(func.sum(Order.total), 0)).where(Order.status == status)
        result = await self.session.execute(stmt)
        return float(result.scalar_one())

    async def delete_with_items(self, order: Order) -> None:
        """Delete ``order`` and its items. The caller commits."""
        await self.session.execute(delete(OrderItem).where(OrderItem.order_id == order.id))
        await self.session.delete(order)
