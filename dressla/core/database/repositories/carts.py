"""
Shopping cart repository.

Carts are created lazily on the first add. Items are matched on the
combination that makes a line unique: product, size, rental flag and
rental dates.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.carts import Cart, CartItem
from .base import SQLModelRepository


class CartRepository(SQLModelRepository[Cart]):
    """Repository for carts and cart items."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Cart)

    async def get_for_user(self, user_id: str) -> Optional[Cart]:
        result = await self.session.execute(select(Cart).where(Cart.user_id == user_id))
        return result.scalars().first()

    async def get_or_create(self, user_id: str) -> Cart:
        cart = await self.get_for_user(user_id)
        if cart is None:
            cart = await self.stage(Cart(user_id=user_id))
        return cart

    async def items(self, cart_id: int) -> List[CartItem]:
        stmt = select(CartItem).where(CartItem.cart_id == cart_id).order_by(CartItem.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_matching_item(
        self,
        cart_id: int,
        product_id: int,
        size: Optional[str],
        is_rental: bool,
        rental_start_date: Optional[datetime],
        rental_end_date: Optional[datetime],
    ) -> Optional[CartItem]:
        stmt = select(CartItem).where(
            CartItem.cart_id == cart_id,
            CartItem.product_id == product_id,
            CartItem.size == size,
            CartItem.is_rental == is_rental,
            CartItem.rental_start_date == rental_start_date,
            CartItem.rental_end_date == rental_end_date,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_item(self, item_id: int, user_id: str) -> Optional[CartItem]:
        """Cart item ``item_id`` if it sits in ``user_id``'s cart."""
        stmt = (
            select(CartItem)
            .join(Cart, Cart.id == CartItem.cart_id)  # type: ignore[arg-type]
            .where(CartItem.id == item_id, Cart.user_id == user_id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def add_item(self, item: CartItem) -> CartItem:
        self.session.add(item)
        await self.session.commit()
        await self.session.refresh(item)
        return item

    async def delete_item(self, item: CartItem) -> None:
        await self.session.delete(item)
        await self.session.commit()

    async def clear(self, cart_id: int) -> None:
        """Remove every item. The caller commits."""
        await self.session.execute(delete(CartItem).where(CartItem.cart_id == cart_id))
