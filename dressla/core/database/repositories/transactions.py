"""
Seller transaction ledger repository.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from dressla.core.models.domain.enums import TransactionType

from ..entities.transactions import Transaction
from .base import SQLModelRepository


class TransactionRepository(SQLModelRepository[Transaction]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Transaction)

    async def revenue_for(self, user_id: str) -> float:
        stmt = select(func.coalesce(func.sum(Transaction.total), 0)).where(Transaction.user_id == user_id)
        result = await self.session.execute(stmt)
        return float(result.scalar_one())

    async def exists(self, user_id: str, order_id: int, type_: TransactionType) -> bool:
        stmt = select(Transaction.id).where(
            Transaction.user_id == user_id,
            Transaction.order_id == order_id,
            Transaction.type == type_,
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def list_for_user(self, user_id: str, order_id: Optional[int] = None) -> List[Transaction]:
        stmt = select(Transaction).where(Transaction.user_id == user_id)
        if order_id is not None:
            stmt = stmt.where(Transaction.order_id == order_id)
        result = await self.session.execute(stmt.order_by(Transaction.created_at.desc()))  # type: ignore[attr-defined]
        return list(result.scalars().all())

    async def delete_for_seller_order(self, user_id: str, order_id: int) -> int:
        """Drop ``user_id``'s entries for ``order_id``. The caller commits."""
        result = await self.session.execute(
            delete(Transaction).where(Transaction.user_id == user_id, Transaction.order_id == order_id)
        )
        return result.rowcount or 0

    async def delete_for_order(self, order_id: int) -> None:
        await self.session.execute(delete(Transaction).where(Transaction.order_id == order_id))

    async def delete_for_rental(self, rental_id: int) -> None:
        await self.session.execute(delete(Transaction).where(Transaction.rental_id == rental_id))
