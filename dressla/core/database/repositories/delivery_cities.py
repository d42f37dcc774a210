"""
Delivery city repository.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.delivery_cities import DeliveryCity
from .base import SQLModelRepository


class DeliveryCityRepository(SQLModelRepository[DeliveryCity]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, DeliveryCity)

    async def list_cities(self, include_inactive: bool = False) -> List[DeliveryCity]:
        stmt = select(DeliveryCity).order_by(DeliveryCity.name)
        if not include_inactive:
            stmt = stmt.where(DeliveryCity.is_active == True)  # noqa: E712
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def name_taken(self, name: str, exclude_city_id: Optional[int] = None) -> bool:
        stmt = select(DeliveryCity.id).where(func.lower(DeliveryCity.name) == name.strip().lower())
        if exclude_city_id is not None:
            stmt = stmt.where(DeliveryCity.id != exclude_city_id)
        result = await self.session.execute(stmt)
        return result.first() is not None
