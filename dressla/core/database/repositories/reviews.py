"""
Product review repository.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.reviews import Review, ReviewReply
from ..entities.users import User
from .base import SQLModelRepository


class ReviewRepository(SQLModelRepository[Review]):
    """Repository for reviews and their staff replies."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Review)

    async def list_for_product(self, product_id: int) -> List[tuple[Review, Optional[str]]]:
        """Reviews of ``product_id``, newest first, with the reviewer's name."""
        stmt = (
            select(Review, User.name)
            .join(User, User.id == Review.user_id, isouter=True)  # type: ignore[arg-type]
            .where(Review.product_id == product_id)
            .order_by(Review.created_at.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return [(review, name) for review, name in result.all()]

    async def average(self, product_id: int) -> float:
        stmt = select(func.avg(Review.rating)).where(Review.product_id == product_id)
        result = await self.session.execute(stmt)
        value = result.scalar_one_or_none()
        return float(value) if value is not None else 0.0

    async def user_reviewed(self, user_id: str, product_id: int) -> bool:
        stmt = select(Review.id).where(Review.user_id == user_id, Review.product_id == product_id)
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def replies_for(self, review_ids: Sequence[int]) -> Dict[int, ReviewReply]:
        if not review_ids:
            return {}
        stmt = select(ReviewReply).where(ReviewReply.review_id.in_(list(review_ids)))  # type: ignore[attr-defined]
        result = await self.session.execute(stmt)
        return {reply.review_id: reply for reply in result.scalars().all()}

    async def get_reply(self, review_id: int) -> Optional[ReviewReply]:
        result = await self.session.execute(select(ReviewReply).where(ReviewReply.review_id == review_id))
        return result.scalars().first()

    async def save_reply(self, reply: ReviewReply) -> ReviewReply:
        self.session.add(reply)
        await self.session.commit()
        await self.session.refresh(reply)
        return reply

    async def delete_reply(self, reply: ReviewReply) -> None:
        await self.session.delete(reply)
        await self.session.commit()
