"""
Chat repository.

Data access for support and product chat rooms and their messages.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from dressla.core.models.domain.enums import ChatStatus, Role

from ..entities.chat import ChatMessage, ChatRoom
from ..entities.users import User
from .base import QueryBuilder, SQLModelRepository

OPEN_STATUSES = (ChatStatus.PENDING, ChatStatus.ACTIVE)


class ChatRepository(SQLModelRepository[ChatRoom]):
    """Repository for chat rooms and messages."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ChatRoom)

    async def open_support_room(self, user_id: str) -> Optional[ChatRoom]:
        """Most recent PENDING or ACTIVE support room of ``user_id``."""
        stmt = (
            select(ChatRoom)
            .where(
                ChatRoom.user_id == user_id,
                ChatRoom.product_id.is_(None),  # type: ignore[union-attr]
                ChatRoom.status.in_(OPEN_STATUSES),  # type: ignore[attr-defined]
            )
            .order_by(ChatRoom.updated_at.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def product_room(self, user_id: str, product_id: int, seller_id: str) -> Optional[ChatRoom]:
        stmt = select(ChatRoom).where(
            ChatRoom.user_id == user_id,
            ChatRoom.product_id == product_id,
            ChatRoom.admin_id == seller_id,
            ChatRoom.status.in_(OPEN_STATUSES),  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def rooms_for_user(self, user_id: str) -> List[ChatRoom]:
        """Rooms the user opened or, as a seller, is answering."""
        stmt = (
            select(ChatRoom)
            .where(or_(ChatRoom.user_id == user_id, ChatRoom.admin_id == user_id))
            .order_by(ChatRoom.updated_at.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def messages(self, room_id: int) -> List[ChatMessage]:
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.room_id == room_id)
            .order_by(ChatMessage.created_at, ChatMessage.id)  # type: ignore[arg-type]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def last_messages(self, room_ids: List[int]) -> dict[int, ChatMessage]:
        latest: dict[int, ChatMessage] = {}
        if not room_ids:
            return latest
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.room_id.in_(room_ids))  # type: ignore[attr-defined]
            .order_by(ChatMessage.created_at, ChatMessage.id)
        )
        for message in (await self.session.execute(stmt)).scalars().all():
            latest[message.room_id] = message
        return latest

    async def add_message(self, message: ChatMessage) -> ChatMessage:
        """Stage ``message``. The caller commits."""
        self.session.add(message)
        await self.session.flush()
        return message

    async def mark_read(self, room_id: int, from_admin: bool) -> None:
        """Mark the messages sent by the other side of the room as read."""
        await self.session.execute(
            update(ChatMessage)
            .where(ChatMessage.room_id == room_id, ChatMessage.is_from_admin == from_admin)
            .values(is_read=True)
        )

    async def admin_rooms(
        self,
        status: Optional[ChatStatus] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[ChatRoom], int]:
        """Support rooms: unassigned or assigned to an ADMIN account.

        Product chats, answered by sellers, are excluded.
        """
        admin_ids = select(User.id).where(User.role == Role.ADMIN)
        condition = or_(ChatRoom.admin_id.is_(None), ChatRoom.admin_id.in_(admin_ids))  # type: ignore[union-attr]
        stmt = select(ChatRoom).where(condition)
        count_stmt = select(func.count()).select_from(ChatRoom).where(condition)
        if status is not None:
            stmt = stmt.where(ChatRoom.status == status)
            count_stmt = count_stmt.where(ChatRoom.status == status)
        stmt = stmt.order_by(ChatRoom.updated_at.desc())  # type: ignore[attr-defined]
        stmt = QueryBuilder.apply_pagination(stmt, limit, QueryBuilder.page_offset(page, limit))
        rooms = list((await self.session.execute(stmt)).scalars().all())
        total = int((await self.session.execute(count_stmt)).scalar_one())
        return rooms, total

    async def unread_for_admin(self) -> int:
        stmt = select(func.count()).select_from(ChatMessage).where(
            ChatMessage.is_from_admin == False,  # noqa: E712
            ChatMessage.is_read == False,  # noqa: E712
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def unread_by_room(self, room_ids: List[int], from_admin: bool) -> dict[int, int]:
        if not room_ids:
            return {}
        stmt = (
            select(ChatMessage.room_id, func.count(ChatMessage.id))
            .where(
                ChatMessage.room_id.in_(room_ids),  # type: ignore[attr-defined]
                ChatMessage.is_from_admin == from_admin,
                ChatMessage.is_read == False,  # noqa: E712
            )
            .group_by(ChatMessage.room_id)
        )
        result = await self.session.execute(stmt)
        return {room_id: count for room_id, count in result.all()}
