"""
Chat entity models.

Chat rooms connect a user (or a guest identified by name and e-mail) with
support staff. Product chats reuse the same tables, with the seller stored in
``admin_id``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from dressla.core.models.domain.enums import ChatStatus

from ..base import Base, utc_now


class ChatRoom(Base, table=True):
    """Table: chat_rooms"""

    __tablename__ = "chat_rooms"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True)
    admin_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True)
    product_id: Optional[int] = Field(default=None, foreign_key="products.id")
    guest_name: Optional[str] = Field(default=None)
    guest_email: Optional[str] = Field(default=None)
    status: ChatStatus = Field(default=ChatStatus.PENDING, index=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"ChatRoom(id={self.id}, user_id={self.user_id}, admin_id={self.admin_id}, status={self.status})"


class ChatMessage(Base, table=True):
    """Table: chat_messages"""

    __tablename__ = "chat_messages"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    room_id: int = Field(foreign_key="chat_rooms.id", index=True)
    content: str = Field(max_length=1000)
    is_from_admin: bool = Field(default=False)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id")
    admin_id: Optional[str] = Field(default=None, foreign_key="users.id")
    is_read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"ChatMessage(id={self.id}, room_id={self.room_id}, from_admin={self.is_from_admin})"
