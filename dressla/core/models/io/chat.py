"""
Chat I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from dressla.core.models.domain.enums import ChatAction, ChatStatus

from .common import Pagination


class ChatMessageCreate(BaseModel):
    message: str = Field(min_length=1, max_length=1000)
    guest_name: Optional[str] = Field(default=None, min_length=1)
    guest_email: Optional[EmailStr] = None


class ChatMessageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    room_id: int
    content: str
    is_from_admin: bool
    user_id: Optional[str] = None
    admin_id: Optional[str] = None
    is_read: bool
    created_at: datetime


class ChatRoomRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[str] = None
    admin_id: Optional[str] = None
    product_id: Optional[int] = None
    guest_name: Optional[str] = None
    guest_email: Optional[str] = None
    status: ChatStatus
    created_at: datetime
    updated_at: datetime


class ChatRoomDetail(ChatRoomRead):
    messages: List[ChatMessageRead] = Field(default_factory=list)


class ChatRoomList(BaseModel):
    rooms: List[ChatRoomDetail]
    pagination: Pagination


class ChatRoomAction(BaseModel):
    action: ChatAction


class UnreadCount(BaseModel):
    count: int
