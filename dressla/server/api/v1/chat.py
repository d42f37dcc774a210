"""
API endpoints for chat.

Two kinds of rooms share one model:

- support rooms, opened by a user or guest and answered by admins or support
- product rooms, opened by a buyer and answered by the seller, who is stored
  in ``admin_id``

Messages written by the answering side carry ``is_from_admin=True``.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from dressla.core.database.entities.chat import ChatMessage, ChatRoom
from dressla.core.database.entities.users import User
from dressla.core.logging_config import get_logger
from dressla.core.models.domain.enums import ChatAction, ChatStatus
from dressla.core.models.io.chat import (
    ChatMessageCreate,
    ChatMessageRead,
    ChatRoomAction,
    ChatRoomDetail,
    ChatRoomList,
    UnreadCount,
)
from dressla.core.models.io.common import Pagination
from dressla.marketplace.roles import is_admin_or_support
from dressla.server.services.deps import CurrentUserDep, OptionalUserDep, ReposDep, StaffDep

logger = get_logger(__name__)

router = APIRouter(tags=["chat"])
admin_router = APIRouter(tags=["admin"])

PRODUCT_GREETING = "Hello! I'm interested in product: {name}"


def _detail(room: ChatRoom, messages: List[ChatMessage]) -> ChatRoomDetail:
    detail = ChatRoomDetail.model_validate(room)
    detail.messages = [ChatMessageRead.model_validate(message) for message in messages]
    return detail


def _answers_room(room: ChatRoom, user: User) -> bool:
    """True when ``user`` writes on the answering side of ``room``."""
    if room.admin_id == user.id:
        return True
    return room.product_id is None and room.user_id != user.id and is_admin_or_support(user.role)


def _touch(room: ChatRoom) -> None:
    room.updated_at = datetime.utcnow()


async def _get_room(repos, room_id: int, user: User) -> ChatRoom:
    room = await repos.chat.get_by_id(room_id)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat room not found")
    if user.id not in (room.user_id, room.admin_id) and not is_admin_or_support(user.role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return room


@router.post(
    "",
    response_model=ChatRoomDetail,
    summary="Contact Support",
    description=(
        "Send a message to support. Signed-in users continue their open room; "
        "guests must give a name and an e-mail and always get a new room."
    ),
    responses={400: {"description": "Guest name or e-mail missing"}},
)
async def contact_support(payload: ChatMessageCreate, repos: ReposDep, user: OptionalUserDep) -> ChatRoomDetail:
    if user is None:
        if not payload.guest_name or not payload.guest_email:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Guest name and email are required")
        room = await repos.chat.stage(
            ChatRoom(guest_name=payload.guest_name, guest_email=payload.guest_email, status=ChatStatus.PENDING)
        )
    else:
        room = await repos.chat.open_support_room(user.id)
        if room is None:
            room = await repos.chat.stage(ChatRoom(user_id=user.id, status=ChatStatus.PENDING))
        else:
            room.status = ChatStatus.ACTIVE
            _touch(room)
            repos.session.add(room)

    await repos.chat.add_message(
        ChatMessage(room_id=room.id, content=payload.message, user_id=user.id if user else None)  # type: ignore[arg-type]
    )
    await repos.session.commit()
    return _detail(room, await repos.chat.messages(room.id))  # type: ignore[arg-type]


@router.get("", response_model=List[ChatRoomDetail], summary="My Chats", description="Rooms with their latest message.")
async def list_my_rooms(user: CurrentUserDep, repos: ReposDep) -> List[ChatRoomDetail]:
    rooms = await repos.chat.rooms_for_user(user.id)
    latest = await repos.chat.last_messages([room.id for room in rooms])
    return [_detail(room, [latest[room.id]] if room.id in latest else []) for room in rooms]


@router.post(
    "/product/{product_id}",
    response_model=ChatRoomDetail,
    summary="Contact Seller",
    description="Open (or reuse) a chat with the seller of a product.",
    responses={
        400: {"description": "The product belongs to the caller or has no seller"},
        404: {"description": "Product not found"},
    },
)
async def contact_seller(product_id: int, user: CurrentUserDep, repos: ReposDep) -> ChatRoomDetail:
    product = await repos.products.get_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    if not product.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product has no seller")
    if product.user_id == user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot message yourself")

    room = await repos.chat.product_room(user.id, product_id, product.user_id)
    if room is None:
        room = await repos.chat.stage(
            ChatRoom(user_id=user.id, admin_id=product.user_id, product_id=product_id, status=ChatStatus.ACTIVE)
        )
        await repos.chat.add_message(
            ChatMessage(room_id=room.id, content=PRODUCT_GREETING.format(name=product.name), user_id=user.id)  # type: ignore[arg-type]
        )
        await repos.session.commit()
        logger.info(f"User {user.id} opened product chat {room.id} with seller {product.user_id}")
    return _detail(room, await repos.chat.messages(room.id))  # type: ignore[arg-type]


@router.get(
    "/{room_id}",
    response_model=ChatRoomDetail,
    summary="Get Chat",
    description="A room with all messages. Messages from the other side are marked read.",
    responses={403: {"description": "Not a participant"}, 404: {"description": "Chat room not found"}},
)
async def get_room(room_id: int, user: CurrentUserDep, repos: ReposDep) -> ChatRoomDetail:
    room = await _get_room(repos, room_id, user)
    # the reader marks the other side's messages
    await repos.chat.mark_read(room.id, from_admin=not _answers_room(room, user))
    await repos.session.commit()
    return _detail(room, await repos.chat.messages(room.id))  # type: ignore[arg-type]


@router.post(
    "/{room_id}",
    response_model=ChatMessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Send Message",
    responses={
        400: {"description": "The room is closed"},
        403: {"description": "Not a participant"},
        404: {"description": "Chat room not found"},
    },
)
async def send_message(
    room_id: int, payload: ChatMessageCreate, user: CurrentUserDep, repos: ReposDep
) -> ChatMessageRead:
    room = await _get_room(repos, room_id, user)
    if room.status == ChatStatus.CLOSED:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Chat room is closed")

    answering = _answers_room(room, user)
    message = await repos.chat.add_message(
        ChatMessage(
            room_id=room.id,  # type: ignore[arg-type]
            content=payload.message,
            is_from_admin=answering,
            user_id=None if answering else user.id,
            admin_id=user.id if answering else None,
        )
    )
    room.status = ChatStatus.ACTIVE
    _touch(room)
    repos.session.add(room)
    await repos.session.commit()
    await repos.session.refresh(message)
    return ChatMessageRead.model_validate(message)


@admin_router.get(
    "/chat/unread-count",
    response_model=UnreadCount,
    summary="Unread Support Messages",
)
async def unread_count(staff: StaffDep, repos: ReposDep) -> UnreadCount:
    return UnreadCount(count=await repos.chat.unread_for_admin())


@admin_router.get(
    "/chat",
    response_model=ChatRoomList,
    summary="Support Inbox",
    description="Support rooms that are unassigned or handled by an admin, most recently active first.",
)
async def admin_list_rooms(
    staff: StaffDep,
    repos: ReposDep,
    status_filter: Optional[ChatStatus] = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> ChatRoomList:
    rooms, total = await repos.chat.admin_rooms(status_filter, page, limit)
    latest = await repos.chat.last_messages([room.id for room in rooms])
    return ChatRoomList(
        rooms=[_detail(room, [latest[room.id]] if room.id in latest else []) for room in rooms],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if total else 0),
    )


@admin_router.patch(
    "/chat/{room_id}",
    response_model=ChatRoomDetail,
    summary="Assign or Close Chat",
    responses={404: {"description": "Chat room not found"}},
)
async def admin_update_room(room_id: int, payload: ChatRoomAction, staff: StaffDep, repos: ReposDep) -> ChatRoomDetail:
    room = await repos.chat.get_by_id(room_id)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat room not found")
    if payload.action == ChatAction.assign:
        room.admin_id = staff.id
        room.status = ChatStatus.ACTIVE
    else:
        room.status = ChatStatus.CLOSED
    _touch(room)
    room = await repos.chat.update(room)
    logger.info(f"Staff {staff.id} applied '{payload.action.value}' to chat room {room_id}")
    return _detail(room, await repos.chat.messages(room.id))  # type: ignore[arg-type]
