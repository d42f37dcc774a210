"""
API endpoints for orders.

``router`` serves buyers (checkout and order history) and admin maintenance of
single orders. ``admin_router`` is the back-office order list used by admins
and support staff.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence

from fastapi import APIRouter, HTTPException, Query, status

from dressla.core.database.entities.orders import Order, OrderItem
from dressla.core.database.entities.users import User
from dressla.core.logging_config import get_logger
from dressla.core.models.domain.enums import OrderStatus, ProductStatus
from dressla.core.models.io.common import MessageResponse
from dressla.core.models.io.orders import CheckoutRequest, CheckoutResult, OrderItemRead, OrderRead, OrderStatusUpdate
from dressla.core.monitoring import log_payment_event
from dressla.marketplace.roles import is_admin
from dressla.server.services.checkout import create_order
from dressla.server.services.deps import AdminDep, CurrentUserDep, PaymentGatewayDep, ReposDep, StaffDep
from dressla.server.services.seller_transactions import record_seller_transactions

logger = get_logger(__name__)

router = APIRouter(tags=["orders"])
admin_router = APIRouter(tags=["admin"])


async def _with_items(
    repos,
    orders: Sequence[Order],
    keep: Optional[Callable[[OrderItem], bool]] = None,
) -> List[OrderRead]:
    items: Dict[int, List[OrderItem]] = await repos.orders.items_for([order.id for order in orders])
    reads = []
    for order in orders:
        read = OrderRead.model_validate(order)
        read.items = [
            OrderItemRead.model_validate(item) for item in items.get(order.id, []) if keep is None or keep(item)  # type: ignore[arg-type]
        ]
        reads.append(read)
    return reads


async def _get_order(repos, order_id: int) -> Order:
    order = await repos.orders.get_by_id(order_id)
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order


async def _change_status(repos, order: Order, new_status: OrderStatus, actor: User) -> OrderRead:
    previous = order.status
    order.status = new_status
    await repos.orders.update(order)
    logger.info(f"User {actor.id} changed order {order.id} status {previous.value} -> {new_status.value}")
    if new_status == OrderStatus.PAID and previous != OrderStatus.PAID:
        await record_seller_transactions(repos.session, order.id)  # type: ignore[arg-type]
        log_payment_event("order_paid", order.id, source="manual", actor=actor.id)
    return (await _with_items(repos, [order]))[0]


@router.post(
    "",
    response_model=CheckoutResult,
    status_code=status.HTTP_201_CREATED,
    summary="Checkout",
    description=(
        "Create an order from the cart and register it with the payment gateway. "
        "Card payments return the gateway redirect URL; completed Google Pay payments are marked PAID."
    ),
    responses={
        201: {"description": "Order created"},
        400: {"description": "Empty cart, unavailable delivery city or invalid total"},
        403: {"description": "The account is blocked until identity verification"},
        502: {"description": "The payment gateway rejected the order"},
    },
)
async def checkout(
    payload: CheckoutRequest, user: CurrentUserDep, repos: ReposDep, gateway: PaymentGatewayDep
) -> CheckoutResult:
    return await create_order(repos, user, payload, gateway)


@router.get(
    "",
    response_model=List[OrderRead],
    summary="My Orders",
    description="The user's orders, newest first. Lines whose product is back on sale are left out.",
)
async def list_my_orders(user: CurrentUserDep, repos: ReposDep) -> List[OrderRead]:
    orders = await repos.orders.list_for_user(user.id)
    items = await repos.orders.items_for([order.id for order in orders])
    product_ids = [item.product_id for lines in items.values() for item in lines if item.product_id]
    available = {
        product.id
        for product in await repos.products.get_many(product_ids)
        if product.status == ProductStatus.AVAILABLE
    }
    return await _with_items(repos, orders, keep=lambda item: item.product_id not in available)


@router.get(
    "/{order_id}",
    response_model=OrderRead,
    summary="Get Order",
    responses={
        403: {"description": "The order belongs to another user"},
        404: {"description": "Order not found"},
    },
)
async def get_order(order_id: int, user: CurrentUserDep, repos: ReposDep) -> OrderRead:
    order = await _get_order(repos, order_id)
    if order.user_id != user.id and not is_admin(user.role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return (await _with_items(repos, [order]))[0]


@router.patch(
    "/{order_id}",
    response_model=OrderRead,
    summary="Update Order Status",
    description="Change the order status. Moving an order to PAID books the seller transactions. Admin only.",
    responses={
        403: {"description": "Admin access required"},
        404: {"description": "Order not found"},
    },
)
async def update_order(order_id: int, payload: OrderStatusUpdate, admin: AdminDep, repos: ReposDep) -> OrderRead:
    order = await _get_order(repos, order_id)
    return await _change_status(repos, order, payload.status, admin)


@router.delete(
    "/{order_id}",
    response_model=MessageResponse,
    summary="Delete Order",
    description="Delete an order, its lines and the ledger entries booked for it. Admin only.",
    responses={
        403: {"description": "Admin access required"},
        404: {"description": "Order not found"},
    },
)
async def delete_order(order_id: int, admin: AdminDep, repos: ReposDep) -> MessageResponse:
    order = await _get_order(repos, order_id)
    await repos.transactions.delete_for_order(order_id)
    await repos.orders.delete_with_items(order)
    await repos.session.commit()
    logger.info(f"Admin {admin.id} deleted order {order_id}")
    return MessageResponse(message="Order deleted")


@admin_router.get(
    "/orders",
    response_model=List[OrderRead],
    summary="List All Orders",
    description="Every order with its lines, newest first, optionally filtered by status.",
)
async def admin_list_orders(
    staff: StaffDep,
    repos: ReposDep,
    status_filter: Optional[OrderStatus] = Query(default=None, alias="status"),
    page: int = 1,
    limit: Optional[int] = None,
) -> List[OrderRead]:
    orders = await repos.orders.list_all(status=status_filter, page=max(page, 1), limit=limit)
    return await _with_items(repos, orders)


@admin_router.patch(
    "/orders/{order_id}/status",
    response_model=OrderRead,
    summary="Set Order Status",
    responses={404: {"description": "Order not found"}},
)
async def admin_set_order_status(
    order_id: int, payload: OrderStatusUpdate, staff: StaffDep, repos: ReposDep
) -> OrderRead:
    order = await _get_order(repos, order_id)
    return await _change_status(repos, order, payload.status, staff)
