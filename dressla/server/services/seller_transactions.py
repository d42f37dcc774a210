"""
Seller revenue bookkeeping for paid orders.

When an order is paid every seller whose products it contains gets one ledger
entry per transaction type. Sellers that are not verified are blocked once
their revenue reaches the verification threshold.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from dressla.core.database.entities.transactions import Transaction
from dressla.core.database.repositories import SqlRepoBundle, build_sql_repos_from_session
from dressla.core.logging_config import get_logger
from dressla.core.models.domain.enums import ProductStatus
from dressla.marketplace.seller_revenue import aggregate_seller_totals, should_block
from dressla.server.core.config import settings

logger = get_logger(__name__)


def _threshold(threshold: Optional[float]) -> float:
    return settings.marketplace.verification_revenue_threshold if threshold is None else threshold


async def calculate_user_revenue(session: AsyncSession, user_id: str) -> float:
    """Sum of every SALE and RENT entry booked for ``user_id``."""
    return await build_sql_repos_from_session(session=session).transactions.revenue_for(user_id)


async def check_and_block_user(repos: SqlRepoBundle, user_id: str, threshold: Optional[float] = None) -> bool:
    """Block ``user_id`` when :func:`should_block` says so. Returns True when the user is blocked.

    The change is staged on the session; the caller commits.
    """
    user = await repos.users.get_by_id(user_id)
    if user is None:
        return False
    revenue = await repos.transactions.revenue_for(user_id)
    if not should_block(user.verified, user.blocked, revenue, _threshold(threshold)):
        return False
    if not user.blocked:
        user.blocked = True
        repos.session.add(user)
        logger.info(f"Blocked seller {user_id}: revenue {revenue:.2f} reached the verification threshold")
    return True


async def reevaluate_user_blocking(repos: SqlRepoBundle, user_id: str, threshold: Optional[float] = None) -> bool:
    """Recompute the block of an unverified user from their current revenue.

    Unlike :func:`check_and_block_user` this also lifts a block once revenue
    has dropped below the threshold. Verified users are left untouched.
    """
    user = await repos.users.get_by_id(user_id)
    if user is None or user.verified:
        return False
    revenue = await repos.transactions.revenue_for(user_id)
    blocked = revenue >= _threshold(threshold)
    if blocked != user.blocked:
        user.blocked = blocked
        repos.session.add(user)
        logger.info(f"Re-evaluated block of user {user_id}: blocked={blocked} (revenue {revenue:.2f})")
    return blocked


async def record_seller_transactions(session: AsyncSession, order_id: int, threshold: Optional[float] = None) -> int:
    """Book seller revenue for a paid order and reserve sold products.

    Steps:
        1. Entries the buyer holds for this order (buying their own listing)
           are removed and the buyer's block is re-evaluated. Self-purchases
           earn no revenue.
        2. Order lines are aggregated per (seller, SALE|RENT). Existing entries
           for the same seller, order and type are left as they are.
        3. Each new entry is followed by a threshold check for its seller.
        4. Products bought outright are marked RESERVED so they leave the shop.

    Returns:
        Number of transactions created.
    """
    repos = build_sql_repos_from_session(session=session)
    order = await repos.orders.get_by_id(order_id)
    if order is None:
        logger.warning(f"Cannot record seller transactions: order {order_id} not found")
        return 0

    if order.user_id:
        removed = await repos.transactions.delete_for_seller_order(order.user_id, order_id)
        if removed:
            logger.info(f"Removed {removed} self-purchase transaction(s) of user {order.user_id} on order {order_id}")
        await session.flush()
        await reevaluate_user_blocking(repos, order.user_id, threshold)

    items = (await repos.orders.items_for([order_id])).get(order_id, [])
    seller_by_product = await repos.products.seller_map([item.product_id for item in items if item.product_id])
    totals = aggregate_seller_totals(items, seller_by_product)

    created = 0
    for (seller_id, kind), total in totals.items():
        if seller_id == order.user_id:
            continue
        if await repos.transactions.exists(seller_id, order_id, kind):
            continue
        session.add(
            Transaction(user_id=seller_id, buyer_id=order.user_id, order_id=order_id, type=kind, total=total)
        )
        await session.flush()
        created += 1
        await check_and_block_user(repos, seller_id, threshold)

    sold_ids = {item.product_id for item in items if not item.is_rental and item.product_id is not None}
    for product in await repos.products.get_many(list(sold_ids)):
        product.status = ProductStatus.RESERVED
        session.add(product)

    await session.commit()
    logger.info(f"Recorded {created} seller transaction(s) for order {order_id}")
    return created
