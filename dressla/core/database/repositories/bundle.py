"""
Repository bundle for dependency injection.

Routers and services receive one bundle per request session instead of
constructing each repository themselves.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..session import get_session
from .carts import CartRepository
from .chat import ChatRepository
from .delivery_cities import DeliveryCityRepository
from .orders import OrderRepository
from .products import CategoryRepository, ProductRepository
from .rentals import RentalRepository
from .reviews import ReviewRepository
from .transactions import TransactionRepository
from .users import UserRepository


@dataclass(frozen=True)
class SqlRepoBundle:
    """Convenience bundle of all SQL repositories sharing one session."""

    session: AsyncSession
    users: UserRepository
    categories: CategoryRepository
    products: ProductRepository
    carts: CartRepository
    orders: OrderRepository
    rentals: RentalRepository
    transactions: TransactionRepository
    reviews: ReviewRepository
    chat: ChatRepository
    delivery_cities: DeliveryCityRepository


def build_sql_repos_from_session(*, session: AsyncSession) -> SqlRepoBundle:
    """Build a SqlRepoBundle from an existing session.

    Args:
        session: Existing async session

    Returns:
        Bundle containing all repository instances
    """
    return SqlRepoBundle(
        session=session,
        users=UserRepository(session),
        categories=CategoryRepository(session),
        products=ProductRepository(session),
        carts=CartRepository(session),
        orders=OrderRepository(session),
        rentals=RentalRepository(session),
        transactions=TransactionRepository(session),
        reviews=ReviewRepository(session),
        chat=ChatRepository(session),
        delivery_cities=DeliveryCityRepository(session),
    )


async def get_repos(session: AsyncSession = Depends(get_session)) -> SqlRepoBundle:
    """FastAPI dependency yielding the bundle for the request session."""
    return build_sql_repos_from_session(session=session)
