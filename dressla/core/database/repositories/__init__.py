"""
Database repository layer using SQLModel.

Repositories are organized by business domain. Each one wraps an
``AsyncSession`` and exposes the queries its routers and services need on top
of the shared CRUD interface.

Modules:
- base: AsyncBaseRepository interface, SQLModelRepository and QueryBuilder
- users: accounts, verification documents and registration codes
- products: categories, products, images, variants and rental price tiers
- carts: carts and cart items
- orders: orders and order items
- rentals: rentals and variant blocking periods
- transactions: seller transaction ledger
- reviews: reviews and replies
- chat: chat rooms and messages
- delivery_cities: delivery cities
- bundle: SqlRepoBundle for dependency injection
"""

from .base import AsyncBaseRepository, QueryBuilder, SQLModelRepository
from .bundle import SqlRepoBundle, build_sql_repos_from_session, get_repos
from .carts import CartRepository
from .chat import ChatRepository
from .delivery_cities import DeliveryCityRepository
from .orders import OrderRepository
from .products import CategoryRepository, ProductRepository
from .rentals import RentalRepository
from .reviews import ReviewRepository
from .transactions import TransactionRepository
from .users import UserRepository

__all__ = [
    "AsyncBaseRepository",
    "CartRepository",
    "CategoryRepository",
    "ChatRepository",
    "DeliveryCityRepository",
    "OrderRepository",
    "ProductRepository",
    "QueryBuilder",
    "RentalRepository",
    "ReviewRepository",
    "SQLModelRepository",
    "SqlRepoBundle",
    "TransactionRepository",
    "UserRepository",
    "build_sql_repos_from_session",
    "get_repos",
]
