"""Unit tests for engine and session helpers."""

import pytest
from sqlalchemy import inspect

from dressla.core.database import create_all, create_engine, create_sessionmaker


@pytest.mark.parametrize(
    "url",
    [
        "postgres://u:p@db:5432/dressla",
        "postgresql://u:p@db:5432/dressla",
        "postgresql+psycopg2://u:p@db:5432/dressla",
        "postgresql+asyncpg://u:p@db:5432/dressla",
    ],
)
def test_postgres_urls_use_asyncpg(url):
    engine = create_engine(url)

    assert engine.url.drivername == "postgresql+asyncpg"
    assert engine.url.database == "dressla"


def test_sqlite_url_is_kept():
    engine = create_engine("sqlite+aiosqlite:///:memory:")

    assert engine.url.drivername == "sqlite+aiosqlite"


def test_sessionmaker_keeps_objects_loaded_after_commit():
    maker = create_sessionmaker(create_engine("sqlite+aiosqlite:///:memory:"))

    assert maker.kw["expire_on_commit"] is False


async def test_create_all_creates_every_table():
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await create_all(engine)

    async with engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))
    await engine.dispose()

    assert {
        "users",
        "products",
        "product_variants",
        "rental_price_tiers",
        "carts",
        "cart_items",
        "orders",
        "order_items",
        "rentals",
        "transactions",
        "reviews",
        "chat_rooms",
        "delivery_cities",
    } <= tables
