"""
Engine and session factory helpers.

Hosting providers hand out ``postgres://`` URLs; the server always talks to
PostgreSQL through asyncpg, and to SQLite through aiosqlite in tests and
local runs.
"""

from __future__ import annotations

import re
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .base import Base

_POSTGRES_SCHEME = re.compile(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://")


def normalize_database_url(db_url: str) -> str:
    """Rewrite any PostgreSQL scheme to ``postgresql+asyncpg://``; other URLs pass through."""
    return _POSTGRES_SCHEME.sub("postgresql+asyncpg://", db_url, count=1)


def create_engine(db_url: str) -> AsyncEngine:
    url = normalize_database_url(db_url)
    options: dict[str, Any] = {}
    if not url.startswith("sqlite"):
        # managed Postgres drops idle connections
        options["pool_pre_ping"] = True
    return create_async_engine(url, **options)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory whose objects stay readable after commit, so routers can serialize them."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create every marketplace table that does not exist yet.

    Used for SQLite and tests. PostgreSQL is migrated with Alembic.
    """
    from . import entities  # noqa: F401  registers every table on the metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
