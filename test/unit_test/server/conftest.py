from __future__ import annotations

from datetime import datetime
from typing import AsyncGenerator, Callable, Optional, Sequence
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel.pool import StaticPool

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory schema for every test."""
    from dressla.core.database import create_all

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    async_session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def repos(session: AsyncSession):
    from dressla.core.database.repositories import build_sql_repos_from_session

    return build_sql_repos_from_session(session=session)


@pytest.fixture
def gateway():
    """Payment gateway stand-in; tests set the return values they need."""
    from dressla.server.services.payment_gateway import BogPaymentGateway

    mock = AsyncMock(spec=BogPaymentGateway)
    mock.create_order.return_value = {
        "id": "bog-order-1",
        "status": "created",
        "redirect_url": "https://payment.bog.ge/?order_id=bog-order-1",
    }
    return mock


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession, gateway) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client with the request session and payment gateway overridden."""
    from dressla.core.database import get_session
    from dressla.server.main import app
    from dressla.server.services.payment_gateway import get_payment_gateway

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session: AsyncSession) -> Callable:
    from dressla.core.database.entities.users import User
    from dressla.core.models.domain.enums import Role
    from dressla.server.services.security import hash_password

    counter = {"n": 0}

    async def _make(
        role: Role = Role.USER,
        name: str = "Test User",
        email: Optional[str] = None,
        password: str = "secret123",
        **fields,
    ) -> User:
        counter["n"] += 1
        user = User(
            name=name,
            email=email or f"user{counter['n']}@example.com",
            password_hash=hash_password(password),
            role=role,
            **fields,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers() -> Callable:
    """Bearer header for a user."""
    from dressla.server.services.security import create_access_token

    def _headers(user) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _headers


@pytest_asyncio.fixture
async def user(make_user):
    return await make_user(name="Nino Buyer")


@pytest_asyncio.fixture
async def seller(make_user):
    return await make_user(name="Giorgi Seller", iban="GE29NB0000000101904917")


@pytest_asyncio.fixture
async def admin(make_user):
    from dressla.core.models.domain.enums import Role

    return await make_user(role=Role.ADMIN, name="Admin")


@pytest_asyncio.fixture
async def support(make_user):
    from dressla.core.models.domain.enums import Role

    return await make_user(role=Role.SUPPORT, name="Support")


@pytest.fixture
def make_product(session: AsyncSession) -> Callable:
    """Insert an approved product with variants, images and rental tiers."""
    from dressla.core.database.entities.catalog import Product, ProductImage, ProductVariant, RentalPriceTier
    from dressla.core.models.domain.enums import ApprovalStatus

    counter = {"n": 0}

    async def _make(
        owner=None,
        name: Optional[str] = None,
        variants: Sequence[tuple[str, float, int]] = (("M", 100.0, 1),),
        tiers: Sequence[tuple[int, float]] = (),
        approval_status: ApprovalStatus = ApprovalStatus.APPROVED,
        created_at: Optional[datetime] = None,
        **fields,
    ) -> Product:
        counter["n"] += 1
        product_name = name or f"Product {counter['n']}"
        product = Product(
            name=product_name,
            slug=f"product-{counter['n']}",
            sku=f"SKU{counter['n']:04d}",
            user_id=owner.id if owner is not None else None,
            approval_status=approval_status,
            **fields,
        )
        if created_at is not None:
            product.created_at = created_at
        session.add(product)
        await session.flush()
        for size, price, stock in variants:
            session.add(ProductVariant(product_id=product.id, size=size, price=price, stock=stock))
        for min_days, price_per_day in tiers:
            session.add(RentalPriceTier(product_id=product.id, min_days=min_days, price_per_day=price_per_day))
        session.add(ProductImage(product_id=product.id, url=f"https://cdn.example.com/{product.id}.jpg", position=0))
        await session.commit()
        await session.refresh(product)
        return product

    return _make


@pytest.fixture
def make_order(session: AsyncSession) -> Callable:
    """Insert an order with one line per ``(product, price, is_rental)`` tuple."""
    from dressla.core.database.entities.orders import Order, OrderItem
    from dressla.core.models.domain.enums import OrderStatus

    async def _make(buyer, lines, status: OrderStatus = OrderStatus.PAID, payment_id: Optional[str] = None):
        order = Order(
            user_id=buyer.id,
            total=sum(price for _, price, _ in lines),
            status=status,
            payment_id=payment_id,
        )
        session.add(order)
        await session.flush()
        for product, price, is_rental in lines:
            session.add(
                OrderItem(
                    order_id=order.id,
                    product_id=product.id,
                    product_name=product.name,
                    price=price,
                    is_rental=is_rental,
                    rental_start_date=datetime(2026, 6, 1) if is_rental else None,
                    rental_end_date=datetime(2026, 6, 4) if is_rental else None,
                )
            )
        await session.commit()
        return order

    return _make
