"""Tests for RentalRepository and the periods that block variants."""

from datetime import datetime

import pytest_asyncio

from dressla.core.database.entities.catalog import Product, ProductVariant
from dressla.core.database.entities.orders import Order, OrderItem
from dressla.core.database.entities.rentals import Rental
from dressla.core.database.entities.users import User
from dressla.core.models.domain.enums import OrderStatus, RentalStatus


@pytest_asyncio.fixture
async def renter(repos):
    return await repos.users.create(User(email="renter@example.com"))


@pytest_asyncio.fixture
async def dress(repos, session):
    product = await repos.products.create(Product(name="Dress", slug="dress", is_rentable=True))
    session.add(ProductVariant(product_id=product.id, size="M", price=100.0, stock=1))
    await session.commit()
    return product


async def _variant(repos, product):
    return (await repos.products.variants_for([product.id]))[product.id][0]


async def _rental(repos, user, product, variant, start, end, status=RentalStatus.RESERVED):
    return await repos.rentals.create(
        Rental(
            user_id=user.id,
            product_id=product.id,
            variant_id=variant.id,
            start_date=start,
            end_date=end,
            status=status,
        )
    )


class TestRentalQueries:
    async def test_for_variant_only_returns_blocking_rentals(self, repos, renter, dress):
        variant = await _variant(repos, dress)
        kept = await _rental(repos, renter, dress, variant, datetime(2026, 3, 1), datetime(2026, 3, 4))
        await _rental(
            repos, renter, dress, variant, datetime(2026, 4, 1), datetime(2026, 4, 4), RentalStatus.CANCELED
        )

        assert [r.id for r in await repos.rentals.for_variant(variant.id)] == [kept.id]
        assert await repos.rentals.for_variant(variant.id, exclude_rental_id=kept.id) == []

    async def test_list_for_user_paginates(self, repos, renter, dress):
        variant = await _variant(repos, dress)
        for day in (1, 5, 9):
            await _rental(repos, renter, dress, variant, datetime(2026, 5, day), datetime(2026, 5, day + 1))

        page, total = await repos.rentals.list_for_user(renter.id, page=2, limit=2)

        assert total == 3
        assert len(page) == 1

    async def test_user_has_rental_ignores_canceled(self, repos, renter, dress):
        variant = await _variant(repos, dress)
        await _rental(
            repos, renter, dress, variant, datetime(2026, 3, 1), datetime(2026, 3, 4), RentalStatus.CANCELED
        )

        assert not await repos.rentals.user_has_rental(renter.id, dress.id)
        assert await repos.rentals.product_has_rentals(dress.id)


class TestActivePeriods:
    async def test_rentals_and_pending_rental_orders(self, repos, session, renter, dress):
        variant = await _variant(repos, dress)
        await _rental(repos, renter, dress, variant, datetime(2026, 3, 1), datetime(2026, 3, 4))
        pending = Order(user_id=renter.id, total=50.0, status=OrderStatus.PENDING)
        canceled = Order(user_id=renter.id, total=50.0, status=OrderStatus.CANCELED)
        session.add_all([pending, canceled])
        await session.flush()
        for order, day in ((pending, 10), (canceled, 20)):
            session.add(
                OrderItem(
                    order_id=order.id,
                    product_id=dress.id,
                    product_name="Dress",
                    price=50.0,
                    size="M",
                    is_rental=True,
                    rental_start_date=datetime(2026, 3, day),
                    rental_end_date=datetime(2026, 3, day + 2),
                )
            )
        await session.commit()

        periods = (await repos.rentals.active_periods([dress.id]))[dress.id]

        assert sorted((size, p.source, p.start_date.day) for size, p in periods) == [
            ("M", "order", 10),
            ("M", "rental", 1),
        ]
        assert await repos.rentals.user_has_rental_order(renter.id, dress.id)

    async def test_past_periods_can_be_skipped(self, repos, renter, dress):
        variant = await _variant(repos, dress)
        await _rental(repos, renter, dress, variant, datetime(2026, 3, 1), datetime(2026, 3, 4))

        periods = await repos.rentals.active_periods([dress.id], not_ended_before=datetime(2026, 3, 5))

        assert periods[dress.id] == []
