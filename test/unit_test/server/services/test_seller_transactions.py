"""Tests for seller revenue bookkeeping on paid orders."""

from dressla.core.database.entities.transactions import Transaction
from dressla.core.models.domain.enums import OrderStatus, ProductStatus, TransactionType
from dressla.server.services.seller_transactions import (
    calculate_user_revenue,
    check_and_block_user,
    reevaluate_user_blocking,
    record_seller_transactions,
)


class TestRecordSellerTransactions:
    async def test_books_sale_and_rent_and_reserves_sold_items(
        self, session, repos, user, seller, make_product, make_order
    ):
        sold = await make_product(owner=seller)
        rented = await make_product(owner=seller, is_rentable=True)
        order = await make_order(user, [(sold, 60.0, False), (rented, 30.0, True)])

        created = await record_seller_transactions(session, order.id)

        assert created == 2
        entries = await repos.transactions.list_for_user(seller.id, order_id=order.id)
        assert {(entry.type, entry.total) for entry in entries} == {
            (TransactionType.SALE, 60.0),
            (TransactionType.RENT, 30.0),
        }
        assert entries[0].buyer_id == user.id
        assert (await repos.products.get_by_id(sold.id)).status == ProductStatus.RESERVED
        assert (await repos.products.get_by_id(rented.id)).status == ProductStatus.AVAILABLE

    async def test_running_twice_does_not_double_book(self, session, user, seller, make_product, make_order):
        product = await make_product(owner=seller)
        order = await make_order(user, [(product, 20.0, False)])

        await record_seller_transactions(session, order.id)

        assert await record_seller_transactions(session, order.id) == 0
        assert await calculate_user_revenue(session, seller.id) == 20.0

    async def test_unverified_seller_blocked_at_threshold(self, session, user, seller, make_product, make_order):
        product = await make_product(owner=seller)
        order = await make_order(user, [(product, 100.0, False)])

        await record_seller_transactions(session, order.id)

        assert seller.blocked is True

    async def test_verified_seller_is_never_blocked(self, session, user, make_user, make_product, make_order):
        verified = await make_user(verified=True)
        product = await make_product(owner=verified)
        order = await make_order(user, [(product, 500.0, False)])

        await record_seller_transactions(session, order.id)

        assert verified.blocked is False

    async def test_self_purchase_earns_nothing(self, session, seller, make_product, make_order):
        product = await make_product(owner=seller)
        order = await make_order(seller, [(product, 150.0, False)])
        session.add(Transaction(user_id=seller.id, order_id=order.id, type=TransactionType.SALE, total=150.0))
        await session.commit()

        created = await record_seller_transactions(session, order.id)

        assert created == 0
        assert await calculate_user_revenue(session, seller.id) == 0.0
        assert seller.blocked is False

    async def test_unknown_order(self, session):
        assert await record_seller_transactions(session, 999) == 0


class TestBlocking:
    async def test_check_keeps_existing_block(self, repos, make_user):
        blocked = await make_user(blocked=True)

        assert await check_and_block_user(repos, blocked.id) is True

    async def test_check_below_threshold(self, repos, seller):
        assert await check_and_block_user(repos, seller.id, threshold=50.0) is False
        assert seller.blocked is False

    async def test_unknown_user(self, repos):
        assert await check_and_block_user(repos, "missing") is False
        assert await reevaluate_user_blocking(repos, "missing") is False

    async def test_reevaluation_lifts_block(self, repos, session, make_user):
        user = await make_user(blocked=True)
        session.add(Transaction(user_id=user.id, type=TransactionType.SALE, total=30.0))
        await session.commit()

        assert await reevaluate_user_blocking(repos, user.id, threshold=100.0) is False
        assert user.blocked is False
