"""Tests for the transaction ledger, orders, chat and delivery city repositories."""

from dressla.core.database.entities.chat import ChatMessage, ChatRoom
from dressla.core.database.entities.delivery_cities import DeliveryCity
from dressla.core.database.entities.orders import Order
from dressla.core.database.entities.transactions import Transaction
from dressla.core.database.entities.users import User
from dressla.core.models.domain.enums import ChatStatus, OrderStatus, Role, TransactionType


async def _user(repos, email, role=Role.USER):
    return await repos.users.create(User(email=email, role=role))


class TestTransactionRepository:
    async def test_revenue_and_existence(self, repos, session):
        seller = await _user(repos, "seller@example.com")
        order = await repos.orders.create(Order(total=150.0))
        session.add(Transaction(user_id=seller.id, order_id=order.id, type=TransactionType.SALE, total=100.0))
        session.add(Transaction(user_id=seller.id, order_id=order.id, type=TransactionType.RENT, total=50.0))
        await session.commit()

        assert await repos.transactions.revenue_for(seller.id) == 150.0
        assert await repos.transactions.exists(seller.id, order.id, TransactionType.SALE)
        assert len(await repos.transactions.list_for_user(seller.id, order_id=order.id)) == 2

        removed = await repos.transactions.delete_for_seller_order(seller.id, order.id)
        await session.commit()

        assert removed == 2
        assert await repos.transactions.revenue_for(seller.id) == 0.0


class TestOrderRepository:
    async def test_revenue_counts_paid_orders(self, repos):
        await repos.orders.create(Order(total=100.0, status=OrderStatus.PAID))
        await repos.orders.create(Order(total=40.0, status=OrderStatus.PAID))
        await repos.orders.create(Order(total=999.0, status=OrderStatus.PENDING))

        assert await repos.orders.revenue_sum() == 140.0
        assert len(await repos.orders.list_all(status=OrderStatus.PENDING)) == 1

    async def test_lookup_by_payment_id(self, repos):
        order = await repos.orders.create(Order(total=10.0, payment_id="bog-1"))

        assert (await repos.orders.get_by_payment_id("bog-1")).id == order.id
        assert await repos.orders.get_by_payment_id("missing") is None


class TestChatRepository:
    async def test_support_rooms_and_unread_counts(self, repos, session):
        user = await _user(repos, "buyer@example.com")
        admin = await _user(repos, "admin@example.com", role=Role.ADMIN)
        seller = await _user(repos, "seller@example.com")
        support_room = await repos.chat.create(ChatRoom(user_id=user.id, admin_id=admin.id, status=ChatStatus.ACTIVE))
        seller_room = await repos.chat.create(ChatRoom(user_id=user.id, admin_id=seller.id, product_id=None))
        await repos.chat.add_message(ChatMessage(room_id=support_room.id, content="hello", user_id=user.id))
        await repos.chat.add_message(ChatMessage(room_id=support_room.id, content="hi", is_from_admin=True))
        await session.commit()

        rooms, total = await repos.chat.admin_rooms()

        assert [room.id for room in rooms] == [support_room.id]
        assert total == 1
        assert await repos.chat.unread_for_admin() == 1
        assert await repos.chat.unread_by_room([support_room.id], from_admin=True) == {support_room.id: 1}
        assert {room.id for room in await repos.chat.rooms_for_user(seller.id)} == {seller_room.id}

        await repos.chat.mark_read(support_room.id, from_admin=False)
        await session.commit()

        assert await repos.chat.unread_for_admin() == 0
        assert (await repos.chat.last_messages([support_room.id]))[support_room.id].content == "hi"


class TestDeliveryCityRepository:
    async def test_inactive_cities_and_name_clash(self, repos):
        tbilisi = await repos.delivery_cities.create(DeliveryCity(name="Tbilisi", price=5.0))
        await repos.delivery_cities.create(DeliveryCity(name="Batumi", price=10.0, is_active=False))

        assert [c.name for c in await repos.delivery_cities.list_cities()] == ["Tbilisi"]
        assert len(await repos.delivery_cities.list_cities(include_inactive=True)) == 2
        assert await repos.delivery_cities.name_taken(" tbilisi ")
        assert not await repos.delivery_cities.name_taken("Tbilisi", exclude_city_id=tbilisi.id)
