"""Tests for checkout and order management endpoints."""

from dressla.core.database.entities.carts import Cart, CartItem
from dressla.core.models.domain.enums import OrderStatus, ProductStatus, TransactionType
from dressla.server.services.payment_gateway import PaymentGatewayError
from dressla.server.services.seller_transactions import record_seller_transactions


async def _fill_cart(session, owner, product, price=100.0):
    cart = Cart(user_id=owner.id)
    session.add(cart)
    await session.flush()
    session.add(CartItem(cart_id=cart.id, product_id=product.id, product_name=product.name, price=price))
    await session.commit()


ADDRESS = {"first_name": "Nino", "last_name": "Beridze", "email": "nino@example.com", "phone": "555123456"}


class TestCheckout:
    async def test_card_checkout_returns_redirect(
        self, client, session, user, seller, make_product, gateway, auth_headers
    ):
        product = await make_product(owner=seller)
        await _fill_cart(session, user, product)

        response = await client.post("/api/v1/orders", json={"address": ADDRESS}, headers=auth_headers(user))

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert body["redirect_url"] == "https://payment.bog.ge/?order_id=bog-order-1"
        gateway.create_order.assert_awaited_once()
        assert gateway.create_order.await_args.kwargs["total"] == 100.0

    async def test_blocked_account(self, client, make_user, make_product, session, auth_headers):
        blocked = await make_user(blocked=True)
        await _fill_cart(session, blocked, await make_product())

        response = await client.post("/api/v1/orders", json={}, headers=auth_headers(blocked))

        assert response.status_code == 403
        assert response.json()["blocked"] is True

    async def test_empty_cart(self, client, user, auth_headers):
        response = await client.post("/api/v1/orders", json={}, headers=auth_headers(user))

        assert response.status_code == 400

    async def test_gateway_failure(self, client, session, user, make_product, gateway, repos, auth_headers):
        await _fill_cart(session, user, await make_product())
        gateway.create_order.side_effect = PaymentGatewayError("declined")

        response = await client.post("/api/v1/orders", json={}, headers=auth_headers(user))

        assert response.status_code == 502
        assert await repos.orders.list_for_user(user.id) == []

    async def test_google_pay_needs_token(self, client, user, auth_headers):
        response = await client.post(
            "/api/v1/orders", json={"payment_method": "google_pay"}, headers=auth_headers(user)
        )

        assert response.status_code == 422


class TestMyOrders:
    async def test_lists_own_orders_without_lines_back_on_sale(
        self, client, session, user, seller, make_product, make_order, auth_headers
    ):
        sold = await make_product(owner=seller, status=ProductStatus.RESERVED)
        relisted = await make_product(owner=seller)
        await make_order(user, [(sold, 60.0, False), (relisted, 40.0, False)])
        await make_order(seller, [(relisted, 40.0, False)])

        response = await client.get("/api/v1/orders", headers=auth_headers(user))

        orders = response.json()
        assert len(orders) == 1
        assert [item["product_id"] for item in orders[0]["items"]] == [sold.id]

    async def test_get_order_of_another_user(self, client, user, seller, make_product, make_order, auth_headers):
        order = await make_order(user, [(await make_product(), 50.0, False)])

        own = await client.get(f"/api/v1/orders/{order.id}", headers=auth_headers(user))
        foreign = await client.get(f"/api/v1/orders/{order.id}", headers=auth_headers(seller))
        missing = await client.get("/api/v1/orders/999", headers=auth_headers(user))

        assert own.status_code == 200
        assert foreign.status_code == 403
        assert missing.status_code == 404


class TestOrderAdministration:
    async def test_marking_paid_books_seller_revenue(
        self, client, repos, user, seller, admin, make_product, make_order, auth_headers
    ):
        product = await make_product(owner=seller)
        order = await make_order(user, [(product, 70.0, False)], status=OrderStatus.PENDING)

        response = await client.patch(
            f"/api/v1/orders/{order.id}", json={"status": "PAID"}, headers=auth_headers(admin)
        )

        assert response.json()["status"] == "PAID"
        entries = await repos.transactions.list_for_user(seller.id)
        assert [(entry.type, entry.total) for entry in entries] == [(TransactionType.SALE, 70.0)]

    async def test_support_cannot_patch_orders(self, client, user, support, make_product, make_order, auth_headers):
        order = await make_order(user, [(await make_product(), 50.0, False)])

        response = await client.patch(
            f"/api/v1/orders/{order.id}", json={"status": "CANCELED"}, headers=auth_headers(support)
        )

        assert response.status_code == 403

    async def test_delete_removes_ledger_entries(
        self, client, session, repos, user, seller, admin, make_product, make_order, auth_headers
    ):
        order = await make_order(user, [(await make_product(owner=seller), 50.0, False)])
        await record_seller_transactions(session, order.id)

        response = await client.delete(f"/api/v1/orders/{order.id}", headers=auth_headers(admin))

        assert response.json() == {"message": "Order deleted"}
        assert await repos.transactions.list_for_user(seller.id) == []

    async def test_staff_list_and_filter(self, client, user, support, make_product, make_order, auth_headers):
        product = await make_product()
        await make_order(user, [(product, 50.0, False)], status=OrderStatus.PAID)
        await make_order(user, [(product, 50.0, False)], status=OrderStatus.PENDING)

        everything = await client.get("/api/v1/admin/orders", headers=auth_headers(support))
        paid = await client.get("/api/v1/admin/orders", params={"status": "PAID"}, headers=auth_headers(support))

        assert len(everything.json()) == 2
        assert [order["status"] for order in paid.json()] == ["PAID"]

    async def test_staff_set_status(self, client, user, support, make_product, make_order, auth_headers):
        order = await make_order(user, [(await make_product(), 50.0, False)], status=OrderStatus.PAID)

        response = await client.patch(
            f"/api/v1/admin/orders/{order.id}/status", json={"status": "SHIPPED"}, headers=auth_headers(support)
        )

        assert response.json()["status"] == "SHIPPED"

    async def test_regular_users_cannot_list(self, client, user, auth_headers):
        response = await client.get("/api/v1/admin/orders", headers=auth_headers(user))

        assert response.status_code == 403
