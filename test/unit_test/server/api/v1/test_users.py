"""Tests for the signed-in user's account endpoints."""

from dressla.core.database.entities.orders import Order, OrderItem
from dressla.core.models.domain.enums import VerificationStatus


class TestProfile:
    async def test_requires_authentication(self, client):
        response = await client.get("/api/v1/user/me")

        assert response.status_code == 401

    async def test_update_profile(self, client, user, auth_headers):
        response = await client.put(
            "/api/v1/user/profile",
            json={"name": "Nino B.", "phone": "+995555000111"},
            headers=auth_headers(user),
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Nino B."
        assert response.json()["email"] == user.email

    async def test_email_clash(self, client, user, seller, auth_headers):
        response = await client.put(
            "/api/v1/user/profile", json={"email": seller.email.upper()}, headers=auth_headers(user)
        )

        assert response.status_code == 409


class TestVerification:
    async def test_no_documents_yet(self, client, user, auth_headers):
        response = await client.get("/api/v1/user/verification", headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json() is None

    async def test_upload_documents_and_iban(self, client, session, user, auth_headers):
        response = await client.put(
            "/api/v1/user/verification",
            json={"id_front_url": "https://cdn/front.jpg", "iban": "ge29 nb00 0000 0101 9049 17"},
            headers=auth_headers(user),
        )

        assert response.status_code == 200
        assert response.json()["identity_status"] == VerificationStatus.PENDING.value
        await session.refresh(user)
        assert user.iban == "GE29NB0000000101904917"


class TestSellerListings:
    async def test_my_products_include_pending(self, client, seller, make_product, auth_headers):
        from dressla.core.models.domain.enums import ApprovalStatus

        await make_product(owner=seller, approval_status=ApprovalStatus.PENDING)
        await make_product(owner=seller)

        response = await client.get("/api/v1/user/products", headers=auth_headers(seller))

        assert response.status_code == 200
        assert len(response.json()) == 2

    async def test_product_by_sku(self, client, user, seller, make_product, auth_headers):
        product = await make_product(owner=seller)

        own = await client.get(f"/api/v1/user/products/sku/{product.sku}", headers=auth_headers(seller))
        foreign = await client.get(f"/api/v1/user/products/sku/{product.sku}", headers=auth_headers(user))
        missing = await client.get("/api/v1/user/products/sku/nope", headers=auth_headers(seller))

        assert own.status_code == 200
        assert own.json()["id"] == product.id
        assert foreign.status_code == 403
        assert missing.status_code == 404

    async def test_sales_only_list_own_items(self, client, session, user, seller, make_product, auth_headers):
        mine = await make_product(owner=seller)
        other = await make_product()
        order = Order(user_id=user.id, total=150.0)
        session.add(order)
        await session.flush()
        session.add(OrderItem(order_id=order.id, product_id=mine.id, product_name=mine.name, price=100.0))
        session.add(OrderItem(order_id=order.id, product_id=other.id, product_name=other.name, price=50.0))
        await session.commit()

        response = await client.get("/api/v1/user/sales", headers=auth_headers(seller))

        sales = response.json()
        assert len(sales) == 1
        assert [item["product_id"] for item in sales[0]["items"]] == [mine.id]


class TestCookieConsent:
    async def test_save_and_read(self, client, user, auth_headers):
        consent = {"essential": True, "performance": True, "functional": False, "targeting": False, "analytics": True}

        saved = await client.post("/api/v1/user/cookie-consent", json=consent, headers=auth_headers(user))
        read = await client.get("/api/v1/user/cookie-consent", headers=auth_headers(user))

        assert saved.status_code == 200
        assert read.json()["analytics"] is True
        assert read.json()["functional"] is False
