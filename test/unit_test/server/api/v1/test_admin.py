"""Tests for the back-office endpoints."""

import pytest

from dressla.core.database.entities.users import VerificationDocument
from dressla.core.models.domain.enums import ApprovalStatus, OrderStatus


@pytest.fixture
def documents(session):
    async def _make(owner):
        document = VerificationDocument(
            user_id=owner.id,
            id_front_url="https://cdn.example.com/front.jpg",
            entrepreneur_certificate_url="https://cdn.example.com/cert.pdf",
        )
        session.add(document)
        await session.commit()
        return document

    return _make


class TestStats:
    async def test_counts_and_paid_revenue(self, client, user, admin, make_product, make_order, auth_headers):
        product = await make_product()
        await make_order(user, [(product, 80.0, False)], status=OrderStatus.PAID)
        await make_order(user, [(product, 50.0, False)], status=OrderStatus.PENDING)

        response = await client.get("/api/v1/admin/stats", headers=auth_headers(admin))

        assert response.json() == {"products": 1, "users": 1, "orders": 2, "revenue": 80.0}

    async def test_support_is_not_allowed(self, client, support, auth_headers):
        response = await client.get("/api/v1/admin/stats", headers=auth_headers(support))

        assert response.status_code == 403


class TestUsers:
    async def test_list_with_counts_and_search(
        self, client, user, seller, support, make_product, make_order, documents, auth_headers
    ):
        product = await make_product(owner=seller)
        await make_order(user, [(product, 80.0, False)])
        await documents(seller)

        everyone = await client.get("/api/v1/admin/users", headers=auth_headers(support))
        found = await client.get("/api/v1/admin/users", params={"search": "giorgi"}, headers=auth_headers(support))

        by_id = {entry["id"]: entry for entry in everyone.json()["users"]}
        assert by_id[seller.id]["product_count"] == 1
        assert by_id[seller.id]["verification"]["identity_status"] == "PENDING"
        assert by_id[user.id]["order_count"] == 1
        assert [entry["id"] for entry in found.json()["users"]] == [seller.id]

    async def test_get_missing_user(self, client, support, auth_headers):
        response = await client.get("/api/v1/admin/users/nope", headers=auth_headers(support))

        assert response.status_code == 404

    async def test_support_bans_and_unbans(self, client, user, support, auth_headers):
        url = f"/api/v1/admin/users/{user.id}/ban"

        banned = await client.put(url, json={"banned": True, "reason": "Fraud"}, headers=auth_headers(support))
        unbanned = await client.put(url, json={"banned": False, "reason": "ignored"}, headers=auth_headers(support))

        assert banned.json()["banned"] is True
        assert banned.json()["ban_reason"] == "Fraud"
        assert unbanned.json()["banned"] is False
        assert unbanned.json()["ban_reason"] is None

    async def test_cannot_ban_yourself(self, client, support, auth_headers):
        response = await client.put(
            f"/api/v1/admin/users/{support.id}/ban", json={"banned": True}, headers=auth_headers(support)
        )

        assert response.status_code == 400

    async def test_change_role(self, client, user, admin, auth_headers):
        promoted = await client.put(
            f"/api/v1/admin/users/{user.id}/role", json={"role": "ADMIN"}, headers=auth_headers(admin)
        )
        to_support = await client.put(
            f"/api/v1/admin/users/{user.id}/role", json={"role": "SUPPORT"}, headers=auth_headers(admin)
        )
        own = await client.put(
            f"/api/v1/admin/users/{admin.id}/role", json={"role": "USER"}, headers=auth_headers(admin)
        )

        assert promoted.json()["role"] == "ADMIN"
        assert to_support.status_code == 422
        assert own.status_code == 400

    async def test_user_products(self, client, seller, support, make_product, auth_headers):
        await make_product(owner=seller, approval_status=ApprovalStatus.PENDING)

        response = await client.get(f"/api/v1/admin/users/{seller.id}/products", headers=auth_headers(support))

        assert len(response.json()) == 1


class TestVerificationReview:
    async def test_identity_approval_verifies_user(self, client, repos, seller, admin, documents, auth_headers):
        await documents(seller)

        response = await client.put(
            f"/api/v1/admin/users/{seller.id}/identity", json={"status": "APPROVED"}, headers=auth_headers(admin)
        )

        assert response.json()["identity_status"] == "APPROVED"
        assert (await repos.users.get_by_id(seller.id)).verified is True

    async def test_rejection_keeps_comment(self, client, seller, admin, documents, auth_headers):
        await documents(seller)

        response = await client.put(
            f"/api/v1/admin/users/{seller.id}/identity",
            json={"status": "REJECTED", "comment": "Blurry photo"},
            headers=auth_headers(admin),
        )

        assert response.json()["identity_comment"] == "Blurry photo"

    async def test_entrepreneur_approval_lifts_block(
        self, client, repos, make_user, admin, documents, auth_headers
    ):
        blocked = await make_user(blocked=True)
        await documents(blocked)

        response = await client.put(
            f"/api/v1/admin/users/{blocked.id}/entrepreneur", json={"status": "APPROVED"}, headers=auth_headers(admin)
        )

        assert response.json()["entrepreneur_status"] == "APPROVED"
        assert (await repos.users.get_by_id(blocked.id)).blocked is False

    async def test_missing_documents(self, client, user, admin, auth_headers):
        response = await client.put(
            f"/api/v1/admin/users/{user.id}/identity", json={"status": "APPROVED"}, headers=auth_headers(admin)
        )

        assert response.status_code == 404


class TestProductApproval:
    async def test_approve(self, client, admin, make_product, auth_headers):
        product = await make_product(approval_status=ApprovalStatus.PENDING)

        response = await client.patch(
            f"/api/v1/admin/products/{product.id}/approval", json={"status": "APPROVED"}, headers=auth_headers(admin)
        )

        assert response.json()["approval_status"] == "APPROVED"
        assert response.json()["approved_at"] is not None
        assert (await client.get(f"/api/v1/products/{product.id}")).status_code == 200

    async def test_reject_needs_reason(self, client, admin, make_product, auth_headers):
        product = await make_product(approval_status=ApprovalStatus.PENDING)
        url = f"/api/v1/admin/products/{product.id}/approval"

        missing = await client.patch(
            url, json={"status": "REJECTED", "rejection_reason": "  "}, headers=auth_headers(admin)
        )
        rejected = await client.patch(
            url, json={"status": "REJECTED", "rejection_reason": "Photos missing"}, headers=auth_headers(admin)
        )

        assert missing.status_code == 400
        assert rejected.json()["rejection_reason"] == "Photos missing"
        assert rejected.json()["approved_at"] is None


class TestAdminProfile:
    async def test_change_password(self, client, admin, auth_headers):
        wrong = await client.put(
            "/api/v1/admin/password",
            json={"current_password": "nope", "new_password": "brand-new"},
            headers=auth_headers(admin),
        )
        changed = await client.put(
            "/api/v1/admin/password",
            json={"current_password": "secret123", "new_password": "brand-new"},
            headers=auth_headers(admin),
        )
        login = await client.post("/api/v1/auth/login", json={"email": admin.email, "password": "brand-new"})

        assert wrong.status_code == 400
        assert changed.json() == {"message": "Password updated"}
        assert login.status_code == 200

    async def test_profile_update(self, client, admin, user, auth_headers):
        clash = await client.put("/api/v1/admin/profile", json={"email": user.email}, headers=auth_headers(admin))
        renamed = await client.put("/api/v1/admin/profile", json={"name": "Head Admin"}, headers=auth_headers(admin))
        profile = await client.get("/api/v1/admin/profile", headers=auth_headers(admin))

        assert clash.status_code == 409
        assert renamed.json()["name"] == "Head Admin"
        assert profile.json()["role"] == "ADMIN"
