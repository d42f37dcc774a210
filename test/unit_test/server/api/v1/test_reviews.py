"""Tests for product reviews and admin replies."""

from dressla.core.models.domain.enums import OrderStatus


class TestReviewEligibility:
    async def test_order_renter_may_review(self, client, user, make_product, make_order, auth_headers):
        product = await make_product(is_rentable=True)
        await make_order(user, [(product, 60.0, True)])

        listing = await client.get(f"/api/v1/products/{product.id}/reviews", headers=auth_headers(user))
        created = await client.post(
            f"/api/v1/products/{product.id}/reviews",
            json={"rating": 4, "comment": "Fit well"},
            headers=auth_headers(user),
        )

        assert listing.json()["canReview"] is True
        assert created.status_code == 201
        assert created.json()["user_name"] == "Nino Buyer"

    async def test_buyers_of_canceled_orders_may_not_review(
        self, client, user, make_product, make_order, auth_headers
    ):
        product = await make_product(is_rentable=True)
        await make_order(user, [(product, 60.0, True)], status=OrderStatus.CANCELED)

        response = await client.post(
            f"/api/v1/products/{product.id}/reviews", json={"rating": 5}, headers=auth_headers(user)
        )

        assert response.status_code == 403

    async def test_anonymous_cannot_review(self, client, make_product):
        product = await make_product()

        response = await client.get(f"/api/v1/products/{product.id}/reviews")

        assert response.json() == {"reviews": [], "averageRating": 0.0, "totalReviews": 0, "canReview": False}

    async def test_one_review_per_user(self, client, user, make_product, make_order, auth_headers):
        product = await make_product(is_rentable=True)
        await make_order(user, [(product, 60.0, True)])
        url = f"/api/v1/products/{product.id}/reviews"

        await client.post(url, json={"rating": 4}, headers=auth_headers(user))
        response = await client.post(url, json={"rating": 2}, headers=auth_headers(user))

        assert response.status_code == 400

    async def test_missing_product(self, client, user, auth_headers):
        response = await client.post("/api/v1/products/999/reviews", json={"rating": 4}, headers=auth_headers(user))

        assert response.status_code == 404


class TestRatingAverage:
    async def test_product_rating_follows_reviews(
        self, client, repos, user, make_user, make_product, make_order, auth_headers
    ):
        product = await make_product(is_rentable=True)
        other = await make_user(name="Ana")
        for renter, rating in ((user, 5), (other, 2)):
            await make_order(renter, [(product, 60.0, True)])
            await client.post(
                f"/api/v1/products/{product.id}/reviews", json={"rating": rating}, headers=auth_headers(renter)
            )

        listing = await client.get(f"/api/v1/products/{product.id}/reviews")

        assert listing.json()["totalReviews"] == 2
        assert listing.json()["averageRating"] == 3.5
        assert (await repos.products.get_by_id(product.id)).rating == 3.5


class TestReplies:
    async def test_admin_reply_lifecycle(self, client, user, admin, make_product, make_order, auth_headers):
        product = await make_product(is_rentable=True)
        await make_order(user, [(product, 60.0, True)])
        review = (
            await client.post(
                f"/api/v1/products/{product.id}/reviews", json={"rating": 5}, headers=auth_headers(user)
            )
        ).json()
        url = f"/api/v1/products/{product.id}/reviews/reply"

        await client.post(url, json={"review_id": review["id"], "comment": "Thanks!"}, headers=auth_headers(admin))
        replaced = await client.post(
            url, json={"review_id": review["id"], "comment": "Thank you!"}, headers=auth_headers(admin)
        )
        listing = await client.get(f"/api/v1/products/{product.id}/reviews")
        deleted = await client.delete(url, params={"reviewId": review["id"]}, headers=auth_headers(admin))

        assert replaced.json()["comment"] == "Thank you!"
        assert listing.json()["reviews"][0]["reply"]["comment"] == "Thank you!"
        assert deleted.json() == {"message": "Reply deleted"}

    async def test_reply_to_review_of_other_product(
        self, client, user, admin, make_product, make_order, auth_headers
    ):
        product = await make_product(is_rentable=True)
        other = await make_product()
        await make_order(user, [(product, 60.0, True)])
        review = (
            await client.post(
                f"/api/v1/products/{product.id}/reviews", json={"rating": 5}, headers=auth_headers(user)
            )
        ).json()

        response = await client.post(
            f"/api/v1/products/{other.id}/reviews/reply",
            json={"review_id": review["id"], "comment": "Hi"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 400

    async def test_non_admins_cannot_reply(self, client, user, make_product, auth_headers):
        product = await make_product()

        response = await client.post(
            f"/api/v1/products/{product.id}/reviews/reply",
            json={"review_id": 1, "comment": "Hi"},
            headers=auth_headers(user),
        )

        assert response.status_code == 403

    async def test_delete_missing_reply(self, client, admin, make_product, auth_headers):
        product = await make_product()

        response = await client.delete(
            f"/api/v1/products/{product.id}/reviews/reply", params={"reviewId": 42}, headers=auth_headers(admin)
        )

        assert response.status_code == 404
