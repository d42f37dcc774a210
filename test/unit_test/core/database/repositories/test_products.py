"""Tests for the catalog repositories."""

from datetime import datetime

import pytest_asyncio

from dressla.core.database.entities.carts import Cart, CartItem
from dressla.core.database.entities.catalog import Category, Product
from dressla.core.database.entities.orders import Order, OrderItem
from dressla.core.database.entities.users import User
from dressla.core.models.domain.enums import ApprovalStatus, Gender, ProductStatus


@pytest_asyncio.fixture
async def seller(repos):
    return await repos.users.create(User(email="seller@example.com", name="Seller"))


@pytest_asyncio.fixture
async def category(repos):
    return await repos.categories.create(Category(name="Dresses", slug="dresses"))


async def _product(repos, slug, **fields):
    fields.setdefault("approval_status", ApprovalStatus.APPROVED)
    return await repos.products.create(Product(name=slug.title(), slug=slug, **fields))


class TestCategoryRepository:
    async def test_lookups(self, repos, category):
        await repos.categories.create(Category(name="Accessories", slug="accessories"))

        assert [c.name for c in await repos.categories.list_all()] == ["Accessories", "Dresses"]
        assert (await repos.categories.get_by_slug("dresses")).id == category.id
        assert (await repos.categories.get_by_name("Dresses")).id == category.id


class TestProductRepository:
    async def test_catalog_hides_unapproved(self, repos):
        await _product(repos, "approved")
        await _product(repos, "pending", approval_status=ApprovalStatus.PENDING)

        public = await repos.products.list_catalog()
        everything = await repos.products.list_catalog(approved_only=False)

        assert [p.slug for p in public] == ["approved"]
        assert len(everything) == 2

    async def test_catalog_column_filters(self, repos, category):
        await _product(repos, "rentable-dress", category_id=category.id, gender=Gender.WOMEN, is_rentable=True)
        await _product(repos, "suit", gender=Gender.MEN)

        found = await repos.products.list_catalog(category_id=category.id, is_rentable=True)

        assert [p.slug for p in found] == ["rentable-dress"]

    async def test_slug_and_sku_checks(self, repos):
        product = await _product(repos, "red-dress", sku="1234")

        assert await repos.products.slug_exists("red-dress")
        assert not await repos.products.slug_exists("red-dress", exclude_product_id=product.id)
        assert await repos.products.sku_exists("1234")
        assert (await repos.products.get_by_sku("1234")).id == product.id

    async def test_public_listing_of_a_seller(self, repos, seller):
        await _product(repos, "live", user_id=seller.id)
        await _product(repos, "sold", user_id=seller.id, status=ProductStatus.RESERVED)
        await _product(repos, "waiting", user_id=seller.id, approval_status=ApprovalStatus.PENDING)

        public = await repos.products.list_by_user(seller.id, public_only=True)
        own = await repos.products.list_by_user(seller.id)

        assert [p.slug for p in public] == ["live"]
        assert len(own) == 3

    async def test_similar_products(self, repos, category):
        base = await _product(repos, "base", category_id=category.id, gender=Gender.WOMEN)
        await _product(repos, "same", category_id=category.id, gender=Gender.WOMEN)
        await _product(repos, "other-gender", category_id=category.id, gender=Gender.MEN)

        assert [p.slug for p in await repos.products.list_similar(base)] == ["same"]

    async def test_children_are_replaced(self, repos, session):
        product = await _product(repos, "dress")
        await repos.products.replace_variants(product.id, [{"size": "S", "price": 50.0, "stock": 1}])
        await repos.products.replace_tiers(
            product.id, [{"min_days": 7, "price_per_day": 9.0}, {"min_days": 1, "price_per_day": 12.0}]
        )
        await repos.products.replace_images(product.id, [{"url": "a.jpg"}, {"url": "b.jpg"}])
        await session.commit()

        await repos.products.replace_variants(product.id, [{"size": "M", "price": 60.0, "stock": 2}])
        await session.commit()

        variants = (await repos.products.variants_for([product.id]))[product.id]
        tiers = (await repos.products.tiers_for([product.id]))[product.id]
        images = (await repos.products.images_for([product.id]))[product.id]
        assert [v.size for v in variants] == ["M"]
        assert [t.min_days for t in tiers] == [1, 7]
        assert [(i.url, i.position) for i in images] == [("a.jpg", 0), ("b.jpg", 1)]

    async def test_clear_expired_discounts(self, repos):
        expired = await _product(
            repos, "expired", discount=10.0, discount_days=3, discount_start_date=datetime(2026, 1, 1)
        )
        running = await _product(
            repos, "running", discount=5.0, discount_days=30, discount_start_date=datetime(2026, 1, 1)
        )

        cleared = await repos.products.clear_expired_discounts([expired, running], now=datetime(2026, 1, 10))

        assert cleared == 1
        assert (await repos.products.get_by_id(expired.id)).discount is None
        assert (await repos.products.get_by_id(running.id)).discount == 5.0

    async def test_delete_keeps_order_history(self, repos, session, seller):
        product = await _product(repos, "dress", user_id=seller.id)
        await repos.products.replace_variants(product.id, [{"size": "M", "price": 60.0, "stock": 1}])
        cart = Cart(user_id=seller.id)
        session.add(cart)
        await session.flush()
        session.add(CartItem(cart_id=cart.id, product_id=product.id, product_name="Dress", price=60.0))
        order = Order(user_id=seller.id, total=60.0)
        session.add(order)
        await session.flush()
        session.add(OrderItem(order_id=order.id, product_id=product.id, product_name="Dress", price=60.0))
        await session.commit()
        product_id, order_id, cart_id = product.id, order.id, cart.id

        await repos.products.delete_with_children(product)
        session.expire_all()

        assert await repos.products.get_by_id(product_id) is None
        items = (await repos.orders.items_for([order_id]))[order_id]
        assert items[0].product_id is None
        assert items[0].product_name == "Dress"
        assert await repos.carts.items(cart_id) == []
