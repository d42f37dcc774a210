"""
Product catalog repositories.

Data access for categories, product listings and the rows hanging off a
product (images, size variants and rental price tiers).
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from dressla.core.models.domain.enums import ApprovalStatus, Gender, ProductStatus, Purpose
from dressla.marketplace.discounts import clear_discount, is_discount_expired

from ..entities.carts import CartItem
from ..entities.catalog import (
    Category,
    Product,
    ProductImage,
    ProductVariant,
    RentalPriceTier,
)
from ..entities.orders import OrderItem
from ..entities.reviews import Review, ReviewReply
from .base import SQLModelRepository

SIMILAR_PRODUCTS_LIMIT = 8


class CategoryRepository(SQLModelRepository[Category]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Category)

    async def list_all(self) -> List[Category]:
        result = await self.session.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

    async def get_by_name(self, name: str) -> Optional[Category]:
        result = await self.session.execute(select(Category).where(Category.name == name))
        return result.scalars().first()

    async def get_by_slug(self, slug: str) -> Optional[Category]:
        result = await self.session.execute(select(Category).where(Category.slug == slug))
        return result.scalars().first()


class ProductRepository(SQLModelRepository[Product]):
    """Repository for product listings and their child rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Product)

    async def get_by_sku(self, sku: str) -> Optional[Product]:
        result = await self.session.execute(select(Product).where(Product.sku == sku))
        return result.scalars().first()

    async def slug_exists(self, slug: str, exclude_product_id: Optional[int] = None) -> bool:
        stmt = select(Product.id).where(Product.slug == slug)
        if exclude_product_id is not None:
            stmt = stmt.where(Product.id != exclude_product_id)
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def sku_exists(self, sku: str) -> bool:
        result = await self.session.execute(select(Product.id).where(Product.sku == sku))
        return result.first() is not None

    async def list_catalog(
        self,
        category_id: Optional[int] = None,
        gender: Optional[Gender] = None,
        purpose: Optional[Purpose] = None,
        is_rentable: Optional[bool] = None,
        approved_only: bool = True,
    ) -> List[Product]:
        """Column-level catalog filters. Variant-dependent criteria are applied by the caller."""
        stmt = select(Product).order_by(Product.created_at.desc())  # type: ignore[attr-defined]
        if approved_only:
            stmt = stmt.where(Product.approval_status == ApprovalStatus.APPROVED)
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        if gender is not None:
            stmt = stmt.where(Product.gender == gender)
        if purpose is not None:
            stmt = stmt.where(Product.purpose == purpose)
        if is_rentable is not None:
            stmt = stmt.where(Product.is_rentable == is_rentable)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_user(self, user_id: str, public_only: bool = False) -> List[Product]:
        stmt = (
            select(Product)
            .where(Product.user_id == user_id)
            .order_by(Product.created_at.desc())  # type: ignore[attr-defined]
        )
        if public_only:
            stmt = stmt.where(
                Product.approval_status == ApprovalStatus.APPROVED,
                Product.status == ProductStatus.AVAILABLE,
            )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_similar(self, product: Product, limit: int = SIMILAR_PRODUCTS_LIMIT) -> List[Product]:
        """Approved listings in the same category and gender, newest first."""
        stmt = (
            select(Product)
            .where(
                Product.id != product.id,
                Product.category_id == product.category_id,
                Product.gender == product.gender,
                Product.approval_status == ApprovalStatus.APPROVED,
            )
            .order_by(Product.created_at.desc())  # type: ignore[attr-defined]
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def seller_map(self, product_ids: Sequence[int]) -> Dict[int, Optional[str]]:
        if not product_ids:
            return {}
        stmt = select(Product.id, Product.user_id).where(Product.id.in_(list(product_ids)))  # type: ignore[union-attr]
        result = await self.session.execute(stmt)
        return {product_id: user_id for product_id, user_id in result.all()}

    async def clear_expired_discounts(self, products: Sequence[Product], now: Optional[datetime] = None) -> int:
        """Persist the removal of expired discounts. Returns how many were cleared."""
        cleared = 0
        for product in products:
            if is_discount_expired(product, now):
                clear_discount(product)
                self.session.add(product)
                cleared += 1
        if cleared:
            await self.session.commit()
        return cleared

    # Child rows

    async def images_for(self, product_ids: Sequence[int]) -> Dict[int, List[ProductImage]]:
        grouped: Dict[int, List[ProductImage]] = defaultdict(list)
        if not product_ids:
            return grouped
        stmt = (
            select(ProductImage)
            .where(ProductImage.product_id.in_(list(product_ids)))  # type: ignore[attr-defined]
            .order_by(ProductImage.position)
        )
        for image in (await self.session.execute(stmt)).scalars().all():
            grouped[image.product_id].append(image)
        return grouped

    async def variants_for(self, product_ids: Sequence[int]) -> Dict[int, List[ProductVariant]]:
        grouped: Dict[int, List[ProductVariant]] = defaultdict(list)
        if not product_ids:
            return grouped
        stmt = (
            select(ProductVariant)
            .where(ProductVariant.product_id.in_(list(product_ids)))  # type: ignore[attr-defined]
            .order_by(ProductVariant.id)
        )
        for variant in (await self.session.execute(stmt)).scalars().all():
            grouped[variant.product_id].append(variant)
        return grouped

    async def tiers_for(self, product_ids: Sequence[int]) -> Dict[int, List[RentalPriceTier]]:
        grouped: Dict[int, List[RentalPriceTier]] = defaultdict(list)
        if not product_ids:
            return grouped
        stmt = (
            select(RentalPriceTier)
            .where(RentalPriceTier.product_id.in_(list(product_ids)))  # type: ignore[attr-defined]
            .order_by(RentalPriceTier.min_days)
        )
        for tier in (await self.session.execute(stmt)).scalars().all():
            grouped[tier.product_id].append(tier)
        return grouped

    async def get_variant(self, variant_id: int) -> Optional[ProductVariant]:
        return await self.session.get(ProductVariant, variant_id)

    async def replace_images(self, product_id: int, images: Sequence[dict]) -> None:
        await self.session.execute(delete(ProductImage).where(ProductImage.product_id == product_id))
        for position, image in enumerate(images):
            self.session.add(ProductImage(product_id=product_id, position=position, **image))

    async def replace_variants(self, product_id: int, variants: Sequence[dict]) -> None:
        await self.session.execute(delete(ProductVariant).where(ProductVariant.product_id == product_id))
        for variant in variants:
            self.session.add(ProductVariant(product_id=product_id, **variant))

    async def replace_tiers(self, product_id: int, tiers: Sequence[dict]) -> None:
        await self.session.execute(delete(RentalPriceTier).where(RentalPriceTier.product_id == product_id))
        for tier in tiers:
            self.session.add(RentalPriceTier(product_id=product_id, **tier))

    async def delete_with_children(self, product: Product) -> None:
        """Remove a listing. Order history keeps its snapshot with the product detached."""
        await self.session.execute(
            update(OrderItem).where(OrderItem.product_id == product.id).values(product_id=None)
        )
        await self.session.execute(delete(CartItem).where(CartItem.product_id == product.id))
        review_ids = select(Review.id).where(Review.product_id == product.id)
        await self.session.execute(delete(ReviewReply).where(ReviewReply.review_id.in_(review_ids)))  # type: ignore[attr-defined]
        await self.session.execute(delete(Review).where(Review.product_id == product.id))
        for child in (ProductImage, ProductVariant, RentalPriceTier):
            await self.session.execute(delete(child).where(child.product_id == product.id))  # type: ignore[attr-defined]
        await self.session.delete(product)
        await self.session.commit()
