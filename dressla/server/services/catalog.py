"""
Product presentation helpers shared by the catalog, seller and admin routers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from dressla.core.database.entities.catalog import Product, ProductImage, ProductVariant, RentalPriceTier
from dressla.core.database.repositories import SqlRepoBundle
from dressla.core.models.io.products import (
    ProductDetail,
    ProductImageRead,
    ProductRead,
    ProductRentalStatus,
    ProductVariantRead,
    RentalPriceTierRead,
)
from dressla.marketplace.catalog_filters import CatalogEntry
from dressla.marketplace.discounts import process_expired_discount
from dressla.marketplace.rental_availability import (
    VariantRentalStatus,
    group_active_rentals_by_variant,
    index_periods_by_size,
)


def to_detail(
    product: Product,
    images: Sequence[ProductImage] = (),
    variants: Sequence[ProductVariant] = (),
    tiers: Sequence[RentalPriceTier] = (),
) -> ProductDetail:
    return ProductDetail(
        **ProductRead.model_validate(product).model_dump(),
        images=[ProductImageRead.model_validate(image) for image in images],
        variants=[ProductVariantRead.model_validate(variant) for variant in variants],
        rental_price_tiers=[RentalPriceTierRead.model_validate(tier) for tier in tiers],
    )


async def rental_statuses(
    repos: SqlRepoBundle,
    products: Sequence[Product],
    variants: Optional[Dict[int, List[ProductVariant]]] = None,
    not_ended_before: Optional[datetime] = None,
) -> Dict[int, List[VariantRentalStatus]]:
    """Per-variant active rentals of each rentable product."""
    rentable = [product.id for product in products if product.is_rentable and product.id is not None]
    if not rentable:
        return {}
    if variants is None:
        variants = await repos.products.variants_for(rentable)
    periods = await repos.rentals.active_periods(rentable, not_ended_before)
    return {
        product_id: group_active_rentals_by_variant(
            variants.get(product_id, []), index_periods_by_size(periods.get(product_id, []))
        )
        for product_id in rentable
    }


async def build_entries(
    repos: SqlRepoBundle,
    products: Sequence[Product],
    with_rental_status: bool = False,
) -> List[CatalogEntry]:
    """Load images, variants and optionally rental status for ``products``.

    Expired discounts are cleared on the returned objects only.
    """
    ids = [product.id for product in products if product.id is not None]
    images = await repos.products.images_for(ids)
    variants = await repos.products.variants_for(ids)
    statuses: Dict[int, List[VariantRentalStatus]] = {}
    if with_rental_status:
        statuses = await rental_statuses(repos, products, variants)
    entries = []
    for product in products:
        process_expired_discount(product)
        entries.append(
            CatalogEntry(
                product=product,
                variants=variants.get(product.id, []),  # type: ignore[arg-type]
                images=images.get(product.id, []),  # type: ignore[arg-type]
                rental_status=statuses.get(product.id, []),  # type: ignore[arg-type]
            )
        )
    return entries


def entry_detail(entry: CatalogEntry) -> ProductDetail:
    return to_detail(entry.product, entry.images, entry.variants)


async def product_details(repos: SqlRepoBundle, products: Sequence[Product]) -> List[ProductDetail]:
    """Full product views with images, variants and rental tiers."""
    ids = [product.id for product in products if product.id is not None]
    images = await repos.products.images_for(ids)
    variants = await repos.products.variants_for(ids)
    tiers = await repos.products.tiers_for(ids)
    details = []
    for product in products:
        process_expired_discount(product)
        details.append(
            to_detail(
                product,
                images.get(product.id, []),  # type: ignore[arg-type]
                variants.get(product.id, []),  # type: ignore[arg-type]
                tiers.get(product.id, []),  # type: ignore[arg-type]
            )
        )
    return details


def rental_status_payload(product: Product, statuses: Sequence[VariantRentalStatus]) -> ProductRentalStatus:
    return ProductRentalStatus.model_validate(
        {
            "product_id": product.id,
            "is_rentable": product.is_rentable,
            "variants": [status.as_dict() for status in statuses],
        }
    )
