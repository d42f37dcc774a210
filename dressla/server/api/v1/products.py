"""
API endpoints for the product catalog.

Browsing with multi-criteria filters, product CRUD for sellers and admins,
and the rental pricing and availability views of rentable products.

Static paths (``/rental-status``, ``/sku/{sku}``) are declared before
``/{product_id}`` so they are not captured by the id route.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import ValidationError

from dressla.core.database.entities.catalog import Product
from dressla.core.database.entities.users import User
from dressla.core.logging_config import get_logger
from dressla.core.models.domain.enums import ApprovalStatus, Gender, Purpose
from dressla.core.models.io.common import MessageResponse, Pagination
from dressla.core.models.io.products import (
    ProductCreate,
    ProductDetail,
    ProductList,
    ProductRentalStatus,
    ProductUpdate,
    RentalPriceTierRead,
    RentalPriceTiersUpdate,
    RentalQuoteRead,
)
from dressla.marketplace.catalog_filters import (
    CatalogFilter,
    CatalogSort,
    filter_entries,
    paginate,
    sort_entries,
)
from dressla.marketplace.rental_pricing import calculate_rental_price
from dressla.marketplace.roles import is_admin, is_admin_or_support
from dressla.marketplace.sku import generate_unique_sku
from dressla.marketplace.slugs import ensure_unique_slug
from dressla.server.core.config import settings
from dressla.server.services.catalog import (
    build_entries,
    entry_detail,
    product_details,
    rental_status_payload,
    rental_statuses,
)
from dressla.server.services.deps import AdminDep, CurrentUserDep, OptionalUserDep, ReposDep

logger = get_logger(__name__)

router = APIRouter(tags=["products"])

_CHILD_FIELDS = {"images", "variants", "rental_price_tiers", "slug"}


def _split_values(values: Optional[List[str]]) -> List[str]:
    """Accept both repeated (``?size=S&size=M``) and comma-separated (``?size=S,M``) values."""
    parsed: List[str] = []
    for value in values or []:
        parsed.extend(part.strip() for part in value.split(",") if part.strip())
    return parsed


def _is_visible(product: Product, user: Optional[User]) -> bool:
    if product.approval_status == ApprovalStatus.APPROVED:
        return True
    if user is None:
        return False
    return product.user_id == user.id or is_admin_or_support(user.role)


async def _get_visible_product(repos, product_id: int, user: Optional[User]) -> Product:
    product = await repos.products.get_by_id(product_id)
    if product is None or not _is_visible(product, user):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


async def _get_editable_product(repos, product_id: int, user: User) -> Product:
    product = await repos.products.get_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    if product.user_id != user.id and not is_admin(user.role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return product


@router.get(
    "",
    response_model=ProductList,
    summary="Browse Catalog",
    description="List products matching the shop filters, sorted and paginated.",
    response_description="One page of products and the pagination summary.",
    responses={
        200: {"description": "Products retrieved successfully"},
        400: {"description": "Invalid filter values"},
    },
)
async def list_products(
    repos: ReposDep,
    user: OptionalUserDep,
    category_id: Optional[int] = None,
    gender: Optional[Gender] = None,
    purpose: Optional[Purpose] = None,
    is_rentable: Optional[bool] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    size: Optional[List[str]] = Query(default=None),
    color: Optional[List[str]] = Query(default=None),
    location: Optional[List[str]] = Query(default=None),
    rating: Optional[List[str]] = Query(default=None),
    rental_start: Optional[datetime] = None,
    rental_end: Optional[datetime] = None,
    sort: CatalogSort = CatalogSort.newest,
    page: int = 1,
    limit: Optional[int] = None,
    include_pending: bool = False,
) -> ProductList:
    """
    Browse the catalog.

    Column filters run in the database; sizes, price range, colours,
    locations, ratings and rental dates are matched on the loaded listings.

    - **size / color / location / rating**: repeat the parameter or separate values with commas.
    - **rental_start / rental_end**: keep only rentable products with a variant free for the whole range.
    - **include_pending**: admins and support may include listings awaiting approval.
    """
    try:
        query = CatalogFilter(
            category_id=category_id,
            gender=gender,
            purpose=purpose,
            is_rentable=is_rentable,
            min_price=min_price,
            max_price=max_price,
            sizes=_split_values(size),
            colors=_split_values(color),
            locations=_split_values(location),
            ratings=_split_values(rating),
            rental_start=rental_start,
            rental_end=rental_end,
            sort=sort,
            page=page,
            limit=limit or settings.marketplace.catalog_page_size,
        )
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=errors) from e

    approved_only = not (include_pending and user is not None and is_admin_or_support(user.role))
    products = await repos.products.list_catalog(
        category_id=query.category_id,
        gender=query.gender,
        purpose=query.purpose,
        is_rentable=query.is_rentable,
        approved_only=approved_only,
    )
    with_dates = query.rental_start is not None and query.rental_end is not None
    entries = await build_entries(repos, products, with_rental_status=with_dates)
    matching = sort_entries(filter_entries(entries, query), query.sort)
    page_entries, total, pages = paginate(matching, query.page, query.limit)
    return ProductList(
        products=[entry_detail(entry) for entry in page_entries],
        pagination=Pagination(page=query.page, limit=query.limit, total=total, pages=pages),
    )


@router.post(
    "",
    response_model=ProductDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Create Product",
    description=(
        "Create a listing with its images, size variants and rental price tiers. "
        "Listings by sellers await approval; listings by admins are approved immediately."
    ),
    responses={
        201: {"description": "Product created"},
        401: {"description": "Authentication required"},
    },
)
async def create_product(payload: ProductCreate, user: CurrentUserDep, repos: ReposDep) -> ProductDetail:
    slug = await ensure_unique_slug(payload.slug or payload.name, repos.products.slug_exists)
    sku = await generate_unique_sku(repos.products.sku_exists)
    now = datetime.utcnow()
    product = Product(
        **payload.model_dump(exclude=_CHILD_FIELDS),
        slug=slug,
        sku=sku,
        user_id=user.id,
        discount_start_date=now if payload.discount else None,
        approval_status=ApprovalStatus.APPROVED if is_admin(user.role) else ApprovalStatus.PENDING,
        approved_at=now if is_admin(user.role) else None,
    )
    product = await repos.products.stage(product)
    await repos.products.replace_images(product.id, [image.model_dump() for image in payload.images])  # type: ignore[arg-type]
    await repos.products.replace_variants(product.id, [variant.model_dump() for variant in payload.variants])  # type: ignore[arg-type]
    await repos.products.replace_tiers(product.id, [tier.model_dump() for tier in payload.rental_price_tiers])  # type: ignore[arg-type]
    await repos.session.commit()
    await repos.session.refresh(product)
    logger.info(f"User {user.id} created product {product.id} ({product.approval_status.value})")
    return (await product_details(repos, [product]))[0]


@router.get(
    "/rental-status",
    response_model=List[ProductRentalStatus],
    summary="Batch Rental Status",
    description="Per-variant active rentals for several products. Rentals that already ended are left out.",
    responses={400: {"description": "ids is not a comma-separated list of integers"}},
)
async def batch_rental_status(repos: ReposDep, ids: str = Query(..., description="Comma-separated product ids")):
    try:
        product_ids = [int(part) for part in ids.split(",") if part.strip()]
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="ids must be integers") from e
    products = await repos.products.get_many(product_ids)
    statuses = await rental_statuses(repos, products, not_ended_before=datetime.utcnow())
    return [rental_status_payload(product, statuses.get(product.id, [])) for product in products]  # type: ignore[arg-type]


@router.get(
    "/sku/{sku}",
    response_model=ProductDetail,
    summary="Get Product by SKU",
    responses={404: {"description": "Product not found"}},
)
async def get_product_by_sku(sku: str, repos: ReposDep, user: OptionalUserDep) -> ProductDetail:
    product = await repos.products.get_by_sku(sku)
    if product is None or not _is_visible(product, user):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    await repos.products.clear_expired_discounts([product])
    return (await product_details(repos, [product]))[0]


@router.get(
    "/{product_id}",
    response_model=ProductDetail,
    summary="Get Product",
    description="A product with its images, variants and rental price tiers.",
    responses={
        200: {"description": "Product found"},
        404: {"description": "Product not found or not yet approved"},
    },
)
async def get_product(product_id: int, repos: ReposDep, user: OptionalUserDep) -> ProductDetail:
    """
    Get a product by id.

    Listings that are not approved are visible only to their seller, admins
    and support; everybody else gets 404.
    """
    product = await _get_visible_product(repos, product_id, user)
    await repos.products.clear_expired_discounts([product])
    return (await product_details(repos, [product]))[0]


@router.put(
    "/{product_id}",
    response_model=ProductDetail,
    summary="Update Product",
    description="Update a listing. Images, variants and rental tiers are replaced when supplied.",
    responses={
        403: {"description": "Only the seller or an admin may edit the product"},
        404: {"description": "Product not found"},
    },
)
async def update_product(
    product_id: int, payload: ProductUpdate, user: CurrentUserDep, repos: ReposDep
) -> ProductDetail:
    product = await _get_editable_product(repos, product_id, user)
    changes = payload.model_dump(exclude_unset=True, exclude=_CHILD_FIELDS)
    if payload.slug is not None or "name" in changes:

        async def taken(candidate: str) -> bool:
            return await repos.products.slug_exists(candidate, exclude_product_id=product_id)

        product.slug = await ensure_unique_slug(payload.slug or changes["name"], taken)
    if "discount" in changes and changes["discount"] != product.discount:
        product.discount_start_date = datetime.utcnow() if changes["discount"] else None
    for key, value in changes.items():
        setattr(product, key, value)
    repos.session.add(product)

    if payload.images is not None:
        await repos.products.replace_images(product_id, [image.model_dump() for image in payload.images])
    if payload.variants is not None:
        await repos.products.replace_variants(product_id, [variant.model_dump() for variant in payload.variants])
    if payload.rental_price_tiers is not None:
        await repos.products.replace_tiers(product_id, [tier.model_dump() for tier in payload.rental_price_tiers])
    await repos.session.commit()
    await repos.session.refresh(product)
    return (await product_details(repos, [product]))[0]


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    summary="Delete Product",
    responses={
        403: {"description": "Only the seller or an admin may delete the product"},
        404: {"description": "Product not found"},
        409: {"description": "The product has rentals and cannot be deleted"},
    },
)
async def delete_product(product_id: int, user: CurrentUserDep, repos: ReposDep) -> MessageResponse:
    product = await _get_editable_product(repos, product_id, user)
    if await repos.rentals.product_has_rentals(product_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Product has rentals and cannot be deleted")
    await repos.products.delete_with_children(product)
    logger.info(f"User {user.id} deleted product {product_id}")
    return MessageResponse(message="Product deleted")


@router.get(
    "/{product_id}/similar",
    response_model=List[ProductDetail],
    summary="Similar Products",
    description="Approved products of the same category and gender, newest first.",
)
async def similar_products(product_id: int, repos: ReposDep, user: OptionalUserDep) -> List[ProductDetail]:
    product = await _get_visible_product(repos, product_id, user)
    return await product_details(repos, await repos.products.list_similar(product))


@router.get(
    "/{product_id}/rental-prices",
    response_model=List[RentalPriceTierRead],
    summary="Rental Price Tiers",
)
async def list_rental_prices(product_id: int, repos: ReposDep, user: OptionalUserDep) -> List[RentalPriceTierRead]:
    await _get_visible_product(repos, product_id, user)
    tiers = (await repos.products.tiers_for([product_id])).get(product_id, [])
    return [RentalPriceTierRead.model_validate(tier) for tier in tiers]


@router.post(
    "/{product_id}/rental-prices",
    response_model=List[RentalPriceTierRead],
    summary="Replace Rental Price Tiers",
    description="Replace every rental tier of the product. Admin only.",
    responses={
        403: {"description": "Admin access required"},
        404: {"description": "Product not found"},
    },
)
async def replace_rental_prices(
    product_id: int, payload: RentalPriceTiersUpdate, admin: AdminDep, repos: ReposDep
) -> List[RentalPriceTierRead]:
    if await repos.products.get_by_id(product_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    await repos.products.replace_tiers(product_id, [tier.model_dump() for tier in payload.tiers])
    await repos.session.commit()
    tiers = (await repos.products.tiers_for([product_id])).get(product_id, [])
    return [RentalPriceTierRead.model_validate(tier) for tier in tiers]


@router.get(
    "/{product_id}/rental-price",
    response_model=RentalQuoteRead,
    summary="Quote Rental Price",
    description="Price a rental of the given number of days using the product's tiers.",
    responses={
        400: {"description": "days is below 1 or the product has no tiers"},
        404: {"description": "Product not found"},
    },
)
async def quote_rental_price(product_id: int, days: int, repos: ReposDep, user: OptionalUserDep) -> RentalQuoteRead:
    if days < 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="days must be at least 1")
    await _get_visible_product(repos, product_id, user)
    tiers = (await repos.products.tiers_for([product_id])).get(product_id, [])
    try:
        quote = calculate_rental_price(tiers, days)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return RentalQuoteRead.model_validate(quote.as_dict())


@router.get(
    "/{product_id}/rental-status",
    response_model=ProductRentalStatus,
    summary="Rental Status",
    description="Per-variant active rentals of a product and whether each variant is free right now.",
    responses={404: {"description": "Product not found"}},
)
async def product_rental_status(product_id: int, repos: ReposDep, user: OptionalUserDep) -> ProductRentalStatus:
    product = await _get_visible_product(repos, product_id, user)
    statuses = await rental_statuses(repos, [product])
    return rental_status_payload(product, statuses.get(product_id, []))
