"""
API endpoints for the shopping cart.

Each user has one cart, created on first use. Prices are taken from the
product when an item is added: the variant price for purchases and the tier
price of the whole period for rentals. The product discount is applied when
the cart is read.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, status

from dressla.core.database.entities.carts import CartItem
from dressla.core.database.entities.catalog import Product, ProductVariant
from dressla.core.logging_config import get_logger
from dressla.core.models.domain.enums import ApprovalStatus
from dressla.core.models.io.carts import CartItemCreate, CartItemRead, CartItemUpdate, CartRead
from dressla.core.models.io.common import MessageResponse
from dressla.marketplace.discounts import discounted_price, process_expired_discount
from dressla.marketplace.rental_pricing import quote_rental, rental_days
from dressla.server.services.deps import CurrentUserDep, ReposDep

logger = get_logger(__name__)

router = APIRouter(tags=["cart"])


def _variant_for(variants: List[ProductVariant], size: Optional[str]) -> Optional[ProductVariant]:
    if size is not None:
        for variant in variants:
            if variant.size == size:
                return variant
    return variants[0] if variants else None


def _item_read(item: CartItem, product: Optional[Product]) -> CartItemRead:
    discount = product.discount if product is not None and product.discount else None
    return CartItemRead(
        id=item.id,  # type: ignore[arg-type]
        product_id=item.product_id,
        product_name=item.product_name,
        image=item.image,
        size=item.size,
        price=round(discounted_price(item.price, discount), 2),
        original_price=item.price,
        discount=discount,
        quantity=item.quantity,
        is_rental=item.is_rental,
        rental_start_date=item.rental_start_date,
        rental_end_date=item.rental_end_date,
        rental_days=item.rental_days,
        deposit=item.deposit,
    )


async def _cart_read(repos, user_id: str) -> CartRead:
    cart = await repos.carts.get_for_user(user_id)
    if cart is None:
        return CartRead()
    items = await repos.carts.items(cart.id)
    products: Dict[int, Product] = {
        product.id: product for product in await repos.products.get_many([item.product_id for item in items])
    }
    for product in products.values():
        process_expired_discount(product)
    reads = [_item_read(item, products.get(item.product_id)) for item in items]
    return CartRead(
        id=cart.id,
        items=reads,
        total_items=sum(read.quantity for read in reads),
        total_price=round(sum(read.price * read.quantity for read in reads), 2),
    )


@router.get(
    "",
    response_model=CartRead,
    summary="Get Cart",
    description="Cart lines with discounts applied and totals.",
)
async def get_cart(user: CurrentUserDep, repos: ReposDep) -> CartRead:
    return await _cart_read(repos, user.id)


@router.post(
    "",
    response_model=CartRead,
    summary="Add to Cart",
    description=(
        "Add a product to the cart. A line is identified by product, size, rental flag and rental dates; "
        "adding the same purchase again increases its quantity."
    ),
    responses={
        400: {"description": "Duplicate rental, product not rentable or no price available"},
        404: {"description": "Product not found"},
    },
)
async def add_to_cart(payload: CartItemCreate, user: CurrentUserDep, repos: ReposDep) -> CartRead:
    """
    Add an item to the cart.

    - **size**: selects the variant whose price is used; the first variant is used when it is omitted.
    - **is_rental**: rentals need both dates, are priced for the whole period and always have quantity 1.
    """
    product = await repos.products.get_by_id(payload.product_id)
    if product is None or product.approval_status != ApprovalStatus.APPROVED:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    variants = (await repos.products.variants_for([product.id])).get(product.id, [])  # type: ignore[list-item]
    variant = _variant_for(variants, payload.size)
    size = payload.size if payload.size is not None else (variant.size if variant else product.size)

    cart = await repos.carts.get_or_create(user.id)
    existing = await repos.carts.find_matching_item(
        cart.id,  # type: ignore[arg-type]
        payload.product_id,
        size,
        payload.is_rental,
        payload.rental_start_date,
        payload.rental_end_date,
    )
    if existing is not None:
        if payload.is_rental:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Rental already in cart")
        existing.quantity += payload.quantity
        await repos.carts.add_item(existing)
        return await _cart_read(repos, user.id)

    images = (await repos.products.images_for([product.id])).get(product.id, [])  # type: ignore[list-item]
    item = CartItem(
        cart_id=cart.id,  # type: ignore[arg-type]
        product_id=product.id,  # type: ignore[arg-type]
        product_name=product.name,
        image=images[0].url if images else None,
        size=size,
        price=0.0,
        quantity=payload.quantity,
        is_rental=payload.is_rental,
    )

    if payload.is_rental:
        if not product.is_rentable:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product is not available for rent")
        days = rental_days(payload.rental_start_date, payload.rental_end_date)  # type: ignore[arg-type]
        if product.max_rental_days and days > product.max_rental_days:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Rental period exceeds the maximum of {product.max_rental_days} days",
            )
        tiers = (await repos.products.tiers_for([product.id])).get(product.id, [])  # type: ignore[list-item]
        item.price = round(quote_rental(tiers, product.price_per_day, days), 2)
        item.quantity = 1
        item.rental_start_date = payload.rental_start_date
        item.rental_end_date = payload.rental_end_date
        item.rental_days = days
        item.deposit = product.deposit
    else:
        if variant is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product has no price")
        item.price = variant.price

    if item.price <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product has no price")
    await repos.carts.add_item(item)
    logger.debug(f"User {user.id} added product {product.id} to cart {cart.id}")
    return await _cart_read(repos, user.id)


@router.put(
    "/{item_id}",
    response_model=CartRead,
    summary="Update Cart Item",
    responses={404: {"description": "Item not found in the user's cart"}},
)
async def update_cart_item(item_id: int, payload: CartItemUpdate, user: CurrentUserDep, repos: ReposDep) -> CartRead:
    item = await repos.carts.get_item(item_id, user.id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cart item not found")
    if item.is_rental and payload.quantity != 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Rental quantity is always 1")
    item.quantity = payload.quantity
    await repos.carts.add_item(item)
    return await _cart_read(repos, user.id)


@router.delete(
    "/{item_id}",
    response_model=CartRead,
    summary="Remove Cart Item",
    responses={404: {"description": "Item not found in the user's cart"}},
)
async def remove_cart_item(item_id: int, user: CurrentUserDep, repos: ReposDep) -> CartRead:
    item = await repos.carts.get_item(item_id, user.id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cart item not found")
    await repos.carts.delete_item(item)
    return await _cart_read(repos, user.id)


@router.delete("", response_model=MessageResponse, summary="Clear Cart")
async def clear_cart(user: CurrentUserDep, repos: ReposDep) -> MessageResponse:
    cart = await repos.carts.get_for_user(user.id)
    if cart is not None:
        await repos.carts.clear(cart.id)  # type: ignore[arg-type]
        await repos.session.commit()
    return MessageResponse(message="Cart cleared")
