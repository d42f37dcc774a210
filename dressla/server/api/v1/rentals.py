"""
API endpoints for direct rentals.

A rental reserves one size variant of a rentable product for a date range.
Overlap with another RESERVED or ACTIVE rental of the same variant is
rejected with 409. The seller is credited with a RENT transaction when the
rental is created, rewritten at the new total when the rental is rescheduled
or reactivated, and removed when the rental is canceled.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from dressla.core.database.entities.catalog import Product
from dressla.core.database.entities.rentals import Rental
from dressla.core.database.entities.transactions import Transaction
from dressla.core.database.entities.users import User
from dressla.core.logging_config import get_logger
from dressla.core.models.domain.enums import RentalStatus, TransactionType
from dressla.core.models.io.common import Pagination
from dressla.core.models.io.rentals import RentalCreate, RentalList, RentalRead, RentalUpdate
from dressla.marketplace.rental_availability import has_rental_conflict
from dressla.marketplace.rental_pricing import quote_rental, rental_days
from dressla.marketplace.roles import is_admin
from dressla.server.services.deps import CurrentUserDep, ReposDep
from dressla.server.services.seller_transactions import check_and_block_user, reevaluate_user_blocking

logger = get_logger(__name__)

router = APIRouter(tags=["rentals"])


async def _price(repos, product: Product, start: datetime, end: datetime) -> float:
    tiers = (await repos.products.tiers_for([product.id])).get(product.id, [])
    return round(quote_rental(tiers, product.price_per_day, rental_days(start, end)), 2)


async def _ensure_free(repos, variant_id: Optional[int], start: datetime, end: datetime, exclude: Optional[int] = None):
    if variant_id is None:
        return
    rentals = await repos.rentals.for_variant(variant_id, exclude_rental_id=exclude)
    if has_rental_conflict(start, end, rentals):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Product variant is not available for the selected dates"
        )


async def _get_rental(repos, rental_id: int, user: User, allow_admin: bool) -> Rental:
    rental = await repos.rentals.get_by_id(rental_id)
    if rental is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rental not found")
    if rental.user_id != user.id and not (allow_admin and is_admin(user.role)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return rental


HOLDING_STATUSES = frozenset({RentalStatus.RESERVED, RentalStatus.ACTIVE})


async def _seller_of(repos, rental: Rental) -> Optional[str]:
    seller_id = (await repos.products.seller_map([rental.product_id])).get(rental.product_id)
    if not seller_id or seller_id == rental.user_id:
        return None
    return seller_id


async def _book_seller_credit(repos, rental: Rental, grew: bool = True) -> None:
    """Replace the seller's RENT entry for ``rental`` with one at its current total."""
    await repos.transactions.delete_for_rental(rental.id)
    seller_id = await _seller_of(repos, rental)
    if seller_id is None:
        return
    repos.session.add(
        Transaction(
            user_id=seller_id,
            buyer_id=rental.user_id,
            rental_id=rental.id,
            type=TransactionType.RENT,
            total=rental.total_price,
        )
    )
    await repos.session.flush()
    if grew:
        await check_and_block_user(repos, seller_id)
    else:
        await reevaluate_user_blocking(repos, seller_id)


async def _release_seller_credit(repos, rental: Rental) -> None:
    await repos.transactions.delete_for_rental(rental.id)
    seller_id = await _seller_of(repos, rental)
    if seller_id:
        await repos.session.flush()
        await reevaluate_user_blocking(repos, seller_id)


@router.post(
    "",
    response_model=RentalRead,
    status_code=status.HTTP_201_CREATED,
    summary="Rent Product",
    description="Reserve a size variant of a rentable product for a date range.",
    responses={
        201: {"description": "Rental reserved"},
        400: {"description": "Invalid dates or product not rentable"},
        404: {"description": "Product or variant not found"},
        409: {"description": "The variant is already rented in that period"},
    },
)
async def create_rental(payload: RentalCreate, user: CurrentUserDep, repos: ReposDep) -> RentalRead:
    """
    Create a rental.

    - **start_date / end_date**: the start must be before the end and not in the past.
    - **variant_id**: must belong to the product.

    The total is the tier price for the number of days, or the flat daily
    price when the product has no tiers.
    """
    start, end = payload.start_date, payload.end_date
    if start >= end:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Start date must be before end date")
    if start < datetime.utcnow():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Start date cannot be in the past")

    product = await repos.products.get_by_id(payload.product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    if not product.is_rentable:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product is not available for rent")
    variant = await repos.products.get_variant(payload.variant_id)
    if variant is None or variant.product_id != product.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product variant not found")
    if product.max_rental_days and rental_days(start, end) > product.max_rental_days:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Rental period exceeds the maximum of {product.max_rental_days} days",
        )
    await _ensure_free(repos, variant.id, start, end)

    rental = await repos.rentals.stage(
        Rental(
            user_id=user.id,
            product_id=product.id,  # type: ignore[arg-type]
            variant_id=variant.id,
            start_date=start,
            end_date=end,
            total_price=await _price(repos, product, start, end),
            status=RentalStatus.RESERVED,
        )
    )
    await _book_seller_credit(repos, rental)
    await repos.session.commit()
    await repos.session.refresh(rental)
    logger.info(f"User {user.id} reserved variant {variant.id} of product {product.id} ({start} - {end})")
    return RentalRead.model_validate(rental)


@router.get(
    "",
    response_model=RentalList,
    summary="My Rentals",
    description="The user's rentals, newest first, optionally filtered by status.",
)
async def list_rentals(
    user: CurrentUserDep,
    repos: ReposDep,
    status_filter: Optional[RentalStatus] = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> RentalList:
    rentals, total = await repos.rentals.list_for_user(user.id, status_filter, page, limit)
    return RentalList(
        rentals=[RentalRead.model_validate(rental) for rental in rentals],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if total else 0),
    )


@router.get(
    "/{rental_id}",
    response_model=RentalRead,
    summary="Get Rental",
    responses={403: {"description": "Rental belongs to another user"}, 404: {"description": "Rental not found"}},
)
async def get_rental(rental_id: int, user: CurrentUserDep, repos: ReposDep) -> RentalRead:
    return RentalRead.model_validate(await _get_rental(repos, rental_id, user, allow_admin=False))


@router.patch(
    "/{rental_id}",
    response_model=RentalRead,
    summary="Update Rental",
    description="Change the status or dates of a rental. New dates are re-checked for conflicts and re-priced.",
    responses={
        400: {"description": "Invalid dates"},
        403: {"description": "Only the renter or an admin may update the rental"},
        404: {"description": "Rental not found"},
        409: {"description": "The new dates conflict with another rental"},
    },
)
async def update_rental(rental_id: int, payload: RentalUpdate, user: CurrentUserDep, repos: ReposDep) -> RentalRead:
    """
    Update a rental.

    Moving a rental into RESERVED or ACTIVE, or changing the dates of one
    that is, re-checks the variant calendar. A canceled rental that is
    reactivated books the seller credit again.
    """
    rental = await _get_rental(repos, rental_id, user, allow_admin=True)
    old_status, old_total = rental.status, rental.total_price
    new_status = payload.status or old_status
    start = payload.start_date or rental.start_date
    end = payload.end_date or rental.end_date
    dates_changed = (start, end) != (rental.start_date, rental.end_date)

    if dates_changed and start >= end:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Start date must be before end date")
    reactivated = new_status in HOLDING_STATUSES and old_status not in HOLDING_STATUSES
    if reactivated or (dates_changed and new_status in HOLDING_STATUSES):
        await _ensure_free(repos, rental.variant_id, start, end, exclude=rental.id)

    if dates_changed:
        rental.start_date, rental.end_date = start, end
        product = await repos.products.get_by_id(rental.product_id)
        if product is not None:
            rental.total_price = await _price(repos, product, start, end)
    rental.status = new_status

    if new_status == RentalStatus.CANCELED:
        if old_status != RentalStatus.CANCELED:
            await _release_seller_credit(repos, rental)
    elif old_status == RentalStatus.CANCELED:
        await _book_seller_credit(repos, rental)
    elif rental.total_price != old_total:
        await _book_seller_credit(repos, rental, grew=rental.total_price > old_total)

    rental = await repos.rentals.update(rental)
    if new_status != old_status:
        logger.info(f"Rental {rental_id} moved from {old_status} to {new_status} by user {user.id}")
    return RentalRead.model_validate(rental)


@router.delete(
    "/{rental_id}",
    response_model=RentalRead,
    summary="Cancel Rental",
    description="Cancel a rental that is still RESERVED.",
    responses={
        400: {"description": "Only RESERVED rentals can be canceled"},
        403: {"description": "Only the renter or an admin may cancel the rental"},
        404: {"description": "Rental not found"},
    },
)
async def cancel_rental(rental_id: int, user: CurrentUserDep, repos: ReposDep) -> RentalRead:
    rental = await _get_rental(repos, rental_id, user, allow_admin=True)
    if rental.status != RentalStatus.RESERVED:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only reserved rentals can be canceled")
    await _release_seller_credit(repos, rental)
    rental.status = RentalStatus.CANCELED
    rental = await repos.rentals.update(rental)
    logger.info(f"Rental {rental_id} canceled by user {user.id}")
    return RentalRead.model_validate(rental)
