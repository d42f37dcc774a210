"""
Account endpoints for the signed-in user.

Profile, seller verification documents, the seller's own listings and sales,
and cookie consent preferences.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, HTTPException, status

from dressla.core.logging_config import get_logger
from dressla.core.models.io.orders import OrderItemRead, OrderRead
from dressla.core.models.io.products import ProductDetail
from dressla.core.models.io.users import (
    CookieConsent,
    CookieConsentRead,
    ProfileUpdate,
    UserRead,
    VerificationRead,
    VerificationUpdate,
)
from dressla.server.services.catalog import product_details
from dressla.server.services.deps import CurrentUserDep, ReposDep

logger = get_logger(__name__)

router = APIRouter(tags=["user"])


@router.get("/me", response_model=UserRead, summary="Current User")
async def read_me(user: CurrentUserDep) -> UserRead:
    return UserRead.model_validate(user)


@router.get("/profile", response_model=UserRead, summary="Get Profile")
async def read_profile(user: CurrentUserDep) -> UserRead:
    return UserRead.model_validate(user)


@router.put(
    "/profile",
    response_model=UserRead,
    summary="Update Profile",
    description="Update name, e-mail, phone or avatar. Only supplied fields change.",
    responses={409: {"description": "E-mail already used by another account"}},
)
async def update_profile(payload: ProfileUpdate, user: CurrentUserDep, repos: ReposDep) -> UserRead:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in changes:
        changes["email"] = changes["email"].lower()
        if await repos.users.email_taken(changes["email"], exclude_user_id=user.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")
    for key, value in changes.items():
        setattr(user, key, value)
    user = await repos.users.update(user)
    return UserRead.model_validate(user)


@router.get(
    "/verification",
    response_model=Optional[VerificationRead],
    summary="Get Verification Documents",
    description="The uploaded verification documents and their review status, or null when none were uploaded.",
)
async def read_verification(user: CurrentUserDep, repos: ReposDep):
    document = await repos.users.get_verification(user.id)
    return VerificationRead.model_validate(document) if document else None


@router.put(
    "/verification",
    response_model=VerificationRead,
    summary="Upload Verification Documents",
    description=(
        "Store identity and entrepreneur document URLs and the payout IBAN. "
        "Both reviews return to PENDING."
    ),
)
async def update_verification(payload: VerificationUpdate, user: CurrentUserDep, repos: ReposDep) -> VerificationRead:
    document = await repos.users.upsert_verification(
        user.id,
        id_front_url=payload.id_front_url,
        id_back_url=payload.id_back_url,
        entrepreneur_certificate_url=payload.entrepreneur_certificate_url,
    )
    if payload.iban is not None:
        user.iban = payload.iban.strip().replace(" ", "").upper() or None
        repos.session.add(user)
    await repos.session.commit()
    logger.info(f"User {user.id} submitted verification documents")
    return VerificationRead.model_validate(document)


@router.get("/products", response_model=List[ProductDetail], summary="My Products")
async def my_products(user: CurrentUserDep, repos: ReposDep) -> List[ProductDetail]:
    products = await repos.products.list_by_user(user.id)
    return await product_details(repos, products)


@router.get(
    "/products/sku/{sku}",
    response_model=ProductDetail,
    summary="My Product by SKU",
    responses={
        403: {"description": "Product belongs to someone else"},
        404: {"description": "No product with this SKU"},
    },
)
async def my_product_by_sku(sku: str, user: CurrentUserDep, repos: ReposDep) -> ProductDetail:
    product = await repos.products.get_by_sku(sku)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    if product.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    await repos.products.clear_expired_discounts([product])
    return (await product_details(repos, [product]))[0]


@router.get(
    "/sales",
    response_model=List[OrderRead],
    summary="My Sales",
    description="Orders that contain the seller's products. Each order lists only the seller's own items.",
)
async def my_sales(user: CurrentUserDep, repos: ReposDep) -> List[OrderRead]:
    orders = await repos.orders.orders_with_seller_products(user.id)
    items = await repos.orders.items_for([order.id for order in orders])  # type: ignore[misc]
    own_ids = {product.id for product in await repos.products.list_by_user(user.id)}
    sales = []
    for order in orders:
        read = OrderRead.model_validate(order)
        read.items = [
            OrderItemRead.model_validate(item) for item in items.get(order.id, []) if item.product_id in own_ids
        ]
        sales.append(read)
    return sales


def _consent(user) -> CookieConsentRead:
    return CookieConsentRead(
        essential=user.cookie_consent_essential,
        performance=user.cookie_consent_performance,
        functional=user.cookie_consent_functional,
        targeting=user.cookie_consent_targeting,
        analytics=user.cookie_consent_analytics,
        timestamp=user.cookie_consent_timestamp or user.created_at,
    )


@router.get("/cookie-consent", response_model=CookieConsentRead, summary="Get Cookie Consent")
async def read_cookie_consent(user: CurrentUserDep) -> CookieConsentRead:
    return _consent(user)


@router.post("/cookie-consent", response_model=CookieConsentRead, summary="Save Cookie Consent")
async def save_cookie_consent(payload: CookieConsent, user: CurrentUserDep, repos: ReposDep) -> CookieConsentRead:
    user.cookie_consent_essential = payload.essential
    user.cookie_consent_performance = payload.performance
    user.cookie_consent_functional = payload.functional
    user.cookie_consent_targeting = payload.targeting
    user.cookie_consent_analytics = payload.analytics
    user.cookie_consent_timestamp = datetime.utcnow()
    user = await repos.users.update(user)
    return _consent(user)
