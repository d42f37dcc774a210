"""
API endpoints for product reviews and admin replies.

Only customers who rented a product may review it: either through a direct
rental that was not canceled, or through a rental line of an order that was
not canceled or refunded.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from dressla.core.database.entities.reviews import Review, ReviewReply
from dressla.core.database.entities.users import User
from dressla.core.logging_config import get_logger
from dressla.core.models.io.common import MessageResponse
from dressla.core.models.io.reviews import ReviewCreate, ReviewList, ReviewRead, ReviewReplyCreate, ReviewReplyRead
from dressla.server.services.deps import AdminDep, CurrentUserDep, OptionalUserDep, ReposDep

logger = get_logger(__name__)

router = APIRouter(tags=["reviews"])


async def _can_review(repos, user: Optional[User], product_id: int) -> bool:
    if user is None:
        return False
    if await repos.rentals.user_has_rental(user.id, product_id):
        return True
    return await repos.rentals.user_has_rental_order(user.id, product_id)


async def _require_product(repos, product_id: int) -> None:
    if await repos.products.get_by_id(product_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")


@router.get(
    "/products/{product_id}/reviews",
    response_model=ReviewList,
    summary="List Reviews",
    description="Reviews of a product, newest first, with the average rating and whether the caller may review.",
    responses={404: {"description": "Product not found"}},
)
async def list_reviews(product_id: int, repos: ReposDep, user: OptionalUserDep) -> ReviewList:
    await _require_product(repos, product_id)
    rows = await repos.reviews.list_for_product(product_id)
    replies = await repos.reviews.replies_for([review.id for review, _ in rows])
    reviews = []
    for review, user_name in rows:
        read = ReviewRead.model_validate(review)
        read.user_name = user_name
        reply = replies.get(review.id)
        read.reply = ReviewReplyRead.model_validate(reply) if reply else None
        reviews.append(read)
    average = sum(review.rating for review in reviews) / len(reviews) if reviews else 0.0
    return ReviewList(
        reviews=reviews,
        average_rating=round(average, 1),
        total_reviews=len(reviews),
        can_review=await _can_review(repos, user, product_id),
    )


@router.post(
    "/products/{product_id}/reviews",
    response_model=ReviewRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Review",
    description="Review a rented product. The product rating becomes the new average.",
    responses={
        400: {"description": "The user already reviewed this product"},
        403: {"description": "Only customers who rented the product may review it"},
        404: {"description": "Product not found"},
    },
)
async def create_review(product_id: int, payload: ReviewCreate, user: CurrentUserDep, repos: ReposDep) -> ReviewRead:
    product = await repos.products.get_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    if not await _can_review(repos, user, product_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only renters can review this product")
    if await repos.reviews.user_reviewed(user.id, product_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You have already reviewed this product")

    review = await repos.reviews.stage(
        Review(product_id=product_id, user_id=user.id, rating=payload.rating, comment=payload.comment)
    )
    product.rating = round(await repos.reviews.average(product_id), 2)
    repos.session.add(product)
    await repos.session.commit()
    await repos.session.refresh(review)
    logger.info(f"User {user.id} reviewed product {product_id} ({payload.rating}/5)")
    read = ReviewRead.model_validate(review)
    read.user_name = user.name
    return read


@router.post(
    "/products/{product_id}/reviews/reply",
    response_model=ReviewReplyRead,
    summary="Reply to Review",
    description="Create or replace the admin reply to a review. Admin only.",
    responses={
        400: {"description": "The review belongs to another product"},
        404: {"description": "Review not found"},
    },
)
async def reply_to_review(
    product_id: int, payload: ReviewReplyCreate, admin: AdminDep, repos: ReposDep
) -> ReviewReplyRead:
    review = await repos.reviews.get_by_id(payload.review_id)
    if review is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
    if review.product_id != product_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Review does not belong to this product")

    reply = await repos.reviews.get_reply(review.id)
    if reply is None:
        reply = ReviewReply(review_id=review.id, user_id=admin.id, comment=payload.comment)  # type: ignore[arg-type]
    else:
        reply.comment = payload.comment
        reply.user_id = admin.id
    reply = await repos.reviews.save_reply(reply)
    return ReviewReplyRead.model_validate(reply)


@router.delete(
    "/products/{product_id}/reviews/reply",
    response_model=MessageResponse,
    summary="Delete Review Reply",
    responses={404: {"description": "Reply not found"}},
)
async def delete_review_reply(
    product_id: int,
    admin: AdminDep,
    repos: ReposDep,
    review_id: int = Query(..., alias="reviewId"),
) -> MessageResponse:
    review = await repos.reviews.get_by_id(review_id)
    reply = await repos.reviews.get_reply(review_id) if review and review.product_id == product_id else None
    if reply is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reply not found")
    await repos.reviews.delete_reply(reply)
    return MessageResponse(message="Reply deleted")
