"""
Back-office endpoints.

Account moderation (bans, roles, seller verification), listing approval,
dashboard statistics and the admin's own profile. Support staff may read
users and ban them; everything else needs the ADMIN role.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, HTTPException, status

from dressla.core.database.entities.users import User
from dressla.core.logging_config import get_logger
from dressla.core.models.domain.enums import ApprovalStatus, Role, VerificationStatus
from dressla.core.models.io.admin import (
    AdminStats,
    AdminUserList,
    AdminUserRead,
    BanUpdate,
    RoleUpdate,
    VerificationDecision,
)
from dressla.core.models.io.common import MessageResponse
from dressla.core.models.io.products import ApprovalUpdate, ProductDetail
from dressla.core.models.io.users import PasswordChange, ProfileUpdate, UserRead, VerificationRead
from dressla.server.services.catalog import product_details
from dressla.server.services.deps import AdminDep, ReposDep, StaffDep
from dressla.server.services.security import hash_password, verify_password

logger = get_logger(__name__)

router = APIRouter(tags=["admin"])


async def _admin_users(repos, users: List[User]) -> List[AdminUserRead]:
    ids = [user.id for user in users]
    documents = await repos.users.get_verifications(ids)
    products = await repos.users.product_counts(ids)
    orders = await repos.users.order_counts(ids)
    reads = []
    for user in users:
        read = AdminUserRead.model_validate(user)
        document = documents.get(user.id)
        read.verification = VerificationRead.model_validate(document) if document else None
        read.product_count = products.get(user.id, 0)
        read.order_count = orders.get(user.id, 0)
        reads.append(read)
    return reads


async def _get_user(repos, user_id: str) -> User:
    user = await repos.users.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


async def _get_document(repos, user_id: str):
    document = await repos.users.get_verification(user_id)
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Verification documents not found")
    return document


@router.get(
    "/stats",
    response_model=AdminStats,
    summary="Dashboard Statistics",
    description="Product, customer and order counts plus revenue from paid orders.",
)
async def stats(admin: AdminDep, repos: ReposDep) -> AdminStats:
    return AdminStats(
        products=await repos.products.count(),
        users=await repos.users.count_by_role(Role.USER),
        orders=await repos.orders.count(),
        revenue=round(await repos.orders.revenue_sum(), 2),
    )


@router.get(
    "/users",
    response_model=AdminUserList,
    summary="List Users",
    description="Accounts with their verification documents and product and order counts.",
)
async def list_users(staff: StaffDep, repos: ReposDep, search: Optional[str] = None) -> AdminUserList:
    users = await repos.users.list_users(search)
    return AdminUserList(users=await _admin_users(repos, users))


@router.get(
    "/users/{user_id}",
    response_model=AdminUserRead,
    summary="Get User",
    responses={404: {"description": "User not found"}},
)
async def get_user(user_id: str, staff: StaffDep, repos: ReposDep) -> AdminUserRead:
    user = await _get_user(repos, user_id)
    return (await _admin_users(repos, [user]))[0]


@router.put(
    "/users/{user_id}/ban",
    response_model=AdminUserRead,
    summary="Ban or Unban User",
    responses={
        400: {"description": "Staff cannot ban themselves"},
        404: {"description": "User not found"},
    },
)
async def ban_user(user_id: str, payload: BanUpdate, staff: StaffDep, repos: ReposDep) -> AdminUserRead:
    if user_id == staff.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot ban yourself")
    user = await _get_user(repos, user_id)
    user.banned = payload.banned
    user.ban_reason = payload.reason if payload.banned else None
    user = await repos.users.update(user)
    logger.info(f"Staff {staff.id} set banned={payload.banned} on user {user_id}")
    return (await _admin_users(repos, [user]))[0]


@router.put(
    "/users/{user_id}/role",
    response_model=AdminUserRead,
    summary="Change Role",
    description="Promote a user to ADMIN or demote to USER. Admins cannot change their own role.",
    responses={
        400: {"description": "Attempt to change one's own role"},
        404: {"description": "User not found"},
    },
)
async def change_role(user_id: str, payload: RoleUpdate, admin: AdminDep, repos: ReposDep) -> AdminUserRead:
    if user_id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot change your own role")
    user = await _get_user(repos, user_id)
    user.role = payload.role
    user = await repos.users.update(user)
    logger.info(f"Admin {admin.id} changed role of user {user_id} to {payload.role.value}")
    return (await _admin_users(repos, [user]))[0]


@router.put(
    "/users/{user_id}/identity",
    response_model=VerificationRead,
    summary="Review Identity Document",
    description="Approve or reject the identity document. Approval marks the user as verified.",
    responses={404: {"description": "User or verification documents not found"}},
)
async def review_identity(
    user_id: str, payload: VerificationDecision, admin: AdminDep, repos: ReposDep
) -> VerificationRead:
    user = await _get_user(repos, user_id)
    document = await _get_document(repos, user_id)
    document.identity_status = payload.status
    document.identity_comment = payload.comment if payload.status == VerificationStatus.REJECTED else None
    document.updated_at = datetime.utcnow()
    repos.session.add(document)
    if payload.status == VerificationStatus.APPROVED:
        user.verified = True
        repos.session.add(user)
    await repos.session.commit()
    return VerificationRead.model_validate(document)


@router.put(
    "/users/{user_id}/entrepreneur",
    response_model=VerificationRead,
    summary="Review Entrepreneur Certificate",
    description="Approve or reject the entrepreneur certificate. Approval lifts the revenue block.",
    responses={404: {"description": "User or verification documents not found"}},
)
async def review_entrepreneur(
    user_id: str, payload: VerificationDecision, admin: AdminDep, repos: ReposDep
) -> VerificationRead:
    user = await _get_user(repos, user_id)
    document = await _get_document(repos, user_id)
    document.entrepreneur_status = payload.status
    document.entrepreneur_comment = payload.comment if payload.status == VerificationStatus.REJECTED else None
    document.updated_at = datetime.utcnow()
    repos.session.add(document)
    if payload.status == VerificationStatus.APPROVED:
        user.blocked = False
        repos.session.add(user)
    await repos.session.commit()
    return VerificationRead.model_validate(document)


@router.get(
    "/users/{user_id}/products",
    response_model=List[ProductDetail],
    summary="User Products",
    responses={404: {"description": "User not found"}},
)
async def user_products(user_id: str, staff: StaffDep, repos: ReposDep) -> List[ProductDetail]:
    await _get_user(repos, user_id)
    return await product_details(repos, await repos.products.list_by_user(user_id))


@router.patch(
    "/products/{product_id}/approval",
    response_model=ProductDetail,
    summary="Approve or Reject Product",
    responses={
        400: {"description": "Rejection without a reason"},
        404: {"description": "Product not found"},
    },
)
async def review_product(product_id: int, payload: ApprovalUpdate, admin: AdminDep, repos: ReposDep) -> ProductDetail:
    product = await repos.products.get_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    reason = (payload.rejection_reason or "").strip()
    if payload.status == ApprovalStatus.REJECTED and not reason:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="A rejection reason is required")

    product.approval_status = payload.status
    product.rejection_reason = reason if payload.status == ApprovalStatus.REJECTED else None
    product.approved_at = datetime.utcnow() if payload.status == ApprovalStatus.APPROVED else None
    product = await repos.products.update(product)
    logger.info(f"Admin {admin.id} set approval of product {product_id} to {payload.status.value}")
    return (await product_details(repos, [product]))[0]


@router.put(
    "/password",
    response_model=MessageResponse,
    summary="Change Password",
    responses={400: {"description": "Current password is wrong"}},
)
async def change_password(payload: PasswordChange, admin: AdminDep, repos: ReposDep) -> MessageResponse:
    if not verify_password(payload.current_password, admin.password_hash):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
    admin.password_hash = hash_password(payload.new_password)
    await repos.users.update(admin)
    return MessageResponse(message="Password updated")


@router.get("/profile", response_model=UserRead, summary="Admin Profile")
async def read_admin_profile(admin: AdminDep) -> UserRead:
    return UserRead.model_validate(admin)


@router.put(
    "/profile",
    response_model=UserRead,
    summary="Update Admin Profile",
    responses={409: {"description": "E-mail already used by another account"}},
)
async def update_admin_profile(payload: ProfileUpdate, admin: AdminDep, repos: ReposDep) -> UserRead:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in changes:
        changes["email"] = changes["email"].lower()
        if await repos.users.email_taken(changes["email"], exclude_user_id=admin.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")
    for key, value in changes.items():
        setattr(admin, key, value)
    admin = await repos.users.update(admin)
    return UserRead.model_validate(admin)
