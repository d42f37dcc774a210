"""
Public seller pages.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from dressla.core.models.io.products import AuthorProducts
from dressla.marketplace.roles import is_admin
from dressla.server.services.catalog import product_details
from dressla.server.services.deps import OptionalUserDep, ReposDep

router = APIRouter(tags=["author"])


@router.get(
    "/{user_id}/products",
    response_model=AuthorProducts,
    summary="Seller Products",
    description="Seller name and avatar with their listings. Visitors see only approved products that are for sale.",
    responses={404: {"description": "User not found"}},
)
async def author_products(user_id: str, repos: ReposDep, viewer: OptionalUserDep) -> AuthorProducts:
    author = await repos.users.get_by_id(user_id)
    if author is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    public_only = viewer is None or not is_admin(viewer.role)
    products = await repos.products.list_by_user(user_id, public_only=public_only)
    return AuthorProducts(
        user={"id": author.id, "name": author.name, "image": author.image, "created_at": author.created_at},
        products=await product_details(repos, products),
    )
