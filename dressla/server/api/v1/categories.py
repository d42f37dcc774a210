"""
API endpoints for product categories.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, status

from dressla.core.database.entities.catalog import Category
from dressla.core.models.io.products import CategoryCreate, CategoryRead
from dressla.marketplace.slugs import sanitize_slug
from dressla.server.services.deps import AdminDep, ReposDep

router = APIRouter(tags=["categories"])


@router.get("", response_model=List[CategoryRead], summary="List Categories")
async def list_categories(repos: ReposDep) -> List[CategoryRead]:
    return [CategoryRead.model_validate(category) for category in await repos.categories.list_all()]


@router.post(
    "",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Category",
    description="Create a category. The slug is derived from the name. Admin only.",
    responses={
        201: {"description": "Category created"},
        400: {"description": "A category with this name or slug already exists"},
        403: {"description": "Admin access required"},
    },
)
async def create_category(payload: CategoryCreate, admin: AdminDep, repos: ReposDep) -> CategoryRead:
    name = payload.name.strip()
    slug = sanitize_slug(name)
    if await repos.categories.get_by_name(name) or await repos.categories.get_by_slug(slug):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category already exists")
    category = await repos.categories.create(Category(name=name, slug=slug, description=payload.description))
    return CategoryRead.model_validate(category)
