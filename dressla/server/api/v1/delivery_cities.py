"""
API endpoints for delivery cities and their shipping prices.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, status

from dressla.core.database.entities.delivery_cities import DeliveryCity
from dressla.core.models.io.common import MessageResponse
from dressla.core.models.io.delivery_cities import DeliveryCityCreate, DeliveryCityRead, DeliveryCityUpdate
from dressla.server.services.deps import AdminDep, ReposDep

router = APIRouter(tags=["delivery-cities"])
admin_router = APIRouter(tags=["admin"])


async def _get_city(repos, city_id: int) -> DeliveryCity:
    city = await repos.delivery_cities.get_by_id(city_id)
    if city is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Delivery city not found")
    return city


@router.get(
    "/delivery-cities",
    response_model=List[DeliveryCityRead],
    summary="List Delivery Cities",
    description="Active delivery cities sorted by name.",
)
async def list_delivery_cities(repos: ReposDep) -> List[DeliveryCityRead]:
    return [DeliveryCityRead.model_validate(city) for city in await repos.delivery_cities.list_cities()]


@admin_router.get("/delivery-cities", response_model=List[DeliveryCityRead], summary="Admin List Delivery Cities")
async def admin_list_delivery_cities(
    admin: AdminDep, repos: ReposDep, include_inactive: bool = True
) -> List[DeliveryCityRead]:
    cities = await repos.delivery_cities.list_cities(include_inactive=include_inactive)
    return [DeliveryCityRead.model_validate(city) for city in cities]


@admin_router.post(
    "/delivery-cities",
    response_model=DeliveryCityRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Delivery City",
    responses={409: {"description": "A city with this name already exists"}},
)
async def create_delivery_city(payload: DeliveryCityCreate, admin: AdminDep, repos: ReposDep) -> DeliveryCityRead:
    name = payload.name.strip()
    if await repos.delivery_cities.name_taken(name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Delivery city already exists")
    city = await repos.delivery_cities.create(DeliveryCity(name=name, price=payload.price, is_active=payload.is_active))
    return DeliveryCityRead.model_validate(city)


@admin_router.get(
    "/delivery-cities/{city_id}",
    response_model=DeliveryCityRead,
    summary="Get Delivery City",
    responses={404: {"description": "Delivery city not found"}},
)
async def get_delivery_city(city_id: int, admin: AdminDep, repos: ReposDep) -> DeliveryCityRead:
    return DeliveryCityRead.model_validate(await _get_city(repos, city_id))


@admin_router.put(
    "/delivery-cities/{city_id}",
    response_model=DeliveryCityRead,
    summary="Update Delivery City",
    responses={
        404: {"description": "Delivery city not found"},
        409: {"description": "Another city already has this name"},
    },
)
async def update_delivery_city(
    city_id: int, payload: DeliveryCityUpdate, admin: AdminDep, repos: ReposDep
) -> DeliveryCityRead:
    city = await _get_city(repos, city_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        changes["name"] = changes["name"].strip()
        if await repos.delivery_cities.name_taken(changes["name"], exclude_city_id=city_id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Delivery city already exists")
    for key, value in changes.items():
        setattr(city, key, value)
    city = await repos.delivery_cities.update(city)
    return DeliveryCityRead.model_validate(city)


@admin_router.delete(
    "/delivery-cities/{city_id}",
    response_model=MessageResponse,
    summary="Delete Delivery City",
    responses={404: {"description": "Delivery city not found"}},
)
async def delete_delivery_city(city_id: int, admin: AdminDep, repos: ReposDep) -> MessageResponse:
    await _get_city(repos, city_id)
    await repos.delivery_cities.delete(city_id)
    return MessageResponse(message="Delivery city deleted")
