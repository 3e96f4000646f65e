"""Pickup location endpoints; reads for everyone, writes for admins."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from bakery.api.deps import AdminUser, CurrentUser, PageParams, PickupLocationServiceDep
from bakery.schemas.common import Page
from bakery.schemas.pickup_locations import PickupLocationResponse, PickupLocationWrite

router = APIRouter(prefix="/pickup-locations", tags=["pickup-locations"])


@router.get("", response_model=Page[PickupLocationResponse])
async def list_pickup_locations(
    current_user: CurrentUser,
    service: PickupLocationServiceDep,
    page: PageParams,
    filter: Annotated[Optional[str], Query(max_length=255)] = None,
) -> Page[PickupLocationResponse]:
    locations = await service.find_any_matching(filter, page)
    return Page[PickupLocationResponse](
        items=[PickupLocationResponse.model_validate(location) for location in locations],
        total=await service.count_any_matching(filter),
        page=page.page,
        size=page.size,
    )


@router.get("/default", response_model=PickupLocationResponse, summary="Location preselected for new orders")
async def default_pickup_location(current_user: CurrentUser, service: PickupLocationServiceDep) -> PickupLocationResponse:
    return PickupLocationResponse.model_validate(await service.get_default())


@router.get("/{location_id}", response_model=PickupLocationResponse)
async def get_pickup_location(
    location_id: UUID, current_user: CurrentUser, service: PickupLocationServiceDep
) -> PickupLocationResponse:
    return PickupLocationResponse.model_validate(await service.load(location_id))


@router.post("", response_model=PickupLocationResponse, status_code=status.HTTP_201_CREATED)
async def create_pickup_location(
    data: PickupLocationWrite, current_user: AdminUser, service: PickupLocationServiceDep
) -> PickupLocationResponse:
    location = service.create_new(current_user)
    location.name = data.name
    return PickupLocationResponse.model_validate(await service.save(current_user, location))


@router.put("/{location_id}", response_model=PickupLocationResponse)
async def update_pickup_location(
    location_id: UUID,
    data: PickupLocationWrite,
    current_user: AdminUser,
    service: PickupLocationServiceDep,
) -> PickupLocationResponse:
    location = await service.load(location_id)
    service.check_version(location, data.version)
    location.name = data.name
    return PickupLocationResponse.model_validate(await service.save(current_user, location))


@router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pickup_location(
    location_id: UUID, current_user: AdminUser, service: PickupLocationServiceDep
) -> None:
    await service.delete_by_id(current_user, location_id)
