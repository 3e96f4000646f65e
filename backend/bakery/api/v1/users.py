"""User administration endpoints, admin only."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from bakery.api.deps import AdminUser, PageParams, UserServiceDep
from bakery.core.logging import get_logger
from bakery.schemas.common import Page
from bakery.schemas.users import UserCreate, UserResponse, UserUpdate

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=Page[UserResponse])
async def list_users(
    current_user: AdminUser,
    service: UserServiceDep,
    page: PageParams,
    filter: Annotated[Optional[str], Query(max_length=255, description="Email, name or role contains")] = None,
) -> Page[UserResponse]:
    users = await service.find_any_matching(filter, page)
    return Page[UserResponse](
        items=[UserResponse.model_validate(user) for user in users],
        total=await service.count_any_matching(filter),
        page=page.page,
        size=page.size,
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: UUID, current_user: AdminUser, service: UserServiceDep) -> UserResponse:
    return UserResponse.model_validate(await service.load(user_id))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(data: UserCreate, current_user: AdminUser, service: UserServiceDep) -> UserResponse:
    user = service.apply_changes(
        service.create_new(current_user),
        email=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
        role=data.role,
        password=data.password,
    )
    user = await service.save(current_user, user)
    logger.info("User created", user_id=str(user.id), role=user.role.value)
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    current_user: AdminUser,
    service: UserServiceDep,
) -> UserResponse:
    user = await service.load(user_id)
    service.check_version(user, data.version)
    service.apply_changes(
        user,
        email=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
        role=data.role,
        password=data.password,
    )
    return UserResponse.model_validate(await service.save(current_user, user))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: UUID, current_user: AdminUser, service: UserServiceDep) -> None:
    await service.delete_by_id(current_user, user_id)
