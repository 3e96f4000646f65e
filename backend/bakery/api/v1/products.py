"""
Product endpoints.

Everyone may read products (the order editor needs them); only admins may
change them.
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from bakery.api.deps import AdminUser, CurrentUser, PageParams, ProductServiceDep
from bakery.schemas.common import Page
from bakery.schemas.products import ProductResponse, ProductWrite

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=Page[ProductResponse])
async def list_products(
    current_user: CurrentUser,
    service: ProductServiceDep,
    page: PageParams,
    filter: Annotated[Optional[str], Query(max_length=255, description="Name contains")] = None,
) -> Page[ProductResponse]:
    products = await service.find_any_matching(filter, page)
    return Page[ProductResponse](
        items=[ProductResponse.model_validate(product) for product in products],
        total=await service.count_any_matching(filter),
        page=page.page,
        size=page.size,
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: UUID, current_user: CurrentUser, service: ProductServiceDep) -> ProductResponse:
    return ProductResponse.model_validate(await service.load(product_id))


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(data: ProductWrite, current_user: AdminUser, service: ProductServiceDep) -> ProductResponse:
    product = service.create_new(current_user)
    product.name = data.name
    product.price = data.price
    return ProductResponse.model_validate(await service.save(current_user, product))


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: UUID,
    data: ProductWrite,
    current_user: AdminUser,
    service: ProductServiceDep,
) -> ProductResponse:
    product = await service.load(product_id)
    service.check_version(product, data.version)
    product.name = data.name
    product.price = data.price
    return ProductResponse.model_validate(await service.save(current_user, product))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: UUID, current_user: AdminUser, service: ProductServiceDep) -> None:
    await service.delete_by_id(current_user, product_id)
