"""
Order endpoints: storefront listing, editing, comments and state changes.

Any authenticated user may work with orders. Errors raised by the service
are turned into notifications by the application's exception handlers.
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from bakery.api.deps import CurrentUser, OrderServiceDep, PageParams
from bakery.core.logging import get_logger
from bakery.database.models import Order
from bakery.schemas.common import Page
from bakery.schemas.orders import (
    CommentRequest,
    OrderCardHeaderResponse,
    OrderCardItem,
    OrderCardResponse,
    OrderResponse,
    OrderWrite,
    StateChangeRequest,
)
from bakery.services.orders.headers import OrderHeaderGenerator

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


def to_card(order: Order, headers: Optional[OrderHeaderGenerator] = None) -> OrderCardResponse:
    header = headers.lookup(order.id) if headers is not None else None
    return OrderCardResponse(
        id=order.id,
        version=order.version,
        due_date=order.due_date,
        due_time=order.due_time,
        state=order.state,
        customer_name=order.customer.full_name,
        pickup_location=order.pickup_location.name,
        items=[
            OrderCardItem(product_name=item.product.name, quantity=item.quantity)
            for item in order.items
        ],
        total_price=order.total_price,
        header=OrderCardHeaderResponse(main=header.main, secondary=header.secondary)
        if header is not None
        else None,
        starts_band=headers.starts_band(order.id) if headers is not None else False,
    )


@router.get("", response_model=Page[OrderCardResponse], summary="Storefront order list")
async def list_orders(
    current_user: CurrentUser,
    service: OrderServiceDep,
    page: PageParams,
    filter: Annotated[Optional[str], Query(max_length=255, description="Customer name contains")] = None,
    show_previous: Annotated[bool, Query(description="Include orders due before today")] = False,
) -> Page[OrderCardResponse]:
    """
    List orders by due date with date band headers.

    Without ``show_previous`` only orders due today or later are returned.
    """
    result = await service.storefront(filter, show_previous, page)
    return Page[OrderCardResponse](
        items=[to_card(order, result.headers) for order in result.orders],
        total=result.total,
        page=page.page,
        size=page.size,
    )


@router.get("/new", response_model=OrderResponse, summary="Template for a new order")
async def new_order(current_user: CurrentUser, service: OrderServiceDep) -> OrderResponse:
    return OrderResponse.model_validate(service.create_new(current_user))


@router.get("/upcoming", response_model=list[OrderCardResponse], summary="Orders due from today")
async def upcoming_orders(current_user: CurrentUser, service: OrderServiceDep) -> list[OrderCardResponse]:
    return [to_card(order) for order in await service.find_any_matching_starting_today()]


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    data: OrderWrite,
    current_user: CurrentUser,
    service: OrderServiceDep,
) -> OrderResponse:
    order = await service.save_order(current_user, None, data)
    logger.info("Order created", order_id=str(order.id), item_count=len(order.items))
    return OrderResponse.model_validate(order)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: UUID, current_user: CurrentUser, service: OrderServiceDep) -> OrderResponse:
    return OrderResponse.model_validate(await service.load(order_id))


@router.put("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: UUID,
    data: OrderWrite,
    current_user: CurrentUser,
    service: OrderServiceDep,
) -> OrderResponse:
    return OrderResponse.model_validate(await service.save_order(current_user, order_id, data))


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(order_id: UUID, current_user: CurrentUser, service: OrderServiceDep) -> None:
    await service.delete_by_id(current_user, order_id)


@router.post("/{order_id}/comments", response_model=OrderResponse)
async def add_comment(
    order_id: UUID,
    data: CommentRequest,
    current_user: CurrentUser,
    service: OrderServiceDep,
) -> OrderResponse:
    return OrderResponse.model_validate(
        await service.add_comment(current_user, order_id, data.message)
    )


@router.post("/{order_id}/state", response_model=OrderResponse)
async def change_state(
    order_id: UUID,
    data: StateChangeRequest,
    current_user: CurrentUser,
    service: OrderServiceDep,
) -> OrderResponse:
    order = await service.change_state(current_user, order_id, data.state, data.version)
    return OrderResponse.model_validate(order)
