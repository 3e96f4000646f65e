"""
Order use cases.

``OrderService`` creates and edits orders, records comments and state
changes in the order history, serves the storefront listing and builds the
dashboard figures. Every write happens in the caller's session; the request
boundary commits or rolls back.
"""

import calendar
import uuid
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bakery.core.config import get_settings
from bakery.core.exceptions import DataValidationError, EntityNotFoundError
from bakery.core.logging import log_performance
from bakery.database.base import utcnow
from bakery.database.models import (
    NOT_AVAILABLE_STATES,
    Order,
    OrderItem,
    OrderState,
    User,
)
from bakery.database.models.customer import is_valid_phone_number
from bakery.schemas.orders import OrderWrite
from bakery.services.crud import FilterableCrudService, PageRequest
from bakery.services.orders.dashboard import (
    SALES_YEARS,
    DashboardData,
    DeliveryStats,
    fill,
    product_deliveries,
    sales_per_month_grid,
)
from bakery.services.orders.headers import OrderHeaderGenerator
from bakery.services.orders.repository import OrderRepository
from bakery.services.pickup_locations.repository import PickupLocationRepository
from bakery.services.products.repository import ProductRepository


@dataclass
class StorefrontPage:
    orders: list[Order]
    total: int
    headers: OrderHeaderGenerator


class OrderService(FilterableCrudService[Order]):
    """
    Order lifecycle and reporting.

    Attributes:
        repository: Order data access
        clock: Returns today's date; replaced in tests
    """

    repository_class = OrderRepository

    def __init__(self, session: AsyncSession, clock: Callable[[], date] = date.today):
        super().__init__(session)
        self.clock = clock
        self.products = ProductRepository(session)
        self.pickup_locations = PickupLocationRepository(session)

    def create_new(self, current_user: User) -> Order:
        """New order due today at the configured default time."""
        order = Order.create(current_user)
        order.due_date = self.clock()
        order.due_time = get_settings().default_due_time
        return order

    async def save_order(
        self,
        current_user: User,
        order_id: Optional[uuid.UUID],
        data: OrderWrite,
    ) -> Order:
        """
        Create an order or update an existing one from ``data``.

        Args:
            current_user: User doing the edit, recorded in the history
            order_id: Order to update, or None to create one
            data: New editable state of the order

        Returns:
            The saved order

        Raises:
            EntityNotFoundError: If the order, product or location is missing
            ConcurrentUpdateError: If the order changed since the client read it
            DataValidationError: If the resulting order is incomplete
        """
        if order_id is None:
            order = self.create_new(current_user)
        else:
            order = await self.load(order_id)
            self.check_version(order, data.version)

        await self._apply(current_user, order, data)
        self.validate(order)
        return await self._save_changed(current_user, order, is_new=order_id is None)

    async def add_comment(self, current_user: User, order_id: uuid.UUID, message: str) -> Order:
        """Append a comment to the history without changing the state."""
        order = await self.load(order_id)
        order.add_history_item(current_user, message)
        return await self._save_changed(current_user, order)

    async def change_state(
        self,
        current_user: User,
        order_id: uuid.UUID,
        state: OrderState,
        expected_version: Optional[int] = None,
    ) -> Order:
        order = await self.load(order_id)
        self.check_version(order, expected_version)
        previous = order.state
        order.change_state(current_user, state)
        self.logger.info(
            "Order state changed",
            order_id=str(order.id),
            previous_state=previous.value if previous else None,
            new_state=state.value,
        )
        return await self._save_changed(current_user, order)

    async def find_any_matching_after_due_date(
        self,
        filter_text: Optional[str],
        after_date: Optional[date],
        page: PageRequest,
    ) -> list[Order]:
        return await self.repository.find_after_due_date(
            filter_text, after_date, page.offset, page.size
        )

    async def count_any_matching_after_due_date(
        self,
        filter_text: Optional[str],
        after_date: Optional[date],
    ) -> int:
        return await self.repository.count_after_due_date(filter_text, after_date)

    async def find_any_matching_starting_today(self) -> list[Order]:
        return await self.repository.find_starting(self.clock())

    async def storefront(
        self,
        filter_text: Optional[str],
        show_previous: bool,
        page: PageRequest,
    ) -> StorefrontPage:
        """
        One page of the storefront listing with date band headers.

        Without ``show_previous`` only orders due today or later are listed.
        """
        after_date = None if show_previous else self.clock() - timedelta(days=1)
        orders = await self.find_any_matching_after_due_date(filter_text, after_date, page)
        total = await self.count_any_matching_after_due_date(filter_text, after_date)

        headers = OrderHeaderGenerator(clock=self.clock)
        headers.reset(show_previous)
        headers.assign(orders)
        return StorefrontPage(orders=orders, total=total, headers=headers)

    async def get_delivery_stats(self) -> DeliveryStats:
        today = self.clock()
        tomorrow = today + timedelta(days=1)
        return DeliveryStats(
            delivered_today=await self.repository.count_by_due_date(
                today, [OrderState.DELIVERED]
            ),
            due_today=await self.repository.count_by_due_date(today),
            due_tomorrow=await self.repository.count_by_due_date(tomorrow),
            not_available_today=await self.repository.count_by_due_date(
                today, NOT_AVAILABLE_STATES
            ),
            new_orders=await self.repository.count_by_state(OrderState.NEW),
        )

    async def get_dashboard_data(self, month: int, year: int) -> DashboardData:
        """
        Delivery and sales figures for ``month`` of ``year``.

        Raises:
            DataValidationError: If ``month`` is not between 1 and 12
        """
        if not 1 <= month <= 12:
            raise DataValidationError(fields=["month"], month=month)

        delivered = OrderState.DELIVERED
        with log_performance(self.logger, "dashboard", month=month, year=year):
            stats = await self.get_delivery_stats()
            per_day = await self.repository.count_per_day(delivered, year, month)
            per_month = await self.repository.count_per_month(delivered, year)
            sales = await self.repository.sum_per_month(
                delivered, year - SALES_YEARS + 1, year
            )
            products = await self.repository.quantity_per_product(delivered, year, month)

        return DashboardData(
            delivery_stats=stats,
            deliveries_this_month=fill(calendar.monthrange(year, month)[1], per_day),
            deliveries_this_year=fill(12, per_month),
            sales_per_month=sales_per_month_grid(sales, month, year),
            product_deliveries=product_deliveries(products),
        )

    def validate(self, order: Order) -> None:
        """
        Check that an order is complete enough to be stored.

        Raises:
            DataValidationError: Naming every missing or malformed field
        """
        missing = []
        if order.due_date is None:
            missing.append("due_date")
        if order.due_time is None:
            missing.append("due_time")
        if order.pickup_location is None:
            missing.append("pickup_location")
        customer = order.customer
        if customer is None or not (customer.full_name or "").strip():
            missing.append("customer.full_name")
        if customer is None or not is_valid_phone_number(customer.phone_number):
            missing.append("customer.phone_number")
        if not order.items:
            missing.append("items")
        for index, item in enumerate(order.items or []):
            if item.product is None or item.quantity is None or item.quantity < 1:
                missing.append(f"items.{index}")

        if missing:
            raise DataValidationError(fields=missing, order_id=str(order.id))

    async def _apply(self, current_user: User, order: Order, data: OrderWrite) -> None:
        order.due_date = data.due_date
        order.due_time = data.due_time
        order.pickup_location = await self._reference(
            self.pickup_locations, data.pickup_location_id
        )

        order.customer.full_name = data.customer.full_name
        order.customer.phone_number = data.customer.phone_number
        order.customer.details = data.customer.details

        order.items = [
            OrderItem(
                product=await self._reference(self.products, item.product_id),
                quantity=item.quantity,
                comment=item.comment,
            )
            for item in data.items
        ]

        if data.state is not None:
            order.change_state(current_user, data.state)

    async def _reference(self, repository, entity_id: uuid.UUID):
        entity = await repository.get(entity_id)
        if entity is None:
            raise EntityNotFoundError(
                model=repository.model.__name__, entity_id=str(entity_id)
            )
        return entity

    async def _save_changed(
        self,
        current_user: User,
        order: Order,
        is_new: bool = False,
    ) -> Order:
        if not is_new:
            # Touch the order row so its version moves even when only owned
            # rows (items, history, customer) changed.
            order.updated_at = utcnow()
        return await self.save(current_user, order)
