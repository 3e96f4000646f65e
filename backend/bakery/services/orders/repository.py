"""
Order data access.

Besides the generic CRUD queries this repository answers the storefront
listing (customer name filter, due date lower bound) and the grouped
aggregates behind the dashboard.
"""

import uuid
from datetime import date
from typing import Collection, Optional

from sqlalchemy import Integer, Select, cast, extract, func, select
from sqlalchemy.orm import selectinload

from bakery.database.models import Customer, Order, OrderItem, OrderState, Product
from bakery.services.repository import CrudRepository


def _date_part(field: str):
    return cast(extract(field, Order.due_date), Integer)


class OrderRepository(CrudRepository[Order]):
    model = Order

    def search_columns(self):
        return (Customer.full_name,)

    def order_by(self):
        return (Order.due_date, Order.due_time, Order.id)

    def filter_condition(self, filter_text: Optional[str]):
        condition = super().filter_condition(filter_text)
        if condition is None:
            return None
        return Order.customer.has(condition)

    def _after_due_date(
        self,
        statement: Select,
        filter_text: Optional[str],
        after_date: Optional[date],
    ) -> Select:
        statement = self._filtered(statement, filter_text)
        if after_date is not None:
            statement = statement.where(Order.due_date > after_date)
        return statement

    async def get(self, order_id: uuid.UUID) -> Optional[Order]:
        """Load an order with its full graph, history included."""
        result = await self.session.execute(
            select(Order).where(Order.id == order_id).options(selectinload(Order.history))
        )
        return result.scalar_one_or_none()

    async def find_after_due_date(
        self,
        filter_text: Optional[str],
        after_date: Optional[date],
        offset: int,
        limit: int,
    ) -> list[Order]:
        """
        Orders due after ``after_date`` whose customer name contains the filter.

        Sorted by due date, due time and id; ``None`` arguments disable the
        corresponding condition.
        """
        statement = self._after_due_date(select(Order), filter_text, after_date)
        statement = statement.order_by(*self.order_by()).offset(offset).limit(limit)
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def count_after_due_date(
        self,
        filter_text: Optional[str],
        after_date: Optional[date],
    ) -> int:
        statement = self._after_due_date(
            select(func.count()).select_from(Order), filter_text, after_date
        )
        result = await self.session.execute(statement)
        return result.scalar_one()

    async def find_starting(self, first_day: date) -> list[Order]:
        result = await self.session.execute(
            select(Order).where(Order.due_date >= first_day).order_by(*self.order_by())
        )
        return list(result.scalars().all())

    async def count_by_due_date(
        self,
        due_date: date,
        states: Optional[Collection[OrderState]] = None,
    ) -> int:
        statement = select(func.count()).select_from(Order).where(Order.due_date == due_date)
        if states is not None:
            statement = statement.where(Order.state.in_(list(states)))
        result = await self.session.execute(statement)
        return result.scalar_one()

    async def count_by_state(self, state: OrderState) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Order).where(Order.state == state)
        )
        return result.scalar_one()

    async def count_per_day(self, state: OrderState, year: int, month: int) -> list[tuple[int, int]]:
        """``(day of month, count)`` for orders in ``state`` due that month."""
        day = _date_part("day")
        result = await self.session.execute(
            select(day, func.count())
            .where(
                Order.state == state,
                _date_part("year") == year,
                _date_part("month") == month,
            )
            .group_by(day)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def count_per_month(self, state: OrderState, year: int) -> list[tuple[int, int]]:
        """``(month, count)`` for orders in ``state`` due that year."""
        month = _date_part("month")
        result = await self.session.execute(
            select(month, func.count())
            .where(Order.state == state, _date_part("year") == year)
            .group_by(month)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def sum_per_month(
        self,
        state: OrderState,
        first_year: int,
        last_year: int,
    ) -> list[tuple[int, int, int]]:
        """``(year, month, sales in cents)`` for orders in ``state``."""
        year = _date_part("year")
        month = _date_part("month")
        result = await self.session.execute(
            select(year, month, func.sum(OrderItem.quantity * Product.price))
            .select_from(Order)
            .join(OrderItem, OrderItem.order_id == Order.id)
            .join(Product, Product.id == OrderItem.product_id)
            .where(Order.state == state, year >= first_year, year <= last_year)
            .group_by(year, month)
        )
        return [(row[0], row[1], int(row[2] or 0)) for row in result.all()]

    async def quantity_per_product(
        self,
        state: OrderState,
        year: int,
        month: int,
    ) -> list[tuple[uuid.UUID, str, int]]:
        """``(product id, name, units)`` for the month, ordered by product id."""
        result = await self.session.execute(
            select(Product.id, Product.name, func.sum(OrderItem.quantity))
            .select_from(Order)
            .join(OrderItem, OrderItem.order_id == Order.id)
            .join(Product, Product.id == OrderItem.product_id)
            .where(
                Order.state == state,
                _date_part("year") == year,
                _date_part("month") == month,
            )
            .group_by(Product.id, Product.name)
            .order_by(Product.id)
        )
        return [(row[0], row[1], int(row[2] or 0)) for row in result.all()]
