"""
Date band headers for the storefront order list.

The storefront lists orders by due date and shows a header such as
"Today" or "Upcoming" above each band. ``OrderHeaderGenerator`` builds the
chain of bands for the current day and assigns every order of a sorted batch
to one band in a single forward pass.

The scan keeps an explicit cursor into the chain that only moves forward
within one ``reset`` cycle, so batches must arrive in non-decreasing due
date order. An order dated before the band the cursor already passed gets
no header.
"""

import uuid
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Iterable, NamedTuple, Optional, Protocol


class OrderCardHeader(NamedTuple):
    main: str
    secondary: str


class DatedOrder(Protocol):
    id: uuid.UUID
    due_date: date


def format_day(day: date) -> str:
    """``Tue, Oct 6`` style label."""
    return f"{day:%a}, {day:%b} {day.day}"


@dataclass(frozen=True)
class Band:
    header: OrderCardHeader
    matches: Callable[[date], bool]


def build_bands(today: date, show_previous: bool) -> list[Band]:
    """
    Bands for ``today``, in ascending date order.

    Weeks start on Monday. With ``show_previous`` the chain starts with
    Recent, This week before yesterday (only when that range is not empty)
    and Yesterday.
    """
    yesterday = today - timedelta(days=1)
    tomorrow = today + timedelta(days=1)
    start_of_week = today - timedelta(days=today.weekday())
    start_of_next_week = start_of_week + timedelta(days=7)
    end_of_week = start_of_next_week - timedelta(days=1)

    bands: list[Band] = []
    if show_previous:
        bands.append(
            Band(
                OrderCardHeader("Recent", "Before this week"),
                lambda d: d < start_of_week,
            )
        )
        if start_of_week < yesterday:
            bands.append(
                Band(
                    OrderCardHeader(
                        "This week before yesterday",
                        f"{format_day(start_of_week)} - {format_day(yesterday)}",
                    ),
                    lambda d: start_of_week <= d < yesterday,
                )
            )
        bands.append(
            Band(
                OrderCardHeader("Yesterday", format_day(yesterday)),
                lambda d: d == yesterday,
            )
        )

    bands.append(Band(OrderCardHeader("Today", format_day(today)), lambda d: d == today))
    bands.append(
        Band(
            OrderCardHeader(
                "This week starting tomorrow" if show_previous else "This week",
                f"{format_day(tomorrow)} - {format_day(end_of_week)}",
            ),
            lambda d: today < d < start_of_next_week,
        )
    )
    bands.append(
        Band(
            OrderCardHeader("Upcoming", "After this week"),
            lambda d: d >= start_of_next_week,
        )
    )
    return bands


class OrderHeaderGenerator:
    """
    Assigns storefront orders to date bands.

    One instance serves one listing; it must not be shared between
    concurrent requests.

    Example:
        >>> generator = OrderHeaderGenerator()
        >>> generator.reset(show_previous=False)
        >>> generator.assign(orders)
        >>> generator.lookup(orders[0].id)
        OrderCardHeader(main='Today', secondary='Mon, Mar 4')
    """

    def __init__(self, clock: Callable[[], date] = date.today):
        self._clock = clock
        self._bands: list[Band] = []
        self._cursor: Optional[int] = None
        self._first_order: dict[int, uuid.UUID] = {}
        self._headers: dict[uuid.UUID, OrderCardHeader] = {}

    def reset(self, show_previous: bool) -> None:
        """Rebuild the band chain for today and forget all assignments."""
        self._bands = build_bands(self._clock(), show_previous)
        self._cursor = None
        self._first_order = {}
        self._headers = {}

    def assign(self, orders: Iterable[DatedOrder]) -> None:
        """
        Assign each order of a date-sorted batch to a band.

        Orders assigned earlier in this cycle keep their band. Processing
        stops at the first order no band at or after the cursor accepts.
        """
        for order in orders:
            if order.id in self._headers:
                continue

            index = self._find_band(order.due_date)
            if index is None:
                break

            self._cursor = index
            self._first_order.setdefault(index, order.id)
            self._headers[order.id] = self._bands[index].header

    def lookup(self, order_id: uuid.UUID) -> Optional[OrderCardHeader]:
        return self._headers.get(order_id)

    def starts_band(self, order_id: uuid.UUID) -> bool:
        """True if the order was the first one assigned to its band."""
        return order_id in self._first_order.values()

    def _find_band(self, due_date: date) -> Optional[int]:
        start = 0 if self._cursor is None else self._cursor
        for index in range(start, len(self._bands)):
            if self._bands[index].matches(due_date):
                return index
        return None
