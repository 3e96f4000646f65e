"""
Dashboard data shaping.

Aggregate queries only return rows for days or months that had data. The
charts need fixed-length series, so the sparse rows are spread into lists in
which ``None`` marks "no data".
"""

from typing import Iterable, Optional, Sequence, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

SALES_YEARS = 3


def fill(length: int, pairs: Iterable[tuple[int, T]]) -> list[Optional[T]]:
    """
    Spread 1-based ``(index, value)`` pairs into a list of ``length``.

    Positions without a pair stay ``None``; a repeated index keeps the last
    value.

    Example:
        >>> fill(5, [(2, 7), (4, 1)])
        [None, 7, None, 1, None]
    """
    result: list[Optional[T]] = [None] * length
    for index, value in pairs:
        result[index - 1] = value
    return result


def sales_per_month_grid(
    rows: Iterable[tuple[int, int, T]],
    month: int,
    year: int,
) -> list[list[Optional[T]]]:
    """
    Monthly sales of the last three years as a 3x12 grid.

    Args:
        rows: ``(year, month, sum)`` tuples
        month: Month being rendered; its cell is left empty because the
            month is not over yet
        year: Year being rendered; row 0 is this year, row 1 the year
            before and so on

    Returns:
        Three rows of twelve cells, ``None`` where there is no data
    """
    grid: list[list[Optional[T]]] = [[None] * 12 for _ in range(SALES_YEARS)]
    for row_year, row_month, total in rows:
        offset = year - row_year
        if not 0 <= offset < SALES_YEARS:
            continue
        if offset == 0 and row_month == month:
            continue
        grid[offset][row_month - 1] = total
    return grid


class DeliveryStats(BaseModel):
    """Counts shown in the dashboard header."""

    delivered_today: int = 0
    due_today: int = 0
    due_tomorrow: int = 0
    not_available_today: int = 0
    new_orders: int = 0


class ProductDelivery(BaseModel):
    product_id: str
    name: str
    quantity: int


class DashboardData(BaseModel):
    delivery_stats: DeliveryStats
    deliveries_this_month: list[Optional[int]]
    deliveries_this_year: list[Optional[int]] = Field(min_length=12, max_length=12)
    sales_per_month: list[list[Optional[int]]]
    product_deliveries: list[ProductDelivery] = Field(default_factory=list)


def product_deliveries(rows: Sequence[tuple]) -> list[ProductDelivery]:
    """``(product_id, name, quantity)`` rows, already ordered by product id."""
    return [
        ProductDelivery(product_id=str(product_id), name=name, quantity=int(quantity))
        for product_id, name, quantity in rows
    ]
