"""
ORM models.

Importing this package registers every table with ``Base.metadata``, which
Alembic relies on.
"""

from bakery.database.base import Base, BaseModel
from bakery.database.models.customer import Customer
from bakery.database.models.order import (
    HistoryItem,
    NOT_AVAILABLE_STATES,
    Order,
    OrderItem,
    OrderState,
)
from bakery.database.models.pickup_location import PickupLocation
from bakery.database.models.product import Product
from bakery.database.models.user import User, UserRole

__all__ = [
    "Base",
    "BaseModel",
    "Customer",
    "HistoryItem",
    "NOT_AVAILABLE_STATES",
    "Order",
    "OrderItem",
    "OrderState",
    "PickupLocation",
    "Product",
    "User",
    "UserRole",
]
