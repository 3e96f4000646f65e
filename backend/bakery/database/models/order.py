"""
Order aggregate.

An order owns its customer, its line items and its history log. State
changes go through ``Order.change_state`` so that every real transition
leaves exactly one history entry behind; comments are appended with
``Order.add_history_item`` and leave the state alone.
"""

import uuid
from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Time,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bakery.database.base import Base, BaseModel, utcnow
from bakery.database.models.customer import Customer
from bakery.database.models.pickup_location import PickupLocation
from bakery.database.models.product import Product
from bakery.database.models.user import User

ORDER_PLACED_MESSAGE = "Order placed"


class OrderState(str, Enum):
    """Lifecycle states of an order."""

    NEW = "new"
    CONFIRMED = "confirmed"
    READY = "ready"
    DELIVERED = "delivered"
    PROBLEM = "problem"
    CANCELLED = "cancelled"

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


# States in which a product is not yet available for the customer to pick up.
NOT_AVAILABLE_STATES = frozenset(
    state
    for state in OrderState
    if state not in (OrderState.DELIVERED, OrderState.READY, OrderState.CANCELLED)
)


def _state_enum(name: str) -> SQLEnum:
    return SQLEnum(
        OrderState,
        name=name,
        native_enum=False,
        values_callable=lambda states: [state.value for state in states],
    )


class OrderItem(Base):
    """
    One line of an order.

    Attributes:
        product: Ordered product
        quantity: Number of units, at least 1
        comment: Free text note for the baker
    """

    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    comment: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    product: Mapped[Product] = relationship(lazy="selectin")

    __table_args__ = (CheckConstraint("quantity >= 1", name="quantity_positive"),)

    @property
    def total_price(self) -> int:
        """``quantity * product.price``, or 0 when either is missing."""
        if self.quantity is None or self.product is None or self.product.price is None:
            return 0
        return self.quantity * self.product.price

    def __repr__(self) -> str:
        return f"<OrderItem(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"


class HistoryItem(Base):
    """
    Entry in an order's history log.

    Attributes:
        new_state: Order state at the time the entry was written
        message: What happened
        timestamp: When the entry was created
        created_by: User who caused the entry
    """

    __tablename__ = "history_items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    new_state: Mapped[Optional[OrderState]] = mapped_column(
        _state_enum("history_item_state"), nullable=True
    )
    message: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    created_by: Mapped[User] = relationship(lazy="selectin")

    def __init__(self, **kwargs):
        kwargs.setdefault("timestamp", utcnow())
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return f"<HistoryItem(message={self.message!r}, new_state={self.new_state})>"


class Order(BaseModel):
    """
    Customer order.

    Attributes:
        due_date: Day the order is picked up
        due_time: Time of day the order is picked up
        pickup_location: Where the order is picked up
        customer: Owned customer details
        items: Owned, ordered line items
        state: Current lifecycle state
        history: Owned, append-only log; only loaded when explicitly requested

    Example:
        >>> order = Order.create(baker)
        >>> order.change_state(baker, OrderState.CONFIRMED)
        >>> [entry.message for entry in order.history]
        ['Order placed', 'Order CONFIRMED']
    """

    __tablename__ = "orders"

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_time: Mapped[time] = mapped_column(Time, nullable=False)
    state: Mapped[OrderState] = mapped_column(
        _state_enum("order_state"), nullable=False, default=OrderState.NEW
    )
    pickup_location_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("pickup_locations.id", ondelete="RESTRICT"),
        nullable=False,
    )
    customer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )

    pickup_location: Mapped[PickupLocation] = relationship(lazy="selectin")
    customer: Mapped[Customer] = relationship(
        lazy="selectin",
        cascade="all, delete-orphan",
        single_parent=True,
    )
    items: Mapped[list[OrderItem]] = relationship(
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=OrderItem.position,
        collection_class=ordering_list("position"),
    )
    history: Mapped[list[HistoryItem]] = relationship(
        lazy="select",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=HistoryItem.position,
        collection_class=ordering_list("position"),
    )

    __table_args__ = (
        Index("ix_orders_due_date_due_time", "due_date", "due_time"),
        Index("ix_orders_state", "state"),
    )

    __mapper_args__ = {"version_id_col": version}

    @classmethod
    def create(cls, created_by: User) -> "Order":
        """
        Start a new order placed by ``created_by``.

        The order is NEW, has an empty customer, no items and a single
        "Order placed" history entry.
        """
        order = cls(state=OrderState.NEW, customer=Customer(), items=[], history=[])
        order.add_history_item(created_by, ORDER_PLACED_MESSAGE)
        return order

    def add_history_item(self, created_by: User, message: str) -> HistoryItem:
        """Append a history entry tagged with the current state."""
        item = HistoryItem(created_by=created_by, message=message, new_state=self.state)
        self.history.append(item)
        return item

    def change_state(self, user: User, new_state: Optional[OrderState]) -> None:
        """
        Move the order to ``new_state``.

        A history entry is written only when both the old and the new state
        are set and differ.
        """
        record = self.state is not None and new_state is not None and self.state != new_state
        self.state = new_state
        if record:
            self.add_history_item(user, f"Order {new_state.name}")

    @property
    def total_price(self) -> int:
        """Sum of item totals in cents."""
        return sum(item.total_price for item in self.items or [])

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, due_date={self.due_date}, "
            f"state={self.state}, items={len(self.items or [])})>"
        )
