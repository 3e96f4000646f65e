"""
Order request and response schemas.

Write schemas carry the whole editable state of an order; the service copies
it onto a new or loaded aggregate. Card responses are the compact form used
by the storefront listing and carry the date band header.
"""

from datetime import date, datetime, time
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bakery.database.models.customer import is_valid_phone_number
from bakery.database.models.order import OrderState
from bakery.schemas.pickup_locations import PickupLocationResponse
from bakery.schemas.products import ProductResponse


class CustomerWrite(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: str = Field(..., min_length=1, max_length=255)
    phone_number: str = Field(..., min_length=1, max_length=20)
    details: Optional[str] = Field(None, max_length=255)

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v: str) -> str:
        """Accept numbers like ``+358 40 1234567`` or ``040-123-4567``."""
        if not is_valid_phone_number(v):
            raise ValueError("Invalid phone number")
        return v


class OrderItemWrite(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    product_id: UUID
    quantity: int = Field(1, ge=1)
    comment: Optional[str] = Field(None, max_length=255)


class OrderWrite(BaseModel):
    """
    Editable state of an order.

    ``state`` is optional; when given and different from the stored state
    the change is recorded in the order history.
    """

    due_date: date
    due_time: time
    pickup_location_id: UUID
    customer: CustomerWrite
    items: list[OrderItemWrite] = Field(..., min_length=1)
    state: Optional[OrderState] = None
    version: Optional[int] = Field(
        None, description="Version the client edited; required on update"
    )


class CommentRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    message: str = Field(..., min_length=1, max_length=255)


class StateChangeRequest(BaseModel):
    state: OrderState
    version: int


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    details: Optional[str] = None


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product: ProductResponse
    quantity: int
    comment: Optional[str] = None
    total_price: int


class HistoryUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    first_name: str
    last_name: str


class HistoryItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    new_state: Optional[OrderState] = None
    message: str
    timestamp: datetime
    created_by: HistoryUser


class OrderResponse(BaseModel):
    """Full order, including its history."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[UUID] = None
    version: Optional[int] = None
    due_date: Optional[date] = None
    due_time: Optional[time] = None
    state: OrderState
    pickup_location: Optional[PickupLocationResponse] = None
    customer: CustomerResponse
    items: list[OrderItemResponse]
    history: list[HistoryItemResponse]
    total_price: int


class OrderCardHeaderResponse(BaseModel):
    main: str
    secondary: str


class OrderCardItem(BaseModel):
    product_name: str
    quantity: int


class OrderCardResponse(BaseModel):
    """Storefront list entry."""

    id: UUID
    version: int
    due_date: date
    due_time: time
    state: OrderState
    customer_name: str
    pickup_location: str
    items: list[OrderCardItem]
    total_price: int
    header: Optional[OrderCardHeaderResponse] = None
    starts_band: bool = Field(
        False, description="First order of its band in this listing"
    )
