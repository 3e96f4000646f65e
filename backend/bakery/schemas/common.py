"""Schemas shared by all routers."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a filtered listing."""

    items: list[T]
    total: int = Field(..., ge=0, description="Number of rows matching the filter")
    page: int = Field(..., ge=0)
    size: int = Field(..., ge=1)


class Notification(BaseModel):
    """Error body shown to the user as a notification."""

    error: str = Field(..., description="Error kind, e.g. not_found or conflict")
    message: str
    persistent: bool = Field(
        ..., description="Whether the notice stays until dismissed"
    )
    request_id: Optional[str] = None
    fields: list[str] = Field(default_factory=list)
