"""Pickup location request and response schemas."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PickupLocationWrite(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    version: Optional[int] = Field(None, description="Required on update")


class PickupLocationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    version: int
    name: str
