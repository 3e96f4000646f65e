"""Product request and response schemas."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from bakery.database.models.product import MAX_PRICE


class ProductWrite(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    price: int = Field(..., ge=0, le=MAX_PRICE, description="Price in cents")
    version: Optional[int] = Field(
        None, description="Version the client edited; required on update"
    )


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    version: int
    name: str
    price: int
