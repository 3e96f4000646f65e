"""
Customer contact details.

A customer row belongs to exactly one order and is created, updated and
deleted together with it.
"""

import re
from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from bakery.database.base import BaseModel

PHONE_NUMBER_PATTERN = re.compile(r"^(\+\d+)?([ -]?\d+){4,14}$")


def is_valid_phone_number(value: Optional[str]) -> bool:
    """Loose international phone number check, e.g. ``+358 40 123 4567``."""
    return bool(value) and len(value) <= 20 and PHONE_NUMBER_PATTERN.match(value) is not None


class Customer(BaseModel):
    __tablename__ = "customers"

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False)
    details: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, full_name={self.full_name!r})>"
