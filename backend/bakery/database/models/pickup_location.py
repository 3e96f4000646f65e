"""Places where customers collect their orders."""

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from bakery.database.base import BaseModel


class PickupLocation(BaseModel):
    __tablename__ = "pickup_locations"

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    __table_args__ = (
        CheckConstraint("length(name) >= 1", name="name_not_blank"),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<PickupLocation(id={self.id}, name={self.name!r})>"
