"""Products offered by the bakery."""

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from bakery.database.base import BaseModel

MAX_PRICE = 100000


class Product(BaseModel):
    """
    Sellable product.

    Attributes:
        name: Unique display name
        price: Price in minor currency units (cents)
    """

    __tablename__ = "products"

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    price: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Price in cents",
    )

    __table_args__ = (
        CheckConstraint("length(name) >= 1", name="name_not_blank"),
        CheckConstraint(f"price >= 0 AND price <= {MAX_PRICE}", name="price_range"),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name={self.name!r}, price={self.price})>"
