"""
SQLAlchemy declarative base and shared column mixins.

Primary keys are client-generated UUIDs and timestamps are produced in
Python, so freshly flushed rows never need a round trip to read back
server defaults (an async session cannot lazy-load them).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, MetaData
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all bakery models."""

    __abstract__ = True

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    def __repr__(self) -> str:
        pk_values = [
            f"{column.key}={getattr(self, column.key, None)!r}"
            for column in self.__table__.primary_key.columns
        ]
        return f"<{self.__class__.__name__}({', '.join(pk_values)})>"


class UUIDMixin:
    """UUID primary key generated on the application side."""

    @declared_attr
    def id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            UUID(as_uuid=True),
            primary_key=True,
            default=uuid.uuid4,
            comment="Unique identifier for the record",
        )


class TimestampMixin:
    """Creation and last modification timestamps."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            comment="Timestamp when record was created",
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            onupdate=utcnow,
            comment="Timestamp when record was last updated",
        )


class BaseModel(Base, UUIDMixin, TimestampMixin):
    """
    Base for entities with their own lifecycle.

    Aggregate roots additionally declare an integer ``version`` column and
    register it as ``version_id_col`` so that stale updates fail with
    ``StaleDataError``.

    Example:
        class Product(BaseModel):
            __tablename__ = "products"

            version: Mapped[int] = mapped_column(Integer, nullable=False)
            name: Mapped[str] = mapped_column(String(255), unique=True)

            __mapper_args__ = {"version_id_col": version}
    """

    __abstract__ = True
