"""
Bakery staff accounts.

Users authenticate with email and password. The role decides which parts of
the API they may use; the ``locked`` flag protects seeded or special accounts
from being modified or deleted through the application.
"""

import enum

from sqlalchemy import Boolean, CheckConstraint, Enum as SQLEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from bakery.database.base import BaseModel


class UserRole(str, enum.Enum):
    """Staff roles."""

    BARISTA = "barista"
    BAKER = "baker"
    ADMIN = "admin"


class User(BaseModel):
    """
    Staff member account.

    Attributes:
        email: Login name, always stored lower-cased
        password_hash: bcrypt hash of the password
        first_name: Given name
        last_name: Family name
        role: Access role
        locked: Account may not be modified or deleted
    """

    __tablename__ = "users"

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login email, lower-cased",
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(
            UserRole,
            name="user_role",
            native_enum=False,
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
    )
    locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("length(password_hash) >= 4", name="password_hash_length"),
        CheckConstraint("length(first_name) >= 1", name="first_name_not_blank"),
        CheckConstraint("length(last_name) >= 1", name="last_name_not_blank"),
    )

    __mapper_args__ = {"version_id_col": version}

    @validates("email")
    def _lowercase_email(self, key: str, value: str) -> str:
        return value.strip().lower() if value is not None else value

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r}, role={self.role})>"
