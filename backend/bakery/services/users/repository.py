"""User data access."""

from typing import Optional

from sqlalchemy import String, cast, func, select

from bakery.database.models import User
from bakery.services.repository import CrudRepository


class UserRepository(CrudRepository[User]):
    model = User

    def search_columns(self):
        # role is stored as text but typed as an enum; compare it as text
        return (User.email, User.first_name, User.last_name, cast(User.role, String))

    def order_by(self):
        return (User.email, User.id)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Look up a user by email, ignoring case."""
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()
