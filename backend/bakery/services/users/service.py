"""
User management.

Two rules protect accounts beyond plain CRUD: a locked user can be neither
modified nor deleted, and nobody can delete their own account.
"""

from typing import Optional

from bakery.core.exceptions import DataIntegrityError, UserFriendlyDataError
from bakery.core.security import hash_password
from bakery.database.models import User, UserRole
from bakery.services.crud import FilterableCrudService
from bakery.services.users.repository import UserRepository

MODIFY_LOCKED_USER_NOT_PERMITTED = "User has been locked and cannot be modified or deleted"
DELETING_SELF_NOT_PERMITTED = "You cannot delete your own account"
UNIQUE_EMAIL_CONSTRAINT = "uq_users_email"
DUPLICATE_EMAIL_MESSAGE = (
    "There is already a user with that email. Please use a different email address."
)


class UserService(FilterableCrudService[User]):
    repository_class = UserRepository

    def create_new(self, current_user: User) -> User:
        return User(locked=False)

    def apply_changes(
        self,
        user: User,
        *,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: Optional[UserRole] = None,
        password: Optional[str] = None,
    ) -> User:
        """
        Copy edited fields onto ``user``; ``None`` leaves a field unchanged.

        A new password is hashed before it is stored.
        """
        if email is not None:
            user.email = email
        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        if role is not None:
            user.role = role
        if password:
            user.password_hash = hash_password(password)
        return user

    async def save(self, current_user: User, entity: User) -> User:
        """
        Save a user.

        Raises:
            UserFriendlyDataError: If the user is locked or the email is taken
            DataIntegrityError: If any other constraint rejected the row
        """
        self._throw_if_locked(entity)
        try:
            return await super().save(current_user, entity)
        except DataIntegrityError as e:
            if e.context.get("constraint") != UNIQUE_EMAIL_CONSTRAINT:
                raise
            raise UserFriendlyDataError(DUPLICATE_EMAIL_MESSAGE, **e.context) from e

    async def delete(self, current_user: User, entity: Optional[User]) -> None:
        """
        Delete a user.

        Raises:
            EntityNotFoundError: If ``entity`` is None
            UserFriendlyDataError: If deleting oneself or a locked user
            ReferentialIntegrityError: If orders still reference the user
        """
        if entity is not None:
            self._throw_if_deleting_self(current_user, entity)
            self._throw_if_locked(entity)
        await super().delete(current_user, entity)

    def _throw_if_deleting_self(self, current_user: User, user: User) -> None:
        if current_user.id == user.id:
            self.logger.warning("Self deletion refused", user_id=str(user.id))
            raise UserFriendlyDataError(DELETING_SELF_NOT_PERMITTED, user_id=str(user.id))

    def _throw_if_locked(self, user: User) -> None:
        if user.locked:
            self.logger.warning("Locked user change refused", user_id=str(user.id))
            raise UserFriendlyDataError(MODIFY_LOCKED_USER_NOT_PERMITTED, user_id=str(user.id))

    async def ensure_admin(self, email: str, password: str) -> User:
        """
        Create an admin account unless a user with ``email`` exists.

        Used at startup so that a fresh database can be logged into.
        """
        existing = await self.repository.get_by_email(email)
        if existing is not None:
            return existing

        user = self.apply_changes(
            User(locked=False),
            email=email,
            first_name="Bakery",
            last_name="Admin",
            role=UserRole.ADMIN,
            password=password,
        )
        await self.repository.save(user)
        self.logger.info("Bootstrap admin created", user_id=str(user.id))
        return user
