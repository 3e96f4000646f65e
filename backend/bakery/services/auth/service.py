"""
Login and token refresh.

Users log in with email (case-insensitive) and password and receive an
access/refresh token pair. Locking an account only protects it from being
edited; locked users can still log in.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bakery.core.security import (
    REFRESH_TOKEN,
    TokenError,
    create_token_pair,
    decode_token,
    get_token_user_id,
    verify_password,
)
from bakery.core.logging import get_logger
from bakery.database.models import User
from bakery.services.users.repository import UserRepository

logger = get_logger(__name__)


class AuthenticationError(Exception):
    """Credentials or token were rejected."""

    def __init__(self, message: str, code: str = "AUTH_ERROR"):
        super().__init__(message)
        self.message = message
        self.code = code


class LoginError(AuthenticationError):
    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, code="LOGIN_ERROR")


class AuthService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repository = UserRepository(session)
        self.logger = logger.bind(service="auth")

    async def authenticate(self, email: str, password: str) -> User:
        """
        Check credentials.

        Returns:
            The user the credentials belong to

        Raises:
            LoginError: If no user has the email or the password is wrong
        """
        user: Optional[User] = await self.repository.get_by_email(email)
        if user is None:
            self.logger.warning("Login failed - unknown email", email=email)
            raise LoginError()

        if not verify_password(password, user.password_hash):
            self.logger.warning("Login failed - wrong password", user_id=str(user.id))
            raise LoginError()

        self.logger.info("Login succeeded", user_id=str(user.id), role=user.role.value)
        return user

    async def login(self, email: str, password: str) -> dict[str, str]:
        """
        Authenticate and issue tokens.

        Returns:
            Dictionary with ``access_token`` and ``refresh_token``
        """
        user = await self.authenticate(email, password)
        return create_token_pair(user.id, user.role.value)

    async def refresh(self, refresh_token: str) -> dict[str, str]:
        """
        Exchange a refresh token for a new token pair.

        Raises:
            AuthenticationError: If the token is invalid or the user is gone
        """
        try:
            payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN)
            user_id = get_token_user_id(payload)
        except TokenError as e:
            self.logger.warning("Token refresh rejected", code=e.code)
            raise AuthenticationError(e.message, code=e.code) from e

        user = await self.repository.get(user_id)
        if user is None:
            raise AuthenticationError("User no longer exists", code="USER_NOT_FOUND")

        return create_token_pair(user.id, user.role.value)
