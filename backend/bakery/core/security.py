"""
Password hashing and JWT handling.

Passwords are hashed with bcrypt through passlib. Access and refresh tokens
are HS256 JWTs whose ``sub`` claim is the user id; the ``type`` claim tells
the two apart so a refresh token cannot be used as an access token.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from bakery.core.config import get_settings
from bakery.core.logging import get_logger

logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


class SecurityError(Exception):
    """Base exception for security-related errors."""

    def __init__(self, message: str, code: str, **context):
        super().__init__(message)
        self.message = message
        self.code = code
        self.context = context


class TokenError(SecurityError):
    """Token could not be created or is not acceptable."""


class PasswordError(SecurityError):
    """Password could not be hashed."""


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt.

    Raises:
        PasswordError: If the password is empty
    """
    if not password:
        raise PasswordError("Password cannot be empty", code="EMPTY_PASSWORD")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a plain password against a stored hash.

    Malformed hashes are treated as a mismatch.
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as e:
        logger.warning("Stored password hash is not usable", error=str(e))
        return False


def _create_token(
    subject: str,
    token_type: str,
    expires_delta: timedelta,
    extra_claims: Optional[dict[str, Any]] = None,
) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    claims: dict[str, Any] = {
        "sub": subject,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
    }
    if extra_claims:
        claims.update(extra_claims)
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(
    user_id: UUID,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a short-lived access token.

    Args:
        user_id: Subject of the token
        role: Role claim, informational only; authorization reloads the user
        expires_delta: Overrides the configured lifetime
    """
    settings = get_settings()
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return _create_token(str(user_id), ACCESS_TOKEN, lifetime, {"role": role})


def create_refresh_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    lifetime = expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    return _create_token(str(user_id), REFRESH_TOKEN, lifetime)


def create_token_pair(user_id: UUID, role: str) -> dict[str, str]:
    """
    Create access and refresh tokens for a user.

    Returns:
        Dictionary with ``access_token`` and ``refresh_token``
    """
    return {
        "access_token": create_access_token(user_id, role),
        "refresh_token": create_refresh_token(user_id),
    }


def decode_token(token: str, expected_type: Optional[str] = None) -> dict[str, Any]:
    """
    Decode and validate a JWT.

    Args:
        token: Encoded token
        expected_type: ``access`` or ``refresh``; checked when given

    Returns:
        Decoded claims

    Raises:
        TokenError: If the token is empty, expired, malformed or of the
            wrong type
    """
    if not token:
        raise TokenError("Token cannot be empty", code="EMPTY_TOKEN")

    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as e:
        raise TokenError("Token has expired", code="TOKEN_EXPIRED") from e
    except JWTError as e:
        raise TokenError("Invalid token", code="TOKEN_INVALID", error=str(e)) from e

    if expected_type is not None and payload.get("type") != expected_type:
        logger.warning(
            "Token type mismatch",
            expected=expected_type,
            actual=payload.get("type"),
        )
        raise TokenError("Invalid token type", code="TOKEN_TYPE_MISMATCH")

    return payload


def get_token_user_id(payload: dict[str, Any]) -> UUID:
    """
    Read the user id from decoded claims.

    Raises:
        TokenError: If the subject is missing or not a UUID
    """
    subject = payload.get("sub")
    if not subject:
        raise TokenError("Token missing subject", code="TOKEN_INVALID")
    try:
        return UUID(subject)
    except ValueError as e:
        raise TokenError("Token subject is not a user id", code="TOKEN_INVALID") from e


def get_security_headers() -> dict[str, str]:
    """Response headers added to every API response."""
    headers = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }
    if get_settings().is_production:
        headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return headers
