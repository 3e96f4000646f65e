"""
Tests for login, token refresh and the authentication dependencies.
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException, status

from bakery.api.deps import get_current_user
from bakery.core.security import create_access_token, create_refresh_token, hash_password
from bakery.database.models import User, UserRole
from bakery.services.auth.service import AuthenticationError, AuthService, LoginError
from tests.factories import make_user

AUTH_URL = "/api/v1/auth"


# ============================================================================
# Test Fixtures
# ============================================================================


@pytest.fixture
def baker() -> User:
    user = make_user(UserRole.BAKER, email="baker@vaadin.com")
    user.password_hash = hash_password("baker")
    return user


@pytest.fixture
def service(mock_session, baker) -> AuthService:
    service = AuthService(mock_session)
    service.repository = AsyncMock()
    service.repository.get_by_email.side_effect = lambda email: (
        baker if email.lower() == baker.email else None
    )
    service.repository.get.side_effect = lambda user_id: baker if user_id == baker.id else None
    return service


# ============================================================================
# AuthService
# ============================================================================


class TestAuthService:
    async def test_authenticate(self, service, baker):
        assert await service.authenticate("Baker@Vaadin.com", "baker") is baker

    async def test_wrong_password(self, service):
        with pytest.raises(LoginError):
            await service.authenticate("baker@vaadin.com", "barista")

    async def test_unknown_email(self, service):
        with pytest.raises(LoginError):
            await service.authenticate("nobody@vaadin.com", "baker")

    async def test_locked_user_can_log_in(self, service, baker):
        baker.locked = True

        assert await service.authenticate("baker@vaadin.com", "baker") is baker

    async def test_login_returns_token_pair(self, service):
        tokens = await service.login("baker@vaadin.com", "baker")

        assert set(tokens) == {"access_token", "refresh_token"}

    async def test_refresh(self, service, baker):
        tokens = await service.refresh(create_refresh_token(baker.id))

        assert tokens["access_token"]

    async def test_refresh_rejects_access_token(self, service, baker):
        with pytest.raises(AuthenticationError) as exc_info:
            await service.refresh(create_access_token(baker.id, "baker"))

        assert exc_info.value.code == "TOKEN_TYPE_MISMATCH"

    async def test_refresh_for_deleted_user(self, service):
        with pytest.raises(AuthenticationError) as exc_info:
            await service.refresh(create_refresh_token(uuid.uuid4()))

        assert exc_info.value.code == "USER_NOT_FOUND"


# ============================================================================
# Current User Dependency
# ============================================================================


class TestGetCurrentUser:
    async def test_resolves_user_from_access_token(self, baker):
        db = AsyncMock()
        db.get.return_value = baker
        credentials = MagicMock(credentials=create_access_token(baker.id, "baker"))

        assert await get_current_user(credentials, db) is baker
        db.get.assert_awaited_once_with(User, baker.id)

    async def test_missing_credentials(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(None, AsyncMock())

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_refresh_token_is_rejected(self, baker):
        credentials = MagicMock(credentials=create_refresh_token(baker.id))

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(credentials, AsyncMock())

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_unknown_user(self):
        db = AsyncMock()
        db.get.return_value = None
        credentials = MagicMock(credentials=create_access_token(uuid.uuid4(), "baker"))

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(credentials, db)

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED


# ============================================================================
# Endpoints
# ============================================================================


class TestAuthEndpoints:
    def test_login(self, client, auth_service):
        auth_service.login.return_value = {"access_token": "a", "refresh_token": "r"}

        response = client.post(
            f"{AUTH_URL}/login", json={"email": "baker@vaadin.com", "password": "baker"}
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["access_token"] == "a"
        assert body["token_type"] == "bearer"
        assert body["expires_in"] == 30 * 60

    def test_login_failure(self, client, auth_service):
        auth_service.login.side_effect = LoginError()

        response = client.post(
            f"{AUTH_URL}/login", json={"email": "baker@vaadin.com", "password": "nope"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid email or password"

    def test_refresh_failure(self, client, auth_service):
        auth_service.refresh.side_effect = AuthenticationError("Token has expired", "TOKEN_EXPIRED")

        response = client.post(f"{AUTH_URL}/refresh", json={"refresh_token": "old"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_me(self, client, current_user):
        response = client.get(f"{AUTH_URL}/me")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["email"] == current_user.email
        assert response.json()["role"] == "barista"
