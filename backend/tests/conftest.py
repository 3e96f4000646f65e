"""
Pytest configuration and shared test fixtures.

Tests run without a database: services are replaced through
``app.dependency_overrides`` and repositories through mocks. Entities are
plain transient ORM objects from ``tests.factories``.
"""

import os
from datetime import date
from typing import Callable, Generator
from unittest.mock import AsyncMock, MagicMock

os.environ.setdefault("APP_ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from bakery.api.deps import (
    get_auth_service,
    get_current_user,
    get_order_service,
    get_pickup_location_service,
    get_product_service,
    get_user_service,
    limiter,
)
from bakery.database.models import User, UserRole
from bakery.main import app
from bakery.services.auth.service import AuthService
from bakery.services.orders.service import OrderService
from bakery.services.pickup_locations.service import PickupLocationService
from bakery.services.products.service import ProductService
from bakery.services.users.service import UserService
from tests.factories import TODAY, make_user

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def barista() -> User:
    return make_user(UserRole.BARISTA)


@pytest.fixture
def admin() -> User:
    return make_user(UserRole.ADMIN)


@pytest.fixture
def clock() -> Callable[[], date]:
    return lambda: TODAY


@pytest.fixture
def mock_session() -> AsyncMock:
    """
    Mock async database session.

    Returns:
        AsyncMock: Session whose async methods are awaitable mocks
    """
    session = AsyncMock(spec=AsyncSession)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    return session


@pytest.fixture
def order_service() -> MagicMock:
    service = MagicMock(spec=OrderService)
    service.clock = lambda: TODAY
    return service


@pytest.fixture
def product_service() -> MagicMock:
    return MagicMock(spec=ProductService)


@pytest.fixture
def pickup_location_service() -> MagicMock:
    return MagicMock(spec=PickupLocationService)


@pytest.fixture
def user_service() -> MagicMock:
    return MagicMock(spec=UserService)


@pytest.fixture
def auth_service() -> MagicMock:
    return MagicMock(spec=AuthService)


@pytest.fixture
def current_user(barista: User) -> User:
    """User the API client is logged in as; override to change roles."""
    return barista


@pytest.fixture
def client(
    current_user: User,
    order_service: MagicMock,
    product_service: MagicMock,
    pickup_location_service: MagicMock,
    user_service: MagicMock,
    auth_service: MagicMock,
) -> Generator[TestClient, None, None]:
    """
    Test client with authentication and services replaced by mocks.

    Yields:
        TestClient: Client authenticated as ``current_user``
    """
    app.dependency_overrides[get_current_user] = lambda: current_user
    app.dependency_overrides[get_order_service] = lambda: order_service
    app.dependency_overrides[get_product_service] = lambda: product_service
    app.dependency_overrides[get_pickup_location_service] = lambda: pickup_location_service
    app.dependency_overrides[get_user_service] = lambda: user_service
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    limiter.enabled = False

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def anonymous_client() -> Generator[TestClient, None, None]:
    """Test client without any dependency overrides."""
    with TestClient(app) as test_client:
        yield test_client
