"""
FastAPI dependencies: database session, current user, role checks, paging
and service construction.

Services are provided through dependencies so that tests can swap them with
``app.dependency_overrides``.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from bakery.core.config import get_settings
from bakery.core.logging import get_logger, set_user_id
from bakery.core.security import ACCESS_TOKEN, TokenError, decode_token, get_token_user_id
from bakery.database.connection import get_db
from bakery.database.models import User, UserRole
from bakery.services.auth.service import AuthService
from bakery.services.crud import PageRequest
from bakery.services.orders.service import OrderService
from bakery.services.pickup_locations.service import PickupLocationService
from bakery.services.products.service import ProductService
from bakery.services.users.service import UserService

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)
limiter = Limiter(key_func=get_remote_address)

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: DatabaseSession,
) -> User:
    """
    Resolve the bearer token to a user.

    Raises:
        HTTPException: 401 if the token is missing, invalid or names an
            unknown user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    try:
        payload = decode_token(credentials.credentials, expected_type=ACCESS_TOKEN)
        user_id = get_token_user_id(payload)
    except TokenError as e:
        logger.warning("Authentication failed", code=e.code)
        raise credentials_exception from e

    user = await db.get(User, user_id)
    if user is None:
        logger.warning("Authentication failed: user not found", user_id=str(user_id))
        raise credentials_exception

    set_user_id(str(user.id))
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_role(*allowed_roles: UserRole):
    """
    Dependency factory restricting an endpoint to some roles.

    Example:
        @router.post("", dependencies=[Depends(require_role(UserRole.ADMIN))])
    """

    async def role_checker(current_user: CurrentUser) -> User:
        if current_user.role not in allowed_roles:
            logger.warning(
                "Access denied: insufficient role",
                user_role=current_user.role.value,
                required_roles=[role.value for role in allowed_roles],
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return role_checker


AdminUser = Annotated[User, Depends(require_role(UserRole.ADMIN))]


def get_page_request(
    page: Annotated[int, Query(ge=0, description="Zero-based page number")] = 0,
    size: Annotated[Optional[int], Query(ge=1, description="Rows per page")] = None,
) -> PageRequest:
    settings = get_settings()
    size = min(size or settings.default_page_size, settings.max_page_size)
    return PageRequest(page=page, size=size)


PageParams = Annotated[PageRequest, Depends(get_page_request)]


def get_order_service(db: DatabaseSession) -> OrderService:
    return OrderService(db)


def get_product_service(db: DatabaseSession) -> ProductService:
    return ProductService(db)


def get_pickup_location_service(db: DatabaseSession) -> PickupLocationService:
    return PickupLocationService(db)


def get_user_service(db: DatabaseSession) -> UserService:
    return UserService(db)


def get_auth_service(db: DatabaseSession) -> AuthService:
    return AuthService(db)


OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]
PickupLocationServiceDep = Annotated[PickupLocationService, Depends(get_pickup_location_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
