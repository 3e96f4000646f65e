"""
Authentication endpoints.

Login is rate limited per client address. Tokens are stateless JWTs; there
is no logout endpoint, clients drop their tokens.
"""

from fastapi import APIRouter, HTTPException, Request, status

from bakery.api.deps import AuthServiceDep, CurrentUser, limiter
from bakery.core.config import get_settings
from bakery.core.logging import get_logger
from bakery.schemas.auth import LoginRequest, RefreshRequest, TokenResponse
from bakery.schemas.users import UserResponse
from bakery.services.auth.service import AuthenticationError, LoginError

logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(prefix="/auth", tags=["authentication"])


def _token_response(tokens: dict[str, str]) -> TokenResponse:
    return TokenResponse(
        access_token=tokens["access_token"],
        refresh_token=tokens["refresh_token"],
        expires_in=get_settings().jwt_access_token_expire_minutes * 60,
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in with email and password",
)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,
    credentials: LoginRequest,
    auth_service: AuthServiceDep,
) -> TokenResponse:
    """
    Exchange credentials for an access and refresh token.

    Raises:
        HTTPException: 401 if the credentials are wrong
    """
    try:
        tokens = await auth_service.login(credentials.email, credentials.password)
    except LoginError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    return _token_response(tokens)


@router.post("/refresh", response_model=TokenResponse, summary="Refresh tokens")
async def refresh(data: RefreshRequest, auth_service: AuthServiceDep) -> TokenResponse:
    try:
        tokens = await auth_service.refresh(data.refresh_token)
    except AuthenticationError as e:
        logger.warning("Token refresh failed", code=e.code)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    return _token_response(tokens)


@router.get("/me", response_model=UserResponse, summary="Current user")
async def me(current_user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(current_user)
