"""Routes handling user registration and token flows."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...core.config import Settings
from ...deps import AccessTokenDependency, AuthServiceDependency, CurrentUserDependency, SettingsDependency
from ...errors import AuthenticationError
from ...models import User
from ...schemas import (
    ApiResponse,
    AuthResponse,
    AuthTokens,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    TokenValidation,
    UserPublic,
)
from ...services import TokenPair

router = APIRouter(prefix="/auth", tags=["auth"])


def _build_tokens(token_pair: TokenPair, settings: Settings) -> AuthTokens:
    return AuthTokens(
        access_token=token_pair.access.token,
        refresh_token=token_pair.refresh.token,
        expires_in=settings.access_token_expire_minutes * 60,
        refresh_expires_in=settings.refresh_token_expire_minutes * 60,
    )


def _map_user(user: User) -> UserPublic:
    return UserPublic.model_validate(user)


@router.post(
    "/register",
    response_model=ApiResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
async def register(
    payload: RegisterRequest,
    service: AuthServiceDependency,
    settings: SettingsDependency,
) -> ApiResponse[AuthResponse]:
    user = await service.register_user(
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )
    token_pair = service.build_token_pair(user)
    return ApiResponse[AuthResponse](
        message="User registered successfully",
        data=AuthResponse(user=_map_user(user), tokens=_build_tokens(token_pair, settings)),
    )


@router.post(
    "/login",
    response_model=ApiResponse[AuthResponse],
    summary="Authenticate using email and password",
)
async def login(
    payload: LoginRequest,
    service: AuthServiceDependency,
    settings: SettingsDependency,
) -> ApiResponse[AuthResponse]:
    user = await service.authenticate_user(payload.email, payload.password)
    if user is None:
        raise AuthenticationError("Invalid email or password.", code="invalid_credentials")

    token_pair = service.build_token_pair(user)
    return ApiResponse[AuthResponse](
        message="Login successful",
        data=AuthResponse(user=_map_user(user), tokens=_build_tokens(token_pair, settings)),
    )


@router.post(
    "/refresh",
    response_model=ApiResponse[AuthResponse],
    summary="Exchange a refresh token for a new token pair",
)
async def refresh_tokens(
    payload: RefreshRequest,
    service: AuthServiceDependency,
    settings: SettingsDependency,
) -> ApiResponse[AuthResponse]:
    user, token_pair = await service.refresh_from_token(payload.refresh_token)
    return ApiResponse[AuthResponse](
        data=AuthResponse(user=_map_user(user), tokens=_build_tokens(token_pair, settings)),
    )


@router.get("/me", response_model=ApiResponse[UserPublic], summary="Return the authenticated user")
async def read_current_user(current_user: CurrentUserDependency) -> ApiResponse[UserPublic]:
    return ApiResponse[UserPublic](data=_map_user(current_user))


@router.get("/validate", response_model=TokenValidation, summary="Check that an access token is usable")
async def validate_token(current_user: CurrentUserDependency) -> TokenValidation:
    return TokenValidation(valid=True, user=_map_user(current_user))


@router.post("/logout", response_model=MessageResponse, summary="Revoke the presented access token")
async def logout(
    payload: AccessTokenDependency,
    current_user: CurrentUserDependency,
    service: AuthServiceDependency,
) -> MessageResponse:
    service.revoke_token(payload)
    return MessageResponse(message="Logged out successfully")
