"""
Authentication API endpoints.

Handles registration, email/password login, token refresh and the caller's
own profile.
"""

from typing import Annotated, Optional

import structlog
from fastapi import APIRouter, Body, Depends, status
from fastapi.security import HTTPAuthorizationCredentials

from api.deps import CurrentClaims, get_auth_service, security
from core.exceptions import AuthenticationError
from schemas.auth import AccessTokenResponse, LoginRequest, RefreshTokenRequest, TokenResponse
from schemas.user import UserCreate, UserResponse
from services.auth_service import AuthService

logger = structlog.get_logger(__name__)

router = APIRouter()

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(user_in: UserCreate, auth_service: AuthServiceDep) -> TokenResponse:
    """
    Register a representative or constituent.

    A constituent is linked to the representative of the chosen
    constituency; registration fails if that constituency has none yet.
    """
    return await auth_service.register(user_in)


@router.post("/login", response_model=TokenResponse)
async def login(credentials: LoginRequest, auth_service: AuthServiceDep) -> TokenResponse:
    """Log in with email and password."""
    return await auth_service.login(credentials.email, credentials.password)


@router.post("/refresh-token", response_model=AccessTokenResponse)
async def refresh_token(
    auth_service: AuthServiceDep,
    bearer: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    body: Annotated[Optional[RefreshTokenRequest], Body()] = None,
) -> AccessTokenResponse:
    """
    Issue a new access token.

    The refresh token may be sent in the body or as a bearer token.
    """
    token = body.refresh_token if body is not None else (bearer.credentials if bearer else None)
    if not token:
        raise AuthenticationError("Refresh token required")
    return await auth_service.refresh(token)


@router.get("/me", response_model=UserResponse)
async def get_me(claims: CurrentClaims, auth_service: AuthServiceDep) -> UserResponse:
    """Get the caller's profile."""
    return await auth_service.me(claims)
