"""
Authentication service.

Registers representatives and constituents, verifies passwords and issues
the access/refresh token pair. Login failures are deliberately
undifferentiated; registration errors say exactly what is wrong.
"""

import structlog
from starlette.concurrency import run_in_threadpool

from core.config import settings
from core.exceptions import AuthenticationError, ConfigurationError, ConflictError, ValidationError
from core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    dummy_password_hash,
    hash_password,
    verify_password,
)
from models.cosmos_documents import UserDocument, UserRole
from repositories.provider import UserRepositoryProtocol
from schemas.auth import (
    AccessTokenResponse,
    AnyClaims,
    ConstituentClaims,
    RepresentativeClaims,
    TokenResponse,
    claims_to_token_data,
)
from schemas.user import UserCreate, UserResponse

logger = structlog.get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def claims_for_user(user: UserDocument) -> AnyClaims:
    """Derive token claims from the stored identity."""
    if user.role == UserRole.REPRESENTATIVE:
        return RepresentativeClaims(
            user_id=user.id,
            name=user.name,
            email=user.email,
            constituency_id=user.constituency_id,
        )
    return ConstituentClaims(
        user_id=user.id,
        name=user.name,
        email=user.email,
        constituency_id=user.constituency_id,
        representative_id=user.representative_id,
    )


def issue_tokens(user: UserDocument) -> TokenResponse:
    claims = claims_for_user(user)
    data = claims_to_token_data(claims)
    refresh_data = {"sub": claims.user_id, "role": claims.role, "constituency": claims.constituency_id}
    return TokenResponse(
        access_token=create_access_token(data),
        refresh_token=create_refresh_token(refresh_data),
        user=UserResponse.model_validate(user),
    )


class AuthService:
    """Service for registration, login and token refresh."""

    def __init__(self, user_repo: UserRepositoryProtocol):
        self.user_repo = user_repo

    async def register(self, profile: UserCreate) -> TokenResponse:
        """
        Register a new identity and sign it in.

        Raises:
            ValidationError: Representative email outside the reserved domain
            ConflictError: Email/CNIC/mobile taken, or constituency already has a representative
            ConfigurationError: No representative exists for a constituent's constituency
        """
        email = profile.email.lower()
        representative_id = None

        if profile.role == UserRole.REPRESENTATIVE:
            domain = settings.REPRESENTATIVE_EMAIL_DOMAIN.lower()
            if not email.endswith(domain):
                raise ValidationError(f"Representative email must end with {settings.REPRESENTATIVE_EMAIL_DOMAIN}")
            existing = await self.user_repo.get_representative_for_constituency(profile.constituency_id)
            if existing is not None:
                raise ConflictError("This constituency already has a registered representative")
        else:
            representative = await self.user_repo.get_representative_for_constituency(profile.constituency_id)
            if representative is None:
                raise ConfigurationError("No representative found for the selected constituency")
            representative_id = representative.id

        password_hash = await run_in_threadpool(hash_password, profile.password)
        user = UserDocument(
            name=profile.name,
            email=email,
            cnic=profile.cnic,
            mobile=profile.mobile,
            password_hash=password_hash,
            role=profile.role,
            gender=profile.gender,
            date_of_birth=profile.date_of_birth,
            address=profile.address,
            province_id=profile.province_id,
            district_id=profile.district_id,
            tehsil_id=profile.tehsil_id,
            city_id=profile.city_id,
            constituency_id=profile.constituency_id,
            representative_id=representative_id,
        )
        await self.user_repo.create(user)

        logger.info("user_registered", user_id=user.id, role=user.role, constituency_id=user.constituency_id)
        return issue_tokens(user)

    async def login(self, email: str, password: str) -> TokenResponse:
        """
        Verify credentials and issue tokens.

        Unknown email, wrong password and inactive account all fail with the
        same AuthenticationError.
        """
        user = await self.user_repo.get_by_email(email)
        password_hash = user.password_hash if user is not None else dummy_password_hash()
        password_ok = await run_in_threadpool(verify_password, password, password_hash)

        if user is None or not password_ok or not user.is_active:
            logger.info("login_failed")
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info("user_logged_in", user_id=user.id, role=user.role)
        return issue_tokens(user)

    async def refresh(self, refresh_token: str) -> AccessTokenResponse:
        """
        Issue a new access token from a refresh token.

        Claims are re-derived from the stored identity, so the new token
        reflects current data.
        """
        payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
        if payload is None or not payload.get("sub"):
            raise AuthenticationError("Invalid or expired refresh token")

        user = await self.user_repo.get_by_id(payload["sub"])
        if user is None or not user.is_active or user.role != payload.get("role"):
            raise AuthenticationError("Invalid or expired refresh token")

        claims = claims_for_user(user)
        return AccessTokenResponse(access_token=create_access_token(claims_to_token_data(claims)))

    async def me(self, claims: AnyClaims) -> UserResponse:
        user = await self.user_repo.get_by_id(claims.user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("User not found")
        return UserResponse.model_validate(user)
