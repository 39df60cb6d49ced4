"""
Authentication-related Pydantic schemas.

Includes the verified identity claims carried by access tokens. Claims are a
closed union discriminated by role, so a handler that needs a representative
receives a RepresentativeClaims and nothing else.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field, TypeAdapter

from schemas.user import UserResponse


class LoginRequest(BaseModel):
    """Email and password login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """JWT token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: Optional[UserResponse] = None


class RefreshTokenRequest(BaseModel):
    """Request to refresh access token."""

    refresh_token: str


class AccessTokenResponse(BaseModel):
    """New access token issued from a refresh token."""

    access_token: str
    token_type: str = "bearer"


# =============================================================================
# Identity Claims
# =============================================================================


class _ClaimsBase(BaseModel):
    user_id: str
    name: str
    email: str
    constituency_id: str

    model_config = {"frozen": True}


class ConstituentClaims(_ClaimsBase):
    role: Literal["constituent"] = "constituent"
    representative_id: str


class RepresentativeClaims(_ClaimsBase):
    role: Literal["representative"] = "representative"


AnyClaims = Union[ConstituentClaims, RepresentativeClaims]

Claims = Annotated[AnyClaims, Field(discriminator="role")]

_claims_adapter: TypeAdapter = TypeAdapter(Claims)


def claims_to_token_data(claims: AnyClaims) -> dict[str, Any]:
    """Token payload for a claims value."""
    data: dict[str, Any] = {
        "sub": claims.user_id,
        "name": claims.name,
        "email": claims.email,
        "role": claims.role,
        "constituency": claims.constituency_id,
    }
    if isinstance(claims, ConstituentClaims):
        data["representative"] = claims.representative_id
    return data


def claims_from_token_data(payload: dict[str, Any]) -> AnyClaims:
    """
    Build claims from a decoded token payload.

    Raises pydantic.ValidationError when the payload does not carry a
    complete identity for its role.
    """
    return _claims_adapter.validate_python(
        {
            "user_id": payload.get("sub"),
            "name": payload.get("name"),
            "email": payload.get("email"),
            "role": payload.get("role"),
            "constituency_id": payload.get("constituency"),
            "representative_id": payload.get("representative"),
        }
    )
