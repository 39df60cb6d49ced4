"""
User-related Pydantic schemas.
"""

import re
from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from models.cosmos_documents import Gender, UserRole

NAME_PATTERN = re.compile(r"^[A-Za-z\s]+$")
CNIC_PATTERN = re.compile(r"^\d{5}-\d{7}-\d$")
MOBILE_PATTERN = re.compile(r"^\d{11}$")


class UserCreate(BaseModel):
    """Schema for user registration.

    Field formats are checked here; role-specific rules (representative email
    domain, constituency assignment) are checked by the auth service.
    """

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    cnic: str = Field(..., description="National identity number, #####-#######-#")
    mobile: str = Field(..., description="11-digit mobile number")
    gender: Gender
    date_of_birth: date
    role: UserRole = UserRole.CONSTITUENT
    address: str = Field(..., min_length=1, max_length=500)

    province_id: str = Field(..., min_length=1)
    district_id: str = Field(..., min_length=1)
    tehsil_id: str = Field(..., min_length=1)
    city_id: str = Field(..., min_length=1)
    constituency_id: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not NAME_PATTERN.match(v):
            raise ValueError("Name can only contain letters and spaces")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Require at least one lowercase letter, one uppercase letter and one digit."""
        if not (re.search(r"[a-z]", v) and re.search(r"[A-Z]", v) and re.search(r"\d", v)):
            raise ValueError("Password must contain at least one lowercase letter, one uppercase letter and one number")
        return v

    @field_validator("cnic")
    @classmethod
    def validate_cnic(cls, v: str) -> str:
        if not CNIC_PATTERN.match(v):
            raise ValueError("CNIC must be in the format 12345-1234567-1")
        return v

    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, v: str) -> str:
        if not MOBILE_PATTERN.match(v):
            raise ValueError("Mobile number must be 11 digits")
        return v

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: date) -> date:
        if v > datetime.now(timezone.utc).date():
            raise ValueError("Date of birth cannot be in the future")
        return v


class UserResponse(BaseModel):
    """Schema for user responses (never includes the password hash)."""

    id: str
    name: str
    email: str
    cnic: str
    mobile: str
    role: UserRole
    gender: Gender
    date_of_birth: date
    address: str
    province_id: str
    district_id: str
    tehsil_id: str
    city_id: str
    constituency_id: str
    representative_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    """Name and contact of the other party on a complaint."""

    id: str
    name: str
    email: str
    mobile: Optional[str] = None

    model_config = {"from_attributes": True}
