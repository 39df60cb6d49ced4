"""
Reference data (location) Pydantic schemas.

One create/update schema per kind; the parent ids a kind requires are
validated by the schema, and their existence by the router.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from models.cosmos_documents import LocationType


class ProvinceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class DistrictCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    province_id: str = Field(..., min_length=1)


class TehsilCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    district_id: str = Field(..., min_length=1)


class CityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    tehsil_id: str = Field(..., min_length=1)


class ConstituencyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    tehsil_id: str = Field(..., min_length=1)
    city_id: str = Field(..., min_length=1)


class LocationResponse(BaseModel):
    """Any reference data record; parent ids are present for the kinds that have them."""

    id: str
    document_type: LocationType
    name: str
    province_id: Optional[str] = None
    district_id: Optional[str] = None
    tehsil_id: Optional[str] = None
    city_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
