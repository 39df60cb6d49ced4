"""
Reference data API endpoints.

Provinces, districts, tehsils, cities and constituencies share one set of
routes per kind:

    GET    /{kind}         list (optional search and parent filters)
    POST   /{kind}         create
    GET    /{kind}/{id}    read
    PUT    /{kind}/{id}    update
    DELETE /{kind}/{id}    delete

Reads are public so the registration form can be populated; writes require
a representative.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Query, Response, status
from pydantic import BaseModel

from api.deps import CurrentRepresentative, LocationRepository
from core.exceptions import ConflictError, NotFoundError, ValidationError
from models.cosmos_documents import LOCATION_DOCUMENTS, LOCATION_PARENT_FIELDS, LocationDocument, LocationType
from repositories.provider import LocationRepositoryProtocol
from schemas.location import (
    CityCreate,
    ConstituencyCreate,
    DistrictCreate,
    LocationResponse,
    ProvinceCreate,
    TehsilCreate,
)

logger = structlog.get_logger(__name__)

router = APIRouter()

# Kind each parent id field points at
PARENT_KINDS: dict[str, LocationType] = {
    "province_id": LocationType.PROVINCE,
    "district_id": LocationType.DISTRICT,
    "tehsil_id": LocationType.TEHSIL,
    "city_id": LocationType.CITY,
}


def _label(kind: LocationType) -> str:
    return kind.value.capitalize()


async def validate_parents(repo: LocationRepositoryProtocol, kind: LocationType, parents: dict[str, str]) -> None:
    """
    Check that every parent a location points at exists.

    A constituency's city must also lie in its tehsil.

    Raises:
        NotFoundError: A parent does not exist
        ValidationError: Constituency city is outside its tehsil
    """
    resolved: dict[str, LocationDocument] = {}
    for field, parent_id in parents.items():
        parent_kind = PARENT_KINDS[field]
        parent = await repo.get_by_id(parent_kind, parent_id)
        if parent is None:
            raise NotFoundError(f"{_label(parent_kind)} not found")
        resolved[field] = parent

    if kind == LocationType.CONSTITUENCY:
        city = resolved["city_id"]
        if getattr(city, "tehsil_id", None) != parents["tehsil_id"]:
            raise ValidationError("City does not belong to the selected tehsil")


async def ensure_unique_name(
    repo: LocationRepositoryProtocol,
    kind: LocationType,
    name: str,
    parents: dict[str, str],
    exclude_id: Optional[str] = None,
) -> None:
    existing = await repo.find_by_name(kind, name, parents)
    if existing is not None and existing.id != exclude_id:
        raise ConflictError(f"{_label(kind)} '{name}' already exists")


def _split(kind: LocationType, payload: BaseModel) -> tuple[str, dict[str, str]]:
    data = payload.model_dump()
    name = data.pop("name").strip()
    if not name:
        raise ValidationError("Name is required")
    parents = {field: data[field] for field in LOCATION_PARENT_FIELDS[kind]}
    return name, parents


def _register_kind(kind: LocationType, create_schema: type[BaseModel]) -> None:
    """Add the list/create/read/update/delete routes for one kind."""
    path = f"/{kind.value}"
    label = _label(kind)
    parent_fields = LOCATION_PARENT_FIELDS[kind]
    tags = ["Reference Data"]

    @router.get(path, response_model=list[LocationResponse], tags=tags, name=f"list_{kind.value}")
    async def list_locations(
        repo: LocationRepository,
        search: Optional[str] = Query(None, max_length=100, description="Case-insensitive name search"),
        province_id: Optional[str] = Query(None),
        district_id: Optional[str] = Query(None),
        tehsil_id: Optional[str] = Query(None),
        city_id: Optional[str] = Query(None),
    ) -> list[LocationResponse]:
        candidates = {
            "province_id": province_id,
            "district_id": district_id,
            "tehsil_id": tehsil_id,
            "city_id": city_id,
        }
        # Filters that do not apply to this kind are ignored
        parents = {field: value for field, value in candidates.items() if value and field in parent_fields}
        locations = await repo.list_locations(kind, search=search, parents=parents)
        return [LocationResponse.model_validate(location) for location in locations]

    @router.post(
        path,
        response_model=LocationResponse,
        status_code=status.HTTP_201_CREATED,
        tags=tags,
        name=f"create_{kind.value}",
    )
    async def create_location(
        payload: create_schema,  # type: ignore[valid-type]
        claims: CurrentRepresentative,
        repo: LocationRepository,
    ) -> LocationResponse:
        name, parents = _split(kind, payload)
        await validate_parents(repo, kind, parents)
        await ensure_unique_name(repo, kind, name, parents)

        location = await repo.create(LOCATION_DOCUMENTS[kind](name=name, **parents))
        logger.info("location_created", kind=kind.value, location_id=location.id, user_id=claims.user_id)
        return LocationResponse.model_validate(location)

    @router.get(f"{path}/{{location_id}}", response_model=LocationResponse, tags=tags, name=f"get_{kind.value}")
    async def get_location(location_id: str, repo: LocationRepository) -> LocationResponse:
        location = await repo.get_by_id(kind, location_id)
        if location is None:
            raise NotFoundError(f"{label} not found")
        return LocationResponse.model_validate(location)

    @router.put(f"{path}/{{location_id}}", response_model=LocationResponse, tags=tags, name=f"update_{kind.value}")
    async def update_location(
        location_id: str,
        payload: create_schema,  # type: ignore[valid-type]
        claims: CurrentRepresentative,
        repo: LocationRepository,
    ) -> LocationResponse:
        location = await repo.get_by_id(kind, location_id)
        if location is None:
            raise NotFoundError(f"{label} not found")

        name, parents = _split(kind, payload)
        await validate_parents(repo, kind, parents)
        await ensure_unique_name(repo, kind, name, parents, exclude_id=location_id)

        location.name = name
        for field, value in parents.items():
            setattr(location, field, value)
        location = await repo.update(location)
        logger.info("location_updated", kind=kind.value, location_id=location_id, user_id=claims.user_id)
        return LocationResponse.model_validate(location)

    @router.delete(
        f"{path}/{{location_id}}",
        status_code=status.HTTP_204_NO_CONTENT,
        tags=tags,
        name=f"delete_{kind.value}",
    )
    async def delete_location(
        location_id: str,
        claims: CurrentRepresentative,
        repo: LocationRepository,
    ) -> Response:
        location = await repo.get_by_id(kind, location_id)
        if location is None:
            raise NotFoundError(f"{label} not found")
        await repo.delete(kind, location_id)
        logger.info("location_deleted", kind=kind.value, location_id=location_id, user_id=claims.user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


_register_kind(LocationType.PROVINCE, ProvinceCreate)
_register_kind(LocationType.DISTRICT, DistrictCreate)
_register_kind(LocationType.TEHSIL, TehsilCreate)
_register_kind(LocationType.CITY, CityCreate)
_register_kind(LocationType.CONSTITUENCY, ConstituencyCreate)
