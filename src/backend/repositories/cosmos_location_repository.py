"""
Cosmos DB Location repository.

Handles reference data: provinces, districts, tehsils, cities and
constituencies. All kinds live in the 'locations' container with
document_type as the partition key.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from db.cosmos_session import (
    LOCATIONS_CONTAINER,
    create_item,
    delete_item,
    query_items,
    read_item,
    upsert_item,
)
from models.cosmos_documents import (
    LOCATION_DOCUMENTS,
    LOCATION_PARENT_FIELDS,
    LocationDocument,
    LocationType,
)

logger = logging.getLogger(__name__)


class CosmosLocationRepository:
    """
    Repository for location operations using Cosmos DB.

    Each kind is a small set, so every query is scoped to a single
    partition (the kind's document_type).
    """

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def list_locations(
        self,
        kind: LocationType,
        search: Optional[str] = None,
        parents: Optional[dict[str, str]] = None,
    ) -> list[LocationDocument]:
        """
        List locations of one kind sorted by name.

        Args:
            kind: Which reference data kind to list
            search: Optional case-insensitive substring of the name
            parents: Optional parent filters, e.g. {"province_id": "..."}

        Returns:
            List of location documents
        """
        conditions = ["c.document_type = @document_type"]
        parameters: list[dict[str, Any]] = [{"name": "@document_type", "value": kind.value}]

        for field, value in (parents or {}).items():
            if field not in LOCATION_PARENT_FIELDS[kind]:
                raise ValueError(f"{kind.value} cannot be filtered by {field}")
            conditions.append(f"c.{field} = @{field}")
            parameters.append({"name": f"@{field}", "value": value})

        if search:
            conditions.append("CONTAINS(LOWER(c.name), LOWER(@search))")
            parameters.append({"name": "@search", "value": search})

        where_clause = " AND ".join(conditions)
        query = f"""
            SELECT * FROM c
            WHERE {where_clause}
            ORDER BY c.name
        """
        results = await query_items(
            LOCATIONS_CONTAINER,
            query,
            parameters=parameters,
            partition_key=kind.value,
        )
        document_class = LOCATION_DOCUMENTS[kind]
        return [document_class(**r) for r in results]

    async def get_by_id(self, kind: LocationType, location_id: str) -> Optional[LocationDocument]:
        """Get a location by ID (point read within the kind's partition)."""
        data = await read_item(LOCATIONS_CONTAINER, location_id, partition_key=kind.value)
        if data is None:
            return None
        return LOCATION_DOCUMENTS[kind](**data)

    async def find_by_name(
        self,
        kind: LocationType,
        name: str,
        parents: Optional[dict[str, str]] = None,
    ) -> Optional[LocationDocument]:
        """Find a location by exact (case-insensitive) name under the same parents."""
        conditions = ["c.document_type = @document_type", "LOWER(c.name) = LOWER(@name)"]
        parameters: list[dict[str, Any]] = [
            {"name": "@document_type", "value": kind.value},
            {"name": "@name", "value": name},
        ]
        for field, value in (parents or {}).items():
            conditions.append(f"c.{field} = @{field}")
            parameters.append({"name": f"@{field}", "value": value})

        results = await query_items(
            LOCATIONS_CONTAINER,
            "SELECT * FROM c WHERE " + " AND ".join(conditions),
            parameters=parameters,
            partition_key=kind.value,
            max_items=1,
        )
        if results:
            return LOCATION_DOCUMENTS[kind](**results[0])
        return None

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create(self, location: LocationDocument) -> LocationDocument:
        """Create a location document."""
        await create_item(LOCATIONS_CONTAINER, location.model_dump(mode="json"))
        logger.info(f"Created {location.document_type} {location.id}")
        return location

    async def update(self, location: LocationDocument) -> LocationDocument:
        """Update a location document."""
        location.updated_at = datetime.now(timezone.utc)
        await upsert_item(LOCATIONS_CONTAINER, location.model_dump(mode="json"))
        return location

    async def delete(self, kind: LocationType, location_id: str) -> None:
        """Delete a location document."""
        await delete_item(LOCATIONS_CONTAINER, location_id, partition_key=kind.value)
        logger.info(f"Deleted {kind.value} {location_id}")
