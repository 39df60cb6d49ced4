"""
Cosmos DB Complaint repository.

Handles complaint storage, filtered listings and the counts used by the
statistics endpoint.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from db.cosmos_session import (
    COMPLAINTS_CONTAINER,
    create_item,
    delete_item,
    query_count,
    query_items,
    read_item,
    replace_item,
)
from models.cosmos_documents import ComplaintDocument

logger = logging.getLogger(__name__)

# Stored timestamps are ISO-8601 UTC strings, so a prefix-formatted bound
# compares correctly as a string.
_BOUND_FORMAT = "%Y-%m-%dT%H:%M:%S"

DATE_FILTERS = ("today", "this-week", "this-month", "this-year")


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def date_filter_start(date_filter: str, now: datetime | None = None) -> datetime:
    """
    Start of the period named by ``date_filter``, in UTC.

    this-week starts on Monday (ISO week).
    """
    now = now or datetime.now(timezone.utc)
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if date_filter == "today":
        return day_start
    if date_filter == "this-week":
        return day_start - timedelta(days=day_start.weekday())
    if date_filter == "this-month":
        return day_start.replace(day=1)
    if date_filter == "this-year":
        return day_start.replace(month=1, day=1)
    raise ValueError(f"Unknown date filter: {date_filter}")


@dataclass(frozen=True)
class ComplaintFilters:
    """Listing filters; None means 'do not filter on this field'."""

    title: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    date_filter: Optional[str] = None


def build_complaint_filter(
    owner_field: str,
    owner_id: str,
    filters: ComplaintFilters,
    now: datetime | None = None,
) -> tuple[str, list[dict[str, Any]]]:
    """
    Build the WHERE clause and parameters for a complaint listing.

    Args:
        owner_field: "representative_id" or "constituent_id"
        owner_id: The id the listing is scoped to
        filters: Optional title/category/status/date filters

    Returns:
        (where_clause, parameters)
    """
    if owner_field not in ("representative_id", "constituent_id"):
        raise ValueError(f"Unsupported owner field: {owner_field}")

    conditions = [f"c.{owner_field} = @owner_id"]
    parameters: list[dict[str, Any]] = [{"name": "@owner_id", "value": owner_id}]

    if filters.title:
        conditions.append("CONTAINS(LOWER(c.title), LOWER(@title))")
        parameters.append({"name": "@title", "value": filters.title})

    if filters.category:
        conditions.append("c.category = @category")
        parameters.append({"name": "@category", "value": filters.category})

    if filters.status:
        conditions.append("c.status = @status")
        parameters.append({"name": "@status", "value": filters.status})

    if filters.date_filter:
        since = date_filter_start(filters.date_filter, now)
        conditions.append("c.created_at >= @since")
        parameters.append({"name": "@since", "value": since.strftime(_BOUND_FORMAT)})

    return " AND ".join(conditions), parameters


class CosmosComplaintRepository:
    """Repository for complaint operations using Cosmos DB."""

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def get_by_id(self, complaint_id: str) -> Optional[ComplaintDocument]:
        """Get a complaint by ID (direct point read)."""
        data = await read_item(COMPLAINTS_CONTAINER, complaint_id, partition_key=complaint_id)
        if data is None:
            return None
        return ComplaintDocument(**data)

    async def list_complaints(
        self,
        owner_field: str,
        owner_id: str,
        filters: ComplaintFilters,
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list[ComplaintDocument], int]:
        """
        List complaints for a representative or constituent, newest first.

        Returns:
            Tuple of (complaints, total_count)
        """
        where_clause, parameters = build_complaint_filter(owner_field, owner_id, filters)

        count_query = f"SELECT VALUE COUNT(1) FROM c WHERE {where_clause}"
        total = await query_count(COMPLAINTS_CONTAINER, count_query, parameters=parameters)

        offset = (page - 1) * per_page
        query = f"""
            SELECT * FROM c
            WHERE {where_clause}
            ORDER BY c.created_at DESC
            OFFSET @offset LIMIT @limit
        """
        results = await query_items(
            COMPLAINTS_CONTAINER,
            query,
            parameters=parameters
            + [
                {"name": "@offset", "value": offset},
                {"name": "@limit", "value": per_page},
            ],
        )
        return [ComplaintDocument(**r) for r in results], total

    async def count_by_status(self, owner_field: str, owner_id: str) -> dict[str, int]:
        """Count an owner's complaints by status."""
        return dict(Counter(await self._select_field(owner_field, owner_id, "status")))

    async def count_by_category(self, owner_field: str, owner_id: str) -> dict[str, int]:
        """Count an owner's complaints by category."""
        return dict(Counter(await self._select_field(owner_field, owner_id, "category")))

    async def list_status_timeline(self, owner_field: str, owner_id: str) -> list[tuple[datetime, str]]:
        """Creation time and current status of an owner's complaints, oldest first."""
        where_clause, parameters = build_complaint_filter(owner_field, owner_id, ComplaintFilters())
        query = f"""
            SELECT c.created_at, c.status
            FROM c
            WHERE {where_clause}
            ORDER BY c.created_at ASC
        """
        results = await query_items(COMPLAINTS_CONTAINER, query, parameters=parameters)
        return [(_parse_timestamp(r["created_at"]), r["status"]) for r in results]

    async def _select_field(self, owner_field: str, owner_id: str, field: str) -> list[Any]:
        # The SDK rejects cross-partition GROUP BY, so values are tallied here
        where_clause, parameters = build_complaint_filter(owner_field, owner_id, ComplaintFilters())
        query = f"SELECT VALUE c.{field} FROM c WHERE {where_clause}"
        return await query_items(COMPLAINTS_CONTAINER, query, parameters=parameters)

    async def count_created_since(self, owner_field: str, owner_id: str, since: datetime) -> int:
        """Count an owner's complaints created at or after ``since``."""
        where_clause, parameters = build_complaint_filter(owner_field, owner_id, ComplaintFilters())
        query = f"SELECT VALUE COUNT(1) FROM c WHERE {where_clause} AND c.created_at >= @since"
        return await query_count(
            COMPLAINTS_CONTAINER,
            query,
            parameters=parameters + [{"name": "@since", "value": since.strftime(_BOUND_FORMAT)}],
        )

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create(self, complaint: ComplaintDocument) -> ComplaintDocument:
        """Create a new complaint."""
        await create_item(COMPLAINTS_CONTAINER, complaint.model_dump(mode="json"))
        logger.info(f"Created complaint {complaint.id} for representative {complaint.representative_id}")
        return complaint

    async def replace(self, complaint: ComplaintDocument) -> ComplaintDocument:
        """
        Replace a complaint, guarded by the ETag it was read with.

        Raises ConflictError if it changed in the meantime.
        """
        complaint.updated_at = datetime.now(timezone.utc)
        data = await replace_item(
            COMPLAINTS_CONTAINER,
            complaint.model_dump(mode="json"),
            etag=complaint.etag,
        )
        return ComplaintDocument(**data)

    async def set_feedback_submitted(self, complaint_id: str) -> Optional[ComplaintDocument]:
        """Mark a complaint as having received feedback."""
        complaint = await self.get_by_id(complaint_id)
        if complaint is None:
            return None
        complaint.is_feedback_submitted = True
        return await self.replace(complaint)

    async def delete(self, complaint_id: str) -> None:
        """Delete a complaint."""
        await delete_item(COMPLAINTS_CONTAINER, complaint_id, partition_key=complaint_id)
        logger.info(f"Deleted complaint {complaint_id}")
