"""
Complaint statistics service.

Aggregates the caller's complaints: those assigned to them for a
representative, those they filed for a constituent. Grouping happens here
rather than in the store, since complaints are spread across partitions.
"""

from datetime import datetime, timedelta, timezone

import structlog

from models.cosmos_documents import ComplaintStatus
from repositories.provider import ComplaintRepositoryProtocol
from schemas.auth import AnyClaims, RepresentativeClaims
from schemas.complaint import (
    CategoryCount,
    ComplaintCategoriesResponse,
    ComplaintStatsResponse,
    ComplaintTrendPoint,
    ComplaintTrendsResponse,
    TrendPeriod,
)

logger = structlog.get_logger(__name__)

# Complaints created within this window count as "new"
NEW_COMPLAINT_WINDOW = timedelta(hours=24)


def _owner_field(claims: AnyClaims) -> str:
    return "representative_id" if isinstance(claims, RepresentativeClaims) else "constituent_id"


def period_key(created_at: datetime, period: TrendPeriod) -> tuple[tuple[int, ...], str]:
    """Sort key and display label of the period containing ``created_at``."""
    if period == "week":
        iso_year, iso_week, _ = created_at.isocalendar()
        return (iso_year, iso_week), f"{iso_year}-W{iso_week:02d}"
    if period == "year":
        return (created_at.year,), str(created_at.year)
    return (created_at.year, created_at.month), created_at.strftime("%b %Y")


class StatsService:
    """Service for complaint dashboards."""

    def __init__(self, complaint_repo: ComplaintRepositoryProtocol):
        self.complaint_repo = complaint_repo

    async def complaint_stats(self, claims: AnyClaims, now: datetime | None = None) -> ComplaintStatsResponse:
        """Counts by status plus complaints created in the last 24 hours."""
        owner_field = _owner_field(claims)
        now = now or datetime.now(timezone.utc)

        by_status = await self.complaint_repo.count_by_status(owner_field, claims.user_id)
        new = await self.complaint_repo.count_created_since(owner_field, claims.user_id, now - NEW_COMPLAINT_WINDOW)

        stats = ComplaintStatsResponse(
            total=sum(by_status.values()),
            new=new,
            pending=by_status.get(ComplaintStatus.PENDING.value, 0),
            in_progress=by_status.get(ComplaintStatus.IN_PROGRESS.value, 0),
            resolved=by_status.get(ComplaintStatus.RESOLVED.value, 0),
            rejected=by_status.get(ComplaintStatus.REJECTED.value, 0),
        )
        logger.debug("complaint_stats_computed", user_id=claims.user_id, role=claims.role, total=stats.total)
        return stats

    async def trends(self, claims: AnyClaims, period: TrendPeriod = "month") -> ComplaintTrendsResponse:
        """
        Complaints per week, month or year of creation, split by current status.

        Periods without complaints are omitted.
        """
        timeline = await self.complaint_repo.list_status_timeline(_owner_field(claims), claims.user_id)

        buckets: dict[tuple[int, ...], ComplaintTrendPoint] = {}
        for created_at, status in timeline:
            key, label = period_key(created_at, period)
            point = buckets.setdefault(key, ComplaintTrendPoint(label=label))
            point.total += 1
            field = status.replace("-", "_")
            setattr(point, field, getattr(point, field) + 1)

        points = [buckets[key] for key in sorted(buckets)]
        logger.debug("complaint_trends_computed", user_id=claims.user_id, period=period, points=len(points))
        return ComplaintTrendsResponse(period=period, points=points)

    async def categories(self, claims: AnyClaims) -> ComplaintCategoriesResponse:
        """Complaint counts per category, largest first."""
        counts = await self.complaint_repo.count_by_category(_owner_field(claims), claims.user_id)
        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return ComplaintCategoriesResponse(
            categories=[CategoryCount(category=category, count=count) for category, count in ordered],
            total=sum(counts.values()),
        )
