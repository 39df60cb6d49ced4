"""
Complaint statistics API endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from api.deps import CurrentClaims, get_stats_service
from schemas.complaint import (
    ComplaintCategoriesResponse,
    ComplaintStatsResponse,
    ComplaintTrendsResponse,
    TrendPeriod,
)
from services.stats_service import StatsService

router = APIRouter()


@router.get("/complaints", response_model=ComplaintStatsResponse)
async def get_complaint_stats(
    claims: CurrentClaims,
    stats_service: Annotated[StatsService, Depends(get_stats_service)],
) -> ComplaintStatsResponse:
    """
    Complaint counts for the caller's dashboard.

    Representatives see complaints assigned to them; constituents see the
    complaints they filed.
    """
    return await stats_service.complaint_stats(claims)


@router.get("/complaints/trends", response_model=ComplaintTrendsResponse)
async def get_complaint_trends(
    claims: CurrentClaims,
    stats_service: Annotated[StatsService, Depends(get_stats_service)],
    period: TrendPeriod = "month",
) -> ComplaintTrendsResponse:
    """Complaint counts per week, month or year of creation, split by status."""
    return await stats_service.trends(claims, period)


@router.get("/complaints/categories", response_model=ComplaintCategoriesResponse)
async def get_complaint_categories(
    claims: CurrentClaims,
    stats_service: Annotated[StatsService, Depends(get_stats_service)],
) -> ComplaintCategoriesResponse:
    """Complaint counts per category."""
    return await stats_service.categories(claims)
