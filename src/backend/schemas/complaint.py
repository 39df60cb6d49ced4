"""
Complaint Pydantic schemas.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from models.cosmos_documents import ComplaintCategory, ComplaintStatus
from schemas.user import UserSummary

DateFilter = Literal["today", "this-week", "this-month", "this-year"]


class AttachmentResponse(BaseModel):
    """Stored attachment descriptor."""

    path: str
    filename: str
    original_name: str
    mime_type: str
    size: int = 0

    model_config = {"from_attributes": True}


class ComplaintUpdate(BaseModel):
    """Representative update: a status transition, a response, or both."""

    status: Optional[ComplaintStatus] = None
    response: Optional[str] = Field(None, max_length=5000)


class ComplaintResponse(BaseModel):
    """Complaint as returned by the API."""

    id: str
    title: str
    description: str
    category: ComplaintCategory
    attachments: list[AttachmentResponse] = []
    constituent_id: str
    representative_id: str
    status: ComplaintStatus
    response: Optional[str] = None
    is_feedback_submitted: bool = False
    is_updated: bool = False
    created_at: datetime
    updated_at: datetime

    # Populated on listings and detail views
    constituent: Optional[UserSummary] = None
    representative: Optional[UserSummary] = None

    model_config = {"from_attributes": True}


class ComplaintListResponse(BaseModel):
    """Paginated complaint listing."""

    complaints: list[ComplaintResponse]
    total: int
    page: int
    per_page: int
    total_pages: int


class ComplaintStatsResponse(BaseModel):
    """Counts over the caller's complaints."""

    total: int = 0
    new: int = Field(0, description="Created in the last 24 hours")
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0
    rejected: int = 0


TrendPeriod = Literal["week", "month", "year"]


class ComplaintTrendPoint(BaseModel):
    """Complaints created in one period, by their current status."""

    label: str = Field(..., description="e.g. '2024-W20', 'May 2024' or '2024'")
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0
    rejected: int = 0


class ComplaintTrendsResponse(BaseModel):
    """Complaint counts per period, oldest first."""

    period: TrendPeriod
    points: list[ComplaintTrendPoint]


class CategoryCount(BaseModel):
    category: ComplaintCategory
    count: int


class ComplaintCategoriesResponse(BaseModel):
    """Complaint counts per category, largest first."""

    categories: list[CategoryCount]
    total: int
