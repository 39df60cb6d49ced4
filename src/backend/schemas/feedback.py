"""
Complaint feedback Pydantic schemas.

Schemas for submitting and retrieving constituent feedback on resolved complaints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class FeedbackSubmit(BaseModel):
    """Schema for submitting feedback on a resolved complaint.

    The rating range is enforced by the feedback service, so an out-of-range
    value is reported with the same error shape as other business rules.
    """

    rating: int = Field(..., description="Rating from 1 (poor) to 5 (excellent)")
    comment: Optional[str] = Field(
        None,
        max_length=1000,
        description="Optional free-form comment (max 1000 chars)",
    )


class FeedbackResponse(BaseModel):
    """Stored feedback."""

    id: str
    complaint_id: str
    constituent_id: str
    representative_id: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class FeedbackStatistics(BaseModel):
    """Aggregated feedback for a representative."""

    total_feedbacks: int
    average_rating: float = Field(..., description="Average rating, one decimal place")
    rating_counts: dict[int, int] = Field(..., description="Count of each rating (1-5)")
