"""
Complaint feedback API endpoints.

Constituents rate their resolved complaints once; representatives read the
feedback they received and its statistics.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, status

from api.deps import CurrentClaims, CurrentConstituent, CurrentRepresentative, get_feedback_service
from schemas.feedback import FeedbackResponse, FeedbackStatistics, FeedbackSubmit
from services.feedback_service import FeedbackService

logger = structlog.get_logger(__name__)

router = APIRouter()

FeedbackServiceDep = Annotated[FeedbackService, Depends(get_feedback_service)]


@router.post(
    "/complaint/{complaint_id}/feedback",
    response_model=FeedbackResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_feedback(
    complaint_id: str,
    feedback_in: FeedbackSubmit,
    claims: CurrentConstituent,
    feedback_service: FeedbackServiceDep,
) -> FeedbackResponse:
    """
    Rate a resolved complaint.

    Only the constituent who filed the complaint may rate it, and only once.
    """
    feedback = await feedback_service.submit(
        claims,
        complaint_id,
        rating=feedback_in.rating,
        comment=feedback_in.comment,
    )
    return FeedbackResponse.model_validate(feedback)


@router.get("/complaint/{complaint_id}/feedback", response_model=FeedbackResponse)
async def get_complaint_feedback(
    complaint_id: str,
    claims: CurrentClaims,
    feedback_service: FeedbackServiceDep,
) -> FeedbackResponse:
    feedback = await feedback_service.get_for_complaint(claims, complaint_id)
    return FeedbackResponse.model_validate(feedback)


@router.get("/feedback/constituent", response_model=list[FeedbackResponse])
async def list_my_feedback(
    claims: CurrentConstituent,
    feedback_service: FeedbackServiceDep,
) -> list[FeedbackResponse]:
    """Feedback the caller has given, newest first."""
    feedbacks = await feedback_service.list_for_constituent(claims.user_id)
    return [FeedbackResponse.model_validate(f) for f in feedbacks]


@router.get("/feedback/representative", response_model=list[FeedbackResponse])
async def list_received_feedback(
    claims: CurrentRepresentative,
    feedback_service: FeedbackServiceDep,
) -> list[FeedbackResponse]:
    """Feedback on complaints assigned to the caller, newest first."""
    feedbacks = await feedback_service.list_for_representative(claims.user_id)
    return [FeedbackResponse.model_validate(f) for f in feedbacks]


@router.get("/feedback/statistics", response_model=FeedbackStatistics)
async def get_feedback_statistics(
    claims: CurrentRepresentative,
    feedback_service: FeedbackServiceDep,
) -> FeedbackStatistics:
    return await feedback_service.statistics(claims.user_id)
