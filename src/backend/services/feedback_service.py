"""
Complaint feedback service.

A constituent may rate a complaint once, after it has been resolved. The
feedback container is the record of whether feedback exists; the complaint's
is_feedback_submitted flag is written afterwards as a display hint and may
lag behind if that second write fails.
"""

import structlog

from core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)
from models.cosmos_documents import ComplaintStatus, FeedbackDocument
from repositories.provider import ComplaintRepositoryProtocol, FeedbackRepositoryProtocol
from schemas.auth import AnyClaims, ConstituentClaims
from schemas.feedback import FeedbackStatistics

logger = structlog.get_logger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class FeedbackService:
    """Service for submitting and reading complaint feedback."""

    def __init__(
        self,
        feedback_repo: FeedbackRepositoryProtocol,
        complaint_repo: ComplaintRepositoryProtocol,
    ):
        self.feedback_repo = feedback_repo
        self.complaint_repo = complaint_repo

    async def submit(
        self,
        claims: ConstituentClaims,
        complaint_id: str,
        rating: int,
        comment: str | None = None,
    ) -> FeedbackDocument:
        """
        Record feedback on a resolved complaint.

        Raises:
            ValidationError: Rating outside 1-5
            NotFoundError: Unknown complaint
            AuthorizationError: Caller did not file the complaint
            StateError: Complaint is not resolved
            ConflictError: Feedback already submitted
        """
        if not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")

        complaint = await self.complaint_repo.get_by_id(complaint_id)
        if complaint is None:
            raise NotFoundError("Complaint not found")
        if complaint.constituent_id != claims.user_id:
            raise AuthorizationError("You can only provide feedback for your own complaints")
        if complaint.status != ComplaintStatus.RESOLVED:
            raise StateError("Feedback can only be provided for resolved complaints")
        if await self.feedback_repo.exists(complaint_id, claims.user_id):
            raise ConflictError("Feedback already submitted for this complaint")

        comment = (comment or "").strip() or None
        feedback = await self.feedback_repo.create(
            FeedbackDocument(
                complaint_id=complaint.id,
                constituent_id=claims.user_id,
                representative_id=complaint.representative_id,
                rating=rating,
                comment=comment,
            )
        )

        try:
            await self.complaint_repo.set_feedback_submitted(complaint.id)
        except Exception as e:
            logger.warning(
                "feedback_flag_update_failed",
                complaint_id=complaint.id,
                feedback_id=feedback.id,
                error=str(e),
            )

        logger.info(
            "feedback_submitted",
            complaint_id=complaint.id,
            constituent_id=claims.user_id,
            representative_id=complaint.representative_id,
            rating=rating,
        )
        return feedback

    async def get_for_complaint(self, claims: AnyClaims, complaint_id: str) -> FeedbackDocument:
        """Feedback on a complaint the caller is a party to."""
        complaint = await self.complaint_repo.get_by_id(complaint_id)
        if complaint is None:
            raise NotFoundError("Complaint not found")
        if claims.user_id not in (complaint.constituent_id, complaint.representative_id):
            raise AuthorizationError("You do not have access to this complaint")

        feedback = await self.feedback_repo.get_for_complaint(complaint_id)
        if feedback is None:
            raise NotFoundError("No feedback found for this complaint")
        return feedback

    async def list_for_constituent(self, constituent_id: str) -> list[FeedbackDocument]:
        return await self.feedback_repo.list_for_constituent(constituent_id)

    async def list_for_representative(self, representative_id: str) -> list[FeedbackDocument]:
        return await self.feedback_repo.list_for_representative(representative_id)

    async def statistics(self, representative_id: str) -> FeedbackStatistics:
        """Total, average (one decimal) and per-star counts for a representative."""
        counts = await self.feedback_repo.rating_counts(representative_id)
        rating_counts = {star: counts.get(star, 0) for star in range(MIN_RATING, MAX_RATING + 1)}
        total = sum(rating_counts.values())
        average = round(sum(star * n for star, n in rating_counts.items()) / total, 1) if total else 0.0
        return FeedbackStatistics(total_feedbacks=total, average_rating=average, rating_counts=rating_counts)
