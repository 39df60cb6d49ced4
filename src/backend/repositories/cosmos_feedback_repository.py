"""
Cosmos DB Feedback repository.

Feedback documents use a deterministic id built from the complaint and the
constituent, so the container itself rejects duplicates.
"""

import logging
from collections import Counter
from typing import Optional

from azure.core.exceptions import ResourceExistsError

from core.exceptions import ConflictError
from db.cosmos_session import (
    FEEDBACK_CONTAINER,
    create_item,
    query_items,
    read_item,
)
from models.cosmos_documents import FeedbackDocument

logger = logging.getLogger(__name__)


class CosmosFeedbackRepository:
    """Repository for complaint feedback using Cosmos DB."""

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def _get(self, complaint_id: str, constituent_id: str) -> Optional[FeedbackDocument]:
        """Get the feedback a constituent left on a complaint (point read)."""
        data = await read_item(
            FEEDBACK_CONTAINER,
            FeedbackDocument.key_for(complaint_id, constituent_id),
            partition_key=complaint_id,
        )
        if data is None:
            return None
        return FeedbackDocument(**data)

    async def exists(self, complaint_id: str, constituent_id: str) -> bool:
        return await self._get(complaint_id, constituent_id) is not None

    async def get_for_complaint(self, complaint_id: str) -> Optional[FeedbackDocument]:
        """Get the feedback recorded for a complaint, if any."""
        results = await query_items(
            FEEDBACK_CONTAINER,
            "SELECT * FROM c WHERE c.complaint_id = @complaint_id",
            parameters=[{"name": "@complaint_id", "value": complaint_id}],
            partition_key=complaint_id,
            max_items=1,
        )
        if not results:
            return None
        return FeedbackDocument(**results[0])

    async def complaint_ids_with_feedback(self, complaint_ids: list[str]) -> set[str]:
        """Which of the given complaints have feedback recorded."""
        if not complaint_ids:
            return set()
        results = await query_items(
            FEEDBACK_CONTAINER,
            "SELECT DISTINCT VALUE c.complaint_id FROM c WHERE ARRAY_CONTAINS(@ids, c.complaint_id)",
            parameters=[{"name": "@ids", "value": list(dict.fromkeys(complaint_ids))}],
        )
        return set(results)

    async def list_for_constituent(self, constituent_id: str) -> list[FeedbackDocument]:
        """All feedback submitted by a constituent, newest first."""
        results = await query_items(
            FEEDBACK_CONTAINER,
            "SELECT * FROM c WHERE c.constituent_id = @constituent_id ORDER BY c.created_at DESC",
            parameters=[{"name": "@constituent_id", "value": constituent_id}],
        )
        return [FeedbackDocument(**r) for r in results]

    async def list_for_representative(self, representative_id: str) -> list[FeedbackDocument]:
        """All feedback on a representative's complaints, newest first."""
        results = await query_items(
            FEEDBACK_CONTAINER,
            "SELECT * FROM c WHERE c.representative_id = @representative_id ORDER BY c.created_at DESC",
            parameters=[{"name": "@representative_id", "value": representative_id}],
        )
        return [FeedbackDocument(**r) for r in results]

    async def rating_counts(self, representative_id: str) -> dict[int, int]:
        """Number of feedback documents per rating for a representative."""
        # Feedback spans partitions and the SDK rejects cross-partition GROUP BY
        query = "SELECT VALUE c.rating FROM c WHERE c.representative_id = @representative_id"
        ratings = await query_items(
            FEEDBACK_CONTAINER,
            query,
            parameters=[{"name": "@representative_id", "value": representative_id}],
        )
        return dict(Counter(int(rating) for rating in ratings))

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create(self, feedback: FeedbackDocument) -> FeedbackDocument:
        """
        Create feedback for a complaint.

        Raises:
            ConflictError: If feedback for this complaint and constituent exists
        """
        feedback.id = FeedbackDocument.key_for(feedback.complaint_id, feedback.constituent_id)
        try:
            await create_item(FEEDBACK_CONTAINER, feedback.model_dump(mode="json"))
        except ResourceExistsError as e:
            raise ConflictError("Feedback already submitted for this complaint") from e
        logger.info(f"Created feedback {feedback.id}")
        return feedback
