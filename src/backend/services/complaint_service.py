"""
Complaint lifecycle service.

Constituents file complaints against their constituency's representative;
only that representative moves a complaint through its states:

    pending     -> in-progress | resolved | rejected
    in-progress -> resolved | rejected

resolved and rejected are terminal. Every transition and response is
announced to the constituent through the notification outbox.
"""

import math
from typing import Optional

import structlog
from starlette.concurrency import run_in_threadpool

from core.exceptions import (
    AuthorizationError,
    ConfigurationError,
    NotFoundError,
    StateError,
    ValidationError,
)
from models.cosmos_documents import (
    ComplaintCategory,
    ComplaintDocument,
    ComplaintStatus,
    NotificationType,
)
from repositories.cosmos_complaint_repository import ComplaintFilters
from repositories.provider import (
    ComplaintRepositoryProtocol,
    FeedbackRepositoryProtocol,
    UserRepositoryProtocol,
)
from schemas.auth import AnyClaims, ConstituentClaims, RepresentativeClaims
from schemas.complaint import ComplaintListResponse, ComplaintResponse
from schemas.user import UserSummary
from services.attachment_storage import AttachmentStorage, PendingAttachment
from services.notification_service import NotificationOutbox, NotificationRequest
from services.pdf_service import render_complaint_pdf

logger = structlog.get_logger(__name__)

ALLOWED_TRANSITIONS: dict[ComplaintStatus, frozenset[ComplaintStatus]] = {
    ComplaintStatus.PENDING: frozenset(
        {ComplaintStatus.IN_PROGRESS, ComplaintStatus.RESOLVED, ComplaintStatus.REJECTED}
    ),
    ComplaintStatus.IN_PROGRESS: frozenset({ComplaintStatus.RESOLVED, ComplaintStatus.REJECTED}),
    ComplaintStatus.RESOLVED: frozenset(),
    ComplaintStatus.REJECTED: frozenset(),
}

TERMINAL_STATUSES = frozenset({ComplaintStatus.RESOLVED, ComplaintStatus.REJECTED})

STATUS_LABELS = {
    ComplaintStatus.PENDING: "Pending",
    ComplaintStatus.IN_PROGRESS: "In Progress",
    ComplaintStatus.RESOLVED: "Resolved",
    ComplaintStatus.REJECTED: "Rejected",
}


def is_transition_allowed(current: ComplaintStatus, new: ComplaintStatus) -> bool:
    return ComplaintStatus(new) in ALLOWED_TRANSITIONS[ComplaintStatus(current)]


class ComplaintService:
    """Service for the complaint lifecycle."""

    def __init__(
        self,
        complaint_repo: ComplaintRepositoryProtocol,
        user_repo: UserRepositoryProtocol,
        feedback_repo: FeedbackRepositoryProtocol,
        storage: AttachmentStorage,
        outbox: NotificationOutbox,
    ):
        self.complaint_repo = complaint_repo
        self.user_repo = user_repo
        self.feedback_repo = feedback_repo
        self.storage = storage
        self.outbox = outbox

    # ========================================================================
    # Submission
    # ========================================================================

    async def submit(
        self,
        claims: ConstituentClaims,
        title: str,
        description: str,
        category: ComplaintCategory,
        attachments: list[PendingAttachment],
    ) -> ComplaintDocument:
        """
        File a complaint for the caller.

        The representative is taken from the caller's stored identity, never
        from the request.
        """
        title = (title or "").strip()
        description = (description or "").strip()
        if not title or not description:
            raise ValidationError("Title and description are required")

        constituent = await self.user_repo.get_by_id(claims.user_id)
        if constituent is None:
            raise NotFoundError("User not found")
        if not constituent.representative_id:
            raise ConfigurationError("No representative is assigned to your constituency")

        saved = await self.storage.save(attachments)
        complaint = ComplaintDocument(
            title=title,
            description=description,
            category=category,
            attachments=saved,
            constituent_id=constituent.id,
            representative_id=constituent.representative_id,
        )
        try:
            await self.complaint_repo.create(complaint)
        except Exception:
            await self.storage.remove(saved)
            raise

        self.outbox.publish(
            NotificationRequest(
                recipient_id=complaint.representative_id,
                type=NotificationType.NEW_COMPLAINT,
                title="New Complaint Received",
                message=f'{constituent.name} filed a new {complaint.category} complaint: "{complaint.title}"',
                related_complaint_id=complaint.id,
            )
        )
        logger.info(
            "complaint_submitted",
            complaint_id=complaint.id,
            constituent_id=complaint.constituent_id,
            representative_id=complaint.representative_id,
            attachments=len(saved),
        )
        return complaint

    # ========================================================================
    # Reads
    # ========================================================================

    async def list_for_representative(
        self,
        claims: RepresentativeClaims,
        filters: ComplaintFilters,
        page: int = 1,
        per_page: int = 10,
    ) -> ComplaintListResponse:
        """Complaints assigned to the caller, newest first."""
        return await self._list("representative_id", claims.user_id, filters, page, per_page)

    async def list_for_constituent(
        self,
        claims: ConstituentClaims,
        filters: ComplaintFilters,
        page: int = 1,
        per_page: int = 10,
    ) -> ComplaintListResponse:
        """Complaints filed by the caller, newest first."""
        return await self._list("constituent_id", claims.user_id, filters, page, per_page)

    async def _list(
        self,
        owner_field: str,
        owner_id: str,
        filters: ComplaintFilters,
        page: int,
        per_page: int,
    ) -> ComplaintListResponse:
        complaints, total = await self.complaint_repo.list_complaints(
            owner_field, owner_id, filters, page=page, per_page=per_page
        )
        return ComplaintListResponse(
            complaints=await self._to_responses(complaints),
            total=total,
            page=page,
            per_page=per_page,
            total_pages=math.ceil(total / per_page) if total else 0,
        )

    async def get(self, complaint_id: str, claims: AnyClaims) -> ComplaintDocument:
        """
        Load a complaint the caller is a party to.

        Raises:
            NotFoundError: Unknown complaint
            AuthorizationError: Caller is neither the owner nor the assignee
        """
        complaint = await self.complaint_repo.get_by_id(complaint_id)
        if complaint is None:
            raise NotFoundError("Complaint not found")
        if claims.user_id not in (complaint.constituent_id, complaint.representative_id):
            raise AuthorizationError("You do not have access to this complaint")
        return complaint

    async def get_by_id(self, complaint_id: str, claims: AnyClaims) -> ComplaintResponse:
        complaint = await self.get(complaint_id, claims)
        return (await self._to_responses([complaint]))[0]

    async def _to_responses(self, complaints: list[ComplaintDocument]) -> list[ComplaintResponse]:
        """Attach both parties and the feedback state derived from the feedback container."""
        if not complaints:
            return []
        users = await self.user_repo.get_many(
            [c.constituent_id for c in complaints] + [c.representative_id for c in complaints]
        )
        with_feedback = await self.feedback_repo.complaint_ids_with_feedback([c.id for c in complaints])

        responses = []
        for complaint in complaints:
            response = ComplaintResponse.model_validate(complaint)
            response.is_feedback_submitted = complaint.id in with_feedback
            constituent = users.get(complaint.constituent_id)
            representative = users.get(complaint.representative_id)
            response.constituent = UserSummary.model_validate(constituent) if constituent else None
            response.representative = UserSummary.model_validate(representative) if representative else None
            responses.append(response)
        return responses

    # ========================================================================
    # Representative updates
    # ========================================================================

    async def update(
        self,
        complaint_id: str,
        claims: RepresentativeClaims,
        status: Optional[ComplaintStatus] = None,
        response: Optional[str] = None,
    ) -> ComplaintDocument:
        """
        Change a complaint's status and/or response.

        Re-sending the current status is not a transition; only the response
        (if any) is applied.

        Raises:
            NotFoundError: Unknown complaint
            AuthorizationError: Caller is not the assigned representative
            StateError: Complaint is terminal, or the transition is not allowed
            ValidationError: Neither status nor response given
        """
        complaint = await self.complaint_repo.get_by_id(complaint_id)
        if complaint is None:
            raise NotFoundError("Complaint not found")
        if complaint.representative_id != claims.user_id:
            raise AuthorizationError("Only the assigned representative can update this complaint")

        current = ComplaintStatus(complaint.status)
        if current in TERMINAL_STATUSES:
            raise StateError(f"Cannot update a complaint that is already {current.value}")

        if response is not None:
            response = response.strip() or None
        if status is None and response is None:
            raise ValidationError("Provide a status or a response")

        new_status = ComplaintStatus(status) if status is not None else current
        status_changed = new_status != current
        if status_changed and not is_transition_allowed(current, new_status):
            raise StateError(f"Cannot change status from {current.value} to {new_status.value}")

        response_changed = response is not None and response != complaint.response
        if not status_changed and not response_changed:
            return complaint

        if status_changed:
            complaint.status = new_status
            if current == ComplaintStatus.PENDING:
                complaint.is_updated = True
        if response_changed:
            complaint.response = response

        updated = await self.complaint_repo.replace(complaint)

        if status_changed:
            message = f'Your complaint "{updated.title}" is now {STATUS_LABELS[new_status]}.'
            if updated.response:
                message += f" Response: {updated.response}"
            self.outbox.publish(
                NotificationRequest(
                    recipient_id=updated.constituent_id,
                    type=NotificationType.COMPLAINT_STATUS_UPDATE,
                    title="Complaint Status Updated",
                    message=message,
                    related_complaint_id=updated.id,
                )
            )
        else:
            self.outbox.publish(
                NotificationRequest(
                    recipient_id=updated.constituent_id,
                    type=NotificationType.COMPLAINT_RESPONSE,
                    title="New Response to Your Complaint",
                    message=f'Your representative responded to "{updated.title}": {updated.response}',
                    related_complaint_id=updated.id,
                )
            )

        logger.info(
            "complaint_updated",
            complaint_id=updated.id,
            representative_id=claims.user_id,
            previous_status=current.value,
            status=updated.status,
            response_changed=response_changed,
        )
        return updated

    # ========================================================================
    # Deletion
    # ========================================================================

    async def delete(self, complaint_id: str, claims: ConstituentClaims) -> None:
        """
        Delete a complaint the caller filed, whatever its status.

        Stored attachment files are removed after the document is gone.
        """
        complaint = await self.complaint_repo.get_by_id(complaint_id)
        if complaint is None:
            raise NotFoundError("Complaint not found")
        if complaint.constituent_id != claims.user_id:
            raise AuthorizationError("Only the constituent who filed this complaint can delete it")

        await self.complaint_repo.delete(complaint_id)
        await self.storage.remove(complaint.attachments)
        logger.info("complaint_deleted", complaint_id=complaint_id, constituent_id=claims.user_id)

    # ========================================================================
    # Export
    # ========================================================================

    async def export_pdf(self, complaint_id: str, claims: AnyClaims) -> bytes:
        """Render a complaint the caller is a party to as a PDF."""
        complaint = await self.get(complaint_id, claims)
        users = await self.user_repo.get_many([complaint.constituent_id, complaint.representative_id])
        return await run_in_threadpool(
            render_complaint_pdf,
            complaint,
            users.get(complaint.constituent_id),
            users.get(complaint.representative_id),
        )

