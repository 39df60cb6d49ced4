"""
Notification Service

Persists notifications for a recipient and pushes them over the real-time
channel. Complaint flows do not call this directly; they publish a
NotificationRequest to the request's NotificationOutbox, which delivers it
after the response has been sent. A failed notification is logged and never
fails the complaint operation that caused it.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional

import structlog
from fastapi import BackgroundTasks

from core.exceptions import NotFoundError
from models.cosmos_documents import NotificationDocument, NotificationType
from repositories.provider import NotificationRepositoryProtocol
from schemas.notification import NotificationListResponse, NotificationResponse
from services.realtime import ConnectionManager

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NotificationRequest:
    """A notification to be created for one recipient."""

    recipient_id: str
    type: NotificationType
    title: str
    message: str
    related_complaint_id: Optional[str] = None


def notification_payload(notification: NotificationDocument) -> dict[str, Any]:
    """JSON body of a notification as pushed to clients."""
    return NotificationResponse.model_validate(notification).model_dump(mode="json")


class NotificationService:
    """
    Service for creating, listing and acknowledging notifications.

    Features:
    - Persist then push to the recipient's open real-time connections
    - Paginated listing with an independent unread count
    - Idempotent mark-read, batched mark-all-read
    """

    def __init__(
        self,
        notification_repo: NotificationRepositoryProtocol,
        connections: ConnectionManager,
    ):
        self.notification_repo = notification_repo
        self.connections = connections

    async def create(
        self,
        recipient_id: str,
        type: NotificationType,
        title: str,
        message: str,
        related_complaint_id: Optional[str] = None,
    ) -> NotificationDocument:
        """
        Persist a notification, then push it to the recipient if connected.

        The push is best-effort; the stored notification is the record.
        """
        notification = NotificationDocument(
            recipient_id=recipient_id,
            type=type,
            title=title,
            message=message,
            related_complaint_id=related_complaint_id,
        )
        await self.notification_repo.create(notification)

        payload = notification_payload(notification)
        try:
            await self.connections.send_to_user(recipient_id, "notification", payload)
        except Exception as e:
            logger.warning(
                "notification_push_failed",
                recipient_id=recipient_id,
                notification_id=notification.id,
                error=str(e),
            )

        logger.info(
            "notification_created",
            recipient_id=recipient_id,
            notification_id=notification.id,
            type=notification.type,
        )
        return notification

    async def deliver(self, request: NotificationRequest) -> Optional[NotificationDocument]:
        """Outbox entry point: create the notification, logging instead of raising on failure."""
        try:
            return await self.create(
                recipient_id=request.recipient_id,
                type=request.type,
                title=request.title,
                message=request.message,
                related_complaint_id=request.related_complaint_id,
            )
        except Exception as e:
            logger.error(
                "notification_delivery_failed",
                recipient_id=request.recipient_id,
                type=request.type,
                related_complaint_id=request.related_complaint_id,
                error=str(e),
            )
            return None

    async def list_for_user(self, user_id: str, page: int = 1, per_page: int = 10) -> NotificationListResponse:
        """List a user's notifications, newest first, with their unread count."""
        notifications, total = await self.notification_repo.list_for_recipient(user_id, page=page, per_page=per_page)
        unread_count = await self.notification_repo.count_unread(user_id)
        return NotificationListResponse(
            notifications=[NotificationResponse.model_validate(n) for n in notifications],
            total=total,
            unread_count=unread_count,
            page=page,
            per_page=per_page,
            total_pages=math.ceil(total / per_page) if total else 0,
        )

    async def unread_count(self, user_id: str) -> int:
        return await self.notification_repo.count_unread(user_id)

    async def mark_read(self, user_id: str, notification_id: str) -> NotificationDocument:
        """
        Mark one of the user's notifications as read.

        Marking an already-read notification succeeds and leaves it read.

        Raises:
            NotFoundError: If the notification does not exist or belongs to someone else
        """
        notification = await self.notification_repo.mark_read(user_id, notification_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        return notification

    async def mark_all_read(self, user_id: str) -> int:
        """Mark all of the user's notifications as read; returns how many changed."""
        updated = await self.notification_repo.mark_all_read(user_id)
        logger.info("notifications_marked_read", user_id=user_id, updated=updated)
        return updated


class NotificationOutbox:
    """
    Request-scoped queue of notifications to deliver after the response.

    Entries are handed to FastAPI background tasks, so they run only once
    the handler has returned successfully.
    """

    def __init__(self, background_tasks: BackgroundTasks, service: NotificationService):
        self.background_tasks = background_tasks
        self.service = service

    def publish(self, request: NotificationRequest) -> None:
        self.background_tasks.add_task(self.service.deliver, request)
