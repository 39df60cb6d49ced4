"""
Notification API endpoints.

Every identity reads and acknowledges its own notifications only.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends

from api.deps import CurrentClaims, Pagination, get_notification_service
from schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from services.notification_service import NotificationService

logger = structlog.get_logger(__name__)

router = APIRouter()

NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    claims: CurrentClaims,
    notification_service: NotificationServiceDep,
    pagination: Annotated[Pagination, Depends()],
) -> NotificationListResponse:
    """List the caller's notifications, newest first, with the unread count."""
    return await notification_service.list_for_user(
        claims.user_id, page=pagination.page, per_page=pagination.per_page
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    claims: CurrentClaims,
    notification_service: NotificationServiceDep,
) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=await notification_service.unread_count(claims.user_id))


# Registered before /{notification_id}/read so the literal path wins
@router.patch("/mark-all-read", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(
    claims: CurrentClaims,
    notification_service: NotificationServiceDep,
) -> MarkAllReadResponse:
    """Mark every unread notification of the caller as read."""
    updated = await notification_service.mark_all_read(claims.user_id)
    return MarkAllReadResponse(updated=updated)


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    claims: CurrentClaims,
    notification_service: NotificationServiceDep,
) -> NotificationResponse:
    """Mark one notification as read. Repeating the call is harmless."""
    notification = await notification_service.mark_read(claims.user_id, notification_id)
    return NotificationResponse.model_validate(notification)
