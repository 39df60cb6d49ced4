"""
Notification Pydantic schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from models.cosmos_documents import NotificationType


class NotificationResponse(BaseModel):
    """A notification as returned by the API and pushed over the real-time channel."""

    id: str
    type: NotificationType
    title: str
    message: str
    related_complaint_id: Optional[str] = None
    is_read: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    """Paginated notifications with the caller's unread count."""

    notifications: list[NotificationResponse]
    total: int
    unread_count: int
    page: int
    per_page: int
    total_pages: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkAllReadResponse(BaseModel):
    updated: int
