"""Schemas module initialization."""

from schemas.auth import LoginRequest, RefreshTokenRequest, TokenResponse
from schemas.complaint import ComplaintListResponse, ComplaintResponse, ComplaintUpdate
from schemas.feedback import FeedbackResponse, FeedbackSubmit
from schemas.notification import NotificationListResponse, NotificationResponse
from schemas.user import UserCreate, UserResponse

__all__ = [
    "UserCreate",
    "UserResponse",
    "LoginRequest",
    "TokenResponse",
    "RefreshTokenRequest",
    "ComplaintUpdate",
    "ComplaintResponse",
    "ComplaintListResponse",
    "FeedbackSubmit",
    "FeedbackResponse",
    "NotificationResponse",
    "NotificationListResponse",
]
