"""Cosmos DB document models."""

from models.cosmos_documents import (
    ComplaintDocument,
    FeedbackDocument,
    LocationDocument,
    NotificationDocument,
    UserDocument,
)

__all__ = [
    "UserDocument",
    "ComplaintDocument",
    "NotificationDocument",
    "FeedbackDocument",
    "LocationDocument",
]
