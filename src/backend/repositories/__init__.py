"""Repository modules for database access."""

from repositories.cosmos_complaint_repository import CosmosComplaintRepository
from repositories.cosmos_feedback_repository import CosmosFeedbackRepository
from repositories.cosmos_location_repository import CosmosLocationRepository
from repositories.cosmos_notification_repository import CosmosNotificationRepository
from repositories.cosmos_user_repository import CosmosUserRepository

__all__ = [
    "CosmosUserRepository",
    "CosmosComplaintRepository",
    "CosmosNotificationRepository",
    "CosmosFeedbackRepository",
    "CosmosLocationRepository",
]
