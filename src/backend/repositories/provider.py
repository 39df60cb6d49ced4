"""
Repository provider for dependency injection.

This module provides a unified interface for accessing repositories
using Cosmos DB as the data store.

Usage:
    from repositories.provider import get_user_repository, get_complaint_repository, ...

    # In FastAPI dependencies:
    async def some_endpoint(
        user_repo: UserRepositoryProtocol = Depends(get_user_repository),
    ):
        user = await user_repo.get_by_id(user_id)
"""

import logging
from typing import Protocol, runtime_checkable

from core.config import settings
from repositories.cosmos_complaint_repository import CosmosComplaintRepository
from repositories.cosmos_feedback_repository import CosmosFeedbackRepository
from repositories.cosmos_location_repository import CosmosLocationRepository
from repositories.cosmos_notification_repository import CosmosNotificationRepository
from repositories.cosmos_user_repository import CosmosUserRepository

logger = logging.getLogger(__name__)


def is_cosmos_enabled() -> bool:
    """Check if Cosmos DB is configured."""
    # Either AZURE_COSMOS_ENDPOINT (RBAC) or AZURE_COSMOS_CONNECTION_STRING (emulator)
    return bool(settings.AZURE_COSMOS_ENDPOINT or settings.AZURE_COSMOS_CONNECTION_STRING)


# =============================================================================
# Repository Protocols (Interfaces)
# =============================================================================


@runtime_checkable
class UserRepositoryProtocol(Protocol):
    """Protocol defining user repository operations."""

    async def get_by_id(self, user_id: str): ...
    async def get_by_email(self, email: str): ...
    async def get_representative_for_constituency(self, constituency_id: str): ...
    async def get_many(self, user_ids: list[str]): ...
    async def create(self, user): ...


@runtime_checkable
class ComplaintRepositoryProtocol(Protocol):
    """Protocol defining complaint repository operations."""

    async def get_by_id(self, complaint_id: str): ...
    async def list_complaints(self, owner_field: str, owner_id: str, filters, page: int = 1, per_page: int = 10): ...
    async def count_by_status(self, owner_field: str, owner_id: str): ...
    async def count_by_category(self, owner_field: str, owner_id: str): ...
    async def list_status_timeline(self, owner_field: str, owner_id: str): ...
    async def count_created_since(self, owner_field: str, owner_id: str, since): ...
    async def create(self, complaint): ...
    async def replace(self, complaint): ...
    async def set_feedback_submitted(self, complaint_id: str): ...
    async def delete(self, complaint_id: str): ...


@runtime_checkable
class NotificationRepositoryProtocol(Protocol):
    """Protocol defining notification repository operations."""

    async def list_for_recipient(self, recipient_id: str, page: int = 1, per_page: int = 10): ...
    async def count_unread(self, recipient_id: str) -> int: ...
    async def create(self, notification): ...
    async def mark_read(self, recipient_id: str, notification_id: str): ...
    async def mark_all_read(self, recipient_id: str) -> int: ...


@runtime_checkable
class FeedbackRepositoryProtocol(Protocol):
    """Protocol defining feedback repository operations."""

    async def exists(self, complaint_id: str, constituent_id: str) -> bool: ...
    async def get_for_complaint(self, complaint_id: str): ...
    async def complaint_ids_with_feedback(self, complaint_ids: list[str]) -> set[str]: ...
    async def list_for_constituent(self, constituent_id: str): ...
    async def list_for_representative(self, representative_id: str): ...
    async def rating_counts(self, representative_id: str): ...
    async def create(self, feedback): ...


@runtime_checkable
class LocationRepositoryProtocol(Protocol):
    """Protocol defining reference data repository operations."""

    async def list_locations(self, kind, search: str | None = None, parents: dict | None = None): ...
    async def get_by_id(self, kind, location_id: str): ...
    async def find_by_name(self, kind, name: str, parents: dict | None = None): ...
    async def create(self, location): ...
    async def update(self, location): ...
    async def delete(self, kind, location_id: str): ...


# =============================================================================
# Repository Factory Functions
# =============================================================================


def get_user_repository() -> UserRepositoryProtocol:
    return CosmosUserRepository()


def get_complaint_repository() -> ComplaintRepositoryProtocol:
    return CosmosComplaintRepository()


def get_notification_repository() -> NotificationRepositoryProtocol:
    return CosmosNotificationRepository()


def get_feedback_repository() -> FeedbackRepositoryProtocol:
    return CosmosFeedbackRepository()


def get_location_repository() -> LocationRepositoryProtocol:
    return CosmosLocationRepository()
