"""
Shared dependencies for API endpoints.

Includes:
- Bearer token authentication producing immutable identity claims
- Role gates for constituent-only and representative-only endpoints
- Service construction per request
"""

from typing import Annotated

import structlog
from fastapi import BackgroundTasks, Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError as PydanticValidationError

from core.config import settings
from core.exceptions import AuthenticationError, AuthorizationError
from core.security import decode_token
from repositories.provider import (
    ComplaintRepositoryProtocol,
    FeedbackRepositoryProtocol,
    LocationRepositoryProtocol,
    NotificationRepositoryProtocol,
    UserRepositoryProtocol,
    get_complaint_repository,
    get_feedback_repository,
    get_location_repository,
    get_notification_repository,
    get_user_repository,
)
from schemas.auth import AnyClaims, ConstituentClaims, RepresentativeClaims, claims_from_token_data
from services.attachment_storage import AttachmentStorage, get_attachment_storage
from services.auth_service import AuthService
from services.complaint_service import ComplaintService
from services.feedback_service import FeedbackService
from services.notification_service import NotificationOutbox, NotificationService
from services.realtime import ConnectionManager, get_connection_manager
from services.stats_service import StatsService

logger = structlog.get_logger(__name__)

# Missing credentials are reported by get_current_claims, not by HTTPBearer
security = HTTPBearer(auto_error=False)


# =============================================================================
# Authentication
# =============================================================================


def claims_from_token(token: str) -> AnyClaims:
    """
    Verify an access token and return its claims.

    Shared by the HTTP authorizer and the real-time channel.

    Raises:
        AuthenticationError: Invalid, expired or malformed token
    """
    payload = decode_token(token)
    if payload is None:
        raise AuthenticationError("Invalid or expired access token")
    try:
        return claims_from_token_data(payload)
    except PydanticValidationError:
        logger.warning("token_claims_invalid", role=payload.get("role"))
        raise AuthenticationError("Invalid or expired access token") from None


async def get_current_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AnyClaims:
    """Extract and validate the caller's identity claims from the bearer token."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")
    return claims_from_token(credentials.credentials)


async def require_constituent(
    claims: Annotated[AnyClaims, Depends(get_current_claims)],
) -> ConstituentClaims:
    """Allow constituents only."""
    if not isinstance(claims, ConstituentClaims):
        raise AuthorizationError("This action is only available to constituents")
    return claims


async def require_representative(
    claims: Annotated[AnyClaims, Depends(get_current_claims)],
) -> RepresentativeClaims:
    """Allow representatives only."""
    if not isinstance(claims, RepresentativeClaims):
        raise AuthorizationError("This action is only available to representatives")
    return claims


CurrentClaims = Annotated[AnyClaims, Depends(get_current_claims)]
CurrentConstituent = Annotated[ConstituentClaims, Depends(require_constituent)]
CurrentRepresentative = Annotated[RepresentativeClaims, Depends(require_representative)]


# =============================================================================
# Pagination
# =============================================================================


class Pagination:
    """page/limit query parameters."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-based)"),
        limit: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            le=settings.MAX_PAGE_SIZE,
            description="Items per page",
        ),
    ):
        self.page = page
        self.per_page = limit


# =============================================================================
# Services
# =============================================================================


def get_notification_service(
    notification_repo: Annotated[NotificationRepositoryProtocol, Depends(get_notification_repository)],
    connections: Annotated[ConnectionManager, Depends(get_connection_manager)],
) -> NotificationService:
    return NotificationService(notification_repo, connections)


def get_notification_outbox(
    background_tasks: BackgroundTasks,
    service: Annotated[NotificationService, Depends(get_notification_service)],
) -> NotificationOutbox:
    return NotificationOutbox(background_tasks, service)


def get_auth_service(
    user_repo: Annotated[UserRepositoryProtocol, Depends(get_user_repository)],
) -> AuthService:
    return AuthService(user_repo)


def get_complaint_service(
    complaint_repo: Annotated[ComplaintRepositoryProtocol, Depends(get_complaint_repository)],
    user_repo: Annotated[UserRepositoryProtocol, Depends(get_user_repository)],
    feedback_repo: Annotated[FeedbackRepositoryProtocol, Depends(get_feedback_repository)],
    storage: Annotated[AttachmentStorage, Depends(get_attachment_storage)],
    outbox: Annotated[NotificationOutbox, Depends(get_notification_outbox)],
) -> ComplaintService:
    return ComplaintService(complaint_repo, user_repo, feedback_repo, storage, outbox)


def get_feedback_service(
    feedback_repo: Annotated[FeedbackRepositoryProtocol, Depends(get_feedback_repository)],
    complaint_repo: Annotated[ComplaintRepositoryProtocol, Depends(get_complaint_repository)],
) -> FeedbackService:
    return FeedbackService(feedback_repo, complaint_repo)


def get_stats_service(
    complaint_repo: Annotated[ComplaintRepositoryProtocol, Depends(get_complaint_repository)],
) -> StatsService:
    return StatsService(complaint_repo)


LocationRepository = Annotated[LocationRepositoryProtocol, Depends(get_location_repository)]
