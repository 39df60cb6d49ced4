"""
Pytest fixtures for Constituency Connect backend tests.

Repository fixtures are in-memory stand-ins that follow the Cosmos
repositories' contracts (including conflict and not-found behavior), so
service and API tests run without a database.
"""

import os
from collections.abc import AsyncGenerator
from datetime import date, datetime, timezone
from typing import Any, Optional
from unittest.mock import MagicMock

import pytest
from fastapi import BackgroundTasks
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("REFRESH_SECRET_KEY", "test-refresh-secret-key-for-testing")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from core.exceptions import ConflictError  # noqa: E402
from models.cosmos_documents import (  # noqa: E402
    ComplaintCategory,
    ComplaintDocument,
    FeedbackDocument,
    LocationDocument,
    NotificationDocument,
    UserDocument,
    UserRole,
)
from schemas.auth import ConstituentClaims, RepresentativeClaims  # noqa: E402

REPRESENTATIVE_ID = "rep-a"
OTHER_REPRESENTATIVE_ID = "rep-b"
CONSTITUENT_ID = "citizen-1"
CONSTITUENCY_ID = "na-1"


# =============================================================================
# In-memory repositories
# =============================================================================


class InMemoryUserRepository:
    def __init__(self) -> None:
        self.users: dict[str, UserDocument] = {}

    def add(self, user: UserDocument) -> UserDocument:
        self.users[user.id] = user
        return user

    async def get_by_id(self, user_id: str) -> Optional[UserDocument]:
        user = self.users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def get_by_email(self, email: str) -> Optional[UserDocument]:
        for user in self.users.values():
            if user.email == email.lower():
                return user.model_copy(deep=True)
        return None

    async def get_representative_for_constituency(self, constituency_id: str) -> Optional[UserDocument]:
        for user in self.users.values():
            if user.role == UserRole.REPRESENTATIVE.value and user.constituency_id == constituency_id:
                return user.model_copy(deep=True)
        return None

    async def get_many(self, user_ids: list[str]) -> dict[str, UserDocument]:
        return {uid: self.users[uid] for uid in user_ids if uid in self.users}

    async def create(self, user: UserDocument) -> UserDocument:
        for existing in self.users.values():
            if existing.email == user.email.lower():
                raise ConflictError("Email is already registered")
            if existing.cnic == user.cnic:
                raise ConflictError("CNIC is already registered")
            if existing.mobile == user.mobile:
                raise ConflictError("Mobile number is already registered")
        user.email = user.email.lower()
        self.users[user.id] = user
        return user


class InMemoryComplaintRepository:
    def __init__(self) -> None:
        self.complaints: dict[str, ComplaintDocument] = {}
        self.replace_calls = 0

    def add(self, complaint: ComplaintDocument) -> ComplaintDocument:
        self.complaints[complaint.id] = complaint
        return complaint

    def _matching(self, owner_field: str, owner_id: str, filters: Any) -> list[ComplaintDocument]:
        matches = [c for c in self.complaints.values() if getattr(c, owner_field) == owner_id]
        if filters is not None:
            if filters.title:
                matches = [c for c in matches if filters.title.lower() in c.title.lower()]
            if filters.category:
                matches = [c for c in matches if c.category == filters.category]
            if filters.status:
                matches = [c for c in matches if c.status == filters.status]
        return sorted(matches, key=lambda c: c.created_at, reverse=True)

    async def get_by_id(self, complaint_id: str) -> Optional[ComplaintDocument]:
        complaint = self.complaints.get(complaint_id)
        return complaint.model_copy(deep=True) if complaint else None

    async def list_complaints(self, owner_field, owner_id, filters, page=1, per_page=10):
        matches = self._matching(owner_field, owner_id, filters)
        start = (page - 1) * per_page
        return [c.model_copy(deep=True) for c in matches[start : start + per_page]], len(matches)

    async def count_by_status(self, owner_field, owner_id):
        counts: dict[str, int] = {}
        for complaint in self._matching(owner_field, owner_id, None):
            counts[complaint.status] = counts.get(complaint.status, 0) + 1
        return counts

    async def count_by_category(self, owner_field, owner_id):
        counts: dict[str, int] = {}
        for complaint in self._matching(owner_field, owner_id, None):
            counts[complaint.category] = counts.get(complaint.category, 0) + 1
        return counts

    async def list_status_timeline(self, owner_field, owner_id):
        matches = sorted(self._matching(owner_field, owner_id, None), key=lambda c: c.created_at)
        return [(c.created_at, c.status) for c in matches]

    async def count_created_since(self, owner_field, owner_id, since):
        return len([c for c in self._matching(owner_field, owner_id, None) if c.created_at >= since])

    async def create(self, complaint: ComplaintDocument) -> ComplaintDocument:
        self.complaints[complaint.id] = complaint.model_copy(deep=True)
        return complaint

    async def replace(self, complaint: ComplaintDocument) -> ComplaintDocument:
        self.replace_calls += 1
        complaint.updated_at = datetime.now(timezone.utc)
        self.complaints[complaint.id] = complaint.model_copy(deep=True)
        return complaint.model_copy(deep=True)

    async def set_feedback_submitted(self, complaint_id: str):
        complaint = self.complaints.get(complaint_id)
        if complaint is None:
            return None
        complaint.is_feedback_submitted = True
        return complaint

    async def delete(self, complaint_id: str) -> None:
        self.complaints.pop(complaint_id, None)


class InMemoryNotificationRepository:
    def __init__(self) -> None:
        self.notifications: dict[str, NotificationDocument] = {}

    def _for(self, recipient_id: str) -> list[NotificationDocument]:
        items = [n for n in self.notifications.values() if n.recipient_id == recipient_id]
        return sorted(items, key=lambda n: n.created_at, reverse=True)

    async def list_for_recipient(self, recipient_id, page=1, per_page=10):
        items = self._for(recipient_id)
        start = (page - 1) * per_page
        return items[start : start + per_page], len(items)

    async def count_unread(self, recipient_id: str) -> int:
        return len([n for n in self._for(recipient_id) if not n.is_read])

    async def create(self, notification: NotificationDocument) -> NotificationDocument:
        self.notifications[notification.id] = notification
        return notification

    async def mark_read(self, recipient_id: str, notification_id: str):
        notification = self.notifications.get(notification_id)
        if notification is None or notification.recipient_id != recipient_id:
            return None
        notification.is_read = True
        return notification

    async def mark_all_read(self, recipient_id: str) -> int:
        unread = [n for n in self._for(recipient_id) if not n.is_read]
        for notification in unread:
            notification.is_read = True
        return len(unread)


class InMemoryFeedbackRepository:
    def __init__(self) -> None:
        self.feedback: dict[str, FeedbackDocument] = {}

    async def exists(self, complaint_id: str, constituent_id: str) -> bool:
        return FeedbackDocument.key_for(complaint_id, constituent_id) in self.feedback

    async def get_for_complaint(self, complaint_id: str):
        for feedback in self.feedback.values():
            if feedback.complaint_id == complaint_id:
                return feedback
        return None

    async def complaint_ids_with_feedback(self, complaint_ids: list[str]) -> set[str]:
        return {f.complaint_id for f in self.feedback.values() if f.complaint_id in complaint_ids}

    async def list_for_constituent(self, constituent_id: str):
        items = [f for f in self.feedback.values() if f.constituent_id == constituent_id]
        return sorted(items, key=lambda f: f.created_at, reverse=True)

    async def list_for_representative(self, representative_id: str):
        items = [f for f in self.feedback.values() if f.representative_id == representative_id]
        return sorted(items, key=lambda f: f.created_at, reverse=True)

    async def rating_counts(self, representative_id: str) -> dict[int, int]:
        counts: dict[int, int] = {}
        for feedback in self.feedback.values():
            if feedback.representative_id == representative_id:
                counts[feedback.rating] = counts.get(feedback.rating, 0) + 1
        return counts

    async def create(self, feedback: FeedbackDocument) -> FeedbackDocument:
        feedback.id = FeedbackDocument.key_for(feedback.complaint_id, feedback.constituent_id)
        if feedback.id in self.feedback:
            raise ConflictError("Feedback already submitted for this complaint")
        self.feedback[feedback.id] = feedback
        return feedback


class InMemoryLocationRepository:
    def __init__(self) -> None:
        self.locations: dict[str, LocationDocument] = {}

    async def list_locations(self, kind, search=None, parents=None):
        items = [loc for loc in self.locations.values() if loc.document_type == kind.value]
        if search:
            items = [loc for loc in items if search.lower() in loc.name.lower()]
        for field, value in (parents or {}).items():
            items = [loc for loc in items if getattr(loc, field, None) == value]
        return sorted(items, key=lambda loc: loc.name)

    async def get_by_id(self, kind, location_id):
        location = self.locations.get(location_id)
        if location is None or location.document_type != kind.value:
            return None
        return location

    async def find_by_name(self, kind, name, parents=None):
        for location in await self.list_locations(kind, parents=parents):
            if location.name.lower() == name.lower():
                return location
        return None

    async def create(self, location):
        self.locations[location.id] = location
        return location

    async def update(self, location):
        self.locations[location.id] = location
        return location

    async def delete(self, kind, location_id):
        self.locations.pop(location_id, None)


# =============================================================================
# Document and claims factories
# =============================================================================


def make_user(**overrides: Any) -> UserDocument:
    """A valid user document; constituent unless overridden."""
    data: dict[str, Any] = {
        "id": CONSTITUENT_ID,
        "name": "Ali Khan",
        "email": "ali@example.com",
        "cnic": "35202-1234567-1",
        "mobile": "03001234567",
        "password_hash": "not-a-real-hash",
        "role": UserRole.CONSTITUENT,
        "gender": "male",
        "date_of_birth": date(1990, 1, 1),
        "address": "House 1, Street 2",
        "province_id": "prov-1",
        "district_id": "dist-1",
        "tehsil_id": "teh-1",
        "city_id": "city-1",
        "constituency_id": CONSTITUENCY_ID,
        "representative_id": REPRESENTATIVE_ID,
    }
    data.update(overrides)
    return UserDocument(**data)


def make_representative(**overrides: Any) -> UserDocument:
    data: dict[str, Any] = {
        "id": REPRESENTATIVE_ID,
        "name": "Sara Ahmed",
        "email": "sara@na.gov.pk",
        "cnic": "35202-7654321-2",
        "mobile": "03007654321",
        "role": UserRole.REPRESENTATIVE,
        "gender": "female",
        "representative_id": None,
    }
    data.update(overrides)
    return make_user(**data)


def make_complaint(**overrides: Any) -> ComplaintDocument:
    data: dict[str, Any] = {
        "title": "Broken street light",
        "description": "The street light on Main Road has been out for a week.",
        "category": ComplaintCategory.INFRASTRUCTURE,
        "constituent_id": CONSTITUENT_ID,
        "representative_id": REPRESENTATIVE_ID,
    }
    data.update(overrides)
    return ComplaintDocument(**data)


@pytest.fixture
def user_factory():
    return make_user


@pytest.fixture
def representative_factory():
    return make_representative


@pytest.fixture
def complaint_factory():
    return make_complaint


@pytest.fixture
def constituent_claims() -> ConstituentClaims:
    return ConstituentClaims(
        user_id=CONSTITUENT_ID,
        name="Ali Khan",
        email="ali@example.com",
        constituency_id=CONSTITUENCY_ID,
        representative_id=REPRESENTATIVE_ID,
    )


@pytest.fixture
def representative_claims() -> RepresentativeClaims:
    return RepresentativeClaims(
        user_id=REPRESENTATIVE_ID,
        name="Sara Ahmed",
        email="sara@na.gov.pk",
        constituency_id=CONSTITUENCY_ID,
    )


@pytest.fixture
def other_representative_claims() -> RepresentativeClaims:
    return RepresentativeClaims(
        user_id=OTHER_REPRESENTATIVE_ID,
        name="Bilal Shah",
        email="bilal@na.gov.pk",
        constituency_id="na-2",
    )


# =============================================================================
# Repository and outbox fixtures
# =============================================================================


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    repo = InMemoryUserRepository()
    repo.add(make_representative())
    repo.add(make_user())
    return repo


@pytest.fixture
def complaint_repo() -> InMemoryComplaintRepository:
    return InMemoryComplaintRepository()


@pytest.fixture
def notification_repo() -> InMemoryNotificationRepository:
    return InMemoryNotificationRepository()


@pytest.fixture
def feedback_repo() -> InMemoryFeedbackRepository:
    return InMemoryFeedbackRepository()


@pytest.fixture
def location_repo() -> InMemoryLocationRepository:
    return InMemoryLocationRepository()


@pytest.fixture
def outbox():
    """Outbox whose deliveries are queued on a real BackgroundTasks but never run."""
    from services.notification_service import NotificationOutbox

    return NotificationOutbox(BackgroundTasks(), MagicMock())


@pytest.fixture
def queued_notifications(outbox):
    """Notification requests queued on the outbox's background tasks so far."""
    return lambda: [task.args[0] for task in outbox.background_tasks.tasks]


@pytest.fixture
def attachment_storage(tmp_path):
    from services.attachment_storage import AttachmentStorage

    return AttachmentStorage(base_dir=tmp_path, url_prefix="/uploads")


# =============================================================================
# Application fixtures
# =============================================================================


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
async def app(
    user_repo,
    complaint_repo,
    notification_repo,
    feedback_repo,
    location_repo,
    attachment_storage,
) -> AsyncGenerator[Any, None]:
    """FastAPI application with the repositories swapped for in-memory ones."""
    from main import app as fastapi_app
    from repositories import provider
    from services.attachment_storage import get_attachment_storage

    fastapi_app.dependency_overrides = {
        provider.get_user_repository: lambda: user_repo,
        provider.get_complaint_repository: lambda: complaint_repo,
        provider.get_notification_repository: lambda: notification_repo,
        provider.get_feedback_repository: lambda: feedback_repo,
        provider.get_location_repository: lambda: location_repo,
        get_attachment_storage: lambda: attachment_storage,
    }
    yield fastapi_app
    fastapi_app.dependency_overrides = {}


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


def bearer(claims) -> dict[str, str]:
    from core.security import create_access_token
    from schemas.auth import claims_to_token_data

    return {"Authorization": f"Bearer {create_access_token(claims_to_token_data(claims))}"}


@pytest.fixture
def constituent_headers(constituent_claims) -> dict[str, str]:
    return bearer(constituent_claims)


@pytest.fixture
def representative_headers(representative_claims) -> dict[str, str]:
    return bearer(representative_claims)


@pytest.fixture
def other_representative_headers(other_representative_claims) -> dict[str, str]:
    return bearer(other_representative_claims)
