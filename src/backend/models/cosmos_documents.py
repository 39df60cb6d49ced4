"""
Cosmos DB document models for Constituency Connect.

These Pydantic models define the document structure stored in Cosmos DB.
Documents are flat, with relationships held as id references.

Container Strategy:
- users: Representative and constituent profiles (partition: /id)
- email-lookup: Secondary index for email -> user_id (partition: /email)
- cnic-lookup: Secondary index for CNIC -> user_id (partition: /cnic)
- mobile-lookup: Secondary index for mobile -> user_id (partition: /mobile)
- complaints: Complaints with embedded attachment descriptors (partition: /id)
- notifications: Per-recipient notifications (partition: /recipient_id)
- feedback: One document per (complaint, constituent) (partition: /complaint_id)
- locations: Province/district/tehsil/city/constituency reference data
  (partition: /document_type)
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Enums
# ============================================================================


class UserRole(str, Enum):
    """Role of an identity; fixed at registration."""

    CONSTITUENT = "constituent"
    REPRESENTATIVE = "representative"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ComplaintCategory(str, Enum):
    """Complaint categories."""

    INFRASTRUCTURE = "infrastructure"
    EDUCATION = "education"
    HEALTHCARE = "healthcare"
    SECURITY = "security"
    OTHER = "other"


class ComplaintStatus(str, Enum):
    """Complaint lifecycle status. RESOLVED and REJECTED are terminal."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class NotificationType(str, Enum):
    """Kinds of notification the dispatcher emits."""

    COMPLAINT_STATUS_UPDATE = "complaint_status_update"
    NEW_COMPLAINT = "new_complaint"
    COMPLAINT_RESPONSE = "complaint_response"


class LocationType(str, Enum):
    """Reference data kinds stored in the 'locations' container."""

    PROVINCE = "province"
    DISTRICT = "district"
    TEHSIL = "tehsil"
    CITY = "city"
    CONSTITUENCY = "constituency"


# ============================================================================
# Base Document Model
# ============================================================================


class CosmosDocument(BaseModel):
    """
    Base class for Cosmos DB documents.

    All documents have:
    - id: Unique identifier (also used as partition key for most containers)
    - _ts: Timestamp (managed by Cosmos DB)
    - _etag: ETag for optimistic concurrency (managed by Cosmos DB)
    """

    id: str = Field(default_factory=lambda: str(uuid4()))

    # Read-only; never written back
    etag: Optional[str] = Field(default=None, alias="_etag", exclude=True)

    model_config = {
        # Allow extra fields for Cosmos DB system properties (_ts, _rid, etc.)
        "extra": "allow",
        "populate_by_name": True,
        # Enum fields always hold plain values, including defaults and assignments
        "use_enum_values": True,
        "validate_default": True,
        "validate_assignment": True,
    }


# ============================================================================
# User Documents
# ============================================================================


class UserDocument(CosmosDocument):
    """
    User document stored in the 'users' container.

    Partition key: /id
    Email, CNIC and mobile are unique, enforced through the lookup containers.
    """

    name: str
    email: str
    cnic: str
    mobile: str
    password_hash: str
    role: UserRole
    gender: Gender
    date_of_birth: date
    address: str

    province_id: str
    district_id: str
    tehsil_id: str
    city_id: str
    constituency_id: str

    # Set for constituents only: the representative of their constituency
    representative_id: Optional[str] = None

    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class EmailLookupDocument(CosmosDocument):
    """
    Secondary index: email -> user_id lookup.

    Partition key: /email
    """

    email: str
    user_id: str


class CnicLookupDocument(CosmosDocument):
    """
    Secondary index: CNIC -> user_id lookup.

    Partition key: /cnic
    """

    cnic: str
    user_id: str


class MobileLookupDocument(CosmosDocument):
    """
    Secondary index: mobile number -> user_id lookup.

    Partition key: /mobile
    """

    mobile: str
    user_id: str


# ============================================================================
# Complaint Documents
# ============================================================================


class AttachmentDocument(BaseModel):
    """Stored file descriptor embedded in a complaint."""

    path: str  # Public URL path under UPLOAD_URL_PREFIX
    filename: str  # Stored name on disk
    original_name: str
    mime_type: str
    size: int = 0


class ComplaintDocument(CosmosDocument):
    """
    Complaint document stored in the 'complaints' container.

    Partition key: /id
    representative_id is fixed at creation and never reassigned.
    """

    title: str
    description: str
    category: ComplaintCategory
    attachments: list[AttachmentDocument] = Field(default_factory=list)

    constituent_id: str
    representative_id: str

    status: ComplaintStatus = ComplaintStatus.PENDING
    response: Optional[str] = None
    is_feedback_submitted: bool = False
    is_updated: bool = False  # Set once the complaint leaves 'pending'

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# ============================================================================
# Notification Documents
# ============================================================================


class NotificationDocument(CosmosDocument):
    """
    Notification document stored in the 'notifications' container.

    Partition key: /recipient_id
    Only is_read is ever mutated after creation.
    """

    recipient_id: str
    type: NotificationType
    title: str
    message: str
    related_complaint_id: Optional[str] = None
    is_read: bool = False
    created_at: datetime = Field(default_factory=utc_now)


# ============================================================================
# Feedback Documents
# ============================================================================


class FeedbackDocument(CosmosDocument):
    """
    Feedback document stored in the 'feedback' container.

    Partition key: /complaint_id
    The id is derived from (complaint_id, constituent_id), so Cosmos DB
    rejects a second document for the same pair.
    """

    complaint_id: str
    constituent_id: str
    representative_id: str
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)

    @staticmethod
    def key_for(complaint_id: str, constituent_id: str) -> str:
        return f"{complaint_id}_{constituent_id}"


# ============================================================================
# Location Documents
# ============================================================================


class LocationDocument(CosmosDocument):
    """
    Reference data document stored in the 'locations' container.

    Partition key: /document_type
    Each kind is a small set kept in a single logical partition.
    """

    document_type: LocationType
    name: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ProvinceDocument(LocationDocument):
    document_type: LocationType = LocationType.PROVINCE


class DistrictDocument(LocationDocument):
    document_type: LocationType = LocationType.DISTRICT
    province_id: str


class TehsilDocument(LocationDocument):
    document_type: LocationType = LocationType.TEHSIL
    district_id: str


class CityDocument(LocationDocument):
    document_type: LocationType = LocationType.CITY
    tehsil_id: str


class ConstituencyDocument(LocationDocument):
    document_type: LocationType = LocationType.CONSTITUENCY
    tehsil_id: str
    city_id: str


LOCATION_DOCUMENTS: dict[LocationType, type[LocationDocument]] = {
    LocationType.PROVINCE: ProvinceDocument,
    LocationType.DISTRICT: DistrictDocument,
    LocationType.TEHSIL: TehsilDocument,
    LocationType.CITY: CityDocument,
    LocationType.CONSTITUENCY: ConstituencyDocument,
}

# Field filtering each kind by its parent(s)
LOCATION_PARENT_FIELDS: dict[LocationType, tuple[str, ...]] = {
    LocationType.PROVINCE: (),
    LocationType.DISTRICT: ("province_id",),
    LocationType.TEHSIL: ("district_id",),
    LocationType.CITY: ("tehsil_id",),
    LocationType.CONSTITUENCY: ("tehsil_id", "city_id"),
}
