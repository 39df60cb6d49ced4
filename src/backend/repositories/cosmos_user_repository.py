"""
Cosmos DB User repository.

Handles user CRUD operations using Azure Cosmos DB with secondary indexes
for email, CNIC and mobile lookups.
"""

import logging
from typing import Optional

from azure.core.exceptions import ResourceExistsError

from core.exceptions import ConflictError
from db.cosmos_session import (
    CNIC_LOOKUP_CONTAINER,
    EMAIL_LOOKUP_CONTAINER,
    MOBILE_LOOKUP_CONTAINER,
    USERS_CONTAINER,
    create_item,
    delete_item,
    query_items,
    read_item,
)
from models.cosmos_documents import (
    CnicLookupDocument,
    EmailLookupDocument,
    MobileLookupDocument,
    UserDocument,
    UserRole,
)

logger = logging.getLogger(__name__)


class CosmosUserRepository:
    """Repository for user operations using Cosmos DB."""

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def get_by_id(self, user_id: str) -> Optional[UserDocument]:
        """Get a user by ID (direct point read - very efficient)."""
        data = await read_item(USERS_CONTAINER, user_id, partition_key=user_id)
        if data is None:
            return None
        return UserDocument(**data)

    async def get_by_email(self, email: str) -> Optional[UserDocument]:
        """
        Get a user by email using secondary index lookup.

        Two-step process:
        1. Look up user_id from email-lookup container
        2. Point read user from users container
        """
        email_lower = email.lower()

        lookup_data = await read_item(
            EMAIL_LOOKUP_CONTAINER,
            email_lower,  # email is the ID in lookup container
            partition_key=email_lower,
        )
        if lookup_data is None:
            return None

        user_id = lookup_data.get("user_id")
        if not user_id:
            return None

        return await self.get_by_id(user_id)

    async def get_representative_for_constituency(self, constituency_id: str) -> Optional[UserDocument]:
        """Get the representative registered for a constituency, if any."""
        query = """
            SELECT * FROM c
            WHERE c.role = @role
              AND c.constituency_id = @constituency_id
            OFFSET 0 LIMIT 1
        """
        results = await query_items(
            USERS_CONTAINER,
            query,
            parameters=[
                {"name": "@role", "value": UserRole.REPRESENTATIVE.value},
                {"name": "@constituency_id", "value": constituency_id},
            ],
        )
        if not results:
            return None
        return UserDocument(**results[0])

    async def get_many(self, user_ids: list[str]) -> dict[str, UserDocument]:
        """Get several users by ID, keyed by ID. Unknown IDs are omitted."""
        unique_ids = list(dict.fromkeys(user_ids))
        if not unique_ids:
            return {}
        query = "SELECT * FROM c WHERE ARRAY_CONTAINS(@ids, c.id)"
        results = await query_items(
            USERS_CONTAINER,
            query,
            parameters=[{"name": "@ids", "value": unique_ids}],
        )
        return {r["id"]: UserDocument(**r) for r in results}

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create(self, user: UserDocument) -> UserDocument:
        """
        Create a new user with secondary indexes.

        The lookup documents act as unique constraints, so they are written
        first. If any of them already exists the ones written so far are
        removed and ConflictError is raised; the user document is only
        created once all three are in place.
        """
        user.email = user.email.lower()
        lookups = [
            (
                EMAIL_LOOKUP_CONTAINER,
                EmailLookupDocument(id=user.email, email=user.email, user_id=user.id),
                "Email is already registered",
            ),
            (
                CNIC_LOOKUP_CONTAINER,
                CnicLookupDocument(id=user.cnic, cnic=user.cnic, user_id=user.id),
                "CNIC is already registered",
            ),
            (
                MOBILE_LOOKUP_CONTAINER,
                MobileLookupDocument(id=user.mobile, mobile=user.mobile, user_id=user.id),
                "Mobile number is already registered",
            ),
        ]

        written: list[tuple[str, str]] = []
        try:
            for container, lookup, conflict_message in lookups:
                try:
                    await create_item(container, lookup.model_dump(mode="json"))
                except ResourceExistsError as e:
                    raise ConflictError(conflict_message) from e
                written.append((container, lookup.id))

            await create_item(USERS_CONTAINER, user.model_dump(mode="json"))
        except Exception:
            await self._remove_lookups(written)
            raise

        logger.info(f"Created {user.role} {user.id}")
        return user

    async def _remove_lookups(self, written: list[tuple[str, str]]) -> None:
        for container, key in reversed(written):
            try:
                await delete_item(container, key, partition_key=key)
            except Exception as e:
                logger.warning(f"Failed to roll back lookup {key} in {container}: {e}")
