"""
Cosmos DB Notification repository.

Notifications are partitioned by recipient, so every read and write here is
a single-partition operation.
"""

import logging
from typing import Optional

from azure.core.exceptions import ResourceNotFoundError

from db.cosmos_session import (
    NOTIFICATIONS_CONTAINER,
    create_item,
    execute_batch,
    patch_item,
    query_count,
    query_items,
)
from models.cosmos_documents import NotificationDocument

logger = logging.getLogger(__name__)

_MARK_READ_OPERATIONS = [{"op": "set", "path": "/is_read", "value": True}]


class CosmosNotificationRepository:
    """Repository for notification operations using Cosmos DB."""

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def list_for_recipient(
        self,
        recipient_id: str,
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list[NotificationDocument], int]:
        """
        List a recipient's notifications, newest first.

        Returns:
            Tuple of (notifications, total_count)
        """
        total = await query_count(
            NOTIFICATIONS_CONTAINER,
            "SELECT VALUE COUNT(1) FROM c WHERE c.recipient_id = @recipient_id",
            parameters=[{"name": "@recipient_id", "value": recipient_id}],
            partition_key=recipient_id,
        )

        offset = (page - 1) * per_page
        query = """
            SELECT * FROM c
            WHERE c.recipient_id = @recipient_id
            ORDER BY c.created_at DESC
            OFFSET @offset LIMIT @limit
        """
        results = await query_items(
            NOTIFICATIONS_CONTAINER,
            query,
            parameters=[
                {"name": "@recipient_id", "value": recipient_id},
                {"name": "@offset", "value": offset},
                {"name": "@limit", "value": per_page},
            ],
            partition_key=recipient_id,
        )
        return [NotificationDocument(**r) for r in results], total

    async def count_unread(self, recipient_id: str) -> int:
        """Count a recipient's unread notifications."""
        return await query_count(
            NOTIFICATIONS_CONTAINER,
            "SELECT VALUE COUNT(1) FROM c WHERE c.recipient_id = @recipient_id AND c.is_read = false",
            parameters=[{"name": "@recipient_id", "value": recipient_id}],
            partition_key=recipient_id,
        )

    async def _unread_ids(self, recipient_id: str) -> list[str]:
        """IDs of a recipient's unread notifications."""
        return await query_items(
            NOTIFICATIONS_CONTAINER,
            "SELECT VALUE c.id FROM c WHERE c.recipient_id = @recipient_id AND c.is_read = false",
            parameters=[{"name": "@recipient_id", "value": recipient_id}],
            partition_key=recipient_id,
        )

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create(self, notification: NotificationDocument) -> NotificationDocument:
        """Create a new notification."""
        await create_item(NOTIFICATIONS_CONTAINER, notification.model_dump(mode="json"))
        return notification

    async def mark_read(self, recipient_id: str, notification_id: str) -> Optional[NotificationDocument]:
        """
        Set is_read on one notification.

        The read is scoped to the recipient's partition, so another user's
        notification is indistinguishable from a missing one.

        Returns:
            The updated notification, or None if not found
        """
        try:
            data = await patch_item(
                NOTIFICATIONS_CONTAINER,
                notification_id,
                partition_key=recipient_id,
                operations=_MARK_READ_OPERATIONS,
            )
        except ResourceNotFoundError:
            return None
        return NotificationDocument(**data)

    async def mark_all_read(self, recipient_id: str) -> int:
        """
        Mark every unread notification of a recipient as read.

        Returns:
            Number of notifications updated
        """
        ids = await self._unread_ids(recipient_id)
        if not ids:
            return 0
        operations = [("patch", (notification_id, _MARK_READ_OPERATIONS)) for notification_id in ids]
        updated = await execute_batch(NOTIFICATIONS_CONTAINER, recipient_id, operations)
        logger.info(f"Marked {updated} notifications read for {recipient_id}")
        return updated
