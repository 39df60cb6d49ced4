"""
Tests for Cosmos DB notification repository.
"""

from unittest.mock import AsyncMock, patch

import pytest
from azure.core.exceptions import ResourceNotFoundError

from db.cosmos_session import NOTIFICATIONS_CONTAINER
from models.cosmos_documents import NotificationDocument, NotificationType
from repositories.cosmos_notification_repository import CosmosNotificationRepository


def notification(**overrides) -> NotificationDocument:
    data = {
        "recipient_id": "citizen-1",
        "type": NotificationType.COMPLAINT_RESPONSE,
        "title": "New Response",
        "message": "Your representative responded.",
    }
    data.update(overrides)
    return NotificationDocument(**data)


@pytest.mark.unit
class TestCosmosNotificationRepository:
    async def test_mark_read_patches_within_recipient_partition(self) -> None:
        doc = notification(is_read=True)
        with patch("repositories.cosmos_notification_repository.patch_item", new_callable=AsyncMock) as mock_patch:
            mock_patch.return_value = doc.model_dump(mode="json")

            result = await CosmosNotificationRepository().mark_read("citizen-1", doc.id)

        assert result.is_read is True
        mock_patch.assert_awaited_once_with(
            NOTIFICATIONS_CONTAINER,
            doc.id,
            partition_key="citizen-1",
            operations=[{"op": "set", "path": "/is_read", "value": True}],
        )

    async def test_mark_read_missing(self) -> None:
        with patch("repositories.cosmos_notification_repository.patch_item", new_callable=AsyncMock) as mock_patch:
            mock_patch.side_effect = ResourceNotFoundError("missing")

            assert await CosmosNotificationRepository().mark_read("citizen-1", "n-1") is None

    async def test_mark_all_read_batches_unread(self) -> None:
        with (
            patch("repositories.cosmos_notification_repository.query_items", new_callable=AsyncMock) as mock_query,
            patch("repositories.cosmos_notification_repository.execute_batch", new_callable=AsyncMock) as mock_batch,
        ):
            mock_query.return_value = ["n-1", "n-2"]
            mock_batch.return_value = 2

            updated = await CosmosNotificationRepository().mark_all_read("citizen-1")

        assert updated == 2
        container, partition_key, operations = mock_batch.await_args.args
        assert (container, partition_key) == (NOTIFICATIONS_CONTAINER, "citizen-1")
        assert [op[1][0] for op in operations] == ["n-1", "n-2"]
        assert all(op[0] == "patch" for op in operations)

    async def test_mark_all_read_nothing_unread(self) -> None:
        with (
            patch("repositories.cosmos_notification_repository.query_items", new_callable=AsyncMock) as mock_query,
            patch("repositories.cosmos_notification_repository.execute_batch", new_callable=AsyncMock) as mock_batch,
        ):
            mock_query.return_value = []

            assert await CosmosNotificationRepository().mark_all_read("citizen-1") == 0
            mock_batch.assert_not_awaited()

    async def test_list_is_partition_scoped(self) -> None:
        with (
            patch("repositories.cosmos_notification_repository.query_count", new_callable=AsyncMock) as mock_count,
            patch("repositories.cosmos_notification_repository.query_items", new_callable=AsyncMock) as mock_query,
        ):
            mock_count.return_value = 1
            mock_query.return_value = [notification().model_dump(mode="json")]

            items, total = await CosmosNotificationRepository().list_for_recipient("citizen-1")

        assert total == 1
        assert items[0].recipient_id == "citizen-1"
        assert mock_query.await_args.kwargs["partition_key"] == "citizen-1"
        assert mock_count.await_args.kwargs["partition_key"] == "citizen-1"
