"""Tests for the notification service and outbox."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import BackgroundTasks

from core.exceptions import NotFoundError
from models.cosmos_documents import NotificationType
from services.notification_service import NotificationOutbox, NotificationRequest, NotificationService
from services.realtime import ConnectionManager


@pytest.fixture
def connections() -> MagicMock:
    manager = MagicMock(spec=ConnectionManager)
    manager.send_to_user = AsyncMock(return_value=1)
    return manager


@pytest.fixture
def service(notification_repo, connections) -> NotificationService:
    return NotificationService(notification_repo, connections)


async def _create(service: NotificationService, recipient_id: str = "citizen-1", title: str = "Update"):
    return await service.create(
        recipient_id=recipient_id,
        type=NotificationType.COMPLAINT_STATUS_UPDATE,
        title=title,
        message="Your complaint is now In Progress.",
        related_complaint_id="complaint-1",
    )


@pytest.mark.unit
class TestNotificationService:
    """Tests for NotificationService."""

    async def test_create_persists_then_pushes(self, service, notification_repo, connections) -> None:
        notification = await _create(service)

        assert notification.id in notification_repo.notifications
        connections.send_to_user.assert_awaited_once()
        user_id, event, payload = connections.send_to_user.await_args.args
        assert (user_id, event) == ("citizen-1", "notification")
        assert payload["id"] == notification.id
        assert payload["type"] == "complaint_status_update"
        assert payload["is_read"] is False

    async def test_push_failure_is_swallowed(self, service, notification_repo, connections) -> None:
        connections.send_to_user.side_effect = RuntimeError("socket gone")

        notification = await _create(service)

        assert notification.id in notification_repo.notifications

    async def test_deliver_logs_persistence_failure(self, service, notification_repo) -> None:
        notification_repo.create = AsyncMock(side_effect=RuntimeError("store down"))

        result = await service.deliver(
            NotificationRequest(
                recipient_id="citizen-1",
                type=NotificationType.NEW_COMPLAINT,
                title="New Complaint Received",
                message="...",
            )
        )

        assert result is None

    async def test_mark_read_twice(self, service) -> None:
        notification = await _create(service)

        first = await service.mark_read("citizen-1", notification.id)
        second = await service.mark_read("citizen-1", notification.id)

        assert first.is_read is True
        assert second.is_read is True

    async def test_mark_read_other_users_notification(self, service) -> None:
        notification = await _create(service, recipient_id="citizen-2")

        with pytest.raises(NotFoundError):
            await service.mark_read("citizen-1", notification.id)

    async def test_mark_read_unknown(self, service) -> None:
        with pytest.raises(NotFoundError):
            await service.mark_read("citizen-1", "missing")

    async def test_list_with_unread_count(self, service) -> None:
        first = await _create(service, title="First")
        await _create(service, title="Second")
        await _create(service, title="Third")
        await _create(service, recipient_id="citizen-2")
        await service.mark_read("citizen-1", first.id)

        result = await service.list_for_user("citizen-1", page=1, per_page=2)

        assert result.total == 3
        assert result.unread_count == 2
        assert len(result.notifications) == 2
        assert result.total_pages == 2

    async def test_mark_all_read(self, service) -> None:
        await _create(service)
        await _create(service)

        assert await service.mark_all_read("citizen-1") == 2
        assert await service.unread_count("citizen-1") == 0
        assert await service.mark_all_read("citizen-1") == 0


@pytest.mark.unit
class TestNotificationOutbox:
    """Tests for NotificationOutbox."""

    def test_publish_schedules_delivery(self) -> None:
        background_tasks = BackgroundTasks()
        service = MagicMock()
        outbox = NotificationOutbox(background_tasks, service)
        request = NotificationRequest(
            recipient_id="rep-a",
            type=NotificationType.NEW_COMPLAINT,
            title="New Complaint Received",
            message="...",
        )

        outbox.publish(request)

        assert len(background_tasks.tasks) == 1
        assert background_tasks.tasks[0].func is service.deliver
        assert background_tasks.tasks[0].args == (request,)
