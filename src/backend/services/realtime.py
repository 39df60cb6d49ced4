"""
Real-time connection registry.

Keeps the open WebSocket connections of each authenticated identity (its
"room") and pushes events to them. Pushing is best-effort: a connection that
fails to receive is dropped from the registry.
"""

import asyncio
from typing import Any

import structlog
from fastapi import WebSocket

logger = structlog.get_logger(__name__)


class ConnectionManager:
    """Process-wide map of user_id -> open WebSocket connections."""

    def __init__(self) -> None:
        self._rooms: dict[str, set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def join(self, user_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            self._rooms.setdefault(user_id, set()).add(websocket)
        logger.info("realtime_joined", user_id=user_id, connections=self.connection_count(user_id))

    async def leave(self, user_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            room = self._rooms.get(user_id)
            if room is None:
                return
            room.discard(websocket)
            if not room:
                del self._rooms[user_id]
        logger.info("realtime_left", user_id=user_id, connections=self.connection_count(user_id))

    def connection_count(self, user_id: str) -> int:
        return len(self._rooms.get(user_id, ()))

    async def send_to_user(self, user_id: str, event: str, data: dict[str, Any]) -> int:
        """
        Push an event to every connection of a user.

        Returns:
            Number of connections the event was delivered to
        """
        connections = list(self._rooms.get(user_id, ()))
        delivered = 0
        for websocket in connections:
            try:
                await websocket.send_json({"event": event, "data": data})
                delivered += 1
            except Exception as e:
                logger.warning("realtime_send_failed", user_id=user_id, error=str(e))
                await self.leave(user_id, websocket)
        return delivered


connection_manager = ConnectionManager()


def get_connection_manager() -> ConnectionManager:
    return connection_manager
