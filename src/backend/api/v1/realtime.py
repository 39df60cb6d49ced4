"""
Real-time notification channel.

Protocol (JSON text frames):

    client -> {"event": "authenticate", "token": "<access token>"}
    server -> {"event": "authenticated", "data": {"user_id": "..."}}
    server -> {"event": "notification", "data": {...}}
    client -> {"event": "ping"}
    server -> {"event": "pong"}

The socket must authenticate within REALTIME_AUTH_TIMEOUT_SECONDS. A
missing or invalid token gets an "error" event and close code 1008.
"""

import asyncio
from typing import Any, Optional

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from api.deps import claims_from_token
from core.config import settings
from core.exceptions import AuthenticationError
from schemas.auth import AnyClaims
from services.realtime import get_connection_manager

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _reject(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({"event": "error", "data": {"message": message}})
    await websocket.close(code=status.WS_1008_POLICY_VIOLATION)


async def _authenticate(websocket: WebSocket) -> Optional[AnyClaims]:
    """Wait for the authenticate event; returns None after rejecting the socket."""
    try:
        message: Any = await asyncio.wait_for(
            websocket.receive_json(),
            timeout=settings.REALTIME_AUTH_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        await _reject(websocket, "Authentication timed out")
        return None
    except (KeyError, ValueError):
        # Binary frames have no "text" key
        await _reject(websocket, "Malformed message")
        return None

    if not isinstance(message, dict) or message.get("event") != "authenticate" or not message.get("token"):
        await _reject(websocket, "Authentication required")
        return None

    try:
        return claims_from_token(str(message["token"]))
    except AuthenticationError as e:
        await _reject(websocket, e.message)
        return None


@router.websocket("/ws")
async def realtime_endpoint(websocket: WebSocket) -> None:
    """Authenticate a socket and join it to its identity's room until it disconnects."""
    await websocket.accept()

    try:
        claims = await _authenticate(websocket)
    except WebSocketDisconnect:
        return
    if claims is None:
        return

    connections = get_connection_manager()
    await connections.join(claims.user_id, websocket)
    try:
        await websocket.send_json({"event": "authenticated", "data": {"user_id": claims.user_id}})
        while True:
            try:
                message = await websocket.receive_json()
            except (KeyError, ValueError):
                await websocket.send_json({"event": "error", "data": {"message": "Malformed message"}})
                continue
            if isinstance(message, dict) and message.get("event") == "ping":
                await websocket.send_json({"event": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        await connections.leave(claims.user_id, websocket)
