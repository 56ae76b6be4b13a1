"""WebSocket push channel."""

import json
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from tasktrack.api.deps import extract_token, get_identity_service
from tasktrack.auth import IdentityService
from tasktrack.config import settings
from tasktrack.engine import InvalidToken
from tasktrack.models import EventType
from tasktrack.notify import ChangeNotifier, ConnectionRegistry, WebSocketConnection

logger = logging.getLogger("tasktrack.ws")

ws_router = APIRouter(prefix="/v1")


def _handshake_token(websocket: WebSocket) -> str | None:
    return websocket.query_params.get("token") or extract_token(
        websocket.headers.get("authorization"),
        websocket.cookies.get(settings.auth_cookie_name),
    )


@ws_router.websocket("/ws")
async def task_events(
    websocket: WebSocket,
    identity_service: IdentityService = Depends(get_identity_service),
):
    """
    Live task events.

    The identity token is checked before the handshake completes; a missing
    or invalid token closes the socket without registering it. Verified
    connections join their user's group and receive task:* events.

    Clients may send text frames of type user:typing and task:update; binary
    frames, invalid JSON and unknown types are ignored.
    """
    try:
        identity = identity_service.verify(_handshake_token(websocket))
    except InvalidToken as e:
        logger.warning(f"Rejected WebSocket handshake: {e.message}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    registry: ConnectionRegistry = websocket.app.state.registry
    notifier: ChangeNotifier = websocket.app.state.notifier

    await websocket.accept()
    connection = WebSocketConnection(websocket, identity.user_id, identity.email)
    registry.register(identity.user_id, connection)
    logger.info(f"User connected: {identity.email}")

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            # Binary frames carry nothing we understand
            text = frame.get("text")
            if text is None:
                continue
            try:
                message = json.loads(text)
            except ValueError:
                continue
            if not isinstance(message, dict):
                continue

            kind = message.get("type")
            if kind == EventType.USER_TYPING.value:
                notifier.user_typing(connection, message.get("task_id"))
            elif kind == EventType.TASK_UPDATE.value and isinstance(message.get("data"), dict):
                notifier.relay_task_update(connection, message["data"])
    except WebSocketDisconnect:
        pass
    finally:
        registry.unregister(identity.user_id, connection)
        logger.info(f"User disconnected: {identity.email}")
