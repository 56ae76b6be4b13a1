"""Live connection registry, grouped by user."""

import logging
from typing import Any, Protocol
from uuid import uuid4

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Anything the notifier can push JSON frames to."""

    connection_id: str
    user_id: str

    async def send_json(self, data: Any) -> None: ...

    async def close(self, code: int = 1000) -> None: ...


class WebSocketConnection:
    """A verified WebSocket client.

    Starlette's WebSocket is unhashable, so registry membership is keyed by
    connection_id instead.
    """

    def __init__(self, websocket: WebSocket, user_id: str, email: str):
        self.websocket = websocket
        self.user_id = user_id
        self.email = email
        self.connection_id = str(uuid4())

    async def send_json(self, data: Any) -> None:
        await self.websocket.send_json(data)

    async def close(self, code: int = 1000) -> None:
        await self.websocket.close(code=code)

    def __repr__(self) -> str:
        return f"<WebSocketConnection {self.connection_id} user={self.user_id}>"


class ConnectionRegistry:
    """
    Maps user id to that user's live connections.

    Created at application start and closed at shutdown. Groups are kept when
    their last connection leaves; sending to an empty group is a no-op.
    """

    def __init__(self) -> None:
        self._groups: dict[str, dict[str, Connection]] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def register(self, user_id: str, connection: Connection) -> None:
        if self._closed:
            raise RuntimeError("Connection registry is closed")
        self._groups.setdefault(user_id, {})[connection.connection_id] = connection
        logger.info(f"Registered connection {connection.connection_id} for user {user_id}")

    def unregister(self, user_id: str, connection: Connection) -> None:
        group = self._groups.get(user_id)
        if group is None:
            return
        if group.pop(connection.connection_id, None) is not None:
            logger.info(f"Unregistered connection {connection.connection_id} for user {user_id}")

    def connections_for(self, user_id: str) -> list[Connection]:
        return list(self._groups.get(user_id, {}).values())

    def all_connections(self) -> list[Connection]:
        return [conn for group in self._groups.values() for conn in group.values()]

    def user_ids(self) -> list[str]:
        """Every user that has ever had a group, including now-empty ones."""
        return list(self._groups)

    def connection_count(self) -> int:
        return sum(len(group) for group in self._groups.values())

    async def close(self) -> None:
        """Close every live connection and refuse new registrations."""
        self._closed = True
        for connection in self.all_connections():
            try:
                await connection.close(code=1001)
            except Exception as e:
                logger.debug(f"Ignoring close failure for {connection.connection_id}: {e}")
        self._groups.clear()
        logger.info("Connection registry closed")
