"""Connection management helpers for notification websockets."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import DefaultDict, Set

from fastapi import WebSocket

from .channel import DeliveryChannel, DeliveryChannelUnavailable
from .messages import ServerMessage

logger = logging.getLogger(__name__)


class NotificationConnectionManager(DeliveryChannel):
    """Manage active websocket connections grouped by recipient."""

    def __init__(self) -> None:
        self._connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)

    async def connect(self, recipient_id: str, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it for ``recipient_id``."""

        await websocket.accept()
        self._connections[recipient_id].add(websocket)
        logger.info(
            "Realtime subscriber connected recipient=%s connections=%d",
            recipient_id,
            self.connection_count(recipient_id),
        )

    def disconnect(self, recipient_id: str, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the pool for ``recipient_id``."""

        connections = self._connections.get(recipient_id)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(recipient_id, None)
        logger.info("Realtime subscriber disconnected recipient=%s", recipient_id)

    def has_subscribers(self, recipient_id: str) -> bool:
        return bool(self._connections.get(recipient_id))

    def connection_count(self, recipient_id: str | None = None) -> int:
        if recipient_id is not None:
            return len(self._connections.get(recipient_id, ()))
        return sum(len(connections) for connections in self._connections.values())

    async def publish(self, recipient_id: str, message: ServerMessage) -> int:
        """Send ``message`` to every active connection for ``recipient_id``."""

        connections = list(self._connections.get(recipient_id, set()))
        if not connections:
            raise DeliveryChannelUnavailable(f"No active connection for {recipient_id}")

        payload = message.to_wire()
        delivered = 0
        for connection in connections:
            try:
                await connection.send_json(payload)
            except Exception as exc:  # the socket is gone; the store keeps the record
                logger.debug("Dropping broken connection for %s: %s", recipient_id, exc)
                self.disconnect(recipient_id, connection)
            else:
                delivered += 1
        return delivered


__all__ = ["NotificationConnectionManager"]
