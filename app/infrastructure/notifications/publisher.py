"""Utility helpers to push notifications to websocket subscribers."""

from __future__ import annotations

import asyncio
import logging

from anyio import from_thread

from app.domain.entities import Notification

from .channel import DeliveryChannel, DeliveryChannelUnavailable
from .messages import NewNotification, ServerMessage

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """Schedule best-effort delivery of stored notifications.

    Delivery never raises: the notification is already persisted, so a missing
    connection, a slow socket or a transport error only costs latency.
    """

    def __init__(self, channel: DeliveryChannel, *, timeout: float = 2.0) -> None:
        self._channel = channel
        self._timeout = timeout
        self._pending: set[asyncio.Task] = set()

    @property
    def channel(self) -> DeliveryChannel:
        return self._channel

    def dispatch(self, notification: Notification) -> bool:
        """Schedule ``notification`` for its recipient; ``False`` if nothing was scheduled."""

        recipient_id = notification.recipient_id
        if not self._channel.has_subscribers(recipient_id):
            logger.debug(
                "Recipient %s offline; notification %s left for polling",
                recipient_id,
                notification.id,
            )
            return False

        message = NewNotification(notification)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run(self.deliver, recipient_id, message)
            except RuntimeError:
                logger.debug(
                    "No event loop available; notification %s left for polling",
                    notification.id,
                )
                return False
            return True

        task = loop.create_task(self.deliver(recipient_id, message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return True

    async def deliver(self, recipient_id: str, message: ServerMessage) -> int:
        """Push ``message`` within the configured timeout and report the fan-out."""

        try:
            return await asyncio.wait_for(
                self._channel.publish(recipient_id, message), timeout=self._timeout
            )
        except DeliveryChannelUnavailable:
            logger.debug("Recipient %s offline; realtime push skipped", recipient_id)
        except asyncio.TimeoutError:
            logger.warning(
                "Realtime push to %s exceeded %.1fs and was abandoned",
                recipient_id,
                self._timeout,
            )
        except Exception:
            logger.exception("Realtime push to %s failed", recipient_id)
        return 0

    async def drain(self) -> None:
        """Wait for deliveries scheduled on the running loop."""

        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


__all__ = ["NotificationPublisher"]
