"""Delivery channel interface and the channel factory used at startup."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from app.config import Settings

from .messages import ServerMessage

logger = logging.getLogger(__name__)


class DeliveryChannelUnavailable(RuntimeError):
    """Raised when a recipient has no live connection to push to."""


class DeliveryChannel(ABC):
    """Best-effort push transport keyed by recipient identity.

    Channels never buffer: a message published while the recipient is offline
    is dropped and the client recovers it from the store on reconnect.
    """

    @abstractmethod
    async def publish(self, recipient_id: str, message: ServerMessage) -> int:
        """Push ``message`` to every live connection of ``recipient_id``.

        Returns the number of connections that accepted the message and raises
        :class:`DeliveryChannelUnavailable` when the recipient is offline.
        """

    @abstractmethod
    def has_subscribers(self, recipient_id: str) -> bool:
        """Return whether ``recipient_id`` currently has a live connection."""


class NullDeliveryChannel(DeliveryChannel):
    """Channel used when realtime delivery is disabled."""

    async def publish(self, recipient_id: str, message: ServerMessage) -> int:
        raise DeliveryChannelUnavailable("Realtime delivery is disabled")

    def has_subscribers(self, recipient_id: str) -> bool:
        return False


def build_delivery_channel(settings: Settings) -> DeliveryChannel:
    """Return the channel implementation selected by ``REALTIME_ENABLED``."""

    if not settings.realtime_enabled:
        logger.info("Realtime delivery disabled; notifications are served by polling only")
        return NullDeliveryChannel()

    from .manager import NotificationConnectionManager

    return NotificationConnectionManager()


__all__ = [
    "DeliveryChannel",
    "DeliveryChannelUnavailable",
    "NullDeliveryChannel",
    "build_delivery_channel",
]
