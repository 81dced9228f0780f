"""Repository implementations for infrastructure layer."""

from .chat_repository import ChatRepository
from .notification_repository import NotificationRepository

__all__ = [
    "ChatRepository",
    "NotificationRepository",
]
