"""ORM models used by the application infrastructure."""

from .chat import ChatMessageModel, ChatRoomModel
from .notification import NotificationModel

__all__ = [
    "ChatMessageModel",
    "ChatRoomModel",
    "NotificationModel",
]
