"""Domain entities exposed by the application."""

from .chat import ChatMessage, ChatRoom, ChatUnreadCounter
from .notification import (
    NOTIFICATION_PRIORITIES,
    PRIORITY_HIGH,
    PRIORITY_NORMAL,
    Notification,
    NotificationFilter,
    NotificationKind,
    NotificationPage,
    ReadStatus,
    USER_ORIGINATED_KINDS,
)
from .unread import UnreadSummary

__all__ = [
    "ChatMessage",
    "ChatRoom",
    "ChatUnreadCounter",
    "Notification",
    "NotificationFilter",
    "NotificationKind",
    "NotificationPage",
    "NOTIFICATION_PRIORITIES",
    "PRIORITY_HIGH",
    "PRIORITY_NORMAL",
    "ReadStatus",
    "UnreadSummary",
    "USER_ORIGINATED_KINDS",
]
