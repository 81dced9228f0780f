from .chat import (
    ChatMarkReadResponse,
    ChatMessageCreate,
    ChatMessageRead,
    ChatRoomCreate,
    ChatRoomRead,
    ChatUnreadRead,
)
from .notification import (
    NotificationCreate,
    NotificationMarkAllReadRequest,
    NotificationMarkAllReadResponse,
    NotificationMarkReadRequest,
    NotificationMarkResponse,
    NotificationPageRead,
    NotificationRead,
    UnreadCountRead,
    UnreadSummaryRead,
)

__all__ = [
    "ChatMarkReadResponse",
    "ChatMessageCreate",
    "ChatMessageRead",
    "ChatRoomCreate",
    "ChatRoomRead",
    "ChatUnreadRead",
    "NotificationCreate",
    "NotificationMarkAllReadRequest",
    "NotificationMarkAllReadResponse",
    "NotificationMarkReadRequest",
    "NotificationMarkResponse",
    "NotificationPageRead",
    "NotificationRead",
    "UnreadCountRead",
    "UnreadSummaryRead",
]
