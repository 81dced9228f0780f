"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class NotificationKind(str, Enum):
    """Closed set of marketplace events that produce notifications."""

    JOB_APPLICATION = "job_application"
    APPLICATION_APPROVED = "application_approved"
    APPLICATION_REJECTED = "application_rejected"
    NEW_MESSAGE = "new_message"
    JOB_COMPLETED = "job_completed"
    PAYMENT_RECEIVED = "payment_received"
    SYSTEM_ANNOUNCEMENT = "system_announcement"


# Events an ordinary user may raise about their own action; the rest come
# from trusted services.
USER_ORIGINATED_KINDS = frozenset(
    {NotificationKind.JOB_APPLICATION, NotificationKind.NEW_MESSAGE}
)

PRIORITY_NORMAL = "normal"
PRIORITY_HIGH = "high"
NOTIFICATION_PRIORITIES = (PRIORITY_NORMAL, PRIORITY_HIGH)


@dataclass
class Notification:
    """Rendered message addressed to a single recipient.

    ``title`` and ``message`` hold exactly what the recipient was shown and are
    never re-rendered. ``read_at`` is set if and only if ``is_read`` is true.
    """

    id: int | None
    recipient_id: str
    sender_id: str | None
    kind: NotificationKind
    title: str
    message: str
    icon: str
    color: str
    category: str
    priority: str = PRIORITY_NORMAL
    context_data: dict[str, Any] = field(default_factory=dict)
    is_read: bool = False
    created_at: datetime | None = None
    read_at: datetime | None = None
    updated_at: datetime | None = None


class ReadStatus(str, Enum):
    ALL = "all"
    READ = "read"
    UNREAD = "unread"


@dataclass(frozen=True)
class NotificationFilter:
    """Criteria of the history view; the defaults match every notification.

    ``search`` is a case-insensitive substring of the title or message.
    ``created_from`` and ``created_to`` are both inclusive.
    """

    read_status: ReadStatus = ReadStatus.ALL
    kind: NotificationKind | None = None
    search: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None


@dataclass
class NotificationPage:
    """One page of a recipient's notification stream, newest first."""

    items: list[Notification]
    page: int
    page_size: int
    total: int


__all__ = [
    "Notification",
    "NotificationFilter",
    "NotificationKind",
    "NotificationPage",
    "NOTIFICATION_PRIORITIES",
    "PRIORITY_HIGH",
    "PRIORITY_NORMAL",
    "ReadStatus",
    "USER_ORIGINATED_KINDS",
]
