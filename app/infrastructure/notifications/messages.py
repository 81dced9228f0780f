"""Typed realtime messages exchanged over the notification channel."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from app.domain.entities import Notification, NotificationKind
from app.utils import isoformat_or_none, parse_app_datetime

NEW_NOTIFICATION = "newNotification"
INITIAL_SYNC = "init"
PONG = "pong"


@dataclass(frozen=True)
class NewNotification:
    """A freshly dispatched notification pushed verbatim to the recipient."""

    notification: Notification

    def to_wire(self) -> dict[str, Any]:
        return {"type": NEW_NOTIFICATION, "payload": serialize_notification(self.notification)}


@dataclass(frozen=True)
class InitialSync:
    """Unread notifications sent right after a connection is accepted."""

    notifications: tuple[Notification, ...] = ()

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": INITIAL_SYNC,
            "payload": [serialize_notification(item) for item in self.notifications],
        }


@dataclass(frozen=True)
class Pong:
    def to_wire(self) -> dict[str, Any]:
        return {"type": PONG}


@dataclass(frozen=True)
class SocketConnected:
    """Client-side signal emitted once a subscription is established."""


@dataclass(frozen=True)
class SocketDisconnected:
    """Client-side signal emitted when a subscription is lost."""

    reason: str = field(default="")


ServerMessage = Union[NewNotification, InitialSync, Pong]
RealtimeMessage = Union[NewNotification, InitialSync, Pong, SocketConnected, SocketDisconnected]


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the JSON representation pushed to websocket clients."""

    return {
        "id": notification.id,
        "recipient_id": notification.recipient_id,
        "sender_id": notification.sender_id,
        "kind": NotificationKind(notification.kind).value,
        "title": notification.title,
        "message": notification.message,
        "icon": notification.icon,
        "color": notification.color,
        "category": notification.category,
        "priority": notification.priority,
        "context_data": dict(notification.context_data or {}),
        "is_read": notification.is_read,
        "created_at": isoformat_or_none(notification.created_at),
        "read_at": isoformat_or_none(notification.read_at),
    }


def deserialize_notification(data: dict[str, Any]) -> Notification:
    """Rebuild a :class:`Notification` from :func:`serialize_notification` output."""

    return Notification(
        id=data.get("id"),
        recipient_id=data["recipient_id"],
        sender_id=data.get("sender_id"),
        kind=NotificationKind(data["kind"]),
        title=data["title"],
        message=data["message"],
        icon=data.get("icon", ""),
        color=data.get("color", ""),
        category=data.get("category", ""),
        priority=data.get("priority", "normal"),
        context_data=dict(data.get("context_data") or {}),
        is_read=bool(data.get("is_read", False)),
        created_at=parse_app_datetime(data.get("created_at")),
        read_at=parse_app_datetime(data.get("read_at")),
    )


def parse_server_message(data: Any) -> ServerMessage | None:
    """Decode a server frame; unknown or malformed frames yield ``None``."""

    if not isinstance(data, dict):
        return None
    message_type = data.get("type")
    try:
        if message_type == NEW_NOTIFICATION:
            return NewNotification(deserialize_notification(data["payload"]))
        if message_type == INITIAL_SYNC:
            return InitialSync(
                tuple(deserialize_notification(item) for item in data.get("payload") or [])
            )
    except (KeyError, TypeError, ValueError):
        return None
    if message_type == PONG:
        return Pong()
    return None


__all__ = [
    "InitialSync",
    "NewNotification",
    "Pong",
    "RealtimeMessage",
    "ServerMessage",
    "SocketConnected",
    "SocketDisconnected",
    "deserialize_notification",
    "parse_server_message",
    "serialize_notification",
]
