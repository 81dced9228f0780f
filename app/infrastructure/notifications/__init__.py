"""Realtime notification helpers for the infrastructure layer."""

from .channel import (
    DeliveryChannel,
    DeliveryChannelUnavailable,
    NullDeliveryChannel,
    build_delivery_channel,
)
from .manager import NotificationConnectionManager
from .messages import (
    InitialSync,
    NewNotification,
    Pong,
    RealtimeMessage,
    ServerMessage,
    SocketConnected,
    SocketDisconnected,
    deserialize_notification,
    parse_server_message,
    serialize_notification,
)
from .publisher import NotificationPublisher

__all__ = [
    "DeliveryChannel",
    "DeliveryChannelUnavailable",
    "NullDeliveryChannel",
    "build_delivery_channel",
    "NotificationConnectionManager",
    "NotificationPublisher",
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
