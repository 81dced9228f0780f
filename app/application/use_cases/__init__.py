"""Aggregate application use cases."""

from .notifications import dispatch_notification, mark_all_read, safe_dispatch
from .chat import post_chat_message

__all__ = [
    "dispatch_notification",
    "mark_all_read",
    "post_chat_message",
    "safe_dispatch",
]
