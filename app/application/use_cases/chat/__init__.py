"""Use cases for chat rooms and their unread counters."""

from .messages import (
    count_unread_messages,
    list_chat_rooms,
    mark_room_read,
    open_chat_room,
    post_chat_message,
)

__all__ = [
    "count_unread_messages",
    "list_chat_rooms",
    "mark_room_read",
    "open_chat_room",
    "post_chat_message",
]
