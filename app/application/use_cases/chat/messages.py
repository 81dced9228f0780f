"""Chat actions that feed the unread counters and the ``new_message`` event."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.application.use_cases.notifications import notify_new_message
from app.domain.entities import ChatMessage, ChatRoom, ChatUnreadCounter
from app.infrastructure.notifications import NotificationPublisher
from app.infrastructure.repositories import ChatRepository
from app.utils import now_in_app_timezone


def open_chat_room(
    session: Session, *, job_id: str | None, user1_id: str, user2_id: str
) -> ChatRoom:
    """Create the room used by the two parties of a job."""

    if not user1_id or not user2_id or user1_id == user2_id:
        raise ValueError("A chat room needs two distinct participants")
    return ChatRepository(session).create_room(
        ChatRoom(id=None, job_id=job_id, user1_id=user1_id, user2_id=user2_id)
    )


def post_chat_message(
    session: Session,
    *,
    room_id: int,
    sender_id: str,
    sender_name: str,
    body: str,
    publisher: NotificationPublisher | None = None,
) -> ChatMessage:
    """Store a message and notify the other participant.

    The message is saved even if the notification cannot be created.
    """

    repository = ChatRepository(session)
    room = repository.get_room(room_id)
    if room is None:
        raise LookupError(f"Chat room {room_id} not found")
    if sender_id not in room.participants():
        raise PermissionError(f"User {sender_id} is not a participant of room {room_id}")
    if not body.strip():
        raise ValueError("Message body cannot be empty")

    message = repository.add_message(
        ChatMessage(id=None, room_id=room_id, sender_id=sender_id, body=body)
    )
    notify_new_message(
        session, room=room, message=message, sender_name=sender_name, publisher=publisher
    )
    return message


def list_chat_rooms(session: Session, *, user_id: str) -> list[ChatRoom]:
    return list(ChatRepository(session).list_rooms_for_user(user_id))


def count_unread_messages(session: Session, *, user_id: str) -> ChatUnreadCounter:
    return ChatRepository(session).count_unread_for_user(user_id)


def mark_room_read(session: Session, *, room_id: int, user_id: str) -> int:
    """Mark what the other participant sent in ``room_id`` as read for ``user_id``."""

    repository = ChatRepository(session)
    room = repository.get_room(room_id)
    if room is None:
        raise LookupError(f"Chat room {room_id} not found")
    if user_id not in room.participants():
        raise PermissionError(f"User {user_id} is not a participant of room {room_id}")
    return repository.mark_room_read(room_id, user_id=user_id, read_at=now_in_app_timezone())


__all__ = [
    "count_unread_messages",
    "list_chat_rooms",
    "mark_room_read",
    "open_chat_room",
    "post_chat_message",
]
