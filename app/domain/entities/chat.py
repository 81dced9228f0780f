"""Chat entities used to derive per-user unread message counters."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ChatRoom:
    """Conversation between the two parties of a job."""

    id: int | None
    job_id: str | None
    user1_id: str
    user2_id: str
    created_at: datetime | None = None

    def participants(self) -> tuple[str, str]:
        return (self.user1_id, self.user2_id)

    def other_participant(self, user_id: str) -> str:
        """Return the participant that is not ``user_id``."""

        if user_id == self.user1_id:
            return self.user2_id
        if user_id == self.user2_id:
            return self.user1_id
        raise ValueError(f"User {user_id} does not participate in room {self.id}")


@dataclass
class ChatMessage:
    id: int | None
    room_id: int
    sender_id: str
    body: str
    is_read: bool = False
    created_at: datetime | None = None
    read_at: datetime | None = None


@dataclass
class ChatUnreadCounter:
    """Derived unread state for one user; never persisted."""

    total_unread: int = 0
    unread_by_room: dict[int, int] = field(default_factory=dict)


__all__ = ["ChatMessage", "ChatRoom", "ChatUnreadCounter"]
