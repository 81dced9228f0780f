"""Pydantic models for chat unread counters and messages."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ChatRoomCreate(BaseModel):
    job_id: str | None = None
    participant_id: str = Field(..., min_length=1, description="The other participant")


class ChatRoomRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    job_id: str | None = None
    user1_id: str
    user2_id: str
    created_at: datetime | None = None


class ChatMessageCreate(BaseModel):
    body: str = Field(..., min_length=1)
    sender_name: str = Field(..., min_length=1, description="Display name used in the notification")


class ChatMessageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    room_id: int
    sender_id: str
    body: str
    is_read: bool
    created_at: datetime | None = None
    read_at: datetime | None = None


class ChatUnreadRead(BaseModel):
    total_unread: int
    unread_by_room: dict[int, int] = Field(default_factory=dict)


class ChatMarkReadResponse(BaseModel):
    success: bool = True
    marked_count: int


__all__ = [
    "ChatMarkReadResponse",
    "ChatMessageCreate",
    "ChatMessageRead",
    "ChatRoomCreate",
    "ChatRoomRead",
    "ChatUnreadRead",
]
