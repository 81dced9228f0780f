"""Persistence helpers for chat rooms and messages."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.domain.entities import ChatMessage, ChatRoom, ChatUnreadCounter
from app.infrastructure.models import ChatMessageModel, ChatRoomModel
from app.utils import from_storage_datetime, to_storage_datetime


class ChatRepository:
    """Store chat rooms/messages and derive unread counters from them."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create_room(self, room: ChatRoom) -> ChatRoom:
        model = ChatRoomModel(job_id=room.job_id, user1_id=room.user1_id, user2_id=room.user2_id)
        if room.created_at is not None:
            model.created_at = to_storage_datetime(room.created_at)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._room_to_entity(model)

    def get_room(self, room_id: int) -> ChatRoom | None:
        model = self.session.get(ChatRoomModel, room_id)
        return self._room_to_entity(model) if model is not None else None

    def list_rooms_for_user(self, user_id: str) -> Sequence[ChatRoom]:
        query = (
            self.session.query(ChatRoomModel)
            .filter(or_(ChatRoomModel.user1_id == user_id, ChatRoomModel.user2_id == user_id))
            .order_by(ChatRoomModel.id)
        )
        return [self._room_to_entity(model) for model in query.all()]

    def add_message(self, message: ChatMessage) -> ChatMessage:
        model = ChatMessageModel(
            room_id=message.room_id,
            sender_id=message.sender_id,
            body=message.body,
            is_read=message.is_read,
        )
        if message.created_at is not None:
            model.created_at = to_storage_datetime(message.created_at)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._message_to_entity(model)

    def count_unread_for_user(self, user_id: str) -> ChatUnreadCounter:
        """Count unread messages sent by others in every room ``user_id`` joined."""

        rows = (
            self.session.query(ChatMessageModel.room_id, func.count(ChatMessageModel.id))
            .join(ChatRoomModel, ChatRoomModel.id == ChatMessageModel.room_id)
            .filter(or_(ChatRoomModel.user1_id == user_id, ChatRoomModel.user2_id == user_id))
            .filter(ChatMessageModel.sender_id != user_id)
            .filter(ChatMessageModel.is_read.is_(False))
            .group_by(ChatMessageModel.room_id)
            .all()
        )
        unread_by_room = {room_id: count for room_id, count in rows}
        return ChatUnreadCounter(
            total_unread=sum(unread_by_room.values()),
            unread_by_room=unread_by_room,
        )

    def mark_room_read(self, room_id: int, *, user_id: str, read_at: datetime) -> int:
        """Mark the messages other participants sent in ``room_id`` as read."""

        updated = (
            self.session.query(ChatMessageModel)
            .filter(
                ChatMessageModel.room_id == room_id,
                ChatMessageModel.sender_id != user_id,
                ChatMessageModel.is_read.is_(False),
            )
            .update(
                {
                    ChatMessageModel.is_read: True,
                    ChatMessageModel.read_at: to_storage_datetime(read_at),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    @staticmethod
    def _room_to_entity(model: ChatRoomModel) -> ChatRoom:
        return ChatRoom(
            id=model.id,
            job_id=model.job_id,
            user1_id=model.user1_id,
            user2_id=model.user2_id,
            created_at=from_storage_datetime(model.created_at),
        )

    @staticmethod
    def _message_to_entity(model: ChatMessageModel) -> ChatMessage:
        return ChatMessage(
            id=model.id,
            room_id=model.room_id,
            sender_id=model.sender_id,
            body=model.body,
            is_read=bool(model.is_read),
            created_at=from_storage_datetime(model.created_at),
            read_at=from_storage_datetime(model.read_at),
        )


__all__ = ["ChatRepository"]
