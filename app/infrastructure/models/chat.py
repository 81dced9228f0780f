"""SQLAlchemy models for chat rooms and their messages."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from app.infrastructure.database import Base
from app.utils import utc_now_naive


class ChatRoomModel(Base):
    """Two-party conversation attached to a job."""

    __tablename__ = "chat_room"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(String(64), nullable=True, index=True)
    user1_id = Column(String(255), nullable=False, index=True)
    user2_id = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime(), nullable=False, default=utc_now_naive)

    messages = relationship(
        "ChatMessageModel", back_populates="room", cascade="all, delete-orphan"
    )


class ChatMessageModel(Base):
    """Single message posted in a chat room."""

    __tablename__ = "chat_message"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("chat_room.id"), nullable=False, index=True)
    sender_id = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    is_read = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    created_at = Column(DateTime(), nullable=False, default=utc_now_naive)
    read_at = Column(DateTime(), nullable=True)

    room = relationship("ChatRoomModel", back_populates="messages")


__all__ = ["ChatMessageModel", "ChatRoomModel"]
