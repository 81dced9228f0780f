"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, JSON, String, Text
from sqlalchemy.sql import expression

from app.infrastructure.database import Base
from app.utils import utc_now_naive


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_recipient_created", "recipient_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(String(255), nullable=False, index=True)
    sender_id = Column(String(255), nullable=True)
    kind = Column(String(50), nullable=False)
    title = Column(String(120), nullable=False)
    message = Column(Text, nullable=False)
    icon = Column(String(16), nullable=False, default="")
    color = Column(String(20), nullable=False, default="")
    category = Column(String(30), nullable=False)
    priority = Column(String(10), nullable=False, default="normal")
    context_data = Column(JSON, nullable=False, default=dict)
    is_read = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    created_at = Column(DateTime(), nullable=False, default=utc_now_naive)
    read_at = Column(DateTime(), nullable=True)
    updated_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationModel"]
