"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.domain.entities import NotificationKind


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark a batch of notifications as read."""

    ids: list[int] = Field(..., min_length=1, description="Notification identifiers")

    def unique_ids(self) -> list[int]:
        """Return the identifiers without duplicates, preserving order."""

        return list(dict.fromkeys(self.ids))


class NotificationMarkAllReadRequest(BaseModel):
    """Scope of a "mark all read" action.

    ``as_of`` should be the time the client loaded the list it is clearing so a
    notification that arrives meanwhile stays unread.
    """

    kind: NotificationKind | None = None
    as_of: datetime | None = None


class NotificationMarkAllReadResponse(BaseModel):
    marked: int
    as_of: datetime


class NotificationMarkResponse(BaseModel):
    marked: int


class NotificationCreate(BaseModel):
    """Event submitted to the dispatch endpoint."""

    kind: str = Field(..., description="One of the supported notification kinds")
    recipient_id: str = Field(..., min_length=1)
    context_data: dict[str, Any] = Field(default_factory=dict)
    priority: Literal["normal", "high"] = "normal"


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    recipient_id: str
    sender_id: str | None = None
    kind: NotificationKind
    title: str
    message: str
    icon: str
    color: str
    category: str
    priority: str
    context_data: dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    created_at: datetime
    read_at: datetime | None = None


class NotificationPageRead(BaseModel):
    items: list[NotificationRead]
    page: int
    page_size: int
    total: int


class UnreadCountRead(BaseModel):
    count: int


class UnreadSummaryRead(BaseModel):
    """Badge total plus the counters it was built from."""

    total: int
    by_source: dict[str, int]
    failed_sources: list[str] = Field(default_factory=list)
    partial: bool
    by_category: dict[str, int] = Field(default_factory=dict)
    computed_at: datetime | None = None


__all__ = [
    "NotificationCreate",
    "NotificationMarkAllReadRequest",
    "NotificationMarkAllReadResponse",
    "NotificationMarkReadRequest",
    "NotificationMarkResponse",
    "NotificationPageRead",
    "NotificationRead",
    "UnreadCountRead",
    "UnreadSummaryRead",
]
