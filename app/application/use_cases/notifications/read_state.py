"""Race-free transitions of notifications between unread and read."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from sqlalchemy.orm import Session

from app.domain.entities import Notification, NotificationKind
from app.infrastructure.repositories import NotificationRepository
from app.utils import ensure_app_timezone, now_in_app_timezone

from .errors import NotificationNotFound

logger = logging.getLogger(__name__)


def mark_read(session: Session, *, notification_id: int, recipient_id: str) -> Notification:
    """Mark one notification read; repeating the call keeps the first ``read_at``."""

    repository = NotificationRepository(session)
    repository.mark_read(notification_id, recipient_id=recipient_id, read_at=now_in_app_timezone())
    notification = repository.get(notification_id, recipient_id=recipient_id)
    if notification is None:
        raise NotificationNotFound(notification_id)
    return notification


def mark_many_read(session: Session, *, ids: Iterable[int], recipient_id: str) -> int:
    """Mark the given notifications of ``recipient_id`` read and return how many flipped."""

    unique_ids = list(dict.fromkeys(ids))
    return NotificationRepository(session).mark_many_read(
        unique_ids, recipient_id=recipient_id, read_at=now_in_app_timezone()
    )


def mark_all_read(
    session: Session,
    *,
    recipient_id: str,
    kind: NotificationKind | None = None,
    as_of: datetime | None = None,
) -> int:
    """Mark every unread notification created at or before ``as_of`` as read.

    ``as_of`` is the snapshot the user acted on (defaults to the call time).
    Notifications created afterwards stay unread even if they are stored while
    this update runs.
    """

    read_at = now_in_app_timezone()
    snapshot = ensure_app_timezone(as_of) or read_at
    marked = NotificationRepository(session).mark_all_read(
        recipient_id, as_of=snapshot, read_at=read_at, kind=kind
    )
    logger.info(
        "Marked %d notifications read for %s as of %s", marked, recipient_id, snapshot.isoformat()
    )
    return marked


def mark_unread(session: Session, *, notification_id: int, recipient_id: str) -> Notification:
    """Explicitly return a notification to the unread state."""

    repository = NotificationRepository(session)
    repository.mark_unread(
        notification_id, recipient_id=recipient_id, changed_at=now_in_app_timezone()
    )
    notification = repository.get(notification_id, recipient_id=recipient_id)
    if notification is None:
        raise NotificationNotFound(notification_id)
    return notification


def delete_notification(session: Session, *, notification_id: int, recipient_id: str) -> None:
    if not NotificationRepository(session).delete(notification_id, recipient_id=recipient_id):
        raise NotificationNotFound(notification_id)


__all__ = [
    "delete_notification",
    "mark_all_read",
    "mark_many_read",
    "mark_read",
    "mark_unread",
]
