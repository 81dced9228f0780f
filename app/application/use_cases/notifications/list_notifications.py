"""Read-side queries over a recipient's notification stream."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.orm import Session

from app.domain.entities import NotificationFilter, NotificationKind, NotificationPage, ReadStatus
from app.infrastructure.repositories import NotificationRepository
from app.utils import ensure_app_timezone

MAX_PAGE_SIZE = 100


def list_notifications(
    session: Session,
    *,
    recipient_id: str,
    page: int = 1,
    page_size: int = 20,
    unread_only: bool = False,
    kind: NotificationKind | None = None,
    read_status: ReadStatus | str = ReadStatus.ALL,
    search: str | None = None,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
) -> NotificationPage:
    """Return ``page`` of the recipient's notifications, newest first.

    ``unread_only`` is shorthand for ``read_status="unread"``. The date bounds
    are inclusive and the search matches the title or the message.
    """

    if page < 1:
        raise ValueError("page must be 1 or greater")
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
    status = ReadStatus(read_status)
    if unread_only:
        if status is ReadStatus.READ:
            raise ValueError("unread_only conflicts with read_status=read")
        status = ReadStatus.UNREAD
    created_from = ensure_app_timezone(created_from)
    created_to = ensure_app_timezone(created_to)
    if created_from and created_to and created_from > created_to:
        raise ValueError("created_from must not be later than created_to")
    criteria = NotificationFilter(
        read_status=status,
        kind=kind,
        search=search,
        created_from=created_from,
        created_to=created_to,
    )

    repository = NotificationRepository(session)
    items = repository.list_for_recipient(
        recipient_id,
        offset=(page - 1) * page_size,
        limit=page_size,
        criteria=criteria,
    )
    total = repository.count_for_recipient(recipient_id, criteria=criteria)
    return NotificationPage(items=list(items), page=page, page_size=page_size, total=total)


def get_unread_count(
    session: Session,
    *,
    recipient_id: str,
    exclude_kinds: Iterable[NotificationKind] = (),
) -> int:
    return NotificationRepository(session).count_unread(recipient_id, exclude_kinds=exclude_kinds)


def count_unread_by_category(session: Session, *, recipient_id: str) -> dict[str, int]:
    return NotificationRepository(session).count_unread_by_category(recipient_id)


__all__ = [
    "MAX_PAGE_SIZE",
    "count_unread_by_category",
    "get_unread_count",
    "list_notifications",
]
