"""Retention policy for stored notifications."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.config import get_settings
from app.infrastructure.repositories import NotificationRepository
from app.utils import ensure_app_timezone, now_in_app_timezone

logger = logging.getLogger(__name__)


def retention_cutoff(*, now: datetime | None = None, retention_days: int | None = None) -> datetime | None:
    """Return the creation time before which notifications expire, or ``None``."""

    days = get_settings().notification_retention_days if retention_days is None else retention_days
    if days <= 0:
        return None
    reference = ensure_app_timezone(now) or now_in_app_timezone()
    return reference - timedelta(days=days)


def purge_expired_notifications(
    session: Session,
    *,
    now: datetime | None = None,
    retention_days: int | None = None,
    dry_run: bool = False,
) -> int:
    """Delete notifications older than the retention window.

    Read and unread records expire alike. ``dry_run`` only counts them.
    """

    cutoff = retention_cutoff(now=now, retention_days=retention_days)
    if cutoff is None:
        logger.info("Notification retention disabled; nothing to purge")
        return 0

    repository = NotificationRepository(session)
    if dry_run:
        return repository.count_created_before(cutoff)

    purged = repository.delete_created_before(cutoff)
    logger.info("Purged %d notifications created before %s", purged, cutoff.isoformat())
    return purged


__all__ = ["purge_expired_notifications", "retention_cutoff"]
