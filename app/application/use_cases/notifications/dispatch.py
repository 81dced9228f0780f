"""Single entry point turning domain events into stored notifications."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import PRIORITY_NORMAL, Notification, NotificationKind
from app.infrastructure.notifications import NotificationPublisher
from app.infrastructure.repositories import NotificationRepository
from app.utils import ensure_app_timezone, now_in_app_timezone

from .errors import DispatchError, InvalidRecipient, StorageWriteFailure
from .factory import render_notification, resolve_kind

logger = logging.getLogger(__name__)


def dispatch_notification(
    session: Session,
    *,
    kind: NotificationKind | str,
    recipient_id: str,
    sender_id: str | None = None,
    context_data: Mapping[str, Any] | None = None,
    priority: str = PRIORITY_NORMAL,
    publisher: NotificationPublisher | None = None,
    occurred_at: datetime | None = None,
) -> Notification:
    """Render, persist and push a notification for ``recipient_id``.

    Exactly one record is stored per successful call; repeated events are not
    deduplicated. Realtime delivery happens only after the record is durable
    and its failure never surfaces here.
    """

    resolved = resolve_kind(kind)
    recipient = (recipient_id or "").strip()
    if not recipient:
        raise InvalidRecipient("A notification requires a recipient")
    is_announcement = resolved is NotificationKind.SYSTEM_ANNOUNCEMENT
    if sender_id is not None and sender_id == recipient and not is_announcement:
        raise InvalidRecipient(f"User {recipient} cannot be notified of their own action")

    created_at = ensure_app_timezone(occurred_at) or now_in_app_timezone()
    rendered = render_notification(
        resolved,
        recipient_id=recipient,
        sender_id=sender_id,
        context_data=context_data,
        created_at=created_at,
        priority=priority,
    )

    try:
        saved = NotificationRepository(session).create(rendered)
    except SQLAlchemyError as exc:
        session.rollback()
        raise StorageWriteFailure(
            f"Could not store {resolved.value} notification for {recipient}"
        ) from exc

    logger.info(
        "Notification %s (%s) stored for recipient=%s", saved.id, resolved.value, recipient
    )
    if publisher is not None:
        publisher.dispatch(saved)
    return saved


def safe_dispatch(session: Session, **kwargs: Any) -> Notification | None:
    """Dispatch without ever failing the calling domain action.

    Accepts the keyword arguments of :func:`dispatch_notification` and returns
    ``None`` when the notification could not be created.
    """

    try:
        return dispatch_notification(session, **kwargs)
    except StorageWriteFailure:
        logger.exception(
            "Notification %s for %s lost: storage unavailable",
            kwargs.get("kind"),
            kwargs.get("recipient_id"),
        )
    except DispatchError as exc:
        logger.warning(
            "Notification %s for %s skipped: %s",
            kwargs.get("kind"),
            kwargs.get("recipient_id"),
            exc,
        )
    return None


__all__ = ["dispatch_notification", "safe_dispatch"]
