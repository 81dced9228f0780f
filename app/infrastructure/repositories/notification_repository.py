"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Iterable

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from app.domain.entities import Notification, NotificationFilter, NotificationKind, ReadStatus
from app.infrastructure.models import NotificationModel
from app.utils import from_storage_datetime, to_storage_datetime


class NotificationRepository:
    """Provide storage operations for :class:`Notification` objects.

    Read-state updates are issued as single conditional ``UPDATE`` statements so
    concurrent writers never overwrite each other's rows.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, notification_id: int, *, recipient_id: str | None = None) -> Notification | None:
        model = self._get_model(notification_id, recipient_id=recipient_id)
        return self._to_entity(model) if model is not None else None

    def list_for_recipient(
        self,
        recipient_id: str,
        *,
        offset: int = 0,
        limit: int | None = 20,
        criteria: NotificationFilter | None = None,
    ) -> Sequence[Notification]:
        query = self._filtered_query(recipient_id, criteria or NotificationFilter())
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_for_recipient(
        self, recipient_id: str, *, criteria: NotificationFilter | None = None
    ) -> int:
        return self._filtered_query(recipient_id, criteria or NotificationFilter()).count()

    def list_unread_for_recipient(
        self, recipient_id: str, *, limit: int | None = 50
    ) -> Sequence[Notification]:
        return self.list_for_recipient(
            recipient_id, limit=limit, criteria=NotificationFilter(read_status=ReadStatus.UNREAD)
        )

    def count_unread(
        self, recipient_id: str, *, exclude_kinds: Iterable[NotificationKind] = ()
    ) -> int:
        query = self._recipient_query(recipient_id, unread_only=True)
        excluded = [NotificationKind(kind).value for kind in exclude_kinds]
        if excluded:
            query = query.filter(NotificationModel.kind.notin_(excluded))
        return query.count()

    def count_unread_by_category(self, recipient_id: str) -> dict[str, int]:
        rows = (
            self.session.query(NotificationModel.category, func.count(NotificationModel.id))
            .filter(NotificationModel.recipient_id == recipient_id)
            .filter(NotificationModel.is_read.is_(False))
            .group_by(NotificationModel.category)
            .all()
        )
        return {category: count for category, count in rows}

    def mark_read(self, notification_id: int, *, recipient_id: str, read_at: datetime) -> int:
        """Flip a single unread notification; already-read rows are left untouched."""

        return self.mark_many_read([notification_id], recipient_id=recipient_id, read_at=read_at)

    def mark_many_read(
        self, notification_ids: Iterable[int], *, recipient_id: str, read_at: datetime
    ) -> int:
        ids = [notification_id for notification_id in notification_ids if notification_id is not None]
        if not ids:
            return 0
        query = self._recipient_query(recipient_id, unread_only=True).filter(
            NotificationModel.id.in_(ids)
        )
        return self._flip_to_read(query, read_at)

    def mark_all_read(
        self,
        recipient_id: str,
        *,
        as_of: datetime,
        read_at: datetime,
        kind: NotificationKind | None = None,
    ) -> int:
        """Mark unread rows created at or before ``as_of``; later rows stay unread."""

        query = self._recipient_query(recipient_id, unread_only=True, kind=kind).filter(
            NotificationModel.created_at <= to_storage_datetime(as_of)
        )
        return self._flip_to_read(query, read_at)

    def mark_unread(self, notification_id: int, *, recipient_id: str, changed_at: datetime) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.recipient_id == recipient_id,
                NotificationModel.is_read.is_(True),
            )
            .update(
                {
                    NotificationModel.is_read: False,
                    NotificationModel.read_at: None,
                    NotificationModel.updated_at: to_storage_datetime(changed_at),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    def delete(self, notification_id: int, *, recipient_id: str) -> bool:
        model = self._get_model(notification_id, recipient_id=recipient_id)
        if model is None:
            return False
        self.session.delete(model)
        self.session.commit()
        return True

    def count_created_before(self, cutoff: datetime) -> int:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.created_at < to_storage_datetime(cutoff))
            .count()
        )

    def delete_created_before(self, cutoff: datetime) -> int:
        deleted = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.created_at < to_storage_datetime(cutoff))
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    def _recipient_query(
        self,
        recipient_id: str,
        *,
        unread_only: bool = False,
        kind: NotificationKind | None = None,
    ) -> Query:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.recipient_id == recipient_id
        )
        if unread_only:
            query = query.filter(NotificationModel.is_read.is_(False))
        if kind is not None:
            query = query.filter(NotificationModel.kind == NotificationKind(kind).value)
        return query

    def _filtered_query(self, recipient_id: str, criteria: NotificationFilter) -> Query:
        status = ReadStatus(criteria.read_status)
        query = self._recipient_query(
            recipient_id, unread_only=status is ReadStatus.UNREAD, kind=criteria.kind
        )
        if status is ReadStatus.READ:
            query = query.filter(NotificationModel.is_read.is_(True))
        term = (criteria.search or "").strip()
        if term:
            pattern = f"%{_escape_like(term.lower())}%"
            query = query.filter(
                or_(
                    func.lower(NotificationModel.title).like(pattern, escape="\\"),
                    func.lower(NotificationModel.message).like(pattern, escape="\\"),
                )
            )
        if criteria.created_from is not None:
            query = query.filter(
                NotificationModel.created_at >= to_storage_datetime(criteria.created_from)
            )
        if criteria.created_to is not None:
            query = query.filter(
                NotificationModel.created_at <= to_storage_datetime(criteria.created_to)
            )
        return query

    def _get_model(
        self, notification_id: int, *, recipient_id: str | None
    ) -> NotificationModel | None:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            return None
        if recipient_id is not None and model.recipient_id != recipient_id:
            return None
        return model

    def _flip_to_read(self, query: Query, read_at: datetime) -> int:
        stored_at = to_storage_datetime(read_at)
        updated = query.update(
            {
                NotificationModel.is_read: True,
                NotificationModel.read_at: stored_at,
                NotificationModel.updated_at: stored_at,
            },
            synchronize_session=False,
        )
        self.session.commit()
        return updated

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        model.recipient_id = notification.recipient_id
        model.sender_id = notification.sender_id
        model.kind = NotificationKind(notification.kind).value
        model.title = notification.title
        model.message = notification.message
        model.icon = notification.icon
        model.color = notification.color
        model.category = notification.category
        model.priority = notification.priority
        model.context_data = dict(notification.context_data or {})
        model.is_read = notification.is_read
        if notification.created_at is not None:
            model.created_at = to_storage_datetime(notification.created_at)
        model.read_at = to_storage_datetime(notification.read_at)
        model.updated_at = to_storage_datetime(notification.updated_at)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            recipient_id=model.recipient_id,
            sender_id=model.sender_id,
            kind=NotificationKind(model.kind),
            title=model.title,
            message=model.message,
            icon=model.icon,
            color=model.color,
            category=model.category,
            priority=model.priority,
            context_data=model.context_data or {},
            is_read=bool(model.is_read),
            created_at=from_storage_datetime(model.created_at),
            read_at=from_storage_datetime(model.read_at),
            updated_at=from_storage_datetime(model.updated_at),
        )


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


__all__ = ["NotificationRepository"]
