"""Tests for moving notifications between unread and read."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.config import get_settings
from app.application.use_cases.notifications import (
    NotificationNotFound,
    delete_notification,
    dispatch_notification,
    get_unread_count,
    list_notifications,
    mark_all_read,
    mark_many_read,
    mark_read,
    mark_unread,
)
from app.domain.entities import NotificationKind
from app.infrastructure.repositories import NotificationRepository
from app.utils import get_app_timezone, now_in_app_timezone


def _dispatch(session, recipient="client-1", kind=NotificationKind.JOB_APPLICATION, **kwargs):
    contexts = {
        NotificationKind.JOB_APPLICATION: {"worker_name": "Taro", "job_title": "Logo"},
        NotificationKind.NEW_MESSAGE: {"sender_name": "Taro"},
    }
    return dispatch_notification(
        session,
        kind=kind,
        recipient_id=recipient,
        sender_id="worker-1",
        context_data=contexts[kind],
        **kwargs,
    )


def test_mark_read_is_idempotent(session) -> None:
    notification = _dispatch(session)

    first = mark_read(session, notification_id=notification.id, recipient_id="client-1")
    second = mark_read(session, notification_id=notification.id, recipient_id="client-1")

    assert first.is_read is True
    assert first.read_at is not None
    assert second.read_at == first.read_at
    assert get_unread_count(session, recipient_id="client-1") == 0


def test_mark_read_of_foreign_notification_is_not_found(session) -> None:
    notification = _dispatch(session)

    with pytest.raises(NotificationNotFound):
        mark_read(session, notification_id=notification.id, recipient_id="someone-else")

    assert get_unread_count(session, recipient_id="client-1") == 1


def test_mark_many_read_counts_only_flipped_rows(session) -> None:
    first = _dispatch(session)
    second = _dispatch(session)
    mark_read(session, notification_id=first.id, recipient_id="client-1")

    marked = mark_many_read(
        session, ids=[first.id, second.id, second.id, 9999], recipient_id="client-1"
    )

    assert marked == 1
    assert get_unread_count(session, recipient_id="client-1") == 0


def test_mark_all_read_flips_only_unread(session) -> None:
    for _ in range(3):
        _dispatch(session)
    _dispatch(session, recipient="client-2")

    assert mark_all_read(session, recipient_id="client-1") == 3
    assert mark_all_read(session, recipient_id="client-1") == 0
    assert get_unread_count(session, recipient_id="client-2") == 1


def test_mark_all_read_keeps_notifications_created_during_the_update(session, monkeypatch) -> None:
    for _ in range(3):
        _dispatch(session)
    as_of = now_in_app_timezone()

    original = NotificationRepository.mark_all_read

    def racing_mark_all_read(self, recipient_id, **kwargs):
        # A fourth event lands after the user's snapshot but before the update.
        _dispatch(session, occurred_at=as_of + timedelta(seconds=1))
        return original(self, recipient_id, **kwargs)

    monkeypatch.setattr(NotificationRepository, "mark_all_read", racing_mark_all_read)

    marked = mark_all_read(session, recipient_id="client-1", as_of=as_of)

    assert marked == 3
    assert get_unread_count(session, recipient_id="client-1") == 1
    remaining = list_notifications(session, recipient_id="client-1", unread_only=True)
    assert remaining.items[0].created_at > as_of


def test_mark_all_read_by_kind(session) -> None:
    _dispatch(session)
    _dispatch(session, kind=NotificationKind.NEW_MESSAGE)

    marked = mark_all_read(session, recipient_id="client-1", kind=NotificationKind.NEW_MESSAGE)

    assert marked == 1
    remaining = list_notifications(session, recipient_id="client-1", unread_only=True)
    assert [item.kind for item in remaining.items] == [NotificationKind.JOB_APPLICATION]


def test_mark_unread_clears_read_at(session) -> None:
    notification = _dispatch(session)
    mark_read(session, notification_id=notification.id, recipient_id="client-1")

    reverted = mark_unread(session, notification_id=notification.id, recipient_id="client-1")

    assert reverted.is_read is False
    assert reverted.read_at is None
    assert get_unread_count(session, recipient_id="client-1") == 1


def test_delete_notification(session) -> None:
    notification = _dispatch(session)

    delete_notification(session, notification_id=notification.id, recipient_id="client-1")

    assert list_notifications(session, recipient_id="client-1").total == 0
    with pytest.raises(NotificationNotFound):
        delete_notification(session, notification_id=notification.id, recipient_id="client-1")


def test_list_notifications_pages_newest_first(session) -> None:
    base = now_in_app_timezone() - timedelta(minutes=10)
    created = [_dispatch(session, occurred_at=base + timedelta(minutes=i)) for i in range(5)]

    first_page = list_notifications(session, recipient_id="client-1", page=1, page_size=2)
    last_page = list_notifications(session, recipient_id="client-1", page=3, page_size=2)

    assert first_page.total == 5
    assert [item.id for item in first_page.items] == [created[4].id, created[3].id]
    assert [item.id for item in last_page.items] == [created[0].id]


@pytest.mark.parametrize(("page", "page_size"), [(0, 20), (1, 0), (1, 101)])
def test_list_notifications_rejects_bad_paging(session, page, page_size) -> None:
    with pytest.raises(ValueError):
        list_notifications(session, recipient_id="client-1", page=page, page_size=page_size)


@pytest.fixture()
def new_york_timezone(monkeypatch):
    monkeypatch.setattr(get_settings(), "app_timezone", "America/New_York")
    get_app_timezone.cache_clear()
    yield get_app_timezone()
    get_app_timezone.cache_clear()


def test_snapshot_and_order_hold_across_dst_fall_back(session, new_york_timezone) -> None:
    # 01:45 EDT and 01:10 EST: the later event has the earlier wall-clock time.
    as_of = datetime(2024, 11, 3, 5, 45, tzinfo=timezone.utc)
    before = _dispatch(session, occurred_at=as_of - timedelta(minutes=5))
    after = _dispatch(session, occurred_at=datetime(2024, 11, 3, 6, 10, tzinfo=timezone.utc))
    assert after.created_at.replace(tzinfo=None) < before.created_at.replace(tzinfo=None)

    listed = list_notifications(session, recipient_id="client-1")
    assert [item.id for item in listed.items] == [after.id, before.id]

    marked = mark_all_read(session, recipient_id="client-1", as_of=as_of)

    assert marked == 1
    remaining = list_notifications(session, recipient_id="client-1", unread_only=True)
    assert [item.id for item in remaining.items] == [after.id]
    assert remaining.items[0].created_at.utcoffset() == timedelta(hours=-5)
