"""Tests for the notification history filters."""

from __future__ import annotations

from datetime import timedelta

import pytest

from app.application.use_cases.notifications import (
    dispatch_notification,
    list_notifications,
    mark_read,
)
from app.domain.entities import NotificationKind, ReadStatus
from app.utils import now_in_app_timezone

BASE = now_in_app_timezone().replace(microsecond=0) - timedelta(days=10)


@pytest.fixture()
def history(session):
    """Three notifications for client-1, one per day, the oldest one read."""

    logo = dispatch_notification(
        session,
        kind=NotificationKind.JOB_APPLICATION,
        recipient_id="client-1",
        sender_id="worker-1",
        context_data={"worker_name": "Taro", "job_title": "Logo Design"},
        occurred_at=BASE,
    )
    message = dispatch_notification(
        session,
        kind=NotificationKind.NEW_MESSAGE,
        recipient_id="client-1",
        sender_id="worker-2",
        context_data={"sender_name": "Hanako"},
        occurred_at=BASE + timedelta(days=1),
    )
    site = dispatch_notification(
        session,
        kind=NotificationKind.JOB_APPLICATION,
        recipient_id="client-1",
        sender_id="worker-3",
        context_data={"worker_name": "Jiro", "job_title": "100% Web_Site"},
        occurred_at=BASE + timedelta(days=2),
    )
    mark_read(session, notification_id=logo.id, recipient_id="client-1")
    return logo, message, site


def _ids(page):
    return [item.id for item in page.items]


def test_search_matches_title_or_message_case_insensitively(session, history) -> None:
    logo, message, site = history

    by_message = list_notifications(session, recipient_id="client-1", search="logo design")
    by_title = list_notifications(session, recipient_id="client-1", search="新着")

    assert _ids(by_message) == [logo.id]
    assert _ids(by_title) == [message.id]
    assert by_message.total == 1


def test_search_treats_wildcards_literally(session, history) -> None:
    _, _, site = history

    assert _ids(list_notifications(session, recipient_id="client-1", search="100%")) == [site.id]
    assert _ids(list_notifications(session, recipient_id="client-1", search="b_S")) == [site.id]
    assert list_notifications(session, recipient_id="client-1", search="%_%").total == 0


def test_read_status_filter(session, history) -> None:
    logo, message, site = history

    read = list_notifications(session, recipient_id="client-1", read_status=ReadStatus.READ)
    unread = list_notifications(session, recipient_id="client-1", read_status="unread")
    everything = list_notifications(session, recipient_id="client-1", read_status="all")

    assert _ids(read) == [logo.id]
    assert _ids(unread) == [site.id, message.id]
    assert everything.total == 3


def test_date_range_is_inclusive(session, history) -> None:
    logo, message, site = history

    page = list_notifications(
        session,
        recipient_id="client-1",
        created_from=message.created_at,
        created_to=site.created_at,
    )
    older = list_notifications(
        session, recipient_id="client-1", created_to=BASE + timedelta(hours=12)
    )

    assert _ids(page) == [site.id, message.id]
    assert _ids(older) == [logo.id]


def test_filters_combine(session, history) -> None:
    _, _, site = history

    page = list_notifications(
        session,
        recipient_id="client-1",
        kind=NotificationKind.JOB_APPLICATION,
        read_status=ReadStatus.UNREAD,
        search="jiro",
        created_from=BASE + timedelta(days=1),
    )

    assert _ids(page) == [site.id]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"unread_only": True, "read_status": "read"},
        {"created_from": BASE, "created_to": BASE - timedelta(days=1)},
        {"read_status": "archived"},
    ],
)
def test_inconsistent_filters_are_rejected(session, kwargs) -> None:
    with pytest.raises(ValueError):
        list_notifications(session, recipient_id="client-1", **kwargs)
