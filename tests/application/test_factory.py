"""Tests for rendering notification templates."""

from __future__ import annotations

from datetime import datetime

import pytest

from app.application.use_cases.notifications import (
    NOTIFICATION_TEMPLATES,
    MissingTemplateField,
    UnknownNotificationKind,
    render_notification,
    required_fields,
)
from app.application.use_cases.notifications.factory import _PLACEHOLDER
from app.domain.entities import NotificationKind
from app.utils import get_app_timezone


CREATED_AT = datetime(2024, 5, 1, 9, 30, tzinfo=get_app_timezone())


def _render(kind, context, **kwargs):
    return render_notification(
        kind,
        recipient_id="client-1",
        sender_id="worker-1",
        context_data=context,
        created_at=CREATED_AT,
        **kwargs,
    )


def test_every_kind_has_a_template() -> None:
    assert set(NOTIFICATION_TEMPLATES) == set(NotificationKind)


def test_job_application_renders_title_and_message() -> None:
    notification = _render(
        NotificationKind.JOB_APPLICATION,
        {"worker_name": "Taro", "job_title": "Landing Page", "job_id": "job-9"},
    )

    assert notification.id is None
    assert notification.title == "新しい応募があります"
    assert notification.message == "Taroさんが「Landing Page」に応募しました。"
    assert notification.category == "applications"
    assert notification.icon == "📝"
    assert notification.is_read is False
    assert notification.read_at is None
    assert notification.created_at == CREATED_AT
    assert notification.context_data["job_id"] == "job-9"


def test_rendering_is_deterministic() -> None:
    context = {"job_title": "Logo", "amount": "12,000"}

    first = _render("payment_received", context, priority="high")
    second = _render("payment_received", context, priority="high")

    assert first == second
    assert first.message == "「Logo」の報酬 12,000円を受け取りました。"
    assert first.priority == "high"


def test_kind_accepts_plain_string() -> None:
    notification = _render("new_message", {"sender_name": "Hanako"})

    assert notification.kind is NotificationKind.NEW_MESSAGE
    assert notification.message == "Hanakoさんからメッセージが届きました。"


def test_unknown_kind_is_rejected() -> None:
    with pytest.raises(UnknownNotificationKind):
        _render("job_cancelled", {"job_title": "Logo"})


@pytest.mark.parametrize(
    "context",
    [
        {},
        {"worker_name": "Taro"},
        {"worker_name": "Taro", "job_title": None},
    ],
)
def test_missing_placeholder_raises(context) -> None:
    with pytest.raises(MissingTemplateField) as exc_info:
        _render(NotificationKind.JOB_APPLICATION, context)

    assert "job_title" in exc_info.value.fields


def test_substituted_values_are_not_expanded_again() -> None:
    notification = _render(
        NotificationKind.SYSTEM_ANNOUNCEMENT, {"message": "メンテナンス {job_title}"}
    )

    assert notification.message == "メンテナンス {job_title}"


def test_invalid_priority_is_rejected() -> None:
    with pytest.raises(ValueError):
        _render(NotificationKind.NEW_MESSAGE, {"sender_name": "Hanako"}, priority="urgent")


def test_required_fields_lists_placeholders() -> None:
    assert required_fields(NotificationKind.JOB_APPLICATION) == {"worker_name", "job_title"}
    assert required_fields("system_announcement") == {"message"}


@pytest.mark.parametrize("kind", list(NotificationKind), ids=lambda kind: kind.value)
def test_complete_context_leaves_no_placeholders(kind) -> None:
    context = {name: f"<{name}>" for name in required_fields(kind)}

    notification = _render(kind, context)

    rendered = notification.title + notification.message
    assert _PLACEHOLDER.search(rendered) is None
    assert all(value in rendered for value in context.values())
