"""Render domain events into notification records without touching storage."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final

from app.domain.entities import (
    NOTIFICATION_PRIORITIES,
    PRIORITY_NORMAL,
    Notification,
    NotificationKind,
)

from .errors import MissingTemplateField, UnknownNotificationKind

_PLACEHOLDER: Final[re.Pattern[str]] = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass(frozen=True)
class NotificationTemplate:
    title: str
    message: str
    icon: str
    color: str
    category: str

    def fields(self) -> frozenset[str]:
        return frozenset(_PLACEHOLDER.findall(self.title + self.message))


NOTIFICATION_TEMPLATES: Final[dict[NotificationKind, NotificationTemplate]] = {
    NotificationKind.JOB_APPLICATION: NotificationTemplate(
        title="新しい応募があります",
        message="{worker_name}さんが「{job_title}」に応募しました。",
        icon="📝",
        color="blue",
        category="applications",
    ),
    NotificationKind.APPLICATION_APPROVED: NotificationTemplate(
        title="応募が承認されました",
        message="「{job_title}」の応募が承認されました。おめでとうございます！",
        icon="✅",
        color="green",
        category="decisions",
    ),
    NotificationKind.APPLICATION_REJECTED: NotificationTemplate(
        title="応募結果のお知らせ",
        message="「{job_title}」の応募結果をご確認ください。",
        icon="📋",
        color="orange",
        category="decisions",
    ),
    NotificationKind.NEW_MESSAGE: NotificationTemplate(
        title="新着メッセージ",
        message="{sender_name}さんからメッセージが届きました。",
        icon="💬",
        color="blue",
        category="messages",
    ),
    NotificationKind.JOB_COMPLETED: NotificationTemplate(
        title="案件完了",
        message="「{job_title}」が完了しました。",
        icon="🎉",
        color="green",
        category="jobs",
    ),
    NotificationKind.PAYMENT_RECEIVED: NotificationTemplate(
        title="支払い完了",
        message="「{job_title}」の報酬 {amount}円を受け取りました。",
        icon="💰",
        color="green",
        category="payments",
    ),
    NotificationKind.SYSTEM_ANNOUNCEMENT: NotificationTemplate(
        title="システムからのお知らせ",
        message="{message}",
        icon="📢",
        color="purple",
        category="system",
    ),
}


def resolve_kind(kind: NotificationKind | str) -> NotificationKind:
    """Return ``kind`` as a member of the closed enumeration."""

    try:
        return NotificationKind(kind)
    except ValueError as exc:
        raise UnknownNotificationKind(kind) from exc


def get_template(kind: NotificationKind | str) -> NotificationTemplate:
    return NOTIFICATION_TEMPLATES[resolve_kind(kind)]


def required_fields(kind: NotificationKind | str) -> frozenset[str]:
    """Return the context keys the template for ``kind`` substitutes."""

    return get_template(kind).fields()


def render_notification(
    kind: NotificationKind | str,
    *,
    recipient_id: str,
    sender_id: str | None,
    context_data: Mapping[str, Any] | None,
    created_at: datetime | None,
    priority: str = PRIORITY_NORMAL,
) -> Notification:
    """Build an unsaved, unread :class:`Notification` for ``kind``.

    Every placeholder of the template must be present in ``context_data``;
    a partially rendered message is never produced. The function performs no
    I/O and reads no clock, so identical inputs give identical output.
    """

    resolved = resolve_kind(kind)
    template = NOTIFICATION_TEMPLATES[resolved]
    if priority not in NOTIFICATION_PRIORITIES:
        raise ValueError(f"Unsupported priority '{priority}'")

    context = dict(context_data or {})
    missing = {name for name in template.fields() if context.get(name) is None}
    if missing:
        raise MissingTemplateField(resolved.value, missing)

    return Notification(
        id=None,
        recipient_id=recipient_id,
        sender_id=sender_id,
        kind=resolved,
        title=_substitute(template.title, context),
        message=_substitute(template.message, context),
        icon=template.icon,
        color=template.color,
        category=template.category,
        priority=priority,
        context_data=context,
        is_read=False,
        created_at=created_at,
        read_at=None,
    )


def _substitute(text: str, context: Mapping[str, Any]) -> str:
    # Single pass: substituted values are never scanned for placeholders again.
    return _PLACEHOLDER.sub(lambda match: str(context[match.group(1)]), text)


__all__ = [
    "NOTIFICATION_TEMPLATES",
    "NotificationTemplate",
    "get_template",
    "render_notification",
    "required_fields",
    "resolve_kind",
]
