"""Notification hooks called by marketplace actions.

Every helper goes through :func:`safe_dispatch`, so approving an application or
sending a chat message succeeds even when its notification cannot be created.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from app.domain.entities import PRIORITY_HIGH, ChatMessage, ChatRoom, Notification, NotificationKind
from app.infrastructure.notifications import NotificationPublisher

from .dispatch import safe_dispatch


def notify_job_application(
    session: Session,
    *,
    client_id: str,
    worker_id: str,
    worker_name: str,
    job_id: str,
    job_title: str,
    application_id: str | None = None,
    publisher: NotificationPublisher | None = None,
) -> Notification | None:
    """Tell the job owner that ``worker_name`` applied."""

    return safe_dispatch(
        session,
        kind=NotificationKind.JOB_APPLICATION,
        recipient_id=client_id,
        sender_id=worker_id,
        context_data={
            "worker_name": worker_name,
            "job_id": job_id,
            "job_title": job_title,
            "application_id": application_id,
        },
        publisher=publisher,
    )


def notify_application_approved(
    session: Session,
    *,
    applicant_id: str,
    client_id: str,
    job_id: str,
    job_title: str,
    application_id: str | None = None,
    chat_room_id: int | None = None,
    publisher: NotificationPublisher | None = None,
) -> Notification | None:
    """Inform the applicant that the client approved the application."""

    context = {
        "job_id": job_id,
        "job_title": job_title,
        "application_id": application_id,
    }
    if chat_room_id is not None:
        context["chat_room_id"] = chat_room_id
    return safe_dispatch(
        session,
        kind=NotificationKind.APPLICATION_APPROVED,
        recipient_id=applicant_id,
        sender_id=client_id,
        context_data=context,
        priority=PRIORITY_HIGH,
        publisher=publisher,
    )


def notify_application_rejected(
    session: Session,
    *,
    applicant_id: str,
    client_id: str,
    job_id: str,
    job_title: str,
    application_id: str | None = None,
    publisher: NotificationPublisher | None = None,
) -> Notification | None:
    return safe_dispatch(
        session,
        kind=NotificationKind.APPLICATION_REJECTED,
        recipient_id=applicant_id,
        sender_id=client_id,
        context_data={
            "job_id": job_id,
            "job_title": job_title,
            "application_id": application_id,
        },
        publisher=publisher,
    )


def notify_new_message(
    session: Session,
    *,
    room: ChatRoom,
    message: ChatMessage,
    sender_name: str,
    publisher: NotificationPublisher | None = None,
) -> Notification | None:
    """Notify the other participant of ``room`` about ``message``."""

    return safe_dispatch(
        session,
        kind=NotificationKind.NEW_MESSAGE,
        recipient_id=room.other_participant(message.sender_id),
        sender_id=message.sender_id,
        context_data={
            "sender_name": sender_name,
            "chat_room_id": room.id,
            "job_id": room.job_id,
            "message_id": message.id,
        },
        publisher=publisher,
    )


def notify_job_completed(
    session: Session,
    *,
    recipient_ids: Iterable[str],
    actor_id: str | None,
    job_id: str,
    job_title: str,
    publisher: NotificationPublisher | None = None,
) -> list[Notification]:
    """Inform both parties (except the actor) that the job was completed."""

    created: list[Notification] = []
    for recipient_id in _unique(recipient_ids):
        if recipient_id == actor_id:
            continue
        notification = safe_dispatch(
            session,
            kind=NotificationKind.JOB_COMPLETED,
            recipient_id=recipient_id,
            sender_id=actor_id,
            context_data={"job_id": job_id, "job_title": job_title},
            publisher=publisher,
        )
        if notification is not None:
            created.append(notification)
    return created


def notify_payment_received(
    session: Session,
    *,
    worker_id: str,
    client_id: str | None,
    job_id: str,
    job_title: str,
    amount: int,
    publisher: NotificationPublisher | None = None,
) -> Notification | None:
    return safe_dispatch(
        session,
        kind=NotificationKind.PAYMENT_RECEIVED,
        recipient_id=worker_id,
        sender_id=client_id,
        context_data={"job_id": job_id, "job_title": job_title, "amount": f"{amount:,}"},
        priority=PRIORITY_HIGH,
        publisher=publisher,
    )


def notify_system_announcement(
    session: Session,
    *,
    recipient_ids: Iterable[str],
    message: str,
    publisher: NotificationPublisher | None = None,
) -> list[Notification]:
    """Fan a system message out to ``recipient_ids``."""

    created: list[Notification] = []
    for recipient_id in _unique(recipient_ids):
        notification = safe_dispatch(
            session,
            kind=NotificationKind.SYSTEM_ANNOUNCEMENT,
            recipient_id=recipient_id,
            sender_id=None,
            context_data={"message": message},
            publisher=publisher,
        )
        if notification is not None:
            created.append(notification)
    return created


def _unique(values: Iterable[str]) -> list[str]:
    unique: list[str] = []
    for value in values:
        if value and value not in unique:
            unique.append(value)
    return unique


__all__ = [
    "notify_application_approved",
    "notify_application_rejected",
    "notify_job_application",
    "notify_job_completed",
    "notify_new_message",
    "notify_payment_received",
    "notify_system_announcement",
]
