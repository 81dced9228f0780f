"""Errors raised while dispatching or updating notifications."""

from __future__ import annotations

from collections.abc import Iterable


class DispatchError(Exception):
    """Base class for failures that prevent a notification from being created."""


class UnknownNotificationKind(DispatchError, ValueError):
    def __init__(self, kind: object) -> None:
        super().__init__(f"Unknown notification kind: {kind!r}")
        self.kind = kind


class MissingTemplateField(DispatchError, ValueError):
    def __init__(self, kind: str, fields: Iterable[str]) -> None:
        self.kind = kind
        self.fields = sorted(fields)
        super().__init__(
            f"Notification kind '{kind}' requires fields: {', '.join(self.fields)}"
        )


class InvalidRecipient(DispatchError, ValueError):
    """The recipient is empty or is the actor of a non-system event."""


class StorageWriteFailure(DispatchError):
    """The rendered notification could not be persisted."""


class NotificationNotFound(LookupError):
    def __init__(self, notification_id: int) -> None:
        super().__init__(f"Notification {notification_id} not found")
        self.notification_id = notification_id


__all__ = [
    "DispatchError",
    "InvalidRecipient",
    "MissingTemplateField",
    "NotificationNotFound",
    "StorageWriteFailure",
    "UnknownNotificationKind",
]
