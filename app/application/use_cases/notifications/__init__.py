"""Public helpers for dispatching, reading and counting notifications."""

from .dispatch import dispatch_notification, safe_dispatch
from .errors import (
    DispatchError,
    InvalidRecipient,
    MissingTemplateField,
    NotificationNotFound,
    StorageWriteFailure,
    UnknownNotificationKind,
)
from .events import (
    notify_application_approved,
    notify_application_rejected,
    notify_job_application,
    notify_job_completed,
    notify_new_message,
    notify_payment_received,
    notify_system_announcement,
)
from .factory import NOTIFICATION_TEMPLATES, render_notification, required_fields, resolve_kind
from .list_notifications import (
    count_unread_by_category,
    get_unread_count,
    list_notifications,
)
from .read_state import (
    delete_notification,
    mark_all_read,
    mark_many_read,
    mark_read,
    mark_unread,
)
from .retention import purge_expired_notifications
from .unread import (
    UnreadBadge,
    UnreadSource,
    aggregate_unread,
    build_unread_sources,
)

__all__ = [
    "dispatch_notification",
    "safe_dispatch",
    "DispatchError",
    "InvalidRecipient",
    "MissingTemplateField",
    "NotificationNotFound",
    "StorageWriteFailure",
    "UnknownNotificationKind",
    "notify_application_approved",
    "notify_application_rejected",
    "notify_job_application",
    "notify_job_completed",
    "notify_new_message",
    "notify_payment_received",
    "notify_system_announcement",
    "NOTIFICATION_TEMPLATES",
    "render_notification",
    "required_fields",
    "resolve_kind",
    "count_unread_by_category",
    "get_unread_count",
    "list_notifications",
    "delete_notification",
    "mark_all_read",
    "mark_many_read",
    "mark_read",
    "mark_unread",
    "purge_expired_notifications",
    "UnreadBadge",
    "UnreadSource",
    "aggregate_unread",
    "build_unread_sources",
]
