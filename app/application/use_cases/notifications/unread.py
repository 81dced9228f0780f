"""Badge counter built from independently fallible unread sources."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import anyio
from sqlalchemy.orm import Session

from app.domain.entities import NotificationKind, UnreadSummary
from app.infrastructure.repositories import ChatRepository, NotificationRepository
from app.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

SOURCE_NOTIFICATIONS = "notifications"
SOURCE_CHAT = "chat"

# Chat messages are counted by the chat source, so their notifications are not.
DEFAULT_EXCLUDED_KINDS: tuple[NotificationKind, ...] = (NotificationKind.NEW_MESSAGE,)


@dataclass(frozen=True)
class UnreadSource:
    """Named counter; ``fetch`` may be a plain or an ``async`` callable."""

    name: str
    fetch: Callable[[], int] | Callable[[], Awaitable[int]]


async def aggregate_unread(sources: Sequence[UnreadSource], *, timeout: float) -> UnreadSummary:
    """Query every source concurrently and sum what answered within ``timeout``.

    A failing or slow source contributes zero and is reported in
    ``failed_sources`` instead of hiding the other counters.
    """

    results = await asyncio.gather(*(_fetch(source, timeout) for source in sources))

    by_source: dict[str, int] = {}
    failed: list[str] = []
    for source, value in zip(sources, results):
        if value is None:
            failed.append(source.name)
            by_source[source.name] = 0
        else:
            by_source[source.name] = value

    return UnreadSummary(
        total=sum(by_source.values()),
        by_source=by_source,
        failed_sources=failed,
        computed_at=now_in_app_timezone(),
    )


async def _fetch(source: UnreadSource, timeout: float) -> int | None:
    try:
        with anyio.fail_after(timeout):
            if inspect.iscoroutinefunction(source.fetch):
                value: Any = await source.fetch()
            else:
                value = await anyio.to_thread.run_sync(source.fetch, abandon_on_cancel=True)
    except TimeoutError:
        logger.warning("Unread source '%s' timed out after %.1fs", source.name, timeout)
        return None
    except Exception:
        logger.warning("Unread source '%s' failed", source.name, exc_info=True)
        return None

    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        logger.warning("Unread source '%s' returned an invalid count: %r", source.name, value)
        return None
    return value


class UnreadBadge:
    """Holds the last computed badge for one recipient.

    Refreshes may overlap (poll tick plus manual refresh); whichever finishes
    last is kept. When every source fails the previous total is kept and the
    badge is flagged ``stale`` rather than dropping to zero.
    """

    def __init__(self, sources: Sequence[UnreadSource], *, timeout: float = 3.0) -> None:
        self._sources = list(sources)
        self._timeout = timeout
        self.total = 0
        self.stale = False
        self.last_summary: UnreadSummary | None = None

    async def refresh(self) -> UnreadSummary:
        """Recompute the badge (mount, poll tick, read signal or navigation)."""

        summary = await aggregate_unread(self._sources, timeout=self._timeout)
        if self._sources and len(summary.failed_sources) == len(self._sources):
            logger.warning("All unread sources failed; keeping last known count %d", self.total)
            self.stale = True
        else:
            self.total = summary.total
            self.stale = False
        self.last_summary = summary
        return summary

    async def poll(self, interval: float, *, iterations: int | None = None) -> None:
        """Refresh every ``interval`` seconds, forever unless ``iterations`` is given."""

        count = 0
        while iterations is None or count < iterations:
            await self.refresh()
            count += 1
            if iterations is not None and count >= iterations:
                break
            await asyncio.sleep(interval)


def build_unread_sources(
    session_factory: Callable[[], Session],
    recipient_id: str,
    *,
    exclude_kinds: Iterable[NotificationKind] = DEFAULT_EXCLUDED_KINDS,
) -> list[UnreadSource]:
    """Return the server-side sources; each opens its own session."""

    excluded = tuple(exclude_kinds)

    def count_notifications() -> int:
        with session_factory() as session:
            return NotificationRepository(session).count_unread(
                recipient_id, exclude_kinds=excluded
            )

    def count_chat_messages() -> int:
        with session_factory() as session:
            return ChatRepository(session).count_unread_for_user(recipient_id).total_unread

    return [
        UnreadSource(SOURCE_NOTIFICATIONS, count_notifications),
        UnreadSource(SOURCE_CHAT, count_chat_messages),
    ]


__all__ = [
    "DEFAULT_EXCLUDED_KINDS",
    "SOURCE_CHAT",
    "SOURCE_NOTIFICATIONS",
    "UnreadBadge",
    "UnreadSource",
    "aggregate_unread",
    "build_unread_sources",
]
