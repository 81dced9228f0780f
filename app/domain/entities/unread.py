"""Aggregated unread counters shown in the notification badge."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class UnreadSummary:
    """Sum of independently fetched unread counters.

    Sources listed in ``failed_sources`` contributed zero because they could not
    be queried, so ``total`` is a lower bound whenever ``partial`` is true.
    """

    total: int
    by_source: dict[str, int] = field(default_factory=dict)
    failed_sources: list[str] = field(default_factory=list)
    computed_at: datetime | None = None

    @property
    def partial(self) -> bool:
        return bool(self.failed_sources)


__all__ = ["UnreadSummary"]
