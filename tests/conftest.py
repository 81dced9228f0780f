"""Shared fixtures: a throwaway SQLite database and a recording delivery channel."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

TEST_DB_PATH = Path(tempfile.gettempdir()) / "crowdwork_notifications_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["APP_TIMEZONE"] = "Asia/Tokyo"
os.environ["WS_IDLE_TIMEOUT_SECONDS"] = "5"

from app.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from app.infrastructure.database import Base, SessionLocal, engine, initialize_database  # noqa: E402
from app.infrastructure.notifications import (  # noqa: E402
    DeliveryChannel,
    DeliveryChannelUnavailable,
    NotificationPublisher,
)
from app.infrastructure.security import create_access_token  # noqa: E402


class RecordingChannel(DeliveryChannel):
    """In-memory channel that records what would have been pushed."""

    def __init__(self, online: set[str] | None = None) -> None:
        self.online = set(online or ())
        self.published: list[tuple[str, object]] = []

    async def publish(self, recipient_id, message):
        if recipient_id not in self.online:
            raise DeliveryChannelUnavailable(recipient_id)
        self.published.append((recipient_id, message))
        return 1

    def has_subscribers(self, recipient_id):
        return recipient_id in self.online


@pytest.fixture(autouse=True)
def reset_database():
    """Start every test from empty tables."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture()
def publisher(channel: RecordingChannel) -> NotificationPublisher:
    return NotificationPublisher(channel, timeout=1.0)


def _auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


@pytest.fixture()
def auth_headers():
    """Return a helper building bearer headers for a user id."""

    return _auth_headers
