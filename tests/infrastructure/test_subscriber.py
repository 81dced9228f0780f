"""Tests for the reconnecting websocket subscriber."""

from __future__ import annotations

import asyncio
import json

import pytest
from websockets.exceptions import ConnectionClosedOK

from app.infrastructure.notifications import (
    InitialSync,
    NewNotification,
    SocketConnected,
    SocketDisconnected,
)
from app.infrastructure.notifications.subscriber import (
    ConnectionState,
    ExponentialBackoff,
    NotificationSubscriber,
)

NOTIFICATION_PAYLOAD = {
    "id": 5,
    "recipient_id": "client-1",
    "sender_id": "worker-1",
    "kind": "job_application",
    "title": "新しい応募があります",
    "message": "Taroさんが「Logo」に応募しました。",
    "icon": "📝",
    "color": "blue",
    "category": "applications",
    "priority": "normal",
    "context_data": {"job_title": "Logo"},
    "is_read": False,
    "created_at": "2024-05-01T09:30:00+09:00",
    "read_at": None,
}


class FakeConnection:
    """Replays queued frames, then behaves like a socket closed by the server."""

    def __init__(self, frames=(), *, hold_open: bool = False) -> None:
        self._frames = list(frames)
        self._hold_open = hold_open
        self._closed = asyncio.Event()
        self.sent: list[str] = []

    async def recv(self):
        if self._frames:
            return self._frames.pop(0)
        if self._hold_open:
            await self._closed.wait()
        raise ConnectionClosedOK(None, None)

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def send(self, data: str) -> None:
        self.sent.append(data)

    async def close(self) -> None:
        self._closed.set()


def _fast_backoff() -> ExponentialBackoff:
    return ExponentialBackoff(initial=0.01, maximum=0.05, jitter=0)


def test_backoff_grows_and_is_capped() -> None:
    backoff = ExponentialBackoff(initial=1, maximum=8, factor=2, jitter=0)

    assert [backoff.next_delay() for _ in range(5)] == [1, 2, 4, 8, 8]
    backoff.reset()
    assert backoff.next_delay() == 1


def test_backoff_jitter_stays_within_bounds() -> None:
    high = ExponentialBackoff(initial=1, maximum=1, jitter=0.5, rng=lambda: 1.0)
    low = ExponentialBackoff(initial=1, maximum=4, jitter=0.5, rng=lambda: 0.0)

    assert high.next_delay() == 1
    assert low.next_delay() == pytest.approx(0.5)


@pytest.mark.parametrize(
    "kwargs", [{"initial": 0}, {"initial": 5, "maximum": 1}, {"factor": 0.5}]
)
def test_backoff_rejects_invalid_parameters(kwargs) -> None:
    with pytest.raises(ValueError):
        ExponentialBackoff(**kwargs)


def test_reconnects_after_failures_and_resyncs() -> None:
    attempts: list[str] = []
    received: list[object] = []
    resyncs: list[int] = []
    connection = FakeConnection(
        [
            json.dumps({"type": "init", "payload": []}),
            json.dumps({"type": "pong"}),
            "not json",
            json.dumps({"type": "newNotification", "payload": NOTIFICATION_PAYLOAD}),
        ]
    )

    async def connector(url: str):
        attempts.append(url)
        if len(attempts) < 3:
            raise OSError("connection refused")
        return connection

    async def scenario() -> NotificationSubscriber:
        async def on_message(message) -> None:
            received.append(message)
            if isinstance(message, SocketDisconnected):
                await subscriber.stop()

        subscriber = NotificationSubscriber(
            "ws://localhost/notifications/ws?token=old&lang=ja",
            "abc",
            on_message=on_message,
            on_resync=lambda: resyncs.append(1),
            ping_interval=10,
            backoff=_fast_backoff(),
            connector=connector,
        )
        await asyncio.wait_for(subscriber.run(), timeout=5)
        return subscriber

    subscriber = asyncio.run(scenario())

    assert attempts[0] == "ws://localhost/notifications/ws?lang=ja&token=abc"
    assert len(attempts) == 3
    assert resyncs == [1]
    assert [type(message) for message in received] == [
        SocketConnected,
        InitialSync,
        NewNotification,
        SocketDisconnected,
    ]
    assert received[2].notification.id == 5
    assert subscriber.state is ConnectionState.DISCONNECTED
    assert subscriber.state_history == [
        ConnectionState.DISCONNECTED,
        ConnectionState.CONNECTING,
        ConnectionState.DISCONNECTED,
        ConnectionState.CONNECTING,
        ConnectionState.DISCONNECTED,
        ConnectionState.CONNECTING,
        ConnectionState.CONNECTED,
        ConnectionState.DISCONNECTED,
    ]


def test_stop_closes_connection_and_sends_pings() -> None:
    received: list[object] = []

    async def scenario() -> FakeConnection:
        connection = FakeConnection(hold_open=True)

        async def connector(url: str):
            return connection

        subscriber = NotificationSubscriber(
            "ws://localhost/notifications/ws",
            "abc",
            on_message=received.append,
            ping_interval=0.01,
            backoff=_fast_backoff(),
            connector=connector,
        )
        task = asyncio.create_task(subscriber.run())
        while subscriber.state is not ConnectionState.CONNECTED:
            await asyncio.sleep(0.01)
        await asyncio.sleep(0.05)
        await subscriber.stop()
        await asyncio.wait_for(task, timeout=5)
        return connection

    connection = asyncio.run(scenario())

    assert json.loads(connection.sent[0]) == {"type": "ping"}
    assert isinstance(received[-1], SocketDisconnected)
    assert received[-1].reason == "manual_disconnect"


def test_failing_callbacks_do_not_stop_reconnection() -> None:
    received: list[object] = []
    resyncs: list[int] = []
    connections = [
        FakeConnection(hold_open=True),
        FakeConnection(
            [
                json.dumps({"type": "init", "payload": []}),
                json.dumps({"type": "newNotification", "payload": NOTIFICATION_PAYLOAD}),
            ]
        ),
    ]
    pending = list(connections)

    async def connector(url: str):
        return pending.pop(0)

    def on_resync() -> None:
        resyncs.append(1)
        if len(resyncs) == 1:
            raise RuntimeError("REST refetch failed")

    async def scenario() -> NotificationSubscriber:
        async def on_message(message) -> None:
            received.append(message)
            if isinstance(message, InitialSync):
                raise ValueError("handler bug")
            if isinstance(message, NewNotification):
                await subscriber.stop()

        subscriber = NotificationSubscriber(
            "ws://localhost/notifications/ws",
            "abc",
            on_message=on_message,
            on_resync=on_resync,
            ping_interval=10,
            backoff=_fast_backoff(),
            connector=connector,
        )
        await asyncio.wait_for(subscriber.run(), timeout=5)
        return subscriber

    subscriber = asyncio.run(scenario())

    assert resyncs == [1, 1]
    assert all(connection.closed for connection in connections)
    assert [type(message) for message in received] == [
        SocketConnected,
        SocketDisconnected,
        SocketConnected,
        InitialSync,
        NewNotification,
        SocketDisconnected,
    ]
    assert received[1].reason == "resync_failed"
    assert received[4].notification.id == 5
    assert received[-1].reason == "manual_disconnect"
    assert subscriber.state is ConnectionState.DISCONNECTED
