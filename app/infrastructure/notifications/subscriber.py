"""Websocket client that keeps a notification subscription alive.

The subscriber walks ``DISCONNECTED -> CONNECTING -> CONNECTED`` and back to
``DISCONNECTED`` whenever the socket drops, reconnecting with a bounded
exponential backoff. Nothing is buffered while disconnected: after every
successful (re)connection ``on_resync`` is awaited so the caller can re-fetch
the authoritative list from the REST API. A failing ``on_resync`` drops the
socket and goes through the normal reconnect path; errors raised by
``on_message`` are logged and the subscription carries on.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import random
from enum import Enum
from typing import Any, Awaitable, Callable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import websockets
from websockets.exceptions import WebSocketException

from .messages import (
    Pong,
    RealtimeMessage,
    SocketConnected,
    SocketDisconnected,
    parse_server_message,
)

logger = logging.getLogger(__name__)

MessageHandler = Callable[[RealtimeMessage], Any]
ResyncHandler = Callable[[], Any]
Connector = Callable[[str], Awaitable[Any]]


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ExponentialBackoff:
    """Delay generator capped at ``maximum`` seconds."""

    def __init__(
        self,
        *,
        initial: float = 0.5,
        maximum: float = 30.0,
        factor: float = 2.0,
        jitter: float = 0.1,
        rng: Callable[[], float] = random.random,
    ) -> None:
        if initial <= 0 or maximum < initial or factor < 1:
            raise ValueError("Backoff requires 0 < initial <= maximum and factor >= 1")
        self.initial = initial
        self.maximum = maximum
        self.factor = factor
        self.jitter = jitter
        self._rng = rng
        self.attempt = 0

    def next_delay(self) -> float:
        delay = min(self.maximum, self.initial * (self.factor ** self.attempt))
        self.attempt += 1
        if self.jitter:
            delay *= 1 + self.jitter * (self._rng() * 2 - 1)
        return max(0.0, min(self.maximum, delay))

    def reset(self) -> None:
        self.attempt = 0


def _default_connector(url: str) -> Awaitable[Any]:
    return websockets.connect(url)


class NotificationSubscriber:
    """Maintain a websocket subscription for one authenticated user."""

    def __init__(
        self,
        url: str,
        token: str,
        *,
        on_message: MessageHandler,
        on_resync: ResyncHandler | None = None,
        ping_interval: float = 20.0,
        backoff: ExponentialBackoff | None = None,
        connector: Connector | None = None,
    ) -> None:
        self._url = _with_token(url, token)
        self._on_message = on_message
        self._on_resync = on_resync
        self._ping_interval = ping_interval
        self._backoff = backoff or ExponentialBackoff()
        self._connector = connector or _default_connector
        self._state = ConnectionState.DISCONNECTED
        self._stop_event = asyncio.Event()
        self._connection: Any = None
        self.state_history: list[ConnectionState] = [ConnectionState.DISCONNECTED]

    @property
    def state(self) -> ConnectionState:
        return self._state

    async def run(self) -> None:
        """Connect and keep reconnecting until :meth:`stop` is called."""

        while not self._stop_event.is_set():
            self._set_state(ConnectionState.CONNECTING)
            try:
                self._connection = await self._connector(self._url)
            except (OSError, WebSocketException, asyncio.TimeoutError) as exc:
                logger.info("Notification socket connect failed: %s", exc)
                self._set_state(ConnectionState.DISCONNECTED)
                await self._sleep(self._backoff.next_delay())
                continue

            self._backoff.reset()
            self._set_state(ConnectionState.CONNECTED)
            await self._emit(SocketConnected())
            reason = await self._serve_connection(self._connection)
            self._connection = None
            self._set_state(ConnectionState.DISCONNECTED)
            await self._emit(SocketDisconnected(reason))
            if not self._stop_event.is_set():
                await self._sleep(self._backoff.next_delay())

    async def stop(self) -> None:
        """Stop reconnecting and close the current socket, if any."""

        self._stop_event.set()
        connection = self._connection
        if connection is not None:
            await connection.close()

    async def _serve_connection(self, connection: Any) -> str:
        try:
            if self._on_resync is not None:
                try:
                    await _maybe_await(self._on_resync())
                except Exception:
                    logger.exception("Notification resync failed; reconnecting")
                    return "resync_failed"
            return await self._receive(connection)
        finally:
            await _close_quietly(connection)

    async def _receive(self, connection: Any) -> str:
        pinger = asyncio.create_task(self._ping_loop(connection))
        try:
            while True:
                raw = await connection.recv()
                message = parse_server_message(_decode(raw))
                if message is None or isinstance(message, Pong):
                    continue
                await self._emit(message)
        except (OSError, WebSocketException) as exc:
            return "manual_disconnect" if self._stop_event.is_set() else (str(exc) or type(exc).__name__)
        finally:
            pinger.cancel()
            try:
                await pinger
            except asyncio.CancelledError:
                pass
            except (OSError, WebSocketException) as exc:
                logger.debug("Ping loop ended with %s", exc)

    async def _ping_loop(self, connection: Any) -> None:
        while True:
            await asyncio.sleep(self._ping_interval)
            await connection.send(json.dumps({"type": "ping"}))

    async def _emit(self, message: RealtimeMessage) -> None:
        try:
            await _maybe_await(self._on_message(message))
        except Exception:
            logger.exception("Notification handler failed on %s", type(message).__name__)

    async def _sleep(self, delay: float) -> None:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        logger.debug("Notification socket %s -> %s", self._state.value, state.value)
        self._state = state
        self.state_history.append(state)


def _with_token(url: str, token: str) -> str:
    parts = urlsplit(url)
    query = [(key, value) for key, value in parse_qsl(parts.query) if key != "token"]
    query.append(("token", token))
    return urlunsplit(parts._replace(query=urlencode(query)))


def _decode(raw: Any) -> Any:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return None
    return raw


async def _close_quietly(connection: Any) -> None:
    try:
        await connection.close()
    except (OSError, WebSocketException) as exc:
        logger.debug("Closing notification socket failed: %s", exc)


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


__all__ = ["ConnectionState", "ExponentialBackoff", "NotificationSubscriber"]
