"""ConnectionManager — one realtime socket per session.

Wraps a python-socketio client. Inbound payloads are decoded into typed
mailbox events and handed to a sink; outbound commands go through
``emit``. The library's own reconnection is disabled: a bounded loop
(fixed attempts, fixed delay) runs in a daemon thread so attempts,
success and exhaustion surface as ReconnectAttempt / Reconnected /
ReconnectFailed events. Each attempt opens a fresh client.

Delivery is tiered. Handshake events (connect, connect_error, init,
maintenance, session_expired, reconnect failure) flow from ``connect()``
on; everything else flows only while subscriptions are attached.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Mapping
from urllib.parse import urlencode

import socketio

from crashclient.core.events import (
    ConnectError,
    Event,
    ReconnectAttempt,
    ReconnectFailed,
    Reconnected,
)
from crashclient.core.payloads import INBOUND_EVENTS, PayloadDecoder
from crashclient.core.types import SocketEvent

logger = logging.getLogger(__name__)

HANDSHAKE_EVENTS = frozenset(
    {
        SocketEvent.CONNECT.value,
        SocketEvent.CONNECT_ERROR.value,
        SocketEvent.INIT.value,
        SocketEvent.MAINTENANCE.value,
        SocketEvent.SESSION_EXPIRED.value,
    }
)

EventSink = Callable[[Event], None]
ClientFactory = Callable[[], Any]


def default_client_factory() -> socketio.Client:
    return socketio.Client(reconnection=False, logger=False, engineio_logger=False)


class ConnectionManager:
    """Owns the socket, its reconnection loop and subscription tiering."""

    def __init__(
        self,
        sink: EventSink,
        *,
        client_factory: ClientFactory = default_client_factory,
        reconnection_attempts: int = 5,
        reconnection_delay_s: float = 5.0,
    ) -> None:
        self._sink = sink
        self._client_factory = client_factory
        self._attempts = reconnection_attempts
        self._delay_s = reconnection_delay_s
        self._decoder = PayloadDecoder()

        self._lock = threading.Lock()
        self._client = None
        self._pending = None
        self._generation = 0
        self._url: str | None = None
        self._namespace = "/"
        self._transports: list[str] = ["websocket"]
        self._attached = False
        self._closing = False
        self._stop = threading.Event()
        self._reconnect_thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> ConnectionManager:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def connected(self) -> bool:
        client = self._client
        return bool(client is not None and client.connected)

    @property
    def attached(self) -> bool:
        return self._attached

    def configure_reconnection(self, attempts: int, delay_s: float) -> None:
        self._attempts = attempts
        self._delay_s = delay_s

    def connect(
        self,
        url: str,
        *,
        namespace: str = "/",
        query: Mapping[str, str] | None = None,
        transports: tuple[str, ...] | list[str] = ("websocket",),
        blocking: bool = False,
    ) -> None:
        """Open the socket. Failure is reported as a ConnectError event."""
        self._url = f"{url}?{urlencode(query)}" if query else url
        self._namespace = namespace
        self._transports = list(transports)
        with self._lock:
            self._generation += 1
            generation = self._generation
        self._closing = False
        self._stop.clear()

        if blocking:
            self._initial_open(generation)
        else:
            threading.Thread(
                target=self._initial_open, args=(generation,),
                daemon=True, name="socket-connect",
            ).start()

    def emit(self, event: str, payload: dict[str, Any] | None = None) -> bool:
        """Send a command. Returns False when the socket cannot take it."""
        client = self._client
        if client is None or not client.connected:
            logger.warning("Dropping outbound '%s': socket not connected", event)
            return False
        try:
            client.emit(event, payload or {}, namespace=self._namespace)
        except socketio.exceptions.SocketIOError as exc:
            logger.warning("Emit '%s' failed: %s", event, exc)
            return False
        return True

    def attach(self) -> None:
        """Start delivering game events. Idempotent."""
        self._attached = True

    def detach(self) -> None:
        self._attached = False

    def close(self) -> None:
        """Client-initiated shutdown: no reconnection, no further delivery.

        Bumping the generation retires any attempt still inside
        ``client.connect``; that attempt disposes of its socket itself.
        """
        self._closing = True
        self._attached = False
        self._stop.set()
        with self._lock:
            self._generation += 1
            client, self._client = self._client, None
            self._pending = None
        if client is not None:
            self._dispose(client)
        thread = self._reconnect_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)
        self._reconnect_thread = None

    def reconnect(self) -> bool:
        """Run the bounded reconnection loop. Returns whether it succeeded."""
        generation = self._generation
        for attempt in range(1, self._attempts + 1):
            if self._stop.wait(self._delay_s) or generation != self._generation:
                return False
            self._deliver(ReconnectAttempt(attempt), generation=generation)
            try:
                opened = self._open(generation)
            except socketio.exceptions.ConnectionError as exc:
                logger.warning("Reconnect attempt %d/%d failed: %s", attempt, self._attempts, exc)
                self._deliver(ConnectError(str(exc)), generation=generation)
                continue
            if not opened:
                return False
            logger.info("Reconnected on attempt %d", attempt)
            self._deliver(Reconnected(attempt), generation=generation)
            return True

        if not self._stop.is_set():
            logger.warning("Reconnection exhausted after %d attempts", self._attempts)
            self._deliver(ReconnectFailed(), handshake=True, generation=generation)
        return False

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _initial_open(self, generation: int) -> None:
        try:
            self._open(generation)
        except socketio.exceptions.ConnectionError as exc:
            logger.warning("Connection to %s failed: %s", self._url, exc)
            self._deliver(ConnectError(str(exc)), handshake=True, generation=generation)

    def _open(self, generation: int) -> bool:
        """Connect a fresh client and make it current.

        Returns False when the manager was closed or reconnected while the
        client was connecting; that client is disconnected and dropped.
        """
        client = self._client_factory()
        self._register(client)
        with self._lock:
            if generation != self._generation:
                return False
            self._pending = client
        try:
            client.connect(
                self._url,
                transports=self._transports,
                namespaces=[self._namespace],
            )
        except socketio.exceptions.ConnectionError:
            with self._lock:
                if self._pending is client:
                    self._pending = None
            raise

        with self._lock:
            if self._pending is client:
                self._pending = None
            current = generation == self._generation
            previous = self._client
            if current:
                self._client = client
        if not current:
            logger.info("Dropping socket opened after close")
            self._dispose(client)
            return False
        if previous is not None and previous is not client:
            self._dispose(previous)
        return True

    def _dispose(self, client) -> None:
        try:
            client.disconnect()
        except socketio.exceptions.SocketIOError as exc:
            logger.debug("Socket close failed: %s", exc)

    def _register(self, client) -> None:
        for name in INBOUND_EVENTS:
            if name == SocketEvent.DISCONNECT.value:
                continue
            client.on(name, self._make_handler(client, name), namespace=self._namespace)
        client.on(
            SocketEvent.DISCONNECT.value,
            lambda *args: self._on_disconnect(client, *args),
            namespace=self._namespace,
        )

    def _make_handler(self, client, name: str):
        def handler(*args):
            # Superseded clients can still fire until their transport closes.
            if client is not self._client and client is not self._pending:
                return
            data = args[0] if args else None
            self._receive(name, data)

        return handler

    def _receive(self, name: str, data: Any) -> None:
        result = self._decoder.decode(name, data)
        if not result.success:
            logger.warning("Dropping '%s' payload: %s", name, result.error)
            return
        self._deliver(result.event, handshake=name in HANDSHAKE_EVENTS)

    def _deliver(
        self, event: Event, handshake: bool = False, generation: int | None = None,
    ) -> None:
        if self._closing:
            return
        if generation is not None and generation != self._generation:
            return
        if handshake or self._attached:
            self._sink(event)

    def _on_disconnect(self, client, *args) -> None:
        if client is not self._client or self._closing:
            return
        reason = args[0] if args else None
        self._receive(SocketEvent.DISCONNECT.value, reason)
        if self._reconnect_thread is not None and self._reconnect_thread.is_alive():
            return
        self._reconnect_thread = threading.Thread(
            target=self.reconnect, daemon=True, name="socket-reconnect",
        )
        self._reconnect_thread.start()
