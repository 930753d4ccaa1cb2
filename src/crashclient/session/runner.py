"""SessionRunner — mailbox, effect interpreter and snapshot publisher.

Every event (server push, UI intent, timer firing, background result) is
posted to one FIFO mailbox. A single worker takes events one at a time,
runs the reducer, stores the new state, publishes a snapshot and then
interprets the returned effects. Nothing else writes session state.

Published contexts are never mutated afterwards: the reducer always
returns a fresh copy, so observers can hold on to a snapshot freely.
"""

from __future__ import annotations

import logging
import platform
import queue
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

import crashclient
from crashclient.config import ClientConfig, ProviderInfo
from crashclient.core import effects as fx
from crashclient.core.errors import ApiError, ErrorKind
from crashclient.core.events import (
    ApiFailed,
    ApiSucceeded,
    AssetsReady,
    Event,
    GameLoadFailed,
    GameLoaded,
    GoToConnectionError,
    LoadingProgress,
    Start,
)
from crashclient.core.game import GameLoader, GameRenderer, HeadlessLoader
from crashclient.core.telemetry import TelemetryEntry, TelemetryLogger, event_fields
from crashclient.core.types import SocketEvent
from crashclient.session.models import SessionContext, SessionSnapshot
from crashclient.session.reducer import initial_context, reduce
from crashclient.session.visibility import HeartbeatVisibilityPort, VisibilityPort
from crashclient.transport.api import CrashApiClient
from crashclient.transport.connection import ConnectionManager

logger = logging.getLogger(__name__)

_SENTINEL = object()

SnapshotListener = Callable[[SessionSnapshot], None]
PhaseListener = Callable[[fx.PublishPhase], None]
Spawn = Callable[[Callable[[], None]], object]


def device_label() -> str:
    return f"crashclient/{crashclient.__version__} ({platform.system()} {platform.machine()})"


class TimerService:
    """Keyed one-shot timers that post an event when they fire.

    Starting a key that is already running replaces it. A timer that was
    cancelled or replaced never delivers, even if its thread already woke.
    """

    def __init__(
        self,
        post: Callable[[Event], None],
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self._post = post
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timers: dict[str, threading.Timer] = {}

    @property
    def active(self) -> set[str]:
        with self._lock:
            return set(self._timers)

    def start(self, key: str, delay_s: float, event: Event) -> None:
        self.cancel(key)
        timer = self._timer_factory(delay_s, lambda: self._fire(key, timer, event))
        timer.daemon = True
        with self._lock:
            self._timers[key] = timer
        timer.start()

    def cancel(self, key: str) -> None:
        with self._lock:
            timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    def cancel_all(self) -> None:
        with self._lock:
            timers, self._timers = list(self._timers.values()), {}
        for timer in timers:
            timer.cancel()

    def _fire(self, key: str, timer: threading.Timer, event: Event) -> None:
        with self._lock:
            if self._timers.get(key) is not timer:
                return
            del self._timers[key]
        self._post(event)


class SessionRunner:
    """Drives one session: owns the mailbox and every collaborator."""

    def __init__(
        self,
        config: ClientConfig,
        provider: ProviderInfo,
        *,
        environment_flags: dict[str, bool] | None = None,
        loader: GameLoader | None = None,
        connection: ConnectionManager | None = None,
        api: CrashApiClient | None = None,
        visibility: VisibilityPort | None = None,
        timers: TimerService | None = None,
        telemetry: TelemetryLogger | None = None,
        spawn: Spawn | None = None,
        session_id: str | None = None,
    ) -> None:
        self._config = config
        self._session_id = session_id or uuid.uuid4().hex[:12]
        self._mailbox: queue.Queue = queue.Queue()
        self._loader = loader or HeadlessLoader()
        self._connection = connection or ConnectionManager(
            self.post,
            reconnection_attempts=config.session.reconnection_attempts,
            reconnection_delay_s=config.session.reconnection_delay_s,
        )
        self._api = api or CrashApiClient(timeout_s=config.session.api_timeout_s)
        self._visibility = visibility or HeartbeatVisibilityPort()
        self._timers = timers or TimerService(self.post)
        self._executor: ThreadPoolExecutor | None = None
        if spawn is None:
            self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="session-io")
            spawn = self._executor.submit
        self._spawn = spawn

        if telemetry is None and config.journal_dir is not None:
            telemetry = TelemetryLogger(config.journal_dir, self._session_id)
        self._telemetry = telemetry

        self._context: SessionContext = initial_context(
            config, provider, environment_flags, device_label()
        )
        self._screen = self._context.screen
        self._version = 0
        self._game: GameRenderer | None = None
        self._listeners: list[SnapshotListener] = []
        self._phase_listeners: list[PhaseListener] = []
        self._thread: threading.Thread | None = None

        self._effect_handlers: dict[type, Callable] = {
            fx.Connect: self._do_connect,
            fx.Disconnect: lambda e: self._connection.close(),
            fx.Emit: lambda e: self._connection.emit(e.event, e.payload),
            fx.RequestInit: lambda e: self._connection.emit(SocketEvent.INIT.value, {}),
            fx.AttachSubscriptions: lambda e: self._connection.attach(),
            fx.DetachSubscriptions: lambda e: self._connection.detach(),
            fx.StartTimer: lambda e: self._timers.start(e.key, e.delay_s, e.event),
            fx.CancelTimer: lambda e: self._timers.cancel(e.key),
            fx.CancelAllTimers: lambda e: self._timers.cancel_all(),
            fx.StartVisibility: lambda e: self._visibility.start(self.post),
            fx.StopVisibility: lambda e: self._visibility.stop(),
            fx.ConfigureApi: self._do_configure_api,
            fx.ApiRequest: lambda e: self._spawn(lambda: self._run_api(e)),
            fx.LoadGame: lambda e: self._spawn(self._load_game),
            fx.PrepareStage: lambda e: self._spawn(self._prepare_stage),
            fx.RenderCall: self._do_render,
            fx.Dispatch: lambda e: self.post(e.event),
            fx.PublishPhase: self._do_publish_phase,
        }

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> SessionRunner:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def game(self) -> GameRenderer | None:
        return self._game

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(self._version, self._screen, self._context)

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a snapshot observer. Returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def on_phase(self, listener: PhaseListener) -> None:
        self._phase_listeners.append(listener)

    def post(self, event: Event) -> None:
        """Thread-safe: enqueue an event for the worker."""
        self._mailbox.put(event)

    def process_pending(self) -> int:
        """Drain the mailbox on the calling thread. Returns events processed."""
        processed = 0
        while True:
            try:
                event = self._mailbox.get_nowait()
            except queue.Empty:
                return processed
            if event is _SENTINEL:
                continue
            self._process(event)
            processed += 1

    def start(self) -> None:
        """Post Start and run the worker in a background daemon thread."""
        if self._thread is not None:
            return
        self.post(Start())
        self._thread = threading.Thread(
            target=self._worker_loop, daemon=True, name="session-mailbox",
        )
        self._thread.start()

    def stop(self, timeout_s: float = 5.0) -> None:
        if self._thread is not None:
            self._mailbox.put(_SENTINEL)
            self._thread.join(timeout=timeout_s)
            self._thread = None
        self._timers.cancel_all()
        self._visibility.stop()
        self._connection.close()
        if self._executor is not None:
            self._executor.shutdown(wait=False)
        if self._telemetry is not None:
            self._telemetry.finalize_session(self._screen.value, self._version)

    # ------------------------------------------------------------------
    # Mailbox
    # ------------------------------------------------------------------

    def _worker_loop(self) -> None:
        while True:
            event = self._mailbox.get()
            if event is _SENTINEL:
                break
            try:
                self._process(event)
            except Exception:
                logger.exception("Failed to process %s", type(event).__name__)

    def _process(self, event: Event) -> None:
        before = self._screen
        reduction = reduce(self._screen, self._context, event)
        self._screen = reduction.screen
        self._context = reduction.context
        self._version += 1

        if self._telemetry is not None:
            self._telemetry.log_event(
                TelemetryEntry(
                    sequence=self._version,
                    event_type=event.type_name,
                    event=event_fields(event),
                    screen_before=before.value,
                    screen_after=self._screen.value,
                    phase=self._context.phase.value if self._context.phase else None,
                    effects=[e.type_name for e in reduction.effects],
                    connected=self._context.connected,
                    balance=self._context.balance,
                )
            )

        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener failed")

        for effect in reduction.effects:
            self._execute(effect)

    def _execute(self, effect: fx.Effect) -> None:
        handler = self._effect_handlers.get(type(effect))
        if handler is None:
            logger.warning("No interpreter for effect %s", effect.type_name)
            return
        handler(effect)

    # ------------------------------------------------------------------
    # Effect interpreters
    # ------------------------------------------------------------------

    def _do_connect(self, effect: fx.Connect) -> None:
        self._connection.configure_reconnection(
            effect.reconnection_attempts, effect.reconnection_delay_s
        )
        self._connection.connect(
            effect.url,
            namespace=effect.namespace,
            query=effect.query,
            transports=effect.transports,
        )

    def _do_configure_api(self, effect: fx.ConfigureApi) -> None:
        if effect.base_url:
            self._api.set_base_url(effect.base_url)
        if effect.session_id is not None:
            self._api.set_session_id(effect.session_id)

    def _do_render(self, effect: fx.RenderCall) -> None:
        game = self._game
        if game is None:
            logger.debug("Render call %s before the game exists", effect.method)
            return
        try:
            getattr(game, effect.method)(**effect.kwargs)
        except Exception as exc:
            logger.warning("Renderer %s failed: %s", effect.method, exc)

    def _do_publish_phase(self, effect: fx.PublishPhase) -> None:
        for listener in list(self._phase_listeners):
            try:
                listener(effect)
            except Exception:
                logger.exception("Phase listener failed")

    # ------------------------------------------------------------------
    # Background work
    # ------------------------------------------------------------------

    def _run_api(self, effect: fx.ApiRequest) -> None:
        try:
            data = self._api.fetch(effect.category, effect.params)
        except (ApiError, ValueError, KeyError) as exc:
            self.post(ApiFailed(effect.category, effect.seq, str(exc)))
            return
        self.post(ApiSucceeded(effect.category, effect.seq, data))

    def _load_game(self) -> None:
        try:
            game = self._loader.load(self._config, self._context.provider)
        except Exception as exc:
            logger.error("Game load failed: %s", exc)
            self.post(GameLoadFailed(str(exc)))
            return
        self._game = game
        self.post(GameLoaded())

    def _prepare_stage(self) -> None:
        game = self._game
        if game is None:
            self.post(GameLoadFailed("no game instance to prepare"))
            return
        try:
            game.create_load_stage(lambda progress: self.post(LoadingProgress(progress)))
        except Exception as exc:
            logger.error("Load stage failed: %s", exc)
            self.post(
                GoToConnectionError(
                    kind=ErrorKind.ASSET_OR_BOOT_FAILURE,
                    description="connection-error.assets",
                    details=str(exc),
                )
            )
            return
        self.post(AssetsReady())
