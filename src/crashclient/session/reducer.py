"""Session reducer — the single writer of session state.

    reduce(screen, context, event) -> Reduction(screen, context, effects)

The reducer works on a deep copy of the context and never performs I/O:
socket emission, timers, API calls and renderer calls are returned as
effects for the runner to interpret. Follow-up events are returned as
Dispatch effects and processed after the current event.

Screens:

    initialize -> loading -> gameWelcome -> game
    initialize | loading | gameWelcome | game -> maintenance | connectionError
    maintenance | connectionError -> initialize   (Reset)
    loading -> error                              (terminal)
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, NamedTuple

from crashclient.config import ClientConfig, ProviderInfo, resolve_environment, resolve_server_config
from crashclient.core.effects import (
    ApiRequest,
    AttachSubscriptions,
    CancelAllTimers,
    CancelTimer,
    ConfigureApi,
    Connect,
    DetachSubscriptions,
    Disconnect,
    Dispatch,
    Effect,
    Emit,
    LoadGame,
    PrepareStage,
    PublishPhase,
    RenderCall,
    RequestInit,
    StartTimer,
    StartVisibility,
    StopVisibility,
)
from crashclient.core import events as ev
from crashclient.core.errors import ConnectionFault, ErrorKind
from crashclient.core.types import (
    ACTIVE_SCREENS,
    REJECTION_CODES,
    ApiCategory,
    NotificationType,
    NotifyCode,
    Phase,
    Screen,
    SocketEvent,
)
from crashclient.session import history, ticker
from crashclient.session.models import BetSettings, PlayerProfile, SessionContext
from crashclient.session.notifications import NotificationQueue
from crashclient.session.panels import BetPanelManager
from crashclient.session.visibility import is_stale

logger = logging.getLogger(__name__)

INIT_TIMER = "init-handshake"
CHAT_COOLDOWN_TIMER = "chat-cooldown"
RECONNECT_BANNER_ID = "reconnect-attempt"


class Reduction(NamedTuple):
    screen: Screen
    context: SessionContext
    effects: list[Effect]


def initial_context(
    config: ClientConfig,
    provider: ProviderInfo,
    environment_flags: dict[str, bool] | None = None,
    device: str = "crashclient",
) -> SessionContext:
    return SessionContext(
        config=config,
        provider=provider,
        environment_flags=dict(environment_flags or {}),
        device=device,
        stats_count=config.session.stats_count,
    )


def reduce(screen: Screen, context: SessionContext, event: ev.Event) -> Reduction:
    """Apply one event. The input context is never mutated."""
    step = _Step(screen, copy.deepcopy(context))
    step.handle(event)
    step.ctx.screen = step.screen
    return Reduction(step.screen, step.ctx, step.effects)


def _fault(kind: ErrorKind, title: str, description: str, details: str | None = None):
    return ConnectionFault(kind=kind, title=title, description=description, details=details)


def _maintenance_fault(details: str | None = None) -> ConnectionFault:
    return _fault(ErrorKind.MAINTENANCE_MODE, "maintenance.title", "maintenance.desc", details)


class _Step:
    """Mutable working state for a single reduction."""

    def __init__(self, screen: Screen, ctx: SessionContext):
        self.screen = screen
        self.effects: list[Effect] = []
        self._bind(ctx)

    def _bind(self, ctx: SessionContext) -> None:
        self.ctx = ctx
        self.notices = NotificationQueue(ctx, self.effects)
        self.panels = BetPanelManager(ctx, self.effects, self.notices)

    def handle(self, event: ev.Event) -> None:
        if self.screen == Screen.ERROR:
            logger.debug("%s ignored: session is in terminal error", event.type_name)
            return

        if isinstance(event, ev.Start):
            if self.screen == Screen.INITIALIZE and not self.ctx.started:
                self._enter_initialize()
            return
        if isinstance(event, ev.Reset):
            if self.screen in (Screen.MAINTENANCE, Screen.CONNECTION_ERROR):
                self._enter_initialize()
            return

        if self.screen not in ACTIVE_SCREENS:
            if isinstance(event, ev.NotificationExpired):
                self.notices.expire(event.id)
            return

        handler = _SCREEN_HANDLERS[self.screen].get(type(event)) or _COMMON_HANDLERS.get(
            type(event)
        )
        if handler is None:
            logger.debug("%s ignored in %s", event.type_name, self.screen.value)
            return
        handler(self, event)

    # ------------------------------------------------------------------
    # Screen entry and exit
    # ------------------------------------------------------------------

    def _enter_initialize(self) -> None:
        old = self.ctx
        self._bind(
            initial_context(old.config, old.provider, old.environment_flags, old.device)
        )
        self.screen = Screen.INITIALIZE
        self.ctx.started = True

        server = resolve_server_config(self.ctx.config.game, self.ctx.environment_flags)
        if server is None:
            env = resolve_environment(self.ctx.environment_flags)
            logger.error("No server endpoints configured for environment '%s'", env)
            self.screen = Screen.MAINTENANCE
            self.ctx.fault = _maintenance_fault(f"no endpoints for environment '{env}'")
            return

        session = self.ctx.config.session
        self.effects.extend(
            [
                ConfigureApi(base_url=server.http_url),
                Connect(
                    url=server.ws_url,
                    namespace=server.namespace,
                    query=self.ctx.provider.connection_query(self.ctx.device),
                    transports=server.transports,
                    reconnection_attempts=session.reconnection_attempts,
                    reconnection_delay_s=session.reconnection_delay_s,
                ),
                StartTimer(INIT_TIMER, session.init_timeout_s, ev.InitTimeout()),
                StartVisibility(),
            ]
        )

    def _enter_loading(self, payload: dict[str, Any]) -> None:
        self.screen = Screen.LOADING
        self._seed(payload)
        self.effects.append(LoadGame())

    def _enter_game_welcome(self) -> None:
        self.screen = Screen.GAME_WELCOME
        self.effects.append(PrepareStage())

    def _enter_game(self) -> None:
        self.screen = Screen.GAME
        self.effects.extend([AttachSubscriptions(), RequestInit()])

    def _halt(self, target: Screen, fault: ConnectionFault) -> None:
        """Leave the connected screens, releasing every subscription and timer."""
        logger.warning(
            "Session halted in %s -> %s: %s (%s)",
            self.screen.value, target.value, fault.kind.value, fault.details or "-",
        )
        if self.screen == Screen.GAME:
            self.effects.extend([DetachSubscriptions(), RenderCall("suspend")])
        self.effects.extend([CancelAllTimers(), StopVisibility(), Disconnect()])
        self.ctx.connected = False
        self.ctx.fault = fault
        self.screen = target

    def _seed(self, payload: dict[str, Any]) -> None:
        """Populate the context from an init payload. Existing panels survive."""
        session = self.ctx.config.session
        player = PlayerProfile.from_payload(payload.get("player") or {})
        self.ctx.player = player
        self.ctx.bet_settings = BetSettings.from_payload(payload.get("settings") or {})
        stats_count = payload.get("statsCount")
        self.ctx.stats_count = session.stats_count if stats_count is None else stats_count
        self.ctx.round_history = list(payload.get("rounds") or [])[: session.max_round_history]
        self.ctx.chat_messages = list(payload.get("messages") or [])[-session.max_chat_messages:]
        self.ctx.live_wagers = ticker.rank(
            (ticker.entry_from_wire(b) for b in payload.get("boomers") or []),
            self.ctx.stats_count,
        )
        self.ctx.jackpot = payload.get("jackpot")
        self.ctx.client_seed = player.client_seed or ""
        self.panels.seed()
        self.effects.append(ConfigureApi(session_id=player.session_id))

    # ------------------------------------------------------------------
    # Handshake screens
    # ------------------------------------------------------------------

    def _on_init_handshake(self, event: ev.InitReceived) -> None:
        self.effects.append(CancelTimer(INIT_TIMER))
        self.ctx.connected = True
        self._enter_loading(event.payload)

    def _on_init_timeout(self, event: ev.InitTimeout) -> None:
        timeout = self.ctx.config.session.init_timeout_s
        self._halt(
            Screen.CONNECTION_ERROR,
            _fault(
                ErrorKind.CONNECTION_INIT_TIMEOUT,
                "connection-error.title",
                "connection-error.init",
                f"no init payload within {timeout:g}s",
            ),
        )

    def _on_handshake_error(self, event: ev.ConnectError) -> None:
        self._halt(
            Screen.CONNECTION_ERROR,
            _fault(
                ErrorKind.CONNECTION_INIT_TIMEOUT,
                "connection-error.title",
                "connection-error.init",
                event.error,
            ),
        )

    def _on_game_loaded(self, event: ev.GameLoaded) -> None:
        self._enter_game_welcome()

    def _on_game_load_failed(self, event: ev.GameLoadFailed) -> None:
        logger.error("Game boot failed: %s", event.error)
        self.effects.extend([CancelAllTimers(), StopVisibility(), Disconnect()])
        self.ctx.connected = False
        self.ctx.fault = _fault(
            ErrorKind.ASSET_OR_BOOT_FAILURE, "error.title", "error.boot", event.error
        )
        self.screen = Screen.ERROR

    def _on_assets_ready(self, event: ev.AssetsReady) -> None:
        self._enter_game()

    # ------------------------------------------------------------------
    # Any connected screen
    # ------------------------------------------------------------------

    def _on_reseed(self, event: ev.InitReceived) -> None:
        self.ctx.connected = True
        self._seed(event.payload)

    def _on_visibility_hidden(self, event: ev.VisibilityHidden) -> None:
        self.ctx.last_visibility_ms = event.timestamp_ms
        self.ctx.is_visible = False

    def _on_visibility_shown(self, event: ev.VisibilityShown) -> None:
        threshold_ms = int(self.ctx.config.session.visibility_threshold_s * 1000)
        was_hidden = not self.ctx.is_visible
        if was_hidden and is_stale(self.ctx.last_visibility_ms, event.timestamp_ms, threshold_ms):
            elapsed = event.timestamp_ms - self.ctx.last_visibility_ms
            self._halt(
                Screen.CONNECTION_ERROR,
                _fault(
                    ErrorKind.CONNECTION_LOST,
                    "connection-error.title",
                    "connection-error.desc",
                    f"hidden for {elapsed} ms",
                ),
            )
            return
        self.ctx.last_visibility_ms = event.timestamp_ms
        self.ctx.is_visible = True

    def _on_reconnect_failed(self, event: ev.ReconnectFailed) -> None:
        self._halt(
            Screen.CONNECTION_ERROR,
            _fault(
                ErrorKind.RECONNECT_EXHAUSTED,
                "connection-error.title",
                "connection-error.desc",
                "reconnection attempts exhausted",
            ),
        )

    def _on_maintenance_signal(self, event: ev.MaintenanceSignal) -> None:
        self._halt(Screen.CONNECTION_ERROR, _maintenance_fault("server maintenance"))

    def _on_session_expired(self, event: ev.SessionExpired) -> None:
        self._halt(
            Screen.CONNECTION_ERROR,
            _fault(ErrorKind.SESSION_EXPIRED, "session.title", "session.desc"),
        )

    def _on_go_to_maintenance(self, event: ev.GoToMaintenance) -> None:
        self._halt(Screen.MAINTENANCE, _maintenance_fault(event.details))

    def _on_go_to_connection_error(self, event: ev.GoToConnectionError) -> None:
        self._halt(
            Screen.CONNECTION_ERROR,
            _fault(event.kind, event.title, event.description, event.details),
        )

    def _on_loading_progress(self, event: ev.LoadingProgress) -> None:
        self.ctx.loading_progress = max(0.0, min(event.progress, 1.0))

    def _on_canvas_ready(self, event: ev.CanvasReady) -> None:
        if self.screen not in (Screen.GAME_WELCOME, Screen.GAME) or self.ctx.stage_created:
            return
        self.ctx.stage_created = True
        self.effects.extend(
            [
                RenderCall("create_game_stage"),
                RenderCall(
                    "set_version_text",
                    {"environment": resolve_environment(self.ctx.environment_flags)},
                ),
            ]
        )

    def _on_add_notification(self, event: ev.AddNotification) -> None:
        self.notices.add(event.type, event.message, event.duration, event.id)

    def _on_remove_notification(self, event: ev.RemoveNotification) -> None:
        self.notices.remove(event.id)

    def _on_notification_expired(self, event: ev.NotificationExpired) -> None:
        self.notices.expire(event.id)

    def _on_low_balance_released(self, event: ev.LowBalanceThrottleElapsed) -> None:
        self.panels.release_low_balance_notice()

    def _on_chat_cooldown_elapsed(self, event: ev.ChatCooldownElapsed) -> None:
        self.ctx.chat_cooldown = False

    # ------------------------------------------------------------------
    # Game: round state
    # ------------------------------------------------------------------

    def _on_state_update(self, event: ev.StateUpdate) -> None:
        if event.maintenance:
            self._halt(Screen.CONNECTION_ERROR, _maintenance_fault("maintenance flag in state"))
            return

        self._render_state(event)

        if event.bet_count is not None:
            self.ctx.total_bet_count = event.bet_count
        self.ctx.multiplier = event.multiplier
        self.ctx.countdown = event.countdown

        previous = self.ctx.phase
        if event.phase != previous:
            self.ctx.phase = event.phase
            if event.phase == Phase.BETTING:
                self.ctx.live_wagers = []
            self.panels.on_phase_edge(previous, event.phase)

        self._check_chat_unlock()
        self.effects.append(PublishPhase(event.phase, event.multiplier, event.countdown))

    def _render_state(self, event: ev.StateUpdate) -> None:
        if self.ctx.stage_created and not self.ctx.game_state_created:
            self.ctx.game_state_created = True
            currency = (self.ctx.player and self.ctx.player.currency) or self.ctx.provider.currency
            self.effects.append(
                RenderCall("create_game_state", {"phase": event.phase.value, "currency": currency})
            )

        if event.phase == Phase.BETTING:
            self.effects.append(RenderCall("show_betting", {"countdown": event.countdown}))
        elif event.phase == Phase.WAITING:
            self.effects.append(RenderCall("show_waiting", {"multiplier": event.multiplier}))
            self.ctx.cashout_count = 0
            self.ctx.cashout_amount = 0.0
        elif event.phase == Phase.PLAYING:
            if event.ended:
                self.effects.append(
                    RenderCall(
                        "show_result",
                        {"multiplier": event.multiplier, "countdown": event.countdown},
                    )
                )
            else:
                self.effects.append(RenderCall("show_playing", {"multiplier": event.multiplier}))
        elif event.phase == Phase.DISTRIBUTING:
            self.effects.append(
                RenderCall(
                    "show_distributing",
                    {"multiplier": event.multiplier, "countdown": event.countdown},
                )
            )

    def _check_chat_unlock(self) -> None:
        if self.ctx.chat_unlocked or self.ctx.phase != Phase.PLAYING:
            return
        if any(p.has_bet for p in self.ctx.panels):
            self.ctx.chat_unlocked = True
            self.ctx.chat_error_reason = None

    # ------------------------------------------------------------------
    # Game: transport
    # ------------------------------------------------------------------

    def _on_ping(self, event: ev.Ping) -> None:
        self.effects.append(Emit(SocketEvent.PONG.value, {}))

    def _on_connected(self, event: ev.Connected) -> None:
        logger.info("Transport connected")

    def _on_disconnected(self, event: ev.Disconnected) -> None:
        logger.warning("Transport disconnected: %s", event.reason)
        self.ctx.connected = False
        self.effects.append(RenderCall("suspend"))
        self.notices.add(
            NotificationType.ERROR,
            "notifications.disconnected",
            duration=self.ctx.config.session.notification_duration_s,
        )

    def _on_reconnect_attempt(self, event: ev.ReconnectAttempt) -> None:
        self.notices.add(
            NotificationType.INFO,
            "notifications.reconnecting",
            duration=0,
            id=RECONNECT_BANNER_ID,
        )

    def _on_reconnect_error(self, event: ev.ConnectError) -> None:
        logger.info("Reconnect attempt failed: %s", event.error)

    def _on_reconnected(self, event: ev.Reconnected) -> None:
        logger.info("Reconnected after %d attempt(s)", event.attempt)
        self.notices.remove(RECONNECT_BANNER_ID)
        self.ctx.connected = True
        self.effects.append(RenderCall("resume"))
        self.notices.add(
            NotificationType.SUCCESS,
            "notifications.reconnected",
            duration=self.ctx.config.session.notification_duration_s,
        )
        self.effects.append(RequestInit())

    # ------------------------------------------------------------------
    # Game: server pushes
    # ------------------------------------------------------------------

    def _on_business_notify(self, event: ev.BusinessNotify) -> None:
        try:
            code = NotifyCode(event.code)
        except ValueError:
            logger.warning("Unhandled notification code: %s", event.code)
            return

        data = event.data or {}
        player = self.ctx.player

        if code in REJECTION_CODES:
            self.notices.add(
                NotificationType.ERROR,
                code.value,
                duration=self.ctx.config.session.notification_duration_s,
            )
            self._release_rejected_panel(data.get("order"))
            return

        if code == NotifyCode.AVATAR_UPDATED:
            if player is not None and data.get("avatar") is not None:
                player.avatar = data["avatar"]
            return
        if code == NotifyCode.CLIENT_SEED_UPDATED:
            if data.get("clientSeed"):
                self.ctx.client_seed = data["clientSeed"]
            return

        if player is None or data.get("balance") is None:
            return
        player.balance = data["balance"]

        if code == NotifyCode.BET:
            self.panels.apply_server_ack(data.get("order"), data.get("betId"), True)
        elif code == NotifyCode.CANCEL:
            if data.get("order"):
                self.panels.apply_server_ack(data["order"], None, False)
        elif code == NotifyCode.CASHOUT:
            self.effects.append(
                RenderCall(
                    "show_win",
                    {"amount": data.get("winAmount"), "multiplier": data.get("multiplier")},
                )
            )
            self.effects.append(
                Dispatch(ev.FetchApi(ApiCategory.PLAYER_HISTORY, {"limit": 10, "offset": 0}))
            )
            self.panels.apply_server_ack(data.get("order"), None, False, from_cashout=True)
        elif code == NotifyCode.JACKPOT_WIN:
            self.ctx.jackpot_win_amount = data.get("winAmount") or 0
            self.effects.append(
                RenderCall(
                    "show_jackpot",
                    {
                        "jackpot_type": data.get("type") or "default",
                        "amount": data.get("winAmount"),
                        "multiplier": data.get("multiplier"),
                    },
                )
            )

    def _release_rejected_panel(self, order: str | None) -> None:
        panel = self.ctx.panel(order) if order else None
        if panel is None or not panel.busy:
            return
        panel.busy = False
        if not panel.has_bet:
            panel.is_active = False

    def _on_live_wager_update(self, event: ev.LiveWagerUpdate) -> None:
        self.ctx.live_wagers = ticker.apply_updates(
            self.ctx.live_wagers, event.updates, self.ctx.stats_count
        )

    def _on_round_info(self, event: ev.RoundInfo) -> None:
        cap = self.ctx.config.session.max_round_history
        self.ctx.round_history = [event.round, *self.ctx.round_history][:cap]

    def _on_chat_message(self, event: ev.ChatMessageReceived) -> None:
        cap = self.ctx.config.session.max_chat_messages
        self.ctx.chat_messages = [*self.ctx.chat_messages, event.message][-cap:]

    def _on_chat_error(self, event: ev.ChatErrorReceived) -> None:
        if event.reason == "REMOVE":
            self.ctx.chat_messages = [
                m for m in self.ctx.chat_messages if m.get("messageId") != event.data
            ]
            self.ctx.chat_error_reason = None
        else:
            self.ctx.chat_error_reason = event.reason

    def _on_jackpot_update(self, event: ev.JackpotUpdate) -> None:
        self.ctx.jackpot = dict(event.amounts)

    def _on_jackpot_win(self, event: ev.JackpotWin) -> None:
        self.ctx.blink_jackpot_meter = event.jackpot_type
        self.effects.append(RenderCall("play_jackpot_sound", {"jackpot_type": event.jackpot_type}))

    def _on_stop_jackpot_blink(self, event: ev.StopJackpotBlink) -> None:
        self.ctx.blink_jackpot_meter = None
        self.ctx.jackpot_win_amount = None

    def _on_server_seed_hash(self, event: ev.NewServerSeedHash) -> None:
        self.ctx.server_seed_hash = dict(event.seed)

    def _on_cashout_stats(self, event: ev.CashoutStatsReceived) -> None:
        self.ctx.cashout_count = event.cashout_count
        self.ctx.cashout_amount = event.cashout_amount

    # ------------------------------------------------------------------
    # Game: panel intents
    # ------------------------------------------------------------------

    def _on_add_panel(self, event: ev.AddPanel) -> None:
        self.panels.add_panel()

    def _on_remove_panel(self, event: ev.RemovePanel) -> None:
        self.panels.remove_panel(event.order)

    def _on_update_panel(self, event: ev.UpdatePanel) -> None:
        self.panels.update_panel(event.order, event.field, event.value)

    def _on_place_bet(self, event: ev.PlaceBet) -> None:
        self.panels.place_bet(event.order)

    def _on_queue_bet(self, event: ev.QueueBet) -> None:
        self.panels.queue_bet(event.order)

    def _on_cancel_pre_bet(self, event: ev.CancelPreBet) -> None:
        self.panels.cancel_pre_bet(event.order)

    def _on_cancel_bet(self, event: ev.CancelBet) -> None:
        self.panels.cancel_bet(event.order)

    def _on_cashout_bet(self, event: ev.CashoutBet) -> None:
        self.panels.cashout_bet(event.order)

    def _on_select_autoplay(self, event: ev.SelectAutoplayRounds) -> None:
        self.panels.select_autoplay(event.order, event.rounds)

    def _on_stop_autoplay(self, event: ev.StopAutoplay) -> None:
        self.panels.stop_autoplay(event.order)

    def _on_increase_auto_bet(self, event: ev.IncreaseAutoBet) -> None:
        self.panels.increase_auto_bet(event.order, event.amount)

    # ------------------------------------------------------------------
    # Game: chat, profile, presentation
    # ------------------------------------------------------------------

    def _on_send_chat(self, event: ev.SendChatMessage) -> None:
        text = event.message.strip()
        if not text or self.ctx.chat_cooldown:
            return
        ui = self.ctx.config.ui
        player = self.ctx.player or PlayerProfile()
        self.effects.append(
            Emit(
                SocketEvent.CHAT_MESSAGE.value,
                {
                    "userId": player.user_id,
                    "username": player.username,
                    "message": text[: ui.chat_char_limit],
                },
            )
        )
        self.ctx.chat_error_reason = None
        if ui.message_waiting_time_s > 0:
            self.ctx.chat_cooldown = True
            self.effects.append(
                StartTimer(CHAT_COOLDOWN_TIMER, ui.message_waiting_time_s, ev.ChatCooldownElapsed())
            )

    def _on_send_avatar(self, event: ev.SendAvatarUpdate) -> None:
        self.effects.append(Emit(SocketEvent.AVATAR_CHANGE.value, {"avatar": event.avatar}))

    def _on_send_client_seed(self, event: ev.SendClientSeed) -> None:
        self.effects.append(
            Emit(SocketEvent.CLIENT_SEED.value, {"clientSeed": event.client_seed})
        )

    def _on_manual_client_seed(self, event: ev.SetManualClientSeed) -> None:
        self.ctx.manual_client_seed = event.enabled

    def _on_bgm_volume(self, event: ev.SetBgmVolume) -> None:
        self.effects.append(RenderCall("set_bgm_volume", {"volume": event.volume}))

    def _on_sfx_volume(self, event: ev.SetSfxVolume) -> None:
        self.effects.append(RenderCall("set_sfx_volume", {"volume": event.volume}))

    def _on_animations_visible(self, event: ev.SetAnimationsVisible) -> None:
        self.effects.append(RenderCall("set_animations_visible", {"visible": event.visible}))

    def _on_ui_click(self, event: ev.UiClick) -> None:
        self.effects.append(RenderCall("handle_ui_click", {"action": event.action}))

    # ------------------------------------------------------------------
    # Game: statistics API
    # ------------------------------------------------------------------

    def _on_fetch_api(self, event: ev.FetchApi) -> None:
        state = self.ctx.api[event.category]
        state.seq += 1
        state.loading = True
        state.error = None
        self.effects.append(ApiRequest(event.category, state.seq, dict(event.params)))

    def _on_api_succeeded(self, event: ev.ApiSucceeded) -> None:
        state = self.ctx.api[event.category]
        if event.seq != state.seq:
            logger.debug("Dropping stale %s response #%d", event.category.value, event.seq)
            return
        state.data = history.normalize(event.category, event.data)
        state.loading = False

    def _on_api_failed(self, event: ev.ApiFailed) -> None:
        state = self.ctx.api[event.category]
        if event.seq != state.seq:
            logger.debug("Dropping stale %s failure #%d", event.category.value, event.seq)
            return
        logger.warning("%s request failed: %s", event.category.value, event.error)
        state.error = event.error
        state.loading = False


Handler = Callable[[_Step, Any], None]

_COMMON_HANDLERS: dict[type, Handler] = {
    ev.InitReceived: _Step._on_reseed,
    ev.VisibilityHidden: _Step._on_visibility_hidden,
    ev.VisibilityShown: _Step._on_visibility_shown,
    ev.ReconnectFailed: _Step._on_reconnect_failed,
    ev.MaintenanceSignal: _Step._on_maintenance_signal,
    ev.SessionExpired: _Step._on_session_expired,
    ev.GoToMaintenance: _Step._on_go_to_maintenance,
    ev.GoToConnectionError: _Step._on_go_to_connection_error,
    ev.LoadingProgress: _Step._on_loading_progress,
    ev.CanvasReady: _Step._on_canvas_ready,
    ev.AddNotification: _Step._on_add_notification,
    ev.RemoveNotification: _Step._on_remove_notification,
    ev.NotificationExpired: _Step._on_notification_expired,
    ev.LowBalanceThrottleElapsed: _Step._on_low_balance_released,
    ev.ChatCooldownElapsed: _Step._on_chat_cooldown_elapsed,
    ev.Connected: _Step._on_connected,
}

_GAME_HANDLERS: dict[type, Handler] = {
    ev.StateUpdate: _Step._on_state_update,
    ev.Ping: _Step._on_ping,
    ev.Disconnected: _Step._on_disconnected,
    ev.ReconnectAttempt: _Step._on_reconnect_attempt,
    ev.ConnectError: _Step._on_reconnect_error,
    ev.Reconnected: _Step._on_reconnected,
    ev.BusinessNotify: _Step._on_business_notify,
    ev.LiveWagerUpdate: _Step._on_live_wager_update,
    ev.RoundInfo: _Step._on_round_info,
    ev.ChatMessageReceived: _Step._on_chat_message,
    ev.ChatErrorReceived: _Step._on_chat_error,
    ev.JackpotUpdate: _Step._on_jackpot_update,
    ev.JackpotWin: _Step._on_jackpot_win,
    ev.StopJackpotBlink: _Step._on_stop_jackpot_blink,
    ev.NewServerSeedHash: _Step._on_server_seed_hash,
    ev.CashoutStatsReceived: _Step._on_cashout_stats,
    ev.AddPanel: _Step._on_add_panel,
    ev.RemovePanel: _Step._on_remove_panel,
    ev.UpdatePanel: _Step._on_update_panel,
    ev.PlaceBet: _Step._on_place_bet,
    ev.QueueBet: _Step._on_queue_bet,
    ev.CancelPreBet: _Step._on_cancel_pre_bet,
    ev.CancelBet: _Step._on_cancel_bet,
    ev.CashoutBet: _Step._on_cashout_bet,
    ev.SelectAutoplayRounds: _Step._on_select_autoplay,
    ev.StopAutoplay: _Step._on_stop_autoplay,
    ev.IncreaseAutoBet: _Step._on_increase_auto_bet,
    ev.SendChatMessage: _Step._on_send_chat,
    ev.SendAvatarUpdate: _Step._on_send_avatar,
    ev.SendClientSeed: _Step._on_send_client_seed,
    ev.SetManualClientSeed: _Step._on_manual_client_seed,
    ev.SetBgmVolume: _Step._on_bgm_volume,
    ev.SetSfxVolume: _Step._on_sfx_volume,
    ev.SetAnimationsVisible: _Step._on_animations_visible,
    ev.UiClick: _Step._on_ui_click,
    ev.FetchApi: _Step._on_fetch_api,
    ev.ApiSucceeded: _Step._on_api_succeeded,
    ev.ApiFailed: _Step._on_api_failed,
}

_SCREEN_HANDLERS: dict[Screen, dict[type, Handler]] = {
    Screen.INITIALIZE: {
        ev.InitReceived: _Step._on_init_handshake,
        ev.InitTimeout: _Step._on_init_timeout,
        ev.ConnectError: _Step._on_handshake_error,
    },
    Screen.LOADING: {
        ev.GameLoaded: _Step._on_game_loaded,
        ev.GameLoadFailed: _Step._on_game_load_failed,
    },
    Screen.GAME_WELCOME: {
        ev.AssetsReady: _Step._on_assets_ready,
    },
    Screen.GAME: _GAME_HANDLERS,
}
