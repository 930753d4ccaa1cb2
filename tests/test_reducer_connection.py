"""Tests for the session reducer — visibility watchdog, reconnection and faults."""

import pytest

from crashclient.core.effects import (
    CancelAllTimers,
    DetachSubscriptions,
    Disconnect,
    Emit,
    RenderCall,
    RequestInit,
    StopVisibility,
)
from crashclient.core.errors import ErrorKind
from crashclient.core.events import (
    ConnectError,
    Disconnected,
    GoToConnectionError,
    GoToMaintenance,
    InitReceived,
    MaintenanceSignal,
    Ping,
    PlaceBet,
    ReconnectAttempt,
    ReconnectFailed,
    Reconnected,
    SessionExpired,
    Start,
    StateUpdate,
    UpdatePanel,
    VisibilityHidden,
    VisibilityShown,
)
from crashclient.core.types import NotificationType, Phase, Screen
from crashclient.session.reducer import RECONNECT_BANNER_ID

from conftest import make_init_payload


class TestVisibility:
    def test_hidden_past_threshold_drops_connection(self, game):
        game.send(VisibilityHidden(0))
        effects = game.send(VisibilityShown(15_000))
        assert game.screen == Screen.CONNECTION_ERROR
        assert game.context.connected is False
        assert game.context.fault.kind == ErrorKind.CONNECTION_LOST
        assert DetachSubscriptions() in effects
        assert StopVisibility() in effects
        assert Disconnect() in effects

    def test_short_hide_is_harmless(self, game):
        game.send(VisibilityHidden(1_000), VisibilityShown(6_000))
        assert game.screen == Screen.GAME
        assert game.context.is_visible is True
        assert game.context.last_visibility_ms == 6_000

    def test_show_without_hide_never_halts(self, game):
        game.send(VisibilityShown(10_000_000))
        assert game.screen == Screen.GAME

    @pytest.mark.parametrize("stage", ["initialize", "loading"])
    def test_watchdog_active_before_game(self, driver, stage):
        driver.send(Start())
        if stage == "loading":
            driver.send(InitReceived(make_init_payload()))
        driver.send(VisibilityHidden(0), VisibilityShown(20_000))
        assert driver.screen == Screen.CONNECTION_ERROR


class TestReconnection:
    def test_reconnect_after_two_failures_requests_init_once(self, game):
        game.send(Disconnected("transport close"))
        for attempt in (1, 2):
            game.send(ReconnectAttempt(attempt), ConnectError("refused"))
        game.send(ReconnectAttempt(3), Reconnected(3))

        assert len(game.effects_of(RequestInit)) == 1
        assert game.screen == Screen.GAME
        assert game.context.connected is True
        assert RenderCall("resume") in game.effects
        ids = [n.id for n in game.context.notifications]
        assert RECONNECT_BANNER_ID not in ids
        messages = [n.message for n in game.context.notifications]
        assert "notifications.reconnected" in messages

    def test_attempt_banner_is_single(self, game):
        game.send(ReconnectAttempt(1), ReconnectAttempt(2), ReconnectAttempt(3))
        banners = [n for n in game.context.notifications if n.id == RECONNECT_BANNER_ID]
        assert len(banners) == 1
        assert banners[0].type == NotificationType.INFO
        assert banners[0].duration == 0

    def test_reinit_keeps_panels(self, game):
        game.send(UpdatePanel("first", "bet_amount", 25))
        game.send(InitReceived(make_init_payload(balance=7)))
        assert game.context.panel("first").bet_amount == 25
        assert game.context.balance == 7

    def test_exhausted(self, game):
        game.send(ReconnectFailed())
        assert game.screen == Screen.CONNECTION_ERROR
        assert game.context.fault.kind == ErrorKind.RECONNECT_EXHAUSTED

    def test_disconnect_suspends_and_notifies(self, game):
        effects = game.send(Disconnected("ping timeout"))
        assert game.context.connected is False
        assert RenderCall("suspend") in effects
        (notice,) = game.context.notifications
        assert notice.type == NotificationType.ERROR
        assert notice.message == "notifications.disconnected"

    def test_no_bet_while_disconnected(self, game):
        game.send(StateUpdate(Phase.BETTING), Disconnected("x"))
        effects = game.send(PlaceBet("first"))
        assert not any(isinstance(e, Emit) for e in effects)
        assert game.context.panel("first").busy is False


class TestServerSignals:
    def test_ping_answers_pong(self, game):
        assert game.send(Ping()) == [Emit("pong", {})]

    def test_maintenance(self, game):
        game.send(MaintenanceSignal())
        assert game.screen == Screen.CONNECTION_ERROR
        assert game.context.fault.kind == ErrorKind.MAINTENANCE_MODE

    def test_session_expired(self, game):
        game.send(SessionExpired())
        assert game.context.fault.kind == ErrorKind.SESSION_EXPIRED
        assert game.context.fault.title == "session.title"

    def test_go_to_maintenance(self, game):
        game.send(GoToMaintenance("planned"))
        assert game.screen == Screen.MAINTENANCE
        assert game.context.fault.details == "planned"

    def test_go_to_connection_error_carries_kind(self, game):
        game.send(GoToConnectionError(kind=ErrorKind.ASSET_OR_BOOT_FAILURE, details="atlas"))
        assert game.screen == Screen.CONNECTION_ERROR
        assert game.context.fault.kind == ErrorKind.ASSET_OR_BOOT_FAILURE

    def test_halt_releases_everything(self, game):
        effects = game.send(ReconnectFailed())
        assert effects == [
            DetachSubscriptions(),
            RenderCall("suspend"),
            CancelAllTimers(),
            StopVisibility(),
            Disconnect(),
        ]
