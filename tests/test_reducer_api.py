"""Tests for the session reducer — statistics requests, chat and presentation intents."""

import pytest

from crashclient.core.effects import ApiRequest, Emit, RenderCall, StartTimer
from crashclient.core.events import (
    ApiFailed,
    ApiSucceeded,
    ChatCooldownElapsed,
    ChatErrorReceived,
    ChatMessageReceived,
    FetchApi,
    JackpotUpdate,
    JackpotWin,
    NewServerSeedHash,
    RoundInfo,
    SendAvatarUpdate,
    SendChatMessage,
    SendClientSeed,
    SetBgmVolume,
    SetManualClientSeed,
    StopJackpotBlink,
    UiClick,
)
from crashclient.core.types import ApiCategory
from crashclient.session.reducer import CHAT_COOLDOWN_TIMER


class TestFetchApi:
    def test_fetch_marks_loading(self, game):
        effects = game.send(FetchApi(ApiCategory.TOP_WINS, {"period": "daily"}))
        state = game.context.api[ApiCategory.TOP_WINS]
        assert state.loading is True
        assert state.seq == 1
        assert effects == [ApiRequest(ApiCategory.TOP_WINS, 1, {"period": "daily"})]

    def test_only_latest_response_applied(self, game):
        game.send(
            FetchApi(ApiCategory.PLAYER_HISTORY, {"limit": 10}),
            FetchApi(ApiCategory.PLAYER_HISTORY, {"limit": 20}),
        )
        game.send(ApiSucceeded(ApiCategory.PLAYER_HISTORY, 2, [{"id": "new"}]))
        game.send(ApiSucceeded(ApiCategory.PLAYER_HISTORY, 1, [{"id": "old"}]))
        state = game.context.api[ApiCategory.PLAYER_HISTORY]
        assert state.data["bets"] == [{"id": "new"}]
        assert state.loading is False

    def test_stale_response_keeps_loading(self, game):
        game.send(FetchApi(ApiCategory.GENERAL_ROUND), FetchApi(ApiCategory.GENERAL_ROUND))
        game.send(ApiSucceeded(ApiCategory.GENERAL_ROUND, 1, {"rounds": []}))
        assert game.context.api[ApiCategory.GENERAL_ROUND].loading is True

    def test_failure_recorded(self, game):
        game.send(FetchApi(ApiCategory.ROUND_DETAILS, {"round_id": "r-1"}))
        game.send(ApiFailed(ApiCategory.ROUND_DETAILS, 1, "timeout from /rounds/r-1"))
        state = game.context.api[ApiCategory.ROUND_DETAILS]
        assert state.error == "timeout from /rounds/r-1"
        assert state.loading is False

    def test_stale_failure_ignored(self, game):
        game.send(FetchApi(ApiCategory.TOP_ROUNDS, {"period": "yearly"}))
        game.send(FetchApi(ApiCategory.TOP_ROUNDS, {"period": "monthly"}))
        game.send(ApiFailed(ApiCategory.TOP_ROUNDS, 1, "boom"))
        assert game.context.api[ApiCategory.TOP_ROUNDS].error is None

    def test_categories_are_independent(self, game):
        game.send(FetchApi(ApiCategory.TOP_WINS, {"period": "daily"}))
        game.send(FetchApi(ApiCategory.TOP_CASHOUTS, {"period": "daily"}))
        assert game.context.api[ApiCategory.TOP_WINS].seq == 1
        assert game.context.api[ApiCategory.TOP_CASHOUTS].seq == 1

    @pytest.mark.parametrize(
        "category, params",
        [
            (ApiCategory.TOP_WINS, {"period": "weekly"}),
            (ApiCategory.TOP_CASHOUTS, {}),
            (ApiCategory.BET_DETAILS, {}),
            (ApiCategory.ROUND_DETAILS, {"bet_id": "b"}),
        ],
    )
    def test_invalid_params_rejected(self, category, params):
        with pytest.raises(ValueError):
            FetchApi(category, params)


class TestChat:
    def test_send_emits_and_starts_cooldown(self, game):
        effects = game.send(SendChatMessage("  hello  "))
        assert Emit(
            "chat_message", {"userId": "u-1", "username": "alice", "message": "hello"}
        ) in effects
        assert StartTimer(CHAT_COOLDOWN_TIMER, 60.0, ChatCooldownElapsed()) in effects
        assert game.send(SendChatMessage("again")) == []
        game.send(ChatCooldownElapsed())
        assert any(isinstance(e, Emit) for e in game.send(SendChatMessage("again")))

    def test_blank_message_ignored(self, game):
        assert game.send(SendChatMessage("   ")) == []

    def test_long_message_truncated(self, game):
        (emit, _) = game.send(SendChatMessage("x" * 500))
        assert len(emit.payload["message"]) == 160

    def test_received_messages_capped(self, game):
        for i in range(105):
            game.send(ChatMessageReceived({"messageId": str(i)}))
        messages = game.context.chat_messages
        assert len(messages) == 100
        assert messages[-1]["messageId"] == "104"

    def test_remove_error_drops_message(self, game):
        game.send(ChatMessageReceived({"messageId": "m1"}), ChatMessageReceived({"messageId": "m2"}))
        game.send(ChatErrorReceived("REMOVE", "m1"))
        assert [m["messageId"] for m in game.context.chat_messages] == ["m2"]

    def test_other_error_recorded(self, game):
        game.send(ChatErrorReceived("MUTED", None))
        assert game.context.chat_error_reason == "MUTED"


class TestRoundAndJackpot:
    def test_round_info_prepended(self, game):
        game.send(RoundInfo({"roundId": "r-2"}))
        assert game.context.round_history[0] == {"roundId": "r-2"}
        assert len(game.context.round_history) == 2

    def test_jackpot_blink_cycle(self, game):
        game.send(JackpotUpdate({"mini": 10, "mega": 1000}))
        effects = game.send(JackpotWin("mega"))
        assert game.context.jackpot == {"mini": 10, "mega": 1000}
        assert game.context.blink_jackpot_meter == "mega"
        assert RenderCall("play_jackpot_sound", {"jackpot_type": "mega"}) in effects
        game.send(StopJackpotBlink())
        assert game.context.blink_jackpot_meter is None

    def test_server_seed_hash(self, game):
        game.send(NewServerSeedHash({"hash": "abc"}))
        assert game.context.server_seed_hash == {"hash": "abc"}


class TestProfileAndPresentation:
    def test_avatar_and_seed_commands(self, game):
        assert game.send(SendAvatarUpdate(3)) == [Emit("avatar_change", {"avatar": 3})]
        assert game.send(SendClientSeed("s")) == [Emit("client_seed", {"clientSeed": "s"})]

    def test_manual_client_seed_flag(self, game):
        game.send(SetManualClientSeed(True))
        assert game.context.manual_client_seed is True

    def test_presentation_becomes_render_calls(self, game):
        assert game.send(SetBgmVolume(0.3)) == [RenderCall("set_bgm_volume", {"volume": 0.3})]
        assert game.send(UiClick("history")) == [RenderCall("handle_ui_click", {"action": "history"})]
