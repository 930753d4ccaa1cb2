"""Shared test fixtures for crashclient."""

import pytest

from crashclient.config import (
    ClientConfig,
    GameConfig,
    ProviderInfo,
    ServerConfig,
    SessionConfig,
    UIConfig,
)
from crashclient.core.events import AssetsReady, GameLoaded, InitReceived, Start
from crashclient.core.types import Screen
from crashclient.session.reducer import initial_context, reduce


def make_config(max_bet_panels: int = 2, **session_overrides) -> ClientConfig:
    return ClientConfig(
        name="test-client",
        game=GameConfig(
            servers={
                "local": ServerConfig(
                    ws_url="http://localhost:3000",
                    http_url="http://localhost:3000/api",
                    namespace="/crash",
                )
            }
        ),
        ui=UIConfig(max_bet_panels=max_bet_panels),
        session=SessionConfig(**session_overrides),
    )


def make_init_payload(balance: float = 100.0, min_bet: float = 1, max_bet: float = 100) -> dict:
    return {
        "player": {
            "userId": "u-1",
            "username": "alice",
            "balance": balance,
            "currency": "EUR",
            "sessionId": "sess-1",
            "clientSeed": "seed-abc",
        },
        "settings": {"minBet": min_bet, "maxBet": max_bet, "maxMultiplier": 1000},
        "rounds": [{"roundId": "r-1", "multiplier": 2.5}],
        "messages": [],
        "boomers": [],
        "statsCount": 50,
    }


class Driver:
    """Feeds events through the reducer and keeps every emitted effect."""

    def __init__(self, config: ClientConfig, provider: ProviderInfo):
        self.context = initial_context(config, provider, {"local": True}, "test-device")
        self.screen = Screen.INITIALIZE
        self.effects = []

    def send(self, *events):
        last = []
        for event in events:
            reduction = reduce(self.screen, self.context, event)
            self.screen, self.context, last = reduction
            self.effects.extend(last)
        return last

    def effects_of(self, effect_type):
        return [e for e in self.effects if isinstance(e, effect_type)]

    def to_game(self, payload: dict | None = None) -> "Driver":
        self.send(
            Start(),
            InitReceived(payload if payload is not None else make_init_payload()),
            GameLoaded(),
            AssetsReady(),
        )
        assert self.screen == Screen.GAME
        self.effects.clear()
        return self


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def provider():
    return ProviderInfo(game_id="crash", token="tok-1", currency="EUR")


@pytest.fixture
def driver(config, provider):
    return Driver(config, provider)


@pytest.fixture
def game(driver):
    """A driver already on the game screen with a funded player."""
    return driver.to_game()
