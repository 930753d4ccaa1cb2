"""Tests for the rich terminal view."""

from rich.console import Console

from crashclient.console import format_amount, render
from crashclient.core.events import (
    LiveWagerUpdate,
    MaintenanceSignal,
    PlaceBet,
    ReconnectFailed,
    StateUpdate,
)
from crashclient.core.types import Phase, Screen
from crashclient.session.models import SessionSnapshot


def _text(driver, version: int = 1) -> str:
    console = Console(record=True, width=120, color_system=None)
    console.print(render(SessionSnapshot(version, driver.screen, driver.context)))
    return console.export_text()


class TestFormatAmount:
    def test_formats(self):
        assert format_amount(1234.5, "EUR") == "1,234.50 EUR"
        assert format_amount(3) == "3.00"
        assert format_amount(None) == "--"


class TestRender:
    def test_loading_screen(self, driver):
        text = _text(driver)
        assert "initialize" in text
        assert "Loading 0%" in text

    def test_game_screen(self, game):
        game.send(StateUpdate(Phase.BETTING, countdown=6), PlaceBet("first"))
        game.send(LiveWagerUpdate(({"t": "BET", "id": "1", "u": "amy", "a": 5},)))
        text = _text(game)
        assert "BETTING" in text
        assert "Next round in 6s" in text
        assert "100.00 EUR" in text
        assert "pending" in text
        assert "amy" in text
        assert "LIVE" in text

    def test_playing_shows_multiplier(self, game):
        game.send(StateUpdate(Phase.PLAYING, multiplier=2.35))
        assert "2.35x" in _text(game)

    def test_empty_ticker(self, game):
        assert "No wagers yet" in _text(game)

    def test_fault_screen(self, game):
        game.send(ReconnectFailed())
        assert game.screen == Screen.CONNECTION_ERROR
        text = _text(game)
        assert "connection-error.title" in text
        assert "reconnection attempts exhausted" in text
        assert "OFFLINE" in text

    def test_maintenance_fault(self, game):
        game.send(MaintenanceSignal())
        text = _text(game)
        assert "maintenance.title" in text
        assert "server maintenance" in text
