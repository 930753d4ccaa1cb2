"""GameRenderer — uniform interface for the presentation collaborator.

Provides ABCs and a concrete implementation:
- GameRenderer / GameLoader: what the session needs from a renderer
- HeadlessGame / HeadlessLoader: deterministic, offline, records every call
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

from crashclient.config import ClientConfig, ProviderInfo

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class GameLoadError(Exception):
    """Raised by loaders when assets or the game instance cannot be built."""


class GameRenderer(ABC):
    """Abstract base for renderers driven by RenderCall effects."""

    @abstractmethod
    def create_load_stage(self, progress: ProgressCallback) -> None:
        """Build the loading stage, reporting progress in [0, 1]. Blocks until done."""

    @abstractmethod
    def show_betting(self, countdown: int) -> None: ...

    @abstractmethod
    def show_waiting(self, multiplier: float) -> None: ...

    @abstractmethod
    def show_playing(self, multiplier: float) -> None: ...

    @abstractmethod
    def show_result(self, multiplier: float, countdown: int) -> None: ...

    @abstractmethod
    def show_distributing(self, multiplier: float, countdown: int) -> None: ...

    @abstractmethod
    def suspend(self) -> None:
        """Mute audio and pause animation."""

    @abstractmethod
    def resume(self) -> None:
        """Undo suspend."""

    # Optional hooks; renderers override what they support.

    def create_game_stage(self) -> None:
        pass

    def create_game_state(self, phase: str, currency: str) -> None:
        pass

    def set_version_text(self, environment: str) -> None:
        pass

    def show_win(self, amount: float | None, multiplier: float | None) -> None:
        pass

    def show_jackpot(
        self, jackpot_type: str, amount: float | None, multiplier: float | None
    ) -> None:
        pass

    def play_jackpot_sound(self, jackpot_type: str) -> None:
        pass

    def set_bgm_volume(self, volume: float) -> None:
        pass

    def set_sfx_volume(self, volume: float) -> None:
        pass

    def set_animations_visible(self, visible: bool) -> None:
        pass

    def handle_ui_click(self, action: str | None) -> None:
        pass


class GameLoader(ABC):
    """Loads heavy assets and constructs the renderable game instance."""

    @abstractmethod
    def load(self, config: ClientConfig, provider: ProviderInfo) -> GameRenderer:
        """Return a ready renderer or raise GameLoadError."""


class HeadlessGame(GameRenderer):
    """Renderer that draws nothing and records every call as (method, kwargs)."""

    def __init__(self, progress_steps: int = 4):
        self._progress_steps = max(progress_steps, 1)
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.suspended = False

    def _record(self, method: str, **kwargs: Any) -> None:
        self.calls.append((method, kwargs))

    def create_load_stage(self, progress: ProgressCallback) -> None:
        self._record("create_load_stage")
        for i in range(1, self._progress_steps + 1):
            progress(i / self._progress_steps)

    def show_betting(self, countdown: int) -> None:
        self._record("show_betting", countdown=countdown)

    def show_waiting(self, multiplier: float) -> None:
        self._record("show_waiting", multiplier=multiplier)

    def show_playing(self, multiplier: float) -> None:
        self._record("show_playing", multiplier=multiplier)

    def show_result(self, multiplier: float, countdown: int) -> None:
        self._record("show_result", multiplier=multiplier, countdown=countdown)

    def show_distributing(self, multiplier: float, countdown: int) -> None:
        self._record("show_distributing", multiplier=multiplier, countdown=countdown)

    def suspend(self) -> None:
        self.suspended = True
        self._record("suspend")

    def resume(self) -> None:
        self.suspended = False
        self._record("resume")

    def create_game_stage(self) -> None:
        self._record("create_game_stage")

    def create_game_state(self, phase: str, currency: str) -> None:
        self._record("create_game_state", phase=phase, currency=currency)

    def show_win(self, amount: float | None, multiplier: float | None) -> None:
        self._record("show_win", amount=amount, multiplier=multiplier)

    def show_jackpot(
        self, jackpot_type: str, amount: float | None, multiplier: float | None
    ) -> None:
        self._record("show_jackpot", jackpot_type=jackpot_type, amount=amount, multiplier=multiplier)


class HeadlessLoader(GameLoader):
    """Builds a HeadlessGame. ``fail_with`` makes every load raise, for boot-failure paths."""

    def __init__(self, fail_with: str | None = None):
        self._fail_with = fail_with
        self.last_game: HeadlessGame | None = None

    def load(self, config: ClientConfig, provider: ProviderInfo) -> GameRenderer:
        if self._fail_with is not None:
            raise GameLoadError(self._fail_with)
        for asset in config.game.assets:
            logger.debug("Headless loader skipping asset %s", asset)
        self.last_game = HeadlessGame()
        return self.last_game
