"""Mailbox events.

Everything that can change the session arrives as one of these frozen
dataclasses: server pushes decoded by the connection manager, user intents
from the UI, timer firings and results of background work. The reducer is
the only consumer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from crashclient.core.errors import ErrorKind
from crashclient.core.types import (
    EDITABLE_PANEL_FIELDS,
    LEADERBOARD_CATEGORIES,
    LEADERBOARD_PERIODS,
    ApiCategory,
    NotificationType,
    Phase,
)


class Event:
    """Base for all mailbox events."""

    @property
    def type_name(self) -> str:
        return type(self).__name__


# ------------------------------------------------------------------
# Lifecycle
# ------------------------------------------------------------------


@dataclass(frozen=True)
class Start(Event):
    pass


@dataclass(frozen=True)
class Reset(Event):
    pass


@dataclass(frozen=True)
class InitTimeout(Event):
    pass


@dataclass(frozen=True)
class GoToMaintenance(Event):
    details: str | None = None


@dataclass(frozen=True)
class GoToConnectionError(Event):
    kind: ErrorKind = ErrorKind.CONNECTION_LOST
    title: str = "connection-error.title"
    description: str = "connection-error.desc"
    details: str | None = None


@dataclass(frozen=True)
class GameLoaded(Event):
    pass


@dataclass(frozen=True)
class GameLoadFailed(Event):
    error: str


@dataclass(frozen=True)
class LoadingProgress(Event):
    progress: float


@dataclass(frozen=True)
class AssetsReady(Event):
    pass


@dataclass(frozen=True)
class CanvasReady(Event):
    pass


@dataclass(frozen=True)
class VisibilityHidden(Event):
    timestamp_ms: int


@dataclass(frozen=True)
class VisibilityShown(Event):
    timestamp_ms: int


# ------------------------------------------------------------------
# Transport
# ------------------------------------------------------------------


@dataclass(frozen=True)
class Connected(Event):
    pass


@dataclass(frozen=True)
class Disconnected(Event):
    reason: str | None = None


@dataclass(frozen=True)
class ConnectError(Event):
    error: str


@dataclass(frozen=True)
class ReconnectAttempt(Event):
    attempt: int


@dataclass(frozen=True)
class Reconnected(Event):
    attempt: int


@dataclass(frozen=True)
class ReconnectFailed(Event):
    pass


# ------------------------------------------------------------------
# Server pushes
# ------------------------------------------------------------------


@dataclass(frozen=True)
class InitReceived(Event):
    payload: dict[str, Any]


@dataclass(frozen=True)
class MaintenanceSignal(Event):
    pass


@dataclass(frozen=True)
class SessionExpired(Event):
    pass


@dataclass(frozen=True)
class Ping(Event):
    pass


@dataclass(frozen=True)
class StateUpdate(Event):
    phase: Phase
    multiplier: float = 1.0
    countdown: int = 0
    ended: bool = False
    bet_count: int | None = None
    maintenance: bool = False


@dataclass(frozen=True)
class ChatMessageReceived(Event):
    message: dict[str, Any]


@dataclass(frozen=True)
class ChatErrorReceived(Event):
    reason: str
    data: Any = None


@dataclass(frozen=True)
class RoundInfo(Event):
    round: dict[str, Any]


@dataclass(frozen=True)
class BusinessNotify(Event):
    code: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LiveWagerUpdate(Event):
    updates: tuple[dict[str, Any], ...]


@dataclass(frozen=True)
class JackpotUpdate(Event):
    amounts: dict[str, Any]


@dataclass(frozen=True)
class JackpotWin(Event):
    jackpot_type: str


@dataclass(frozen=True)
class NewServerSeedHash(Event):
    seed: dict[str, Any]


@dataclass(frozen=True)
class CashoutStatsReceived(Event):
    cashout_count: int = 0
    cashout_amount: float = 0.0


# ------------------------------------------------------------------
# Panel intents
# ------------------------------------------------------------------


@dataclass(frozen=True)
class AddPanel(Event):
    pass


@dataclass(frozen=True)
class RemovePanel(Event):
    order: str


@dataclass(frozen=True)
class UpdatePanel(Event):
    order: str
    field: str
    value: Any

    def __post_init__(self):
        if self.field not in EDITABLE_PANEL_FIELDS:
            raise ValueError(
                f"Panel field '{self.field}' is not editable. "
                f"Editable: {sorted(EDITABLE_PANEL_FIELDS)}"
            )


@dataclass(frozen=True)
class PlaceBet(Event):
    order: str


@dataclass(frozen=True)
class QueueBet(Event):
    order: str


@dataclass(frozen=True)
class CancelPreBet(Event):
    order: str


@dataclass(frozen=True)
class CancelBet(Event):
    order: str


@dataclass(frozen=True)
class CashoutBet(Event):
    order: str


@dataclass(frozen=True)
class SelectAutoplayRounds(Event):
    order: str
    rounds: int

    def __post_init__(self):
        if self.rounds <= 0:
            raise ValueError(f"Autoplay rounds must be positive, got {self.rounds}")


@dataclass(frozen=True)
class StopAutoplay(Event):
    order: str


@dataclass(frozen=True)
class IncreaseAutoBet(Event):
    order: str
    amount: int

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError(f"Auto-bet top-up must be positive, got {self.amount}")


# ------------------------------------------------------------------
# Chat, profile, presentation intents
# ------------------------------------------------------------------


@dataclass(frozen=True)
class SendChatMessage(Event):
    message: str


@dataclass(frozen=True)
class SendAvatarUpdate(Event):
    avatar: int


@dataclass(frozen=True)
class SendClientSeed(Event):
    client_seed: str


@dataclass(frozen=True)
class SetManualClientSeed(Event):
    enabled: bool


@dataclass(frozen=True)
class AddNotification(Event):
    type: NotificationType
    message: str
    duration: float = 2.0
    id: str | None = None


@dataclass(frozen=True)
class RemoveNotification(Event):
    id: str


@dataclass(frozen=True)
class StopJackpotBlink(Event):
    pass


@dataclass(frozen=True)
class SetBgmVolume(Event):
    volume: float


@dataclass(frozen=True)
class SetSfxVolume(Event):
    volume: float


@dataclass(frozen=True)
class SetAnimationsVisible(Event):
    visible: bool


@dataclass(frozen=True)
class UiClick(Event):
    action: str | None = None


# ------------------------------------------------------------------
# Statistics API
# ------------------------------------------------------------------


@dataclass(frozen=True)
class FetchApi(Event):
    category: ApiCategory
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.category in LEADERBOARD_CATEGORIES:
            period = self.params.get("period")
            if period not in LEADERBOARD_PERIODS:
                raise ValueError(
                    f"Leaderboard period must be one of {LEADERBOARD_PERIODS}, got {period!r}"
                )
        if self.category == ApiCategory.BET_DETAILS and not self.params.get("bet_id"):
            raise ValueError("bet-details requires a bet_id")
        if self.category == ApiCategory.ROUND_DETAILS and not self.params.get("round_id"):
            raise ValueError("round-details requires a round_id")


@dataclass(frozen=True)
class ApiSucceeded(Event):
    category: ApiCategory
    seq: int
    data: Any


@dataclass(frozen=True)
class ApiFailed(Event):
    category: ApiCategory
    seq: int
    error: str


# ------------------------------------------------------------------
# Timers
# ------------------------------------------------------------------


@dataclass(frozen=True)
class NotificationExpired(Event):
    id: str


@dataclass(frozen=True)
class ChatCooldownElapsed(Event):
    pass


@dataclass(frozen=True)
class LowBalanceThrottleElapsed(Event):
    pass
