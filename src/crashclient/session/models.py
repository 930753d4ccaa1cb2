"""Session data model: panels, notifications, live wagers and the context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from crashclient.config import ClientConfig, ProviderInfo
from crashclient.core.errors import ConnectionFault
from crashclient.core.types import ApiCategory, NotificationType, Phase, Screen


@dataclass
class BetPanel:
    """One independent betting slot."""

    order: str
    bet_amount: float
    auto_cashout: float
    user_id: str | None = None
    auto_bet: bool = False
    total_auto_bet_count: int = 0
    remaining_auto_bet_count: int = 0
    auto_cashout_enabled: bool = False
    bet_id: str | None = None
    busy: bool = False
    is_active: bool = False
    pre_bet: bool = False
    vendor_bonus_id: str = ""

    @property
    def has_bet(self) -> bool:
        return self.bet_id is not None


@dataclass
class Notification:
    id: str
    type: NotificationType
    message: str
    duration: float = 0.0


@dataclass
class LiveWagerEntry:
    id: str
    username: str = "unknown"
    amount: float = 0.0
    win_amount: float = 0.0
    multiplier: float = 1.0
    avatar: int = 0


@dataclass
class BetSettings:
    min_bet: float = 1.0
    max_bet: float = 100.0
    max_multiplier: float | None = None
    max_win: float | None = None

    @classmethod
    def from_payload(cls, raw: dict[str, Any]) -> BetSettings:
        return cls(
            min_bet=raw.get("minBet", 1.0),
            max_bet=raw.get("maxBet", 100.0),
            max_multiplier=raw.get("maxMultiplier"),
            max_win=raw.get("maxWin"),
        )


@dataclass
class PlayerProfile:
    user_id: str | None = None
    username: str | None = None
    balance: float = 0.0
    currency: str | None = None
    session_id: str | None = None
    avatar: int | None = None
    client_seed: str | None = None

    @classmethod
    def from_payload(cls, raw: dict[str, Any]) -> PlayerProfile:
        return cls(
            user_id=raw.get("userId"),
            username=raw.get("username"),
            balance=raw.get("balance", 0.0),
            currency=raw.get("currency"),
            session_id=raw.get("sessionId"),
            avatar=raw.get("avatar"),
            client_seed=raw.get("clientSeed"),
        )


@dataclass
class ApiRequestState:
    """Loading/error/data of one statistics category.

    ``seq`` is the sequence number of the latest request; only a response
    carrying that number is applied.
    """

    loading: bool = False
    error: str | None = None
    data: Any = None
    seq: int = 0


def _api_states() -> dict[ApiCategory, ApiRequestState]:
    return {category: ApiRequestState() for category in ApiCategory}


@dataclass
class SessionContext:
    """Everything the session owns. Mutated only by the reducer."""

    config: ClientConfig
    provider: ProviderInfo
    environment_flags: dict[str, bool] = field(default_factory=dict)
    device: str = "crashclient"

    screen: Screen = Screen.INITIALIZE
    started: bool = False
    fault: ConnectionFault | None = None
    loading_progress: float = 0.0
    stage_created: bool = False
    game_state_created: bool = False

    # Round
    phase: Phase | None = None
    multiplier: float = 1.0
    countdown: int = 0
    total_bet_count: int = 0
    connected: bool = False
    is_visible: bool = True
    last_visibility_ms: int = 0

    # Player and panels
    player: PlayerProfile | None = None
    bet_settings: BetSettings | None = None
    panels: list[BetPanel] = field(default_factory=list)
    low_balance_notice: bool = False

    # Notifications
    notifications: list[Notification] = field(default_factory=list)
    notification_seq: int = 0

    # Live wagers and round statistics
    live_wagers: list[LiveWagerEntry] = field(default_factory=list)
    stats_count: int = 50
    round_history: list[dict[str, Any]] = field(default_factory=list)
    cashout_count: int = 0
    cashout_amount: float = 0.0

    # Chat
    chat_messages: list[dict[str, Any]] = field(default_factory=list)
    chat_error_reason: str | None = "BETNEEDED"
    chat_unlocked: bool = False
    chat_cooldown: bool = False

    # Jackpot and fairness
    jackpot: dict[str, Any] | None = None
    jackpot_win_amount: float | None = None
    blink_jackpot_meter: str | None = None
    client_seed: str = ""
    server_seed_hash: dict[str, Any] | None = None
    manual_client_seed: bool = False

    api: dict[ApiCategory, ApiRequestState] = field(default_factory=_api_states)

    @property
    def balance(self) -> float:
        return self.player.balance if self.player else 0.0

    @property
    def min_auto_cashout(self) -> float:
        return self.config.ui.min_auto_cashout_multiplier or 1.01

    @property
    def max_auto_cashout(self) -> float:
        if self.bet_settings and self.bet_settings.max_multiplier:
            return self.bet_settings.max_multiplier
        return self.config.ui.max_auto_cashout_multiplier

    def panel(self, order: str) -> BetPanel | None:
        for p in self.panels:
            if p.order == order:
                return p
        return None


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view handed to observers after every processed event."""

    version: int
    screen: Screen
    context: SessionContext
