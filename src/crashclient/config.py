"""Client configuration loader.

Reads the YAML client config into dataclasses, resolves which server
endpoint set is active from environment flags, and parses operator launch
parameters (ProviderInfo) from a launch URL.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping
from urllib.parse import parse_qs, urlparse

import yaml

from crashclient.core.errors import ConfigError

# Ordered: the first variant whose flag is set wins.
ENVIRONMENTS = ("local", "dev", "stage", "demo", "prod")
DEFAULT_ENVIRONMENT = "local"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class ServerConfig:
    ws_url: str
    http_url: str
    namespace: str = "/"
    info: str | None = None
    transports: tuple[str, ...] = ("websocket",)


@dataclass
class GameConfig:
    servers: dict[str, ServerConfig] = field(default_factory=dict)
    assets: list[str] = field(default_factory=list)


@dataclass
class UIConfig:
    max_bet_panels: int = 2
    min_auto_cashout_multiplier: float = 1.01
    max_auto_cashout_multiplier: float = 5000.0
    initial_bet_value: float | None = None
    bet_value_array: list[float] = field(default_factory=list)
    bet_value_increments: list[float] = field(default_factory=lambda: [1, 2, 5, 10])
    auto_bet_count_options: list[int] = field(
        default_factory=lambda: [5, 10, 25, 50, 100]
    )
    auto_bet_count_increments: list[int] = field(default_factory=lambda: [5, 10])
    has_jackpot_feature: bool = False
    message_waiting_time_s: float = 60.0
    chat_char_limit: int = 160


@dataclass
class SessionConfig:
    init_timeout_s: float = 10.0
    visibility_threshold_s: float = 10.0
    reconnection_attempts: int = 5
    reconnection_delay_s: float = 5.0
    low_balance_throttle_s: float = 2.0
    notification_duration_s: float = 2.0
    stats_count: int = 50
    max_chat_messages: int = 100
    max_round_history: int = 60
    api_timeout_s: float = 10.0


@dataclass
class ClientConfig:
    name: str
    game: GameConfig = field(default_factory=GameConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    journal_dir: Path | None = None


@dataclass(frozen=True)
class ProviderInfo:
    """Operator launch parameters. Read-only for the whole session."""

    id: str = "everymatrix"
    name: str = "EveryMatrix"
    game_id: str | None = None
    currency: str = "USD"
    mode: str | None = None
    free_play: bool = False
    token: str | None = None
    client_id: str = "1990"
    language: str = "en"
    cashier_url: str | None = None
    lobby_url: str | None = None
    mobile: bool = False

    def connection_query(self, device: str) -> dict[str, str]:
        """Query parameters sent with the socket handshake."""
        return {
            "device": device,
            "token": self.token or "",
            "gameId": self.game_id or "",
            "clientId": self.client_id,
            "currency": self.currency,
        }


def load_config(path: Path) -> ClientConfig:
    """Load client config from YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if "client" not in raw or "game" not in raw:
        raise ConfigError(f"{path}: 'client' and 'game' sections are required")

    c = raw["client"]
    g = raw["game"]

    servers = {}
    for env, s in (g.get("servers") or {}).items():
        if env not in ENVIRONMENTS:
            raise ConfigError(f"{path}: unknown server environment '{env}'")
        if not s:
            continue
        servers[env] = ServerConfig(
            ws_url=s["ws_url"],
            http_url=s["http_url"],
            namespace=s.get("namespace", "/"),
            info=s.get("info"),
            transports=tuple(s.get("transports", ["websocket"])),
        )

    u = raw.get("ui", {})
    ui = UIConfig(
        max_bet_panels=u.get("max_bet_panels", 2),
        min_auto_cashout_multiplier=u.get("min_auto_cashout_multiplier", 1.01),
        max_auto_cashout_multiplier=u.get("max_auto_cashout_multiplier", 5000.0),
        initial_bet_value=u.get("initial_bet_value"),
        bet_value_array=u.get("bet_value_array", []),
        bet_value_increments=u.get("bet_value_increments", [1, 2, 5, 10]),
        auto_bet_count_options=u.get("auto_bet_count_options", [5, 10, 25, 50, 100]),
        auto_bet_count_increments=u.get("auto_bet_count_increments", [5, 10]),
        has_jackpot_feature=u.get("has_jackpot_feature", False),
        message_waiting_time_s=u.get("message_waiting_time_s", 60.0),
        chat_char_limit=u.get("chat_char_limit", 160),
    )

    s = raw.get("session", {})
    session = SessionConfig(
        init_timeout_s=s.get("init_timeout_s", 10.0),
        visibility_threshold_s=s.get("visibility_threshold_s", 10.0),
        reconnection_attempts=s.get("reconnection_attempts", 5),
        reconnection_delay_s=s.get("reconnection_delay_s", 5.0),
        low_balance_throttle_s=s.get("low_balance_throttle_s", 2.0),
        notification_duration_s=s.get("notification_duration_s", 2.0),
        stats_count=s.get("stats_count", 50),
        max_chat_messages=s.get("max_chat_messages", 100),
        max_round_history=s.get("max_round_history", 60),
        api_timeout_s=s.get("api_timeout_s", 10.0),
    )

    journal_dir = raw.get("journal_dir")

    return ClientConfig(
        name=c["name"],
        game=GameConfig(servers=servers, assets=g.get("assets", [])),
        ui=ui,
        session=session,
        journal_dir=Path(journal_dir) if journal_dir else None,
    )


def environment_flags(environ: Mapping[str, str]) -> dict[str, bool]:
    """Build environment variant flags from CRASH_ENV / CRASH_<VARIANT> variables."""
    flags = {
        env: environ.get(f"CRASH_{env.upper()}", "").strip().lower() in _TRUTHY
        for env in ENVIRONMENTS
    }
    selected = environ.get("CRASH_ENV", "").strip().lower()
    if selected:
        if selected not in ENVIRONMENTS:
            raise ConfigError(f"CRASH_ENV={selected!r} is not one of {ENVIRONMENTS}")
        flags[selected] = True
    return flags


def resolve_environment(flags: Mapping[str, bool]) -> str:
    for env in ENVIRONMENTS:
        if flags.get(env):
            return env
    return DEFAULT_ENVIRONMENT


def resolve_server_config(
    game: GameConfig, flags: Mapping[str, bool]
) -> ServerConfig | None:
    """Return the endpoint set of the first flagged environment, or None."""
    return game.servers.get(resolve_environment(flags))


def provider_from_url(url: str) -> ProviderInfo:
    """Parse operator launch parameters from a game launch URL."""
    query = parse_qs(urlparse(url).query)

    def _get(key: str, default: str | None = None) -> str | None:
        values = query.get(key)
        return values[0] if values else default

    return ProviderInfo(
        game_id=_get("gameId"),
        currency=_get("currencyCode", "USD"),
        mode=_get("mode"),
        free_play=(_get("freePlay", "") or "").lower() in _TRUTHY,
        token=_get("token"),
        client_id=_get("clientId", "1990"),
        language=_get("language", "en"),
        cashier_url=_get("cashierUrl"),
        lobby_url=_get("LobbyUrl"),
        mobile=(_get("mobile", "") or "").lower() in _TRUTHY,
    )
