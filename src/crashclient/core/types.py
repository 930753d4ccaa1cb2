"""Enumerations shared by events, effects and session state."""

from enum import Enum


class Phase(str, Enum):
    """One round stage, as reported by the server's ``cs`` field."""

    BETTING = "BETTING"
    WAITING = "WAITING"
    PLAYING = "PLAYING"
    DISTRIBUTING = "DISTRIBUTING"


class Screen(str, Enum):
    """Top-level session state."""

    INITIALIZE = "initialize"
    LOADING = "loading"
    GAME_WELCOME = "gameWelcome"
    GAME = "game"
    MAINTENANCE = "maintenance"
    CONNECTION_ERROR = "connectionError"
    ERROR = "error"


# States in which the session still holds a connection.
ACTIVE_SCREENS = frozenset(
    {Screen.INITIALIZE, Screen.LOADING, Screen.GAME_WELCOME, Screen.GAME}
)


class NotificationType(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    WIN = "win"
    SUCCESS = "success"


class ApiCategory(str, Enum):
    PLAYER_HISTORY = "player-history"
    BET_DETAILS = "bet-details"
    ROUND_DETAILS = "round-details"
    GENERAL_ROUND = "general-round"
    TOP_CASHOUTS = "top-cashouts"
    TOP_WINS = "top-wins"
    TOP_ROUNDS = "top-rounds"


LEADERBOARD_CATEGORIES = frozenset(
    {ApiCategory.TOP_CASHOUTS, ApiCategory.TOP_WINS, ApiCategory.TOP_ROUNDS}
)
LEADERBOARD_PERIODS = ("daily", "monthly", "yearly")


class SocketEvent(str, Enum):
    """Realtime event names, inbound and outbound."""

    # inbound
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    CONNECT_ERROR = "connect_error"
    INIT = "init"
    STATE = "state"
    PING = "ping"
    NOTIFY = "notify"
    ROUND_INFO = "round_info"
    CHAT_MESSAGE = "chat_message"
    CHAT_ERROR = "chat_error"
    BOOMER_UPDATE = "boomer_update"
    JACKPOT_UPDATE = "jackpot_update"
    JACKPOT_WIN = "jackpot_win"
    NEW_SERVER_SEED_HASH = "new_server_seed_hash"
    CASHOUT_STATS = "cashout_stats"
    MAINTENANCE = "maintenance"
    SESSION_EXPIRED = "session_expired"
    # outbound
    BET = "bet"
    CANCEL = "cancel"
    CASHOUT = "cashout"
    AVATAR_CHANGE = "avatar_change"
    CLIENT_SEED = "client_seed"
    PONG = "pong"


class NotifyCode(str, Enum):
    """Business codes carried by the ``notify`` event."""

    INSUFFICIENT_FUNDS = "InsufficientFunds"
    DISCONNECT = "DISCONNECT"
    ALREADY_LOGGED = "ALREADY_LOGGED"
    TOKEN_NOT_FOUND = "TokenNotFound"
    UNKNOWN_ERROR = "UnknownError"
    API_ERROR = "API_ERROR"
    BALANCE = "BALANCE"
    CASHOUT = "CASHOUT"
    EXPIRED = "EXPIRED"
    CANCEL = "CANCEL"
    BET = "BET"
    AVATAR_UPDATED = "AvatarUpdated"
    CLIENT_SEED_UPDATED = "ClientSeedUpdated"
    JACKPOT_WIN = "JackpotWin"


REJECTION_CODES = frozenset(
    {
        NotifyCode.INSUFFICIENT_FUNDS,
        NotifyCode.DISCONNECT,
        NotifyCode.ALREADY_LOGGED,
        NotifyCode.TOKEN_NOT_FOUND,
        NotifyCode.UNKNOWN_ERROR,
        NotifyCode.API_ERROR,
        NotifyCode.EXPIRED,
    }
)

# Panel slot identifiers, in allocation order.
ORDER_VALUES = (
    "first", "second", "third", "fourth", "fifth",
    "sixth", "seventh", "eighth", "ninth", "tenth",
)

EDITABLE_PANEL_FIELDS = frozenset(
    {
        "bet_amount",
        "auto_cashout",
        "auto_cashout_enabled",
        "auto_bet",
        "total_auto_bet_count",
    }
)
