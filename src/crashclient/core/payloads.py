"""PayloadDecoder — validate inbound socket payloads and build mailbox events.

Each inbound event name maps to a builder. Events with a packaged JSON
Schema are validated before building; a payload that fails is reported,
never half-applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import jsonschema

from crashclient.core.errors import PayloadError
from crashclient.core.events import (
    CashoutStatsReceived,
    ChatErrorReceived,
    ChatMessageReceived,
    Connected,
    ConnectError,
    BusinessNotify,
    Disconnected,
    Event,
    InitReceived,
    JackpotUpdate,
    JackpotWin,
    LiveWagerUpdate,
    MaintenanceSignal,
    NewServerSeedHash,
    Ping,
    RoundInfo,
    SessionExpired,
    StateUpdate,
)
from crashclient.core.schemas import schema_for
from crashclient.core.types import Phase, SocketEvent


@dataclass(frozen=True)
class DecodeResult:
    """Result of decoding one inbound payload."""

    success: bool
    event: Event | None
    error: str | None


def _state(data: dict) -> StateUpdate:
    return StateUpdate(
        phase=Phase(data["cs"]),
        multiplier=data.get("m") or 1.0,
        countdown=int(data.get("ct") or 0),
        ended=bool(data.get("en")),
        bet_count=data.get("bc"),
        maintenance=bool(data.get("maintenance")),
    )


def _connect_error(data: Any) -> ConnectError:
    if isinstance(data, dict):
        return ConnectError(str(data.get("message", data)))
    return ConnectError(str(data) if data is not None else "connection refused")


def _jackpot_win(data: Any) -> JackpotWin:
    jackpot_type = data.get("type") if isinstance(data, dict) else data
    return JackpotWin(jackpot_type=jackpot_type or "default")


_BUILDERS: dict[str, Callable[[Any], Event]] = {
    SocketEvent.CONNECT.value: lambda data: Connected(),
    SocketEvent.DISCONNECT.value: lambda data: Disconnected(
        reason=str(data) if data is not None else None
    ),
    SocketEvent.CONNECT_ERROR.value: _connect_error,
    SocketEvent.PING.value: lambda data: Ping(),
    SocketEvent.MAINTENANCE.value: lambda data: MaintenanceSignal(),
    SocketEvent.SESSION_EXPIRED.value: lambda data: SessionExpired(),
    SocketEvent.INIT.value: lambda data: InitReceived(payload=data),
    SocketEvent.STATE.value: _state,
    SocketEvent.NOTIFY.value: lambda data: BusinessNotify(
        code=data["code"], data=data.get("data") or {}
    ),
    SocketEvent.ROUND_INFO.value: lambda data: RoundInfo(round=data),
    SocketEvent.CHAT_MESSAGE.value: lambda data: ChatMessageReceived(message=data),
    SocketEvent.CHAT_ERROR.value: lambda data: ChatErrorReceived(
        reason=data["reason"], data=data.get("data")
    ),
    SocketEvent.BOOMER_UPDATE.value: lambda data: LiveWagerUpdate(updates=tuple(data)),
    SocketEvent.JACKPOT_UPDATE.value: lambda data: JackpotUpdate(amounts=data or {}),
    SocketEvent.JACKPOT_WIN.value: _jackpot_win,
    SocketEvent.NEW_SERVER_SEED_HASH.value: lambda data: NewServerSeedHash(seed=data),
    SocketEvent.CASHOUT_STATS.value: lambda data: CashoutStatsReceived(
        cashout_count=data.get("cashoutCount") or 0,
        cashout_amount=data.get("cashoutAmount") or 0.0,
    ),
}

INBOUND_EVENTS = frozenset(_BUILDERS)


class PayloadDecoder:
    """Validate a raw payload against its schema and build the typed event."""

    def decode(self, name: str, data: Any) -> DecodeResult:
        builder = _BUILDERS.get(name)
        if builder is None:
            return DecodeResult(False, None, f"Unknown inbound event '{name}'")

        schema = schema_for(name)
        if schema is not None:
            try:
                jsonschema.validate(data, schema)
            except jsonschema.ValidationError as e:
                return DecodeResult(False, None, f"Schema validation: {e.message}")

        try:
            event = builder(data)
        except (KeyError, TypeError, ValueError) as e:
            return DecodeResult(False, None, f"Malformed payload: {e}")
        return DecodeResult(True, event, None)


def decode_or_raise(name: str, data: Any) -> Event:
    result = PayloadDecoder().decode(name, data)
    if not result.success:
        raise PayloadError(name, result.error or "")
    return result.event
