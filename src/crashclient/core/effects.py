"""Effects — side effects described as data.

The reducer never performs I/O. It returns a list of these and the
session runner interprets them after the new state has been stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from crashclient.core.events import Event
from crashclient.core.types import ApiCategory, Phase


class Effect:
    """Base for all effects."""

    @property
    def type_name(self) -> str:
        return type(self).__name__


# Transport


@dataclass(frozen=True)
class Connect(Effect):
    url: str
    namespace: str = "/"
    query: dict[str, str] = field(default_factory=dict)
    transports: tuple[str, ...] = ("websocket",)
    reconnection_attempts: int = 5
    reconnection_delay_s: float = 5.0


@dataclass(frozen=True)
class Disconnect(Effect):
    pass


@dataclass(frozen=True)
class Emit(Effect):
    event: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RequestInit(Effect):
    pass


@dataclass(frozen=True)
class AttachSubscriptions(Effect):
    pass


@dataclass(frozen=True)
class DetachSubscriptions(Effect):
    pass


# Timers


@dataclass(frozen=True)
class StartTimer(Effect):
    """Fire ``event`` after ``delay_s``. Starting an existing key replaces it."""

    key: str
    delay_s: float
    event: Event


@dataclass(frozen=True)
class CancelTimer(Effect):
    key: str


@dataclass(frozen=True)
class CancelAllTimers(Effect):
    pass


# Visibility


@dataclass(frozen=True)
class StartVisibility(Effect):
    pass


@dataclass(frozen=True)
class StopVisibility(Effect):
    pass


# Statistics API


@dataclass(frozen=True)
class ConfigureApi(Effect):
    base_url: str | None = None
    session_id: str | None = None


@dataclass(frozen=True)
class ApiRequest(Effect):
    category: ApiCategory
    seq: int
    params: dict[str, Any] = field(default_factory=dict)


# Renderer


@dataclass(frozen=True)
class LoadGame(Effect):
    pass


@dataclass(frozen=True)
class PrepareStage(Effect):
    pass


@dataclass(frozen=True)
class RenderCall(Effect):
    """Invoke ``method`` on the game renderer with keyword arguments."""

    method: str
    kwargs: dict[str, Any] = field(default_factory=dict)


# Scheduling and observers


@dataclass(frozen=True)
class Dispatch(Effect):
    """Queue ``event`` behind the one currently being processed."""

    event: Event


@dataclass(frozen=True)
class PublishPhase(Effect):
    phase: Phase
    multiplier: float
    countdown: int
