"""Error taxonomy and exception types shared across the client."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Categories of session faults, from transport level down to business."""

    CONNECTION_INIT_TIMEOUT = "connection-init-timeout"
    CONNECTION_LOST = "connection-lost"
    MAINTENANCE_MODE = "maintenance-mode"
    RECONNECT_EXHAUSTED = "reconnect-exhausted"
    SESSION_EXPIRED = "session-expired"
    ASSET_OR_BOOT_FAILURE = "asset-or-boot-failure"
    API_REQUEST_FAILURE = "api-request-failure"
    INSUFFICIENT_BALANCE = "insufficient-balance"
    BUSINESS_REJECTION = "business-rejection"


@dataclass(frozen=True)
class ConnectionFault:
    """Why the session left the game: shown on the connection-error screen."""

    kind: ErrorKind
    title: str
    description: str
    details: str | None = None


class ConfigError(Exception):
    """Raised when a client config file is missing required sections."""


class PayloadError(ValueError):
    """Raised when an inbound socket payload fails its schema."""

    def __init__(self, event: str, details: str):
        self.event = event
        self.details = details
        super().__init__(f"invalid {event} payload: {details}")


class ApiError(Exception):
    """Raised by the statistics API client. Never let raw requests exceptions propagate."""

    def __init__(
        self,
        error_type: str,
        endpoint: str,
        details: str = "",
    ):
        self.error_type = error_type  # not_configured, timeout, http_error, connection_error, bad_response
        self.endpoint = endpoint
        self.details = details
        super().__init__(f"{error_type} from {endpoint}: {details}")


class ApiConfigError(ApiError):
    """Raised before any I/O when the base URL or session id is missing."""

    def __init__(self, endpoint: str, details: str):
        super().__init__("not_configured", endpoint, details)
