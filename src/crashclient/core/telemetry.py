"""TelemetryLogger — JSONL session journal.

One logger per session. Writes one JSONL line per processed mailbox event
plus a session summary as the final line. All entries include schema
version and session ID.
"""

import json
from dataclasses import asdict, dataclass, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

import crashclient

_SCHEMA_VERSION = "1.0.0"


@dataclass
class TelemetryEntry:
    """One processed event."""

    sequence: int
    event_type: str
    event: dict
    screen_before: str
    screen_after: str
    phase: str | None
    effects: list[str]
    connected: bool
    balance: float


def event_fields(event) -> dict:
    """Serializable view of an event's fields."""
    if is_dataclass(event):
        return asdict(event)
    return {}


def _default(value):
    if isinstance(value, Enum):
        return value.value
    return str(value)


class TelemetryLogger:
    """Writes JSONL telemetry for a single session."""

    def __init__(self, output_dir: Path, session_id: str):
        self._output_dir = Path(output_dir)
        self._session_id = session_id
        self._output_dir.mkdir(parents=True, exist_ok=True)
        self._file_path = self._output_dir / f"{session_id}.jsonl"

    @property
    def file_path(self) -> Path:
        return self._file_path

    def log_event(self, entry: TelemetryEntry) -> None:
        record = asdict(entry)
        record["schema_version"] = _SCHEMA_VERSION
        record["session_id"] = self._session_id
        record["timestamp"] = datetime.now(timezone.utc).isoformat()
        self._append(record)

    def finalize_session(
        self,
        screen: str,
        events_processed: int,
        extra: dict | None = None,
    ) -> None:
        record = {
            "schema_version": _SCHEMA_VERSION,
            "record_type": "session_summary",
            "session_id": self._session_id,
            "final_screen": screen,
            "events_processed": events_processed,
            "client_version": crashclient.__version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if extra:
            record.update(extra)
        self._append(record)

    def _append(self, record: dict) -> None:
        with open(self._file_path, "a") as f:
            f.write(json.dumps(record, default=_default) + "\n")
