"""Tests for TelemetryLogger — JSONL session journal."""

import json

import pytest

from crashclient.core.events import StateUpdate
from crashclient.core.telemetry import TelemetryEntry, TelemetryLogger, event_fields
from crashclient.core.types import Phase


@pytest.fixture
def logger(tmp_path):
    return TelemetryLogger(output_dir=tmp_path, session_id="test-session-001")


class TestTelemetryLogger:
    def test_log_event_creates_file(self, logger, tmp_path):
        logger.log_event(_make_entry(sequence=1))
        assert (tmp_path / "test-session-001.jsonl").exists()
        assert logger.file_path == tmp_path / "test-session-001.jsonl"

    def test_log_event_writes_valid_jsonl(self, logger):
        logger.log_event(_make_entry(sequence=1))
        logger.log_event(_make_entry(sequence=2))
        lines = logger.file_path.read_text().strip().split("\n")
        assert len(lines) == 2
        for line in lines:
            parsed = json.loads(line)
            assert "sequence" in parsed
            assert "schema_version" in parsed

    def test_log_event_contains_all_fields(self, logger):
        logger.log_event(_make_entry(sequence=1))
        parsed = json.loads(logger.file_path.read_text().strip())
        required_fields = [
            "schema_version", "session_id", "sequence", "event_type", "event",
            "screen_before", "screen_after", "phase", "effects", "connected",
            "balance", "timestamp",
        ]
        for field in required_fields:
            assert field in parsed, f"Missing field: {field}"

    def test_enums_serialized_by_value(self, logger):
        entry = _make_entry(sequence=1)
        entry.event = event_fields(StateUpdate(Phase.PLAYING, multiplier=2.0))
        logger.log_event(entry)
        parsed = json.loads(logger.file_path.read_text().strip())
        assert parsed["event"]["phase"] == "PLAYING"
        assert parsed["event"]["multiplier"] == 2.0

    def test_finalize_session_appends_summary(self, logger):
        logger.log_event(_make_entry(sequence=1))
        logger.finalize_session("game", 1, extra={"reason": "user quit"})
        lines = logger.file_path.read_text().strip().split("\n")
        assert len(lines) == 2
        summary = json.loads(lines[-1])
        assert summary["record_type"] == "session_summary"
        assert summary["final_screen"] == "game"
        assert summary["events_processed"] == 1
        assert summary["reason"] == "user quit"

    def test_session_id_in_every_line(self, logger):
        logger.log_event(_make_entry(sequence=1))
        logger.log_event(_make_entry(sequence=2))
        for line in logger.file_path.read_text().strip().split("\n"):
            assert json.loads(line)["session_id"] == "test-session-001"

    def test_creates_missing_directory(self, tmp_path):
        nested = tmp_path / "journal" / "today"
        TelemetryLogger(nested, "s").log_event(_make_entry())
        assert (nested / "s.jsonl").exists()


def _make_entry(sequence: int = 1) -> TelemetryEntry:
    return TelemetryEntry(
        sequence=sequence,
        event_type="StateUpdate",
        event={"phase": "BETTING"},
        screen_before="game",
        screen_after="game",
        phase="BETTING",
        effects=["RenderCall", "PublishPhase"],
        connected=True,
        balance=100.0,
    )
