"""Unit tests for execution records (rtk_discover/tracking/records.py).

Covers:
  - estimate_tokens() = ceil(chars / 4)
  - args_display()
  - CommandRecord derived metrics (saved_tokens, savings_pct)
  - build_record() / build_passthrough_record() sanitize both command strings
  - TimedExecution forwards to the backend only when tracking is enabled
  - record_execution() never raises when the backend fails
"""

from __future__ import annotations

from datetime import timezone

import pytest

from rtk_discover.config import Config
from rtk_discover.tracking.protocol import NullTrackingBackend, TrackingBackend
from rtk_discover.tracking.records import (
    CommandRecord,
    TimedExecution,
    args_display,
    build_passthrough_record,
    build_record,
    estimate_tokens,
    record_execution,
)


class RecordingBackend:
    """TrackingBackend that keeps every record in memory."""

    def __init__(self) -> None:
        self.records: list[CommandRecord] = []

    def record(self, record: CommandRecord) -> None:
        self.records.append(record)


class FailingBackend:
    def record(self, record: CommandRecord) -> None:
        raise OSError("database is locked")


# ─── estimate_tokens / args_display ───────────────────────────────────────────


class TestEstimateTokens:

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("", 0), ("a", 1), ("abcd", 1), ("abcde", 2), ("x" * 400, 100), ("x" * 401, 101)],
    )
    def test_ceiling_of_quarter_length(self, text: str, expected: int) -> None:
        assert estimate_tokens(text) == expected


class TestArgsDisplay:

    def test_joins_with_single_spaces(self) -> None:
        assert args_display(["status", "--short"]) == "status --short"

    def test_empty(self) -> None:
        assert args_display([]) == ""

    def test_non_string_args(self) -> None:
        assert args_display(["-n", 5]) == "-n 5"


# ─── CommandRecord ────────────────────────────────────────────────────────────


class TestCommandRecord:

    def test_saved_tokens_and_pct(self) -> None:
        record = CommandRecord("git status", "rtk git status", input_tokens=200, output_tokens=50)
        assert record.saved_tokens == 150
        assert record.savings_pct == 75.0

    def test_saved_tokens_never_negative(self) -> None:
        record = CommandRecord("a", "rtk a", input_tokens=10, output_tokens=40)
        assert record.saved_tokens == 0
        assert record.savings_pct == 0.0

    def test_zero_input_has_zero_pct(self) -> None:
        record = CommandRecord("a", "rtk a", input_tokens=0, output_tokens=0)
        assert record.savings_pct == 0.0

    def test_record_id_is_ulid_and_unique(self) -> None:
        a = CommandRecord("a", "rtk a", 1, 1)
        b = CommandRecord("a", "rtk a", 1, 1)
        assert len(a.record_id) == 26
        assert a.record_id != b.record_id

    def test_timestamp_is_utc(self) -> None:
        record = CommandRecord("a", "rtk a", 1, 1)
        assert record.timestamp.tzinfo is timezone.utc

    def test_is_frozen(self) -> None:
        record = CommandRecord("a", "rtk a", 1, 1)
        with pytest.raises(AttributeError):
            record.input_tokens = 5  # type: ignore[misc]


# ─── Builders ─────────────────────────────────────────────────────────────────


class TestBuilders:

    def test_build_record_estimates_tokens(self) -> None:
        record = build_record("git log", "rtk git log", "x" * 800, "x" * 80, exec_time_ms=12)
        assert record.input_tokens == 200
        assert record.output_tokens == 20
        assert record.saved_tokens == 180
        assert record.exec_time_ms == 12

    def test_build_record_sanitizes_both_commands(self) -> None:
        record = build_record(
            "GITHUB_TOKEN=ghp_secret gh pr list",
            "rtk gh pr list --token ghp_secret",
            "out",
            "o",
        )
        assert "ghp_secret" not in record.original_cmd
        assert "ghp_secret" not in record.target_cmd
        assert record.original_cmd == "GITHUB_TOKEN=<redacted> gh pr list"

    def test_passthrough_record_has_zero_tokens(self) -> None:
        record = build_passthrough_record("gcloud run deploy", "rtk proxy gcloud run deploy", 900)
        assert record.input_tokens == 0
        assert record.output_tokens == 0
        assert record.saved_tokens == 0
        assert record.exec_time_ms == 900

    def test_passthrough_record_is_sanitized(self) -> None:
        record = build_passthrough_record("psql postgres://u:pw@db/app", "rtk proxy psql")
        assert "pw@" not in record.original_cmd


# ─── record_execution ─────────────────────────────────────────────────────────


class TestRecordExecution:

    def test_forwards_to_backend(self) -> None:
        backend = RecordingBackend()
        record = build_record("ls", "rtk ls", "a", "a")
        record_execution(backend, record)
        assert backend.records == [record]

    def test_none_backend_is_noop(self) -> None:
        record_execution(None, build_record("ls", "rtk ls", "a", "a"))

    def test_backend_failure_is_swallowed(self) -> None:
        record_execution(FailingBackend(), build_record("ls", "rtk ls", "a", "a"))


# ─── TimedExecution ───────────────────────────────────────────────────────────


class TestTimedExecution:

    def test_track_returns_and_forwards_record(self) -> None:
        backend = RecordingBackend()
        timer = TimedExecution.start(backend)
        record = timer.track("git status", "rtk git status", "x" * 40, "x" * 8)
        assert backend.records == [record]
        assert record.input_tokens == 10
        assert record.output_tokens == 2
        assert record.exec_time_ms >= 0

    def test_track_passthrough(self) -> None:
        backend = RecordingBackend()
        record = TimedExecution.start(backend).track_passthrough("bq ls", "rtk proxy bq ls")
        assert backend.records == [record]
        assert record.input_tokens == 0

    def test_disabled_does_not_forward(self) -> None:
        backend = RecordingBackend()
        record = TimedExecution.start(backend, enabled=False).track("ls", "rtk ls", "abc", "a")
        assert backend.records == []
        assert isinstance(record, CommandRecord)

    def test_from_config_honours_tracking_enabled(self) -> None:
        backend = RecordingBackend()
        config = Config.defaults()
        config.tracking.enabled = False
        TimedExecution.from_config(config, backend).track("ls", "rtk ls", "abc", "a")
        assert backend.records == []

    def test_failing_backend_does_not_break_tracking(self) -> None:
        record = TimedExecution.start(FailingBackend()).track("ls", "rtk ls", "abc", "a")
        assert record.original_cmd == "ls"

    def test_without_backend(self) -> None:
        record = TimedExecution.start().track("ls", "rtk ls", "abc", "a")
        assert record.target_cmd == "rtk ls"


# ─── Protocol ─────────────────────────────────────────────────────────────────


class TestTrackingBackendProtocol:

    def test_null_backend_satisfies_protocol(self) -> None:
        assert isinstance(NullTrackingBackend(), TrackingBackend)

    def test_duck_typed_backend_satisfies_protocol(self) -> None:
        assert isinstance(RecordingBackend(), TrackingBackend)

    def test_incomplete_class_does_not_satisfy_protocol(self) -> None:
        class NoRecordMethod:
            def save(self, record: CommandRecord) -> None:
                pass

        assert not isinstance(NoRecordMethod(), TrackingBackend)

    def test_null_backend_discards(self) -> None:
        NullTrackingBackend().record(build_record("ls", "rtk ls", "a", "a"))
