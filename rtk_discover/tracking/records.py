"""Execution records prepared for the storage collaborator.

A ``CommandRecord`` pairs the raw command with the compact equivalent that ran
in its place, plus token and timing metrics. Both command strings pass through
``sanitize()`` at construction: no record built here can carry a raw secret.

Token counts are estimates (``ceil(chars / 4)``), not tokenizer output.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional

from rtk_discover.config import Config
from rtk_discover.constants import CHARS_PER_TOKEN
from rtk_discover.tracking.protocol import TrackingBackend
from rtk_discover.tracking.sanitizer import sanitize
from rtk_discover.utils.logger import get_logger, log_duration
from rtk_discover.utils.ulid import generate_ulid

logger = get_logger(__name__)


def estimate_tokens(text: str) -> int:
    """Approximate token count: ``ceil(len(text) / 4)``; ``""`` → 0."""
    return -(-len(text) // CHARS_PER_TOKEN)


def args_display(args: Iterable[object]) -> str:
    """Join command arguments with single spaces for display and tracking."""
    return " ".join(str(arg) for arg in args)


# ─── CommandRecord ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CommandRecord:
    """One tracked execution, ready for persistence.

    Passthrough executions carry zero input and output tokens so they never
    dilute the savings statistics.
    """

    original_cmd: str
    """Raw command as issued by the agent — sanitized."""
    target_cmd: str
    """Compact equivalent that ran instead (e.g. ``"rtk git status"``) — sanitized."""
    input_tokens: int
    """Estimated tokens of the raw command's output."""
    output_tokens: int
    """Estimated tokens of the compact equivalent's output."""
    exec_time_ms: int = 0
    """Wall time of the execution in milliseconds."""
    record_id: str = field(default_factory=generate_ulid)
    """ULID, sortable by creation time."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    """UTC creation time."""

    @property
    def saved_tokens(self) -> int:
        return max(self.input_tokens - self.output_tokens, 0)

    @property
    def savings_pct(self) -> float:
        if self.input_tokens <= 0:
            return 0.0
        return self.saved_tokens / self.input_tokens * 100.0


def build_record(
    original_cmd: str,
    target_cmd: str,
    input_text: str,
    output_text: str,
    exec_time_ms: int = 0,
) -> CommandRecord:
    """Build a record from raw and compacted output text."""
    return CommandRecord(
        original_cmd=sanitize(original_cmd),
        target_cmd=sanitize(target_cmd),
        input_tokens=estimate_tokens(input_text),
        output_tokens=estimate_tokens(output_text),
        exec_time_ms=exec_time_ms,
    )


def build_passthrough_record(
    original_cmd: str,
    target_cmd: str,
    exec_time_ms: int = 0,
) -> CommandRecord:
    """Build a timing-only record (zero tokens) for streamed or interactive commands."""
    return CommandRecord(
        original_cmd=sanitize(original_cmd),
        target_cmd=sanitize(target_cmd),
        input_tokens=0,
        output_tokens=0,
        exec_time_ms=exec_time_ms,
    )


def record_execution(backend: Optional[TrackingBackend], record: CommandRecord) -> None:
    """Hand ``record`` to ``backend``. Best effort: never raises."""
    if backend is None:
        return
    try:
        backend.record(record)
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "Tracking backend failed — record dropped",
            record_id=record.record_id,
            error_type=type(exc).__name__,
            error=str(exc),
        )


# ─── TimedExecution ───────────────────────────────────────────────────────────


class TimedExecution:
    """Measure one execution and produce its record.

    Usage:
        timer = TimedExecution.start(backend)
        ...  # run the compact equivalent
        timer.track("git status", "rtk git status", raw_output, compact_output)

    With ``enabled=False`` records are still built and returned but never
    forwarded to the backend.
    """

    def __init__(self, backend: Optional[TrackingBackend] = None, enabled: bool = True) -> None:
        self.backend = backend
        self.enabled = enabled
        self.start_time: float = time.perf_counter()

    @classmethod
    def start(cls, backend: Optional[TrackingBackend] = None, enabled: bool = True) -> "TimedExecution":
        return cls(backend=backend, enabled=enabled)

    @classmethod
    def from_config(cls, config: Config, backend: Optional[TrackingBackend] = None) -> "TimedExecution":
        """Start a timer honouring ``config.tracking.enabled`` (and ``RTK_TRACKING``)."""
        return cls(backend=backend, enabled=config.tracking.enabled)

    @property
    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self.start_time) * 1000)

    def track(self, original_cmd: str, target_cmd: str, input_text: str, output_text: str) -> CommandRecord:
        """Record the execution with estimated token counts and elapsed time."""
        log_duration("execution", self.start_time, logger)
        record = build_record(original_cmd, target_cmd, input_text, output_text, self.elapsed_ms)
        self._forward(record)
        return record

    def track_passthrough(self, original_cmd: str, target_cmd: str) -> CommandRecord:
        """Record timing only; tokens stay zero."""
        log_duration("passthrough execution", self.start_time, logger)
        record = build_passthrough_record(original_cmd, target_cmd, self.elapsed_ms)
        self._forward(record)
        return record

    def _forward(self, record: CommandRecord) -> None:
        if self.enabled:
            record_execution(self.backend, record)
