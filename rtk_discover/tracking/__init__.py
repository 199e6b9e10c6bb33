"""rtk-discover tracking package.

Re-exports the public API for ergonomic imports:

    from rtk_discover.tracking import CommandRecord, TimedExecution, TrackingBackend

Layout:
    sensitive_keys.py — sensitive key table + key / flag matching
    sanitizer.py      — sanitize(): token-wise credential redaction
    records.py        — estimate_tokens(), CommandRecord, record builders, TimedExecution
    protocol.py       — TrackingBackend Protocol + NullTrackingBackend stub
"""

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
from rtk_discover.tracking.sanitizer import sanitize

__all__ = [
    # Records
    "CommandRecord",
    "TimedExecution",
    "args_display",
    "build_passthrough_record",
    "build_record",
    "estimate_tokens",
    "record_execution",
    # Redaction
    "sanitize",
    # Protocol + implementations
    "NullTrackingBackend",
    "TrackingBackend",
]
