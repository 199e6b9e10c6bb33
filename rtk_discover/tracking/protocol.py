"""TrackingBackend Protocol — the storage collaborator interface.

The durable store that aggregates executions lives outside this package. It
receives only ``CommandRecord`` values whose command strings have already been
through ``sanitize()``.

Layout:
    records.py  — CommandRecord + record builders + TimedExecution
    protocol.py — TrackingBackend Protocol + NullTrackingBackend stub
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from rtk_discover.utils.logger import get_logger

if TYPE_CHECKING:
    from rtk_discover.tracking.records import CommandRecord

logger = get_logger(__name__)


# ─── TrackingBackend Protocol ─────────────────────────────────────────────────


@runtime_checkable
class TrackingBackend(Protocol):
    """Pluggable storage interface for prepared execution records.

    ``record()`` is called synchronously by ``TimedExecution``; failures are
    caught and logged by the caller, never propagated to the command path.
    """

    def record(self, record: "CommandRecord") -> None:
        """Persist one execution record."""
        ...


# ─── NullTrackingBackend ──────────────────────────────────────────────────────


class NullTrackingBackend:
    """No-op TrackingBackend — used when tracking is disabled and in tests."""

    def record(self, record: "CommandRecord") -> None:
        """No-op: record discarded."""
        logger.debug("NullTrackingBackend.record (stub)", record_id=record.record_id)


# ─── Protocol compliance assertion ────────────────────────────────────────────
# Runs at import time: protocol drift fails on import.
assert isinstance(NullTrackingBackend(), TrackingBackend), (
    "NullTrackingBackend does not satisfy TrackingBackend protocol — implementation error"
)
