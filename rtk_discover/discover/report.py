"""Discovery report — aggregate classifications over a history of command lines.

Each raw line is split with ``split_chain()`` and every segment classified.
Supported segments are grouped by target, unsupported ones by base command.
Both groupings list the most frequent entries first (ties by name).

Base commands are passed through ``sanitize()`` before they are stored: the
report is meant to be printed or persisted, so it must not carry secrets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from rtk_discover.discover.classifier import classify
from rtk_discover.discover.rules import category_avg_tokens
from rtk_discover.discover.splitter import split_chain
from rtk_discover.models.classification import Status, Supported, Unsupported
from rtk_discover.tracking.sanitizer import sanitize
from rtk_discover.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class SupportedEntry:
    """All segments that map to one compact target."""

    target: str
    category: str
    count: int = 0
    estimated_saved_tokens: int = 0


@dataclass
class UnsupportedEntry:
    """All segments sharing one base command with no compact equivalent."""

    base_command: str
    count: int = 0


@dataclass
class DiscoverReport:
    total_segments: int = 0
    supported_count: int = 0
    unsupported_count: int = 0
    ignored_count: int = 0
    passthrough_count: int = 0
    supported: list[SupportedEntry] = field(default_factory=list)
    unsupported: list[UnsupportedEntry] = field(default_factory=list)

    @property
    def estimated_saved_tokens(self) -> int:
        return sum(entry.estimated_saved_tokens for entry in self.supported)

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible summary."""
        return {
            "total_segments": self.total_segments,
            "supported": self.supported_count,
            "unsupported": self.unsupported_count,
            "ignored": self.ignored_count,
            "passthrough": self.passthrough_count,
            "estimated_saved_tokens": self.estimated_saved_tokens,
            "targets": [
                {
                    "target": e.target,
                    "category": e.category,
                    "count": e.count,
                    "estimated_saved_tokens": e.estimated_saved_tokens,
                }
                for e in self.supported
            ],
            "unsupported_commands": [
                {"base_command": e.base_command, "count": e.count}
                for e in self.unsupported
            ],
        }


def estimated_saved_tokens(result: Supported) -> int:
    """Saved tokens for one execution: category average × savings %, rounded down."""
    return int(category_avg_tokens(result.category, result.subcommand) * result.savings_pct // 100)


def discover_commands(lines: Iterable[str]) -> DiscoverReport:
    """Classify every segment of every line and aggregate the results."""
    report = DiscoverReport()
    by_target: dict[str, SupportedEntry] = {}
    by_base: dict[str, UnsupportedEntry] = {}

    for line in lines:
        for segment in split_chain(line):
            report.total_segments += 1
            result = classify(segment)

            if isinstance(result, Supported):
                report.supported_count += 1
                if result.status is Status.PASSTHROUGH:
                    report.passthrough_count += 1
                entry = by_target.get(result.target)
                if entry is None:
                    entry = by_target[result.target] = SupportedEntry(
                        target=result.target,
                        category=result.category,
                    )
                entry.count += 1
                entry.estimated_saved_tokens += estimated_saved_tokens(result)

            elif isinstance(result, Unsupported):
                report.unsupported_count += 1
                base = sanitize(result.base_command)
                unsupported = by_base.get(base)
                if unsupported is None:
                    unsupported = by_base[base] = UnsupportedEntry(base_command=base)
                unsupported.count += 1

            else:
                report.ignored_count += 1

    report.supported = sorted(by_target.values(), key=lambda e: (-e.count, e.target))
    report.unsupported = sorted(by_base.values(), key=lambda e: (-e.count, e.base_command))

    logger.debug(
        "Discovery report built",
        total_segments=report.total_segments,
        supported=report.supported_count,
        unsupported=report.unsupported_count,
        ignored=report.ignored_count,
    )
    return report
