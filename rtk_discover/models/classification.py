"""Classification result contract for the command interpretation pipeline.

``Classification`` is a closed union of exactly three frozen dataclasses:

  - ``Supported``   — a compact equivalent exists for the command.
  - ``Unsupported`` — no rule matched; carries a best-effort ``base_command``.
  - ``Ignored``     — not a meaningful command (comment, builtin, noise, empty).

Callers branch with ``match`` or ``isinstance``; there is no fourth state and
no ``None`` result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class Status(str, Enum):
    """How the compact equivalent relates to the raw command."""

    EXISTING = "Existing"
    """A native compact equivalent runs instead of the raw command."""
    PASSTHROUGH = "Passthrough"
    """The equivalent only wraps/forwards the raw command."""


@dataclass(frozen=True)
class Supported:
    """A known compact equivalent exists.

    Fields:
        target:      Compact-equivalent command name (e.g. ``"rtk git"``).
        category:    Rule category (e.g. ``"Git"``); keys ``category_avg_tokens``.
        savings_pct: Estimated output-token savings, 0.0–100.0.
        status:      ``Status.EXISTING`` or ``Status.PASSTHROUGH``.
        subcommand:  Subcommand captured by the rule pattern, if any.
    """

    target: str
    category: str
    savings_pct: float
    status: Status
    # informational only: not part of equality
    subcommand: str = field(default="", compare=False)


@dataclass(frozen=True)
class Unsupported:
    """No rule matched; ``base_command`` is one or two leading tokens."""

    base_command: str


@dataclass(frozen=True)
class Ignored:
    """The input is not a meaningful command."""


IGNORED = Ignored()

Classification = Union[Supported, Unsupported, Ignored]
