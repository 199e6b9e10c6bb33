"""rtk-discover — interpret agent shell commands and prepare them for tracking.

Public interface:

  - split_chain(raw)                     — break a command line into segments
  - classify(cmd)                        — Supported | Unsupported | Ignored
  - sanitize(cmd)                        — redact credentials before persistence
  - category_avg_tokens(category, sub)   — default output-size estimate
  - discover_commands(lines)             — aggregate classifications into a report
  - load_config(path) / apply_logging(cfg) — read .rtk/config.yaml, apply its logging section
"""

from rtk_discover.config import Config, apply_logging, load_config
from rtk_discover.discover.classifier import classify
from rtk_discover.discover.report import DiscoverReport, discover_commands
from rtk_discover.discover.rules import RegistryError, category_avg_tokens
from rtk_discover.discover.splitter import split_chain
from rtk_discover.models.classification import (
    IGNORED,
    Classification,
    Ignored,
    Status,
    Supported,
    Unsupported,
)
from rtk_discover.tracking.sanitizer import sanitize

__version__ = "0.4.0"

__all__ = [
    "IGNORED",
    "Classification",
    "Config",
    "DiscoverReport",
    "Ignored",
    "RegistryError",
    "Status",
    "Supported",
    "Unsupported",
    "apply_logging",
    "category_avg_tokens",
    "classify",
    "discover_commands",
    "load_config",
    "sanitize",
    "split_chain",
]
