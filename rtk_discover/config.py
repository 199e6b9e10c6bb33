"""Config loading for rtk-discover.

Reads `.rtk/config.yaml` (or `~/.rtk/config.yaml`).
Raises SystemExit on parse errors or missing `version` field.
If no config file is found, returns default values (safe to run without config).

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. RTK_CONFIG environment variable (if set)
  3. `.rtk/config.yaml` (working directory — for development)
  4. `~/.rtk/config.yaml` (home directory)

Environment variable overrides:
  RTK_TRACKING — overrides tracking.enabled (boolean words only)
  RTK_DB_PATH  — overrides tracking.db_path (must stay inside the data root)
  RTK_CONFIG   — sets an explicit config file path to try first
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from rtk_discover.constants import DATA_DIR_NAME, HISTORY_DAYS, TRACKING_DB_FILE
from rtk_discover.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

# ─── Validation sets ─────────────────────────────────────────────────────────

VALID_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

_TRUE_WORDS: frozenset[str] = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS: frozenset[str] = frozenset({"0", "false", "no", "off"})

DEFAULT_CONFIG_PATHS = [
    ".rtk/config.yaml",
    os.path.expanduser("~/.rtk/config.yaml"),
]


def data_root() -> Path:
    """Directory holding tracking data: ``$XDG_DATA_HOME/rtk`` or ``~/.local/share/rtk``."""
    base = os.environ.get("XDG_DATA_HOME") or os.path.expanduser("~/.local/share")
    return Path(base) / DATA_DIR_NAME


def default_db_path() -> str:
    return str(data_root() / TRACKING_DB_FILE)


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class TrackingConfig:
    """Execution tracking configuration.

    enabled:      Forward prepared records to the storage collaborator.
    db_path:      Database location handed to the storage collaborator.
    history_days: Retention the storage collaborator should apply.
    """

    enabled: bool = True
    db_path: str = field(default_factory=default_db_path)
    history_days: int = HISTORY_DAYS


@dataclass
class LoggingConfig:
    """Structured logging configuration."""

    level: str = "WARNING"
    json: bool = True


@dataclass
class Config:
    """Root configuration object populated from .rtk/config.yaml.

    All fields have safe defaults — the pipeline runs without any config file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    path: Optional[str] = None  # Path to the loaded config file

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.

        Raises:
            SystemExit(1): On an invalid logging.level value or a non-positive
                           tracking.history_days.
        """
        # ── Tracking ──────────────────────────────────────────────────────────
        tracking_raw = raw.get("tracking") or {}
        history_days = tracking_raw.get("history_days", HISTORY_DAYS)
        if not isinstance(history_days, int) or history_days <= 0:
            msg = (
                f"CONFIG ERROR: Invalid tracking.history_days: '{history_days}'. "
                "Must be a positive integer."
            )
            print(msg, file=sys.stderr)
            raise SystemExit(1)
        tracking = TrackingConfig(
            enabled=bool(tracking_raw.get("enabled", True)),
            db_path=str(tracking_raw.get("db_path") or default_db_path()),
            history_days=history_days,
        )

        # ── Logging ───────────────────────────────────────────────────────────
        logging_raw = raw.get("logging") or {}
        level = str(logging_raw.get("level", "WARNING")).upper()
        if level not in VALID_LOG_LEVELS:
            msg = (
                f"CONFIG ERROR: Invalid logging.level: '{level}'. "
                f"Supported values: {sorted(VALID_LOG_LEVELS)}."
            )
            print(msg, file=sys.stderr)
            raise SystemExit(1)
        logging_cfg = LoggingConfig(
            level=level,
            json=bool(logging_raw.get("json", True)),
        )

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            tracking=tracking,
            logging=logging_cfg,
            path=path,
        )


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate rtk-discover configuration.

    Search order:
      1. ``config_path`` argument
      2. ``RTK_CONFIG`` environment variable
      3. ``.rtk/config.yaml``
      4. ``~/.rtk/config.yaml``

    If no file is found at any of these paths, returns default Config (not an error).
    If a file is found but invalid, writes error to stderr and raises SystemExit(1).

    ``RTK_TRACKING`` and ``RTK_DB_PATH`` are applied afterwards regardless of
    whether a config file was found.

    Raises:
        SystemExit(1): On YAML parse error, missing ``version`` field, unsupported
                       version, or invalid section values.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("RTK_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # ── No config file found ─────────────────────────────────────────────────
    if found_path is None:
        logger.debug("No config file found — using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    # ── Parse config file ─────────────────────────────────────────────────────
    logger.debug("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        msg = (
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "Check the YAML syntax and try again."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)
    except OSError as exc:
        msg = f"CONFIG ERROR: Could not read {found_path}: {exc}"
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    if not isinstance(raw, dict):
        if raw is None:
            msg = (
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        else:
            msg = (
                f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
                "The config file must be a YAML dictionary at the top level."
            )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    # ── Version validation ────────────────────────────────────────────────────
    version = raw.get("version")
    if version is None:
        msg = (
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    if version not in SUPPORTED_VERSIONS:
        msg = (
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)

    logger.debug(
        "Config loaded",
        path=found_path,
        version=config.version,
        tracking_enabled=config.tracking.enabled,
    )
    return config


def parse_bool_env(value: str) -> Optional[bool]:
    """Parse a boolean environment word; None when the word is not recognised."""
    word = value.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return None


def sanitize_db_path(candidate: str, root: Path) -> str:
    """Return ``candidate`` if it stays inside ``root``, else the default db path.

    Paths containing a ``..`` component are rejected outright.
    """
    path = Path(os.path.expanduser(candidate))
    fallback = str(root / TRACKING_DB_FILE)
    if ".." in path.parts:
        logger.warning("RTK_DB_PATH contains a parent-directory component — ignored")
        return fallback
    resolved_root = root.resolve()
    resolved = path.resolve() if path.is_absolute() else (root / path).resolve()
    if resolved != resolved_root and resolved_root not in resolved.parents:
        logger.warning("RTK_DB_PATH is outside the data root — ignored", root=str(root))
        return fallback
    return str(resolved)


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Handles:
      RTK_TRACKING — overrides config.tracking.enabled; unrecognised words are ignored
      RTK_DB_PATH  — overrides config.tracking.db_path via sanitize_db_path()
    """
    env_tracking = os.environ.get("RTK_TRACKING")
    if env_tracking is not None:
        parsed = parse_bool_env(env_tracking)
        if parsed is None:
            logger.warning("RTK_TRACKING is not a boolean word — ignored", value=env_tracking)
        else:
            config.tracking.enabled = parsed

    env_db_path = os.environ.get("RTK_DB_PATH")
    if env_db_path:
        config.tracking.db_path = sanitize_db_path(env_db_path, data_root())


def apply_logging(config: Config) -> None:
    """Reconfigure structured logging from ``config.logging``.

    Called once at startup, after ``load_config()``.
    """
    configure_logging(log_level=config.logging.level, json_output=config.logging.json)
