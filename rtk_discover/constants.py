"""Shared constants for rtk-discover.

Numeric limits and fixed strings used across modules are defined here.
No magic numbers in other modules — import from here.
"""

# ─── Redaction ────────────────────────────────────────────────────────────────

# Fixed placeholder substituted for every detected sensitive value.
REDACTED_VALUE: str = "<redacted>"

# HTTP auth scheme words: the credential follows on the next token.
AUTH_SCHEME_WORDS: frozenset[str] = frozenset({"bearer", "basic", "token"})

# ─── Token estimation ─────────────────────────────────────────────────────────

# Rough average characters per model token (tokens = ceil(chars / 4)).
CHARS_PER_TOKEN: int = 4

# Fallback output-size estimate for categories without a specific entry.
DEFAULT_CATEGORY_AVG_TOKENS: int = 150

# ─── Tracking ─────────────────────────────────────────────────────────────────

# Days of history the storage collaborator keeps before cleanup.
HISTORY_DAYS: int = 90

# File name of the tracking database inside the data root.
TRACKING_DB_FILE: str = "history.db"

# Directory name of the data root under the platform data directory.
DATA_DIR_NAME: str = "rtk"

# ─── Classification ───────────────────────────────────────────────────────────

# Target-name prefix marking forwarding targets (status defaults to Passthrough).
PROXY_TARGET_PREFIX: str = "rtk proxy "

# Base-command extraction looks at no more than this many leading tokens.
BASE_COMMAND_MAX_TOKENS: int = 3
