"""Sensitive key table for command redaction.

A key name is sensitive when, after normalisation (quotes, leading dashes and
a trailing colon stripped, lowercased) and splitting on non-alphanumeric
boundaries, any part is a known sensitive term or any adjacent pair of parts
forms a known compound (``api`` + ``key``, ``client`` + ``secret`` …).

    API_KEY         → ["api", "key"]          sensitive ("key")
    --client-secret → ["client", "secret"]    sensitive ("secret")
    X-Api-Token     → ["x", "api", "token"]   sensitive ("token")
    --verbose       → ["verbose"]             not sensitive

IMPORT RULES:
  - ``import re2`` ONLY — ``import re`` is PROHIBITED in this file.
"""

from __future__ import annotations

import re2  # google-re2 — NOT stdlib re

# Single parts that mark a key as sensitive.
SENSITIVE_PARTS: frozenset[str] = frozenset({
    "token",
    "secret",
    "password",
    "auth",
    "authorization",
    "apikey",
    "credential",
    "credentials",
    "private",
    "session",
    "sessionid",
    "jwt",
    "cookie",
    "key",
    "signature",
    "oauth",
    "refresh",
    "pass",
    "passwd",
    "passphrase",
    "bearer",
})

# Adjacent part pairs that mark a key as sensitive.
SENSITIVE_COMPOUNDS: frozenset[tuple[str, str]] = frozenset({
    ("api", "key"),
    ("api", "token"),
    ("api", "secret"),
    ("access", "token"),
    ("auth", "token"),
    ("private", "key"),
    ("client", "secret"),
})

# COMPILED AT MODULE LOAD, never per-call
_PART_SEPARATOR = re2.compile(r'[^a-z0-9]+')


def normalize_key(token: str) -> str:
    """Strip surrounding quotes, whitespace, leading dashes and trailing colons; lowercase."""
    return token.strip("\"'").strip().lstrip("-").rstrip(":").lower()


def key_parts(key: str) -> list[str]:
    """Split a normalised key on non-alphanumeric boundaries, dropping empty parts."""
    return [part for part in _PART_SEPARATOR.split(key) if part]


def is_sensitive_key(token: str) -> bool:
    """True when ``token`` names a credential-bearing key."""
    key = normalize_key(token)
    if not key:
        return False

    parts = key_parts(key)
    if any(part in SENSITIVE_PARTS for part in parts):
        return True
    return any(pair in SENSITIVE_COMPOUNDS for pair in zip(parts, parts[1:]))


def is_sensitive_flag(token: str) -> bool:
    """True for a dash-prefixed flag naming a sensitive key (``--token``, ``-auth``).

    Only the part before any ``=`` or ``:`` is considered.
    """
    if not token.startswith("-"):
        return False
    name = token.lstrip("-")
    for sep in ("=", ":"):
        name = name.split(sep, 1)[0]
    return is_sensitive_key(name)
