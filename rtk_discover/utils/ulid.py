"""ULID generation utility for rtk-discover.

Provides ``generate_ulid()``, used as ``CommandRecord.record_id`` and as the
``context_id`` correlation key in structured log entries.

Uses the ``python-ulid`` library. Do not hand-roll ULID generation.
"""

from __future__ import annotations

from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID as a 26-character uppercase string.

    Returns:
        str: Crockford Base32 ULID, e.g. ``"01KJ0JRVHYA7KX32VPN5ZSCTMV"``.
    """
    return str(ULID())
