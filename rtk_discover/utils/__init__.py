"""Shared utilities: structlog configuration (logger.py) and ULID generation (ulid.py)."""
