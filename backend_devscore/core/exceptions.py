"""
Application-level exceptions.

Storage failures are not wrapped: SQLAlchemy errors propagate to the caller,
which decides whether to retry or log and move on.
"""

from __future__ import annotations


class DevScoreError(Exception):
    """Base class for dev reputation errors."""

    code = "DEV_SCORE_ERROR"


class DevNotFoundError(DevScoreError):
    """No dev row matches the given address or id."""

    code = "DEV_NOT_FOUND"

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Dev not found: {address}")


class ConfigError(DevScoreError):
    """An environment setting is present but invalid."""

    code = "CONFIG_ERROR"
