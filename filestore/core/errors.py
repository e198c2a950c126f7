from __future__ import annotations

from pathlib import Path


class StoreError(Exception):
    """Base error for every failure of a TypedFileStore operation."""

    def __init__(self, message: str, location: Path | None = None):
        super().__init__(message)
        self.location = location


class NotFound(StoreError):
    """The file is absent or cannot be read."""


class DecodeError(StoreError):
    """The file bytes are not a valid encoding of the value type."""

    def __init__(self, message: str, location: Path | None = None, error_count: int = 0):
        super().__init__(message, location)
        self.error_count = error_count


class EncodeError(StoreError):
    """The in-memory value cannot be serialized."""


class WriteError(StoreError):
    """The underlying storage rejected the write."""
