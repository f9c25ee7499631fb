"""Exception types raised by wise-ofx."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from pathlib import Path


class WiseOfxError(Exception):
    """Base class for every failure that aborts a conversion run."""


class ConfigError(WiseOfxError):
    """Raised for unreadable configuration or conflicting options."""


class InputError(WiseOfxError):
    """Raised when the statement file is missing or cannot be read."""


class RecordError(WiseOfxError):
    """Raised when a CSV row cannot be turned into a transaction."""

    def __init__(self, path: Path, line: int, reason: str) -> None:
        super().__init__(f'{path}: line {line}: {reason}')
        self.path = path
        self.line = line
        self.reason = reason


class OutputError(WiseOfxError):
    """Raised when the output destination cannot be created or written."""


class SerializationError(WiseOfxError):
    """Raised when the XML writer rejects an event."""


class VerificationError(WiseOfxError):
    """Raised when a written statement does not match what was emitted."""
