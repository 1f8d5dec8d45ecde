"""Exception types shared across vuit modules."""

from __future__ import annotations

from pathlib import Path


class VuitError(Exception):
    """Base class for errors raised by vuit itself."""


class ConfigError(VuitError):
    """Configuration file exists but cannot be decoded into a ``VuitConfig``."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to parse config {path}: {reason}")
        self.path = path
        self.reason = reason


class TerminalSessionError(VuitError):
    """Embedded shell could not be spawned or torn down.

    Raised for conditions the app treats as fatal: there is no degraded mode
    without a working shell session.
    """
