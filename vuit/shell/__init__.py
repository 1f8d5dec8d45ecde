"""Embedded PTY shell session."""

from .session import RESTART_DELAY_SECONDS, SendResult, TerminalSession

__all__ = ["RESTART_DELAY_SECONDS", "SendResult", "TerminalSession"]
