"""Embedded shell session backed by a pexpect PTY.

One reader thread per spawned shell streams lines into a lock-protected
buffer; the UI thread writes commands and snapshots the buffer when it
renders. Each ``start()`` opens a new buffer generation so lines still
draining from a killed shell never reach its successor.
"""

from __future__ import annotations

import signal
import threading
import time
from dataclasses import dataclass

import pexpect
from loguru import logger

from ..errors import TerminalSessionError

DEFAULT_SHELL = "bash"
DEFAULT_ROWS = 20
DEFAULT_COLS = 200
RESTART_DELAY_SECONDS = 0.25
INTERRUPT = "\x03"
RESTART_COMMANDS = frozenset({"exit", "quit", "restart", "clear"})
LEAVE_COMMANDS = frozenset({"exit", "quit"})
SELF_COMMAND = "vuit"
SELF_COMMAND_MESSAGE = "Nice Try"


@dataclass(frozen=True)
class SendResult:
    """Outcome of ``TerminalSession.send`` that the dispatcher acts on."""

    leave_terminal: bool = False
    message: str | None = None


class TerminalSession:
    def __init__(
        self,
        shell: str = DEFAULT_SHELL,
        rows: int = DEFAULT_ROWS,
        cols: int = DEFAULT_COLS,
        cwd: str | None = None,
    ) -> None:
        self.shell = shell
        self.rows = rows
        self.cols = cols
        self.cwd = cwd
        self._lock = threading.Lock()
        self._lines: list[str] = []
        self._generation = 0
        self._output_generation = 0
        self._child: pexpect.spawn | None = None
        self._reader: threading.Thread | None = None

    @property
    def output_generation(self) -> int:
        with self._lock:
            return self._output_generation

    @property
    def running(self) -> bool:
        child = self._child
        return child is not None and child.isalive()

    def start(self) -> None:
        try:
            child = pexpect.spawn(
                self.shell,
                timeout=None,
                encoding="utf-8",
                codec_errors="replace",
                echo=False,
                dimensions=(self.rows, self.cols),
                cwd=self.cwd,
            )
        except (OSError, pexpect.ExceptionPexpect) as exc:
            raise TerminalSessionError(f"Failed to spawn {self.shell!r}: {exc}") from exc

        with self._lock:
            self._generation += 1
            generation = self._generation
            self._lines = []
            self._output_generation += 1
        self._child = child
        self._reader = threading.Thread(
            target=self._read_output,
            args=(child, generation),
            name="vuit-shell-reader",
            daemon=True,
        )
        self._reader.start()
        logger.info("Started shell {!r} (pid {})", self.shell, child.pid)

    def _read_output(self, child: pexpect.spawn, generation: int) -> None:
        try:
            while True:
                try:
                    line = child.readline()
                except (pexpect.EOF, OSError, ValueError):
                    break
                if not line:
                    break
                with self._lock:
                    if generation != self._generation:
                        continue
                    self._lines.append(line.rstrip("\r\n"))
                    self._output_generation += 1
        finally:
            try:
                child.close(force=True)
            except (OSError, pexpect.ExceptionPexpect):
                logger.debug("Shell pid {} did not close cleanly", child.pid)

    def _kill(self) -> None:
        child = self._child
        self._child = None
        if child is None:
            return
        with self._lock:
            # Retire the old reader's generation before the kill drains it.
            self._generation += 1
        if not child.isalive():
            return
        try:
            child.kill(signal.SIGKILL)
        except ProcessLookupError:
            return
        except OSError as exc:
            raise TerminalSessionError(f"Failed to kill shell pid {child.pid}: {exc}") from exc

    def restart(self) -> None:
        logger.info("Restarting shell {!r}", self.shell)
        self._kill()
        time.sleep(RESTART_DELAY_SECONDS)
        self.start()

    def close(self) -> None:
        self._kill()

    def interrupt(self) -> None:
        logger.debug("Interrupting shell")
        self._write(INTERRUPT)

    def send(self, command: str) -> SendResult:
        """Run ``command`` in the shell, handling the reserved words first.

        Leading ``;`` characters are dropped. ``exit``/``quit`` restart the
        shell and ask the caller to leave the terminal; ``restart``/``clear``
        only restart; ``vuit`` is refused.
        """
        command = command.lstrip(";")
        if command in RESTART_COMMANDS:
            self.restart()
            return SendResult(leave_terminal=command in LEAVE_COMMANDS)
        if command == SELF_COMMAND:
            return SendResult(message=SELF_COMMAND_MESSAGE)
        self._write(command + "\n")
        return SendResult()

    def _write(self, data: str) -> None:
        child = self._child
        if child is None:
            logger.debug("Dropped write to stopped shell: {!r}", data)
            return
        try:
            child.send(data)
        except (OSError, pexpect.ExceptionPexpect) as exc:
            logger.debug("Dropped write to shell: {}", exc)

    def clear_output(self) -> None:
        with self._lock:
            self._lines = []
            self._output_generation += 1

    def output_lines(self) -> list[str]:
        with self._lock:
            return list(self._lines)

    def output_snapshot(self) -> str:
        with self._lock:
            return "\n".join(self._lines)
