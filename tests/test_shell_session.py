from __future__ import annotations

import queue
import time
import unittest
from unittest import mock

import pexpect

from vuit.errors import TerminalSessionError
from vuit.shell import session as session_mod
from vuit.shell.session import SendResult, TerminalSession


class _FakeChild:
    """Stand-in for ``pexpect.spawn`` fed line by line from the test."""

    _next_pid = 1000

    def __init__(self) -> None:
        _FakeChild._next_pid += 1
        self.pid = _FakeChild._next_pid
        self.sent: list[str] = []
        self.killed_with: list[int] = []
        self.closed = False
        self._alive = True
        self.eof_on_kill = True
        self._lines: queue.Queue[str | None] = queue.Queue()

    def feed(self, line: str) -> None:
        self._lines.put(line)

    def readline(self) -> str:
        try:
            item = self._lines.get(timeout=5)
        except queue.Empty:
            raise pexpect.EOF("idle") from None
        if item is None:
            raise pexpect.EOF("closed")
        return item

    def send(self, data: str) -> int:
        self.sent.append(data)
        return len(data)

    def isalive(self) -> bool:
        return self._alive

    def kill(self, sig: int) -> None:
        self.killed_with.append(sig)
        self._alive = False
        if self.eof_on_kill:
            self._lines.put(None)

    def close(self, force: bool = True) -> None:
        self.closed = True
        self._alive = False


def _wait_until(predicate, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached")
        time.sleep(0.01)


class TerminalSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.children: list[_FakeChild] = []

        def spawn(*args, **kwargs) -> _FakeChild:
            child = _FakeChild()
            self.children.append(child)
            return child

        patcher = mock.patch.object(session_mod.pexpect, "spawn", side_effect=spawn)
        self.spawn_mock = patcher.start()
        self.addCleanup(patcher.stop)
        time_patcher = mock.patch.object(session_mod, "time")
        self.sleep_mock = time_patcher.start().sleep
        self.addCleanup(time_patcher.stop)

    def _started(self) -> TerminalSession:
        session = TerminalSession()
        session.start()
        self.addCleanup(session.close)
        return session

    def test_start_spawns_shell_with_pty_dimensions(self) -> None:
        self._started()

        args, kwargs = self.spawn_mock.call_args
        self.assertEqual(args, ("bash",))
        self.assertEqual(kwargs["dimensions"], (20, 200))
        self.assertEqual(kwargs["encoding"], "utf-8")

    def test_reader_appends_lines_without_line_endings(self) -> None:
        session = self._started()
        before = session.output_generation
        self.children[0].feed("hello\r\n")
        self.children[0].feed("world\n")

        _wait_until(lambda: session.output_snapshot() == "hello\nworld")
        self.assertGreater(session.output_generation, before)

    def test_send_writes_command_with_newline_after_stripping_semicolons(self) -> None:
        session = self._started()

        result = session.send(";;ls -la")

        self.assertEqual(result, SendResult())
        self.assertEqual(self.children[0].sent, ["ls -la\n"])

    def test_vuit_command_is_refused_with_message(self) -> None:
        session = self._started()

        result = session.send("vuit")

        self.assertEqual(result, SendResult(message="Nice Try"))
        self.assertEqual(self.children[0].sent, [])

    def test_exit_and_quit_restart_and_leave_terminal(self) -> None:
        session = self._started()

        for word in ("exit", "quit"):
            self.assertEqual(session.send(word), SendResult(leave_terminal=True))
        self.assertEqual(len(self.children), 3)
        self.assertEqual(self.children[0].killed_with, [session_mod.signal.SIGKILL])
        self.sleep_mock.assert_called_with(session_mod.RESTART_DELAY_SECONDS)

    def test_restart_and_clear_restart_without_leaving(self) -> None:
        session = self._started()

        self.assertEqual(session.send("restart"), SendResult())
        self.assertEqual(session.send("clear"), SendResult())
        self.assertEqual(len(self.children), 3)

    def test_reserved_words_are_case_sensitive(self) -> None:
        session = self._started()

        session.send("EXIT")

        self.assertEqual(len(self.children), 1)
        self.assertEqual(self.children[0].sent, ["EXIT\n"])

    def test_interrupt_writes_ctrl_c(self) -> None:
        session = self._started()

        session.interrupt()

        self.assertEqual(self.children[0].sent, ["\x03"])

    def test_old_session_output_does_not_reach_new_buffer(self) -> None:
        session = self._started()
        old = self.children[0]
        old.feed("before\n")
        _wait_until(lambda: session.output_snapshot() == "before")

        old.eof_on_kill = False
        session.restart()
        old.feed("late line\n")
        old._lines.put(None)
        new = self.children[1]
        new.feed("fresh\n")

        _wait_until(lambda: session.output_snapshot() == "fresh")
        time.sleep(0.05)
        self.assertEqual(session.output_lines(), ["fresh"])

    def test_clear_output_empties_buffer(self) -> None:
        session = self._started()
        self.children[0].feed("x\n")
        _wait_until(lambda: session.output_snapshot() == "x")

        session.clear_output()

        self.assertEqual(session.output_snapshot(), "")

    def test_write_failures_are_dropped(self) -> None:
        session = self._started()
        with mock.patch.object(self.children[0], "send", side_effect=OSError("broken pipe")):
            self.assertEqual(session.send("ls"), SendResult())

    def test_spawn_failure_is_fatal(self) -> None:
        self.spawn_mock.side_effect = pexpect.ExceptionPexpect("no such shell")

        with self.assertRaises(TerminalSessionError):
            TerminalSession(shell="nope").start()

    def test_kill_failure_is_fatal(self) -> None:
        session = self._started()
        with mock.patch.object(self.children[0], "kill", side_effect=PermissionError("denied")):
            with self.assertRaises(TerminalSessionError):
                session.restart()


if __name__ == "__main__":
    unittest.main()
