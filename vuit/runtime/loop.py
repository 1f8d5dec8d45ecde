"""Main interactive event loop for the terminal UI.

Each tick polls the background search, redraws when something changed, then
waits up to ``input_timeout_ms`` for one key and hands it to the dispatcher.
Feature logic lives behind the injected callbacks.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass

from ..input import read_key
from .state import Context, SessionState
from .terminal import TerminalController

DEFAULT_INPUT_TIMEOUT_MS = 100


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    input_timeout_ms: int = DEFAULT_INPUT_TIMEOUT_MS


@dataclass(frozen=True)
class RuntimeLoopCallbacks:
    """Injected operations used by ``run_main_loop``."""

    dispatch: Callable[[str], bool]
    poll_search: Callable[[], bool]
    output_generation: Callable[[], int]
    render: Callable[[int, int], None]
    take_dirty: Callable[[], bool]


def run_main_loop(
    state: SessionState,
    terminal: TerminalController,
    stdin_fd: int,
    timing: RuntimeLoopTiming,
    callbacks: RuntimeLoopCallbacks,
) -> None:
    """Run the TUI until a handler sets ``state.exit``.

    The loop only reads ``state``; redraw requests from the dispatcher arrive
    through ``take_dirty`` and resize or shell output are tracked locally.
    """
    ops = callbacks
    last_size: tuple[int, int] | None = None
    last_output_generation = -1

    with terminal.raw_mode():
        while not state.exit:
            term = shutil.get_terminal_size((80, 24))
            size = (term.columns, term.lines)
            redraw = size != last_size
            last_size = size

            ops.poll_search()
            if state.context is Context.TERMINAL:
                generation = ops.output_generation()
                if generation != last_output_generation:
                    last_output_generation = generation
                    redraw = True

            if ops.take_dirty() or redraw:
                ops.render(term.columns, term.lines)

            key = read_key(stdin_fd, timeout_ms=timing.input_timeout_ms)
            if not key:
                continue
            ops.dispatch(key)
