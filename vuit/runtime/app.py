"""Composition root: wires index, search, shell, dispatcher and loop together."""

from __future__ import annotations

import shutil
import sys
from pathlib import Path

from loguru import logger

from ..colors import ColorScheme
from ..preview import load_preview
from ..render import build_render_context, render_frame
from ..search.content import ContentSearchWorker
from ..search.index import FileIndex
from ..shell.session import TerminalSession
from .config import VuitConfig
from .dispatcher import Dispatcher
from .editor import inside_tmux, launch_editor, open_tmux_split
from .loop import RuntimeLoopCallbacks, RuntimeLoopTiming, run_main_loop
from .state import SessionState
from .terminal import TerminalController


def run_app(config: VuitConfig, root: Path | None = None) -> None:
    """Run an interactive session over ``root`` (default: the working directory)."""
    root = (root or Path.cwd()).resolve()
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    terminal = TerminalController(stdin_fd, stdout_fd)

    file_index = FileIndex(root)
    file_index.rebuild()
    state = SessionState(
        color_scheme=ColorScheme.from_config(config.colorscheme, config.highlight_color),
    )
    shell = TerminalSession(cwd=str(root))
    search_worker = ContentSearchWorker(root)

    def preview_loader(path: Path, around_line: int | None) -> list[str]:
        rows = shutil.get_terminal_size((80, 24)).lines
        return load_preview(path, max_lines=rows, around_line=around_line)

    def open_editor(path: Path, line: int | None) -> str | None:
        return launch_editor(
            config.editor,
            path,
            terminal.disable_tui_mode,
            terminal.enable_tui_mode,
            line=line,
        )

    def open_tmux_shell(command: list[str] | None) -> bool:
        if not inside_tmux():
            return False
        error = open_tmux_split(command)
        if error:
            logger.warning(error)
        return True

    dispatcher = Dispatcher(
        state=state,
        file_index=file_index,
        search_worker=search_worker,
        shell=shell,
        open_editor=open_editor,
        open_tmux_shell=open_tmux_shell,
        preview_loader=preview_loader,
    )
    dispatcher.refilter("")

    def render(columns: int, lines: int) -> None:
        ctx = build_render_context(
            state,
            columns,
            lines,
            file_total=len(file_index),
            search_job=dispatcher.search_job,
            terminal_output=shell.output_snapshot(),
        )
        render_frame(ctx)

    shell.start()
    logger.info("Session started in {} with {} files", root, len(file_index))
    try:
        run_main_loop(
            state,
            terminal,
            stdin_fd,
            RuntimeLoopTiming(),
            RuntimeLoopCallbacks(
                dispatch=dispatcher.dispatch,
                poll_search=dispatcher.poll_search,
                output_generation=lambda: shell.output_generation,
                render=render,
                take_dirty=dispatcher.take_dirty,
            ),
        )
    finally:
        shell.close()
        logger.info("Session ended")
