"""Editor and tmux launch helpers.

Runs the configured editor while temporarily leaving raw/alternate-screen TUI
mode. Inside tmux the editor opens in a side split instead, and the app keeps
running. Failures come back as a message string for the status line.
"""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from collections.abc import Mapping
from pathlib import Path
from typing import Callable

from loguru import logger

LINE_ARG_EDITORS = frozenset({"vi", "vim", "nvim", "nano", "emacs"})
# Width of the pane vuit keeps after a tmux split, in percent.
TMUX_REMAINING_PANE_PERCENT = 20


def inside_tmux(environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return bool(env.get("TMUX"))


def build_editor_command(editor: str, target: Path, line: int | None = None) -> list[str]:
    """Return argv for opening ``target``, at ``line`` when the editor supports ``+N``."""
    cmd = shlex.split(editor)
    if not cmd:
        raise ValueError("editor command is empty")
    if line is not None and line > 0 and Path(cmd[0]).name in LINE_ARG_EDITORS:
        return [*cmd, f"+{line}", str(target)]
    return [*cmd, str(target)]


def build_tmux_split_command(command: list[str] | None, columns: int | None = None) -> list[str]:
    """Return argv for ``tmux split-window -h``, optionally running ``command``.

    When ``columns`` is known, the previous pane (the app) is shrunk so the
    new pane gets most of the width.
    """
    argv = ["tmux", "split-window", "-h"]
    if command:
        argv.append(shlex.join(command))
    if columns is not None and columns > 0:
        remaining = max(1, columns * TMUX_REMAINING_PANE_PERCENT // 100)
        argv.extend([";", "resize-pane", "-t", "!", "-x", str(remaining)])
    return argv


def open_tmux_split(command: list[str] | None = None) -> str | None:
    columns = shutil.get_terminal_size().columns
    argv = build_tmux_split_command(command, columns)
    logger.info("Opening tmux split: {}", argv)
    try:
        subprocess.run(argv, check=False)
    except OSError as exc:
        return f"Failed to open tmux split: {exc}"
    return None


def launch_editor(
    editor: str,
    target: Path,
    disable_tui_mode: Callable[[], None],
    enable_tui_mode: Callable[[], None],
    line: int | None = None,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    try:
        cmd = build_editor_command(editor, target, line)
    except ValueError:
        return "Cannot edit: editor is not configured."

    if inside_tmux(environ):
        return open_tmux_split(cmd)

    logger.info("Launching editor: {}", cmd)
    disable_tui_mode()
    try:
        subprocess.run(cmd, check=False)
    except OSError as exc:
        logger.warning("Editor launch failed: {}", exc)
        return f"Failed to launch editor: {exc}"
    finally:
        enable_tui_mode()
    return None
