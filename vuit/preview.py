"""Preview pane source loading and syntax highlighting.

Loads a window of a file, neutralizes terminal control bytes, and colors it
with Pygments. Anything that cannot be previewed collapses into a single
fixed line instead of an error.
"""

from __future__ import annotations

import itertools
import re
from pathlib import Path

from pygments import highlight as pygments_highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.util import ClassNotFound

NO_PREVIEW = "No Preview Available"
PREVIEW_CONTEXT_LINES = 3
BINARY_PROBE_BYTES = 4_096
TAB_WIDTH = 4

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")
_FORMATTER = TerminalFormatter()


def sanitize_preview_line(line: str) -> str:
    """Expand tabs and drop control bytes that would move the cursor or ring the bell."""
    return _CONTROL_RE.sub("", line.expandtabs(TAB_WIDTH))


def _looks_binary(data: bytes) -> bool:
    return b"\x00" in data[:BINARY_PROBE_BYTES]


def highlight_lines(lines: list[str], path: Path) -> list[str]:
    if not lines:
        return lines
    source = "\n".join(lines)
    try:
        lexer = get_lexer_for_filename(path.name, source)
    except ClassNotFound:
        lexer = TextLexer()
    rendered = pygments_highlight(source, lexer, _FORMATTER)
    highlighted = rendered.rstrip("\n").split("\n")
    if len(highlighted) != len(lines):
        return lines
    return highlighted


def preview_window_start(around_line: int | None) -> int:
    """Return the 0-based first line so that ``around_line`` sits a few rows down."""
    if around_line is None or around_line <= 1:
        return 0
    return max(0, around_line - 1 - PREVIEW_CONTEXT_LINES)


def load_preview(
    path: Path,
    max_lines: int,
    around_line: int | None = None,
    highlight: bool = True,
) -> list[str]:
    """Return up to ``max_lines`` display lines of ``path``.

    Only the binary probe and the lines up to the end of the window are read.
    Lines are numbered like content search numbers them.
    """
    if max_lines <= 0:
        return []
    start = preview_window_start(around_line)
    try:
        with open(path, "rb") as handle:
            if _looks_binary(handle.read(BINARY_PROBE_BYTES)):
                return [NO_PREVIEW]
        with open(path, encoding="utf-8", errors="replace") as handle:
            window = [
                sanitize_preview_line(line.rstrip("\n"))
                for line in itertools.islice(handle, start, start + max_lines)
            ]
    except OSError:
        return [NO_PREVIEW]
    if highlight:
        return highlight_lines(window, path)
    return window
