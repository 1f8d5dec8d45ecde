"""ANSI-aware text measurement and display cleanup utilities.

Provides clipping that preserves escape sequences plus the sanitizers used for
file labels, content matches, and raw shell output.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
SHELL_SGR_RE = re.compile(r"\x1b\[([0-9]{1,2};[0-9]{1,2}|[0-9]{1,2})?m")
SHELL_TAB = "    "


def char_display_width(ch: str) -> int:
    """Return terminal column width for one character.

    Combining marks consume no columns and East Asian wide/fullwidth
    characters consume two.
    """
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    """Return visible width of ``text`` ignoring ANSI escape sequences."""
    return sum(char_display_width(ch) for ch in ANSI_ESCAPE_RE.sub("", text))


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch)
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
        i += 1

    return "".join(out)


def pad_ansi_line(text: str, width: int) -> str:
    """Clip ``text`` to ``width`` columns and right-pad it with spaces."""
    clipped = clip_ansi_line(text, width)
    gap = max(0, width - display_width(clipped))
    if "\033" in clipped:
        return clipped + "\033[0m" + " " * gap
    return clipped + " " * gap


def clean_display_text(content: str) -> str:
    """Keep printable ASCII, spaces and newlines; drop everything else."""
    return "".join(ch for ch in content if ("!" <= ch <= "~") or ch in {" ", "\n"})


def clean_terminal_output(raw: str) -> str:
    """Strip SGR color codes and carriage returns, expand tabs for the shell pane."""
    cleaned = SHELL_SGR_RE.sub("", raw)
    cleaned = cleaned.replace("\r", "")
    return cleaned.replace("\t", SHELL_TAB)


def truncate_left(text: str, max_cols: int) -> str:
    """Keep the tail of ``text`` behind a leading ellipsis when it is too wide."""
    if max_cols <= 0:
        return ""
    if len(text) <= max_cols:
        return text
    if max_cols == 1:
        return "…"
    return "…" + text[len(text) - (max_cols - 1):]
