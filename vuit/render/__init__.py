"""Frame composition for the bordered-panel terminal view.

``build_frame`` turns a ``RenderContext`` snapshot into exactly ``height``
rows of exactly ``width`` columns; ``render_frame`` writes them to stdout.
Nothing here mutates session state.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

from ..ansi import clean_terminal_output, pad_ansi_line, truncate_left
from ..colors import foreground_sgr, highlight_sgr
from ..runtime.state import SEARCH_CONTEXTS, Context, Focus, SessionState
from ..search.content import SearchJob
from .help import help_lines

RECENT_PANEL_ROWS = 8
LOWER_PANEL_ROWS = 20
COMMAND_ROWS = 3
HINT_BOX_WIDTH = 27
HINT_TEXT = " Help -> <C-h>"
LEFT_PANEL_PERCENT = 40
MIN_LEFT_WIDTH = 20
MIN_TOP_ROWS = 6

RESET = "\033[0m"
TERMINAL_SGR = "\033[97m"

_LOWER_PANEL_CONTEXTS = SEARCH_CONTEXTS | {Context.TERMINAL, Context.HELP}


@dataclass
class RenderContext:
    width: int
    height: int
    context: Context
    focus: Focus
    typed_input: str
    highlighted: int
    colorscheme: str
    highlight_color: str
    file_list: list[str] = field(default_factory=list)
    file_total: int = 0
    recent_files: list[str] = field(default_factory=list)
    match_labels: list[str] = field(default_factory=list)
    file_filter: str = ""
    str_filter: str = ""
    preview_visible: bool = True
    preview_lines: list[str] = field(default_factory=list)
    search_progress: tuple[int, int] | None = None
    terminal_lines: list[str] = field(default_factory=list)
    terminal_notice: str = ""
    status_message: str = ""


def build_render_context(
    state: SessionState,
    width: int,
    height: int,
    file_total: int,
    search_job: SearchJob | None = None,
    terminal_output: str = "",
) -> RenderContext:
    """Snapshot ``state`` plus the live shell buffer and search progress."""
    progress = (search_job.progress, search_job.total) if search_job is not None else None
    return RenderContext(
        width=width,
        height=height,
        context=state.context,
        focus=state.focus,
        typed_input=state.typed_input,
        highlighted=state.highlighted,
        colorscheme=state.color_scheme.colorscheme,
        highlight_color=state.color_scheme.highlight_color,
        file_list=list(state.file_list),
        file_total=file_total,
        recent_files=state.recent_files.items(),
        match_labels=[match.label() for match in state.content_matches],
        file_filter=state.file_filter,
        str_filter=state.str_filter,
        preview_visible=state.preview_visible,
        preview_lines=list(state.preview_lines),
        search_progress=progress,
        terminal_lines=clean_terminal_output(terminal_output).split("\n") if terminal_output else [],
        terminal_notice=state.terminal_notice,
        status_message=state.status_message,
    )


def _border_title(title: str, inner: int, fill: str = "─") -> str:
    if inner <= 0:
        return ""
    title = truncate_left(title, inner)
    left = (inner - len(title)) // 2
    return fill * left + title + fill * (inner - len(title) - left)


def _bottom_border(badge: str, inner: int) -> str:
    if inner <= 0:
        return ""
    if not badge or len(badge) + 2 > inner:
        return "─" * inner
    return "─" * (inner - len(badge) - 1) + badge + "─"


def box_lines(
    title: str,
    body: list[str],
    width: int,
    height: int,
    color: str,
    selected: int | None = None,
    selected_sgr: str = "",
    badge: str = "",
    body_sgr: str | None = None,
) -> list[str]:
    """Return ``height`` rows of a rounded box, ``width`` columns each.

    ``body`` must already be scrolled to fit; ``selected`` indexes into it.
    """
    if width <= 0 or height <= 0:
        return []
    if width < 2 or height < 2:
        return [" " * width for _ in range(height)]

    inner = width - 2
    text_sgr = color if body_sgr is None else body_sgr
    rows = [f"{color}╭{_border_title(title, inner)}╮{RESET}"]
    for idx in range(height - 2):
        text = body[idx] if idx < len(body) else ""
        if selected is not None and idx == selected:
            content = f"{selected_sgr}{pad_ansi_line(text, inner)}{RESET}"
        else:
            content = f"{text_sgr}{pad_ansi_line(text, inner)}{RESET}"
        rows.append(f"{color}│{RESET}{content}{color}│{RESET}")
    rows.append(f"{color}╰{_bottom_border(badge, inner)}╯{RESET}")
    return rows


def scroll_window(items: list[str], selected: int, rows: int) -> tuple[list[str], int]:
    """Return the visible slice keeping ``selected`` in view, plus its offset in the slice."""
    if rows <= 0:
        return [], 0
    start = selected - rows + 1 if selected >= rows else 0
    return items[start : start + rows], selected - start


def _list_panel(
    ctx: RenderContext,
    title: str,
    items: list[str],
    focus: Focus,
    width: int,
    height: int,
    badge: str = "",
) -> list[str]:
    color = foreground_sgr(ctx.colorscheme)
    focused = ctx.focus is focus and bool(items)
    selected = min(ctx.highlighted, len(items) - 1) if focused else 0
    visible, offset = scroll_window(items, selected, height - 2)
    return box_lines(
        title,
        visible,
        width,
        height,
        color,
        selected=offset if focused else None,
        selected_sgr=highlight_sgr(ctx.highlight_color),
        badge=badge,
    )


def lower_panel_rows(ctx: RenderContext) -> int:
    if ctx.context not in _LOWER_PANEL_CONTEXTS:
        return 0
    available = ctx.height - COMMAND_ROWS - MIN_TOP_ROWS
    return max(0, min(LOWER_PANEL_ROWS, available))


def search_badge(ctx: RenderContext) -> str:
    if ctx.search_progress is not None:
        done, total = ctx.search_progress
        return f" [ {done} / {total} ] "
    if ctx.match_labels or ctx.str_filter:
        return f" [ {len(ctx.match_labels)} Matches ] "
    return ""


def _lower_panel(ctx: RenderContext, height: int) -> list[str]:
    color = foreground_sgr(ctx.colorscheme)
    if ctx.context in SEARCH_CONTEXTS:
        return _list_panel(
            ctx,
            " Strings ",
            ctx.match_labels,
            Focus.FILESTRLIST,
            ctx.width,
            height,
            search_badge(ctx),
        )
    if ctx.context is Context.TERMINAL:
        inner_rows = max(0, height - 2)
        lines = [ctx.terminal_notice] if ctx.terminal_notice else ctx.terminal_lines
        tail = lines[-inner_rows:] if inner_rows else []
        return box_lines(" Terminal ", tail, ctx.width, height, color, body_sgr=TERMINAL_SGR)
    return box_lines(" Help ", help_lines(), ctx.width, height, color, body_sgr=TERMINAL_SGR)


def command_prompt(ctx: RenderContext) -> str:
    if ctx.context is Context.STRINGSEARCH:
        return f' [FILE FILTER: "{ctx.file_filter}"] > {ctx.typed_input}'
    if ctx.context is Context.STRINGSEARCHREPLACE:
        return f' [REPLACE "{ctx.str_filter}" WITH] > {ctx.typed_input}'
    return f" > {ctx.typed_input}"


def _command_title(ctx: RenderContext) -> str:
    if ctx.status_message:
        return f" {ctx.status_message} "
    titles = {
        Context.FILEVIEWER: " Search ",
        Context.STRINGSEARCH: " String Search ",
        Context.STRINGSEARCHREPLACE: " Replace ",
        Context.TERMINAL: " Command ",
        Context.HELP: " Search ",
    }
    return titles[ctx.context]


def _command_rows(ctx: RenderContext) -> list[str]:
    color = foreground_sgr(ctx.colorscheme)
    hint_width = HINT_BOX_WIDTH if ctx.width >= HINT_BOX_WIDTH * 2 else 0
    prompt_width = ctx.width - hint_width
    prompt = command_prompt(ctx)
    prompt_body = [truncate_left(prompt, max(0, prompt_width - 2))]
    prompt_box = box_lines(_command_title(ctx), prompt_body, prompt_width, COMMAND_ROWS, color)
    if not hint_width:
        return prompt_box
    hint_box = box_lines("", [HINT_TEXT], hint_width, COMMAND_ROWS, color)
    return [left + right for left, right in zip(prompt_box, hint_box)]


def _top_rows(ctx: RenderContext, height: int) -> list[str]:
    if height <= 0:
        return []
    color = foreground_sgr(ctx.colorscheme)
    if ctx.preview_visible:
        left_width = max(MIN_LEFT_WIDTH, ctx.width * LEFT_PANEL_PERCENT // 100)
        left_width = min(left_width, ctx.width)
    else:
        left_width = ctx.width
    right_width = ctx.width - left_width

    recent_rows = RECENT_PANEL_ROWS if height >= RECENT_PANEL_ROWS + 3 else 0
    files_rows = height - recent_rows
    left = _list_panel(ctx, " Recent Files ", ctx.recent_files, Focus.RECENTFILES, left_width, recent_rows)
    count_badge = f" [ {len(ctx.file_list)} / {ctx.file_total} ] " if ctx.context is Context.FILEVIEWER else ""
    left += _list_panel(ctx, " Files ", ctx.file_list, Focus.FILELIST, left_width, files_rows, count_badge)

    if right_width <= 0:
        return left
    right = box_lines(" Preview ", ctx.preview_lines, right_width, height, color, body_sgr="")
    return [l_row + r_row for l_row, r_row in zip(left, right)]


def build_frame(ctx: RenderContext) -> list[str]:
    """Compose the full screen as a list of rows, top to bottom."""
    if ctx.width <= 0 or ctx.height <= 0:
        return []
    command_rows = COMMAND_ROWS if ctx.height >= COMMAND_ROWS else 0
    lower_rows = lower_panel_rows(ctx)
    top_rows = max(0, ctx.height - command_rows - lower_rows)

    rows = _top_rows(ctx, top_rows)
    if lower_rows:
        rows += _lower_panel(ctx, lower_rows)
    if command_rows:
        rows += _command_rows(ctx)
    rows = rows[: ctx.height]
    while len(rows) < ctx.height:
        rows.append(" " * ctx.width)
    return rows


def frame_text(rows: list[str]) -> str:
    return "\033[H" + "\r\n".join(f"{row}{RESET}\033[K" for row in rows)


def render_frame(ctx: RenderContext) -> None:
    rows = build_frame(ctx)
    os.write(sys.stdout.fileno(), frame_text(rows).encode("utf-8", errors="replace"))


__all__ = [
    "RenderContext",
    "box_lines",
    "build_frame",
    "build_render_context",
    "command_prompt",
    "render_frame",
    "scroll_window",
    "search_badge",
]
