"""Session state owned by the dispatcher and read by the renderer."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field

from ..colors import ColorScheme
from ..search.content import ContentMatch

RECENT_FILES_CAPACITY = 5


class Context(enum.Enum):
    FILEVIEWER = "fileviewer"
    STRINGSEARCH = "stringsearch"
    STRINGSEARCHREPLACE = "stringsearchreplace"
    TERMINAL = "terminal"
    HELP = "help"


SEARCH_CONTEXTS = frozenset({Context.STRINGSEARCH, Context.STRINGSEARCHREPLACE})


class Focus(enum.Enum):
    RECENTFILES = "recentfiles"
    FILELIST = "filelist"
    FILESTRLIST = "filestrlist"


# Tab order; empty lists are skipped.
FOCUS_CYCLE: tuple[Focus, ...] = (Focus.FILELIST, Focus.FILESTRLIST, Focus.RECENTFILES)


class RecentFiles:
    """Most recently opened paths, oldest first, capped at ``capacity``."""

    def __init__(self, capacity: int = RECENT_FILES_CAPACITY) -> None:
        self.capacity = capacity
        self._items: list[str] = []

    def push(self, path: str) -> bool:
        """Append ``path``; returns False when it was already listed."""
        if path in self._items:
            return False
        self._items.append(path)
        while len(self._items) > self.capacity:
            self._items.pop(0)
        return True

    def remove_at(self, index: int) -> str | None:
        if not 0 <= index < len(self._items):
            return None
        return self._items.pop(index)

    def items(self) -> list[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __contains__(self, path: object) -> bool:
        return path in self._items

    def __getitem__(self, index: int) -> str:
        return self._items[index]


def _default_color_scheme() -> ColorScheme:
    return ColorScheme.from_config("lightblue", "blue")


@dataclass
class SessionState:
    context: Context = Context.FILEVIEWER
    prev_context: Context = Context.FILEVIEWER
    focus: Focus = Focus.FILELIST
    typed_input: str = ""
    highlighted: int = 0
    file_list: list[str] = field(default_factory=list)
    recent_files: RecentFiles = field(default_factory=RecentFiles)
    content_matches: list[ContentMatch] = field(default_factory=list)
    file_filter: str = ""
    str_filter: str = ""
    match_cursor_active: bool = False
    preview_visible: bool = True
    preview_lines: list[str] = field(default_factory=list)
    color_scheme: ColorScheme = field(default_factory=_default_color_scheme)
    status_message: str = ""
    terminal_notice: str = ""
    dirty: bool = True
    exit: bool = False

    def list_length(self, focus: Focus) -> int:
        if focus is Focus.RECENTFILES:
            return len(self.recent_files)
        if focus is Focus.FILESTRLIST:
            return len(self.content_matches)
        return len(self.file_list)

    def active_length(self) -> int:
        return self.list_length(self.focus)

    def clamp_highlight(self) -> None:
        size = self.active_length()
        if size == 0:
            self.highlighted = 0
        elif self.highlighted >= size:
            self.highlighted = size - 1
        elif self.highlighted < 0:
            self.highlighted = 0

    def highlighted_path(self) -> str | None:
        """Relative path behind the highlighted row of the focused list."""
        if self.highlighted >= self.active_length():
            return None
        if self.focus is Focus.RECENTFILES:
            return self.recent_files[self.highlighted]
        if self.focus is Focus.FILESTRLIST:
            return self.content_matches[self.highlighted].path
        return self.file_list[self.highlighted]

    def highlighted_match(self) -> ContentMatch | None:
        if self.focus is not Focus.FILESTRLIST or self.highlighted >= len(self.content_matches):
            return None
        return self.content_matches[self.highlighted]
