"""Context dispatcher: routes each key token to the active context's handlers.

The dispatcher is the only writer of ``SessionState``. It owns one
``KeyComboRegistry`` per ``Context`` and tracks at most one content-search
job, which the main loop polls every tick through ``poll_search``.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from loguru import logger

from ..input.key_registry import KeyComboBinding, KeyComboRegistry
from ..search.content import ContentSearchWorker, SearchJob
from ..search.fuzzy import filter_paths
from ..search.index import FileIndex
from ..search.replace import replace_matches
from ..shell.session import TerminalSession
from .state import FOCUS_CYCLE, Context, Focus, SessionState

OpenEditor = Callable[[Path, int | None], str | None]
OpenTmuxShell = Callable[[list[str] | None], bool]
PreviewLoader = Callable[[Path, int | None], list[str]]


def is_text_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class Dispatcher:
    def __init__(
        self,
        state: SessionState,
        file_index: FileIndex,
        search_worker: ContentSearchWorker,
        shell: TerminalSession,
        open_editor: OpenEditor,
        open_tmux_shell: OpenTmuxShell,
        preview_loader: PreviewLoader,
    ) -> None:
        self.state = state
        self.file_index = file_index
        self.search_worker = search_worker
        self.shell = shell
        self._open_editor = open_editor
        self._open_tmux_shell = open_tmux_shell
        self._preview_loader = preview_loader
        self._search_job: SearchJob | None = None
        self._last_progress = -1
        self._file_query = ""
        self._input_before_terminal = ""
        self._prev_before_help = Context.FILEVIEWER
        self._registries: dict[Context, KeyComboRegistry] = {
            Context.FILEVIEWER: self._fileviewer_registry(),
            Context.STRINGSEARCH: self._stringsearch_registry(),
            Context.STRINGSEARCHREPLACE: self._replace_registry(),
            Context.TERMINAL: self._terminal_registry(),
            Context.HELP: self._help_registry(),
        }

    @property
    def search_job(self) -> SearchJob | None:
        return self._search_job

    @property
    def root(self) -> Path:
        return self.file_index.root

    def _shared_bindings(self) -> tuple[KeyComboBinding, ...]:
        return (
            KeyComboBinding(("ESC",), self.request_exit),
            KeyComboBinding(("CTRL_H",), self.toggle_help),
            KeyComboBinding(("CTRL_N",), self.next_color_scheme),
            KeyComboBinding(("CTRL_P",), self.toggle_preview),
        )

    def _list_bindings(self) -> tuple[KeyComboBinding, ...]:
        return (
            KeyComboBinding(("DOWN", "CTRL_J"), lambda: self.move_highlight(1)),
            KeyComboBinding(("UP", "CTRL_K"), lambda: self.move_highlight(-1)),
            KeyComboBinding(("TAB",), self.next_focus),
            KeyComboBinding(("CTRL_T",), self.toggle_terminal),
        )

    def _fileviewer_registry(self) -> KeyComboRegistry:
        return KeyComboRegistry(fallback=self._fileviewer_text).register_bindings(
            *self._shared_bindings(),
            *self._list_bindings(),
            KeyComboBinding(("BACKSPACE",), self._fileviewer_backspace),
            KeyComboBinding(("ENTER",), self.open_highlighted),
            KeyComboBinding(("CTRL_R",), self.rescan),
            KeyComboBinding(("CTRL_F",), self.enter_string_search),
            KeyComboBinding(("CTRL_X",), self._fileviewer_ctrl_x),
        )

    def _stringsearch_registry(self) -> KeyComboRegistry:
        return KeyComboRegistry(fallback=self._append_text).register_bindings(
            *self._shared_bindings(),
            *self._list_bindings(),
            KeyComboBinding(("BACKSPACE",), self._pop_text),
            KeyComboBinding(("ENTER",), self._stringsearch_enter),
            KeyComboBinding(("CTRL_R",), self.enter_replace_mode),
            KeyComboBinding(("CTRL_F",), self.leave_string_search),
            KeyComboBinding(("CTRL_X",), self.remove_recent),
        )

    def _replace_registry(self) -> KeyComboRegistry:
        return KeyComboRegistry(fallback=self._append_text).register_bindings(
            *self._shared_bindings(),
            *self._list_bindings(),
            KeyComboBinding(("BACKSPACE",), self._pop_text),
            KeyComboBinding(("ENTER",), self._replace_enter),
            KeyComboBinding(("CTRL_R",), self.leave_replace_mode),
            KeyComboBinding(("CTRL_F",), self.leave_string_search),
            KeyComboBinding(("CTRL_X",), self.remove_recent),
        )

    def _terminal_registry(self) -> KeyComboRegistry:
        return KeyComboRegistry(fallback=self._append_text).register_bindings(
            *self._shared_bindings(),
            KeyComboBinding(("BACKSPACE",), self._pop_text),
            KeyComboBinding(("ENTER",), self.send_terminal_command),
            KeyComboBinding(("CTRL_R",), self.rescan),
            KeyComboBinding(("CTRL_T",), self.leave_terminal),
            KeyComboBinding(("CTRL_C",), self.interrupt_shell),
        )

    def _help_registry(self) -> KeyComboRegistry:
        fileviewer = self._dispatch_as_fileviewer
        return KeyComboRegistry(fallback=fileviewer).register_bindings(
            KeyComboBinding(("CTRL_H",), self.toggle_help),
        )

    def _dispatch_as_fileviewer(self, key: str) -> bool | None:
        return self._registries[Context.FILEVIEWER].dispatch(key)

    def dispatch(self, key: str) -> bool:
        """Route ``key`` to the active context; returns True when it was handled."""
        if not key:
            return False
        self.state.status_message = ""
        handled = bool(self._registries[self.state.context].dispatch(key))
        if handled:
            self.state.dirty = True
        return handled

    def take_dirty(self) -> bool:
        """Return whether a redraw was requested and clear the request."""
        dirty = self.state.dirty
        self.state.dirty = False
        return dirty

    def poll_search(self) -> bool:
        """Install finished search results; returns True when state changed."""
        job = self._search_job
        if job is None:
            return False
        progress = job.progress
        if progress < job.total:
            if progress != self._last_progress:
                self._last_progress = progress
                self.state.dirty = True
                return True
            return False
        matches = job.take_result()
        if matches is None:
            return False
        state = self.state
        state.content_matches = matches
        state.match_cursor_active = False
        self._search_job = None
        self._last_progress = -1
        state.clamp_highlight()
        self.refresh_preview()
        state.dirty = True
        return True

    def _discard_search(self) -> None:
        if self._search_job is not None:
            logger.debug("Discarding content search for {!r}", self._search_job.query)
        self._search_job = None
        self._last_progress = -1

    def start_search(self) -> bool:
        state = self.state
        if self._search_job is not None:
            state.status_message = "Search already running"
            return True
        query = state.typed_input
        if not query:
            state.status_message = "Type a search string first"
            return True
        state.str_filter = query
        state.content_matches = []
        state.match_cursor_active = False
        state.clamp_highlight()
        self._search_job = self.search_worker.start(state.file_list, query)
        self._last_progress = -1
        return True

    def _append_text(self, key: str) -> bool | None:
        if not is_text_key(key):
            return None
        self.state.typed_input += key
        return True

    def _pop_text(self) -> bool:
        self.state.typed_input = self.state.typed_input[:-1]
        return True

    def _fileviewer_text(self, key: str) -> bool | None:
        if self._append_text(key) is None:
            return None
        self.refilter(self.state.typed_input)
        return True

    def _fileviewer_backspace(self) -> bool:
        if not self.state.typed_input:
            return True
        self._pop_text()
        self.refilter(self.state.typed_input)
        return True

    def refilter(self, query: str) -> None:
        self._file_query = query
        self.state.file_list = filter_paths(self.file_index.paths, query)
        self.state.clamp_highlight()
        self.refresh_preview()

    def rescan(self) -> bool:
        self.file_index.rebuild()
        self.refilter(self._file_query)
        return True

    def refresh_preview(self) -> None:
        state = self.state
        if not state.preview_visible:
            state.preview_lines = []
            return
        relative = state.highlighted_path()
        if relative is None:
            state.preview_lines = []
            return
        match = state.highlighted_match()
        state.preview_lines = self._preview_loader(self.root / relative, match.line if match else None)

    def move_highlight(self, delta: int) -> bool:
        state = self.state
        size = state.active_length()
        if size == 0:
            return True
        state.highlighted = max(0, min(size - 1, state.highlighted + delta))
        if state.focus is Focus.FILESTRLIST:
            state.match_cursor_active = True
        self.refresh_preview()
        return True

    def next_focus(self) -> bool:
        state = self.state
        start = FOCUS_CYCLE.index(state.focus)
        for step in range(1, len(FOCUS_CYCLE) + 1):
            candidate = FOCUS_CYCLE[(start + step) % len(FOCUS_CYCLE)]
            if state.list_length(candidate) > 0:
                state.focus = candidate
                break
        state.highlighted = 0
        state.match_cursor_active = state.focus is Focus.FILESTRLIST
        self.refresh_preview()
        return True

    def remove_recent(self) -> bool:
        state = self.state
        if state.focus is not Focus.RECENTFILES or not len(state.recent_files):
            return True
        state.recent_files.remove_at(state.highlighted)
        state.highlighted = 0
        if not len(state.recent_files):
            state.focus = Focus.FILELIST
        self.refresh_preview()
        return True

    def open_highlighted(self) -> bool:
        state = self.state
        relative = state.highlighted_path()
        if relative is None:
            return True
        match = state.highlighted_match()
        error = self._open_editor(self.root / relative, match.line if match else None)
        if error:
            state.status_message = error
        if state.focus is not Focus.RECENTFILES:
            state.recent_files.push(relative)
        if match is not None:
            state.match_cursor_active = False
        return True

    def request_exit(self) -> bool:
        self.state.exit = True
        return True

    def toggle_help(self) -> bool:
        state = self.state
        if state.context is Context.HELP:
            state.context = state.prev_context
            state.prev_context = self._prev_before_help
        else:
            self._prev_before_help = state.prev_context
            state.prev_context = state.context
            state.context = Context.HELP
        return True

    def toggle_preview(self) -> bool:
        self.state.preview_visible = not self.state.preview_visible
        self.refresh_preview()
        return True

    def next_color_scheme(self) -> bool:
        self.state.color_scheme = self.state.color_scheme.advanced()
        return True

    def enter_string_search(self) -> bool:
        state = self.state
        state.file_filter = state.typed_input
        state.typed_input = ""
        state.prev_context = state.context
        state.context = Context.STRINGSEARCH
        return True

    def leave_string_search(self) -> bool:
        self._switch_to_fileviewer()
        return True

    def _switch_to_fileviewer(self) -> None:
        state = self.state
        self._discard_search()
        state.typed_input = ""
        state.content_matches = []
        state.file_filter = ""
        state.str_filter = ""
        state.match_cursor_active = False
        if state.focus is Focus.FILESTRLIST:
            state.focus = Focus.FILELIST
        state.prev_context = state.context
        state.context = Context.FILEVIEWER
        self.refilter("")

    def enter_replace_mode(self) -> bool:
        state = self.state
        state.typed_input = ""
        state.prev_context = state.context
        state.context = Context.STRINGSEARCHREPLACE
        return True

    def leave_replace_mode(self) -> bool:
        state = self.state
        state.typed_input = ""
        state.str_filter = ""
        state.prev_context = state.context
        state.context = Context.STRINGSEARCH
        return True

    def _stringsearch_enter(self) -> bool:
        if self.state.focus is Focus.FILESTRLIST and self.state.match_cursor_active:
            return self.open_highlighted()
        return self.start_search()

    def _replace_enter(self) -> bool:
        if self.state.focus is Focus.FILESTRLIST and self.state.match_cursor_active:
            return self.open_highlighted()
        return self.apply_replace()

    def apply_replace(self) -> bool:
        state = self.state
        if self._search_job is not None:
            state.status_message = "Search still running"
            return True
        if not state.str_filter:
            state.status_message = "Nothing to replace"
            return True
        result = replace_matches(self.root, state.content_matches, state.str_filter, state.typed_input)
        state.content_matches = []
        state.typed_input = ""
        state.match_cursor_active = False
        if state.focus is Focus.FILESTRLIST:
            state.focus = Focus.FILELIST
        state.clamp_highlight()
        state.status_message = f"Replaced {result.lines_changed} lines in {result.files_written} files"
        self.refresh_preview()
        return True

    def _enter_terminal(self) -> None:
        state = self.state
        self._input_before_terminal = state.typed_input
        state.typed_input = ""
        state.terminal_notice = ""
        state.prev_context = state.context
        state.context = Context.TERMINAL

    def toggle_terminal(self) -> bool:
        if self._open_tmux_shell(None):
            return True
        self._enter_terminal()
        return True

    def leave_terminal(self) -> bool:
        state = self.state
        target = state.prev_context
        if target in (Context.TERMINAL, Context.HELP):
            target = Context.FILEVIEWER
        state.typed_input = self._input_before_terminal
        self._input_before_terminal = ""
        state.prev_context = Context.TERMINAL
        state.context = target
        return True

    def send_terminal_command(self) -> bool:
        state = self.state
        command = state.typed_input
        state.typed_input = ""
        self.shell.clear_output()
        result = self.shell.send(command)
        state.terminal_notice = result.message or ""
        if result.leave_terminal:
            self._input_before_terminal = ""
            self._switch_to_fileviewer()
            state.prev_context = Context.TERMINAL
        return True

    def interrupt_shell(self) -> bool:
        self.shell.interrupt()
        return True

    def _fileviewer_ctrl_x(self) -> bool:
        if self.state.focus is Focus.RECENTFILES:
            return self.remove_recent()
        return self.run_highlighted_in_shell()

    def run_highlighted_in_shell(self) -> bool:
        relative = self.state.highlighted_path()
        if relative is None:
            return True
        command = str(self.root / relative)
        if self._open_tmux_shell(["bash", "-c", command]):
            return True
        self._enter_terminal()
        self.shell.clear_output()
        result = self.shell.send(command)
        self.state.terminal_notice = result.message or ""
        return True
