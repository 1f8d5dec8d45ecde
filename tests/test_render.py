from __future__ import annotations

import re
import unittest
from unittest import mock

from vuit.ansi import display_width
from vuit.render import (
    RenderContext,
    build_frame,
    build_render_context,
    command_prompt,
    render_frame,
    scroll_window,
    search_badge,
)
from vuit.runtime.state import Context, Focus, SessionState
from vuit.search.content import ContentMatch, SearchJob

ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


def strip_ansi(text: str) -> str:
    return ANSI_RE.sub("", text)


def _state(**overrides) -> SessionState:
    state = SessionState(file_list=["src/main.rs", "README.md"], **overrides)
    state.recent_files.push("README.md")
    return state


class FrameGeometryTests(unittest.TestCase):
    def test_every_context_fills_the_screen_exactly(self) -> None:
        for context in Context:
            for width, height in ((120, 40), (60, 12), (30, 5), (10, 2)):
                with self.subTest(context=context, width=width, height=height):
                    ctx = build_render_context(_state(context=context), width, height, file_total=5)
                    rows = build_frame(ctx)
                    self.assertEqual(len(rows), height)
                    for row in rows:
                        self.assertEqual(display_width(row), width)

    def test_hidden_preview_gives_lists_full_width(self) -> None:
        ctx = build_render_context(_state(preview_visible=False), 80, 24, file_total=2)

        text = "\n".join(strip_ansi(row) for row in build_frame(ctx))

        self.assertNotIn("Preview", text)
        self.assertIn("Files", text)

    def test_empty_screen(self) -> None:
        ctx = build_render_context(_state(), 0, 0, file_total=0)

        self.assertEqual(build_frame(ctx), [])


class FrameContentTests(unittest.TestCase):
    def frame_text(self, state: SessionState, **kwargs) -> str:
        ctx = build_render_context(state, 120, 40, **kwargs)
        return "\n".join(strip_ansi(row) for row in build_frame(ctx))

    def test_fileviewer_shows_lists_count_and_help_hint(self) -> None:
        text = self.frame_text(_state(preview_lines=["fn main() {}"]), file_total=7)

        self.assertIn(" Recent Files ", text)
        self.assertIn("src/main.rs", text)
        self.assertIn(" [ 2 / 7 ] ", text)
        self.assertIn("fn main() {}", text)
        self.assertIn("Help -> <C-h>", text)
        self.assertIn(" > ", text)

    def test_search_panel_shows_progress_then_match_count(self) -> None:
        job = SearchJob(query="fn", total=4)
        job.mark_scanned()
        state = _state(context=Context.STRINGSEARCH, str_filter="fn")

        self.assertIn(" [ 1 / 4 ] ", self.frame_text(state, file_total=2, search_job=job))

        state.content_matches = [ContentMatch("src/main.rs", 1, "fn main() {}")]
        text = self.frame_text(state, file_total=2)
        self.assertIn(" [ 1 Matches ] ", text)
        self.assertIn("src/main.rs:1:fn main() {}", text)

    def test_terminal_panel_shows_latest_output(self) -> None:
        state = _state(context=Context.TERMINAL)
        output = "".join(f"out {n}\r\n" for n in range(100))

        text = self.frame_text(state, file_total=2, terminal_output=output)

        self.assertIn(" Terminal ", text)
        self.assertIn("out 99", text)
        self.assertNotIn("out 50", text)

    def test_terminal_notice_replaces_output(self) -> None:
        state = _state(context=Context.TERMINAL, terminal_notice="Nice Try")

        text = self.frame_text(state, file_total=2, terminal_output="hidden output\n")

        self.assertIn("Nice Try", text)
        self.assertNotIn("hidden output", text)

    def test_help_panel_lists_key_bindings(self) -> None:
        text = self.frame_text(_state(context=Context.HELP), file_total=2)

        self.assertIn("(General Commands)", text)
        self.assertIn("<C-t> - Toggle terminal window", text)

    def test_status_message_replaces_command_title(self) -> None:
        text = self.frame_text(_state(status_message="Replaced 2 lines in 1 files"), file_total=2)

        self.assertIn(" Replaced 2 lines in 1 files ", text)

    def test_selected_row_uses_highlight_color(self) -> None:
        state = _state(focus=Focus.FILELIST, highlighted=1)
        ctx = build_render_context(state, 120, 40, file_total=2)

        rows = [row for row in build_frame(ctx) if "README.md" in row and "\033[97;44m" in row]

        self.assertEqual(len(rows), 1)


class PromptAndBadgeTests(unittest.TestCase):
    def _ctx(self, **kwargs) -> RenderContext:
        defaults = dict(
            width=80,
            height=24,
            context=Context.FILEVIEWER,
            focus=Focus.FILELIST,
            typed_input="abc",
            highlighted=0,
            colorscheme="lightblue",
            highlight_color="blue",
        )
        defaults.update(kwargs)
        return RenderContext(**defaults)

    def test_command_prompt_per_context(self) -> None:
        self.assertEqual(command_prompt(self._ctx()), " > abc")
        self.assertEqual(
            command_prompt(self._ctx(context=Context.STRINGSEARCH, file_filter="src")),
            ' [FILE FILTER: "src"] > abc',
        )
        self.assertEqual(
            command_prompt(self._ctx(context=Context.STRINGSEARCHREPLACE, str_filter="foo")),
            ' [REPLACE "foo" WITH] > abc',
        )

    def test_search_badge(self) -> None:
        self.assertEqual(search_badge(self._ctx()), "")
        self.assertEqual(search_badge(self._ctx(search_progress=(3, 9))), " [ 3 / 9 ] ")
        self.assertEqual(search_badge(self._ctx(str_filter="x")), " [ 0 Matches ] ")

    def test_scroll_window_keeps_selection_visible(self) -> None:
        items = [str(n) for n in range(10)]

        self.assertEqual(scroll_window(items, 2, 4), (["0", "1", "2", "3"], 2))
        self.assertEqual(scroll_window(items, 7, 4), (["4", "5", "6", "7"], 3))
        self.assertEqual(scroll_window(items, 0, 0), ([], 0))

    def test_render_frame_writes_home_prefixed_frame(self) -> None:
        writes: list[bytes] = []

        def capture(_fd: int, data: bytes) -> int:
            writes.append(data)
            return len(data)

        with mock.patch("vuit.render.os.write", side_effect=capture), mock.patch(
            "vuit.render.sys"
        ) as sys_mock:
            sys_mock.stdout.fileno.return_value = 1
            render_frame(self._ctx())

        payload = b"".join(writes).decode("utf-8")
        self.assertTrue(payload.startswith("\033[H"))
        self.assertEqual(payload.count("\r\n"), 23)


if __name__ == "__main__":
    unittest.main()
