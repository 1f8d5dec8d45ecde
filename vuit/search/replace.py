"""Apply a search-and-replace across the lines recorded by a content search."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from .content import ContentMatch


@dataclass(frozen=True)
class ReplaceResult:
    lines_changed: int
    files_written: int


def _read_lines(path: Path) -> list[str] | None:
    """Return the file as lines with their endings, numbered like ``scan_file``.

    Only LF, CRLF and CR end a line; form feeds and other Unicode separators
    stay inside the line body.
    """
    try:
        with open(path, encoding="utf-8", newline="") as handle:
            return list(handle)
    except (OSError, UnicodeDecodeError):
        return None


def _replace_in_line(line: str, needle: str, replacement: str) -> str:
    body = line.rstrip("\r\n")
    ending = line[len(body):]
    return body.replace(needle, replacement) + ending


def replace_matches(
    root: Path,
    matches: Iterable[ContentMatch],
    needle: str,
    replacement: str,
) -> ReplaceResult:
    """Replace ``needle`` with ``replacement`` on each matched line.

    Every file is read at most once and written at most once, and only when a
    line actually changed. A line listed twice is rewritten once. Line numbers
    past the end of the file and unreadable files are skipped. Files are
    written one by one; a failure part way leaves earlier files rewritten.
    """
    if not needle:
        return ReplaceResult(lines_changed=0, files_written=0)

    loaded: dict[str, list[str]] = {}
    unreadable: set[str] = set()
    dirty: set[str] = set()
    seen: set[tuple[str, int]] = set()
    lines_changed = 0

    for match in matches:
        key = (match.path, match.line)
        if key in seen:
            continue
        seen.add(key)

        if match.path in unreadable:
            continue
        if match.path not in loaded:
            read = _read_lines(root / match.path)
            if read is None:
                unreadable.add(match.path)
                continue
            loaded[match.path] = read
        lines = loaded[match.path]
        if not 1 <= match.line <= len(lines):
            continue

        original = lines[match.line - 1]
        updated = _replace_in_line(original, needle, replacement)
        if updated == original:
            continue
        lines[match.line - 1] = updated
        dirty.add(match.path)
        lines_changed += 1

    files_written = 0
    for relative_path in sorted(dirty):
        lines = loaded[relative_path]
        try:
            with open(root / relative_path, "w", encoding="utf-8", newline="") as handle:
                handle.write("".join(lines))
        except OSError as exc:
            logger.warning("Failed to write {}: {}", relative_path, exc)
            continue
        files_written += 1

    logger.info(
        "Replaced {!r} with {!r} on {} lines in {} files",
        needle,
        replacement,
        lines_changed,
        files_written,
    )
    return ReplaceResult(lines_changed=lines_changed, files_written=files_written)
