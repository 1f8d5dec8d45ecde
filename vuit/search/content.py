"""Parallel, case-insensitive content search over a list of project files.

A ``SearchJob`` is the only state shared with the UI thread: a progress
counter and a one-shot result slot, both guarded by the job's lock. The UI
polls the job instead of blocking on it.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from ..ansi import clean_display_text


@dataclass(frozen=True)
class ContentMatch:
    path: str
    line: int  # 1-based
    text: str

    def label(self) -> str:
        return f"{self.path}:{self.line}:{self.text}"


class SearchJob:
    """Progress counter plus one-shot result slot for one search run."""

    def __init__(self, query: str, total: int) -> None:
        self.query = query
        self.total = total
        self._lock = threading.Lock()
        self._progress = 0
        self._result: list[ContentMatch] | None = None
        self._delivered = False

    @property
    def progress(self) -> int:
        with self._lock:
            return self._progress

    @property
    def done(self) -> bool:
        """True once every file was scanned and the result slot is filled."""
        with self._lock:
            return self._progress >= self.total and (self._result is not None or self._delivered)

    def mark_scanned(self) -> None:
        with self._lock:
            self._progress += 1

    def publish(self, matches: list[ContentMatch]) -> None:
        with self._lock:
            if self._result is not None or self._delivered:
                return
            self._result = matches

    def take_result(self) -> list[ContentMatch] | None:
        """Return the finished matches exactly once; ``None`` before and after."""
        with self._lock:
            if self._result is None:
                return None
            result = self._result
            self._result = None
            self._delivered = True
            return result


def scan_file(root: Path, relative_path: str, needle_folded: str) -> list[ContentMatch]:
    """Return matching lines of one file; unreadable files yield no matches."""
    matches: list[ContentMatch] = []
    try:
        with open(root / relative_path, encoding="utf-8", errors="replace") as handle:
            for line_number, line in enumerate(handle, start=1):
                text = line.rstrip("\r\n")
                if needle_folded in text.casefold():
                    matches.append(
                        ContentMatch(
                            path=relative_path,
                            line=line_number,
                            text=clean_display_text(text),
                        )
                    )
    except OSError:
        return []
    return matches


def default_worker_count() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


class ContentSearchWorker:
    """Start background searches; results are collected through ``SearchJob``."""

    def __init__(self, root: Path, max_workers: int | None = None) -> None:
        self.root = root.resolve()
        self._max_workers = max_workers if max_workers is not None else default_worker_count()

    def _run(self, job: SearchJob, files: list[str]) -> None:
        needle = job.query.casefold()
        collected: list[ContentMatch] = []

        def scan(relative_path: str) -> list[ContentMatch]:
            try:
                return scan_file(self.root, relative_path, needle)
            finally:
                job.mark_scanned()

        try:
            with ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix="vuit-content-search",
            ) as pool:
                for file_matches in pool.map(scan, files):
                    collected.extend(file_matches)
        except Exception:
            # Progress must still reach total so the poll installs a result.
            logger.exception("Content search for {!r} failed", job.query)
            while job.progress < job.total:
                job.mark_scanned()
        job.publish(collected)
        logger.info(
            "Content search for {!r} finished: {} matches in {} files",
            job.query,
            len(collected),
            job.total,
        )

    def start(self, files: Sequence[str], query: str) -> SearchJob:
        file_list = list(files)
        job = SearchJob(query=query, total=len(file_list))
        logger.info("Starting content search for {!r} over {} files", query, len(file_list))
        worker = threading.Thread(
            target=self._run,
            args=(job, file_list),
            name="vuit-content-search",
            daemon=True,
        )
        worker.start()
        return job
