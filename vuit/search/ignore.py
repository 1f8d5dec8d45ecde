"""Gitignore-aware path filtering for the file index.

Asks git which paths under the index root are ignored. Outside a repository
(or without git on ``PATH``) nothing is treated as ignored.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

VCS_METADATA_DIRS: frozenset[str] = frozenset({".git"})


@dataclass(frozen=True)
class IgnoreMatcher:
    """Snapshot of git-ignored paths, relative to the index root.

    ``ignored_dirs`` hold whole subtrees; a path is ignored when it or any of
    its parent directories is listed.
    """

    ignored_files: frozenset[str]
    ignored_dirs: frozenset[str]

    def is_ignored(self, relative_path: str) -> bool:
        if relative_path in self.ignored_files or relative_path in self.ignored_dirs:
            return True
        parts = relative_path.split("/")
        for depth in range(1, len(parts)):
            if "/".join(parts[:depth]) in self.ignored_dirs:
                return True
        return False


EMPTY_MATCHER = IgnoreMatcher(ignored_files=frozenset(), ignored_dirs=frozenset())


def _git_top_level(root: Path) -> Path | None:
    try:
        proc = subprocess.run(
            ["git", "-C", str(root), "rev-parse", "--show-toplevel"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    top_level = proc.stdout.strip()
    return Path(top_level).resolve() if top_level else None


def load_ignore_matcher(root: Path) -> IgnoreMatcher:
    """Build a matcher from ``git ls-files --others -i --exclude-standard``.

    Paths outside ``root`` are dropped and the rest are re-expressed relative
    to ``root`` even when the repository root sits higher up.
    """
    if shutil.which("git") is None:
        return EMPTY_MATCHER

    root = root.resolve()
    repo_root = _git_top_level(root)
    if repo_root is None:
        return EMPTY_MATCHER

    try:
        proc = subprocess.run(
            [
                "git",
                "-C",
                str(repo_root),
                "ls-files",
                "-z",
                "--others",
                "-i",
                "--exclude-standard",
                "--directory",
            ],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        logger.debug("git ls-files failed under {}; ignore rules disabled", repo_root)
        return EMPTY_MATCHER

    ignored_files: set[str] = set()
    ignored_dirs: set[str] = set()
    for raw in proc.stdout.split(b"\x00"):
        if not raw:
            continue
        rel = raw.decode("utf-8", errors="replace")
        is_dir = rel.endswith("/")
        rel = rel.rstrip("/")
        if not rel:
            continue
        try:
            relative_to_root = (repo_root / rel).relative_to(root).as_posix()
        except ValueError:
            continue
        if is_dir or (root / relative_to_root).is_dir():
            ignored_dirs.add(relative_to_root)
        else:
            ignored_files.add(relative_to_root)

    return IgnoreMatcher(ignored_files=frozenset(ignored_files), ignored_dirs=frozenset(ignored_dirs))

