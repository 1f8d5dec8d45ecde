"""Project file index: one recursive walk into relative path labels."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

from loguru import logger

from .ignore import VCS_METADATA_DIRS, IgnoreMatcher, load_ignore_matcher


def walk_project_files(root: Path, matcher: IgnoreMatcher) -> list[str]:
    """Return regular files under ``root`` as relative POSIX paths.

    Hidden files are included, VCS metadata directories are pruned, and any
    directory that cannot be listed is skipped without failing the walk.
    """
    root = root.resolve()
    files: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        base = Path(dirpath)
        try:
            rel_base = base.relative_to(root).as_posix()
        except ValueError:
            continue
        prefix = "" if rel_base == "." else f"{rel_base}/"

        dirnames[:] = [
            name
            for name in dirnames
            if name not in VCS_METADATA_DIRS and not matcher.is_ignored(prefix + name)
        ]
        for filename in filenames:
            relative = prefix + filename
            if matcher.is_ignored(relative):
                continue
            try:
                if not (base / filename).is_file():
                    continue
            except OSError:
                continue
            files.append(relative)
    files.sort(key=str.casefold)
    return files


class FileIndex:
    """In-memory list of project files, replaced wholesale on every rebuild."""

    def __init__(
        self,
        root: Path,
        matcher_loader: Callable[[Path], IgnoreMatcher] = load_ignore_matcher,
    ) -> None:
        self.root = root.resolve()
        self._matcher_loader = matcher_loader
        self._paths: list[str] = []

    @property
    def paths(self) -> list[str]:
        return self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def rebuild(self) -> list[str]:
        matcher = self._matcher_loader(self.root)
        self._paths = walk_project_files(self.root, matcher)
        logger.debug("Indexed {} files under {}", len(self._paths), self.root)
        return self._paths
