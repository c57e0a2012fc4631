"""Precomputed visibility sets for version-control-aware walks."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path


def _is_within(path: Path, root: Path) -> bool:
    """Return whether ``path`` is at or under ``root``."""
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


@dataclass(frozen=True)
class PathFilter:
    """Read-only snapshot of which files and directories a walk may show.

    ``included_dirs`` holds every ancestor of every included file, up to and
    including ``root``, so a directory lookup decides whether a subtree can
    contain anything visible.
    """

    root: Path
    included_files: frozenset[Path]
    included_dirs: frozenset[Path]

    def includes_file(self, path: Path) -> bool:
        if path in self.included_files:
            return True
        return path.resolve() in self.included_files

    def includes_directory(self, path: Path) -> bool:
        if path in self.included_dirs or path in self.included_files:
            return True
        resolved = path.resolve()
        # Submodules are listed by git as single entries.
        return resolved in self.included_dirs or resolved in self.included_files

    def is_included(self, path: Path) -> bool:
        if path.is_dir():
            return self.includes_directory(path)
        return self.includes_file(path)


def path_filter_from_files(root: Path, files: Iterable[Path]) -> PathFilter:
    """Build a filter from absolute file paths, keeping only those under ``root``."""
    root = root.resolve()
    included_files: set[Path] = set()
    included_dirs: set[Path] = {root}
    for path in files:
        if not _is_within(path, root):
            continue
        included_files.add(path)
        parent = path.parent
        while parent not in included_dirs and _is_within(parent, root):
            included_dirs.add(parent)
            parent = parent.parent
    return PathFilter(
        root=root,
        included_files=frozenset(included_files),
        included_dirs=frozenset(included_dirs),
    )


__all__ = ["PathFilter", "path_filter_from_files"]
