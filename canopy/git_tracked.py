"""Filter restricted to files in the git index."""

from __future__ import annotations

from pathlib import Path

from .gitignore import git_ls_files
from .path_filter import PathFilter, path_filter_from_files


def load_git_tracked_filter(root: Path) -> PathFilter | None:
    """Build a filter showing only tracked files under ``root``; untracked files are hidden."""
    files = git_ls_files(root, "--cached")
    if files is None:
        return None
    return path_filter_from_files(root, files)


__all__ = ["load_git_tracked_filter"]
