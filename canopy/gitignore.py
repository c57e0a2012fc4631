"""Gitignore-aware path filtering.

Asks git for the files it would show (tracked plus untracked, minus ignored)
so nested ``.gitignore`` files, negations and global excludes all apply.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from .path_filter import PathFilter, path_filter_from_files

GIT_TIMEOUT_SECONDS = 30.0


def _repo_root(root: Path) -> Path | None:
    """Return the work-tree top level containing ``root``, if any."""
    try:
        proc = subprocess.run(
            ["git", "-C", str(root), "rev-parse", "--show-toplevel"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=True,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError):
        return None

    top_level = proc.stdout.strip()
    if not top_level:
        return None
    return Path(top_level).resolve()


def git_ls_files(root: Path, *options: str) -> list[Path] | None:
    """Return absolute paths reported by ``git ls-files`` under ``root``.

    Returns ``None`` when git is unavailable, ``root`` is not inside a work
    tree, or the command fails.
    """
    if shutil.which("git") is None:
        return None

    root = root.resolve()
    if _repo_root(root) is None:
        return None

    try:
        proc = subprocess.run(
            ["git", "-C", str(root), "ls-files", "-z", *options],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=True,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError):
        return None

    paths: list[Path] = []
    for raw in proc.stdout.split(b"\x00"):
        if not raw:
            continue
        rel = raw.decode("utf-8", errors="surrogateescape").rstrip("/")
        if rel:
            paths.append(root / rel)
    return paths


def load_gitignore_filter(root: Path) -> PathFilter | None:
    """Build a filter showing every file git does not ignore under ``root``."""
    files = git_ls_files(root, "--cached", "--others", "--exclude-standard")
    if files is None:
        return None
    return path_filter_from_files(root, files)


__all__ = ["git_ls_files", "load_gitignore_filter"]
