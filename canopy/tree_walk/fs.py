"""Directory scanning and child classification shared by both walk modes."""

from __future__ import annotations

import errno
import fnmatch
import os
from dataclasses import dataclass
from pathlib import Path

from ..path_filter import PathFilter
from .types import RootNotWalkableError, WalkConfig

ALWAYS_IGNORED_NAMES = frozenset({".git"})


@dataclass(frozen=True)
class DirectoryChild:
    """One visible child of a directory, in sorted position."""

    name: str
    path: Path
    is_dir: bool


def should_ignore_name(name: str, ignore_patterns: tuple[str, ...]) -> bool:
    """Return whether ``name`` matches ``.git`` or any user ignore pattern."""
    if name in ALWAYS_IGNORED_NAMES:
        return True
    for pattern in ignore_patterns:
        if name == pattern or fnmatch.fnmatchcase(name, pattern):
            return True
    return False


def passes_time_filter(path: Path, config: WalkConfig) -> bool:
    """Return whether a file's mtime lies inside the configured window.

    Files whose mtime cannot be read are kept.
    """
    if config.newer_than is None and config.older_than is None:
        return True
    try:
        mtime = path.stat().st_mtime
    except OSError:
        return True
    if config.newer_than is not None and mtime < config.newer_than:
        return False
    if config.older_than is not None and mtime > config.older_than:
        return False
    return True


def safe_file_size(path: Path) -> int | None:
    """Return file size in bytes, or ``None`` on stat failure."""
    try:
        return int(path.stat().st_size)
    except OSError:
        return None


def format_size(size: int) -> str:
    """Format a byte count as ``B``, ``K``, ``M`` or ``G`` with one decimal."""
    kib = 1024
    mib = kib * 1024
    gib = mib * 1024
    if size >= gib:
        return f"{size / gib:.1f}G"
    if size >= mib:
        return f"{size / mib:.1f}M"
    if size >= kib:
        return f"{size / kib:.1f}K"
    return f"{size}B"


def check_walk_root(root: Path) -> Path:
    """Return the absolute root path or raise ``RootNotWalkableError``."""
    if root.is_symlink():
        raise RootNotWalkableError(errno.ELOOP, "Is a symbolic link", str(root))
    resolved = root.resolve()
    if not resolved.exists():
        raise RootNotWalkableError(errno.ENOENT, "No such file or directory", str(root))
    if not resolved.is_dir():
        raise RootNotWalkableError(errno.ENOTDIR, "Not a directory", str(root))
    if not os.access(resolved, os.R_OK | os.X_OK):
        raise RootNotWalkableError(errno.EACCES, "Permission denied", str(root))
    return resolved


def root_display_name(root: Path) -> str:
    """Return the basename shown on the root line, made absolute first so ``.`` is named."""
    return Path(os.path.abspath(root)).name or str(root)


def _sort_key(name: str) -> bytes:
    return os.fsencode(name)


def _is_descendable(path: Path) -> bool:
    return os.access(path, os.R_OK | os.X_OK)


def list_visible_children(
    directory: Path,
    config: WalkConfig,
    path_filter: PathFilter | None,
) -> list[DirectoryChild]:
    """Return the children of ``directory`` that the walk shows, sorted by name.

    Symlinks are never listed. Unreadable directories are dropped here so
    sibling positions are known before anything is emitted. A directory that
    cannot be scanned yields no children.
    """
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: _sort_key(entry.name))
    except OSError:
        return []

    use_filter = path_filter is not None and not config.show_all
    children: list[DirectoryChild] = []
    for entry in entries:
        name = entry.name
        if should_ignore_name(name, config.ignore_patterns):
            continue
        try:
            if entry.is_symlink():
                continue
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = not is_dir and entry.is_file(follow_symlinks=False)
        except OSError:
            continue

        child_path = directory / name
        if is_dir:
            if not _is_descendable(child_path):
                continue
            if use_filter and not config.dirs_only and not path_filter.includes_directory(child_path):
                continue
            children.append(DirectoryChild(name, child_path, True))
        elif is_file:
            if config.dirs_only:
                continue
            if use_filter and not path_filter.includes_file(child_path):
                continue
            if not passes_time_filter(child_path, config):
                continue
            children.append(DirectoryChild(name, child_path, False))
    return children


def descends_into(depth: int, config: WalkConfig) -> bool:
    """Return whether a directory at ``depth`` has its children listed."""
    return config.max_depth is None or depth < config.max_depth


__all__ = [
    "ALWAYS_IGNORED_NAMES",
    "DirectoryChild",
    "should_ignore_name",
    "passes_time_filter",
    "safe_file_size",
    "format_size",
    "check_walk_root",
    "root_display_name",
    "list_visible_children",
    "descends_into",
]
