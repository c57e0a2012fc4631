"""Datatypes shared by the collect, extract, and reconcile phases."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..extractors import ExtractionConfig, ExtractorKind
from ..extractors.source import DEFAULT_MAX_FILE_BYTES
from ..metadata import MetadataBlock

BRANCH_MIDDLE = "├── "
BRANCH_LAST = "└── "
PREFIX_CONTINUE = "│   "
PREFIX_BLANK = "    "


class RootNotWalkableError(OSError):
    """Raised when the walk root is missing, a symlink, or not a readable directory."""


@dataclass(frozen=True)
class TraversalRecord:
    """One directory-walk step, in the order a sequential walk visits it.

    ``is_last`` and ``prefix`` reflect sibling positions at collection time,
    before any extraction-dependent filter has run.
    """

    name: str
    path: Path
    is_dir: bool
    is_last: bool
    prefix: str
    is_root: bool
    depth: int


@dataclass(frozen=True)
class WalkConfig:
    """Immutable per-invocation walk settings.

    ``parallel_workers``: ``0`` picks the pool default, ``1`` forces the fused
    single-pass walk, ``N`` uses a fixed pool of ``N`` threads. Timestamps
    are POSIX seconds compared against ``st_mtime``.
    """

    show_all: bool = False
    max_depth: int | None = None
    dirs_only: bool = False
    ignore_patterns: tuple[str, ...] = ()
    newer_than: float | None = None
    older_than: float | None = None
    parallel_workers: int = 0
    extract_comments: bool = True
    extract_types: bool = False
    extract_todos: bool = False
    extract_imports: bool = False
    todos_only: bool = False
    show_size: bool = False
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES

    @property
    def has_extractors(self) -> bool:
        return bool(self.extractor_kinds())

    @property
    def uses_phase_split(self) -> bool:
        """Whether the walk runs as collect -> extract -> reconcile."""
        return self.parallel_workers != 1 and self.has_extractors

    def extractor_kinds(self) -> frozenset[ExtractorKind]:
        kinds: set[ExtractorKind] = set()
        if self.extract_comments:
            kinds.add(ExtractorKind.COMMENTS)
        if self.extract_types:
            kinds.add(ExtractorKind.TYPES)
        # The post-filter needs TODO markers even when they are not requested.
        if self.extract_todos or self.todos_only:
            kinds.add(ExtractorKind.TODOS)
        if self.extract_imports:
            kinds.add(ExtractorKind.IMPORTS)
        return frozenset(kinds)

    def extraction_config(self) -> ExtractionConfig:
        return ExtractionConfig(kinds=self.extractor_kinds(), max_file_bytes=self.max_file_bytes)


@dataclass(frozen=True)
class RenderedEntry:
    """One row handed to a renderer, with recomputed sibling position."""

    name: str
    path: Path
    depth: int
    is_dir: bool
    is_last: bool
    prefix: str
    is_root: bool
    metadata: MetadataBlock | None = None
    size: int | None = None


def child_prefix(prefix: str, is_last: bool) -> str:
    """Return the indentation prefix for children of an entry."""
    return prefix + (PREFIX_BLANK if is_last else PREFIX_CONTINUE)


def passes_post_filter(metadata: MetadataBlock | None) -> bool:
    """Return whether a file survives the TODO-only post-filter."""
    return metadata is not None and bool(metadata.todo_lines)


__all__ = [
    "DEFAULT_MAX_FILE_BYTES",
    "BRANCH_MIDDLE",
    "BRANCH_LAST",
    "PREFIX_CONTINUE",
    "PREFIX_BLANK",
    "RootNotWalkableError",
    "TraversalRecord",
    "WalkConfig",
    "RenderedEntry",
    "child_prefix",
    "passes_post_filter",
]
