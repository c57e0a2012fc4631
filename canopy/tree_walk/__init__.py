"""Directory walk engine: collect, extract, reconcile, render."""

from __future__ import annotations

from .collector import collect
from .fs import format_size, should_ignore_name
from .pipeline import WalkPhase, walk_tree
from .reconciler import count_entries, reconcile
from .scheduler import default_worker_count, extract_all
from .types import (
    DEFAULT_MAX_FILE_BYTES,
    RenderedEntry,
    RootNotWalkableError,
    TraversalRecord,
    WalkConfig,
)

__all__ = [
    "DEFAULT_MAX_FILE_BYTES",
    "RenderedEntry",
    "RootNotWalkableError",
    "TraversalRecord",
    "WalkConfig",
    "WalkPhase",
    "collect",
    "count_entries",
    "default_worker_count",
    "extract_all",
    "format_size",
    "reconcile",
    "should_ignore_name",
    "walk_tree",
]
