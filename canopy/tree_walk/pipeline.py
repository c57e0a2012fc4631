"""Walk driver: phase-split parallel mode and fused single-pass mode."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from ..extractors import extract_metadata
from ..metadata import MetadataBlock
from ..path_filter import PathFilter
from .collector import collect
from .fs import DirectoryChild, check_walk_root, descends_into, list_visible_children, root_display_name, safe_file_size
from .reconciler import count_entries, reconcile
from .scheduler import extract_all
from .types import RenderedEntry, WalkConfig, child_prefix, passes_post_filter

if TYPE_CHECKING:
    from ..render import Renderer

logger = logging.getLogger(__name__)


class WalkPhase(Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    EXTRACTING = "extracting"
    RECONCILING = "reconciling"
    RENDERING = "rendering"
    DONE = "done"


class _PhaseTracker:
    """Forward-only phase log for one walk."""

    def __init__(self) -> None:
        self.phase = WalkPhase.IDLE

    def advance(self, phase: WalkPhase) -> None:
        logger.debug("walk phase %s -> %s", self.phase.value, phase.value)
        self.phase = phase


def walk_tree(
    root: Path,
    config: WalkConfig,
    renderer: "Renderer",
    path_filter: PathFilter | None = None,
) -> tuple[int, int]:
    """Walk ``root``, feed every visible entry to ``renderer`` and finish it.

    Returns ``(dir_count, file_count)``. Output is identical for every
    ``parallel_workers`` value. Raises ``RootNotWalkableError`` before anything
    is emitted when ``root`` cannot be walked.
    """
    tracker = _PhaseTracker()
    if config.uses_phase_split:
        counts = _walk_phased(root, config, renderer, path_filter, tracker)
    else:
        counts = _walk_fused(root, config, renderer, path_filter, tracker)
    tracker.advance(WalkPhase.DONE)
    return counts


def _walk_phased(
    root: Path,
    config: WalkConfig,
    renderer: "Renderer",
    path_filter: PathFilter | None,
    tracker: _PhaseTracker,
) -> tuple[int, int]:
    tracker.advance(WalkPhase.COLLECTING)
    records = collect(root, config, path_filter)

    tracker.advance(WalkPhase.EXTRACTING)
    results = extract_all(records, config.extraction_config(), config.parallel_workers)

    tracker.advance(WalkPhase.RECONCILING)
    entries = reconcile(records, results, config.todos_only, config.show_size)

    tracker.advance(WalkPhase.RENDERING)
    for entry in entries:
        renderer.emit(entry)
    dir_count, file_count = count_entries(entries)
    renderer.finish(dir_count, file_count)
    return dir_count, file_count


def _walk_fused(
    root: Path,
    config: WalkConfig,
    renderer: "Renderer",
    path_filter: PathFilter | None,
    tracker: _PhaseTracker,
) -> tuple[int, int]:
    """Single pass: extract inline while listing, emit as entries are visited.

    The post-filter runs before sibling positions are assigned, so no
    reconciliation is needed.
    """
    tracker.advance(WalkPhase.COLLECTING)
    resolved_root = check_walk_root(root)
    extraction_config = config.extraction_config()
    run_extractors = config.has_extractors

    tracker.advance(WalkPhase.RENDERING)
    renderer.emit(
        RenderedEntry(
            name=root_display_name(root),
            path=resolved_root,
            depth=0,
            is_dir=True,
            is_last=True,
            prefix="",
            is_root=True,
        )
    )

    stack: list[tuple[DirectoryChild, MetadataBlock | None, bool, str, int]] = []

    def push_children(directory: Path, prefix: str, depth: int) -> None:
        kept: list[tuple[DirectoryChild, MetadataBlock | None]] = []
        for child in list_visible_children(directory, config, path_filter):
            metadata: MetadataBlock | None = None
            if not child.is_dir and run_extractors:
                try:
                    metadata = extract_metadata(child.path, extraction_config)
                except Exception as exc:
                    logger.debug("extraction failed for %s: %s", child.path, exc)
                    metadata = None
                if config.todos_only and not passes_post_filter(metadata):
                    continue
            kept.append((child, metadata))
        last_index = len(kept) - 1
        for index in range(last_index, -1, -1):
            child, metadata = kept[index]
            stack.append((child, metadata, index == last_index, prefix, depth))

    if descends_into(0, config):
        push_children(resolved_root, "", 1)

    dir_count = 0
    file_count = 0
    while stack:
        child, metadata, is_last, prefix, depth = stack.pop()
        size = safe_file_size(child.path) if config.show_size and not child.is_dir else None
        renderer.emit(
            RenderedEntry(
                name=child.name,
                path=child.path,
                depth=depth,
                is_dir=child.is_dir,
                is_last=is_last,
                prefix=prefix,
                is_root=False,
                metadata=metadata,
                size=size,
            )
        )
        if child.is_dir:
            dir_count += 1
            if descends_into(depth, config):
                push_children(child.path, child_prefix(prefix, is_last), depth + 1)
        else:
            file_count += 1

    renderer.finish(dir_count, file_count)
    return dir_count, file_count


__all__ = ["WalkPhase", "walk_tree"]
