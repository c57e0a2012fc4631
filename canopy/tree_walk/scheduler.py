"""Parallel per-file metadata extraction over a bounded thread pool."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from ..extractors import ExtractionConfig, extract_metadata
from ..metadata import MetadataBlock
from .types import TraversalRecord

logger = logging.getLogger(__name__)

Extractor = Callable[[Path, ExtractionConfig], MetadataBlock | None]
WorkItem = tuple[int, Path]


def default_worker_count() -> int:
    """Pool size used when the caller asks for ``0`` workers."""
    return min(32, (os.cpu_count() or 1) + 4)


def resolve_worker_count(worker_count: int) -> int:
    if worker_count <= 0:
        return default_worker_count()
    return worker_count


def partition(items: Sequence[WorkItem], parts: int) -> list[list[WorkItem]]:
    """Split ``items`` into at most ``parts`` contiguous chunks of near-equal size."""
    if not items:
        return []
    parts = max(1, min(parts, len(items)))
    base, extra = divmod(len(items), parts)
    chunks: list[list[WorkItem]] = []
    start = 0
    for part in range(parts):
        size = base + (1 if part < extra else 0)
        chunks.append(list(items[start : start + size]))
        start += size
    return chunks


def _extract_one(path: Path, config: ExtractionConfig, extractor: Extractor) -> MetadataBlock | None:
    """Run ``extractor`` for one file; any failure means no metadata."""
    try:
        return extractor(path, config)
    except Exception as exc:
        logger.debug("extraction failed for %s: %s", path, exc)
        return None


def _extract_chunk(
    chunk: list[WorkItem],
    config: ExtractionConfig,
    extractor: Extractor,
) -> list[tuple[int, MetadataBlock | None]]:
    return [(index, _extract_one(path, config, extractor)) for index, path in chunk]


def extract_all(
    records: Sequence[TraversalRecord],
    config: ExtractionConfig,
    worker_count: int = 0,
    extractor: Extractor = extract_metadata,
) -> dict[int, MetadataBlock | None]:
    """Compute metadata for every file record, keyed by record index.

    Directories never get an entry. ``worker_count`` of ``1`` runs inline on
    the calling thread; ``0`` uses ``default_worker_count()``. Result order
    carries no meaning; callers look results up by index.
    """
    items: list[WorkItem] = [(index, record.path) for index, record in enumerate(records) if not record.is_dir]
    if not items or not config.kinds:
        return {}

    workers = resolve_worker_count(worker_count)
    if workers == 1 or len(items) == 1:
        return dict(_extract_chunk(items, config, extractor))

    chunks = partition(items, workers)
    logger.debug("extracting %d files with %d workers", len(items), len(chunks))
    results: dict[int, MetadataBlock | None] = {}
    with ThreadPoolExecutor(max_workers=len(chunks), thread_name_prefix="canopy-extract") as executor:
        futures = [executor.submit(_extract_chunk, chunk, config, extractor) for chunk in chunks]
        for future in futures:
            results.update(future.result())
    return results


__all__ = [
    "default_worker_count",
    "resolve_worker_count",
    "partition",
    "extract_all",
]
