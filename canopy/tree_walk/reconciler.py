"""Order recovery after extraction: attach metadata and re-derive sibling positions."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from ..metadata import MetadataBlock
from .fs import safe_file_size
from .types import RenderedEntry, TraversalRecord, child_prefix, passes_post_filter


def _rendered(
    record: TraversalRecord,
    metadata: MetadataBlock | None,
    is_last: bool,
    prefix: str,
    show_size: bool,
) -> RenderedEntry:
    size = safe_file_size(record.path) if show_size and not record.is_dir else None
    return RenderedEntry(
        name=record.name,
        path=record.path,
        depth=record.depth,
        is_dir=record.is_dir,
        is_last=is_last,
        prefix=prefix,
        is_root=record.is_root,
        metadata=None if record.is_dir else metadata,
        size=size,
    )


def reconcile(
    records: Sequence[TraversalRecord],
    results: Mapping[int, MetadataBlock | None],
    post_filter_active: bool = False,
    show_size: bool = False,
) -> list[RenderedEntry]:
    """Merge records with extraction results in collection order.

    Without the post-filter the collected ``is_last`` and ``prefix`` stand.
    With it, files whose metadata has no task marker are dropped, and the
    survivors sharing a parent directory have their last-in-group flag and
    indentation prefix re-derived. Directories are never dropped here.
    """
    if not post_filter_active:
        return [
            _rendered(record, results.get(index), record.is_last, record.prefix, show_size)
            for index, record in enumerate(records)
        ]

    survivors = [
        (index, record)
        for index, record in enumerate(records)
        if record.is_dir or passes_post_filter(results.get(index))
    ]

    # Prefix strings repeat across cousins, so groups are keyed by parent path.
    last_in_group: dict[Path, int] = {}
    for index, record in survivors:
        if not record.is_root:
            last_in_group[record.path.parent] = index

    prefixes: dict[Path, str] = {}
    entries: list[RenderedEntry] = []
    for index, record in survivors:
        if record.is_root:
            is_last, prefix = True, record.prefix
            prefixes[record.path] = record.prefix
        else:
            parent = record.path.parent
            is_last = last_in_group[parent] == index
            prefix = prefixes[parent]
            if record.is_dir:
                prefixes[record.path] = child_prefix(prefix, is_last)
        entries.append(_rendered(record, results.get(index), is_last, prefix, show_size))
    return entries


def count_entries(entries: Iterable[RenderedEntry]) -> tuple[int, int]:
    """Return ``(dir_count, file_count)``; the root is not counted."""
    dir_count = 0
    file_count = 0
    for entry in entries:
        if entry.is_root:
            continue
        if entry.is_dir:
            dir_count += 1
        else:
            file_count += 1
    return dir_count, file_count


__all__ = ["reconcile", "count_entries"]
