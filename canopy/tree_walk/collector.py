"""Sequential pruning depth-first walk producing ordered traversal records."""

from __future__ import annotations

from pathlib import Path

from ..path_filter import PathFilter
from .fs import DirectoryChild, check_walk_root, descends_into, list_visible_children, root_display_name
from .types import TraversalRecord, WalkConfig, child_prefix


def collect(root: Path, config: WalkConfig, path_filter: PathFilter | None = None) -> list[TraversalRecord]:
    """Walk ``root`` and return records in sequential pre-order.

    Children are name-sorted by bytes and ``is_last`` is fixed among the
    children that survived classification. A directory at ``max_depth`` is
    recorded but not descended into.

    Raises ``RootNotWalkableError`` when ``root`` is missing, a symlink, not a
    directory, or unreadable.
    """
    resolved_root = check_walk_root(root)
    records: list[TraversalRecord] = [
        TraversalRecord(
            name=root_display_name(root),
            path=resolved_root,
            is_dir=True,
            is_last=True,
            prefix="",
            is_root=True,
            depth=0,
        )
    ]

    # Pending children in reverse order so pops follow pre-order.
    stack: list[tuple[DirectoryChild, bool, str, int]] = []

    def push_children(directory: Path, prefix: str, depth: int) -> None:
        children = list_visible_children(directory, config, path_filter)
        last_index = len(children) - 1
        for index in range(last_index, -1, -1):
            stack.append((children[index], index == last_index, prefix, depth))

    if descends_into(0, config):
        push_children(resolved_root, "", 1)

    while stack:
        child, is_last, prefix, depth = stack.pop()
        records.append(
            TraversalRecord(
                name=child.name,
                path=child.path,
                is_dir=child.is_dir,
                is_last=is_last,
                prefix=prefix,
                is_root=False,
                depth=depth,
            )
        )
        if child.is_dir and descends_into(depth, config):
            push_children(child.path, child_prefix(prefix, is_last), depth + 1)

    return records


__all__ = ["collect"]
