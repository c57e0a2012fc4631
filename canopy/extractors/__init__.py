"""Per-file metadata extractors.

The variant set is fixed: each ``ExtractorKind`` maps to one block builder
and all builders produce into ``MetadataBlock``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..metadata import MetadataBlock
from .comments import comment_block
from .imports import import_block
from .signatures import type_block
from .source import DEFAULT_MAX_FILE_BYTES
from .todos import todo_block


class ExtractorKind(Enum):
    COMMENTS = "comments"
    TYPES = "types"
    TODOS = "todos"
    IMPORTS = "imports"


@dataclass(frozen=True)
class ExtractionConfig:
    """Which extractors run and the per-file size ceiling they share."""

    kinds: frozenset[ExtractorKind] = frozenset({ExtractorKind.COMMENTS})
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES


_BLOCK_BUILDERS: dict[ExtractorKind, Callable[[Path, int], MetadataBlock | None]] = {
    ExtractorKind.COMMENTS: comment_block,
    ExtractorKind.TYPES: type_block,
    ExtractorKind.TODOS: todo_block,
    ExtractorKind.IMPORTS: import_block,
}


def extract_metadata(path: Path, config: ExtractionConfig) -> MetadataBlock | None:
    """Run the selected extractors on ``path`` and merge their output."""
    block = MetadataBlock()
    for kind in ExtractorKind:
        if kind not in config.kinds:
            continue
        produced = _BLOCK_BUILDERS[kind](path, config.max_file_bytes)
        if produced is not None:
            block = block.merged(produced)
    return None if block.is_empty() else block


__all__ = ["ExtractorKind", "ExtractionConfig", "extract_metadata"]
