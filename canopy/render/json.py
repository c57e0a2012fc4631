"""JSON backend: builds the nested document and writes it on finish."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, TextIO

from ..tree_walk.fs import format_size
from ..tree_walk.types import RenderedEntry


def _file_node(entry: RenderedEntry, rel_path: str) -> dict[str, Any]:
    node: dict[str, Any] = {"type": "file", "name": entry.name, "path": rel_path}
    block = entry.metadata
    if block is not None:
        comment = block.comment_text()
        if comment is not None:
            node["comments"] = comment
        if block.type_lines:
            node["types"] = [line.content for line in block.type_lines]
        if block.todos:
            node["todos"] = [{"type": item.marker, "text": item.text, "line": item.line} for item in block.todos]
        if block.imports is not None:
            node["imports"] = block.imports.as_dict()
    if entry.size is not None:
        node["size_bytes"] = entry.size
        node["size_human"] = format_size(entry.size)
    return node


class JsonRenderer:
    """Collects entries into a tree keyed by directory path."""

    def __init__(self, out: TextIO) -> None:
        self.out = out
        self.root_path: Path | None = None
        self.document: dict[str, Any] | None = None
        self._children_by_dir: dict[Path, list[dict[str, Any]]] = {}

    def _relative(self, path: Path) -> str:
        if self.root_path is None or path == self.root_path:
            return "."
        try:
            return path.relative_to(self.root_path).as_posix()
        except ValueError:
            return str(path)

    def emit(self, entry: RenderedEntry) -> None:
        if entry.is_root:
            self.root_path = entry.path
            self.document = {"type": "directory", "name": entry.name, "path": ".", "children": []}
            self._children_by_dir[entry.path] = self.document["children"]
            return

        rel_path = self._relative(entry.path)
        if entry.is_dir:
            node: dict[str, Any] = {"type": "directory", "name": entry.name, "path": rel_path, "children": []}
            self._children_by_dir[entry.path] = node["children"]
        else:
            node = _file_node(entry, rel_path)
        siblings = self._children_by_dir.get(entry.path.parent)
        if siblings is not None:
            siblings.append(node)

    def finish(self, dir_count: int, file_count: int) -> None:
        document = self.document if self.document is not None else {}
        json.dump(document, self.out, indent=2, ensure_ascii=False)
        self.out.write("\n")
        self.out.flush()


__all__ = ["JsonRenderer"]
