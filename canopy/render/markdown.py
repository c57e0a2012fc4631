"""Markdown backend: nested bullet list suitable for documentation."""

from __future__ import annotations

from typing import TextIO

from ..tree_walk.fs import format_size
from ..tree_walk.types import RenderedEntry
from . import RenderOptions


class MarkdownRenderer:
    def __init__(self, out: TextIO, options: RenderOptions) -> None:
        self.out = out
        self.options = options

    def emit(self, entry: RenderedEntry) -> None:
        indent = "  " * entry.depth
        if entry.is_dir:
            self.out.write(f"{indent}- **{entry.name}/**\n")
            return

        text = f"{indent}- `{entry.name}`"
        if entry.size is not None:
            text += f" ({format_size(entry.size)})"

        block = entry.metadata
        nested: list[str] = []
        if block is not None and not block.is_empty():
            order = self.options.order
            first = block.first_line(order)
            if first is not None:
                text += " - " + first.content.strip()
            if self.options.full:
                nested = [line.content.strip() for line in block.lines_in_order(order)[1:] if line.content.strip()]

        self.out.write(text + "\n")
        if nested:
            nested_indent = "  " * (entry.depth + 1)
            self.out.write(f"{nested_indent}\n")
            for line in nested:
                self.out.write(f"{nested_indent}> {line}\n")
            self.out.write("\n")

    def finish(self, dir_count: int, file_count: int) -> None:
        self.out.write(f"\n*{dir_count} directories, {file_count} files*\n")
        self.out.flush()


__all__ = ["MarkdownRenderer"]
