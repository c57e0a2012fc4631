"""ANSI tree backend: branch connectors, inline metadata, summary line."""

from __future__ import annotations

from typing import TextIO

from ..metadata import LineStyle, MetadataBlock, MetadataLine
from ..tree_walk.fs import format_size
from ..tree_walk.types import BRANCH_LAST, BRANCH_MIDDLE, RenderedEntry, child_prefix
from ..ui_theme import UITheme
from . import RenderOptions
from .text import available_wrap_width, wrap_text


def _style_color(theme: UITheme, style: LineStyle) -> str:
    if style is LineStyle.TYPE_SIGNATURE:
        return theme.meta_type
    if style is LineStyle.TODO:
        return theme.meta_todo
    if style is LineStyle.IMPORT:
        return theme.meta_import
    return theme.meta_comment


class TreeRenderer:
    """Writes each entry as soon as it is emitted."""

    def __init__(self, out: TextIO, options: RenderOptions) -> None:
        self.out = out
        self.options = options
        self.theme = options.theme

    def _paint(self, color: str, text: str) -> str:
        if not color:
            return text
        return f"{color}{text}{self.theme.reset}"

    def _metadata_text(self, line: MetadataLine, text: str) -> str:
        color = _style_color(self.theme, line.style)
        symbol = line.symbol_name
        if symbol and self.theme.meta_symbol:
            pos = text.find(symbol)
            if pos >= 0:
                return (
                    self._paint(color, text[:pos])
                    + self._paint(self.theme.meta_symbol, symbol)
                    + self._paint(color, text[pos + len(symbol) :])
                )
        return self._paint(color, text)

    def emit(self, entry: RenderedEntry) -> None:
        if entry.is_root:
            self.out.write(self._paint(self.theme.tree_root, entry.name) + "\n")
            return

        connector = BRANCH_LAST if entry.is_last else BRANCH_MIDDLE
        head = entry.prefix + connector
        if entry.is_dir:
            self.out.write(head + self._paint(self.theme.tree_dir, entry.name) + "\n")
            return

        head += self._paint(self.theme.tree_file, entry.name)
        if entry.size is not None:
            head += "  " + self._paint(self.theme.tree_size, f"[{format_size(entry.size)}]")
        self.out.write(head)
        self._write_metadata(entry.metadata, entry.prefix, entry.is_last)

    def _write_metadata(self, block: MetadataBlock | None, prefix: str, is_last: bool) -> None:
        options = self.options
        if block is None or block.is_empty():
            self.out.write("\n")
            return

        if not options.full:
            first = block.first_line(options.order)
            if first is not None:
                self.out.write("  " + options.meta_prefix + self._metadata_text(first, first.content))
            self.out.write("\n")
            return

        lines = block.lines_in_order(options.order)
        first, rest = lines[0], lines[1:]
        self.out.write("  " + options.meta_prefix + self._metadata_text(first, first.content) + "\n")

        continuation = child_prefix(prefix, is_last)
        width = available_wrap_width(options.wrap_width, len(continuation), len(options.meta_prefix))
        for line in rest:
            if not line.content.strip():
                self.out.write(continuation.rstrip() + "\n")
                continue
            indent = " " * line.indent
            line_width = width - len(indent) if width is not None else None
            for piece in wrap_text(line.content, line_width):
                self.out.write(
                    continuation + options.meta_prefix + indent + self._metadata_text(line, piece) + "\n"
                )

    def finish(self, dir_count: int, file_count: int) -> None:
        self.out.write(f"\n{dir_count} directories, {file_count} files\n")
        self.out.flush()


__all__ = ["TreeRenderer"]
