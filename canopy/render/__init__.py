"""Output backends fed by the walk engine.

Every backend implements ``Renderer``: ``emit`` once per visible entry in
final order, then ``finish`` once with the summary counts.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Protocol, TextIO

from ..metadata import MetadataOrder
from ..tree_walk.types import RenderedEntry
from ..ui_theme import PLAIN_THEME, UITheme

DEFAULT_WRAP_WIDTH = 100


class Renderer(Protocol):
    def emit(self, entry: RenderedEntry) -> None: ...

    def finish(self, dir_count: int, file_count: int) -> None: ...


@dataclass(frozen=True)
class RenderOptions:
    """Presentation settings shared by the text backends."""

    theme: UITheme = PLAIN_THEME
    full: bool = False
    order: MetadataOrder = MetadataOrder.COMMENTS_FIRST
    meta_prefix: str = ""
    wrap_width: int | None = DEFAULT_WRAP_WIDTH


def make_renderer(output_format: str, options: RenderOptions, out: TextIO | None = None) -> Renderer:
    """Return the backend for ``output_format`` writing to ``out`` (stdout by default)."""
    from .json import JsonRenderer
    from .markdown import MarkdownRenderer
    from .tree import TreeRenderer

    stream = out if out is not None else sys.stdout
    if output_format == "json":
        return JsonRenderer(stream)
    if output_format == "markdown":
        return MarkdownRenderer(stream, options)
    if output_format == "tree":
        return TreeRenderer(stream, options)
    raise ValueError(f"unknown output format: {output_format}")


__all__ = [
    "DEFAULT_WRAP_WIDTH",
    "Renderer",
    "RenderOptions",
    "make_renderer",
]
