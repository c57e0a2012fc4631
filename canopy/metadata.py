"""Metadata payload attached to file rows.

Every extractor produces into one ``MetadataBlock`` so renderers can treat
comments, signatures, task markers, and imports uniformly.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum


class LineStyle(Enum):
    """How a metadata line is colored by the tree renderer."""

    COMMENT = "comment"
    TYPE_SIGNATURE = "type"
    TODO = "todo"
    IMPORT = "import"


class MetadataOrder(Enum):
    """Which of comments or type signatures is shown first."""

    COMMENTS_FIRST = "comments"
    TYPES_FIRST = "types"


@dataclass(frozen=True)
class MetadataLine:
    """One display line beneath (or inline with) a file name."""

    content: str
    style: LineStyle = LineStyle.COMMENT
    symbol_name: str | None = None
    indent: int = 0


@dataclass(frozen=True)
class TodoItem:
    """One task marker found in a source file."""

    marker: str
    text: str
    line: int

    def display(self) -> str:
        return f"{self.marker}: {self.text} (line {self.line})"


@dataclass(frozen=True)
class FileImports:
    """Imported module names grouped by origin."""

    external: tuple[str, ...] = ()
    std: tuple[str, ...] = ()
    internal: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not (self.external or self.std or self.internal)

    def total(self) -> int:
        return len(self.external) + len(self.std) + len(self.internal)

    def summary(self) -> str:
        parts: list[str] = []
        if self.external:
            parts.append(", ".join(self.external))
        if self.std:
            parts.append("std::{" + ", ".join(self.std) + "}")
        if self.internal:
            parts.append("local::{" + ", ".join(self.internal) + "}")
        return ", ".join(parts)

    def as_dict(self) -> dict[str, list[str]]:
        out: dict[str, list[str]] = {}
        if self.external:
            out["external"] = list(self.external)
        if self.std:
            out["std"] = list(self.std)
        if self.internal:
            out["internal"] = list(self.internal)
        return out


_SEPARATOR = MetadataLine("")


@dataclass(frozen=True)
class MetadataBlock:
    """All metadata extracted for one file."""

    comment_lines: tuple[MetadataLine, ...] = ()
    type_lines: tuple[MetadataLine, ...] = ()
    todo_lines: tuple[MetadataLine, ...] = ()
    import_lines: tuple[MetadataLine, ...] = ()
    todos: tuple[TodoItem, ...] = field(default=(), compare=False)
    imports: FileImports | None = field(default=None, compare=False)

    @classmethod
    def from_comment(cls, text: str) -> "MetadataBlock":
        return cls(comment_lines=tuple(MetadataLine(line) for line in text.splitlines()))

    def is_empty(self) -> bool:
        return not (self.comment_lines or self.type_lines or self.todo_lines or self.import_lines)

    def merged(self, other: "MetadataBlock") -> "MetadataBlock":
        """Return a block combining non-empty sections of ``other`` into ``self``."""
        return replace(
            self,
            comment_lines=self.comment_lines or other.comment_lines,
            type_lines=self.type_lines or other.type_lines,
            todo_lines=self.todo_lines or other.todo_lines,
            import_lines=self.import_lines or other.import_lines,
            todos=self.todos or other.todos,
            imports=self.imports if self.imports is not None else other.imports,
        )

    def comment_text(self) -> str | None:
        if not self.comment_lines:
            return None
        return "\n".join(line.content for line in self.comment_lines)

    def _primary_sections(
        self, order: MetadataOrder
    ) -> tuple[tuple[MetadataLine, ...], tuple[MetadataLine, ...]]:
        if order is MetadataOrder.TYPES_FIRST:
            return self.type_lines, self.comment_lines
        return self.comment_lines, self.type_lines

    def lines_in_order(self, order: MetadataOrder = MetadataOrder.COMMENTS_FIRST) -> list[MetadataLine]:
        """Flatten sections for display, separated by empty lines.

        Primary sections follow ``order``; imports and then TODOs always come last.
        """
        first, second = self._primary_sections(order)
        result: list[MetadataLine] = list(first)
        for section in (second, self.import_lines, self.todo_lines):
            if not section:
                continue
            if result:
                result.append(_SEPARATOR)
            result.extend(section)
        return result

    def first_line(self, order: MetadataOrder = MetadataOrder.COMMENTS_FIRST) -> MetadataLine | None:
        first, second = self._primary_sections(order)
        for section in (first, second, self.todo_lines, self.import_lines):
            if section:
                return section[0]
        return None


__all__ = [
    "LineStyle",
    "MetadataOrder",
    "MetadataLine",
    "TodoItem",
    "FileImports",
    "MetadataBlock",
]
