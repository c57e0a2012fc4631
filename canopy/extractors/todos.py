"""Task-marker (TODO/FIXME/HACK/XXX/BUG/NOTE) extraction from comments."""

from __future__ import annotations

import re
from pathlib import Path

from ..metadata import LineStyle, MetadataBlock, MetadataLine, TodoItem
from .source import read_source_file

MARKER_TYPES = ("TODO", "FIXME", "HACK", "XXX", "BUG", "NOTE")

_TODO_RE = re.compile(
    r"(?i)^\s*(?://+|/?\*+|#+|--+|;+)\s*!?\s*(TODO|FIXME|HACK|XXX|BUG|NOTE)\s*:\s*(.+)"
)
SUPPORTED_SUFFIXES = frozenset(
    {
        ".rs", ".py", ".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs", ".go", ".c", ".h",
        ".cpp", ".hpp", ".cc", ".cxx", ".rb", ".sh", ".bash", ".zsh", ".java", ".kt",
        ".kts", ".swift", ".php", ".cs", ".lua", ".pl", ".pm", ".r", ".scala", ".clj",
        ".cljs", ".ex", ".exs", ".erl", ".hrl", ".hs", ".ml", ".mli", ".fs", ".fsx",
        ".vue", ".svelte",
    }
)
_COMMENT_HINTS = ("//", "/*", "#", "--", ";", "*", "(*", '"""', "'''")
_TRAILING_CLOSERS = ("*/", "-->", "*)", '"""', "'''")


def _looks_like_comment(stripped: str) -> bool:
    if stripped.startswith(_COMMENT_HINTS):
        return True
    return "//" in stripped or "/*" in stripped or "#" in stripped


def _clean_text(text: str) -> str:
    cleaned = text.strip()
    changed = True
    while changed:
        changed = False
        for closer in _TRAILING_CLOSERS:
            if cleaned.endswith(closer):
                cleaned = cleaned[: -len(closer)].rstrip()
                changed = True
    return cleaned


def _is_documentation_example(text: str) -> bool:
    return text.startswith("`") or "marker" in text.lower()


def todos_from_source(source: str) -> list[TodoItem]:
    """Return task markers found in comment-looking lines of ``source``."""
    items: list[TodoItem] = []
    for line_idx, line in enumerate(source.splitlines()):
        stripped = line.strip()
        if not stripped or not _looks_like_comment(stripped):
            continue
        match = _TODO_RE.match(line)
        if match is None:
            continue
        text = _clean_text(match.group(2))
        if not text or _is_documentation_example(text):
            continue
        items.append(TodoItem(marker=match.group(1).upper(), text=text, line=line_idx + 1))
    return items


def extract_todos(path: Path, max_file_bytes: int) -> list[TodoItem] | None:
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        return None
    source = read_source_file(path, max_file_bytes)
    if source is None:
        return None
    items = todos_from_source(source)
    return items or None


def todo_block(path: Path, max_file_bytes: int) -> MetadataBlock | None:
    items = extract_todos(path, max_file_bytes)
    if not items:
        return None
    return MetadataBlock(
        todo_lines=tuple(MetadataLine(item.display(), LineStyle.TODO) for item in items),
        todos=tuple(items),
    )


__all__ = ["MARKER_TYPES", "SUPPORTED_SUFFIXES", "todos_from_source", "extract_todos", "todo_block"]
