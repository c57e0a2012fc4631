"""Aggregate statistics backend: file counts and line counts per language."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, TextIO

from pygments.lexers import find_lexer_class_for_filename

from ..tree_walk.types import RenderedEntry
from ..ui_theme import PLAIN_THEME, UITheme

MAX_FILE_BYTES_FOR_LINES = 5_000_000
NO_EXTENSION = "No Extension"
OTHER = "Other"


def language_for_path(path: Path) -> str:
    """Return the Pygments language name for ``path`` by file name."""
    lexer_class = find_lexer_class_for_filename(path.name)
    if lexer_class is not None:
        return lexer_class.name
    return OTHER if path.suffix else NO_EXTENSION


def count_lines(path: Path) -> int | None:
    """Count newline-terminated lines, plus a final unterminated line."""
    try:
        if path.stat().st_size > MAX_FILE_BYTES_FOR_LINES:
            return None
        content = path.read_bytes()
    except OSError:
        return None
    newlines = content.count(b"\n")
    if content and not content.endswith(b"\n"):
        newlines += 1
    return newlines


def format_number(value: int) -> str:
    return f"{value:,}"


@dataclass
class LanguageStats:
    language: str
    files: int = 0
    lines: int = 0
    extensions: list[str] = field(default_factory=list)


class StatsRenderer:
    """Counts entries instead of drawing them; prints a summary on finish."""

    def __init__(self, out: TextIO, *, as_json: bool = False, theme: UITheme = PLAIN_THEME) -> None:
        self.out = out
        self.as_json = as_json
        self.theme = theme
        self.by_language: dict[str, LanguageStats] = {}

    def emit(self, entry: RenderedEntry) -> None:
        if entry.is_dir:
            return
        language = language_for_path(entry.path)
        stats = self.by_language.setdefault(language, LanguageStats(language))
        stats.files += 1
        suffix = entry.path.suffix.lower()
        if suffix and suffix not in stats.extensions:
            stats.extensions.append(suffix)
        lines = count_lines(entry.path)
        if lines is not None:
            stats.lines += lines

    def languages(self) -> list[LanguageStats]:
        ordered = sorted(self.by_language.values(), key=lambda item: (-item.files, item.language))
        for item in ordered:
            item.extensions.sort()
        return ordered

    def summary(self, dir_count: int, file_count: int) -> dict[str, Any]:
        languages = self.languages()
        return {
            "files": file_count,
            "directories": dir_count,
            "total_lines": sum(item.lines for item in languages),
            "by_language": [asdict(item) for item in languages],
        }

    def finish(self, dir_count: int, file_count: int) -> None:
        summary = self.summary(dir_count, file_count)
        if self.as_json:
            json.dump(summary, self.out, indent=2)
            self.out.write("\n")
            self.out.flush()
            return

        theme = self.theme
        bold = "\033[1m" if theme.reset else ""
        reset = theme.reset
        lines = [
            f"{bold}Codebase Statistics{reset}",
            "───────────────────",
            f"Files:        {file_count} total",
            f"Directories:  {dir_count}",
            "",
        ]
        if summary["by_language"]:
            lines.append(f"{bold}By Language:{reset}")
            for item in summary["by_language"]:
                name = f"{item['language']:<14}"
                lines.append(
                    f"  {theme.meta_type}{name}{reset}{item['files']:>4} files"
                    f"  {format_number(item['lines']):>8} lines"
                )
            lines.append("")
        lines.append(f"{bold}Total:{reset}       {format_number(summary['total_lines'])} lines of code")
        self.out.write("\n".join(lines) + "\n")
        self.out.flush()


__all__ = ["StatsRenderer", "language_for_path", "count_lines", "format_number"]
