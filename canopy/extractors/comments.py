"""Leading documentation comment extraction.

Pygments lexers classify tokens so one routine covers every language Pygments
knows: comment and doc-string tokens at the top of a file are collected until
the first code token or a blank-line gap.
"""

from __future__ import annotations

import re
from pathlib import Path

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_for_filename
from pygments.token import Comment, String
from pygments.util import ClassNotFound

from ..metadata import MetadataBlock
from .source import read_source_file

COMMENT_MAX_LINES = 64

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_CODING_COOKIE_RE = re.compile(r"^#.*coding[:=]\s*[-\w.]+")
_LINE_MARKER_RE = re.compile(r"^(?://[/!]?|#+|--+|;+|\*+(?!/))\s?")
_BLOCK_DELIMITERS = (
    ('"""', '"""'),
    ("'''", "'''"),
    ("/**", "*/"),
    ("/*!", "*/"),
    ("/*", "*/"),
    ("(*", "*)"),
    ("{-", "-}"),
    ("<!--", "-->"),
)


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def _lexer_for(path: Path, source: str) -> Lexer | None:
    try:
        return get_lexer_for_filename(path.name, source, stripnl=False)
    except ClassNotFound:
        return None


def _strip_block_delimiters(text: str) -> str:
    for opener, closer in _BLOCK_DELIMITERS:
        if text.startswith(opener):
            text = text[len(opener) :]
            if text.endswith(closer):
                text = text[: -len(closer)]
            return text
    for _opener, closer in _BLOCK_DELIMITERS:
        if text.endswith(closer):
            return text[: -len(closer)]
    return text


def _clean_comment_token(value: str) -> list[str]:
    """Strip comment markers from one token and return its text lines."""
    text = _strip_block_delimiters(value.strip())
    lines = [_LINE_MARKER_RE.sub("", raw.strip(), count=1).strip() for raw in text.splitlines()]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return lines


def leading_comment(source: str, lexer: Lexer) -> str | None:
    """Return the top-of-file comment block of ``source`` as plain text."""
    lines: list[str] = []
    pending_newlines = 0
    for token_type, value in lexer.get_tokens(source):
        if token_type in Comment.Hashbang:
            if lines:
                break
            continue
        if token_type in Comment.Preproc:
            break
        if token_type in Comment or token_type in String.Doc:
            if not lines and _CODING_COOKIE_RE.match(value.strip()):
                continue
            if lines and pending_newlines >= 2:
                break
            lines.extend(_clean_comment_token(value))
            pending_newlines = 1 if value.endswith("\n") else 0
            if len(lines) >= COMMENT_MAX_LINES:
                break
            continue
        if not value.strip():
            pending_newlines += value.count("\n")
            continue
        break

    while lines and not lines[-1]:
        lines.pop()
    if not lines:
        return None
    return sanitize_terminal_text("\n".join(lines[:COMMENT_MAX_LINES]))


def extract_comment(path: Path, max_file_bytes: int) -> str | None:
    """Return the leading documentation comment of ``path`` when present."""
    source = read_source_file(path, max_file_bytes)
    if source is None:
        return None
    lexer = _lexer_for(path, source)
    if lexer is None:
        return None
    return leading_comment(source, lexer)


def comment_block(path: Path, max_file_bytes: int) -> MetadataBlock | None:
    comment = extract_comment(path, max_file_bytes)
    if comment is None:
        return None
    return MetadataBlock.from_comment(comment)


__all__ = [
    "sanitize_terminal_text",
    "leading_comment",
    "extract_comment",
    "comment_block",
]
