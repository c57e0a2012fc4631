"""Bounded source-file reading shared by all extractors."""

from __future__ import annotations

from pathlib import Path

DEFAULT_MAX_FILE_BYTES = 1_000_000
BINARY_SNIFF_BYTES = 8_192


def read_source_file(path: Path, max_file_bytes: int) -> str | None:
    """Return decoded text for ``path`` or ``None`` when it should be skipped.

    Files above ``max_file_bytes``, files without an extension, unreadable
    files, and files with NUL bytes near the start are skipped. The size is
    checked before any content is read.
    """
    if not path.suffix:
        return None
    try:
        size = path.stat().st_size
    except OSError:
        return None
    if size > max_file_bytes:
        return None

    try:
        raw = path.read_bytes()
    except OSError:
        return None
    if b"\x00" in raw[:BINARY_SNIFF_BYTES]:
        return None

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("utf-8", errors="replace")


__all__ = ["DEFAULT_MAX_FILE_BYTES", "read_source_file"]
