"""Plain-text shaping helpers for metadata lines."""

from __future__ import annotations

import textwrap

MIN_WRAP_WIDTH = 10


def available_wrap_width(wrap_width: int | None, continuation_len: int, meta_prefix_len: int) -> int | None:
    """Return the usable wrap width after prefixes, or ``None`` when wrapping is off.

    Wrapping is disabled when ``wrap_width`` is unset or zero, or when fewer
    than eleven columns remain.
    """
    if not wrap_width:
        return None
    available = wrap_width - continuation_len - meta_prefix_len
    if available <= MIN_WRAP_WIDTH:
        return None
    return available


def wrap_text(text: str, width: int | None) -> list[str]:
    """Wrap ``text`` on word boundaries, splitting words longer than ``width``."""
    if not width:
        return [text]
    lines = textwrap.wrap(text, width=width, break_long_words=True, break_on_hyphens=False)
    return lines or [""]


__all__ = ["MIN_WRAP_WIDTH", "available_wrap_width", "wrap_text"]
