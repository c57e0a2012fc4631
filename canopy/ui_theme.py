"""Tree-output theme definitions and selection helpers.

Themes are ANSI palettes for the tree renderer only. JSON and markdown
output is never colored.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by the tree renderer."""

    name: str
    reset: str
    tree_root: str
    tree_dir: str
    tree_file: str
    tree_size: str
    meta_comment: str
    meta_type: str
    meta_symbol: str
    meta_todo: str
    meta_import: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    tree_root="\033[1;34m",
    tree_dir="\033[1;34m",
    tree_file="\033[37m",
    tree_size="\033[32m",
    meta_comment="\033[90m",
    meta_type="\033[36m",
    meta_symbol="\033[1;31m",
    meta_todo="\033[33m",
    meta_import="\033[35m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    tree_root="\033[1;38;5;45m",
    tree_dir="\033[1;38;5;45m",
    tree_file="\033[38;5;252m",
    tree_size="\033[38;5;73m",
    meta_comment="\033[2;38;5;110m",
    meta_type="\033[38;5;117m",
    meta_symbol="\033[1;38;5;215m",
    meta_todo="\033[38;5;215m",
    meta_import="\033[38;5;153m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    tree_root="",
    tree_dir="",
    tree_file="",
    tree_size="",
    meta_comment="",
    meta_type="",
    meta_symbol="",
    meta_todo="",
    meta_import="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
