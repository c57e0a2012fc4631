"""Command-line front door for canopy.

Parses CLI options on top of persisted defaults, builds the walk settings and
the output backend, then runs one walk over the target directory.
"""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta
from pathlib import Path
from typing import TextIO

from . import __version__
from . import config as user_config
from .config import COLOR_MODES, OUTPUT_FORMATS, load_defaults, save_defaults
from .git_tracked import load_git_tracked_filter
from .gitignore import load_gitignore_filter
from .metadata import MetadataOrder
from .path_filter import PathFilter
from .render import DEFAULT_WRAP_WIDTH, Renderer, RenderOptions, make_renderer
from .render.stats import StatsRenderer
from .tree_walk import RootNotWalkableError, WalkConfig, walk_tree
from .ui_theme import available_theme_names, resolve_theme

logger = logging.getLogger("canopy")

LOG_FORMAT = "canopy: %(levelname)s: %(message)s"
FILTER_MODES = ("gitignore", "tracked")
EXIT_OK = 0
EXIT_FAILURE = 1

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw])\s*$", re.IGNORECASE)
_DURATION_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days", "w": "weeks"}
# Short options that take a value; later characters in a bundle belong to it.
_VALUE_SHORT_OPTIONS = frozenset("LIjwp")


def parse_when(value: str, now: datetime | None = None) -> float:
    """Parse ``30s``/``15m``/``2h``/``3d``/``1w`` (ago) or an ISO date into a timestamp."""
    reference = now if now is not None else datetime.now()
    match = _DURATION_RE.match(value)
    if match is not None:
        amount = int(match.group(1))
        unit = _DURATION_UNITS[match.group(2).lower()]
        return (reference - timedelta(**{unit: amount})).timestamp()
    try:
        return datetime.fromisoformat(value.strip()).timestamp()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"invalid time {value!r}: use a duration like 30s, 15m, 2h, 3d, 1w or an ISO date"
        ) from exc


def _non_negative_int(value: str) -> int:
    """argparse type for integers >= 0."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def metadata_order_from_argv(argv: Sequence[str]) -> MetadataOrder:
    """Return which of ``-c``/``-t`` came first; comments win when neither did."""
    for token in argv:
        if token == "--":
            break
        if token in ("-c", "--comments"):
            return MetadataOrder.COMMENTS_FIRST
        if token in ("-t", "--types"):
            return MetadataOrder.TYPES_FIRST
        if token.startswith("-") and not token.startswith("--") and len(token) > 2:
            for flag in token[1:]:
                if flag == "c":
                    return MetadataOrder.COMMENTS_FIRST
                if flag == "t":
                    return MetadataOrder.TYPES_FIRST
                if flag in _VALUE_SHORT_OPTIONS:
                    break
    return MetadataOrder.COMMENTS_FIRST


def resolve_use_color(mode: str, stream: TextIO, environ: Mapping[str, str] | None = None) -> bool:
    """Decide whether ANSI colors are written for ``mode`` and ``stream``."""
    if mode == "always":
        return True
    if mode == "never":
        return False
    env = os.environ if environ is None else environ
    if env.get("NO_COLOR"):
        return False
    if env.get("FORCE_COLOR"):
        return True
    if env.get("TERM") == "dumb":
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def configure_logging(verbosity: int) -> None:
    """Route package logs to stderr at a level chosen by ``-v`` count."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def build_parser(defaults: Mapping[str, object] | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="canopy",
        description="Show a directory tree annotated with comments, signatures, TODOs and imports.",
    )
    parser.add_argument("path", nargs="?", default=".", help="Directory to show (default: current directory).")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    filtering = parser.add_argument_group("filtering")
    filtering.add_argument("-a", "--all", action="store_true", help="Show every file, ignoring git.")
    filtering.add_argument(
        "--filter",
        choices=FILTER_MODES,
        default="gitignore",
        help="gitignore: hide ignored files (default); tracked: show only files in the git index.",
    )
    filtering.add_argument("-L", "--level", type=_non_negative_int, default=None, help="Descend at most N levels.")
    filtering.add_argument("-d", "--dirs-only", action="store_true", help="List directories only.")
    filtering.add_argument(
        "-I",
        "--ignore",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Skip names matching PATTERN (glob); repeatable.",
    )
    filtering.add_argument("--newer", type=parse_when, default=None, metavar="WHEN", help="Only files modified after WHEN.")
    filtering.add_argument("--older", type=parse_when, default=None, metavar="WHEN", help="Only files modified before WHEN.")

    metadata = parser.add_argument_group("metadata")
    metadata.add_argument("-c", "--comments", action="store_true", help="Show leading comments (default).")
    metadata.add_argument("--no-comments", action="store_true", help="Do not show comments.")
    metadata.add_argument("-t", "--types", action="store_true", help="Show type and function signatures.")
    metadata.add_argument("--todos", action="store_true", help="Show TODO/FIXME/HACK/XXX/BUG/NOTE markers.")
    metadata.add_argument("--todos-only", action="store_true", help="Show only files containing task markers.")
    metadata.add_argument("--imports", action="store_true", help="Show imports grouped by origin.")
    metadata.add_argument("-f", "--full-comment", action="store_true", help="Show every metadata line, not just the first.")
    metadata.add_argument("-s", "--size", action="store_true", help="Show file sizes.")

    output = parser.add_argument_group("output")
    output.add_argument("--format", choices=OUTPUT_FORMATS, default="tree", help="Output format.")
    output.add_argument("--stats", action="store_true", help="Print per-language statistics instead of the tree.")
    output.add_argument(
        "-w",
        "--wrap",
        type=_non_negative_int,
        default=DEFAULT_WRAP_WIDTH,
        metavar="N",
        help="Wrap metadata at N columns; 0 disables wrapping.",
    )
    output.add_argument("-p", "--prefix", default="", metavar="STR", help="Text placed before each metadata line.")
    output.add_argument("--color", choices=COLOR_MODES, default="auto", help="When to use ANSI colors.")
    output.add_argument(
        "--theme",
        default=None,
        help=f"Tree color theme ({', '.join(available_theme_names())}).",
    )
    output.add_argument(
        "-j",
        "--jobs",
        type=_non_negative_int,
        default=0,
        metavar="N",
        help="Extraction threads: 0 picks a default, 1 runs single-threaded.",
    )
    output.add_argument("-v", "--verbose", action="count", default=0, help="Log more to stderr; repeat for debug.")
    output.add_argument("--save-defaults", action="store_true", help="Persist jobs/wrap/color/theme/format/ignore/prefix and exit.")

    if defaults:
        parser.set_defaults(**dict(defaults))
    return parser


def build_walk_config(args: argparse.Namespace) -> WalkConfig:
    """Translate parsed arguments into walk settings."""
    if args.stats:
        # Stats output shows no metadata; only the TODO-only filter needs extraction.
        extract_comments = extract_types = extract_imports = False
        todos_only = extract_todos = args.todos_only
    else:
        extract_types = args.types
        extract_comments = not args.no_comments and (args.comments or not args.types)
        todos_only = args.todos_only
        extract_todos = args.todos or todos_only
        extract_imports = args.imports
    return WalkConfig(
        show_all=args.all,
        max_depth=args.level,
        dirs_only=args.dirs_only,
        ignore_patterns=tuple(args.ignore),
        newer_than=args.newer,
        older_than=args.older,
        parallel_workers=args.jobs,
        extract_comments=extract_comments,
        extract_types=extract_types,
        extract_todos=extract_todos,
        extract_imports=extract_imports,
        todos_only=todos_only,
        show_size=args.size,
    )


def load_path_filter(root: Path, mode: str, show_all: bool) -> PathFilter | None:
    """Build the git-based visibility filter, or ``None`` for no filtering."""
    if show_all:
        return None
    loader = load_git_tracked_filter if mode == "tracked" else load_gitignore_filter
    path_filter = loader(root)
    if path_filter is None:
        logger.warning("not a git repository, showing all files")
    return path_filter


def build_renderer(args: argparse.Namespace, argv: Sequence[str], out: TextIO) -> Renderer:
    use_color = args.format == "tree" and resolve_use_color(args.color, out)
    theme = resolve_theme(args.theme, no_color=not use_color)
    if args.stats:
        return StatsRenderer(out, as_json=args.format == "json", theme=theme)
    options = RenderOptions(
        theme=theme,
        full=args.full_comment or args.types,
        order=metadata_order_from_argv(argv),
        meta_prefix=args.prefix,
        wrap_width=args.wrap or None,
    )
    return make_renderer(args.format, options, out)


def _silence_stdout() -> None:
    """Point stdout at devnull so interpreter shutdown does not re-raise EPIPE."""
    try:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
    except (OSError, ValueError):
        pass


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, run one walk, and return the process exit code."""
    arguments = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser(load_defaults())
    args = parser.parse_args(arguments)
    configure_logging(args.verbose)

    if args.save_defaults:
        values = {
            "jobs": args.jobs,
            "wrap": args.wrap,
            "color": args.color,
            "theme": args.theme,
            "format": args.format,
            "ignore": list(args.ignore),
            "prefix": args.prefix,
        }
        if not save_defaults(values):
            logger.error("cannot write %s", user_config.CONFIG_PATH)
            return EXIT_FAILURE
        print(f"saved defaults to {user_config.CONFIG_PATH}")
        return EXIT_OK

    root = Path(args.path)
    config = build_walk_config(args)
    out = sys.stdout
    try:
        renderer = build_renderer(args, arguments, out)
        path_filter = load_path_filter(root, args.filter, config.show_all) if root.is_dir() else None
        walk_tree(root, config, renderer, path_filter)
    except RootNotWalkableError as exc:
        logger.error("cannot access '%s': %s", args.path, exc.strerror)
        return EXIT_FAILURE
    except BrokenPipeError:
        _silence_stdout()
        return EXIT_OK
    except OSError as exc:
        logger.error("cannot write output: %s", exc)
        return EXIT_FAILURE
    return EXIT_OK


__all__ = [
    "parse_when",
    "metadata_order_from_argv",
    "resolve_use_color",
    "configure_logging",
    "build_parser",
    "build_walk_config",
    "load_path_filter",
    "build_renderer",
    "main",
]
