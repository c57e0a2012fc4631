"""Import/dependency extraction grouped into external, std, and local modules.

Import statements are located with Tree-sitter so that strings, docstrings,
and comments are never read as imports. The per-language line patterns then
classify the located statements, or the whole file when no grammar loads.
"""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import Callable
from pathlib import Path

from ..metadata import FileImports, LineStyle, MetadataBlock, MetadataLine
from . import signatures
from .source import read_source_file

logger = logging.getLogger(__name__)

_PY_IMPORT_RE = re.compile(r"^\s*import\s+([\w.]+(?:\s*,\s*[\w.]+)*)")
_PY_FROM_RE = re.compile(r"^\s*from\s+(\.*[\w.]*)\s+import\b")
_JS_FROM_RE = re.compile(r"""^\s*(?:import|export|\})[^'"]*?\bfrom\s*['"]([^'"]+)['"]""")
_JS_BARE_RE = re.compile(r"""^\s*import\s*['"]([^'"]+)['"]""")
_JS_REQUIRE_RE = re.compile(r"""\brequire\(\s*['"]([^'"]+)['"]\s*\)""")
_RUST_USE_RE = re.compile(r"^\s*(?:pub(?:\([^)]*\))?\s+)?use\s+(?:::)?([\w:]+)")
_RUST_EXTERN_RE = re.compile(r"^\s*extern\s+crate\s+(\w+)")
_GO_SINGLE_RE = re.compile(r'^\s*import\s+(?:[\w.]+\s+)?"([^"]+)"')
_GO_BLOCK_LINE_RE = re.compile(r'^\s*(?:[\w.]+\s+)?"([^"]+)"')

NODE_BUILTINS = frozenset(
    {
        "assert", "buffer", "child_process", "cluster", "crypto", "dgram", "dns",
        "events", "fs", "http", "http2", "https", "net", "os", "path", "perf_hooks",
        "process", "querystring", "readline", "stream", "string_decoder", "timers",
        "tls", "tty", "url", "util", "v8", "vm", "worker_threads", "zlib",
    }
)
RUST_STD_CRATES = frozenset({"std", "core", "alloc"})
RUST_LOCAL_ROOTS = frozenset({"crate", "self", "super"})

LANGUAGE_BY_SUFFIX: dict[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".rs": "rust",
    ".go": "go",
}
IMPORT_NODE_TYPES_BY_LANGUAGE: dict[str, frozenset[str]] = {
    "python": frozenset({"import_statement", "import_from_statement", "future_import_statement"}),
    "javascript": frozenset({"import_statement"}),
    "typescript": frozenset({"import_statement"}),
    "tsx": frozenset({"import_statement"}),
    "rust": frozenset({"use_declaration", "extern_crate_declaration"}),
    "go": frozenset({"import_declaration"}),
}
JS_LANGUAGES = frozenset({"javascript", "typescript", "tsx"})


class _Collector:
    """Order-preserving, de-duplicating accumulator for categorized names."""

    def __init__(self) -> None:
        self._groups: dict[str, list[str]] = {"external": [], "std": [], "internal": []}

    def add(self, group: str, name: str) -> None:
        if name and name not in self._groups[group]:
            self._groups[group].append(name)

    def build(self) -> FileImports | None:
        imports = FileImports(
            external=tuple(self._groups["external"]),
            std=tuple(self._groups["std"]),
            internal=tuple(self._groups["internal"]),
        )
        return None if imports.is_empty() else imports


def _python_imports(source: str) -> FileImports | None:
    stdlib = getattr(sys, "stdlib_module_names", frozenset())
    out = _Collector()

    def categorize(module: str) -> None:
        if module.startswith("."):
            out.add("internal", module.lstrip(".").split(".")[0] or ".")
            return
        top = module.split(".")[0]
        out.add("std" if top in stdlib or top == "__future__" else "external", top)

    for line in source.splitlines():
        match = _PY_FROM_RE.match(line)
        if match is not None:
            categorize(match.group(1))
            continue
        match = _PY_IMPORT_RE.match(line)
        if match is not None:
            for module in match.group(1).split(","):
                categorize(module.strip())
    return out.build()


def _js_imports(source: str) -> FileImports | None:
    out = _Collector()
    specifiers: list[str] = []
    for line in source.splitlines():
        for pattern in (_JS_FROM_RE, _JS_BARE_RE, _JS_REQUIRE_RE):
            specifiers.extend(match.group(1) for match in pattern.finditer(line))

    for specifier in specifiers:
        if specifier.startswith((".", "/")):
            stem = specifier.rstrip("/").rsplit("/", 1)[-1]
            out.add("internal", stem.split(".")[0] or specifier)
        elif specifier.startswith("node:"):
            out.add("std", specifier[len("node:") :])
        elif specifier.split("/")[0] in NODE_BUILTINS:
            out.add("std", specifier.split("/")[0])
        elif specifier.startswith("@"):
            out.add("external", "/".join(specifier.split("/")[:2]))
        else:
            out.add("external", specifier.split("/")[0])
    return out.build()


def _rust_imports(source: str) -> FileImports | None:
    out = _Collector()
    for line in source.splitlines():
        match = _RUST_EXTERN_RE.match(line)
        if match is not None:
            out.add("external", match.group(1))
            continue
        match = _RUST_USE_RE.match(line)
        if match is None:
            continue
        segments = [segment for segment in match.group(1).split("::") if segment]
        if not segments:
            continue
        root = segments[0]
        child = segments[1] if len(segments) > 1 else root
        if root in RUST_STD_CRATES:
            out.add("std", child)
        elif root in RUST_LOCAL_ROOTS:
            out.add("internal", child)
        else:
            out.add("external", root)
    return out.build()


def _go_imports(source: str) -> FileImports | None:
    out = _Collector()
    in_block = False
    for line in source.splitlines():
        stripped = line.strip()
        if in_block:
            if stripped.startswith(")"):
                in_block = False
                continue
            match = _GO_BLOCK_LINE_RE.match(line)
        elif stripped.startswith("import ("):
            in_block = True
            continue
        else:
            match = _GO_SINGLE_RE.match(line)
        if match is None:
            continue
        package = match.group(1)
        first = package.split("/")[0]
        out.add("external" if "." in first else "std", package)
    return out.build()


_PARSERS_BY_SUFFIX: dict[str, Callable[[str], FileImports | None]] = {
    ".py": _python_imports,
    ".pyi": _python_imports,
    ".js": _js_imports,
    ".jsx": _js_imports,
    ".mjs": _js_imports,
    ".cjs": _js_imports,
    ".ts": _js_imports,
    ".tsx": _js_imports,
    ".mts": _js_imports,
    ".cts": _js_imports,
    ".rs": _rust_imports,
    ".go": _go_imports,
}


def _node_text(source_bytes: bytes, node) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _is_js_import_node(source_bytes: bytes, node) -> bool:
    if node.type == "export_statement":
        return node.child_by_field_name("source") is not None
    if node.type == "call_expression":
        function = node.child_by_field_name("function")
        return function is not None and _node_text(source_bytes, function) == "require"
    return False


def _import_statements(source: str, language_name: str, parser) -> list[str]:
    """Return the text of each import statement in document order."""
    source_bytes = source.encode("utf-8", errors="replace")
    tree = parser.parse(source_bytes)
    node_types = IMPORT_NODE_TYPES_BY_LANGUAGE[language_name]
    check_js = language_name in JS_LANGUAGES
    statements: list[str] = []

    def walk(node) -> None:
        if node.type in node_types or (check_js and _is_js_import_node(source_bytes, node)):
            text = _node_text(source_bytes, node)
            # Go import blocks are parsed line by line.
            statements.append(text if language_name == "go" else " ".join(text.split()))
            return
        for child in node.named_children:
            walk(child)

    walk(tree.root_node)
    return statements


def _import_source(source: str, suffix: str) -> str:
    language_name = LANGUAGE_BY_SUFFIX[suffix]
    parser = signatures.load_parser(language_name)
    if parser is None:
        return source
    try:
        statements = _import_statements(source, language_name, parser)
    except Exception as exc:
        logger.debug("tree-sitter import scan failed for %s: %s", language_name, exc)
        return source
    return "\n".join(statements)


def imports_from_source(source: str, suffix: str) -> FileImports | None:
    """Return the imports of ``source`` grouped by origin, or ``None``.

    Only statements found by the Tree-sitter grammar for ``suffix`` are
    classified. The line patterns scan the whole file when no grammar
    loads or parsing raises.
    """
    suffix = suffix.lower()
    parser = _PARSERS_BY_SUFFIX.get(suffix)
    if parser is None:
        return None
    return parser(_import_source(source, suffix))


def extract_imports(path: Path, max_file_bytes: int) -> FileImports | None:
    if path.suffix.lower() not in _PARSERS_BY_SUFFIX:
        return None
    source = read_source_file(path, max_file_bytes)
    if source is None:
        return None
    return imports_from_source(source, path.suffix)


def import_block(path: Path, max_file_bytes: int) -> MetadataBlock | None:
    imports = extract_imports(path, max_file_bytes)
    if imports is None:
        return None
    line = MetadataLine(f"imports: {imports.summary()}", LineStyle.IMPORT)
    return MetadataBlock(import_lines=(line,), imports=imports)


__all__ = ["imports_from_source", "extract_imports", "import_block"]
