"""Type, class, and function signature extraction.

Uses Tree-sitter grammars from ``tree-sitter-language-pack`` when one is
available for the file suffix, and per-language regex patterns otherwise.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path

from tree_sitter_language_pack import get_parser

from ..metadata import LineStyle, MetadataBlock, MetadataLine
from .source import read_source_file

logger = logging.getLogger(__name__)

LANGUAGE_BY_SUFFIX: dict[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".rb": "ruby",
    ".php": "php",
    ".swift": "swift",
    ".kt": "kotlin",
    ".scala": "scala",
}

FUNCTION_NODE_TYPES = {
    "function_definition",
    "function_declaration",
    "function_item",
    "function_signature_item",
    "method_definition",
    "method_declaration",
    "method",
}
TYPE_NODE_TYPES = {
    "class_definition",
    "class_declaration",
    "class_specifier",
    "struct_specifier",
    "struct_item",
    "enum_item",
    "trait_item",
    "type_item",
    "interface_declaration",
    "enum_declaration",
    "type_alias_declaration",
    "type_spec",
    "class",
}
IDENTIFIER_NODE_TYPES = {
    "identifier",
    "type_identifier",
    "property_identifier",
    "field_identifier",
    "constant",
}

SIGNATURE_MAX_LINES = 200

_FALLBACK_PATTERNS_BY_LANGUAGE: dict[str, tuple[re.Pattern[str], ...]] = {
    "python": (
        re.compile(r"^\s*class\s+(?P<name>[A-Za-z_][\w]*)"),
        re.compile(r"^\s*(?:async\s+)?def\s+(?P<name>[A-Za-z_][\w]*)"),
    ),
    "javascript": (
        re.compile(r"^\s*(?:export\s+)?(?:default\s+)?class\s+(?P<name>[A-Za-z_$][\w$]*)"),
        re.compile(r"^\s*(?:export\s+)?(?:async\s+)?function\s*\*?\s*(?P<name>[A-Za-z_$][\w$]*)"),
    ),
    "typescript": (
        re.compile(r"^\s*(?:export\s+)?(?:abstract\s+)?class\s+(?P<name>[A-Za-z_$][\w$]*)"),
        re.compile(r"^\s*(?:export\s+)?(?:interface|type|enum)\s+(?P<name>[A-Za-z_$][\w$]*)"),
        re.compile(r"^\s*(?:export\s+)?(?:async\s+)?function\s+(?P<name>[A-Za-z_$][\w$]*)"),
    ),
    "go": (
        re.compile(r"^\s*type\s+(?P<name>[A-Za-z_][\w]*)\s"),
        re.compile(r"^\s*func\s+(?:\([^)]*\)\s*)?(?P<name>[A-Za-z_][\w]*)\s*[\[(]"),
    ),
    "rust": (
        re.compile(
            r"^\s*(?:pub(?:\([^)]*\))?\s+)?(?:struct|enum|trait|type|union)\s+(?P<name>[A-Za-z_][\w]*)"
        ),
        re.compile(
            r"^\s*(?:pub(?:\([^)]*\))?\s+)?(?:const\s+)?(?:async\s+)?(?:unsafe\s+)?"
            r"(?:extern\s+\"[^\"]*\"\s+)?fn\s+(?P<name>[A-Za-z_][\w]*)"
        ),
    ),
    "java": (
        re.compile(
            r"^\s*(?:(?:public|private|protected|abstract|final|static)\s+)*"
            r"(?:class|interface|enum|record)\s+(?P<name>[A-Za-z_][\w]*)"
        ),
    ),
    "ruby": (
        re.compile(r"^\s*(?:class|module)\s+(?P<name>[A-Za-z_][\w:]*)"),
        re.compile(r"^\s*def\s+(?:self\.)?(?P<name>[A-Za-z_][\w!?=]*)"),
    ),
    "php": (
        re.compile(r"^\s*(?:final\s+|abstract\s+)?(?:class|interface|trait)\s+(?P<name>[A-Za-z_][\w]*)"),
        re.compile(r"^\s*(?:(?:public|private|protected|static|final|abstract)\s+)*function\s+(?P<name>[A-Za-z_][\w]*)"),
    ),
    "swift": (
        re.compile(
            r"^\s*(?:(?:public|private|internal|open|final)\s+)*(?:class|struct|enum|protocol)\s+(?P<name>[A-Za-z_][\w]*)"
        ),
        re.compile(r"^\s*(?:(?:public|private|internal|open|static)\s+)*func\s+(?P<name>[A-Za-z_][\w]*)"),
    ),
    "kotlin": (
        re.compile(
            r"^\s*(?:(?:public|private|internal|open|data|sealed|abstract)\s+)*(?:class|interface|object)\s+(?P<name>[A-Za-z_][\w]*)"
        ),
        re.compile(r"^\s*(?:(?:public|private|internal|open|suspend|override)\s+)*fun\s+(?P<name>[A-Za-z_][\w]*)"),
    ),
    "scala": (
        re.compile(r"^\s*(?:case\s+)?(?:class|trait|object)\s+(?P<name>[A-Za-z_][\w]*)"),
        re.compile(r"^\s*def\s+(?P<name>[A-Za-z_][\w]*)"),
    ),
}

_GENERIC_FALLBACK_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\s*(?:export\s+)?class\s+(?P<name>[A-Za-z_][\w$]*)"),
    re.compile(r"^\s*(?:pub\s+)?(?:struct|enum|trait)\s+(?P<name>[A-Za-z_][\w]*)\b"),
    re.compile(r"^\s*(?:async\s+)?def\s+(?P<name>[A-Za-z_][\w]*)"),
    re.compile(r"^\s*(?:export\s+)?(?:async\s+)?function\s+(?P<name>[A-Za-z_$][\w$]*)"),
    re.compile(r"^\s*(?:pub\s+)?(?:async\s+)?fn\s+(?P<name>[A-Za-z_][\w]*)\s*\("),
)


def _language_for_path(path: Path) -> str | None:
    return LANGUAGE_BY_SUFFIX.get(path.suffix.lower())


@lru_cache(maxsize=32)
def load_parser(language_name: str):
    """Return a Tree-sitter parser for ``language_name`` or ``None``."""
    try:
        return get_parser(language_name)
    except Exception as exc:
        logger.debug("no tree-sitter parser for %s: %s", language_name, exc)
        return None


def _normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def signature_text(line: str) -> str:
    """Trim a declaration line down to its signature."""
    text = _normalize_whitespace(line)
    while text.endswith(("{", ":")):
        text = text[:-1].rstrip()
    return text


def _indent_level(line: str) -> int:
    columns = 0
    for ch in line:
        if ch == " ":
            columns += 1
        elif ch == "\t":
            columns += 4
        else:
            break
    return columns // 4


def _node_text(source_bytes: bytes, node) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _name_from_node(source_bytes: bytes, node) -> str:
    for field_name in ("name", "declarator"):
        child = node.child_by_field_name(field_name)
        if child is None:
            continue
        while child.child_by_field_name("declarator") is not None:
            child = child.child_by_field_name("declarator")
        nested = child.child_by_field_name("name")
        if nested is not None:
            return _normalize_whitespace(_node_text(source_bytes, nested))
        return _normalize_whitespace(_node_text(source_bytes, child))

    for child in node.named_children:
        if child.type in IDENTIFIER_NODE_TYPES:
            return _normalize_whitespace(_node_text(source_bytes, child))
    return ""


def _signatures_from_tree(source: str, parser) -> list[MetadataLine]:
    source_bytes = source.encode("utf-8", errors="replace")
    source_lines = source.split("\n")
    tree = parser.parse(source_bytes)
    lines: list[MetadataLine] = []
    seen_rows: set[int] = set()

    def walk(node, depth: int) -> None:
        if len(lines) >= SIGNATURE_MAX_LINES:
            return

        if node.type in {"decorated_definition", "decorated_declaration"}:
            definition = node.child_by_field_name("definition")
            if definition is not None:
                walk(definition, depth)
                return

        is_function = node.type in FUNCTION_NODE_TYPES
        is_type = node.type in TYPE_NODE_TYPES
        if is_function or is_type:
            name = _name_from_node(source_bytes, node)
            row = int(node.start_point[0])
            if name and not name.startswith("_") and row not in seen_rows and row < len(source_lines):
                seen_rows.add(row)
                text = signature_text(source_lines[row])
                if text:
                    lines.append(
                        MetadataLine(text, LineStyle.TYPE_SIGNATURE, symbol_name=name, indent=depth)
                    )
            # Function bodies hold locals, not API surface.
            if is_function:
                return
            depth += 1

        for child in node.named_children:
            walk(child, depth)

    walk(tree.root_node, 0)
    return lines


def _signatures_from_patterns(source: str, language_name: str | None) -> list[MetadataLine]:
    patterns = _FALLBACK_PATTERNS_BY_LANGUAGE.get(language_name or "", _GENERIC_FALLBACK_PATTERNS)
    lines: list[MetadataLine] = []
    for line in source.splitlines():
        for pattern in patterns:
            match = pattern.match(line)
            if match is None:
                continue
            name = match.group("name")
            if name.startswith("_"):
                break
            text = signature_text(line)
            if text:
                lines.append(
                    MetadataLine(
                        text,
                        LineStyle.TYPE_SIGNATURE,
                        symbol_name=name,
                        indent=_indent_level(line),
                    )
                )
            break
        if len(lines) >= SIGNATURE_MAX_LINES:
            break
    return lines


def signatures_from_source(source: str, language_name: str | None) -> list[MetadataLine]:
    """Return signature lines for ``source``.

    Tree-sitter output is preferred; the regex patterns are used when no
    grammar loads, parsing raises, or the grammar finds nothing.
    """
    parser = load_parser(language_name) if language_name is not None else None
    if parser is not None:
        try:
            lines = _signatures_from_tree(source, parser)
        except Exception as exc:
            logger.debug("tree-sitter parse failed for %s: %s", language_name, exc)
        else:
            if lines:
                return lines
    return _signatures_from_patterns(source, language_name)


def extract_signatures(path: Path, max_file_bytes: int) -> list[MetadataLine] | None:
    language_name = _language_for_path(path)
    if language_name is None:
        return None
    source = read_source_file(path, max_file_bytes)
    if source is None:
        return None
    return signatures_from_source(source, language_name) or None


def type_block(path: Path, max_file_bytes: int) -> MetadataBlock | None:
    lines = extract_signatures(path, max_file_bytes)
    if not lines:
        return None
    return MetadataBlock(type_lines=tuple(lines))


__all__ = [
    "LANGUAGE_BY_SUFFIX",
    "load_parser",
    "signature_text",
    "signatures_from_source",
    "extract_signatures",
    "type_block",
]
