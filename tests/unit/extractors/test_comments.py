"""Tests for leading-comment extraction."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from canopy.extractors.comments import extract_comment, sanitize_terminal_text


def _write(root: Path, name: str, text: str) -> Path:
    path = root / name
    path.write_text(text, encoding="utf-8")
    return path


class ExtractCommentTests(unittest.TestCase):
    def test_python_hash_comment_block(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = _write(Path(tmp), "mod.py", "# Parses config files.\n# Second line.\nimport os\n")

            self.assertEqual(extract_comment(path, 1_000_000), "Parses config files.\nSecond line.")

    def test_python_module_docstring(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = _write(Path(tmp), "mod.py", '"""HTTP client helpers."""\n\nimport json\n')

            self.assertEqual(extract_comment(path, 1_000_000), "HTTP client helpers.")

    def test_shebang_and_coding_cookie_are_skipped(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = _write(
                Path(tmp),
                "tool.py",
                "#!/usr/bin/env python3\n# -*- coding: utf-8 -*-\n# Command runner.\nmain()\n",
            )

            self.assertEqual(extract_comment(path, 1_000_000), "Command runner.")

    def test_rust_line_comments(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = _write(Path(tmp), "lib.rs", "// Core engine.\n// Handles IO.\nfn run() {}\n")

            self.assertEqual(extract_comment(path, 1_000_000), "Core engine.\nHandles IO.")

    def test_c_block_comment_strips_stars(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = _write(Path(tmp), "main.c", "/*\n * Entry point.\n * Reads stdin.\n */\nint main(void) { return 0; }\n")

            self.assertEqual(extract_comment(path, 1_000_000), "Entry point.\nReads stdin.")

    def test_comment_after_code_is_not_leading(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = _write(Path(tmp), "mod.py", "x = 1\n# later comment\n")

            self.assertIsNone(extract_comment(path, 1_000_000))

    def test_skipped_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            no_suffix = _write(root, "Makefile", "# build rules\n")
            big = _write(root, "big.py", "# header\n" + "x = 1\n" * 100)
            binary = root / "blob.py"
            binary.write_bytes(b"# header\n\x00\x01\x02")
            unknown = _write(root, "data.zzqq", "# header\n")

            self.assertIsNone(extract_comment(no_suffix, 1_000_000))
            self.assertIsNone(extract_comment(big, 32))
            self.assertIsNone(extract_comment(binary, 1_000_000))
            self.assertIsNone(extract_comment(unknown, 1_000_000))


class SanitizeTests(unittest.TestCase):
    def test_control_bytes_are_escaped(self) -> None:
        self.assertEqual(sanitize_terminal_text("a\x1b[31mb"), "a\\x1b[31mb")
        self.assertEqual(sanitize_terminal_text("tab\tnew\nline"), "tab\tnew\nline")


if __name__ == "__main__":
    unittest.main()
