"""Tests for the sequential pruning walk in ``canopy.tree_walk.collector``."""

from __future__ import annotations

import os
import tempfile
import time
import unittest
from pathlib import Path

from canopy.path_filter import path_filter_from_files
from canopy.tree_walk.collector import collect
from canopy.tree_walk.types import RootNotWalkableError, WalkConfig


def _write(path: Path, text: str = "x\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _rows(records) -> list[tuple[str, bool, str, int]]:
    return [(record.name, record.is_last, record.prefix, record.depth) for record in records[1:]]


class CollectorOrderTests(unittest.TestCase):
    def test_records_follow_sorted_preorder_with_prefixes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "b.txt")
            _write(root / "a.txt")
            _write(root / "sub" / "c.txt")
            _write(root / "sub" / "d" / "e.txt")

            records = collect(root, WalkConfig())

            self.assertTrue(records[0].is_root)
            self.assertTrue(records[0].is_last)
            self.assertEqual(records[0].depth, 0)
            self.assertEqual(records[0].name, root.name)
            self.assertEqual(
                _rows(records),
                [
                    ("a.txt", False, "", 1),
                    ("b.txt", False, "", 1),
                    ("sub", True, "", 1),
                    ("c.txt", False, "    ", 2),
                    ("d", True, "    ", 2),
                    ("e.txt", True, "        ", 3),
                ],
            )

    def test_prefix_continues_under_non_last_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "a" / "inner.txt")
            _write(root / "z.txt")

            records = collect(root, WalkConfig())

            self.assertEqual(
                _rows(records),
                [("a", False, "", 1), ("inner.txt", True, "│   ", 2), ("z.txt", True, "", 1)],
            )

    def test_names_sort_by_bytes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            for name in ("a.txt", "B.txt", "_c.txt", "Z.txt"):
                _write(root / name)

            names = [record.name for record in collect(root, WalkConfig())[1:]]

            self.assertEqual(names, ["B.txt", "Z.txt", "_c.txt", "a.txt"])

    def test_directories_record_paths_under_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "pkg" / "mod.py")

            records = collect(root, WalkConfig())

            self.assertEqual(records[0].path, root)
            self.assertEqual(records[1].path, root / "pkg")
            self.assertTrue(records[1].is_dir)
            self.assertEqual(records[2].path, root / "pkg" / "mod.py")
            self.assertFalse(records[2].is_dir)


class CollectorPruningTests(unittest.TestCase):
    def test_git_directory_and_ignore_patterns_are_skipped(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".git" / "HEAD")
            _write(root / "node_modules" / "pkg.js")
            _write(root / "debug.log")
            _write(root / "main.py")

            config = WalkConfig(ignore_patterns=("node_modules", "*.log"))
            names = [record.name for record in collect(root, config)[1:]]

            self.assertEqual(names, ["main.py"])

    def test_dirs_only_lists_directories_even_when_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "a.txt")
            (root / "empty").mkdir()
            _write(root / "src" / "lib.rs")

            records = collect(root, WalkConfig(dirs_only=True))

            self.assertEqual(_rows(records), [("empty", False, "", 1), ("src", True, "", 1)])

    def test_max_depth_emits_directory_without_children(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "top.txt")
            _write(root / "sub" / "deep.txt")

            records = collect(root, WalkConfig(max_depth=1))
            root_only = collect(root, WalkConfig(max_depth=0))

            self.assertEqual([record.name for record in records[1:]], ["sub", "top.txt"])
            self.assertEqual(len(root_only), 1)
            self.assertTrue(root_only[0].is_root)

    def test_path_filter_hides_files_and_prunes_directories(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "a.rs")
            _write(root / "b.rs")
            _write(root / "sub" / "c.rs")
            _write(root / "hidden" / "x.rs")
            path_filter = path_filter_from_files(root, [root / "a.rs", root / "sub" / "c.rs"])

            filtered = collect(root, WalkConfig(), path_filter)
            everything = collect(root, WalkConfig(show_all=True), path_filter)

            self.assertEqual(
                _rows(filtered),
                [("a.rs", False, "", 1), ("sub", True, "", 1), ("c.rs", True, "    ", 2)],
            )
            self.assertEqual(
                [record.name for record in everything[1:]],
                ["a.rs", "b.rs", "hidden", "x.rs", "sub", "c.rs"],
            )

    def test_time_filter_applies_to_files_only(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            old = _write(root / "old.txt")
            _write(root / "new.txt")
            _write(root / "dir" / "old_inner.txt")
            stale = time.time() - 10 * 86400
            os.utime(old, (stale, stale))
            os.utime(root / "dir" / "old_inner.txt", (stale, stale))

            newer = collect(root, WalkConfig(newer_than=time.time() - 86400))
            older = collect(root, WalkConfig(older_than=time.time() - 86400))

            self.assertEqual([record.name for record in newer[1:]], ["dir", "new.txt"])
            self.assertEqual([record.name for record in older[1:]], ["dir", "old_inner.txt", "old.txt"])


@unittest.skipUnless(hasattr(os, "symlink"), "symlinks are required")
class CollectorSymlinkTests(unittest.TestCase):
    def test_symlinked_directory_cycle_is_never_followed(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "sub" / "file.txt")
            os.symlink(root, root / "sub" / "loop")
            os.symlink(root / "sub" / "file.txt", root / "alias.txt")

            names = [record.name for record in collect(root, WalkConfig())[1:]]

            self.assertEqual(names, ["sub", "file.txt"])

    def test_symlinked_root_is_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "real").mkdir()
            os.symlink(root / "real", root / "link")

            with self.assertRaises(RootNotWalkableError):
                collect(root / "link", WalkConfig())


class CollectorRootErrorTests(unittest.TestCase):
    def test_missing_root_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(RootNotWalkableError) as ctx:
                collect(Path(tmp) / "missing", WalkConfig())
            self.assertIsInstance(ctx.exception, OSError)

    def test_file_root_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = _write(Path(tmp) / "file.txt")
            with self.assertRaises(RootNotWalkableError):
                collect(target, WalkConfig())

    @unittest.skipIf(hasattr(os, "geteuid") and os.geteuid() == 0, "root bypasses permission checks")
    def test_unreadable_child_directory_is_excluded(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "locked" / "secret.txt")
            _write(root / "open.txt")
            os.chmod(root / "locked", 0)
            try:
                records = collect(root, WalkConfig())
            finally:
                os.chmod(root / "locked", 0o755)

            self.assertEqual(_rows(records), [("open.txt", True, "", 1)])


if __name__ == "__main__":
    unittest.main()
