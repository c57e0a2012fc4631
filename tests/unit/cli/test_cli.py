"""Tests for CLI parsing, option translation and exit codes."""

from __future__ import annotations

import argparse
import io
import json
import logging
import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest import mock

from canopy import cli
from canopy.metadata import MetadataOrder
from canopy.render.tree import TreeRenderer
from canopy.ui_theme import PLAIN_THEME


class _Tty(io.StringIO):
    def isatty(self) -> bool:
        return True


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp = Path(self._tmp.name).resolve()
        self.config_path = self.tmp / "config" / "config.json"
        patcher = mock.patch("canopy.config.CONFIG_PATH", self.config_path)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._reset_logger)

    @staticmethod
    def _reset_logger() -> None:
        logger = logging.getLogger("canopy")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.propagate = True
        logger.setLevel(logging.NOTSET)

    def run_main(self, args: list[str]) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with mock.patch("sys.stdout", stdout), mock.patch("sys.stderr", stderr):
            code = cli.main(args)
        return code, stdout.getvalue(), stderr.getvalue()

    def make_project(self) -> Path:
        root = self.tmp / "proj"
        _write(root / "app.py", "# Application entry.\n# TODO: wire config\nimport os\n")
        _write(root / "lib" / "util.py", '"""Shared helpers."""\n\ndef helper():\n    pass\n')
        _write(root / "lib" / "data.txt", "plain\n")
        return root


class MainTests(CliTestCase):
    def test_tree_output_with_comments(self) -> None:
        root = self.make_project()

        code, stdout, stderr = self.run_main([str(root), "-a", "--color", "never"])

        self.assertEqual(code, 0)
        self.assertEqual(stderr, "")
        self.assertEqual(
            stdout,
            "proj\n"
            "├── app.py  Application entry.\n"
            "└── lib\n"
            "    ├── data.txt\n"
            "    └── util.py  Shared helpers.\n"
            "\n1 directories, 3 files\n",
        )

    def test_todos_only_with_workers(self) -> None:
        root = self.make_project()

        code, stdout, _ = self.run_main([str(root), "-a", "--todos-only", "--no-comments", "-j", "4", "--color", "never"])

        self.assertEqual(code, 0)
        self.assertEqual(
            stdout,
            "proj\n├── app.py  TODO: wire config (line 2)\n└── lib\n\n1 directories, 1 files\n",
        )

    def test_json_format(self) -> None:
        root = self.make_project()

        code, stdout, _ = self.run_main([str(root), "-a", "--format", "json", "--todos"])
        document = json.loads(stdout)

        self.assertEqual(code, 0)
        self.assertEqual(document["name"], "proj")
        app = document["children"][0]
        self.assertEqual(app["path"], "app.py")
        self.assertEqual(app["todos"], [{"type": "TODO", "text": "wire config", "line": 2}])

    def test_stats_json(self) -> None:
        root = self.make_project()

        code, stdout, _ = self.run_main([str(root), "-a", "--stats", "--format", "json"])
        summary = json.loads(stdout)

        self.assertEqual(code, 0)
        self.assertEqual(summary["files"], 3)
        self.assertEqual(summary["directories"], 1)

    def test_stats_keep_todo_only_filter(self) -> None:
        root = self.make_project()

        code, stdout, _ = self.run_main([str(root), "-a", "--stats", "--todos-only", "--format", "json"])
        summary = json.loads(stdout)

        self.assertEqual(code, 0)
        self.assertEqual(summary["files"], 1)

    def test_missing_root_exits_one(self) -> None:
        missing = self.tmp / "missing"

        code, stdout, stderr = self.run_main([str(missing), "-a"])

        self.assertEqual(code, 1)
        self.assertEqual(stdout, "")
        self.assertIn(f"canopy: ERROR: cannot access '{missing}': No such file or directory", stderr)

    def test_usage_error_exits_two(self) -> None:
        with mock.patch("sys.stderr", io.StringIO()), self.assertRaises(SystemExit) as ctx:
            cli.main(["--level", "-3"])
        self.assertEqual(ctx.exception.code, 2)

    def test_broken_pipe_is_quiet(self) -> None:
        root = self.make_project()

        with mock.patch.object(cli, "walk_tree", side_effect=BrokenPipeError), mock.patch.object(
            cli, "_silence_stdout"
        ) as silence:
            code, _, stderr = self.run_main([str(root), "-a"])

        self.assertEqual(code, 0)
        self.assertEqual(stderr, "")
        silence.assert_called_once()

    def test_output_error_exits_one(self) -> None:
        root = self.make_project()

        with mock.patch.object(cli, "walk_tree", side_effect=OSError(28, "No space left on device")):
            code, _, stderr = self.run_main([str(root), "-a"])

        self.assertEqual(code, 1)
        self.assertIn("cannot write output", stderr)

    def test_save_defaults_then_reuse(self) -> None:
        code, stdout, _ = self.run_main(["--save-defaults", "-j", "3", "--format", "markdown", "-I", "*.txt"])

        self.assertEqual(code, 0)
        self.assertIn(str(self.config_path), stdout)
        saved = json.loads(self.config_path.read_text(encoding="utf-8"))
        self.assertEqual(saved["jobs"], 3)
        self.assertEqual(saved["ignore"], ["*.txt"])

        root = self.make_project()
        code, stdout, _ = self.run_main([str(root), "-a"])

        self.assertEqual(code, 0)
        self.assertIn("- `app.py` - Application entry.\n", stdout)
        self.assertNotIn("data.txt", stdout)


class ArgumentTranslationTests(CliTestCase):
    def parse(self, argv: list[str]) -> argparse.Namespace:
        return cli.build_parser().parse_args(argv)

    def test_extractor_defaults(self) -> None:
        default = cli.build_walk_config(self.parse([]))
        types_only = cli.build_walk_config(self.parse(["-t"]))
        both = cli.build_walk_config(self.parse(["-t", "-c"]))
        todos_only = cli.build_walk_config(self.parse(["--todos-only"]))
        stats = cli.build_walk_config(self.parse(["--stats", "--todos", "-t"]))

        self.assertTrue(default.extract_comments)
        self.assertFalse(default.extract_types)
        self.assertFalse(types_only.extract_comments)
        self.assertTrue(types_only.extract_types)
        self.assertTrue(both.extract_comments and both.extract_types)
        self.assertTrue(todos_only.extract_todos and todos_only.todos_only)
        self.assertFalse(stats.has_extractors)

        stats_todos_only = cli.build_walk_config(self.parse(["--stats", "--todos-only", "-t"]))
        self.assertTrue(stats_todos_only.todos_only and stats_todos_only.extract_todos)
        self.assertFalse(stats_todos_only.extract_types or stats_todos_only.extract_comments)

    def test_walk_options(self) -> None:
        config = cli.build_walk_config(self.parse(["-a", "-L", "2", "-d", "-I", "a", "-I", "b", "-s", "-j", "5"]))

        self.assertTrue(config.show_all)
        self.assertEqual(config.max_depth, 2)
        self.assertTrue(config.dirs_only)
        self.assertEqual(config.ignore_patterns, ("a", "b"))
        self.assertTrue(config.show_size)
        self.assertEqual(config.parallel_workers, 5)

    def test_renderer_options(self) -> None:
        argv = ["-t", "-w", "0", "-p", "> "]
        renderer = cli.build_renderer(self.parse(argv + ["--color", "never"]), argv, io.StringIO())

        self.assertIsInstance(renderer, TreeRenderer)
        self.assertTrue(renderer.options.full)
        self.assertIsNone(renderer.options.wrap_width)
        self.assertEqual(renderer.options.meta_prefix, "> ")
        self.assertEqual(renderer.options.order, MetadataOrder.TYPES_FIRST)
        self.assertIs(renderer.theme, PLAIN_THEME)

    def test_metadata_order_from_argv(self) -> None:
        self.assertEqual(cli.metadata_order_from_argv([]), MetadataOrder.COMMENTS_FIRST)
        self.assertEqual(cli.metadata_order_from_argv(["-t", "-c"]), MetadataOrder.TYPES_FIRST)
        self.assertEqual(cli.metadata_order_from_argv(["--comments", "-t"]), MetadataOrder.COMMENTS_FIRST)
        self.assertEqual(cli.metadata_order_from_argv(["-fct"]), MetadataOrder.COMMENTS_FIRST)
        self.assertEqual(cli.metadata_order_from_argv(["-tc"]), MetadataOrder.TYPES_FIRST)
        self.assertEqual(cli.metadata_order_from_argv(["-pt", "-c"]), MetadataOrder.COMMENTS_FIRST)
        self.assertEqual(cli.metadata_order_from_argv(["--", "-t"]), MetadataOrder.COMMENTS_FIRST)


class ParseWhenTests(unittest.TestCase):
    def test_durations_are_relative_to_now(self) -> None:
        now = datetime(2024, 1, 10, 12, 0, 0)

        self.assertEqual(cli.parse_when("2d", now), datetime(2024, 1, 8, 12, 0, 0).timestamp())
        self.assertEqual(cli.parse_when("15m", now), datetime(2024, 1, 10, 11, 45, 0).timestamp())
        self.assertEqual(cli.parse_when("1W", now), datetime(2024, 1, 3, 12, 0, 0).timestamp())

    def test_iso_dates(self) -> None:
        self.assertEqual(cli.parse_when("2024-03-01"), datetime(2024, 3, 1).timestamp())
        self.assertEqual(cli.parse_when("2024-03-01T08:30:00"), datetime(2024, 3, 1, 8, 30).timestamp())

    def test_invalid_value_raises(self) -> None:
        with self.assertRaises(argparse.ArgumentTypeError):
            cli.parse_when("yesterday")


class ColorResolutionTests(unittest.TestCase):
    def test_explicit_modes(self) -> None:
        self.assertTrue(cli.resolve_use_color("always", io.StringIO(), {}))
        self.assertFalse(cli.resolve_use_color("never", _Tty(), {}))

    def test_auto_mode_environment_and_tty(self) -> None:
        self.assertTrue(cli.resolve_use_color("auto", _Tty(), {}))
        self.assertFalse(cli.resolve_use_color("auto", io.StringIO(), {}))
        self.assertFalse(cli.resolve_use_color("auto", _Tty(), {"NO_COLOR": "1"}))
        self.assertTrue(cli.resolve_use_color("auto", io.StringIO(), {"FORCE_COLOR": "1"}))
        self.assertFalse(cli.resolve_use_color("auto", _Tty(), {"TERM": "dumb"}))


class LoggingTests(CliTestCase):
    def test_verbosity_levels(self) -> None:
        logger = logging.getLogger("canopy")

        cli.configure_logging(0)
        self.assertEqual(logger.level, logging.WARNING)
        cli.configure_logging(1)
        self.assertEqual(logger.level, logging.INFO)
        cli.configure_logging(2)
        self.assertEqual(logger.level, logging.DEBUG)
        self.assertEqual(len(logger.handlers), 1)
        self.assertFalse(logger.propagate)

    def test_missing_filter_logs_warning(self) -> None:
        with mock.patch.object(cli, "load_gitignore_filter", return_value=None), self.assertLogs(
            "canopy", level="WARNING"
        ) as logs:
            self.assertIsNone(cli.load_path_filter(self.tmp, "gitignore", False))
        self.assertIn("not a git repository, showing all files", logs.output[0])

    def test_show_all_skips_filter(self) -> None:
        with mock.patch.object(cli, "load_git_tracked_filter") as loader:
            self.assertIsNone(cli.load_path_filter(self.tmp, "tracked", True))
        loader.assert_not_called()


if __name__ == "__main__":
    unittest.main()
