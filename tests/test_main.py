"""
Tests for the demo entry point.
"""
import json

import pytest

from saintgrid.main import build_parser, main, resolve_routine
from saintgrid.model.steps import Say


class TestResolveRoutine:

    def test_builtin_by_name(self):
        assert resolve_routine("celebration").name == "celebration"

    def test_greeting_with_name(self):
        routine = resolve_routine("greeting", "Ada")
        assert routine.steps[0] == Say("Hello, Ada!")

    def test_file_path(self, tmp_path, routines_dir):
        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"name": "custom", "steps": [{"type": "say", "content": "x"}]}))
        assert resolve_routine(str(path)).steps == [Say("x")]


class TestMain:

    def test_parser_defaults(self):
        args = build_parser().parse_args([])
        assert args.routine == "greeting"
        assert args.profile == "demo"
        assert args.debug is False

    def test_missing_routine_returns_error(self, qt_app, routines_dir):
        assert main(["does-not-exist"]) == 1

    def test_empty_routine_exits_without_loop(self, qt_app, tmp_path, routines_dir):
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"name": "empty", "steps": []}))
        assert main([str(path), "--profile", "development"]) == 0

    def test_log_file_option(self, qt_app, tmp_path, routines_dir, file_handler_cleanup):
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"name": "empty", "steps": []}))
        log_path = tmp_path / "pet.log"

        assert main([str(path), "--log-file", str(log_path)]) == 0
        assert "[APP] SaintGrid playing 'empty'" in log_path.read_text()
