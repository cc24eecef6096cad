"""
Tests for the command line entrypoint and the REPL argument parsing.
"""

import asyncio
import json

import pytest

from jn.cli import build_parser, main
from jn.journal import render
from jn.ui import JournalReplApp, ReplArgumentParser, ReplUsageError

KEY = "testing-encryption"


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"root": str(tmp_path / "data"), "default_workspace": "diary"}))
    return path


@pytest.fixture
def seed(tmp_path):
    def _seed(workspace, name, data):
        d = tmp_path / "data" / "workspaces" / workspace
        d.mkdir(parents=True, exist_ok=True)
        (d / name).write_bytes(data)
        return d / name

    return _seed


def run(config_file, *argv):
    return main(["--config", str(config_file), *argv])


class TestParser:

    @pytest.mark.parametrize("alias,cmd", [
        ("o", "open"), ("c", "create"), ("ls", "list"), ("rm", "remove"), ("mv", "rename"),
    ])
    def test_aliases(self, alias, cmd):
        argv = [alias, "x", "y"] if cmd == "rename" else [alias] if cmd == "list" else [alias, "x"]
        assert build_parser().parse_args(argv).cmd == cmd

    def test_export_target_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["export", "-t", "ftp"])

    def test_bad_workspace_name(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["ls", "-w", "a/b"])
        assert "invalid characters" in capsys.readouterr().err


class TestMain:

    def test_list(self, config_file, seed, capsys):
        seed("diary", "a.md", b"")
        seed("work", "b.md", b"")

        assert run(config_file, "ls", "-a") == 0

        out = capsys.readouterr().out
        assert "diary/" in out and "a.md" in out
        assert "work/" in out and "b.md" in out

    def test_print(self, config_file, seed, capsys):
        seed("diary", "2026-01-01.md", render(b"dear diary", KEY))
        assert run(config_file, "print", "01-01", "-k", KEY) == 0
        assert "dear diary" in capsys.readouterr().out

    def test_print_without_key_fails(self, config_file, seed, capsys):
        seed("diary", "s.md", render(b"secret", KEY))
        assert run(config_file, "print", "s.md") == 1
        captured = capsys.readouterr()
        assert "key required" in captured.err
        assert "secret" not in captured.out

    def test_search(self, config_file, seed, capsys):
        seed("diary", "a.md", b"one\nTwo\n")
        assert run(config_file, "search", "-i", "two") == 0
        out = capsys.readouterr().out
        assert "diary/a.md" in out
        assert "2: Two" in out

    def test_remove_workspace_conflicts_with_workspace(self, config_file):
        with pytest.raises(SystemExit):
            run(config_file, "rm", "ws", "--remove-workspace", "-w", "other")

    def test_export_dryrun(self, config_file, seed, tmp_path, capsys):
        seed("diary", "a.md", b"text")
        out_dir = tmp_path / "out"
        assert run(config_file, "export", "-t", "zip", "-d", str(out_dir), "--dryrun") == 0
        assert "diary/a.md" in capsys.readouterr().out
        assert not out_dir.exists()

    def test_malformed_config_section(self, tmp_path, capsys):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"root": str(tmp_path), "export": "s3"}))
        assert main(["--config", str(path), "ls"]) == 1
        assert "export" in capsys.readouterr().err

    def test_unreadable_config(self, tmp_path, capsys):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert main(["--config", str(path), "ls"]) == 1
        assert "error" in capsys.readouterr().err


class TestRepl:

    def test_parser_raises_instead_of_exiting(self):
        parser = build_parser(prog="", parser_class=ReplArgumentParser)
        with pytest.raises(ReplUsageError):
            parser.parse_args(["bogus"])
        with pytest.raises(ReplUsageError):
            parser.parse_args(["--help"])

    def test_execute(self, config_file, seed):
        from jn.config import load_config
        from jn.logic import Handler

        seed("diary", "a.md", b"")
        app = JournalReplApp(Handler(load_config(config_file)))

        lines = asyncio.run(app.execute("ls"))
        assert any("a.md" in line for line in lines)

        lines = asyncio.run(app.execute("print missing"))
        assert lines[0].startswith("[red]error[/red]")

        lines = asyncio.run(app.execute("export -t"))
        assert "error" in lines[0]
