# -*- coding: utf-8 -*-
"""Textual REPL for jn.

This file contains ONLY the UI. Every line typed at the prompt is parsed with
the same argument parser as the command line and dispatched through
:func:`jn.cli.run_command`. Commands that open the external editor run with
the app suspended so the editor gets the terminal.
"""
from __future__ import annotations

from typing import IO, List, NoReturn, Optional
import argparse
import shlex

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Input, RichLog

from .cli import EDITOR_COMMANDS, build_parser, run_command, validate_args
from .errors import JournalError
from .logic import Handler

BANNER = r"""
      _
     (_)_ __
     | | '_ \
     | | | | |
    _/ |_| |_|
   |__/

Welcome to the jn REPL. Type a command without the leading "jn",
e.g. "ls -a" or "search -i todo". Press ctrl+c or ctrl+d to exit.
"""

REPL_CSS = """
#output {
    height: 1fr;
    border: round $accent;
}
#prompt {
    dock: bottom;
}
"""


class ReplUsageError(Exception):
    """Parser output (usage errors and help) destined for the log."""


class ReplArgumentParser(argparse.ArgumentParser):
    """Argument parser that raises instead of printing and exiting."""

    def error(self, message: str) -> NoReturn:
        raise ReplUsageError(f"{self.format_usage()}error: {message}")

    def exit(self, status: int = 0, message: Optional[str] = None) -> NoReturn:
        raise ReplUsageError(message or "")

    def print_help(self, file: Optional[IO[str]] = None) -> None:
        raise ReplUsageError(self.format_help())

    def print_usage(self, file: Optional[IO[str]] = None) -> None:
        raise ReplUsageError(self.format_usage())


class JournalReplApp(App):
    """Prompt + scrolling output log."""

    TITLE = "jn"
    CSS = REPL_CSS
    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+d", "quit", "Quit"),
    ]

    def __init__(self, handler: Handler) -> None:
        super().__init__()
        self.handler = handler
        self.parser = build_parser(prog="", parser_class=ReplArgumentParser)

    def compose(self) -> ComposeResult:
        yield Header()
        yield RichLog(id="output", markup=True, wrap=True)
        yield Input(placeholder=">> ", id="prompt")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#output", RichLog).write(BANNER)
        self.query_one("#prompt", Input).focus()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        line = event.value.strip()
        event.input.value = ""
        if not line:
            return
        if line in {"exit", "quit"}:
            self.exit()
            return
        log = self.query_one("#output", RichLog)
        log.write(f"[dim]>> {escape(line)}[/dim]")
        for out in await self.execute(line):
            log.write(out)

    async def execute(self, line: str) -> List[str]:
        """Parse and run one REPL line; return the lines to log."""
        try:
            args = self.parser.parse_args(shlex.split(line))
            validate_args(self.parser, args)
        except ReplUsageError as exc:
            return [escape(str(exc))]
        except ValueError as exc:
            return [f"[red]error[/red]: {escape(str(exc))}"]

        if args.cmd == "repl":
            return ["already in the REPL"]

        try:
            if args.cmd in EDITOR_COMMANDS:
                with self.suspend():
                    return await run_command(self.handler, args)
            return await run_command(self.handler, args)
        except (JournalError, ValueError, OSError) as exc:
            return [f"[red]error[/red]: {escape(str(exc))}"]
