# -*- coding: utf-8 -*-
"""Command line interface for jn.

Every subcommand maps to one ``cmd_*`` coroutine taking the
:class:`~jn.logic.Handler` and the parsed arguments and returning the lines
to show (rich markup). The CLI prints them; the REPL writes them into its log.
"""
from __future__ import annotations

from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence, Type
import argparse
import asyncio
import logging

from rich.console import Console
from rich.markup import escape

from .config import load_config
from .errors import JournalError
from .export import TARGETS
from .format import format_export, format_search, format_workspace
from .logic import Handler
from .workspace import valid_workspace_name

logger = logging.getLogger(__name__)

Command = Callable[[Handler, argparse.Namespace], Awaitable[List[str]]]

#: Commands that hand the terminal to the external editor.
EDITOR_COMMANDS = frozenset({"open", "create"})


# ---------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------

async def cmd_open(handler: Handler, args: argparse.Namespace) -> List[str]:
    handler.open_journal(args.name, args.workspace, args.key)
    return []


async def cmd_print(handler: Handler, args: argparse.Namespace) -> List[str]:
    data = handler.print_journal(args.name, args.workspace, args.key)
    return [escape(data.decode("utf-8", errors="replace"))]


async def cmd_create(handler: Handler, args: argparse.Namespace) -> List[str]:
    path = handler.create_journal(args.name, args.workspace, args.key)
    return [f"Created {escape(str(path))}"]


async def cmd_list(handler: Handler, args: argparse.Namespace) -> List[str]:
    listing = handler.list_journals(args.workspace, args.all)
    return [format_workspace(name, files) for name, files in listing.items()]


async def cmd_remove(handler: Handler, args: argparse.Namespace) -> List[str]:
    if args.remove_workspace:
        path = handler.remove_workspace(args.name)
    else:
        path = handler.remove_journal(args.name, args.workspace)
    return [f"Removed {escape(str(path))}"]


async def cmd_rename(handler: Handler, args: argparse.Namespace) -> List[str]:
    if args.rename_workspace:
        path = handler.rename_workspace(args.old, args.new)
    else:
        path = handler.rename_journal(args.old, args.new, args.workspace)
    return [f"Renamed to {escape(str(path))}"]


async def cmd_search(handler: Handler, args: argparse.Namespace) -> List[str]:
    result = handler.search(args.pattern, args.case_insensitive, args.workspace, args.key)
    return [format_search(result)] if result.matches or result.skipped else []


async def cmd_export(handler: Handler, args: argparse.Namespace) -> List[str]:
    directory = Path(args.dir) if args.dir else None
    result = await handler.export(args.target, directory, args.key, args.dryrun)
    return [format_export(result)]


# ---------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------

def _workspace_name(value: str) -> str:
    try:
        return valid_workspace_name(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _workspace_arg(p: argparse.ArgumentParser, help_text: str) -> None:
    p.add_argument("-w", "--workspace", type=_workspace_name, help=help_text)


def _key_arg(p: argparse.ArgumentParser, help_text: str) -> None:
    p.add_argument("-k", "--key", help=help_text)


def build_parser(
    prog: str = "jn",
    parser_class: Type[argparse.ArgumentParser] = argparse.ArgumentParser,
) -> argparse.ArgumentParser:
    p = parser_class(prog=prog, description="Journals in workspaces, optionally encrypted")
    p.add_argument("--config", type=Path, help="Path to config.json")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_repl = sub.add_parser("repl", help="Start the REPL")
    p_repl.set_defaults(func=None)

    for name, aliases, help_text, func in (
        ("open", ["o"], "Open an existing journal in the editor", cmd_open),
        ("print", [], "Print a journal to stdout", cmd_print),
    ):
        p_open = sub.add_parser(name, aliases=aliases, help=help_text)
        p_open.add_argument("name", help="Journal name, or part of it (first match)")
        _workspace_arg(p_open, "Workspace to use, else the default workspace")
        _key_arg(p_open, "Key for decryption; an unencrypted journal gets encrypted on save")
        p_open.set_defaults(func=func, cmd=name)

    p_create = sub.add_parser("create", aliases=["c"], help="Create a new journal")
    p_create.add_argument("name", help="Name of the journal to create")
    _workspace_arg(p_create, "Workspace to use, else the default workspace")
    _key_arg(p_create, "Encrypt the journal using this key (8 to 32 characters)")
    p_create.set_defaults(func=cmd_create, cmd="create")

    p_list = sub.add_parser("list", aliases=["ls"], help="List journals")
    p_list.add_argument("-a", "--all", action="store_true", help="List journals of all workspaces")
    _workspace_arg(p_list, "Workspace to use, else the default workspace")
    p_list.set_defaults(func=cmd_list, cmd="list")

    p_rm = sub.add_parser("remove", aliases=["rm"], help="Remove a journal or workspace")
    p_rm.add_argument("name", help="Journal (or workspace) name")
    _workspace_arg(p_rm, "Workspace to use, else the default workspace")
    p_rm.add_argument("--remove-workspace", action="store_true", help="Remove NAME as a workspace")
    p_rm.set_defaults(func=cmd_remove, cmd="remove")

    p_mv = sub.add_parser("rename", aliases=["mv"], help="Rename a journal or workspace")
    p_mv.add_argument("old")
    p_mv.add_argument("new")
    _workspace_arg(p_mv, "Workspace to use, else the default workspace")
    p_mv.add_argument("--rename-workspace", action="store_true", help="Rename OLD as a workspace")
    p_mv.set_defaults(func=cmd_rename, cmd="rename")

    p_search = sub.add_parser("search", help="Search journals (all workspaces by default)")
    p_search.add_argument("pattern", help="Regular expression")
    p_search.add_argument("-i", "--case-insensitive", action="store_true")
    _workspace_arg(p_search, "Only search this workspace")
    _key_arg(p_search, "Key for decryption; encrypted journals are skipped without it")
    p_search.set_defaults(func=cmd_search, cmd="search")

    p_export = sub.add_parser("export", help="Export changed journals")
    p_export.add_argument("-t", "--target", required=True, choices=TARGETS)
    p_export.add_argument("-d", "--dir", help="Output directory for zip (default: cwd)")
    _key_arg(p_export, "Key for decryption (zip); encrypted journals are skipped without it")
    p_export.add_argument("--dryrun", action="store_true", help="Report only, write nothing")
    p_export.set_defaults(func=cmd_export, cmd="export")

    return p


def validate_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    if getattr(args, "remove_workspace", False) and args.workspace:
        parser.error("--remove-workspace conflicts with --workspace")
    if getattr(args, "rename_workspace", False) and args.workspace:
        parser.error("--rename-workspace conflicts with --workspace")


async def run_command(handler: Handler, args: argparse.Namespace) -> List[str]:
    command: Command = args.func
    return await command(handler, args)


# ---------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------

def configure_logging(level: str, verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    validate_args(parser, args)
    err = Console(stderr=True)

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        err.print(f"[red]error[/red]: {escape(str(exc))}")
        return 1
    configure_logging(config.log_level, args.verbose)
    handler = Handler(config)

    if args.cmd == "repl":
        from .ui import JournalReplApp

        asyncio.run(JournalReplApp(handler).run_async())
        return 0

    try:
        lines = asyncio.run(run_command(handler, args))
    except (JournalError, ValueError, OSError) as exc:
        logger.debug("command %s failed", args.cmd, exc_info=True)
        err.print(f"[red]error[/red]: {escape(str(exc))}")
        return 1

    out = Console(highlight=False)
    for line in lines:
        out.print(line, soft_wrap=True)
    return 0
