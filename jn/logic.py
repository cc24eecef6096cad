# -*- coding: utf-8 -*-
"""Application logic that composes workspaces, journals and export.

This module provides the public API used by the CLI and the REPL. It does
not print anything. All side effects (journal files, editor, export targets)
are explicit and local, and every setting comes from the injected
:class:`~jn.config.Config`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
import logging
import re
import shutil

from .config import Config
from .editor import Editor
from .errors import JournalError
from .export import ArchiveTarget, ExportResult, SqliteObjectStore, StoreTarget, run_export
from .journal import Journal, TempEditor
from .template import render_template
from .workspace import (
    Workspace,
    find_entry,
    list_dirs,
    list_files,
    list_workspaces,
    valid_journal_name,
    valid_workspace_name,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------

@dataclass
class SearchMatch:
    workspace: str
    filename: str
    line_no: int
    line: str


@dataclass
class SearchResult:
    matches: List[SearchMatch] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------

class Handler:
    """Implements every jn command against one configuration."""

    def __init__(self, config: Config, editor: Optional[TempEditor] = None) -> None:
        self.config = config
        self.editor = editor or Editor()

    # -- paths ---------------------------------------------------------

    def workspace_dir(self, workspace: Optional[str] = None) -> Path:
        """Directory of *workspace*, or of the default workspace."""
        if workspace is None:
            return self.config.default_workspace_dir
        return self.config.workspaces_dir / valid_workspace_name(workspace)

    def list_workspaces_files(self) -> Dict[str, Workspace]:
        return list_workspaces(self.config.workspaces_dir)

    def _existing_journal(self, name: str, workspace: Optional[str]) -> Path:
        directory = self.workspace_dir(workspace)
        if not directory.is_dir():
            raise ValueError("journal doesn't exist (hint: jn create --help)")
        return find_entry(directory, name)

    # -- journals ------------------------------------------------------

    def open_journal(self, name: str, workspace: Optional[str] = None,
                     key: Optional[str] = None) -> Path:
        """Edit an existing journal; with *key* it is saved encrypted."""
        path = self._existing_journal(name, workspace)
        Journal.open(path, key).edit(self.editor)
        return path

    def print_journal(self, name: str, workspace: Optional[str] = None,
                      key: Optional[str] = None) -> bytes:
        path = self._existing_journal(name, workspace)
        return Journal.open(path, key).plaintext()

    def create_journal(self, name: str, workspace: Optional[str] = None,
                       key: Optional[str] = None) -> Path:
        """Create a journal from the template for its extension, then edit it."""
        directory = self.workspace_dir(workspace)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / valid_journal_name(name)
        if path.exists():
            raise ValueError(f"filepath {path} already exists (hint: jn open --help)")
        content = render_template(self.config.template_for(name))
        Journal.create(path, key, content.encode("utf-8"), self.editor)
        return path

    def list_journals(self, workspace: Optional[str] = None,
                      all_workspaces: bool = False) -> Dict[str, List[Path]]:
        """Non-empty workspaces mapped to their journal files."""
        if all_workspaces:
            dirs = list_dirs(self.config.workspaces_dir)
        else:
            dirs = [self.workspace_dir(workspace)]
        out: Dict[str, List[Path]] = {}
        for d in dirs:
            files = list_files(d)
            if files:
                out[d.name] = files
        return out

    def remove_journal(self, name: str, workspace: Optional[str] = None) -> Path:
        directory = self.workspace_dir(workspace)
        path = directory / valid_journal_name(name)
        if not path.is_file():
            raise ValueError(f"journal named '{name}' not found in workspace '{directory.name}'")
        path.unlink()
        logger.info("removed %s", path)
        return path

    def remove_workspace(self, workspace: str) -> Path:
        directory = self.workspace_dir(workspace)
        if not directory.is_dir():
            raise ValueError(f"workspace '{workspace}' not found")
        shutil.rmtree(directory)
        logger.info("removed workspace %s", directory)
        return directory

    def rename_journal(self, old: str, new: str, workspace: Optional[str] = None) -> Path:
        directory = self.workspace_dir(workspace)
        src = directory / valid_journal_name(old)
        dst = directory / valid_journal_name(new)
        if not src.is_file():
            raise ValueError(f"journal named '{old}' not found in workspace '{directory.name}'")
        if dst.exists():
            raise ValueError(f"journal named '{new}' already exists")
        src.rename(dst)
        return dst

    def rename_workspace(self, old: str, new: str) -> Path:
        src = self.workspace_dir(old)
        dst = self.workspace_dir(new)
        if not src.is_dir():
            raise ValueError(f"workspace '{old}' not found")
        if dst.exists():
            raise ValueError(f"workspace '{new}' already exists")
        src.rename(dst)
        return dst

    # -- search --------------------------------------------------------

    def search(self, pattern: str, case_insensitive: bool = False,
               workspace: Optional[str] = None, key: Optional[str] = None) -> SearchResult:
        """Match *pattern* against every line of every journal.

        Journals that cannot be read or decrypted (encrypted ones without a
        key included) are reported as skipped.
        """
        flags = re.IGNORECASE if case_insensitive else 0
        try:
            regex = re.compile(pattern, flags)
        except re.error as exc:
            raise ValueError(f"invalid pattern: {exc}") from exc

        if workspace is not None:
            name = valid_workspace_name(workspace)
            workspaces = {name: Workspace(name, list_files(self.workspace_dir(name)))}
        else:
            workspaces = self.list_workspaces_files()

        result = SearchResult()
        for ws_name in sorted(workspaces):
            for path in workspaces[ws_name].files:
                try:
                    text = Journal.open(path, key).plaintext().decode("utf-8", errors="replace")
                except JournalError as exc:
                    logger.debug("search skipped %s/%s: %s", ws_name, path.name, exc)
                    result.skipped.append(f"{ws_name}/{path.name}")
                    continue
                for num, line in enumerate(text.splitlines(), start=1):
                    if regex.search(line):
                        result.matches.append(SearchMatch(ws_name, path.name, num, line))
        return result

    # -- export --------------------------------------------------------

    async def export(self, target: str, directory: Optional[Path] = None,
                     key: Optional[str] = None, dryrun: bool = False) -> ExportResult:
        """Run an incremental export to the ``zip`` or ``store`` target."""
        workspaces = self.list_workspaces_files()
        target = target.strip()
        if target == "zip":
            archive = ArchiveTarget(Path(directory) if directory else Path.cwd(), key=key)
            result = await run_export(archive, workspaces, dryrun=dryrun)
            if archive.written:
                result.archive = archive.archive_path
            return result
        if target == "store":
            store = SqliteObjectStore(self.config.store_path)
            return await run_export(
                StoreTarget(store, self.config.store_workspaces), workspaces, dryrun=dryrun
            )
        raise ValueError(f"unknown export target: {target}")
