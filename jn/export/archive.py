# -*- coding: utf-8 -*-
"""Zip archive export target.

Each run that includes at least one journal writes a new
``journals.YYYYmmdd-HHMMSS.zip`` holding the decrypted contents of the
changed journals. The manifest sits next to the archives as
``manifest.json``.
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import IO, Optional, Set
import logging
import zipfile

from ..errors import IoFailure, RemoteManifestUnavailable
from ..journal import Journal, write_atomic
from ..manifest import MANIFEST_NAME
from .base import ExportTarget

logger = logging.getLogger(__name__)


def archive_name(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"journals.{now.strftime('%Y%m%d-%H%M%S')}.zip"


class ArchiveWriter:
    """Thin sequential writer over :class:`zipfile.ZipFile` (stored, no compression)."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._zip = zipfile.ZipFile(path, mode="x", compression=zipfile.ZIP_STORED)
        self._entry: Optional[IO[bytes]] = None

    def add_directory(self, name: str) -> None:
        self._close_entry()
        self._zip.writestr(name.rstrip("/") + "/", b"")

    def start_file(self, name: str) -> None:
        self._close_entry()
        self._entry = self._zip.open(name, mode="w")

    def write(self, data: bytes) -> None:
        if self._entry is None:
            raise IoFailure("write() called before start_file()")
        self._entry.write(data)

    def finish(self) -> None:
        self._close_entry()
        self._zip.close()

    def abort(self) -> None:
        """Close everything and delete the partial archive."""
        try:
            self._close_entry()
            self._zip.close()
        except (OSError, ValueError) as exc:
            logger.warning("error closing partial archive %s: %s", self.path, exc)
        finally:
            if self._zip.fp is not None:
                self._zip.fp.close()
            self.path.unlink(missing_ok=True)

    def _close_entry(self) -> None:
        entry, self._entry = self._entry, None
        if entry is not None:
            entry.close()


class ArchiveTarget(ExportTarget):
    """Export decrypted journals into a zip archive in *directory*."""

    name = "zip"

    def __init__(
        self,
        directory: Path,
        key: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> None:
        self.directory = Path(directory)
        self.key = key
        self.archive_path = self.directory / archive_name(now)
        self.manifest_path = self.directory / MANIFEST_NAME
        self._writer: Optional[ArchiveWriter] = None
        self._dirs: Set[str] = set()

    async def fetch_manifest(self) -> bytes:
        try:
            return self.manifest_path.read_bytes()
        except FileNotFoundError as exc:
            raise RemoteManifestUnavailable(str(self.manifest_path)) from exc
        except OSError as exc:
            raise IoFailure(f"failed to read {self.manifest_path}: {exc}") from exc

    async def prepare(self, workspace: str, path: Path, raw: bytes) -> bytes:
        return Journal.from_bytes(path, self.key, raw).plaintext()

    def _open_writer(self) -> ArchiveWriter:
        if self._writer is None:
            self.directory.mkdir(parents=True, exist_ok=True)
            try:
                self._writer = ArchiveWriter(self.archive_path)
            except OSError as exc:
                raise IoFailure(f"failed to create {self.archive_path}: {exc}") from exc
            logger.info("writing archive %s", self.archive_path)
        return self._writer

    async def write_artifact(self, key: str, workspace: str, data: bytes) -> None:
        writer = self._open_writer()
        try:
            if workspace not in self._dirs:
                writer.add_directory(workspace)
                self._dirs.add(workspace)
            writer.start_file(key)
            writer.write(data)
        except OSError as exc:
            raise IoFailure(f"failed to write {key} to {self.archive_path}: {exc}") from exc

    async def finish(self) -> None:
        if self._writer is None:
            return
        try:
            self._writer.finish()
        except OSError as exc:
            await self.abort()
            raise IoFailure(f"failed to finish {self.archive_path}: {exc}") from exc

    async def abort(self) -> None:
        if self._writer is not None:
            logger.info("removing partial archive %s", self.archive_path)
            self._writer.abort()
            self._writer = None

    @property
    def written(self) -> bool:
        return self._writer is not None

    async def persist_manifest(self, data: bytes) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            write_atomic(self.manifest_path, data)
        except OSError as exc:
            raise IoFailure(f"failed to write {self.manifest_path}: {exc}") from exc
