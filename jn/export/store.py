# -*- coding: utf-8 -*-
"""Object store export target.

The store keeps journals exactly as they are on disk (encrypted journals
stay encrypted) under ``"{workspace}/{filename}"`` keys, plus the manifest
under ``manifest.json``. Calls are sequential, one object at a time.
"""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Protocol
import logging
import sqlite3

import aiosqlite

from ..crypto import sha256_hex
from ..errors import IoFailure, ObjectNotFound, RemoteManifestUnavailable
from ..manifest import MANIFEST_NAME
from .base import ExportTarget

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    async def get(self, key: str) -> bytes: ...

    async def put(self, key: str, data: bytes) -> None: ...

    async def list(self) -> List[str]: ...


# ---------------------------------------------------------------------
# SQLite-backed store
# ---------------------------------------------------------------------

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS objects (
    key         TEXT PRIMARY KEY,
    body        BLOB NOT NULL,
    sha256      TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""


class SqliteObjectStore:
    """Object store in a single SQLite file, accessed through aiosqlite."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._ready = False

    async def init(self) -> None:
        """Create the table if it doesn't exist."""
        if self._ready:
            return
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.executescript(SCHEMA_SQL)
                await db.commit()
        except sqlite3.Error as exc:
            raise IoFailure(f"failed to open store {self.db_path}: {exc}") from exc
        self._ready = True

    async def get(self, key: str) -> bytes:
        await self.init()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                cur = await db.execute("SELECT body FROM objects WHERE key = ?", (key,))
                row = await cur.fetchone()
                await cur.close()
        except sqlite3.Error as exc:
            raise IoFailure(f"failed to get {key}: {exc}") from exc
        if row is None:
            raise ObjectNotFound(key)
        return bytes(row[0])

    async def put(self, key: str, data: bytes) -> None:
        await self.init()
        updated_at = datetime.now(timezone.utc).isoformat()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute(
                    """
                    INSERT INTO objects (key, body, sha256, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        body = excluded.body,
                        sha256 = excluded.sha256,
                        updated_at = excluded.updated_at
                    """,
                    (key, data, sha256_hex(data), updated_at),
                )
                await db.commit()
        except sqlite3.Error as exc:
            raise IoFailure(f"failed to put {key}: {exc}") from exc

    async def list(self) -> List[str]:
        await self.init()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                cur = await db.execute("SELECT key FROM objects ORDER BY key")
                rows = await cur.fetchall()
                await cur.close()
        except sqlite3.Error as exc:
            raise IoFailure(f"failed to list {self.db_path}: {exc}") from exc
        return [r[0] for r in rows]


# ---------------------------------------------------------------------
# Target
# ---------------------------------------------------------------------

class StoreTarget(ExportTarget):
    """Export raw journal bytes into an :class:`ObjectStore`."""

    name = "store"

    def __init__(self, store: ObjectStore, workspaces: Optional[Iterable[str]] = None) -> None:
        self.store = store
        self.workspaces = list(workspaces) if workspaces is not None else None

    async def fetch_manifest(self) -> bytes:
        keys = await self.store.list()
        if MANIFEST_NAME not in keys:
            raise RemoteManifestUnavailable(MANIFEST_NAME)
        try:
            return await self.store.get(MANIFEST_NAME)
        except ObjectNotFound as exc:
            raise RemoteManifestUnavailable(MANIFEST_NAME) from exc

    async def write_artifact(self, key: str, workspace: str, data: bytes) -> None:
        logger.debug("uploading %s (%d bytes)", key, len(data))
        await self.store.put(key, data)

    async def persist_manifest(self, data: bytes) -> None:
        await self.store.put(MANIFEST_NAME, data)
