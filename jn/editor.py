# -*- coding: utf-8 -*-
"""External text editor invocation."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional
import logging
import os
import shlex
import subprocess
import tempfile

from .errors import IoFailure

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "nano"


def _editor_command() -> str:
    return os.environ.get("EDITOR") or os.environ.get("VISUAL") or DEFAULT_EDITOR


class Editor:
    """Runs the user's editor synchronously on a file."""

    def __init__(self, command: Optional[str] = None) -> None:
        self.command = command or _editor_command()

    def _argv(self, path: Path) -> List[str]:
        return shlex.split(self.command) + [str(path)]

    def edit(self, path: Path) -> None:
        """Open *path* in the editor and block until it exits."""
        argv = self._argv(path)
        logger.debug("running editor: %s", argv)
        try:
            proc = subprocess.run(argv, check=False)
        except OSError as exc:
            raise IoFailure(f"error editing file {path}: {exc}") from exc
        if proc.returncode != 0:
            raise IoFailure(f"editor exited with status {proc.returncode}")

    def edit_temp(self, filename: str, content: bytes) -> bytes:
        """Let the user edit *content* in a temporary file named *filename*.

        The temporary directory is removed on every exit path, editor
        failure included.
        """
        with tempfile.TemporaryDirectory(prefix="jn-") as tmpdir:
            path = Path(tmpdir) / filename
            path.write_bytes(content)
            self.edit(path)
            return path.read_bytes()
