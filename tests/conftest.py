"""
Shared test fixtures for pytest.
"""

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from jn.config import Config
from jn.errors import ObjectNotFound
from jn.logic import Handler


class FakeEditor:
    """Stands in for the external editor: records input, returns canned output."""

    def __init__(self, result: Optional[bytes] = None):
        self.result = result
        self.calls: List[tuple] = []

    def edit_temp(self, filename: str, content: bytes) -> bytes:
        self.calls.append((filename, content))
        return content if self.result is None else self.result


class MemoryStore:
    """In-memory object store that counts puts."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.puts: List[str] = []

    async def get(self, key: str) -> bytes:
        if key not in self.objects:
            raise ObjectNotFound(key)
        return self.objects[key]

    async def put(self, key: str, data: bytes) -> None:
        self.puts.append(key)
        self.objects[key] = data

    async def list(self) -> List[str]:
        return sorted(self.objects)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(root=tmp_path / "data", templates={"md": "# {{DATE}}\n"})


@pytest.fixture
def editor() -> FakeEditor:
    return FakeEditor()


@pytest.fixture
def handler(config: Config, editor: FakeEditor) -> Handler:
    return Handler(config, editor=editor)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def workspaces_dir(config: Config) -> Path:
    path = config.workspaces_dir
    path.mkdir(parents=True)
    return path


@pytest.fixture
def make_journal(workspaces_dir: Path):
    """Write raw journal bytes into a workspace; returns the path."""

    def _make(workspace: str, name: str, data: bytes) -> Path:
        d = workspaces_dir / workspace
        d.mkdir(parents=True, exist_ok=True)
        path = d / name
        path.write_bytes(data)
        return path

    return _make
