# -*- coding: utf-8 -*-
"""Configuration for jn (JSON on disk).

The configuration is loaded once by the entrypoint and passed explicitly to
:class:`jn.logic.Handler` and the export targets. Nothing else reads the
environment or the config file.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import copy
import json
import os

from .workspace import valid_workspace_name

APP_NAME = "jn"

DEFAULT_CONFIG: Dict[str, Any] = {
    # Root of all workspaces; defaults to the platform data directory.
    "root": None,
    "default_workspace": "default",
    # Template per file extension, e.g. {"md": "# {{DATE}}\n"}
    "templates": {},
    "log_level": "WARNING",
    "export": {
        "store": {
            "path": None,
            "workspaces": None,
        },
    },
}


def config_dir() -> Path:
    """Return the config directory path for this platform."""
    if os.name == "nt":
        base = os.environ.get("APPDATA", os.path.expanduser("~\\AppData\\Roaming"))
        return Path(base) / APP_NAME
    base = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(base) / APP_NAME


def data_dir() -> Path:
    """Return the data directory path for this platform."""
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA", os.path.expanduser("~\\AppData\\Local"))
        return Path(base) / APP_NAME
    base = os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share"))
    return Path(base) / APP_NAME


def config_path() -> Path:
    return config_dir() / "config.json"


@dataclass
class Config:
    """Resolved settings."""

    root: Path
    default_workspace: str = "default"
    templates: Dict[str, str] = field(default_factory=dict)
    log_level: str = "WARNING"
    store_path: Optional[Path] = None
    store_workspaces: Optional[List[str]] = None

    def __post_init__(self) -> None:
        self.root = Path(self.root)
        self.default_workspace = valid_workspace_name(self.default_workspace)
        if self.store_path is None:
            self.store_path = self.root / "export.sqlite3"
        self.store_path = Path(self.store_path)

    @property
    def workspaces_dir(self) -> Path:
        return self.root / "workspaces"

    @property
    def default_workspace_dir(self) -> Path:
        return self.workspaces_dir / self.default_workspace

    def template_for(self, filename: str) -> Optional[str]:
        """Template registered for the extension of *filename*, if any."""
        suffix = Path(filename).suffix.lstrip(".")
        if not suffix:
            return None
        return self.templates.get(suffix)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        export = data.get("export") or {}
        if not isinstance(export, dict):
            raise ValueError("config key 'export' must be a JSON object")
        store = export.get("store") or {}
        if not isinstance(store, dict):
            raise ValueError("config key 'export.store' must be a JSON object")
        workspaces = store.get("workspaces")
        if workspaces is not None and not (
            isinstance(workspaces, list) and all(isinstance(w, str) for w in workspaces)
        ):
            raise ValueError("config key 'export.store.workspaces' must be a list of names")
        templates = data.get("templates") or {}
        if not isinstance(templates, dict):
            raise ValueError("config key 'templates' must be a JSON object")
        root = data.get("root")
        return cls(
            root=Path(root).expanduser() if root else data_dir(),
            default_workspace=data.get("default_workspace") or "default",
            templates=dict(templates),
            log_level=str(data.get("log_level") or "WARNING").upper(),
            store_path=Path(store["path"]).expanduser() if store.get("path") else None,
            store_workspaces=workspaces,
        )


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k] = _merge(merged[k], v)
        else:
            merged[k] = v
    return merged


def load_config(path: Optional[Path] = None) -> Config:
    """Load the merged configuration (defaults + file).

    A missing file is created with the defaults.
    """
    path = path or config_path()
    if not path.exists():
        save_config(DEFAULT_CONFIG, path)
        return Config.from_dict(DEFAULT_CONFIG)
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a JSON object")
    return Config.from_dict(_merge(DEFAULT_CONFIG, data))


def save_config(cfg: Dict[str, Any], path: Optional[Path] = None) -> None:
    """Persist *cfg* to the JSON config file."""
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(cfg, f, indent=2)
