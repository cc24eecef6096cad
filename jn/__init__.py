# -*- coding: utf-8 -*-
"""jn package.

Modules:
    header:    On-disk journal header codec.
    crypto:    AEAD helpers, key normalization and digests.
    journal:   Journal files (open, decrypt, edit, write).
    editor:    External editor invocation.
    workspace: Workspace directories and name validation.
    template:  Initial content for new journals.
    config:    JSON configuration.
    manifest:  Export manifest.
    export:    Incremental export to zip archives and object stores.
    logic:     Command logic composing the above.
    format:    Text rendering of command results.
    cli:       Command line entrypoint.
    ui:        Textual-based REPL.
"""

__version__ = "0.4.0"

__all__ = [
    "cli",
    "config",
    "crypto",
    "editor",
    "errors",
    "export",
    "format",
    "header",
    "journal",
    "logic",
    "manifest",
    "template",
    "ui",
    "workspace",
]
