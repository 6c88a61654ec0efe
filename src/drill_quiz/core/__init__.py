"""Core shared helpers for drill-quiz commands."""

from __future__ import annotations

from .config import (
    ConfigTemplate,
    TomlConfigError,
    get_template,
    load_toml,
    merge_defaults,
    write_toml_template,
)
from .files import list_files, parse_extensions
from .logging import JsonLogFormatter, configure_logger
from .workspace import (
    DATA_HOME_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "TomlConfigError",
    "ConfigTemplate",
    "load_toml",
    "merge_defaults",
    "write_toml_template",
    "get_template",
    "parse_extensions",
    "list_files",
    "configure_logger",
    "JsonLogFormatter",
    "ensure_workspace",
    "WorkspaceLayout",
    "WorkspaceError",
    "DATA_HOME_ENV",
]
