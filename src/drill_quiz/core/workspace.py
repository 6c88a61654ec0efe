"""Per-user data directory holding quiz config, logs and ledgers.

The home is ``$DRILL_QUIZ_DATA_HOME`` when set, else ``~/.drill-quiz-data``.
Only the built-in default may be swapped for a temp-dir home when it turns
out to be unwritable; a home the user asked for either works or fails.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

DATA_HOME_ENV = "DRILL_QUIZ_DATA_HOME"
DEFAULT_DATA_HOME = Path.home() / ".drill-quiz-data"
SUBDIRECTORIES = ("config", "logs", "ledgers")


class WorkspaceError(RuntimeError):
    """Raised when the data directory cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    home: Path
    directories: Mapping[str, Path]
    created: Mapping[str, bool]

    def path_for(self, key: str) -> Path:
        try:
            return self.directories[key]
        except KeyError as exc:
            raise KeyError(f"Unknown workspace directory '{key}'.") from exc

    def items(self) -> tuple[tuple[str, Path], ...]:
        return tuple(self.directories.items())


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
) -> WorkspaceLayout:
    """Create the data home and its subdirectories, returning the layout."""

    env_map = os.environ if env is None else env
    home, explicit = _requested_home(env_map, path)

    candidates = [home]
    if not explicit and _temp_home() != home:
        candidates.append(_temp_home())

    failure: PermissionError | None = None
    for candidate in candidates:
        try:
            return _build_layout(candidate)
        except PermissionError as exc:
            failure = exc
    raise WorkspaceError(f"Unable to prepare workspace at {home}") from failure


def _requested_home(
    env_map: Mapping[str, str], path: Path | None
) -> tuple[Path, bool]:
    if path is not None:
        return path.expanduser().resolve(), True
    from_env = (env_map.get(DATA_HOME_ENV) or "").strip()
    if from_env:
        return Path(from_env).expanduser().resolve(), True
    return DEFAULT_DATA_HOME.resolve(), False


def _temp_home() -> Path:
    return Path(tempfile.gettempdir()) / "drill-quiz-data"


def _build_layout(home: Path) -> WorkspaceLayout:
    if home.exists() and not home.is_dir():
        raise WorkspaceError(f"Workspace path is not a directory: {home}")
    created = {"home": _make_private_dir(home)}
    directories: dict[str, Path] = {}
    for name in SUBDIRECTORIES:
        directories[name] = home / name
        created[name] = _make_private_dir(directories[name])
    return WorkspaceLayout(
        home=home,
        directories=MappingProxyType(directories),
        created=MappingProxyType(created),
    )


def _make_private_dir(path: Path) -> bool:
    """Create ``path`` owner-only; return False when it already existed."""

    if path.is_dir():
        return False
    try:
        path.mkdir(mode=0o700, parents=True)
    except FileExistsError as exc:
        raise WorkspaceError(f"Expected a directory at {path}") from exc
    return True
