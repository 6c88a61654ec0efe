"""Configuration loader for quiz sessions."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, MutableMapping, Optional, Sequence

from drill_quiz.core import config as core_config
from drill_quiz.core import workspace as workspace_mod
from drill_quiz.core.files import parse_extensions

CONFIG_FILENAME = "quiz.toml"
CONFIG_ENV = "DRILL_QUIZ_CONFIG"
ENV_PREFIX = "DRILL_QUIZ_"
LEDGER_FILENAME = "wrong_answers.txt"

_DEFAULT_QUESTIONS_DIR = "Questions"
_DEFAULT_EXTENSIONS: tuple[str, ...] = ("yml", "yaml")
_DEFAULT_LOG_LEVEL = "INFO"


class QuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizConfig:
    """Fully resolved configuration for a quiz run."""

    questions_dir: Path
    ledger_path: Path
    extensions: tuple[str, ...]
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """Command-line overrides applied on top of env/file options."""

    questions_dir: Optional[Path] = None
    ledger_path: Optional[Path] = None
    extensions: Optional[Sequence[str]] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    config: QuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
    cwd: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env
    base_dir = cwd or Path.cwd()

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise QuizConfigError(str(exc)) from exc

    requested = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )

    options = _default_table()
    loaded_path: Optional[Path] = None
    if requested.exists():
        loaded_path = requested
        try:
            core_config.merge_defaults(
                options, core_config.load_toml(requested)
            )
        except core_config.TomlConfigError as exc:
            raise QuizConfigError(str(exc)) from exc
    elif config_path is not None or _env_string(env_map, "CONFIG"):
        raise QuizConfigError(f"Config file not found: {requested}")

    questions_dir = _resolve_questions_dir(
        _pick_first(
            overrides.questions_dir,
            _env_path(env_map, "QUESTIONS_DIR"),
            _coerce_optional_path(
                options["paths"]["questions_dir"], "paths.questions_dir"
            ),
        ),
        base_dir=base_dir,
    )
    ledger_path = _resolve_ledger_path(
        _pick_first(
            overrides.ledger_path,
            _env_path(env_map, "LEDGER"),
            _coerce_optional_path(options["paths"]["ledger"], "paths.ledger"),
        ),
        base_dir=base_dir,
        layout=layout,
    )
    extensions = _normalize_extensions(
        _pick_first(
            overrides.extensions,
            _env_extensions(env_map),
            options["questions"]["extensions"],
        )
    )
    log_level = _resolve_log_level(
        _pick_first(
            overrides.log_level,
            _env_string(env_map, "LOG_LEVEL"),
            options["logging"]["level"],
        )
    )

    config = QuizConfig(
        questions_dir=questions_dir,
        ledger_path=ledger_path,
        extensions=extensions,
        log_level=log_level,
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _default_table() -> MutableMapping[str, MutableMapping[str, object]]:
    return {
        "paths": {
            "questions_dir": _DEFAULT_QUESTIONS_DIR,
            "ledger": "",
        },
        "questions": {"extensions": list(_DEFAULT_EXTENSIONS)},
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = _env_string(env_map, "CONFIG")
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _coerce_optional_path(value: object, key: str) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, str):
        raw = value.strip()
        return Path(raw) if raw else None
    raise QuizConfigError(f"{key} must be a string when provided.")


def _resolve_questions_dir(candidate: object, *, base_dir: Path) -> Path:
    path = candidate if isinstance(candidate, Path) else Path(
        _DEFAULT_QUESTIONS_DIR
    )
    path = path.expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()


def _resolve_ledger_path(
    candidate: object,
    *,
    base_dir: Path,
    layout: workspace_mod.WorkspaceLayout,
) -> Path:
    if not isinstance(candidate, Path):
        return layout.path_for("ledgers") / LEDGER_FILENAME
    path = candidate.expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()


def _normalize_extensions(value: object) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)) or not value:
        raise QuizConfigError(
            "questions.extensions must be a non-empty list of strings."
        )
    if not all(isinstance(item, str) and item.strip() for item in value):
        raise QuizConfigError("Extensions must be non-empty strings.")
    return tuple(sorted(parse_extensions(value)))


def _resolve_log_level(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuizConfigError("logging.level must be a non-empty string.")
    return value.strip().upper()


def _env_extensions(env_map: Mapping[str, str]) -> Optional[list[str]]:
    raw = _env_string(env_map, "EXTENSIONS")
    if raw is None:
        return None
    parts = [part for part in raw.replace(",", " ").split() if part]
    return parts or None


def _env_path(env_map: Mapping[str, str], key: str) -> Optional[Path]:
    raw = _env_string(env_map, key)
    if raw is None:
        return None
    return Path(raw).expanduser()


def _env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
