from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Ensure src/ is importable without an editable install
ROOT = TESTS_DIR.parent
for extra in (ROOT, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import ScriptedInput, WorkspaceBuilder  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Iterator[None]:
    """Keep tests away from the user's workspace and DRILL_QUIZ_* settings."""

    for key in list(os.environ):
        if key.startswith("DRILL_QUIZ_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("DRILL_QUIZ_DATA_HOME", str(tmp_path / "data-home"))
    yield


@pytest.fixture(autouse=True)
def _reset_quiz_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("drill_quiz.quiz")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def scripted_input() -> type[ScriptedInput]:
    return ScriptedInput
