"""Shared testing fixtures for the drill_quiz test suite."""

from .input import ScriptedInput, make_provider  # noqa: F401
from .questions import make_question, write_question_set  # noqa: F401
from .workspace import WorkspaceBuilder, build_tree  # noqa: F401

__all__ = [
    "ScriptedInput",
    "WorkspaceBuilder",
    "build_tree",
    "make_provider",
    "make_question",
    "write_question_set",
]
