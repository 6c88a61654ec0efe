"""Question-set records and the YAML loader."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

__all__ = [
    "Question",
    "QuestionSet",
    "QuestionSetError",
    "load_question_set",
    "parse_question_set",
]


class QuestionSetError(RuntimeError):
    """Raised when a question-set file cannot be read or is malformed."""


@dataclass(frozen=True)
class Question:
    """A single multiple-choice question; ``correct_index`` is 1-based."""

    text: str
    options: tuple[str, ...]
    correct_index: int
    identity: Optional[str] = None


@dataclass(frozen=True)
class QuestionSet:
    description: str
    questions: tuple[Question, ...]
    path: Optional[Path] = None

    def __len__(self) -> int:
        return len(self.questions)


def load_question_set(path: Path) -> QuestionSet:
    """Read and parse the YAML question set at ``path``."""

    source = Path(path)
    try:
        with source.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except OSError as exc:
        raise QuestionSetError(f"Unable to read {source}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise QuestionSetError(f"Invalid YAML in {source}: {exc}") from exc
    try:
        return parse_question_set(data, path=source)
    except QuestionSetError as exc:
        raise QuestionSetError(f"{source}: {exc}") from exc


def parse_question_set(
    data: Any, *, path: Optional[Path] = None
) -> QuestionSet:
    """Build a :class:`QuestionSet` from already-decoded YAML data.

    Only the structure is checked: a mapping with a string ``description``
    and a ``questions`` list whose items carry ``question``, ``options``,
    ``answer`` and an optional ``hash``. Whether ``answer`` points at an
    existing option is not checked.
    """

    if not isinstance(data, Mapping):
        raise QuestionSetError("top level must be a mapping")
    description = data.get("description")
    if not isinstance(description, str):
        raise QuestionSetError("'description' must be a string")
    raw_questions = data.get("questions")
    if not isinstance(raw_questions, list):
        raise QuestionSetError("'questions' must be a list")
    questions = tuple(
        _parse_question(item, index)
        for index, item in enumerate(raw_questions, start=1)
    )
    return QuestionSet(description=description, questions=questions, path=path)


def _parse_question(item: Any, index: int) -> Question:
    if not isinstance(item, Mapping):
        raise QuestionSetError(f"question {index} must be a mapping")
    text = item.get("question")
    if not isinstance(text, str):
        raise QuestionSetError(f"question {index}: 'question' must be a string")
    options = item.get("options")
    if not isinstance(options, list) or not all(
        _is_scalar(option) for option in options
    ):
        raise QuestionSetError(
            f"question {index}: 'options' must be a list of plain values"
        )
    answer = item.get("answer")
    # bool is an int subclass; `answer: true` is not a usable index.
    if isinstance(answer, bool) or not isinstance(answer, int) or answer < 0:
        raise QuestionSetError(
            f"question {index}: 'answer' must be a non-negative integer"
        )
    return Question(
        text=text,
        options=tuple(_scalar_text(option) for option in options),
        correct_index=answer,
        identity=_parse_identity(item.get("hash"), index),
    )


def _parse_identity(raw: Any, index: int) -> Optional[str]:
    if raw is None:
        return None
    if not _is_scalar(raw):
        raise QuestionSetError(f"question {index}: 'hash' must be a string")
    identity = _scalar_text(raw)
    # The value is written verbatim as the first field of a ledger line.
    if (
        not identity
        or identity != identity.strip()
        or "," in identity
        or len(identity.splitlines()) > 1
    ):
        raise QuestionSetError(
            f"question {index}: 'hash' must be non-empty without commas, "
            "line breaks or surrounding whitespace"
        )
    return identity


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float, bool))


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
