"""Question ordering policies."""

from __future__ import annotations

import random
from enum import Enum
from typing import Mapping, Optional, Sequence

from .identity import question_identity
from .ledger import WrongAnswerLedger
from .questions import Question

__all__ = [
    "SelectionPolicy",
    "partition_questions",
    "select_questions",
]


class SelectionPolicy(Enum):
    """How the questions of a set are ordered for a session."""

    RANDOM = "random"
    MISS_WEIGHTED = "weighted"

    @classmethod
    def from_value(cls, value: str) -> "SelectionPolicy":
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        expected = ", ".join(member.value for member in cls)
        raise ValueError(
            f"Unknown selection policy '{value}'. Expected one of: {expected}."
        )


def partition_questions(
    questions: Sequence[Question], counts: Mapping[str, int]
) -> tuple[list[Question], list[Question]]:
    """Split ``questions`` into (missed, other) using ``counts`` by identity.

    Questions without an entry in ``counts`` count as never missed.
    """

    priority: list[Question] = []
    other: list[Question] = []
    for question in questions:
        if counts.get(question_identity(question), 0) > 0:
            priority.append(question)
        else:
            other.append(question)
    return priority, other


def select_questions(
    questions: Sequence[Question],
    ledger: WrongAnswerLedger,
    policy: SelectionPolicy,
    *,
    rng: Optional[random.Random] = None,
) -> list[Question]:
    """Return every question exactly once in the order they should be asked.

    - random: a uniform shuffle; the ledger is not consulted.
    - weighted: questions with outstanding misses come first, the rest
      after. Each group is shuffled on its own.
    Pass ``rng`` for reproducible orderings.
    """

    rnd = rng or random.Random()
    if policy is SelectionPolicy.RANDOM:
        shuffled = list(questions)
        rnd.shuffle(shuffled)
        return shuffled

    priority, other = partition_questions(questions, ledger.snapshot())
    rnd.shuffle(priority)
    rnd.shuffle(other)

    ordered: list[Question] = []
    while priority or other:
        if priority:
            ordered.append(priority.pop())
        else:
            ordered.append(other.pop())
    return ordered
