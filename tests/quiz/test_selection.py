from __future__ import annotations

import random
from collections import Counter

import pytest

from fixtures import make_question

from drill_quiz.quiz.identity import question_identity
from drill_quiz.quiz.ledger import LedgerEntry, WrongAnswerLedger
from drill_quiz.quiz.selection import (
    SelectionPolicy,
    partition_questions,
    select_questions,
)


def _questions(count: int):
    return [make_question(f"Question {n}", ["a", "b", "c"]) for n in range(count)]


def _ledger_with_misses(questions, counts):
    ledger = WrongAnswerLedger()
    for question, count in zip(questions, counts):
        identity = question_identity(question)
        ledger.entries[identity] = LedgerEntry(identity, count, question.text)
    return ledger


@pytest.mark.parametrize("policy", list(SelectionPolicy))
def test_selection_is_a_permutation(policy: SelectionPolicy) -> None:
    questions = _questions(12)
    ledger = _ledger_with_misses(questions, [0, 3, 0, 1, 0, 0, 2, 0, 0, 0, 1, 0])

    for seed in range(20):
        ordered = select_questions(
            questions, ledger, policy, rng=random.Random(seed)
        )
        assert len(ordered) == len(questions)
        assert Counter(q.text for q in ordered) == Counter(
            q.text for q in questions
        )


def test_random_policy_ignores_ledger() -> None:
    questions = _questions(8)
    missed = _ledger_with_misses(questions, [5] * 8)

    with_ledger = select_questions(
        questions, missed, SelectionPolicy.RANDOM, rng=random.Random(7)
    )
    without = select_questions(
        questions,
        WrongAnswerLedger(),
        SelectionPolicy.RANDOM,
        rng=random.Random(7),
    )

    assert with_ledger == without


def test_random_policy_shuffles() -> None:
    questions = _questions(10)

    orders = {
        tuple(
            q.text
            for q in select_questions(
                questions,
                WrongAnswerLedger(),
                SelectionPolicy.RANDOM,
                rng=random.Random(seed),
            )
        )
        for seed in range(10)
    }

    assert len(orders) > 1


def test_weighted_policy_puts_missed_questions_first() -> None:
    questions = _questions(10)
    counts = [0, 2, 0, 0, 1, 0, 0, 4, 0, 0]
    ledger = _ledger_with_misses(questions, counts)
    missed = {q.text for q, c in zip(questions, counts) if c > 0}

    for seed in range(25):
        ordered = select_questions(
            questions,
            ledger,
            SelectionPolicy.MISS_WEIGHTED,
            rng=random.Random(seed),
        )
        head = {q.text for q in ordered[: len(missed)]}
        assert head == missed


def test_three_questions_two_missed_fill_first_two_slots() -> None:
    questions = _questions(3)
    ledger = _ledger_with_misses(questions, [1, 0, 2])
    seen_heads = set()

    for seed in range(30):
        ordered = select_questions(
            questions,
            ledger,
            SelectionPolicy.MISS_WEIGHTED,
            rng=random.Random(seed),
        )
        assert ordered[2].text == "Question 1"
        seen_heads.add(ordered[0].text)

    assert seen_heads == {"Question 0", "Question 2"}


def test_questions_without_entries_go_last() -> None:
    questions = _questions(4)
    ledger = _ledger_with_misses(questions[:1], [1])

    priority, other = partition_questions(questions, ledger.snapshot())

    assert priority == [questions[0]]
    assert other == questions[1:]


def test_precomputed_identity_is_used_for_lookup() -> None:
    tagged = make_question("Tagged", identity="stable-id")
    plain = make_question("Plain")
    ledger = WrongAnswerLedger({"stable-id": LedgerEntry("stable-id", 1, "x")})

    ordered = select_questions(
        [plain, tagged], ledger, SelectionPolicy.MISS_WEIGHTED
    )

    assert ordered[0] is tagged


def test_ledger_changes_after_selection_do_not_reorder() -> None:
    questions = _questions(5)
    ledger = _ledger_with_misses(questions, [0, 0, 0, 0, 1])

    ordered = select_questions(
        questions,
        ledger,
        SelectionPolicy.MISS_WEIGHTED,
        rng=random.Random(3),
    )
    before = list(ordered)
    ledger.record_result(question_identity(questions[0]), "x", correct=False)

    assert ordered == before
    assert ordered[0] is questions[4]


def test_empty_question_list() -> None:
    for policy in SelectionPolicy:
        assert select_questions([], WrongAnswerLedger(), policy) == []


def test_policy_from_value() -> None:
    assert SelectionPolicy.from_value(" Weighted ") is SelectionPolicy.MISS_WEIGHTED
    assert SelectionPolicy.from_value("random") is SelectionPolicy.RANDOM
    with pytest.raises(ValueError):
        SelectionPolicy.from_value("balanced")
