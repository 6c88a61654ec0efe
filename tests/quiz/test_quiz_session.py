from __future__ import annotations

from pathlib import Path

import pytest
from rich.console import Console

from fixtures import ScriptedInput, make_provider, make_question

from drill_quiz.quiz import ledger as ledger_mod
from drill_quiz.quiz.identity import question_identity
from drill_quiz.quiz.ledger import LedgerError, WrongAnswerLedger, load_ledger
from drill_quiz.quiz.session import (
    QuizSessionResult,
    QuizSessionState,
    parse_answer,
    run_quiz_session,
)


def _console() -> Console:
    return Console(record=True, width=100, force_terminal=True)


@pytest.fixture
def questions():
    return [
        make_question("Capital of France?", ["Paris", "Rome", "Oslo"], 1),
        make_question("2 + 2?", ["3", "4"], 2),
    ]


def test_parse_answer_variants() -> None:
    assert parse_answer("2") == 2
    assert parse_answer("  3 \n") == 3
    assert parse_answer("+4") == 4
    assert parse_answer("0") == 0
    assert parse_answer("abc") is None
    assert parse_answer("-1") is None
    assert parse_answer("1.5") is None
    assert parse_answer("") is None
    assert parse_answer(None) is None
    assert parse_answer("٣") is None


def test_session_scores_and_persists(tmp_path: Path, questions) -> None:
    console = _console()
    ledger_path = tmp_path / "ledger.txt"
    ledger = WrongAnswerLedger()

    result = run_quiz_session(
        questions, ledger, ledger_path, console, make_provider(["1", "1"])
    )

    assert isinstance(result, QuizSessionResult)
    assert result.exit_action == "completed"
    assert (result.score, result.total) == (1, 2)
    assert [r.is_correct for r in result.responses] == [True, False]
    missed_id = question_identity(questions[1])
    assert load_ledger(ledger_path).snapshot() == {missed_id: 1}
    output = console.export_text()
    assert "Correct!" in output
    assert "The correct answer was option 2" in output
    assert "Final score: 1/2" in output


def test_session_numbers_options_from_one(tmp_path: Path, questions) -> None:
    console = _console()

    run_quiz_session(
        questions[:1],
        WrongAnswerLedger(),
        tmp_path / "l.txt",
        console,
        make_provider(["1"]),
    )

    output = console.export_text()
    assert "1. " in output and "Paris" in output
    assert "3. " in output and "Oslo" in output
    assert "Question 1 / 1" in output


def test_invalid_input_reprompts_same_question(
    tmp_path: Path, questions
) -> None:
    console = _console()
    ledger_path = tmp_path / "ledger.txt"
    provider = ScriptedInput(["abc", "", "1", "2"])

    result = run_quiz_session(
        questions, WrongAnswerLedger(), ledger_path, console, provider
    )

    assert provider.calls == 4
    assert result.score == 2
    assert [r.text for r in result.responses] == [
        "Capital of France?",
        "2 + 2?",
    ]
    output = console.export_text()
    assert output.count("Invalid input") == 2
    assert output.count("Question 1 / 2") == 3


def test_invalid_input_leaves_ledger_and_score_untouched(
    tmp_path: Path, questions
) -> None:
    ledger_path = tmp_path / "ledger.txt"
    ledger = WrongAnswerLedger()

    result = run_quiz_session(
        questions, ledger, ledger_path, _console(), ScriptedInput(["abc"])
    )

    assert result.score == 0
    assert result.responses == []
    assert len(ledger) == 0
    assert not ledger_path.exists()


def test_out_of_range_choice_counts_as_wrong(
    tmp_path: Path, questions
) -> None:
    ledger = WrongAnswerLedger()

    result = run_quiz_session(
        questions[:1],
        ledger,
        tmp_path / "ledger.txt",
        _console(),
        make_provider(["99"]),
    )

    assert result.score == 0
    assert ledger.miss_count(question_identity(questions[0])) == 1


def test_ledger_written_after_every_answer(
    tmp_path: Path, questions, monkeypatch: pytest.MonkeyPatch
) -> None:
    ledger_path = tmp_path / "ledger.txt"
    seen: list[str] = []
    real_save = ledger_mod.save_ledger

    def _spy(ledger, path):
        real_save(ledger, path)
        seen.append(Path(path).read_text(encoding="utf-8"))

    monkeypatch.setattr("drill_quiz.quiz.session.save_ledger", _spy)

    run_quiz_session(
        questions,
        WrongAnswerLedger(),
        ledger_path,
        _console(),
        make_provider(["2", "1"]),
    )

    assert len(seen) == 2
    assert seen[0].count("\n") == 1
    assert seen[1].count("\n") == 2


def test_correct_answer_pays_down_existing_misses(
    tmp_path: Path, questions
) -> None:
    ledger_path = tmp_path / "ledger.txt"
    ledger = WrongAnswerLedger()
    identity = question_identity(questions[0])
    for _ in range(2):
        ledger.record_result(identity, questions[0].text, correct=False)

    result = run_quiz_session(
        questions[:1], ledger, ledger_path, _console(), make_provider(["1"])
    )

    assert result.responses[0].miss_count == 1
    assert load_ledger(ledger_path).snapshot() == {identity: 1}


def test_interrupted_session_keeps_scored_answers(
    tmp_path: Path, questions
) -> None:
    console = _console()
    ledger_path = tmp_path / "ledger.txt"

    result = run_quiz_session(
        questions,
        WrongAnswerLedger(),
        ledger_path,
        console,
        ScriptedInput(["2"]),
    )

    assert result.exit_action == "interrupted"
    assert result.answered == 1
    assert (result.score, result.total) == (0, 2)
    assert len(load_ledger(ledger_path)) == 1
    output = console.export_text()
    assert "Session interrupted" in output
    assert "Final score: 0/2" in output


def test_keyboard_interrupt_ends_session(tmp_path: Path, questions) -> None:
    def _interrupt() -> str:
        raise KeyboardInterrupt

    result = run_quiz_session(
        questions,
        WrongAnswerLedger(),
        tmp_path / "ledger.txt",
        _console(),
        _interrupt,
    )

    assert result.exit_action == "interrupted"
    assert result.responses == []


def test_empty_question_list(tmp_path: Path) -> None:
    console = _console()

    result = run_quiz_session(
        [], WrongAnswerLedger(), tmp_path / "l.txt", console, lambda: "1"
    )

    assert result.exit_action == "empty"
    assert result.total == 0
    assert "Question set is empty" in console.export_text()


def test_ledger_write_failure_propagates(
    tmp_path: Path, questions, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _fail(ledger, path):
        raise LedgerError("disk full")

    monkeypatch.setattr("drill_quiz.quiz.session.save_ledger", _fail)

    with pytest.raises(LedgerError, match="disk full"):
        run_quiz_session(
            questions,
            WrongAnswerLedger(),
            tmp_path / "ledger.txt",
            _console(),
            make_provider(["1", "1"]),
        )


def test_summary_lists_missed_questions(tmp_path: Path, questions) -> None:
    console = _console()

    result = run_quiz_session(
        questions,
        WrongAnswerLedger(),
        tmp_path / "ledger.txt",
        console,
        make_provider(["3", "2"]),
    )

    assert result.accuracy == pytest.approx(0.5)
    output = console.export_text()
    assert "Missed this session" in output
    assert "Capital of France?" in output


def test_state_answer_advances_and_records(tmp_path: Path, questions) -> None:
    ledger = WrongAnswerLedger()
    state = QuizSessionState(list(questions), ledger, tmp_path / "ledger.txt")

    first = state.answer(1)
    second = state.answer(1)

    assert first.is_correct and not second.is_correct
    assert state.finished
    assert state.score == 1
    assert ledger.miss_count(question_identity(questions[1])) == 1
