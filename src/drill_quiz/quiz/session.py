"""Rich-powered quiz loop.

The loop asks each question in turn, re-prompts on non-numeric input, scores
numeric answers and writes the wrong-answer ledger to disk after every scored
answer. Console output and input are injected so the loop can be driven from
tests with a recorded :class:`rich.console.Console` and a scripted provider.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Literal, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .identity import question_identity
from .ledger import WrongAnswerLedger, save_ledger
from .questions import Question

InputProvider = Callable[[], str]
ExitAction = Literal["completed", "interrupted", "empty"]

__all__ = [
    "InputProvider",
    "QuestionResponse",
    "QuizSessionResult",
    "QuizSessionState",
    "parse_answer",
    "run_quiz_session",
]


@dataclass(frozen=True)
class QuestionResponse:
    """A scored answer to one question."""

    identity: str
    text: str
    selected: int
    correct_index: int
    is_correct: bool
    miss_count: int


@dataclass(frozen=True)
class QuizSessionResult:
    """Return value from ``run_quiz_session``."""

    responses: list[QuestionResponse]
    score: int
    total: int
    exit_action: ExitAction

    @property
    def answered(self) -> int:
        return len(self.responses)

    @property
    def accuracy(self) -> float:
        if not self.responses:
            return 0.0
        return self.score / len(self.responses)


@dataclass
class QuizSessionState:
    """Mutable state for one session: position, score and the ledger."""

    questions: list[Question]
    ledger: WrongAnswerLedger
    ledger_path: Path
    index: int = 0
    score: int = 0
    responses: list[QuestionResponse] = field(default_factory=list)

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current(self) -> Question:
        return self.questions[self.index]

    @property
    def finished(self) -> bool:
        return self.index >= self.total_questions

    def answer(self, choice: int) -> QuestionResponse:
        """Score ``choice`` for the current question and persist the ledger.

        Any number is accepted; one that does not match the correct option
        (including out-of-range numbers) is a miss.
        """

        question = self.current
        identity = question_identity(question)
        is_correct = choice == question.correct_index
        if is_correct:
            self.score += 1
        entry = self.ledger.record_result(
            identity, question.text, correct=is_correct
        )
        save_ledger(self.ledger, self.ledger_path)
        response = QuestionResponse(
            identity=identity,
            text=question.text,
            selected=choice,
            correct_index=question.correct_index,
            is_correct=is_correct,
            miss_count=entry.miss_count,
        )
        self.responses.append(response)
        self.index += 1
        return response


def parse_answer(raw: Optional[str]) -> Optional[int]:
    """Return the answer number typed by the user, or ``None`` if invalid.

    Accepts an unsigned decimal integer with an optional leading ``+``;
    surrounding whitespace is ignored.
    """

    if raw is None:
        return None
    text = raw.strip()
    if text.startswith("+"):
        text = text[1:]
    if not text or not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def run_quiz_session(
    questions: Sequence[Question],
    ledger: WrongAnswerLedger,
    ledger_path: Path,
    console: Console,
    input_provider: InputProvider,
    *,
    logger: Optional[logging.Logger] = None,
) -> QuizSessionResult:
    """Ask ``questions`` in order and return the scored result.

    Ledger write failures propagate as ``LedgerError``; answers scored before
    the failure are already on disk.
    """

    log = logger or logging.getLogger("drill_quiz.quiz")
    state = QuizSessionState(list(questions), ledger, Path(ledger_path))

    if not state.questions:
        console.print(
            Panel(
                "Question set is empty.",
                title="Quiz Session",
                border_style="yellow",
            )
        )
        return QuizSessionResult([], 0, 0, "empty")

    exit_action: ExitAction = "completed"
    while not state.finished:
        _render_question(console, state)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            log.info(
                "Quiz session interrupted",
                extra={"answered": state.index, "total": state.total_questions},
            )
            exit_action = "interrupted"
            break
        choice = parse_answer(raw)
        if choice is None:
            console.print(
                "[red]Invalid input. Please enter the number of an option.[/]"
            )
            continue
        response = state.answer(choice)
        log.info(
            "Answer scored",
            extra={
                "identity": response.identity,
                "correct": response.is_correct,
                "miss_count": response.miss_count,
            },
        )
        _render_feedback(console, response)

    result = QuizSessionResult(
        responses=list(state.responses),
        score=state.score,
        total=state.total_questions,
        exit_action=exit_action,
    )
    _render_summary(console, result)
    return result


def _render_question(console: Console, state: QuizSessionState) -> None:
    question = state.current
    header = Text.assemble(
        (f"Question {state.index + 1}", "bold cyan"),
        (f" / {state.total_questions}", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.text, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("No.", justify="right", style="cyan")
    table.add_column("Option")
    for number, option in enumerate(question.options, start=1):
        table.add_row(f"{number}.", Text(option))
    console.print(table)
    console.print(
        Text("Enter the number of your answer:", style="dim")
    )


def _render_feedback(console: Console, response: QuestionResponse) -> None:
    if response.is_correct:
        console.print("[bold green]Correct![/]")
        return
    console.print(
        "[bold red]Wrong.[/] The correct answer was option "
        f"[bold]{response.correct_index}[/]."
    )


def _render_summary(console: Console, result: QuizSessionResult) -> None:
    console.print()
    console.rule(Text("Quiz Summary", style="bold magenta"))

    overview = Table(
        show_header=False,
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Questions", str(result.total))
    overview.add_row("Answered", str(result.answered))
    overview.add_row("Correct", str(result.score))
    overview.add_row("Accuracy", f"{result.accuracy * 100:.1f}%")
    console.print(overview)

    missed = [response for response in result.responses if not response.is_correct]
    if missed:
        table = Table(title="Missed this session", box=box.SIMPLE, expand=True)
        table.add_column("Question", overflow="fold")
        table.add_column("Correct option", justify="right")
        table.add_column("Misses owed", justify="right")
        for response in missed:
            table.add_row(
                response.text,
                str(response.correct_index),
                str(response.miss_count),
            )
        console.print(table)

    console.print(
        Text.assemble(
            ("Final score: ", "bold"),
            (f"{result.score}/{result.total}", "bold cyan"),
        )
    )
