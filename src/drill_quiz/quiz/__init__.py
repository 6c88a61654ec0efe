from .identity import question_identity
from .ledger import (
    LedgerEntry,
    LedgerError,
    WrongAnswerLedger,
    load_ledger,
    record_result,
    save_ledger,
)
from .menu import (
    MenuSelectionError,
    QuestionDiscoveryError,
    choose_policy,
    choose_question_file,
    discover_question_files,
)
from .questions import (
    Question,
    QuestionSet,
    QuestionSetError,
    load_question_set,
    parse_question_set,
)
from .selection import SelectionPolicy, partition_questions, select_questions
from .session import (
    QuestionResponse,
    QuizSessionResult,
    QuizSessionState,
    parse_answer,
    run_quiz_session,
)

__all__ = [
    "question_identity",
    "LedgerEntry",
    "LedgerError",
    "WrongAnswerLedger",
    "load_ledger",
    "record_result",
    "save_ledger",
    "MenuSelectionError",
    "QuestionDiscoveryError",
    "choose_policy",
    "choose_question_file",
    "discover_question_files",
    "Question",
    "QuestionSet",
    "QuestionSetError",
    "load_question_set",
    "parse_question_set",
    "SelectionPolicy",
    "partition_questions",
    "select_questions",
    "QuestionResponse",
    "QuizSessionResult",
    "QuizSessionState",
    "parse_answer",
    "run_quiz_session",
]
