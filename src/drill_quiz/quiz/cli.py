"""CLI entry point for interactive quiz sessions."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from drill_quiz.core import config as core_config
from drill_quiz.core import workspace as workspace_mod
from drill_quiz.core.logging import configure_logger
from drill_quiz.core.workspace import WorkspaceError

from .config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    LoadResult,
    QuizConfigError,
    load_config,
)
from .ledger import LedgerError, load_ledger
from .menu import (
    MenuSelectionError,
    QuestionDiscoveryError,
    choose_policy,
    choose_question_file,
    discover_question_files,
)
from .questions import QuestionSetError, load_question_set
from .selection import SelectionPolicy, select_questions
from .session import InputProvider, run_quiz_session

_FATAL_ERRORS = (
    QuestionDiscoveryError,
    QuestionSetError,
    MenuSelectionError,
    LedgerError,
)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help=(
            "Path to a TOML config file (defaults to the workspace config "
            "directory)."
        ),
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root used for config, logs and ledger.",
    )
    parser.add_argument(
        "--ledger",
        type=Path,
        help="Wrong-answer ledger file to read and update.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drill quiz",
        description=(
            "Run a multiple-choice quiz from a YAML question set, asking "
            "previously missed questions first on request."
        ),
        epilog=(
            "Subcommands: `drill quiz ledger show|clear` and "
            "`drill quiz config init`."
        ),
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--questions-dir",
        type=Path,
        help="Directory containing question-set files.",
    )
    parser.add_argument(
        "--extensions",
        nargs="+",
        help="Question-set file extensions to offer (e.g. yml yaml).",
    )
    parser.add_argument(
        "--mode",
        choices=[policy.value for policy in SelectionPolicy],
        help="Question order; skips the interactive mode prompt.",
    )
    parser.add_argument(
        "--log-level",
        help="Set the logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror debug logs to stderr.",
    )
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
    input_provider: Optional[InputProvider] = None,
) -> int:
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    console = console or Console()
    provider = input_provider or _console_input(console)

    if args_list[:1] == ["config"]:
        return _handle_config(args_list[1:])
    if args_list[:1] == ["ledger"]:
        return _handle_ledger(args_list[1:], console)

    parser = _build_parser()
    args = parser.parse_args(args_list)

    overrides = ConfigOverrides(
        questions_dir=args.questions_dir,
        ledger_path=args.ledger,
        extensions=args.extensions,
        log_level=args.log_level,
    )
    load_result = _load_or_exit(parser, args, overrides)
    config = load_result.config

    logger, log_path = configure_logger(
        "drill_quiz.quiz",
        log_dir=load_result.layout.path_for("logs"),
        level=config.log_level,
        verbose=args.verbose,
    )
    logger.debug(
        "quiz CLI invoked",
        extra={
            "questions_dir": config.questions_dir,
            "ledger": config.ledger_path,
            "log_file": log_path,
        },
    )

    try:
        files = discover_question_files(
            config.questions_dir, set(config.extensions)
        )
        chosen = choose_question_file(files, console, provider)
        question_set = load_question_set(chosen)
        if args.mode:
            policy = SelectionPolicy.from_value(args.mode)
        else:
            policy = choose_policy(console, provider)
        ledger = load_ledger(config.ledger_path)
        ordered = select_questions(question_set.questions, ledger, policy)
        logger.info(
            "Quiz session started",
            extra={
                "question_set": chosen,
                "policy": policy.value,
                "questions": len(ordered),
                "outstanding": len(ledger.outstanding()),
            },
        )
        result = run_quiz_session(
            ordered,
            ledger,
            config.ledger_path,
            console,
            provider,
            logger=logger,
        )
    except _FATAL_ERRORS as exc:
        logger.error(
            "Quiz aborted", extra={"error": str(exc)}, exc_info=exc
        )
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    except KeyboardInterrupt:
        # Only the menus can get here; the session loop handles its own.
        logger.info("Quiz cancelled before the session started")
        console.print("\n[bold yellow]Quiz cancelled.[/]")
        return 0

    logger.info(
        "Quiz session finished",
        extra={
            "score": result.score,
            "total": result.total,
            "exit_action": result.exit_action,
        },
    )
    return 0


def _console_input(console: Console) -> InputProvider:
    def _provider() -> str:
        return console.input("> ")

    return _provider


def _load_or_exit(
    parser: argparse.ArgumentParser,
    args: argparse.Namespace,
    overrides: Optional[ConfigOverrides] = None,
) -> LoadResult:
    try:
        return load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except QuizConfigError as exc:
        parser.error(str(exc))


def _handle_ledger(argv: Sequence[str], console: Console) -> int:
    parser = argparse.ArgumentParser(
        prog="drill quiz ledger",
        description="Inspect or reset the wrong-answer ledger.",
    )
    sub = parser.add_subparsers(dest="action", required=True)
    show = sub.add_parser("show", help="List questions with misses owed.")
    _add_common_arguments(show)
    clear = sub.add_parser("clear", help="Delete the ledger file.")
    _add_common_arguments(clear)
    args = parser.parse_args(argv)

    overrides = ConfigOverrides(ledger_path=args.ledger)
    ledger_path = _load_or_exit(parser, args, overrides).config.ledger_path

    if args.action == "clear":
        try:
            ledger_path.unlink(missing_ok=True)
        except OSError as exc:
            sys.stderr.write(f"Error: unable to remove {ledger_path}: {exc}\n")
            return 1
        console.print(f"Cleared ledger {ledger_path}")
        return 0

    try:
        ledger = load_ledger(ledger_path)
    except LedgerError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    pending = ledger.outstanding()
    if not pending:
        console.print(f"No outstanding misses in {ledger_path}")
        return 0
    table = Table(title=f"Ledger {ledger_path}", box=box.SIMPLE, expand=True)
    table.add_column("Misses", justify="right", style="bold red")
    table.add_column("Identity", style="dim", no_wrap=True)
    table.add_column("Question", overflow="fold")
    for entry in pending:
        table.add_row(
            str(entry.miss_count),
            entry.identity[:12],
            entry.last_question_text,
        )
    console.print(table)
    return 0


def _handle_config(argv: Sequence[str]) -> int:
    parser = argparse.ArgumentParser(
        prog="drill quiz config",
        description="Manage the quiz configuration file.",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    init_parser = sub.add_parser(
        "init", help=f"Write the default {CONFIG_FILENAME} template."
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Destination for the config TOML (defaults to the workspace "
            "config directory)."
        ),
    )
    init_parser.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root used when resolving the default config path.",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if a config already exists.",
    )
    args = parser.parse_args(argv)

    try:
        target = _resolve_config_target(args)
    except WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    try:
        written = core_config.get_template("quiz").write(
            target, overwrite=args.force
        )
    except core_config.TomlConfigError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote quiz config to {written}\n")
    return 0


def _resolve_config_target(args: argparse.Namespace) -> Path:
    if args.path is not None:
        candidate = args.path.expanduser()
        if not candidate.is_absolute():
            candidate = (Path.cwd() / candidate).resolve()
        return candidate

    layout = workspace_mod.ensure_workspace(path=args.workspace)
    return layout.path_for("config") / CONFIG_FILENAME


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
