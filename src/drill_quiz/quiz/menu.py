"""Interactive menus shown before a quiz session starts."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table

from ..core.files import list_files
from .questions import QuestionSetError, load_question_set
from .selection import SelectionPolicy
from .session import InputProvider, parse_answer

__all__ = [
    "QuestionDiscoveryError",
    "MenuSelectionError",
    "discover_question_files",
    "choose_question_file",
    "choose_policy",
]

_MODE_CHOICES = {
    1: SelectionPolicy.RANDOM,
    2: SelectionPolicy.MISS_WEIGHTED,
}


class QuestionDiscoveryError(RuntimeError):
    """Raised when no question-set files can be offered."""


class MenuSelectionError(RuntimeError):
    """Raised when the user picks an entry that does not exist."""


def discover_question_files(
    directory: Path, extensions: set[str]
) -> list[Path]:
    try:
        files = list_files(directory, extensions)
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise QuestionDiscoveryError(str(exc)) from exc
    except OSError as exc:
        raise QuestionDiscoveryError(
            f"Unable to list {directory}: {exc}"
        ) from exc
    if not files:
        listed = ", ".join(sorted(extensions))
        raise QuestionDiscoveryError(
            f"No question files ({listed}) found in {directory}"
        )
    return files


def choose_question_file(
    files: Sequence[Path],
    console: Console,
    input_provider: InputProvider,
) -> Path:
    """List ``files`` with their descriptions and return the chosen one.

    Files that fail to load are still listed so the user can see them; the
    error surfaces again if one is picked.
    """

    table = Table(
        title="Available question sets",
        show_header=False,
        box=box.SIMPLE,
        expand=False,
    )
    table.add_column("No.", justify="right", style="cyan")
    table.add_column("File", style="bold")
    table.add_column("Description")
    for number, path in enumerate(files, start=1):
        try:
            description = load_question_set(path).description
            table.add_row(f"{number}.", path.name, description)
        except QuestionSetError:
            table.add_row(
                f"{number}.",
                path.name,
                "[red](could not read description)[/]",
            )
    console.print(table)
    console.print("Choose a file by entering its number:")

    try:
        raw = input_provider()
    except EOFError:
        raw = ""
    choice = parse_answer(raw)
    if choice is None or not 1 <= choice <= len(files):
        raise MenuSelectionError(f"Invalid selection: {raw.strip()!r}")
    return files[choice - 1]


def choose_policy(
    console: Console, input_provider: InputProvider
) -> SelectionPolicy:
    """Ask how questions should be ordered; unknown answers mean random."""

    console.print("How should the questions be asked?")
    console.print("1. Random order")
    console.print("2. Previously missed questions first")
    try:
        raw = input_provider()
    except EOFError:
        raw = ""
    choice = parse_answer(raw)
    return _MODE_CHOICES.get(choice or 0, SelectionPolicy.RANDOM)
