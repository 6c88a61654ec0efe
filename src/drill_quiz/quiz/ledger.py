"""Persistent wrong-answer ledger keyed by question identity.

The ledger file holds one record per line::

    <identity>,<miss_count>,"<question text>"

Double quotes inside the text are doubled. Only entries with a positive miss
count are written, so the file lists exactly the questions still owed a
correct answer. The whole file is rewritten after every answer.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

__all__ = [
    "LedgerError",
    "LedgerEntry",
    "WrongAnswerLedger",
    "load_ledger",
    "save_ledger",
    "record_result",
    "format_line",
    "parse_line",
]

_LOGGER = logging.getLogger("drill_quiz.quiz.ledger")


class LedgerError(RuntimeError):
    """Raised when the ledger file cannot be read or written."""


@dataclass
class LedgerEntry:
    identity: str
    miss_count: int = 0
    last_question_text: str = ""


@dataclass
class WrongAnswerLedger:
    """In-memory mapping of question identity to :class:`LedgerEntry`."""

    entries: dict[str, LedgerEntry] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, identity: object) -> bool:
        return identity in self.entries

    def __iter__(self) -> Iterator[LedgerEntry]:
        return iter(self.entries.values())

    def get(self, identity: str) -> Optional[LedgerEntry]:
        return self.entries.get(identity)

    def miss_count(self, identity: str) -> int:
        """Return the outstanding misses for ``identity`` (0 when absent)."""

        entry = self.entries.get(identity)
        return entry.miss_count if entry else 0

    def record_result(
        self, identity: str, question_text: str, *, correct: bool
    ) -> LedgerEntry:
        """Apply one answer to the ledger and return the updated entry.

        A correct answer removes a single miss and never goes below zero, so a
        question missed three times needs three correct answers to clear. A
        wrong answer adds one miss.
        """

        entry = self.entries.get(identity)
        if entry is None:
            entry = LedgerEntry(identity=identity)
            self.entries[identity] = entry
        if correct:
            if entry.miss_count > 0:
                entry.miss_count -= 1
        else:
            entry.miss_count += 1
        entry.last_question_text = question_text
        return entry

    def outstanding(self) -> list[LedgerEntry]:
        """Entries with misses left, highest count first."""

        pending = [entry for entry in self.entries.values() if entry.miss_count]
        return sorted(pending, key=lambda e: (-e.miss_count, e.identity))

    def snapshot(self) -> dict[str, int]:
        """Return ``{identity: miss_count}`` detached from later updates."""

        return {
            identity: entry.miss_count
            for identity, entry in self.entries.items()
        }


def record_result(
    ledger: WrongAnswerLedger,
    identity: str,
    question_text: str,
    correct: bool,
) -> LedgerEntry:
    return ledger.record_result(identity, question_text, correct=correct)


def format_line(entry: LedgerEntry) -> str:
    text = " ".join(entry.last_question_text.splitlines())
    quoted = text.replace('"', '""')
    return f'{entry.identity},{entry.miss_count},"{quoted}"'


def parse_line(line: str) -> Optional[LedgerEntry]:
    """Parse one ledger line; return ``None`` when it is malformed."""

    parts = line.rstrip("\r\n").split(",", 2)
    if len(parts) != 3:
        return None
    identity, raw_count, raw_text = parts
    identity = identity.strip()
    if not identity:
        return None
    try:
        count = int(raw_count.strip())
    except ValueError:
        return None
    if count < 0:
        return None
    return LedgerEntry(
        identity=identity,
        miss_count=count,
        last_question_text=_unquote(raw_text),
    )


def _unquote(raw: str) -> str:
    text = raw.strip()
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1].replace('""', '"')
    return text


def load_ledger(path: Path) -> WrongAnswerLedger:
    """Load the ledger at ``path``; a missing file gives an empty ledger."""

    ledger = WrongAnswerLedger()
    source = Path(path)
    try:
        handle = source.open("r", encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return ledger
    except OSError as exc:
        raise LedgerError(f"Unable to read ledger {source}: {exc}") from exc
    with handle:
        try:
            for lineno, line in enumerate(handle, start=1):
                if not line.strip():
                    continue
                entry = parse_line(line)
                if entry is None:
                    _LOGGER.debug(
                        "Skipping malformed ledger line",
                        extra={"path": source, "line_number": lineno},
                    )
                    continue
                ledger.entries[entry.identity] = entry
        except OSError as exc:
            raise LedgerError(
                f"Unable to read ledger {source}: {exc}"
            ) from exc
    return ledger


def save_ledger(ledger: WrongAnswerLedger, path: Path) -> None:
    """Rewrite ``path`` with every entry that still has misses."""

    target = Path(path)
    lines = [format_line(entry) for entry in ledger if entry.miss_count > 0]
    payload = "".join(line + "\n" for line in lines)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        _atomic_write_text(target, payload)
    except OSError as exc:
        raise LedgerError(f"Unable to write ledger {target}: {exc}") from exc


def _atomic_write_text(path: Path, payload: str) -> None:
    handle = tempfile.NamedTemporaryFile(
        "w",
        delete=False,
        encoding="utf-8",
        newline="\n",
        dir=str(path.parent),
        prefix=f".{path.name}.",
    )
    try:
        try:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        finally:
            handle.close()
        os.replace(handle.name, path)
    except OSError:
        Path(handle.name).unlink(missing_ok=True)
        raise
