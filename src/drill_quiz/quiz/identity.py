"""Stable content identifiers for questions."""

from __future__ import annotations

import hashlib

from .questions import Question

__all__ = ["question_identity"]


def question_identity(question: Question) -> str:
    """Return the ledger key for ``question``.

    A precomputed ``hash`` from the question file wins. Otherwise the key is
    the SHA-256 of the question text followed by every option, joined with
    no separator, as lowercase hex.
    """

    if question.identity is not None:
        return question.identity
    digest = hashlib.sha256()
    digest.update(question.text.encode("utf-8"))
    digest.update("".join(question.options).encode("utf-8"))
    return digest.hexdigest()
