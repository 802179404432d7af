"""Text splitting into plain, whitespace and newline runs.

Line breaks can never be left inside open markup layers, so the emitters need
the text of each segment pre-split into runs of a single kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from itertools import groupby
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

NEWLINE_CHARS = frozenset("\n\r")


class RunKind(Enum):
    """Classification of a run of characters."""

    TEXT = "text"
    WHITESPACE = "whitespace"
    NEWLINES = "newlines"


@dataclass(frozen=True, slots=True)
class Run:
    """A maximal substring of a single kind.

    Attributes:
        text: The characters of the run.
        kind: What the run consists of.
        is_last: This is the final run of the split input.
    """

    text: str
    kind: RunKind
    is_last: bool


def _classify(ch: str) -> RunKind:
    if ch in NEWLINE_CHARS:
        return RunKind.NEWLINES
    if ch.isspace():
        return RunKind.WHITESPACE
    return RunKind.TEXT


def split_runs(text: str) -> Iterator[Run]:
    """Split *text* into typed runs; concatenating them yields *text*.

    Example:
        >>> [(r.text, r.kind.value) for r in split_runs("a b\\n")]
        [('a', 'text'), (' ', 'whitespace'), ('b', 'text'), ('\\n', 'newlines')]
    """
    groups = [("".join(chars), kind) for kind, chars in groupby(text, _classify)]
    for i, (chunk, kind) in enumerate(groups):
        yield Run(chunk, kind, is_last=i == len(groups) - 1)


def count_line_breaks(newlines: str) -> int:
    """Number of line breaks in a newline run; ``\\r\\n`` counts once."""
    return len(newlines.replace("\r\n", "\n"))


def split_trailing_newlines(text: str) -> tuple[str, str]:
    """Split *text* into its body and any trailing newline characters."""
    body = text.rstrip("\r\n")
    return body, text[len(body) :]
