"""Syntax protocols for genrecog.

Defines the minimal tree/token/trivia surface the classifiers read, so a
host front-end (a real compiler, or the lightweight reader in text_tree)
can be plugged in without genrecog depending on it.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .cancellation import CancellationToken


class TriviaKind(enum.Enum):
    """Kinds of non-semantic text preceding a token."""
    WHITESPACE = "whitespace"
    END_OF_LINE = "end_of_line"
    SINGLE_LINE_COMMENT = "single_line_comment"
    MULTI_LINE_COMMENT = "multi_line_comment"
    DOCUMENTATION_COMMENT = "documentation_comment"
    DIRECTIVE = "directive"


@dataclass(frozen=True)
class Trivia:
    """A single piece of trivia with its rendered text."""
    kind: TriviaKind
    text: str

    def __str__(self) -> str:
        return self.text


class SyntaxTrivia(Protocol):
    kind: TriviaKind
    text: str


class SyntaxToken(Protocol):
    """Protocol for the first token of a tree."""

    @property
    def leading_trivia(self) -> Sequence[SyntaxTrivia]:
        ...

    @property
    def has_leading_trivia(self) -> bool:
        ...


class SyntaxNode(Protocol):
    def get_first_token(self) -> SyntaxToken | None:
        ...


class SourceTree(Protocol):
    """Protocol for a parsed source file.

    Trees are compared by identity: two handles are the same tree only when
    they are the same object.
    """

    file_path: str

    def get_root(self, cancel: CancellationToken | None = None) -> SyntaxNode | None:
        """Return the root node, or None when the tree has no root."""
        ...


@dataclass(frozen=True)
class AnalysisContext:
    """A tree paired with the cancellation token of the analysis running on it."""
    tree: SourceTree
    cancel: CancellationToken | None = None
