"""Lightweight source trees read straight from text (no compiler required).

Only the head of the file is lexed: the trivia in front of the first token
(whitespace, line endings, // and /* */ comments, /// documentation
comments, # directive lines) using C-family comment syntax. That is all
the generated-code classifiers need. A real front-end can be plugged in
instead via the SourceTree protocol.
"""

import re
from pathlib import Path

from .cancellation import CancellationToken, check_cancelled
from .protocols import Trivia, TriviaKind

_BOM = "\ufeff"
# Tab, vertical tab, form feed and the Unicode Zs (space separator) category.
_WHITESPACE = re.compile("[\t\v\f \u00a0\u1680\u2000-\u200a\u202f\u205f\u3000]+")
_LINE_BREAKS = "\r\n\u0085\u2028\u2029"
_LINE_REST = re.compile("[^\r\n\u0085\u2028\u2029]*")
_TOKEN = re.compile(r"\w+|.", re.DOTALL)

_READ_CHUNK = 64 * 1024
# A first token ending this close to the end of a partial read may be cut off,
# or the trivia before it may have split "//", "\r\n" or "///" from "////".
_LOOKAHEAD = 4


class TextToken:
    """A token with the trivia that precedes it. kind is "token" or "end_of_file"."""

    def __init__(self, text: str, kind: str, position: int, leading_trivia: tuple[Trivia, ...]):
        self.text = text
        self.kind = kind
        self.position = position
        self.leading_trivia = leading_trivia

    @property
    def has_leading_trivia(self) -> bool:
        return bool(self.leading_trivia)

    def __repr__(self) -> str:
        return f"TextToken({self.kind}, {self.text!r}, trivia={len(self.leading_trivia)})"


class TextRoot:
    def __init__(self, first_token: TextToken):
        self._first_token = first_token

    def get_first_token(self) -> TextToken:
        return self._first_token


class TextSourceTree:
    """SourceTree over in-memory text. The root is built on first access."""

    def __init__(self, text: str, file_path: str = ""):
        self.text = text
        self.file_path = file_path
        self._root: TextRoot | None = None

    def get_root(self, cancel: CancellationToken | None = None) -> TextRoot:
        if self._root is None:
            self._root = TextRoot(read_first_token(self.text, cancel))
        return self._root

    def __repr__(self) -> str:
        return f"TextSourceTree({self.file_path!r})"


def read_leading_trivia(
    text: str, cancel: CancellationToken | None = None,
) -> tuple[list[Trivia], int]:
    """Lex trivia from the start of text.

    Returns:
        (trivia list, offset of the first non-trivia character)
    """
    trivia: list[Trivia] = []
    pos = 1 if text.startswith(_BOM) else 0
    end_of_text = len(text)
    at_line_start = True

    while pos < end_of_text:
        check_cancelled(cancel)
        ch = text[pos]

        if ch in _LINE_BREAKS:
            end = pos + 2 if text.startswith("\r\n", pos) else pos + 1
            trivia.append(Trivia(TriviaKind.END_OF_LINE, text[pos:end]))
            at_line_start = True
            pos = end
            continue

        m = _WHITESPACE.match(text, pos)
        if m:
            trivia.append(Trivia(TriviaKind.WHITESPACE, m.group()))
            pos = m.end()
            continue

        if text.startswith("//", pos):
            end = _LINE_REST.match(text, pos).end()
            body = text[pos:end]
            # "///" is a doc comment; "////" and longer are plain comments.
            if body.startswith("///") and not body.startswith("////"):
                kind = TriviaKind.DOCUMENTATION_COMMENT
            else:
                kind = TriviaKind.SINGLE_LINE_COMMENT
            trivia.append(Trivia(kind, body))
        elif text.startswith("/*", pos):
            close = text.find("*/", pos + 2)
            end = end_of_text if close < 0 else close + 2
            trivia.append(Trivia(TriviaKind.MULTI_LINE_COMMENT, text[pos:end]))
        elif ch == "#" and at_line_start:
            end = _LINE_REST.match(text, pos).end()
            trivia.append(Trivia(TriviaKind.DIRECTIVE, text[pos:end]))
        else:
            break

        at_line_start = False
        pos = end

    return trivia, pos


def read_first_token(text: str, cancel: CancellationToken | None = None) -> TextToken:
    """Return the first token of text with its leading trivia attached."""
    trivia, pos = read_leading_trivia(text, cancel)
    m = _TOKEN.match(text, pos)
    if m is None:
        return TextToken("", "end_of_file", pos, tuple(trivia))
    return TextToken(m.group(), "token", pos, tuple(trivia))


def parse_text(text: str, file_path: str = "") -> TextSourceTree:
    return TextSourceTree(text, file_path)


class FileSourceTree:
    """SourceTree over a file on disk.

    Nothing is read until get_root is called, and then only as much of the
    file as it takes to reach the first token.
    """

    def __init__(self, path: str | Path, file_path: str | None = None, encoding: str = "utf-8"):
        self.path = Path(path)
        self.file_path = str(path) if file_path is None else file_path
        self.encoding = encoding
        self._root: TextRoot | None = None

    def get_root(self, cancel: CancellationToken | None = None) -> TextRoot:
        if self._root is None:
            self._root = TextRoot(self._read_first_token(cancel))
        return self._root

    def _read_first_token(self, cancel: CancellationToken | None) -> TextToken:
        head = ""
        # newline="" keeps "\r\n" and the other line breaks as written.
        with open(self.path, encoding=self.encoding, errors="replace", newline="") as f:
            while True:
                chunk = f.read(_READ_CHUNK)
                head += chunk
                token = read_first_token(head, cancel)
                if not chunk or token.position + len(token.text) < len(head) - _LOOKAHEAD:
                    return token

    def __repr__(self) -> str:
        return f"FileSourceTree({self.file_path!r})"


def load_tree(
    path: str | Path,
    encoding: str = "utf-8",
    file_path: str | None = None,
) -> FileSourceTree:
    """Open a file as a lazily read FileSourceTree.

    file_path is what the tree reports as its path; defaults to path as given.
    Read errors surface as OSError from get_root.
    """
    return FileSourceTree(path, file_path=file_path, encoding=encoding)
