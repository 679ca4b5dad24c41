"""Detect generated-code markers in a file's leading comments."""

from __future__ import annotations

from .cancellation import CancellationToken, check_cancelled
from .protocols import SourceTree, TriviaKind

GENERATED_CODE_MARKERS = frozenset({
    "// This file has been generated by the GUI designer. Do not modify.",
    "// <auto-generated>",
    "// <autogenerated>",
})

# Generators put the marker at the very top; later comments are not read.
MAX_COMMENTS_CHECKED = 2


def contains_generated_code_marker(
    tree: SourceTree,
    cancel: CancellationToken | None = None,
) -> bool:
    """Return True if one of the first two line comments is a generated-code marker.

    Only single-line comment trivia in front of the tree's first token is
    considered. A tree without a root, without a first token, or whose first
    token has no leading trivia has no marker.

    Raises:
        OperationCancelled: cancel fired before or during the walk.
    """
    check_cancelled(cancel)
    root = tree.get_root(cancel)
    if root is None:
        return False

    token = root.get_first_token()
    if token is None or not token.has_leading_trivia:
        return False

    seen = 0
    for trivia in token.leading_trivia:
        check_cancelled(cancel)
        if trivia.kind is not TriviaKind.SINGLE_LINE_COMMENT:
            continue
        if trivia.text.rstrip() in GENERATED_CODE_MARKERS:
            return True
        seen += 1
        if seen >= MAX_COMMENTS_CHECKED:
            break
    return False
