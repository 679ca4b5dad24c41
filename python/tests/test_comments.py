"""Tests for genrecog leading-comment marker detection."""

import pytest

from genrecog.cancellation import CancellationToken, OperationCancelled
from genrecog.comments import contains_generated_code_marker
from genrecog.protocols import Trivia, TriviaKind


def test_auto_generated_marker_first_comment(make_tree):
    tree = make_tree(comments=["// <auto-generated>", "// other"])
    assert contains_generated_code_marker(tree) is True


def test_auto_generated_marker_second_comment(make_tree):
    tree = make_tree(comments=["// Copyright (c) Contoso", "// <auto-generated>"])
    assert contains_generated_code_marker(tree) is True


def test_marker_as_third_comment_is_ignored(make_tree):
    tree = make_tree(comments=["// one", "// two", "// <auto-generated>"])
    assert contains_generated_code_marker(tree) is False


@pytest.mark.parametrize(
    "marker",
    [
        "// This file has been generated by the GUI designer. Do not modify.",
        "// <auto-generated>",
        "// <autogenerated>",
    ],
)
def test_all_markers(make_tree, marker):
    assert contains_generated_code_marker(make_tree(comments=[marker])) is True


def test_marker_must_match_exactly(make_tree):
    tree = make_tree(comments=["//<auto-generated>", "// <Auto-Generated>"])
    assert contains_generated_code_marker(tree) is False


def test_trailing_whitespace_is_trimmed(make_tree):
    tree = make_tree(comments=["// <auto-generated>   "])
    assert contains_generated_code_marker(tree) is True


def test_only_single_line_comments_count(make_tree):
    tree = make_tree(comments=[
        Trivia(TriviaKind.MULTI_LINE_COMMENT, "/* header */"),
        Trivia(TriviaKind.DOCUMENTATION_COMMENT, "/// <auto-generated>"),
        Trivia(TriviaKind.DIRECTIVE, "#pragma warning disable"),
        "// one",
        "// <auto-generated>",
    ])
    assert contains_generated_code_marker(tree) is True


def test_no_root(make_tree):
    assert contains_generated_code_marker(make_tree(root=False)) is False


def test_no_first_token(make_tree):
    assert contains_generated_code_marker(make_tree(token=False)) is False


def test_no_leading_trivia(make_tree):
    assert contains_generated_code_marker(make_tree(comments=[])) is False


def test_cancelled_before_scan(make_tree):
    cancel = CancellationToken()
    cancel.cancel()
    tree = make_tree(comments=["// <auto-generated>"])
    with pytest.raises(OperationCancelled):
        contains_generated_code_marker(tree, cancel)
    assert tree.root_calls == 0


def test_cancelled_during_walk(make_tree):
    cancel = CancellationToken()

    class CancellingTree:
        file_path = "Program.cs"

        def get_root(self, cancel_arg=None):
            root = make_tree(comments=["// one", "// <auto-generated>"]).get_root()
            cancel.cancel()
            return root

    with pytest.raises(OperationCancelled):
        contains_generated_code_marker(CancellingTree(), cancel)


def test_uncancelled_token_is_harmless(make_tree):
    cancel = CancellationToken()
    tree = make_tree(comments=["// <autogenerated>"])
    assert contains_generated_code_marker(tree, cancel) is True
    assert cancel.is_cancellation_requested is False
