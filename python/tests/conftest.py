"""Shared fixtures for genrecog tests."""

import pytest

from genrecog import cache as cache_mod
from genrecog.protocols import Trivia, TriviaKind


class FakeToken:
    def __init__(self, leading_trivia):
        self.leading_trivia = tuple(leading_trivia)

    @property
    def has_leading_trivia(self):
        return bool(self.leading_trivia)


class FakeRoot:
    def __init__(self, token):
        self._token = token

    def get_first_token(self):
        return self._token


class FakeTree:
    """SourceTree stand-in that counts get_root calls (one per comment scan)."""

    def __init__(self, file_path="Program.cs", comments=(), root=True, token=True):
        self.file_path = file_path
        self.root_calls = 0
        trivia = []
        for comment in comments:
            if isinstance(comment, Trivia):
                trivia.append(comment)
            else:
                trivia.append(Trivia(TriviaKind.SINGLE_LINE_COMMENT, comment))
                trivia.append(Trivia(TriviaKind.END_OF_LINE, "\n"))
        self._root = FakeRoot(FakeToken(trivia) if token else None) if root else None

    def get_root(self, cancel=None):
        self.root_calls += 1
        return self._root


@pytest.fixture
def make_tree():
    return FakeTree


@pytest.fixture(autouse=True)
def _fresh_default_cache(monkeypatch):
    monkeypatch.delenv("GENRECOG_CACHE_MODE", raising=False)
    monkeypatch.delenv("GENRECOG_CACHE_MAX_ENTRIES", raising=False)
    cache_mod.reset_default_cache()
    yield
    cache_mod.reset_default_cache()
