"""Tokenizer pipeline shared by indexing and query scoring.

The analyzer mirrors a Whoosh-style composable tokenizer/filter design:
a regex tokenizer emits word tokens and filters drop the ones that should
not reach the index. The same pipeline runs over document text and query
text so both sides agree on vocabulary.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
import re
from typing import Protocol


# Query-expansion collaborators import this set so both sides drop the same words.
STOPWORDS: frozenset[str] = frozenset(
    {
        "the",
        "a",
        "an",
        "is",
        "in",
        "to",
        "of",
        "and",
        "or",
        "for",
        "on",
        "with",
        "this",
        "that",
        "it",
        "be",
        "as",
        "at",
        "by",
        "we",
        "how",
        "do",
        "i",
        "you",
        "can",
        "what",
        "from",
        "are",
        "use",
        "used",
    }
)

MIN_TOKEN_LENGTH = 2


@dataclass
class Token:
    """Represents a token emitted by the analyzer."""

    text: str
    position: int
    start_char: int
    end_char: int


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class RegexTokenizer:
    """Yields runs of letters and decimal digits; everything else is a separator.

    The pattern finds alphanumeric runs. Numeric characters that are not
    decimal digits (``²``, ``½``, ``Ⅻ``) match ``\\w`` too, so each run is
    split again at those characters.
    """

    def __init__(self, pattern: str = r"[^\W_]+", flags: int = re.UNICODE) -> None:
        self.pattern = re.compile(pattern, flags)

    def __call__(self, text: str) -> Iterator[Token]:
        position = 0
        for match in self.pattern.finditer(text):
            for start, end in _word_spans(match.group(0), match.start()):
                yield Token(text=text[start:end], position=position, start_char=start, end_char=end)
                position += 1


def _is_word_char(char: str) -> bool:
    return char.isalpha() or char.isdecimal()


def _word_spans(run: str, offset: int) -> Iterator[tuple[int, int]]:
    start: int | None = None
    for index, char in enumerate(run):
        if _is_word_char(char):
            if start is None:
                start = index
        elif start is not None:
            yield offset + start, offset + index
            start = None
    if start is not None:
        yield offset + start, offset + len(run)


class MinLengthFilter:
    """Drops tokens shorter than ``min_length`` characters."""

    def __init__(self, min_length: int = MIN_TOKEN_LENGTH) -> None:
        self.min_length = min_length

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if len(token.text) >= self.min_length:
                yield token


class StopFilter:
    """Removes stopwords from the stream."""

    def __init__(self, stopwords: Iterable[str] | None = None) -> None:
        self.stopwords = frozenset(stopwords) if stopwords is not None else STOPWORDS

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text not in self.stopwords:
                yield token


class Analyzer:
    """Lowercases text, splits it and runs the filter chain.

    Input is lowercased before splitting so multi-character case folds land
    inside the same run as the surrounding letters.
    """

    def __init__(self, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = RegexTokenizer()
        self.filters: list[TokenFilter] = list(filters) if filters is not None else [MinLengthFilter(), StopFilter()]

    def __call__(self, text: str) -> list[Token]:
        if not text:
            return []
        stream: Iterable[Token] = self.tokenizer(text.lower())
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        for idx, token in enumerate(tokens):  # normalize positions post-filtering
            token.position = idx
        return tokens


_DEFAULT_ANALYZER = Analyzer()


def analyze(text: str) -> list[Token]:
    """Return the full token stream for ``text``."""

    return _DEFAULT_ANALYZER(text)


def tokenize(text: str) -> list[str]:
    """Return normalized terms in source order, duplicates retained.

    Never raises: empty or separator-only input yields an empty list.
    """

    return [token.text for token in _DEFAULT_ANALYZER(text)]
