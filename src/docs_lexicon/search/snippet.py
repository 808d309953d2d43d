"""Excerpt extraction around the densest cluster of query terms."""

from __future__ import annotations

from collections.abc import Sequence


WINDOW_SIZE = 200
WINDOW_STRIDE = 50
LEAD_IN = 50
DEFAULT_EXCERPT_LENGTH = 300
ELLIPSIS = "..."


def fold_case(text: str) -> str:
    """Lowercase ``text`` one character at a time without changing its length.

    Characters whose lowercase form is longer than one character (such as
    ``"\u0130"``) are kept as is, so offsets into the result are offsets into
    ``text``.
    """

    folded = []
    for char in text:
        lowered = char.lower()
        folded.append(lowered if len(lowered) == 1 else char)
    return "".join(folded)


def find_densest_window(text: str, terms: Sequence[str]) -> int:
    """Return the start of the window containing the most distinct terms.

    Windows of ``WINDOW_SIZE`` characters are tried every ``WINDOW_STRIDE``
    characters. The first window with the highest hit count wins. Text no
    longer than one window always yields 0.

    Args:
        text: Lowercased text to scan.
        terms: Lowercased query terms; duplicates are counted once.

    Returns:
        Character offset of the best window.
    """
    distinct_terms = list(dict.fromkeys(term for term in terms if term))
    best_pos = 0
    best_hits = 0
    for start in range(0, len(text) - WINDOW_SIZE, WINDOW_STRIDE):
        window = text[start : start + WINDOW_SIZE]
        hits = sum(1 for term in distinct_terms if term in window)
        if hits > best_hits:
            best_hits = hits
            best_pos = start
    return best_pos


def extract_excerpt(body: str, query_tokens: Sequence[str], max_length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """Slice a bounded excerpt of ``body`` around the best matching region.

    The slice starts ``LEAD_IN`` characters before the densest window
    (clamped to the start of the body) and spans at most ``max_length``
    characters. Surrounding whitespace is trimmed, then ``...`` marks each
    side where the body continues.

    Args:
        body: Document text to excerpt.
        query_tokens: Normalized query terms.
        max_length: Maximum characters taken from the body.

    Returns:
        The excerpt, or an empty string for an empty body.
    """
    if not body:
        return ""

    best_pos = find_densest_window(fold_case(body), query_tokens)
    start = max(0, best_pos - LEAD_IN)
    end = min(len(body), start + max(max_length, 0))

    excerpt = body[start:end].strip()
    if start > 0:
        excerpt = ELLIPSIS + excerpt
    if end < len(body):
        excerpt = excerpt + ELLIPSIS
    return excerpt
