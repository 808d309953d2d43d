"""Statistical helpers for BM25 style scoring.

The functions here stay independent of the index so they can be unit
tested on their own. Parameters are fixed constants, not configuration.
"""

from __future__ import annotations

import math


K1 = 1.5
B = 0.75

# Partial-term matches ("rigid" -> "rigidbody") count for less than exact ones.
PREFIX_WEIGHT = 0.7
MIN_PREFIX_LENGTH = 3

TITLE_BONUS = 2.0

EMPTY_CORPUS_AVG_LENGTH = 100.0


def calculate_idf(doc_freq: int, total_docs: int) -> float:
    """Return ``ln((N - df + 0.5) / (df + 0.5) + 1)``.

    The ``+ 1`` inside the log keeps the value positive even when a term
    appears in every document.
    """

    if total_docs <= 0:
        return 0.0
    return math.log((total_docs - doc_freq + 0.5) / (doc_freq + 0.5) + 1)


def bm25(tf: int, doc_length: int, avg_doc_length: float, *, k1: float = K1, b: float = B) -> float:
    """Compute the saturating BM25 term weight without IDF."""

    if tf <= 0:
        return 0.0
    if avg_doc_length <= 0:
        avg_doc_length = EMPTY_CORPUS_AVG_LENGTH
    denominator = tf + k1 * (1 - b + b * doc_length / avg_doc_length)
    return tf * (k1 + 1) / denominator


def count_occurrences(term: str, text: str) -> int:
    """Count non-overlapping, case-insensitive literal occurrences of ``term``.

    This is a substring count, not a token count, so "move" also matches
    inside "movement".
    """

    if not term:
        return 0
    return text.lower().count(term)
