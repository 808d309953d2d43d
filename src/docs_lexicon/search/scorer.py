"""BM25-lite scoring and ranking over an :class:`InvertedIndex`.

Scores are computed fresh for every query from the postings lists and the
raw document text; nothing beyond per-slot document lengths is cached.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from docs_lexicon.domain.search import Document
from docs_lexicon.search.index import InvertedIndex
from docs_lexicon.search.stats import (
    B,
    K1,
    MIN_PREFIX_LENGTH,
    PREFIX_WEIGHT,
    TITLE_BONUS,
    bm25,
    calculate_idf,
    count_occurrences,
)


@dataclass(frozen=True)
class RankedSlot:
    """A slot with its normalized score in (0, 1]."""

    slot: int
    score: float


class BM25Scorer:
    """Accumulate per-slot relevance for a tokenized query.

    Every query token contributes once per occurrence, so repeated tokens
    compound. Each token is scored three ways:

    1. exact postings, weight 1.0;
    2. every other indexed term starting with the token (tokens of at least
       three characters), weight 0.7;
    3. a flat title bonus for each document whose lowercased title contains
       the token.

    The prefix pass scans the whole vocabulary for every query token, which
    is linear in vocabulary size. That is fine for tens of thousands of short
    documents; larger corpora need a sorted term list or a trie here.
    """

    def __init__(self, *, k1: float = K1, b: float = B) -> None:
        self.k1 = k1
        self.b = b

    def score(
        self,
        query_tokens: Sequence[str],
        documents: Sequence[Document],
        index: InvertedIndex,
    ) -> dict[int, float]:
        if not documents or not query_tokens:
            return {}

        scores: dict[int, float] = defaultdict(float)
        total_docs = len(documents)
        avg_length = index.average_document_length(total_docs)
        scoring_texts: dict[int, str] = {}

        for token in query_tokens:
            self._score_term(token, 1.0, scores, documents, index, total_docs, avg_length, scoring_texts)
            if len(token) < MIN_PREFIX_LENGTH:
                continue
            for term in list(index.vocabulary()):
                if term != token and term.startswith(token):
                    self._score_term(
                        term, PREFIX_WEIGHT, scores, documents, index, total_docs, avg_length, scoring_texts
                    )

        for slot, document in enumerate(documents):
            title_lower = document.title.lower()
            for token in query_tokens:
                if token in title_lower:
                    scores[slot] += TITLE_BONUS

        return dict(scores)

    def _score_term(
        self,
        term: str,
        weight: float,
        scores: dict[int, float],
        documents: Sequence[Document],
        index: InvertedIndex,
        total_docs: int,
        avg_length: float,
        scoring_texts: dict[int, str],
    ) -> None:
        postings = index.postings(term)
        if not postings:
            return

        idf = calculate_idf(len(postings), total_docs)
        for slot in postings:
            text = scoring_texts.get(slot)
            if text is None:
                text = documents[slot].scoring_text().lower()
                scoring_texts[slot] = text
            tf = count_occurrences(term, text)
            doc_length = index.document_length(slot)
            scores[slot] += idf * bm25(tf, doc_length, avg_length, k1=self.k1, b=self.b) * weight


def rank(scores: Mapping[int, float], top_k: int) -> list[RankedSlot]:
    """Return the ``top_k`` best slots with scores normalized to the best hit.

    Only strictly positive scores are ranked. Ties keep slot order. The
    divisor is the maximum over every candidate, which is also the first
    returned score, so the top hit is always exactly 1.0.
    """

    if top_k <= 0:
        return []

    candidates = sorted(
        ((slot, score) for slot, score in scores.items() if score > 0),
        key=lambda item: (-item[1], item[0]),
    )
    if not candidates:
        return []

    max_score = candidates[0][1]
    return [RankedSlot(slot=slot, score=score / max_score) for slot, score in candidates[:top_k]]
