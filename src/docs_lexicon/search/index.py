"""Inverted index over document slots.

A slot is the engine's storage position for a document. It stays stable
when a document is replaced, so postings can use it as the join key.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging

from docs_lexicon.domain.search import Document
from docs_lexicon.search.analyzers import tokenize
from docs_lexicon.search.stats import EMPTY_CORPUS_AVG_LENGTH


logger = logging.getLogger(__name__)


class InvertedIndex:
    """Maps each term to the slots whose content contains it.

    Replacing a slot's content removes the postings its previous content
    contributed before the new content is indexed, so a slot appears under a
    term iff the term occurs in the slot's current ``title + body + tags``.

    Per-slot document lengths (token count of ``body + " " + title``) are
    cached here and refreshed whenever the slot is re-indexed.
    """

    def __init__(self) -> None:
        self._postings: dict[str, list[int]] = {}
        self._slot_terms: dict[int, tuple[str, ...]] = {}
        self._doc_lengths: dict[int, int] = {}
        self._total_length = 0

    def index_slot(self, slot: int, document: Document) -> None:
        """Recompute postings membership for exactly ``slot``."""

        self._unlink_slot(slot)

        seen: set[str] = set()
        terms: list[str] = []
        for term in tokenize(document.indexable_text()):
            if term in seen:
                continue
            seen.add(term)
            terms.append(term)
            self._postings.setdefault(term, []).append(slot)

        doc_length = len(tokenize(document.scoring_text()))
        self._slot_terms[slot] = tuple(terms)
        self._doc_lengths[slot] = doc_length
        self._total_length += doc_length

    def _unlink_slot(self, slot: int) -> None:
        previous_terms = self._slot_terms.pop(slot, ())
        for term in previous_terms:
            postings = self._postings.get(term)
            if postings is None:
                continue
            try:
                postings.remove(slot)
            except ValueError:
                logger.debug("Slot %d missing from postings for %r", slot, term)
            if not postings:
                del self._postings[term]
        self._total_length -= self._doc_lengths.pop(slot, 0)

    def postings(self, term: str) -> list[int] | None:
        return self._postings.get(term)

    def vocabulary(self) -> Iterable[str]:
        return self._postings.keys()

    def terms_for(self, slot: int) -> tuple[str, ...]:
        return self._slot_terms.get(slot, ())

    def document_length(self, slot: int) -> int:
        return self._doc_lengths.get(slot, 0)

    def average_document_length(self, document_count: int) -> float:
        """Mean token count of ``body + " " + title`` across the corpus."""

        if document_count <= 0:
            return EMPTY_CORPUS_AVG_LENGTH
        return self._total_length / document_count

    def __len__(self) -> int:
        return len(self._postings)
