"""In-memory lexical search engine.

The engine owns the document list and the inverted index behind a single
reader/writer lock. Inserts and loads take the lock in write mode; searches,
saves and counts take it in read mode. One engine instance is shared by all
callers for the lifetime of the process.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from docs_lexicon.domain.search import Document, SearchResult
from docs_lexicon.exceptions import PersistenceError
from docs_lexicon.observability.metrics import (
    INDEX_DOC_COUNT,
    PERSISTENCE_ERRORS,
    SEARCH_LATENCY,
    UPSERT_COUNT,
    track_latency,
)
from docs_lexicon.search.analyzers import tokenize
from docs_lexicon.search.index import InvertedIndex
from docs_lexicon.search.locking import ReadWriteLock
from docs_lexicon.search.persistence import read_cache, write_cache
from docs_lexicon.search.scorer import BM25Scorer, rank
from docs_lexicon.search.snippet import DEFAULT_EXCERPT_LENGTH, extract_excerpt


if TYPE_CHECKING:
    from docs_lexicon.config import Settings


logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 5


class IndexEngine:
    """Document store plus inverted index with BM25-lite ranking.

    Documents are keyed by ``location``: inserting a document whose location
    is already stored replaces it in its existing slot and re-indexes only
    that slot. There is no delete; the index is discarded with the engine or
    rebuilt by :meth:`load`.
    """

    def __init__(self, *, excerpt_max_chars: int = DEFAULT_EXCERPT_LENGTH, name: str = "default") -> None:
        self.name = name
        self.excerpt_max_chars = excerpt_max_chars
        self._lock = ReadWriteLock()
        self._documents: list[Document] = []
        self._slots_by_location: dict[str, int] = {}
        self._index = InvertedIndex()
        self._scorer = BM25Scorer()

    @classmethod
    def from_settings(cls, settings: Settings) -> IndexEngine:
        return cls(excerpt_max_chars=settings.excerpt_max_chars, name=settings.engine_name)

    def document_count(self) -> int:
        with self._lock.read_locked():
            return len(self._documents)

    # ------------------------------------------------------------------
    # Inserts
    # ------------------------------------------------------------------

    def upsert(self, document: Document) -> None:
        """Insert ``document`` or replace the one stored at the same location."""

        with self._lock.write_locked():
            replaced = self._upsert_locked(document)
            self._record_upserts(inserted=0 if replaced else 1, replaced=1 if replaced else 0)

    def upsert_many(self, documents: Iterable[Document]) -> None:
        """Apply :meth:`upsert` to each document in order under one write lock."""

        batch = list(documents)
        if not batch:
            return
        inserted = replaced = 0
        with self._lock.write_locked():
            for document in batch:
                if self._upsert_locked(document):
                    replaced += 1
                else:
                    inserted += 1
            self._record_upserts(inserted=inserted, replaced=replaced)

    def upsert_results(self, results: Iterable[SearchResult]) -> None:
        """Index previously returned results so they stay searchable offline.

        The excerpt becomes the body and the location doubles as identifier.
        """

        self.upsert_many(
            Document(identifier=result.location, title=result.title, location=result.location, body=result.excerpt)
            for result in results
        )

    def _upsert_locked(self, document: Document) -> bool:
        slot = self._slots_by_location.get(document.location)
        replaced = slot is not None
        if slot is None:
            slot = len(self._documents)
            self._documents.append(document)
            self._slots_by_location[document.location] = slot
        else:
            self._documents[slot] = document
        self._index.index_slot(slot, document)
        return replaced

    def _record_upserts(self, *, inserted: int, replaced: int) -> None:
        # Called with the write lock held so the gauge never goes back to an older count.
        if inserted:
            UPSERT_COUNT.labels(engine=self.name, outcome="inserted").inc(inserted)
        if replaced:
            UPSERT_COUNT.labels(engine=self.name, outcome="replaced").inc(replaced)
        INDEX_DOC_COUNT.labels(engine=self.name).set(len(self._documents))

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, query_text: str, top_k: int = DEFAULT_TOP_K) -> list[SearchResult]:
        """Return up to ``top_k`` ranked results for ``query_text``.

        An empty query, a query made only of stopwords, or an empty corpus
        yields an empty list rather than an error.
        """

        query_tokens = tokenize(query_text)
        if not query_tokens or top_k <= 0:
            return []

        with track_latency(SEARCH_LATENCY, engine=self.name), self._lock.read_locked():
            if not self._documents:
                return []
            scores = self._scorer.score(query_tokens, self._documents, self._index)
            ranked = rank(scores, top_k)
            results = []
            for hit in ranked:
                document = self._documents[hit.slot]
                results.append(
                    SearchResult(
                        title=document.title,
                        location=document.location,
                        excerpt=extract_excerpt(document.body, query_tokens, self.excerpt_max_chars),
                        score=hit.score,
                    )
                )

        logger.debug(
            "Search returned %d of %d candidates",
            len(results),
            sum(1 for score in scores.values() if score > 0),
            extra={"query_tokens": query_tokens},
        )
        return results

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, path: Path | str) -> None:
        """Write the ordered document list to ``path``.

        The list is snapshotted under the read lock and written outside it,
        so disk I/O never blocks writers. Postings are not persisted.

        Raises:
            PersistenceError: If the file cannot be written.
        """

        target = Path(path)
        with self._lock.read_locked():
            snapshot = list(self._documents)

        try:
            size = write_cache(target, snapshot)
        except PersistenceError:
            PERSISTENCE_ERRORS.labels(engine=self.name, operation="save").inc()
            logger.exception("Failed to save %d documents to %s", len(snapshot), target)
            raise

        logger.info("Saved %d documents to %s (%d bytes)", len(snapshot), target, size)

    def load(self, path: Path | str) -> None:
        """Replay the documents stored at ``path`` through :meth:`upsert`.

        The file is parsed and validated in full before the write lock is
        taken, so a missing or malformed cache leaves the engine untouched.
        Loaded documents merge with whatever the engine already holds.

        Raises:
            CacheNotFoundError: If the file does not exist.
            CacheCorruptError: If the file is not a valid cache.
            PersistenceError: If the file cannot be read.
        """

        source = Path(path)
        try:
            cache = read_cache(source)
        except PersistenceError as exc:
            PERSISTENCE_ERRORS.labels(engine=self.name, operation="load").inc()
            logger.warning("Failed to load cache from %s: %s", source, exc)
            raise

        self.upsert_many(cache.documents)
        logger.info("Loaded %d documents from %s", len(cache.documents), source)
