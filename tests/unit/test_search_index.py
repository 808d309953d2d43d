"""Unit tests for inverted index maintenance."""

from __future__ import annotations

from docs_lexicon.domain.search import Document
from docs_lexicon.search.index import InvertedIndex


def _doc(title: str = "", body: str = "", tags: list[str] | None = None, location: str = "loc") -> Document:
    return Document(identifier=location, title=title, location=location, body=body, tags=tags or [])


def test_index_slot_records_each_distinct_term_once() -> None:
    index = InvertedIndex()
    index.index_slot(0, _doc(title="Audio", body="audio audio clip", tags=["sound", "audio"]))

    assert index.postings("audio") == [0]
    assert index.postings("clip") == [0]
    assert index.postings("sound") == [0]
    assert index.terms_for(0) == ("audio", "clip", "sound")


def test_reindexing_unchanged_slot_is_idempotent() -> None:
    index = InvertedIndex()
    document = _doc(title="Physics", body="physics collider")
    index.index_slot(0, document)
    index.index_slot(0, document)

    assert index.postings("physics") == [0]
    assert index.postings("collider") == [0]
    assert index.document_length(0) == 3


def test_reindexing_replaced_content_drops_stale_postings() -> None:
    index = InvertedIndex()
    index.index_slot(0, _doc(title="Old", body="collider physics"))
    index.index_slot(1, _doc(title="Other", body="physics joints"))
    index.index_slot(0, _doc(title="New", body="audio clip"))

    assert index.postings("collider") is None
    assert index.postings("old") is None
    assert index.postings("physics") == [1]
    assert index.postings("audio") == [0]
    assert "collider" not in set(index.vocabulary())


def test_postings_keep_insertion_order_across_slots() -> None:
    index = InvertedIndex()
    for slot in range(3):
        index.index_slot(slot, _doc(body="shared term", location=f"loc{slot}"))

    assert index.postings("shared") == [0, 1, 2]
    assert len(index) == 2


def test_tags_are_indexed_but_do_not_count_towards_length() -> None:
    index = InvertedIndex()
    index.index_slot(0, _doc(title="Hello World", body="The quick brown fox", tags=["animals"]))

    assert index.postings("animals") == [0]
    assert index.document_length(0) == 5


def test_average_document_length_tracks_replacements() -> None:
    index = InvertedIndex()
    index.index_slot(0, _doc(body="one two three four"))
    index.index_slot(1, _doc(body="five six"))
    assert index.average_document_length(2) == 3.0

    index.index_slot(1, _doc(body="five six seven eight"))
    assert index.average_document_length(2) == 4.0


def test_average_document_length_of_empty_corpus_is_100() -> None:
    assert InvertedIndex().average_document_length(0) == 100.0

