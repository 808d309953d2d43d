"""Unit tests for the IndexEngine facade."""

from __future__ import annotations

import threading

from prometheus_client import REGISTRY
import pytest

from docs_lexicon.config import Settings
from docs_lexicon.domain.search import Document, SearchResult
from docs_lexicon.search.engine import IndexEngine


def _doc(location: str, title: str, body: str, tags: list[str] | None = None) -> Document:
    return Document(identifier=location, title=title, location=location, body=body, tags=tags or [])


@pytest.mark.unit
class TestUpsert:
    """Insert and replace semantics."""

    def test_new_engine_is_empty(self):
        assert IndexEngine().document_count() == 0

    def test_same_location_replaces_in_place(self):
        engine = IndexEngine()
        engine.upsert(_doc("u1", "First", "collider physics"))
        before = engine.document_count()
        engine.upsert(_doc("u1", "Second", "audio clip"))

        assert engine.document_count() == before
        assert [result.title for result in engine.search("audio", 5)] == ["Second"]

    def test_replacement_forgets_terms_of_previous_content(self):
        engine = IndexEngine()
        engine.upsert(_doc("u1", "Physics", "collider joints"))
        engine.upsert(_doc("u2", "Audio", "sound clips"))
        engine.upsert(_doc("u1", "Timing", "coroutine yield"))

        assert engine.search("collider", 5) == []
        assert engine.search("coroutine", 5)[0].location == "u1"

    def test_replacement_keeps_slot_order(self):
        engine = IndexEngine()
        engine.upsert_many([_doc("u1", "Guide", "shared term"), _doc("u2", "Guide", "shared term")])
        engine.upsert(_doc("u1", "Guide", "shared term"))

        assert [result.location for result in engine.search("shared", 5)] == ["u1", "u2"]

    def test_upsert_many_applies_dedup_rule_per_element(self):
        engine = IndexEngine()
        engine.upsert_many(
            [
                _doc("u1", "One", "alpha"),
                _doc("u2", "Two", "beta"),
                _doc("u1", "One again", "gamma"),
            ]
        )

        assert engine.document_count() == 2
        assert engine.search("alpha", 5) == []
        assert engine.search("gamma", 5)[0].title == "One again"

    def test_upsert_many_accepts_generators_and_empty_input(self):
        engine = IndexEngine()
        engine.upsert_many(_doc(f"u{i}", "Doc", f"body {i}") for i in range(3))
        engine.upsert_many([])

        assert engine.document_count() == 3

    def test_upsert_results_reindexes_excerpts(self):
        engine = IndexEngine()
        engine.upsert_results(
            [SearchResult(title="Audio", location="https://docs/audio", excerpt="AudioSource plays clips", score=1.0)]
        )

        results = engine.search("audiosource", 5)
        assert results[0].location == "https://docs/audio"
        assert engine.document_count() == 1


@pytest.mark.unit
class TestSearch:
    """Search, ranking and result shaping."""

    def test_empty_corpus_returns_empty_list(self):
        assert IndexEngine().search("anything", 5) == []

    @pytest.mark.parametrize("query", ["", "   ", "the of and", "?!"])
    def test_queries_without_terms_return_empty_list(self, engine, query):
        assert engine.search(query, 5) == []

    def test_non_positive_top_k_returns_empty_list(self, engine):
        assert engine.search("physics", 0) == []

    def test_two_d_movement_scenario(self):
        engine = IndexEngine()
        engine.upsert(_doc("u1", "Rigidbody2D", "Rigidbody2D is used for 2D physics movement..."))
        engine.upsert(_doc("u2", "Audio", "AudioSource plays sound clips..."))

        results = engine.search("2d movement", 5)

        assert results[0].location == "u1"
        assert results[0].score == 1.0
        locations = [result.location for result in results]
        if "u2" in locations:
            assert locations.index("u1") < locations.index("u2")

    def test_prefix_match_surfaces_longer_terms(self):
        engine = IndexEngine()
        engine.upsert(_doc("u1", "Physics body", "rigidbody component drives motion"))

        results = engine.search("rigid", 5)

        assert [result.location for result in results] == ["u1"]
        assert results[0].score == 1.0

    def test_scores_are_normalized(self, engine):
        results = engine.search("2d physics audio", 5)

        assert len(results) >= 2
        assert max(result.score for result in results) == 1.0
        assert min(result.score for result in results) > 0.0
        assert [result.score for result in results] == sorted((r.score for r in results), reverse=True)

    def test_top_k_limits_results(self, engine):
        assert len(engine.search("2d physics audio", 1)) == 1

    def test_tag_only_terms_are_indexed_but_carry_no_term_frequency(self, engine):
        # Term frequency counts title and body only, so a tag-only hit scores zero.
        assert engine._index.postings("scripting") == [2]
        assert engine.search("scripting", 5) == []

    def test_results_carry_title_location_and_excerpt(self, engine):
        result = engine.search("audiosource", 5)[0]

        assert result.title == "Audio"
        assert result.location == "u2"
        assert "AudioSource" in result.excerpt

    def test_excerpt_length_follows_settings(self):
        engine = IndexEngine.from_settings(Settings(_env_file=None, excerpt_max_chars=60, engine_name="docs"))
        engine.upsert(_doc("u1", "Long", "physics " * 50))

        result = engine.search("physics", 5)[0]

        assert engine.name == "docs"
        assert result.excerpt.endswith("...")
        assert len(result.excerpt) <= 60 + len("...")


@pytest.mark.unit
def test_concurrent_upserts_and_searches_keep_state_consistent():
    engine = IndexEngine()
    errors: list[BaseException] = []

    def writer(offset: int) -> None:
        try:
            for i in range(50):
                engine.upsert(_doc(f"doc-{offset}-{i}", "Physics", f"collider body number{i}"))
        except BaseException as exc:  # noqa: BLE001 - surfaced through the errors list
            errors.append(exc)

    def reader() -> None:
        try:
            for _ in range(50):
                for result in engine.search("collider", 5):
                    assert 0.0 < result.score <= 1.0
        except BaseException as exc:  # noqa: BLE001 - surfaced through the errors list
            errors.append(exc)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    threads += [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert errors == []
    assert engine.document_count() == 200


@pytest.mark.unit
def test_document_count_gauge_matches_corpus_after_concurrent_upserts():
    engine = IndexEngine(name="gauge-after-concurrent-upserts")

    def writer(offset: int) -> None:
        for i in range(25):
            engine.upsert(_doc(f"gauge-{offset}-{i}", "Physics", "collider body"))

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    gauge = REGISTRY.get_sample_value("lexicon_index_document_count", {"engine": "gauge-after-concurrent-upserts"})
    assert engine.document_count() == 200
    assert gauge == 200.0
