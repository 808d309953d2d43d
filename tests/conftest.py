"""Shared test fixtures."""

from __future__ import annotations

import logging
import os

import pytest

from docs_lexicon.domain.search import Document
from docs_lexicon.search.engine import IndexEngine


@pytest.fixture(autouse=True)
def _clean_lexicon_env(monkeypatch):
    """Keep host LEXICON_* variables from leaking into Settings."""
    for key in list(os.environ):
        if key.upper().startswith("LEXICON_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def restore_root_logging():
    """Snapshot and restore root logger handlers around a test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def unity_documents() -> list[Document]:
    return [
        Document(
            identifier="u1",
            title="Rigidbody2D",
            location="u1",
            body="Rigidbody2D is used for 2D physics movement. Apply forces to move a 2D body under physics control.",
        ),
        Document(
            identifier="u2",
            title="Audio",
            location="u2",
            body="AudioSource plays sound clips. Attach an AudioSource to a GameObject to play music or effects.",
        ),
        Document(
            identifier="u3",
            title="Coroutines",
            location="u3",
            body="A coroutine lets you spread a task across several frames using yield return statements.",
            tags=["scripting", "timing"],
        ),
        Document(
            identifier="u4",
            title="Collider2D",
            location="u4",
            body="Collider2D components define the shape of a 2D object for physical collisions.",
            tags=["physics"],
        ),
    ]


@pytest.fixture
def engine(unity_documents) -> IndexEngine:
    instance = IndexEngine()
    instance.upsert_many(unity_documents)
    return instance
