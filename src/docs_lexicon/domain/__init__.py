"""Domain models for the lexical search engine."""

from docs_lexicon.domain.search import CacheFile, Document, SearchResult


__all__ = ["CacheFile", "Document", "SearchResult"]
