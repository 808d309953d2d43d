"""docs-lexicon: in-memory BM25-lite search over short documents."""

from docs_lexicon.domain.search import Document, SearchResult
from docs_lexicon.exceptions import CacheCorruptError, CacheNotFoundError, LexiconError, PersistenceError
from docs_lexicon.search.analyzers import STOPWORDS, tokenize
from docs_lexicon.search.engine import IndexEngine


__version__ = "0.1.0"

__all__ = [
    "STOPWORDS",
    "CacheCorruptError",
    "CacheNotFoundError",
    "Document",
    "IndexEngine",
    "LexiconError",
    "PersistenceError",
    "SearchResult",
    "__version__",
    "tokenize",
]
