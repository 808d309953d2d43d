"""Exception hierarchy for docs-lexicon.

Search itself never raises for empty queries or an empty corpus; only the
persistence layer reports errors, and callers may recover by continuing
with whatever the engine already holds.
"""


class LexiconError(Exception):
    """Base exception for all docs-lexicon errors."""


class PersistenceError(LexiconError, RuntimeError):
    """Raised when the document cache cannot be saved or loaded."""

    def __init__(self, message: str, path: object | None = None) -> None:
        super().__init__(message)
        self.path = path


class CacheNotFoundError(PersistenceError):
    """Raised when the cache file does not exist."""


class CacheCorruptError(PersistenceError):
    """Raised when the cache file cannot be read or parsed."""
