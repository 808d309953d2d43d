"""Cache file reading and writing.

The cache is a single JSON object holding the ordered document list. Each
write goes to its own uniquely named temp file beside the target and is then
renamed over it, so neither readers nor concurrent writers ever observe a
half-written cache.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
from pathlib import Path
import tempfile

import orjson
from pydantic import ValidationError

from docs_lexicon.domain.search import CacheFile, Document
from docs_lexicon.exceptions import CacheCorruptError, CacheNotFoundError, PersistenceError


logger = logging.getLogger(__name__)


def read_cache(path: Path) -> CacheFile:
    """Parse and validate the whole cache file without touching any engine state."""

    try:
        data = path.read_bytes()
    except FileNotFoundError as exc:
        raise CacheNotFoundError(f"Cache file not found: {path}", path) from exc
    except OSError as exc:
        raise PersistenceError(f"Cache file unreadable: {path}: {exc}", path) from exc

    try:
        payload = orjson.loads(data)
        return CacheFile.model_validate(payload)
    except (orjson.JSONDecodeError, ValidationError) as exc:
        raise CacheCorruptError(f"Cache file is malformed: {path}: {exc}", path) from exc


def write_cache(path: Path, documents: Sequence[Document]) -> int:
    """Serialize ``documents`` to ``path`` atomically and return the byte count."""

    payload = CacheFile(documents=list(documents)).model_dump(mode="json")
    serialized = orjson.dumps(payload)
    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=path.parent, prefix=f"{path.name}.", suffix=".tmp", delete=False
        ) as handle:
            tmp_path = Path(handle.name)
            handle.write(serialized)
        tmp_path.chmod(0o644)
        tmp_path.replace(path)
    except OSError as exc:
        if tmp_path is not None:
            _discard(tmp_path)
        raise PersistenceError(f"Cache file could not be written: {path}: {exc}", path) from exc
    return len(serialized)


def _discard(tmp_path: Path) -> None:
    try:
        tmp_path.unlink(missing_ok=True)
    except OSError:
        logger.warning("Failed to remove temporary cache file %s", tmp_path)
