"""Command line entry point: build, inspect and query a document cache."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys

import orjson
from pydantic import ValidationError

from docs_lexicon.config import Settings
from docs_lexicon.domain.search import Document, SearchResult
from docs_lexicon.exceptions import CacheNotFoundError, PersistenceError
from docs_lexicon.observability import configure_logging, start_operation
from docs_lexicon.search.engine import IndexEngine


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PERSISTENCE_ERROR = 1
EXIT_USAGE_ERROR = 2


class UsageError(ValueError):
    """Raised for invalid arguments or an unreadable document source."""


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docs-lexicon",
        description="Index cleaned documents and run BM25-lite searches against the cache",
    )
    parser.add_argument(
        "--cache",
        type=Path,
        help="Cache file to read and write (defaults to LEXICON_CACHE_PATH)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    index_parser = subparsers.add_parser("index", help="Merge documents from a JSON or JSONL file into the cache")
    index_parser.add_argument("source", type=Path, help="JSON array, {'documents': [...]} object, or JSONL file")

    search_parser = subparsers.add_parser("search", help="Search the cached documents")
    search_parser.add_argument("query", help="Free-text query")
    search_parser.add_argument("--top-k", type=int, help="Maximum results (defaults to LEXICON_DEFAULT_TOP_K)")
    search_parser.add_argument("--json", action="store_true", help="Emit results as a JSON array")

    subparsers.add_parser("stats", help="Report how many documents the cache holds")
    return parser


def load_source_documents(path: Path) -> list[Document]:
    """Read documents produced by an external document source."""

    try:
        data = path.read_bytes()
    except OSError as exc:
        raise UsageError(f"Cannot read {path}: {exc}") from exc

    try:
        if path.suffix == ".jsonl":
            records = [orjson.loads(line) for line in data.splitlines() if line.strip()]
        else:
            payload = orjson.loads(data)
            records = payload.get("documents", payload.get("docs", [])) if isinstance(payload, dict) else payload
        if not isinstance(records, list):
            raise UsageError(f"{path} does not contain a list of documents")
        return [Document.model_validate(record) for record in records]
    except (orjson.JSONDecodeError, ValidationError) as exc:
        raise UsageError(f"Invalid document in {path}: {exc}") from exc


def _load_existing(engine: IndexEngine, cache_path: Path) -> None:
    try:
        engine.load(cache_path)
    except CacheNotFoundError:
        logger.info("No cache at %s; starting with an empty index", cache_path)


def _format_result(position: int, result: SearchResult) -> str:
    return f"{position}. [{result.score:.3f}] {result.title} <{result.location}>\n   {result.excerpt}"


def _run_index(engine: IndexEngine, cache_path: Path, args: argparse.Namespace) -> int:
    documents = load_source_documents(args.source)
    _load_existing(engine, cache_path)
    before = engine.document_count()
    engine.upsert_many(documents)
    engine.save(cache_path)
    added = engine.document_count() - before
    sys.stdout.write(f"Indexed {len(documents)} documents ({added} new); cache holds {engine.document_count()}\n")
    return EXIT_OK


def _run_search(engine: IndexEngine, cache_path: Path, args: argparse.Namespace, settings: Settings) -> int:
    top_k = args.top_k if args.top_k is not None else settings.default_top_k
    if top_k < 1:
        raise UsageError("--top-k must be >= 1")
    _load_existing(engine, cache_path)
    results = engine.search(args.query, top_k)
    if args.json:
        sys.stdout.write(orjson.dumps([result.model_dump() for result in results]).decode("utf-8") + "\n")
        return EXIT_OK
    if not results:
        sys.stdout.write("No results\n")
        return EXIT_OK
    for position, result in enumerate(results, start=1):
        sys.stdout.write(_format_result(position, result) + "\n")
    return EXIT_OK


def _run_stats(engine: IndexEngine, cache_path: Path) -> int:
    _load_existing(engine, cache_path)
    sys.stdout.write(f"{cache_path}: {engine.document_count()} documents\n")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    args = build_argument_parser().parse_args(argv)

    try:
        settings = Settings()
    except ValidationError as exc:
        sys.stderr.write(f"Invalid configuration: {exc}\n")
        return EXIT_USAGE_ERROR

    configure_logging(settings.log_level, settings.log_json, stream=sys.stderr)
    start_operation(settings.engine_name)

    cache_path = args.cache.expanduser() if args.cache else settings.resolved_cache_path()
    engine = IndexEngine.from_settings(settings)

    try:
        if args.command == "index":
            return _run_index(engine, cache_path, args)
        if args.command == "search":
            return _run_search(engine, cache_path, args, settings)
        return _run_stats(engine, cache_path)
    except UsageError as exc:
        sys.stderr.write(f"{exc}\n")
        return EXIT_USAGE_ERROR
    except PersistenceError as exc:
        sys.stderr.write(f"{exc}\n")
        return EXIT_PERSISTENCE_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
