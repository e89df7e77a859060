#!/usr/bin/env python3
"""
Batch indexing + search from a JSON Lines file.

Each input line is a document: {"id": 10, "fields": {"title": "...", "body": "..."}}.
Documents are recorded into the named index and saved in batches. Optionally
runs a ranked query once indexing is done.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Iterator

# Ensure local package imports work when running as a script
sys.path.insert(0, str(Path(__file__).parent / "src"))

from relevance_db.config import get_config
from relevance_db.engine import RelevanceSearch
from relevance_db.errors import StorageUnavailable

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments."""
    config = get_config()
    parser = argparse.ArgumentParser(
        description="Index JSON Lines documents and optionally run a ranked query."
    )
    parser.add_argument(
        "--index",
        required=True,
        help="Index name to write to and search in.",
    )
    parser.add_argument(
        "--documents",
        type=Path,
        default=None,
        help="JSON Lines file of documents ({'id': int, 'fields': {name: text}}).",
    )
    parser.add_argument(
        "--base-path",
        type=Path,
        default=config.storage.base_path,
        help="Storage root (defaults to config.storage.base_path).",
    )
    parser.add_argument(
        "--replace",
        default=True,
        action=argparse.BooleanOptionalAction,
        help="Flush each document's existing postings before indexing (default: on).",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=500,
        help="Number of documents recorded between saves (default: 500).",
    )
    parser.add_argument(
        "--search",
        nargs="*",
        default=None,
        metavar="TERM",
        help="Terms to search for after indexing.",
    )
    parser.add_argument(
        "--field",
        action="append",
        default=[],
        help="Restrict the search to a field (repeatable).",
    )
    parser.add_argument(
        "--terms-mode",
        choices=["ALL", "ANY"],
        default=config.query.terms_mode,
        help="How search terms combine per posting row.",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Number of ranked results to print (default: 20).",
    )
    return parser.parse_args()


def iter_documents(path: Path) -> Iterator[tuple[int, dict[str, str]]]:
    """
    Read documents from a JSON Lines file.

    Blank lines are skipped; malformed lines are logged and skipped.
    """
    if not path.exists():
        raise FileNotFoundError(f"Documents file not found: {path}")

    with path.open("r", encoding="utf-8") as fp:
        for line_number, line in enumerate(fp, 1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
                yield int(record["id"]), dict(record["fields"])
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping line %d of %s: %s", line_number, path, e)


def index_documents(
    search: RelevanceSearch, index: str, path: Path, replace: bool, batch_size: int
) -> int:
    """Record and save every document of the file; returns documents indexed."""
    start_time = time.time()
    documents = 0
    removed = 0
    written = 0

    for document_id, fields in iter_documents(path):
        if replace:
            removed += search.flush(index, document_id)

        for field_name, text in fields.items():
            search.index(index, field_name, document_id, str(text))
        documents += 1

        if documents % batch_size == 0:
            written += search.save().postings_written
            logger.info("Indexed %d documents (%d postings so far)", documents, written)

    written += search.save().postings_written

    logger.info(
        "Indexed %d documents into '%s' in %.2fs | postings_written=%d | postings_removed=%d",
        documents,
        index,
        time.time() - start_time,
        written,
        removed,
    )
    return documents


def run_search(search: RelevanceSearch, args: argparse.Namespace) -> None:
    for term in args.search:
        search.add_term(term)
    for field in args.field:
        search.add_field(field)
    search.set_terms_mode(args.terms_mode)

    total = search.total(args.index)
    results = search.get(args.index, 0, args.limit)

    print(f"{total} matching documents in '{args.index}'")
    for rank, result in enumerate(results, 1):
        print(f"{rank:>4}. document {result.document_id}  relevance {result.relevance}")


def main() -> None:
    args = parse_args()

    logging.basicConfig(
        level=get_config().log_level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

    try:
        search = RelevanceSearch(base_path=args.base_path.resolve())
    except StorageUnavailable:
        logger.exception("Cannot open storage at %s", args.base_path)
        sys.exit(1)

    if args.documents is not None:
        index_documents(search, args.index, args.documents, args.replace, args.batch_size)

    if args.search is not None:
        run_search(search, args)


if __name__ == "__main__":
    main()
