"""
Basic indexing example.

Demonstrates normalization, recording documents, saving, flushing and ranked
queries with field and term criteria.
"""

import tempfile
from pathlib import Path

from relevance_db.engine import RelevanceSearch
from relevance_db.normalization import normalize_text
from relevance_db.search import ContentFilter, MatchMode


def main():
    """Run basic indexing example."""
    print("=" * 60)
    print("Relevance-DB: Basic Indexing Example")
    print("=" * 60)

    # Example 1: Normalization
    print("\n1. Text Normalization")
    print("-" * 60)

    raw = "Tom &amp; Jerry's   BIG   Adventure!"
    print(f"Raw:        {raw}")
    print(f"Normalized: {normalize_text(raw)}")

    with tempfile.TemporaryDirectory() as tmpdir:
        search = RelevanceSearch(base_path=Path(tmpdir))

        # Example 2: Index a few documents
        print("\n\n2. Indexing")
        print("-" * 60)

        documents = {
            10: {"title": "Hello World", "body": "A first post about the world."},
            11: {"title": "Hello there World", "body": "Another post, hello again."},
            12: {"title": "Gardening notes", "body": "Tomatoes, basil and more tomatoes."},
        }
        for document_id, fields in documents.items():
            for field_name, text in fields.items():
                search.index("blog", field_name, document_id, text)

        stats = search.save()
        print(f"Saved {stats.postings_written} postings in {stats.fields_committed} fields")

        # Example 3: Ranked query
        print("\n\n3. Ranked Query")
        print("-" * 60)

        search.add_term("hello")
        search.add_field("title")
        search.add_field("body")
        search.set_fields_mode(MatchMode.ANY)
        print(f"Matches: {search.total('blog')}")
        for result in search.get("blog"):
            print(f"  document {result.document_id}: relevance {result.relevance}")

        # Example 4: Content filter
        print("\n\n4. Content Filter")
        print("-" * 60)

        search.set_term_sensitivity("tomatoes", True)
        search.set_content_filter(ContentFilter.OFF)
        print("Unflagged documents:", [r.document_id for r in search.get("blog")])

        # Example 5: Flush and re-index
        print("\n\n5. Flush")
        print("-" * 60)

        removed = search.flush("blog", 12)
        print(f"Removed {removed} postings of document 12")
        print("Remaining documents:", [r.document_id for r in search.get("blog")])


if __name__ == "__main__":
    main()
