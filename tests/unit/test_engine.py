"""Tests for the stateful RelevanceSearch facade."""

import logging

import pytest

from relevance_db.config import Config, QueryConfig
from relevance_db.engine import RelevanceSearch
from relevance_db.errors import StatementFailure, StorageUnavailable
from relevance_db.index import PostingAccumulator
from relevance_db.search import ContentFilter, MatchMode, RankedDocument


@pytest.fixture
def search(tmp_path):
    return RelevanceSearch(base_path=tmp_path, config=Config())


@pytest.fixture
def blog(search):
    search.index("blog", "title", 10, "Hello World")
    search.index("blog", "title", 11, "hello there")
    search.index("blog", "body", 12, "world news")
    search.save()
    return search


class TestIndexing:
    """Tests for indexing through the facade."""

    def test_index_and_get(self, blog):
        blog.add_term("hello")

        assert blog.get("blog") == [
            RankedDocument(document_id=10, relevance=1),
            RankedDocument(document_id=11, relevance=1),
        ]

    def test_save_drains_accumulator(self, search):
        search.index("blog", "title", 1, "hello")

        first = search.save()
        second = search.save()

        assert first.postings_written == 1
        assert second.postings_written == 0
        assert search.accumulator.is_empty()

    def test_save_external_accumulator(self, search):
        accumulator = PostingAccumulator(min_term_length=2)
        accumulator.record("blog", "title", 1, "hello")

        stats = search.save(accumulator)

        assert stats.fields_committed == 1
        assert search.total("blog") == 1

    def test_save_replaces_counts(self, search):
        search.index("blog", "body", 1, "cat cat cat")
        search.save()
        search.index("blog", "body", 1, "cat")
        search.save()

        assert search.get("blog") == [RankedDocument(document_id=1, relevance=1)]

    def test_flush_and_reindex(self, blog):
        assert blog.flush("blog", 10) == 2

        blog.index("blog", "title", 10, "goodbye")
        blog.save()

        blog.add_term("hello")
        assert [doc.document_id for doc in blog.get("blog")] == [11]

    def test_set_term_sensitivity_normalizes(self, blog):
        term_id = blog.set_term_sensitivity("NEWS!", True)

        assert term_id == blog.store.terms.lookup("news")
        assert blog.store.terms.is_sensitive("news")

        blog.set_content_filter(ContentFilter.OFF)
        assert [doc.document_id for doc in blog.get("blog")] == [10, 11]

    def test_unusable_storage_root(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        with pytest.raises(StorageUnavailable):
            RelevanceSearch(base_path=blocker, config=Config())


class TestCriteria:
    """Tests for builder-style criteria and their reset rules."""

    def test_get_resets_criteria(self, blog):
        blog.add_term("hello")
        blog.set_terms_mode(MatchMode.ALL)

        assert len(blog.get("blog")) == 2

        criteria = blog.criteria()
        assert criteria.terms == frozenset()
        assert criteria.term_mode is MatchMode.ANY
        assert len(blog.get("blog")) == 3

    def test_total_keeps_criteria(self, blog):
        blog.add_term("world")

        assert blog.total("blog") == 2
        assert blog.total("blog") == 2
        assert [doc.document_id for doc in blog.get("blog")] == [10, 12]

    def test_add_field_and_id(self, blog):
        blog.add_field("title")
        blog.add_id(11)
        blog.add_id("12")

        assert [doc.document_id for doc in blog.get("blog")] == [11]

    def test_fields_mode(self, blog):
        blog.add_field("title")
        blog.add_field("body")
        assert blog.total("blog") == 0

        blog.set_fields_mode("ANY")
        assert blog.total("blog") == 3

    def test_term_normalizing_to_nothing_matches_nothing(self, blog):
        blog.add_term("!!!")

        assert blog.total("blog") == 0
        assert blog.get("blog") == []
        assert len(blog.get("blog")) == 3

    def test_invalid_modes_rejected(self, search):
        with pytest.raises(ValueError):
            search.set_fields_mode("SOME")
        with pytest.raises(ValueError):
            search.set_terms_mode("NONE")
        with pytest.raises(ValueError):
            search.set_content_filter("MAYBE")

    def test_defaults_come_from_config(self, tmp_path):
        config = Config(query=QueryConfig(fields_mode="ANY", content_filter="OFF"))
        search = RelevanceSearch(base_path=tmp_path, config=config)

        criteria = search.criteria()

        assert criteria.field_mode is MatchMode.ANY
        assert criteria.content_filter is ContentFilter.OFF

    def test_pagination(self, blog):
        assert [doc.document_id for doc in blog.get("blog", offset=1, limit=1)] == [11]


class TestFailures:
    """Tests for query failures seen through the facade."""

    def test_failed_get_returns_empty_and_resets(self, blog, monkeypatch, caplog):
        def broken(*args, **kwargs):
            raise StatementFailure("corrupt partition")

        monkeypatch.setattr(blog.engine, "query", broken)
        blog.add_term("hello")

        with caplog.at_level(logging.ERROR):
            assert blog.get("blog") == []

        assert "corrupt partition" in caplog.text
        assert blog.criteria().terms == frozenset()

    def test_failed_total_returns_zero(self, blog, monkeypatch, caplog):
        def broken(*args, **kwargs):
            raise StatementFailure("corrupt partition")

        monkeypatch.setattr(blog.engine, "count", broken)

        with caplog.at_level(logging.ERROR):
            assert blog.total("blog") == 0

        assert "Count on index 'blog' failed" in caplog.text

    def test_unknown_index(self, search):
        search.add_term("hello")

        assert search.total("missing") == 0
        assert search.get("missing") == []
