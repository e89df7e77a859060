"""
In-memory posting accumulator.

Counts term occurrences per (index, field, document) during a document
processing pass. Nothing touches storage until the buffer is drained and
handed to ``PostingStore.persist``.
"""

from collections import Counter
from typing import NamedTuple, Optional

from ..config import get_config
from ..normalization.text_normalizer import tokenize


class PostingEntry(NamedTuple):
    """One drained posting: a term's occurrence count in one field of one document."""

    index_name: str
    field_name: str
    document_id: int
    term: str
    occurrences: int


class PostingAccumulator:
    """
    Buffer of running occurrence counts keyed by (index, field, document, term).

    Not safe for concurrent mutation; each writer should own its accumulator.

    Usage:
        accumulator = PostingAccumulator()
        accumulator.record("blog", "title", 10, "Hello World")
        store.persist(accumulator.drain())
    """

    def __init__(self, min_term_length: Optional[int] = None):
        """
        Initialize accumulator.

        Args:
            min_term_length: Tokens must be strictly longer than this
                (defaults to config, typically 2)
        """
        if min_term_length is None:
            min_term_length = get_config().indexing.min_term_length
        self.min_term_length = min_term_length
        self._counts: Counter[tuple[str, str, int, str]] = Counter()

    def record(self, index_name: str, field_name: str, document_id: int, text: str) -> int:
        """
        Tokenize text and add its terms to the buffer.

        Args:
            index_name: Index namespace
            field_name: Field within the index
            document_id: Externally assigned document ID
            text: Raw text

        Returns:
            Number of tokens counted (after the length filter)
        """
        counted = 0
        for token in tokenize(text):
            if len(token) > self.min_term_length:
                self._counts[(index_name, field_name, document_id, token)] += 1
                counted += 1
        return counted

    def drain(self) -> list[PostingEntry]:
        """Return every buffered posting and empty the buffer."""
        entries = [
            PostingEntry(index_name, field_name, document_id, term, count)
            for (index_name, field_name, document_id, term), count in self._counts.items()
        ]
        self._counts.clear()
        return entries

    def __len__(self) -> int:
        return len(self._counts)

    def is_empty(self) -> bool:
        return not self._counts
